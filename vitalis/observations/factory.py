"""Factories building the observation service from configuration."""

from collections.abc import Iterable

from vitalis.config import get_settings
from vitalis.config.models.storage import ObservationStoreConfig
from vitalis.config.settings import Settings
from vitalis.observability.logging import get_logger, setup_logging_from_config
from vitalis.observations.authorization import AccessControl
from vitalis.observations.directory import PatientDirectory
from vitalis.observations.models import MimeType
from vitalis.observations.service import ObservationService
from vitalis.observations.store import ObservationStore
from vitalis.observations.stores.inmemory import InMemoryObservationStore

logger = get_logger(__name__)


def create_observation_store(
    config: ObservationStoreConfig,
    mime_types: Iterable[MimeType] = (),
) -> ObservationStore:
    """Create an ObservationStore instance based on configuration.

    Raises:
        ValueError: If backend type is not supported
    """
    backend = config.backend

    if backend == "inmemory":
        logger.info("creating_observation_store", backend="inmemory", first_id=config.first_id)
        return InMemoryObservationStore(mime_types=mime_types, first_id=config.first_id)

    raise ValueError(f"Unsupported observation store backend: {backend}")


def create_observation_service(
    settings: Settings,
    access_control: AccessControl,
    patient_directory: PatientDirectory,
    store: ObservationStore | None = None,
) -> ObservationService:
    """Create an ObservationService wired to the configured store.

    Args:
        settings: Loaded settings
        access_control: Privilege checks for acting users
        patient_directory: Patient lookup used by search
        store: Store to use instead of the configured backend
    """
    if store is None:
        store = create_observation_store(settings.storage.observations)

    return ObservationService(
        store=store,
        access_control=access_control,
        patient_directory=patient_directory,
        config=settings.observations,
    )


def build_observation_service(
    access_control: AccessControl,
    patient_directory: PatientDirectory,
    settings: Settings | None = None,
) -> ObservationService:
    """Application entry point: load settings, configure logging, build the service."""
    if settings is None:
        settings = get_settings()

    setup_logging_from_config(settings.observability.logging)
    logger.info("observation_service_starting", app_name=settings.app_name)

    return create_observation_service(settings, access_control, patient_directory)
