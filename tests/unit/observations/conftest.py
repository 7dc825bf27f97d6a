"""Fixtures for observation service tests."""

import pytest

from tests.factories import FIXED_NOW, SpyStore, make_context
from vitalis.observations.authorization import InMemoryAccessControl
from vitalis.observations.directory import InMemoryPatientDirectory
from vitalis.observations.enums import Privilege
from vitalis.observations.models import MimeType, PatientRef
from vitalis.observations.service import ObservationService
from vitalis.observations.session import SessionContext
from vitalis.observations.stores import InMemoryObservationStore


@pytest.fixture
def store() -> InMemoryObservationStore:
    """Create a fresh store for each test."""
    return InMemoryObservationStore(
        mime_types=[
            MimeType(id=1, mime_type="text/plain"),
            MimeType(id=2, mime_type="image/png", description="Scanned form"),
        ]
    )


@pytest.fixture
def spy(store: InMemoryObservationStore) -> SpyStore:
    return SpyStore(store)


@pytest.fixture
def access_control() -> InMemoryAccessControl:
    """Clerk may view, add and edit; viewer may only view; admin is a superuser."""
    access = InMemoryAccessControl(superusers=["admin"])
    access.grant("clerk", Privilege.VIEW_OBS, Privilege.ADD_OBS, Privilege.EDIT_OBS)
    access.grant("viewer", Privilege.VIEW_OBS)
    access.grant("editor", Privilege.EDIT_OBS)
    return access


@pytest.fixture
def directory() -> InMemoryPatientDirectory:
    directory = InMemoryPatientDirectory()
    directory.add(PatientRef(id=1, identifiers=["MRN-0001"]))
    directory.add(PatientRef(id=2, identifiers=["42"]))
    directory.add(PatientRef(id=3, identifiers=["MRN-0003"], voided=True))
    return directory


@pytest.fixture
def service(spy: SpyStore, access_control, directory) -> ObservationService:
    """Service over the spied store with a fixed clock."""
    return ObservationService(
        store=spy,  # type: ignore[arg-type]
        access_control=access_control,
        patient_directory=directory,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def clerk() -> SessionContext:
    return make_context("clerk")


@pytest.fixture
def viewer() -> SessionContext:
    return make_context("viewer")


@pytest.fixture
def editor() -> SessionContext:
    return make_context("editor")


@pytest.fixture
def admin() -> SessionContext:
    return make_context("admin")


@pytest.fixture
def nobody() -> SessionContext:
    return make_context("nobody")
