"""Configuration model exports.

    from vitalis.config.models import ObservationServiceConfig, StorageConfig
"""

from vitalis.config.models.observability import LoggingConfig, ObservabilityConfig
from vitalis.config.models.observations import ObservationServiceConfig
from vitalis.config.models.storage import ObservationStoreConfig, StorageConfig

__all__ = [
    "LoggingConfig",
    "ObservabilityConfig",
    "ObservationServiceConfig",
    "ObservationStoreConfig",
    "StorageConfig",
]
