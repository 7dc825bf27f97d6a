"""Storage backend configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

ObservationBackendType = Literal["inmemory"]


class ObservationStoreConfig(BaseModel):
    """Configuration for the observation store backend."""

    backend: ObservationBackendType = Field(
        default="inmemory",
        description="Backend type",
    )
    first_id: int = Field(
        default=1,
        gt=0,
        description="First identifier handed out by the in-memory backend",
    )


class StorageConfig(BaseModel):
    """Storage configuration for all stores."""

    observations: ObservationStoreConfig = Field(
        default_factory=ObservationStoreConfig,
        description="Observation store",
    )
