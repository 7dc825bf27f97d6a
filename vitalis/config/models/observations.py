"""Observation service configuration models."""

from pydantic import BaseModel, Field


class ObservationServiceConfig(BaseModel):
    """Behavioral settings for the observation service."""

    date_format: str = Field(
        default="%d/%m/%Y",
        description="strftime pattern used when rendering date values",
    )
    default_locale: str = Field(
        default="en",
        description="Locale used when a session does not carry one",
    )
    max_last_n: int = Field(
        default=1000,
        gt=0,
        description="Upper bound accepted for last-N observation queries",
    )
