"""Session context passed explicitly into every service call."""

from pydantic import BaseModel, ConfigDict, Field

from vitalis.observations.models import UserRef


class SessionContext(BaseModel):
    """The acting user and their locale for one request."""

    model_config = ConfigDict(frozen=True)

    user: UserRef = Field(..., description="Authenticated user")
    locale: str | None = Field(
        default=None, description="Locale for rendering values"
    )
