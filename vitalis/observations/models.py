"""Observation domain models.

Contains the Pydantic models for observations and the opaque references
to patients, concepts, encounters, locations and users they point at.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class UserRef(BaseModel):
    """Reference to a user owned by the user subsystem."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="User identifier")
    username: str | None = Field(default=None, description="Login name")


class PatientRef(BaseModel):
    """Reference to a patient owned by the patient subsystem."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: int = Field(..., description="Patient identifier")
    identifiers: list[str] = Field(
        default_factory=list, description="Medical record numbers and similar"
    )
    voided: bool = Field(default=False, description="Is patient voided")


class ConceptRef(BaseModel):
    """Reference to a concept: what was measured, asked or answered."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: int = Field(..., description="Concept identifier")
    names: dict[str, str] = Field(
        default_factory=dict, description="Display name keyed by locale"
    )

    def name_for(self, locale: str) -> str | None:
        """Return the name for a locale, falling back to its language.

        "en_GB" falls back to "en". Returns None when neither is known.
        """
        if locale in self.names:
            return self.names[locale]
        language = locale.replace("-", "_").split("_", 1)[0]
        return self.names.get(language)


class EncounterRef(BaseModel):
    """Reference to an encounter owned by the encounter subsystem."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: int = Field(..., description="Encounter identifier")


class LocationRef(BaseModel):
    """Reference to a location owned by the location subsystem."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: int = Field(..., description="Location identifier")
    name: str | None = Field(default=None, description="Location name")


class MimeType(BaseModel):
    """Content type of a complex observation value."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: int = Field(..., description="Mime type identifier")
    mime_type: str = Field(..., description="e.g. image/png")
    description: str | None = Field(default=None, description="Description")


class Observation(BaseModel):
    """A recorded clinical datum for a patient.

    The value is typed: normally exactly one of the value_* fields is set.
    Observations sharing a non-null group_id form one grouped observation
    whose group_id is the id of its first member.

    Lifecycle fields move together: voided_by and date_voided are set
    if and only if voided is True, and void_reason is a string (possibly
    empty) while voided.
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: int | None = Field(default=None, description="Assigned by the store")
    patient: PatientRef = Field(..., description="Patient observed")
    concept: ConceptRef = Field(..., description="What was measured or asked")
    encounter: EncounterRef | None = Field(default=None, description="Encounter")
    location: LocationRef | None = Field(default=None, description="Location")
    obs_datetime: datetime = Field(
        default_factory=utc_now, description="When the observation was made"
    )

    value_numeric: float | None = Field(default=None, description="Numeric value")
    value_coded: ConceptRef | None = Field(default=None, description="Coded answer")
    value_datetime: datetime | None = Field(default=None, description="Date value")
    value_text: str | None = Field(default=None, description="Free text value")
    value_boolean: bool | None = Field(default=None, description="Boolean value")
    value_mime_type: MimeType | None = Field(
        default=None, description="Content type of a complex value"
    )

    group_id: int | None = Field(default=None, description="Anchor observation id")

    voided: bool = Field(default=False, description="Is voided")
    void_reason: str | None = Field(default=None, description="Why voided")
    voided_by: UserRef | None = Field(default=None, description="Who voided")
    date_voided: datetime | None = Field(default=None, description="When voided")

    date_created: datetime = Field(default_factory=utc_now, description="Creation time")
    comment: str | None = Field(default=None, description="Free text comment")

    @field_validator("obs_datetime", "value_datetime", "date_voided", "date_created")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        """Read naive datetimes as UTC so every timestamp is comparable."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v


class NumericAnswer(BaseModel):
    """One numeric answer row for a concept."""

    model_config = ConfigDict(frozen=True)

    obs_id: int = Field(..., description="Observation id")
    obs_datetime: datetime = Field(..., description="When observed")
    value_numeric: float = Field(..., description="Numeric value")
