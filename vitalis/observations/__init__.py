"""Clinical observations: records, lifecycle and privilege-gated access.

Observations are voided rather than deleted, may be grouped under the id
of their first member, and are only reachable through ObservationService,
which checks the acting user's privilege before every store call.
"""

from vitalis.observations.authorization import (
    OPERATION_PRIVILEGES,
    AccessControl,
    InMemoryAccessControl,
    requires_privilege,
)
from vitalis.observations.directory import InMemoryPatientDirectory, PatientDirectory
from vitalis.observations.enums import ErrorCode, LifecycleTransition, Privilege
from vitalis.observations.exceptions import (
    AuthorizationError,
    NotFoundError,
    ObservationServiceError,
    ValidationError,
)
from vitalis.observations.models import (
    ConceptRef,
    EncounterRef,
    LocationRef,
    MimeType,
    NumericAnswer,
    Observation,
    PatientRef,
    UserRef,
)
from vitalis.observations.service import ObservationService
from vitalis.observations.session import SessionContext

__all__ = [
    # Enums
    "ErrorCode",
    "LifecycleTransition",
    "Privilege",
    # Models
    "ConceptRef",
    "EncounterRef",
    "LocationRef",
    "MimeType",
    "NumericAnswer",
    "Observation",
    "PatientRef",
    "UserRef",
    "SessionContext",
    # Collaborators
    "AccessControl",
    "InMemoryAccessControl",
    "PatientDirectory",
    "InMemoryPatientDirectory",
    "OPERATION_PRIVILEGES",
    "requires_privilege",
    # Service
    "ObservationService",
    # Exceptions
    "ObservationServiceError",
    "AuthorizationError",
    "NotFoundError",
    "ValidationError",
]
