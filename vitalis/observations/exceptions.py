"""Exception hierarchy for the observation service.

All exceptions inherit from ObservationServiceError, which carries a
message and an error_code so callers can map failures consistently.
"""

from vitalis.observations.enums import ErrorCode, Privilege


class ObservationServiceError(Exception):
    """Base exception for all observation service errors."""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AuthorizationError(ObservationServiceError):
    """Raised when the acting user lacks the privilege an operation requires.

    Always raised before the store is touched.
    """

    error_code = ErrorCode.PRIVILEGE_REQUIRED

    def __init__(self, privilege: Privilege, operation: str | None = None) -> None:
        super().__init__(f"Privilege required: {privilege.value}")
        self.privilege = privilege
        self.operation = operation


class NotFoundError(ObservationServiceError):
    """Raised by a store when an identifier does not resolve."""

    error_code = ErrorCode.NOT_FOUND

    def __init__(self, message: str, obs_id: int | None = None) -> None:
        super().__init__(message)
        self.obs_id = obs_id


class ValidationError(ObservationServiceError):
    """Raised for malformed input such as a missing observation."""

    error_code = ErrorCode.INVALID_INPUT
