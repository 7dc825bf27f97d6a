"""Privilege checks for observation operations.

The privilege each service operation requires is declared once in
OPERATION_PRIVILEGES. The requires_privilege decorator looks the
operation up by name and rejects the call before the wrapped method runs.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from functools import wraps
from typing import Any, TypeVar, cast

from structlog.contextvars import bound_contextvars

from vitalis.observability.logging import get_logger
from vitalis.observability.metrics import AUTHORIZATION_DENIALS, OBSERVATION_OPERATIONS
from vitalis.observations.enums import Privilege
from vitalis.observations.exceptions import AuthorizationError
from vitalis.observations.models import UserRef
from vitalis.observations.session import SessionContext

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

OPERATION_PRIVILEGES: dict[str, Privilege] = {
    # Mutations
    "create": Privilege.ADD_OBS,
    "create_group": Privilege.ADD_OBS,
    "update": Privilege.EDIT_OBS,
    "void": Privilege.EDIT_OBS,
    "unvoid": Privilege.EDIT_OBS,
    "delete": Privilege.DELETE_OBS,
    # Reads
    "get_observation": Privilege.VIEW_OBS,
    "get_observations_by_patient": Privilege.VIEW_OBS,
    "get_observations_by_patient_and_concept": Privilege.VIEW_OBS,
    "get_observations_by_concept_and_location": Privilege.VIEW_OBS,
    "get_observations_by_concept": Privilege.VIEW_OBS,
    "get_observations_by_encounter": Privilege.VIEW_OBS,
    "get_last_n_observations": Privilege.VIEW_OBS,
    "get_voided_observations": Privilege.VIEW_OBS,
    "find_by_group_id": Privilege.VIEW_OBS,
    "get_observations_answered_by_concept": Privilege.VIEW_OBS,
    "get_numeric_answers_for_concept": Privilege.VIEW_OBS,
    "get_observations_with_aggregation": Privilege.VIEW_OBS,
    "find_observations": Privilege.VIEW_OBS,
    "get_distinct_observation_values": Privilege.VIEW_OBS,
    "get_mime_types": Privilege.VIEW_OBS,
    "get_mime_type": Privilege.VIEW_OBS,
}


class AccessControl(ABC):
    """Abstract interface answering privilege questions for a principal."""

    @abstractmethod
    def has_privilege(self, principal: UserRef, privilege: Privilege) -> bool:
        """Return True if the principal holds the privilege."""
        pass


class InMemoryAccessControl(AccessControl):
    """Grant table held in memory, for testing and development."""

    def __init__(self, superusers: Iterable[str] = ()) -> None:
        self._grants: dict[str, set[Privilege]] = {}
        self._superusers: set[str] = set(superusers)

    def grant(self, user_id: str, *privileges: Privilege) -> None:
        """Grant privileges to a user."""
        self._grants.setdefault(user_id, set()).update(privileges)

    def revoke(self, user_id: str, *privileges: Privilege) -> None:
        """Revoke privileges from a user."""
        self._grants.get(user_id, set()).difference_update(privileges)

    def has_privilege(self, principal: UserRef, privilege: Privilege) -> bool:
        if principal.id in self._superusers:
            return True
        return privilege in self._grants.get(principal.id, set())


def check_privilege(
    access_control: AccessControl,
    ctx: SessionContext,
    privilege: Privilege,
    operation: str,
) -> None:
    """Raise AuthorizationError unless the session's user holds the privilege."""
    if access_control.has_privilege(ctx.user, privilege):
        return

    AUTHORIZATION_DENIALS.labels(operation=operation, privilege=privilege.name).inc()
    logger.warning(
        "authorization_denied",
        user_id=ctx.user.id,
        operation=operation,
        privilege=privilege.name,
    )
    raise AuthorizationError(privilege, operation)


def requires_privilege(func: F) -> F:
    """Guard a service method with the privilege declared for its name.

    The wrapped method takes a SessionContext as its first argument after
    self, and the instance must hold its AccessControl in `_access_control`.
    The operation name and acting user are bound to the structlog context
    for the duration of the call. Every call is counted by outcome: denied,
    success or error.
    """
    operation = func.__name__
    privilege = OPERATION_PRIVILEGES[operation]

    @wraps(func)
    def wrapper(self: Any, ctx: SessionContext, *args: Any, **kwargs: Any) -> Any:
        with bound_contextvars(operation=operation, user_id=ctx.user.id):
            try:
                check_privilege(self._access_control, ctx, privilege, operation)
            except AuthorizationError:
                OBSERVATION_OPERATIONS.labels(operation=operation, outcome="denied").inc()
                raise

            try:
                result = func(self, ctx, *args, **kwargs)
            except Exception:
                OBSERVATION_OPERATIONS.labels(operation=operation, outcome="error").inc()
                raise
        OBSERVATION_OPERATIONS.labels(operation=operation, outcome="success").inc()
        return result

    wrapper.required_privilege = privilege  # type: ignore[attr-defined]
    return cast(F, wrapper)
