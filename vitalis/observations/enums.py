"""Enums for the observation domain."""

from enum import Enum


class Privilege(str, Enum):
    """Privileges guarding observation operations.

    Values match the privilege names granted to roles.
    """

    VIEW_OBS = "View Observations"
    ADD_OBS = "Add Observations"
    EDIT_OBS = "Edit Observations"
    DELETE_OBS = "Delete Observations"


class LifecycleTransition(str, Enum):
    """What an update of an observation amounts to."""

    UPDATE = "update"
    VOID = "void"
    UNVOID = "unvoid"


class ErrorCode(str, Enum):
    """Machine-readable codes carried by service exceptions."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    PRIVILEGE_REQUIRED = "PRIVILEGE_REQUIRED"
    NOT_FOUND = "NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
