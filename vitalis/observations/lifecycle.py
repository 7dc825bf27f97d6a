"""Void/unvoid state machine for observations.

An update is one of three transitions. Which one is decided by a pure
function of the recorded lifecycle state (is voided_by set) and the
requested one (is the voided flag set):

    requested voided, not recorded  -> VOID
    requested unvoided, recorded    -> UNVOID
    anything else                   -> UPDATE
"""

from datetime import datetime

from vitalis.observations.enums import LifecycleTransition
from vitalis.observations.models import Observation, UserRef


def select_transition(recorded_voided: bool, requested_voided: bool) -> LifecycleTransition:
    """Pick the transition that moves recorded state to requested state."""
    if requested_voided and not recorded_voided:
        return LifecycleTransition.VOID
    if not requested_voided and recorded_voided:
        return LifecycleTransition.UNVOID
    return LifecycleTransition.UPDATE


def transition_for(observation: Observation) -> LifecycleTransition:
    """Pick the transition for an observation whose flags a caller edited."""
    return select_transition(
        recorded_voided=observation.voided_by is not None,
        requested_voided=observation.voided,
    )


def apply_void(
    observation: Observation,
    reason: str | None,
    voided_by: UserRef,
    when: datetime,
) -> Observation:
    """Mark an observation voided, recording who, when and why."""
    observation.voided = True
    observation.void_reason = reason if reason is not None else ""
    observation.voided_by = voided_by
    observation.date_voided = when
    return observation


def apply_unvoid(observation: Observation) -> Observation:
    """Clear all lifecycle fields of an observation."""
    observation.voided = False
    observation.void_reason = None
    observation.voided_by = None
    observation.date_voided = None
    return observation
