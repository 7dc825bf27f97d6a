"""Observation service: privilege-gated access to observation records.

Every public operation takes the caller's SessionContext first and is
guarded by requires_privilege, so a caller without the privilege gets an
AuthorizationError before the store is touched. Store errors propagate
unchanged.
"""

import re
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any

from vitalis.config.models.observations import ObservationServiceConfig
from vitalis.observability.logging import get_logger
from vitalis.observability.metrics import OBSERVATION_GROUP_SIZE, SEARCH_RESULTS
from vitalis.observations.authorization import AccessControl, requires_privilege
from vitalis.observations.directory import PatientDirectory
from vitalis.observations.enums import LifecycleTransition
from vitalis.observations.exceptions import ValidationError
from vitalis.observations.lifecycle import apply_unvoid, apply_void, transition_for
from vitalis.observations.models import (
    ConceptRef,
    EncounterRef,
    LocationRef,
    MimeType,
    NumericAnswer,
    Observation,
    PatientRef,
    utc_now,
)
from vitalis.observations.rendering import value_as_string
from vitalis.observations.session import SessionContext
from vitalis.observations.store import ObservationStore

logger = get_logger(__name__)

INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


def is_integer_text(text: str) -> bool:
    """Return True if text is an optionally signed run of ASCII digits."""
    return INTEGER_PATTERN.fullmatch(text) is not None


class ObservationService:
    """Service mediating reads and writes of observation records.

    Voiding is the normal way to retire an observation; delete is a
    separate, higher privilege for administrative correction.
    """

    def __init__(
        self,
        store: ObservationStore,
        access_control: AccessControl,
        patient_directory: PatientDirectory,
        config: ObservationServiceConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize observation service.

        Args:
            store: Store holding observations
            access_control: Answers privilege checks for the acting user
            patient_directory: Patient lookup used by find_observations
            config: Rendering and limit settings
            clock: Source of void timestamps
        """
        self._store = store
        self._access_control = access_control
        self._patient_directory = patient_directory
        self._config = config or ObservationServiceConfig()
        self._clock = clock

    # Mutations

    @requires_privilege
    def create(self, ctx: SessionContext, observation: Observation) -> Observation:
        """Persist a new observation. The store assigns its id."""
        _require_new(observation)
        created = self._store.create(observation)
        logger.info(
            "observation_created",
            obs_id=created.id,
            concept_id=created.concept.id,
            user_id=ctx.user.id,
        )
        return created

    @requires_privilege
    def create_group(
        self,
        ctx: SessionContext,
        observations: Sequence[Observation] | None,
    ) -> list[Observation]:
        """Persist observations as one group.

        The first observation is created, its id becomes the group id, and
        it is updated to carry that id before the remaining members are
        created with the group id already set. A missing or empty sequence
        is a no-op.

        The calls are not atomic: if the store fails partway the members
        persisted so far stay committed and the error propagates.
        """
        if not observations:
            return []

        members = list(observations)
        for member in members:
            _require_new(member)

        anchor = self._store.create(members[0])
        group_id = anchor.id
        persisted = [anchor]
        try:
            anchor.group_id = group_id
            persisted[0] = self._store.update(anchor)
            for member in members[1:]:
                member.group_id = group_id
                persisted.append(self._store.create(member))
        except Exception:
            logger.warning(
                "observation_group_partially_created",
                group_id=group_id,
                persisted=len(persisted),
                requested=len(members),
                user_id=ctx.user.id,
            )
            raise

        OBSERVATION_GROUP_SIZE.observe(len(members))
        logger.info(
            "observation_group_created",
            group_id=group_id,
            size=len(members),
            user_id=ctx.user.id,
        )
        return persisted

    @requires_privilege
    def update(self, ctx: SessionContext, observation: Observation) -> Observation:
        """Save changes to an observation.

        A caller may void or unvoid by editing the voided flag directly.
        The flag is compared with voided_by to pick the transition, so the
        lifecycle fields stay consistent either way.
        """
        _require_persisted(observation)

        transition = transition_for(observation)
        if transition is LifecycleTransition.VOID:
            return self._void(ctx, observation, observation.void_reason)
        if transition is LifecycleTransition.UNVOID:
            return self._unvoid(ctx, observation)

        logger.debug(
            "observation_updated",
            obs_id=observation.id,
            date_voided=observation.date_voided,
            user_id=ctx.user.id,
        )
        return self._store.update(observation)

    @requires_privilege
    def void(
        self,
        ctx: SessionContext,
        observation: Observation,
        reason: str | None,
    ) -> Observation:
        """Retire an observation, recording who voided it, when and why."""
        _require_persisted(observation)
        return self._void(ctx, observation, reason)

    @requires_privilege
    def unvoid(self, ctx: SessionContext, observation: Observation) -> Observation:
        """Restore a voided observation, clearing its lifecycle fields."""
        _require_persisted(observation)
        return self._unvoid(ctx, observation)

    @requires_privilege
    def delete(self, ctx: SessionContext, observation: Observation) -> None:
        """Physically remove an observation.

        Prefer void. No cascade happens: deleting a group anchor leaves the
        other members pointing at a group id that no longer resolves.
        """
        _require_persisted(observation)
        self._store.delete(observation)
        logger.warning(
            "observation_deleted",
            obs_id=observation.id,
            group_id=observation.group_id,
            user_id=ctx.user.id,
        )

    def _void(
        self,
        ctx: SessionContext,
        observation: Observation,
        reason: str | None,
    ) -> Observation:
        apply_void(observation, reason, ctx.user, self._clock())
        self._store.update(observation)
        logger.info(
            "observation_voided",
            obs_id=observation.id,
            reason=observation.void_reason,
            user_id=ctx.user.id,
        )
        return observation

    def _unvoid(self, ctx: SessionContext, observation: Observation) -> Observation:
        apply_unvoid(observation)
        self._store.update(observation)
        logger.info("observation_unvoided", obs_id=observation.id, user_id=ctx.user.id)
        return observation

    # Queries

    @requires_privilege
    def get_observation(self, ctx: SessionContext, obs_id: int) -> Observation | None:
        return self._store.get_by_id(obs_id)

    @requires_privilege
    def get_observations_by_patient(
        self, ctx: SessionContext, patient: PatientRef
    ) -> list[Observation]:
        return self._store.get_by_patient(patient)

    @requires_privilege
    def get_observations_by_patient_and_concept(
        self, ctx: SessionContext, patient: PatientRef, concept: ConceptRef
    ) -> list[Observation]:
        """e.g. every CD4 count for a patient."""
        return self._store.get_by_patient_and_concept(patient, concept)

    @requires_privilege
    def get_observations_by_concept_and_location(
        self,
        ctx: SessionContext,
        concept: ConceptRef,
        location: LocationRef,
        sort: str | None = None,
    ) -> list[Observation]:
        return self._store.get_by_concept_and_location(concept, location, sort)

    @requires_privilege
    def get_observations_by_concept(
        self,
        ctx: SessionContext,
        concept: ConceptRef,
        sort: str | None = None,
    ) -> list[Observation]:
        """e.g. every observation of RETURN VISIT DATE."""
        return self._store.get_by_concept(concept, sort)

    @requires_privilege
    def get_observations_by_encounter(
        self, ctx: SessionContext, encounter: EncounterRef
    ) -> list[Observation]:
        return self._store.get_by_encounter(encounter)

    @requires_privilege
    def get_last_n_observations(
        self,
        ctx: SessionContext,
        n: int,
        patient: PatientRef,
        concept: ConceptRef,
    ) -> list[Observation]:
        """Most recent n observations of a concept for a patient, newest first."""
        if n < 0 or n > self._config.max_last_n:
            raise ValidationError(
                f"n must be between 0 and {self._config.max_last_n}, got {n}"
            )
        return self._store.get_last_n(n, patient, concept)

    @requires_privilege
    def get_voided_observations(self, ctx: SessionContext) -> list[Observation]:
        """Voided observations, most recently voided first."""
        return self._store.get_voided()

    @requires_privilege
    def find_by_group_id(self, ctx: SessionContext, group_id: int) -> list[Observation]:
        """Every observation sharing the group id."""
        return self._store.find_by_group_id(group_id)

    @requires_privilege
    def get_observations_answered_by_concept(
        self, ctx: SessionContext, answer: ConceptRef
    ) -> list[Observation]:
        """Observations whose value is the answer concept, not observations of it."""
        return self._store.get_answered_by_concept(answer)

    @requires_privilege
    def get_numeric_answers_for_concept(
        self,
        ctx: SessionContext,
        concept: ConceptRef,
        sort_by_value: bool = False,
    ) -> list[NumericAnswer]:
        return self._store.get_numeric_answers(concept, sort_by_value)

    @requires_privilege
    def get_observations_with_aggregation(
        self,
        ctx: SessionContext,
        patient: PatientRef,
        aggregation: Any,
        concept: ConceptRef,
        constraint: Any,
    ) -> list[Observation]:
        """Pass aggregation and constraint through to the store uninterpreted."""
        return self._store.get_with_aggregation(patient, aggregation, concept, constraint)

    @requires_privilege
    def get_mime_types(self, ctx: SessionContext) -> list[MimeType]:
        return self._store.get_mime_types()

    @requires_privilege
    def get_mime_type(self, ctx: SessionContext, mime_type_id: int) -> MimeType | None:
        return self._store.get_mime_type(mime_type_id)

    # Search

    @requires_privilege
    def find_observations(
        self,
        ctx: SessionContext,
        search_text: str,
        include_voided: bool = False,
    ) -> list[Observation]:
        """Find observations by patient identifier or by observation id.

        Observations of every patient whose identifier matches come first,
        followed by the observation whose id is the search text when it
        is an integer. An observation found both ways appears twice.
        """
        results: list[Observation] = []

        patients = self._patient_directory.find_by_identifier(search_text, include_voided)
        for patient in patients:
            results.extend(self._store.find_by_patient_id(patient.id, include_voided))
        SEARCH_RESULTS.labels(strategy="patient_identifier").observe(len(results))

        if is_integer_text(search_text):
            by_id = self._store.find_by_obs_id(int(search_text), include_voided)
            SEARCH_RESULTS.labels(strategy="obs_id").observe(len(by_id))
            results.extend(by_id)

        logger.debug(
            "observations_searched",
            search_text=search_text,
            patients=len(patients),
            results=len(results),
            include_voided=include_voided,
        )
        return results

    # Aggregation

    @requires_privilege
    def get_distinct_observation_values(
        self, ctx: SessionContext, concept: ConceptRef
    ) -> list[str]:
        """Distinct rendered values recorded for a concept.

        Values are compared and ordered as rendered strings in the
        session's locale, so "10" sorts before "9".
        """
        locale = ctx.locale or self._config.default_locale
        observations = self._store.get_by_concept(concept, None)
        return sorted(
            {
                value_as_string(observation, locale, self._config.date_format)
                for observation in observations
            }
        )


def _require_observation(observation: Observation | None) -> None:
    if observation is None:
        raise ValidationError("An observation is required")


def _require_persisted(observation: Observation | None) -> None:
    _require_observation(observation)
    if observation.id is None:  # type: ignore[union-attr]
        raise ValidationError("Observation has not been created yet")


def _require_new(observation: Observation | None) -> None:
    _require_observation(observation)
    if observation.id is not None:  # type: ignore[union-attr]
        raise ValidationError(f"Observation already has id {observation.id}")  # type: ignore[union-attr]
