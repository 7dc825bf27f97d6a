"""In-memory implementation of ObservationStore."""

import threading
from collections.abc import Callable, Iterable
from typing import Any

from vitalis.observations.exceptions import NotFoundError, ValidationError
from vitalis.observations.models import (
    ConceptRef,
    EncounterRef,
    LocationRef,
    MimeType,
    NumericAnswer,
    Observation,
    PatientRef,
)
from vitalis.observations.store import ObservationStore

Constraint = Callable[[Observation], bool]
Aggregation = Callable[[list[Observation]], list[Observation]]

SORTABLE_FIELDS = frozenset({
    "id",
    "obs_datetime",
    "date_created",
    "date_voided",
    "group_id",
    "value_numeric",
    "value_datetime",
    "value_text",
    "value_boolean",
})


class InMemoryObservationStore(ObservationStore):
    """In-memory implementation of ObservationStore for testing and development.

    Keeps deep copies of what is written and hands out deep copies on
    read, so callers only change stored state through create/update.
    Queries are linear scans in id order.

    get_with_aggregation understands a constraint as a predicate over an
    observation and an aggregation as a function over the constrained,
    chronologically ordered list. Either may be None.
    """

    def __init__(
        self,
        mime_types: Iterable[MimeType] = (),
        first_id: int = 1,
    ) -> None:
        self._observations: dict[int, Observation] = {}
        self._mime_types: dict[int, MimeType] = {m.id: m for m in mime_types}
        self._next_id = first_id
        self._lock = threading.Lock()

    # Mutations
    def create(self, observation: Observation) -> Observation:
        with self._lock:
            obs_id = self._next_id
            self._next_id += 1
        observation.id = obs_id
        self._observations[obs_id] = observation.model_copy(deep=True)
        return observation

    def update(self, observation: Observation) -> Observation:
        if observation.id is None or observation.id not in self._observations:
            raise NotFoundError(
                f"Observation not found: {observation.id}", obs_id=observation.id
            )
        self._observations[observation.id] = observation.model_copy(deep=True)
        return observation

    def delete(self, observation: Observation) -> None:
        if observation.id is None or observation.id not in self._observations:
            raise NotFoundError(
                f"Observation not found: {observation.id}", obs_id=observation.id
            )
        del self._observations[observation.id]

    # Lookups
    def get_by_id(self, obs_id: int) -> Observation | None:
        observation = self._observations.get(obs_id)
        return observation.model_copy(deep=True) if observation else None

    def get_by_patient(self, patient: PatientRef) -> list[Observation]:
        return self._select(lambda o: o.patient.id == patient.id)

    def get_by_patient_and_concept(
        self, patient: PatientRef, concept: ConceptRef
    ) -> list[Observation]:
        return self._select(
            lambda o: o.patient.id == patient.id and o.concept.id == concept.id
        )

    def get_by_concept_and_location(
        self,
        concept: ConceptRef,
        location: LocationRef,
        sort: str | None = None,
    ) -> list[Observation]:
        results = self._select(
            lambda o: o.concept.id == concept.id
            and o.location is not None
            and o.location.id == location.id
        )
        return self._sorted(results, sort)

    def get_by_concept(
        self, concept: ConceptRef, sort: str | None = None
    ) -> list[Observation]:
        results = self._select(lambda o: o.concept.id == concept.id)
        return self._sorted(results, sort)

    def get_by_encounter(self, encounter: EncounterRef) -> list[Observation]:
        return self._select(
            lambda o: o.encounter is not None and o.encounter.id == encounter.id
        )

    def get_last_n(
        self, n: int, patient: PatientRef, concept: ConceptRef
    ) -> list[Observation]:
        results = self.get_by_patient_and_concept(patient, concept)
        results.sort(key=lambda o: o.obs_datetime, reverse=True)
        return results[:n]

    def get_voided(self) -> list[Observation]:
        results = self._select(lambda o: o.voided, include_voided=True)
        results.sort(
            key=lambda o: (o.date_voided is not None, o.date_voided), reverse=True
        )
        return results

    def find_by_group_id(self, group_id: int) -> list[Observation]:
        return self._select(lambda o: o.group_id == group_id, include_voided=True)

    def get_answered_by_concept(self, answer: ConceptRef) -> list[Observation]:
        return self._select(
            lambda o: o.value_coded is not None and o.value_coded.id == answer.id
        )

    def get_numeric_answers(
        self, concept: ConceptRef, sort_by_value: bool = False
    ) -> list[NumericAnswer]:
        rows = [
            NumericAnswer(
                obs_id=o.id,
                obs_datetime=o.obs_datetime,
                value_numeric=o.value_numeric,
            )
            for o in self._select(
                lambda o: o.concept.id == concept.id and o.value_numeric is not None
            )
        ]
        if sort_by_value:
            rows.sort(key=lambda r: r.value_numeric)
        else:
            rows.sort(key=lambda r: r.obs_datetime)
        return rows

    def get_with_aggregation(
        self,
        patient: PatientRef,
        aggregation: Aggregation | None,
        concept: ConceptRef,
        constraint: Constraint | None,
    ) -> list[Observation]:
        results = self.get_by_patient_and_concept(patient, concept)
        if constraint is not None:
            results = [o for o in results if constraint(o)]
        results.sort(key=lambda o: o.obs_datetime)
        if aggregation is not None:
            results = aggregation(results)
        return results

    # Search support
    def find_by_patient_id(
        self, patient_id: int, include_voided: bool = False
    ) -> list[Observation]:
        return self._select(
            lambda o: o.patient.id == patient_id, include_voided=include_voided
        )

    def find_by_obs_id(
        self, obs_id: int, include_voided: bool = False
    ) -> list[Observation]:
        return self._select(lambda o: o.id == obs_id, include_voided=include_voided)

    # Mime types
    def add_mime_type(self, mime_type: MimeType) -> None:
        """Register a mime type."""
        self._mime_types[mime_type.id] = mime_type

    def get_mime_types(self) -> list[MimeType]:
        return [self._mime_types[key] for key in sorted(self._mime_types)]

    def get_mime_type(self, mime_type_id: int) -> MimeType | None:
        return self._mime_types.get(mime_type_id)

    # Helpers
    def _select(
        self,
        predicate: Constraint,
        include_voided: bool = False,
    ) -> list[Observation]:
        return [
            observation.model_copy(deep=True)
            for _, observation in sorted(self._observations.items())
            if (include_voided or not observation.voided) and predicate(observation)
        ]

    def _sorted(self, results: list[Observation], sort: str | None) -> list[Observation]:
        if sort is None:
            return results
        if sort not in SORTABLE_FIELDS:
            raise ValidationError(f"Unknown sort attribute: {sort}")

        def key(observation: Observation) -> tuple[bool, Any]:
            value = getattr(observation, sort)
            return (value is None, value)

        return sorted(results, key=key)
