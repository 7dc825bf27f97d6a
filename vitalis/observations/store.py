"""ObservationStore abstract interface."""

from abc import ABC, abstractmethod
from typing import Any

from vitalis.observations.models import (
    ConceptRef,
    EncounterRef,
    LocationRef,
    MimeType,
    NumericAnswer,
    Observation,
    PatientRef,
)


class ObservationStore(ABC):
    """Abstract interface for observation storage.

    Queries exclude voided observations unless their docstring says
    otherwise. Isolation of concurrent writes is the store's concern.
    """

    # Mutations
    @abstractmethod
    def create(self, observation: Observation) -> Observation:
        """Persist a new observation and assign its id."""
        pass

    @abstractmethod
    def update(self, observation: Observation) -> Observation:
        """Persist changes to an existing observation.

        Raises:
            NotFoundError: If no observation has the id
        """
        pass

    @abstractmethod
    def delete(self, observation: Observation) -> None:
        """Physically remove an observation.

        Raises:
            NotFoundError: If no observation has the id
        """
        pass

    # Lookups
    @abstractmethod
    def get_by_id(self, obs_id: int) -> Observation | None:
        """Get an observation by id, voided or not."""
        pass

    @abstractmethod
    def get_by_patient(self, patient: PatientRef) -> list[Observation]:
        """Get all observations for a patient."""
        pass

    @abstractmethod
    def get_by_patient_and_concept(
        self, patient: PatientRef, concept: ConceptRef
    ) -> list[Observation]:
        """Get observations of a concept for a patient."""
        pass

    @abstractmethod
    def get_by_concept_and_location(
        self,
        concept: ConceptRef,
        location: LocationRef,
        sort: str | None = None,
    ) -> list[Observation]:
        """Get observations of a concept at a location, optionally sorted."""
        pass

    @abstractmethod
    def get_by_concept(
        self, concept: ConceptRef, sort: str | None = None
    ) -> list[Observation]:
        """Get observations of a concept, optionally sorted."""
        pass

    @abstractmethod
    def get_by_encounter(self, encounter: EncounterRef) -> list[Observation]:
        """Get observations recorded during an encounter."""
        pass

    @abstractmethod
    def get_last_n(
        self, n: int, patient: PatientRef, concept: ConceptRef
    ) -> list[Observation]:
        """Get the n most recent observations of a concept for a patient.

        Ordered most recent first by obs_datetime.
        """
        pass

    @abstractmethod
    def get_voided(self) -> list[Observation]:
        """Get voided observations, most recently voided first."""
        pass

    @abstractmethod
    def find_by_group_id(self, group_id: int) -> list[Observation]:
        """Get every member of a group, voided or not."""
        pass

    @abstractmethod
    def get_answered_by_concept(self, answer: ConceptRef) -> list[Observation]:
        """Get observations whose coded value is the answer concept."""
        pass

    @abstractmethod
    def get_numeric_answers(
        self, concept: ConceptRef, sort_by_value: bool = False
    ) -> list[NumericAnswer]:
        """Get numeric values recorded for a concept.

        Ordered by value when sort_by_value is set, else by obs_datetime.
        """
        pass

    @abstractmethod
    def get_with_aggregation(
        self,
        patient: PatientRef,
        aggregation: Any,
        concept: ConceptRef,
        constraint: Any,
    ) -> list[Observation]:
        """Get observations shaped by a backend specific aggregation and constraint."""
        pass

    # Search support
    @abstractmethod
    def find_by_patient_id(
        self, patient_id: int, include_voided: bool = False
    ) -> list[Observation]:
        """Get observations for a patient id."""
        pass

    @abstractmethod
    def find_by_obs_id(
        self, obs_id: int, include_voided: bool = False
    ) -> list[Observation]:
        """Get the observations whose id is obs_id (zero or one)."""
        pass

    # Mime types
    @abstractmethod
    def get_mime_types(self) -> list[MimeType]:
        """Get all mime types."""
        pass

    @abstractmethod
    def get_mime_type(self, mime_type_id: int) -> MimeType | None:
        """Get a mime type by id."""
        pass
