"""PatientDirectory: identifier based patient lookup used by search."""

from abc import ABC, abstractmethod

from vitalis.observations.models import PatientRef


class PatientDirectory(ABC):
    """Abstract interface for finding patients by identifier."""

    @abstractmethod
    def find_by_identifier(
        self, text: str, include_voided: bool = False
    ) -> list[PatientRef]:
        """Return patients with an identifier matching the text."""
        pass


class InMemoryPatientDirectory(PatientDirectory):
    """In-memory implementation of PatientDirectory for testing and development.

    Identifiers match exactly, ignoring case and surrounding whitespace.
    """

    def __init__(self) -> None:
        self._patients: dict[int, PatientRef] = {}

    def add(self, patient: PatientRef) -> None:
        """Register a patient."""
        self._patients[patient.id] = patient

    def find_by_identifier(
        self, text: str, include_voided: bool = False
    ) -> list[PatientRef]:
        needle = text.strip().lower()
        if not needle:
            return []

        results = []
        for patient in self._patients.values():
            if patient.voided and not include_voided:
                continue
            if any(identifier.lower() == needle for identifier in patient.identifiers):
                results.append(patient)
        return results
