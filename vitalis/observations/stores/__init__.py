"""Observation stores."""

from vitalis.observations.store import ObservationStore
from vitalis.observations.stores.inmemory import InMemoryObservationStore

__all__ = [
    "ObservationStore",
    "InMemoryObservationStore",
]
