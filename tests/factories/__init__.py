"""Test factories for creating test data."""

from tests.factories.observations import FIXED_NOW, ObservationFactory, SpyStore, make_context

__all__ = [
    "FIXED_NOW",
    "ObservationFactory",
    "SpyStore",
    "make_context",
]
