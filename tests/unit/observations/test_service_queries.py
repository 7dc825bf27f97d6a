"""Tests for ObservationService read operations and distinct values."""

from datetime import UTC, datetime, timedelta

import pytest

from tests.factories import ObservationFactory, make_context
from tests.factories.observations import CD4_COUNT, WEIGHT
from vitalis.config.models import ObservationServiceConfig
from vitalis.observations.enums import Privilege
from vitalis.observations.exceptions import AuthorizationError, ValidationError
from vitalis.observations.models import ConceptRef, EncounterRef, LocationRef, PatientRef
from vitalis.observations.service import ObservationService

T0 = datetime(2024, 1, 1, tzinfo=UTC)
POSITIVE = ConceptRef(id=703, names={"en": "Positive", "fr": "Positif"})
NEGATIVE = ConceptRef(id=664, names={"en": "Negative", "fr": "Négatif"})
HIV_TEST = ConceptRef(id=1040, names={"en": "HIV rapid test"})


@pytest.fixture
def populated(service, clerk):
    """Seed a few observations through the service."""
    return {
        "weight_1": service.create(
            clerk,
            ObservationFactory.create(
                value_numeric=70, location_id=5, encounter_id=11, obs_datetime=T0
            ),
        ),
        "weight_2": service.create(
            clerk,
            ObservationFactory.create(
                value_numeric=68, location_id=5, obs_datetime=T0 + timedelta(days=7)
            ),
        ),
        "cd4": service.create(
            clerk,
            ObservationFactory.create(concept=CD4_COUNT, value_numeric=350, encounter_id=11),
        ),
        "other_patient": service.create(
            clerk, ObservationFactory.create(patient_id=2, value_numeric=90)
        ),
    }


READS = [
    ("get_observation", (1,)),
    ("get_observations_by_patient", (PatientRef(id=1),)),
    ("get_observations_by_patient_and_concept", (PatientRef(id=1), WEIGHT)),
    ("get_observations_by_concept_and_location", (WEIGHT, LocationRef(id=5))),
    ("get_observations_by_concept", (WEIGHT,)),
    ("get_observations_by_encounter", (EncounterRef(id=11),)),
    ("get_last_n_observations", (2, PatientRef(id=1), WEIGHT)),
    ("get_voided_observations", ()),
    ("find_by_group_id", (1,)),
    ("get_observations_answered_by_concept", (POSITIVE,)),
    ("get_numeric_answers_for_concept", (WEIGHT,)),
    ("get_observations_with_aggregation", (PatientRef(id=1), None, WEIGHT, None)),
    ("find_observations", ("42",)),
    ("get_distinct_observation_values", (WEIGHT,)),
    ("get_mime_types", ()),
    ("get_mime_type", (1,)),
]


class TestReadPrivileges:
    @pytest.mark.parametrize(("operation", "args"), READS)
    def test_reads_require_view(self, service, spy, operation, args) -> None:
        editor_only = make_context("editor")

        with pytest.raises(AuthorizationError) as exc_info:
            getattr(service, operation)(editor_only, *args)

        assert exc_info.value.privilege is Privilege.VIEW_OBS
        assert spy.calls == []

    @pytest.mark.parametrize(("operation", "args"), READS)
    def test_viewer_may_read(self, service, viewer, operation, args) -> None:
        getattr(service, operation)(viewer, *args)


class TestQueries:
    def test_get_observation(self, service, viewer, populated) -> None:
        assert service.get_observation(viewer, populated["cd4"].id).concept == CD4_COUNT
        assert service.get_observation(viewer, 999) is None

    def test_by_patient(self, service, viewer, populated) -> None:
        results = service.get_observations_by_patient(viewer, PatientRef(id=1))
        assert [o.id for o in results] == [
            populated["weight_1"].id,
            populated["weight_2"].id,
            populated["cd4"].id,
        ]

    def test_by_patient_and_concept(self, service, viewer, populated) -> None:
        results = service.get_observations_by_patient_and_concept(
            viewer, PatientRef(id=1), CD4_COUNT
        )
        assert [o.id for o in results] == [populated["cd4"].id]

    def test_by_concept_and_location_sorted(self, service, viewer, populated) -> None:
        results = service.get_observations_by_concept_and_location(
            viewer, WEIGHT, LocationRef(id=5), sort="value_numeric"
        )
        assert [o.value_numeric for o in results] == [68, 70]

    def test_by_concept(self, service, viewer, populated) -> None:
        results = service.get_observations_by_concept(viewer, WEIGHT, sort="value_numeric")
        assert [o.value_numeric for o in results] == [68, 70, 90]

    def test_by_encounter(self, service, viewer, populated) -> None:
        results = service.get_observations_by_encounter(viewer, EncounterRef(id=11))
        assert {o.id for o in results} == {populated["weight_1"].id, populated["cd4"].id}

    def test_last_n(self, service, viewer, populated) -> None:
        results = service.get_last_n_observations(viewer, 1, PatientRef(id=1), WEIGHT)
        assert [o.id for o in results] == [populated["weight_2"].id]

    def test_naive_and_aware_times_compare(self, service, clerk, viewer) -> None:
        naive = service.create(
            clerk, ObservationFactory.create(value_numeric=1, obs_datetime=datetime(2024, 1, 1))
        )
        aware = service.create(
            clerk,
            ObservationFactory.create(value_numeric=2, obs_datetime=datetime(2024, 2, 1, tzinfo=UTC)),
        )

        last = service.get_last_n_observations(viewer, 2, PatientRef(id=1), WEIGHT)
        by_time = service.get_observations_by_concept(viewer, WEIGHT, sort="obs_datetime")
        answers = service.get_numeric_answers_for_concept(viewer, WEIGHT)

        assert [o.id for o in last] == [aware.id, naive.id]
        assert [o.id for o in by_time] == [naive.id, aware.id]
        assert [a.obs_id for a in answers] == [naive.id, aware.id]

    @pytest.mark.parametrize("n", [-1, 1001])
    def test_last_n_bounds(self, service, viewer, spy, n) -> None:
        with pytest.raises(ValidationError):
            service.get_last_n_observations(viewer, n, PatientRef(id=1), WEIGHT)
        assert spy.calls == []

    def test_last_n_bound_from_config(self, store, access_control, directory, viewer) -> None:
        service = ObservationService(
            store, access_control, directory, config=ObservationServiceConfig(max_last_n=5)
        )
        with pytest.raises(ValidationError):
            service.get_last_n_observations(viewer, 6, PatientRef(id=1), WEIGHT)

    def test_voided_newest_first(self, service, clerk, viewer, populated) -> None:
        service.void(clerk, populated["weight_1"], "first")
        service.void(clerk, populated["cd4"], "second")

        voided = service.get_voided_observations(viewer)
        assert {o.id for o in voided} == {populated["weight_1"].id, populated["cd4"].id}
        assert all(o.voided for o in voided)
        assert service.get_observations_by_patient(viewer, PatientRef(id=1)) == [
            service.get_observation(viewer, populated["weight_2"].id)
        ]

    def test_group_members(self, service, clerk, viewer) -> None:
        o1, o2 = service.create_group(clerk, ObservationFactory.create_batch(2))
        assert [o.id for o in service.find_by_group_id(viewer, o1.id)] == [o1.id, o2.id]

    def test_answered_by_concept(self, service, clerk, viewer) -> None:
        answer = service.create(
            clerk, ObservationFactory.create(concept=HIV_TEST, value_coded=POSITIVE)
        )
        service.create(clerk, ObservationFactory.create(concept=POSITIVE))

        results = service.get_observations_answered_by_concept(viewer, POSITIVE)
        assert [o.id for o in results] == [answer.id]

    def test_numeric_answers(self, service, viewer, populated) -> None:
        rows = service.get_numeric_answers_for_concept(viewer, WEIGHT, sort_by_value=True)
        assert [row.value_numeric for row in rows] == [68, 70, 90]

    def test_aggregation_passed_through(self, service, viewer, spy, populated) -> None:
        seen = {}

        def constraint(obs) -> bool:
            seen["constraint"] = True
            return obs.value_numeric > 69

        def aggregation(observations):
            seen["aggregation"] = len(observations)
            return observations

        results = service.get_observations_with_aggregation(
            viewer, PatientRef(id=1), aggregation, WEIGHT, constraint
        )

        assert [o.value_numeric for o in results] == [70]
        assert seen == {"constraint": True, "aggregation": 1}
        assert spy.calls[-1] == "get_with_aggregation"

    def test_mime_types(self, service, viewer) -> None:
        assert [m.mime_type for m in service.get_mime_types(viewer)] == [
            "text/plain",
            "image/png",
        ]
        assert service.get_mime_type(viewer, 2).description == "Scanned form"
        assert service.get_mime_type(viewer, 9) is None


class TestDistinctValues:
    def test_sorted_and_deduplicated(self, service, clerk, viewer) -> None:
        for text in ["B", "A", "A", "C"]:
            service.create(clerk, ObservationFactory.create(concept=HIV_TEST, value_text=text))

        assert service.get_distinct_observation_values(viewer, HIV_TEST) == ["A", "B", "C"]

    def test_ordering_is_by_rendered_string(self, service, clerk, viewer) -> None:
        for value in [9, 10, 100, 9]:
            service.create(clerk, ObservationFactory.create(concept=CD4_COUNT, value_numeric=value))

        assert service.get_distinct_observation_values(viewer, CD4_COUNT) == ["10", "100", "9"]

    def test_coded_values_rendered_in_session_locale(self, service, clerk) -> None:
        for answer in [POSITIVE, NEGATIVE, POSITIVE]:
            service.create(clerk, ObservationFactory.create(concept=HIV_TEST, value_coded=answer))

        english = service.get_distinct_observation_values(make_context("viewer", "en"), HIV_TEST)
        french = service.get_distinct_observation_values(make_context("viewer", "fr"), HIV_TEST)

        assert english == ["Negative", "Positive"]
        assert french == ["Négatif", "Positif"]

    def test_missing_locale_uses_configured_default(
        self, store, access_control, directory, clerk
    ) -> None:
        service = ObservationService(
            store,
            access_control,
            directory,
            config=ObservationServiceConfig(default_locale="fr"),
        )
        service.create(clerk, ObservationFactory.create(concept=HIV_TEST, value_coded=POSITIVE))

        values = service.get_distinct_observation_values(make_context("viewer", None), HIV_TEST)
        assert values == ["Positif"]

    def test_voided_observations_ignored(self, service, clerk, viewer) -> None:
        kept = service.create(clerk, ObservationFactory.create(concept=HIV_TEST, value_text="A"))
        gone = service.create(clerk, ObservationFactory.create(concept=HIV_TEST, value_text="Z"))
        service.void(clerk, gone, "typo")

        assert kept.id is not None
        assert service.get_distinct_observation_values(viewer, HIV_TEST) == ["A"]
