import json
from datetime import date, datetime, timezone

import pytest

from focusfive import sidecar
from focusfive.day_meta import ActionMeta, DayMeta
from focusfive.exceptions import SerializationFailure
from focusfive.models import ActionOrigin, ActionStatus, ActionTemplates, FiveYearVision, OutcomeType
from focusfive.tracking.models import (
    Decision,
    IndicatorDef,
    IndicatorDirection,
    IndicatorKind,
    IndicatorUnit,
    Objective,
    Observation,
    Review,
)
from focusfive.tracking.registry import IndicatorsData, ObjectivesData


def test_enums_are_pascal_case_and_units_tagged():
    indicator = IndicatorDef.new("Deep work", IndicatorKind.LEADING, IndicatorUnit.custom("sessions"))
    indicator.direction = IndicatorDirection.HIGHER_IS_BETTER
    plain = IndicatorDef.new("Minutes", IndicatorKind.LAGGING, IndicatorUnit.minutes())

    payload = json.loads(sidecar.encode_indicators(IndicatorsData(indicators=[indicator, plain])))

    assert payload["version"] == 1
    first, second = payload["indicators"]
    assert first["kind"] == "Leading"
    assert first["direction"] == "HigherIsBetter"
    assert first["unit"] == {"type": "Custom", "value": "sessions"}
    assert second["unit"] == {"type": "Minutes"}


def test_timestamps_are_utc_with_z():
    objective = Objective.new(OutcomeType.HEALTH, "Run a marathon")
    objective.created = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    objective.start = date(2025, 1, 1)

    payload = json.loads(sidecar.encode_objectives(ObjectivesData(objectives=[objective])))
    entry = payload["objectives"][0]

    assert entry["domain"] == "Health"
    assert entry["status"] == "Active"
    assert entry["start"] == "2025-01-01"
    assert entry["end"] is None
    assert entry["created"] == "2025-01-02T03:04:05Z"


def test_objectives_decode_back():
    objective = Objective.new(OutcomeType.WORK, "Ship v1", "first release")
    objective.end = date(2025, 12, 31)
    data = ObjectivesData(objectives=[objective])

    decoded = sidecar.decode_objectives(sidecar.encode_objectives(data))

    assert decoded.version == 1
    assert decoded.objectives == [objective]


def test_day_meta_layout():
    meta = DayMeta(
        work=[ActionMeta(id="a1", status=ActionStatus.IN_PROGRESS, objective_id="o1", tags=["deep"])],
        family=[ActionMeta(id="f1", origin=ActionOrigin.CARRY_OVER)],
    )
    payload = json.loads(sidecar.encode_day_meta(meta))

    assert payload["version"] == 1
    assert payload["work"][0]["status"] == "InProgress"
    assert payload["family"][0]["origin"] == "CarryOver"
    assert payload["health"] == []
    assert sidecar.decode_day_meta(json.dumps(payload)) == meta


def test_observation_line_is_single_line():
    observation = Observation.new(
        "ind-1", date(2025, 8, 15), 1000, IndicatorUnit.count(), note="two\nlines"
    )
    line = sidecar.encode_observation(observation)

    assert "\n" not in line
    assert "version" not in json.loads(line)
    assert sidecar.decode_observation(line) == observation


def test_review_envelope():
    review = Review.new(date(2025, 1, 15))
    review.set_score(4)
    review.decisions.append(Decision(summary="Drop evening email"))

    payload = json.loads(sidecar.encode_review(review))

    assert payload["version"] == 1
    assert payload["review"]["period"] == "Weekly"
    assert payload["review"]["score_1_to_5"] == 4
    assert sidecar.decode_review(json.dumps(payload)) == review


def test_vision_and_templates_decode_back():
    vision = FiveYearVision()
    vision.set_vision(OutcomeType.FAMILY, "Weekly family dinners")
    templates = ActionTemplates()
    templates.add_template("Morning", ["Stretch", "Journal"])

    assert sidecar.decode_vision(sidecar.encode_vision(vision)) == vision
    assert sidecar.decode_templates(sidecar.encode_templates(templates)) == templates


def test_documents_end_with_newline():
    assert sidecar.encode_day_meta(DayMeta()).endswith("}\n")


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[1, 2, 3]",
        '{"objectives": []}',
        '{"version": 0, "objectives": []}',
        '{"version": 2, "objectives": []}',
        '{"version": 1, "objectives": [{"id": "x"}]}',
        '{"version": 1, "objectives": [{"id": "x", "domain": "Leisure", "title": "t",'
        ' "start": "2025-01-01", "created": "2025-01-01T00:00:00Z", "modified": "2025-01-01T00:00:00Z"}]}',
    ],
)
def test_corrupt_documents_raise(text):
    with pytest.raises(SerializationFailure):
        sidecar.decode_objectives(text, "objectives.json")


def test_corrupt_observation_raises():
    with pytest.raises(SerializationFailure):
        sidecar.decode_observation('{"id": "x", "when": "2025-13-01"}')


def test_bad_unit_raises():
    payload = {
        "version": 1,
        "indicators": [{
            "id": "i", "name": "n", "kind": "Leading", "unit": {"type": "Custom"},
            "created": "2025-01-01T00:00:00Z", "modified": "2025-01-01T00:00:00Z",
        }],
    }
    with pytest.raises(SerializationFailure):
        sidecar.decode_indicators(json.dumps(payload))


def test_parse_timestamp_accepts_offsets():
    parsed = sidecar.parse_timestamp("2025-01-02T05:04:05+02:00")
    assert parsed == datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
