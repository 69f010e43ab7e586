"""
Sidecar codec: JSON documents and NDJSON observation records.

Every top-level document is an envelope `{"version": 1, ...}`. Enums are
written as their PascalCase values, dates as YYYY-MM-DD and timestamps as
ISO-8601 UTC with a trailing "Z". IndicatorUnit is a tagged object:
{"type": "Count"} or {"type": "Custom", "value": "<label>"}.

Decoders raise SerializationFailure on malformed JSON, missing fields,
bad enum values or an unsupported version; nothing is silently dropped.
"""
import json
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from focusfive.config import LIMITS
from focusfive.day_meta import ActionMeta, DayMeta
from focusfive.exceptions import SerializationFailure
from focusfive.logger import log_corruption
from focusfive.models import (
    ActionOrigin,
    ActionStatus,
    ActionTemplates,
    FiveYearVision,
    OUTCOME_ORDER,
    OutcomeType,
)
from focusfive.tracking.models import (
    Decision,
    IndicatorDef,
    IndicatorDirection,
    IndicatorKind,
    IndicatorUnit,
    Objective,
    ObjectiveStatus,
    Observation,
    ObservationSource,
    Review,
    ReviewPeriod,
    UnitType,
)
from focusfive.tracking.registry import IndicatorsData, ObjectivesData

_DECODE_ERRORS = (json.JSONDecodeError, KeyError, ValueError, TypeError, AttributeError, ValidationError)

# Raw content beyond this is not copied into corruption.log
MAX_DUMP_CHARS = 2000


class Envelope(BaseModel):
    """Common header of every sidecar document."""
    model_config = ConfigDict(extra="allow")

    version: int = Field(..., ge=1)


# ========== Scalars ==========

def format_date(value: date) -> str:
    return value.isoformat()


def parse_date(value: str) -> date:
    return date.fromisoformat(value)


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _optional_date(value: Optional[str]) -> Optional[date]:
    return parse_date(value) if value else None


def _optional_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def _corrupt(
    message: str,
    path: Optional[str],
    raw: Optional[str] = None,
    line_number: Optional[int] = None,
) -> SerializationFailure:
    """Log a decode failure and build the error to raise."""
    if raw is not None and len(raw) > MAX_DUMP_CHARS:
        raw = raw[:MAX_DUMP_CHARS] + "..."
    log_corruption(path, message, raw, line_number)
    return SerializationFailure(message, path)


def _dump_document(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2) + "\n"


def _open_envelope(text: str, what: str, path: Optional[str]) -> Dict[str, Any]:
    """Parse a document and check its version header."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise _corrupt(f"Invalid JSON in {what}: {e}", path, text) from e

    if not isinstance(data, dict):
        raise _corrupt(f"{what} document must be a JSON object", path, text)

    try:
        envelope = Envelope.model_validate(data)
    except ValidationError as e:
        raise _corrupt(f"Invalid {what} envelope: {e}", path, text) from e

    if envelope.version != LIMITS.SCHEMA_VERSION:
        raise _corrupt(
            f"Unsupported {what} version {envelope.version} (expected {LIMITS.SCHEMA_VERSION})", path, text
        )
    return data


# ========== IndicatorUnit ==========

def _unit_to_dict(unit: IndicatorUnit) -> Dict[str, Any]:
    if unit.type == UnitType.CUSTOM:
        return {"type": unit.type.value, "value": unit.value}
    return {"type": unit.type.value}


def _dict_to_unit(d: Dict[str, Any]) -> IndicatorUnit:
    return IndicatorUnit(UnitType(d["type"]), d.get("value"))


# ========== DayMeta ==========

def _action_meta_to_dict(m: ActionMeta) -> Dict[str, Any]:
    return {
        "id": m.id,
        "status": m.status.value,
        "origin": m.origin.value,
        "objective_id": m.objective_id,
        "notes": m.notes,
        "estimated_min": m.estimated_min,
        "actual_min": m.actual_min,
        "priority": m.priority,
        "tags": list(m.tags),
    }


def _dict_to_action_meta(d: Dict[str, Any]) -> ActionMeta:
    return ActionMeta(
        id=str(d["id"]),
        status=ActionStatus(d.get("status", ActionStatus.PLANNED.value)),
        origin=ActionOrigin(d.get("origin", ActionOrigin.MANUAL.value)),
        objective_id=d.get("objective_id"),
        notes=d.get("notes"),
        estimated_min=d.get("estimated_min"),
        actual_min=d.get("actual_min"),
        priority=d.get("priority"),
        tags=list(d.get("tags") or []),
    )


def encode_day_meta(meta: DayMeta) -> str:
    payload: Dict[str, Any] = {"version": LIMITS.SCHEMA_VERSION}
    for outcome_type in OUTCOME_ORDER:
        payload[outcome_type.value.lower()] = [
            _action_meta_to_dict(m) for m in meta.entries(outcome_type)
        ]
    return _dump_document(payload)


def decode_day_meta(text: str, path: Optional[str] = None) -> DayMeta:
    data = _open_envelope(text, "day meta", path)
    try:
        meta = DayMeta(version=data["version"])
        for outcome_type in OUTCOME_ORDER:
            raw = data.get(outcome_type.value.lower(), [])
            meta.set_entries(outcome_type, [_dict_to_action_meta(d) for d in raw])
        return meta
    except _DECODE_ERRORS as e:
        raise _corrupt(f"Invalid day meta: {e}", path, text) from e


# ========== Objectives ==========

def _objective_to_dict(o: Objective) -> Dict[str, Any]:
    return {
        "id": o.id,
        "domain": o.domain.value,
        "title": o.title,
        "description": o.description,
        "start": format_date(o.start),
        "end": format_date(o.end) if o.end else None,
        "status": o.status.value,
        "created": format_timestamp(o.created),
        "modified": format_timestamp(o.modified),
        "parent_id": o.parent_id,
    }


def _dict_to_objective(d: Dict[str, Any]) -> Objective:
    return Objective(
        id=d["id"],
        domain=OutcomeType(d["domain"]),
        title=d["title"],
        description=d.get("description"),
        start=parse_date(d["start"]),
        end=_optional_date(d.get("end")),
        status=ObjectiveStatus(d.get("status", ObjectiveStatus.ACTIVE.value)),
        created=parse_timestamp(d["created"]),
        modified=parse_timestamp(d["modified"]),
        parent_id=d.get("parent_id"),
    )


def encode_objectives(data: ObjectivesData) -> str:
    return _dump_document({
        "version": LIMITS.SCHEMA_VERSION,
        "objectives": [_objective_to_dict(o) for o in data.objectives],
    })


def decode_objectives(text: str, path: Optional[str] = None) -> ObjectivesData:
    data = _open_envelope(text, "objectives", path)
    try:
        return ObjectivesData(
            version=data["version"],
            objectives=[_dict_to_objective(d) for d in data.get("objectives", [])],
        )
    except _DECODE_ERRORS as e:
        raise _corrupt(f"Invalid objectives: {e}", path, text) from e


# ========== Indicators ==========

def _indicator_to_dict(i: IndicatorDef) -> Dict[str, Any]:
    return {
        "id": i.id,
        "name": i.name,
        "kind": i.kind.value,
        "unit": _unit_to_dict(i.unit),
        "objective_id": i.objective_id,
        "target": i.target,
        "direction": i.direction.value,
        "active": i.active,
        "created": format_timestamp(i.created),
        "modified": format_timestamp(i.modified),
        "lineage_of": i.lineage_of,
        "notes": i.notes,
    }


def _dict_to_indicator(d: Dict[str, Any]) -> IndicatorDef:
    return IndicatorDef(
        id=d["id"],
        name=d["name"],
        kind=IndicatorKind(d["kind"]),
        unit=_dict_to_unit(d["unit"]),
        objective_id=d.get("objective_id"),
        target=_optional_float(d.get("target")),
        direction=IndicatorDirection(d.get("direction", IndicatorDirection.HIGHER_IS_BETTER.value)),
        active=bool(d.get("active", True)),
        created=parse_timestamp(d["created"]),
        modified=parse_timestamp(d["modified"]),
        lineage_of=d.get("lineage_of"),
        notes=d.get("notes"),
    )


def encode_indicators(data: IndicatorsData) -> str:
    return _dump_document({
        "version": LIMITS.SCHEMA_VERSION,
        "indicators": [_indicator_to_dict(i) for i in data.indicators],
    })


def decode_indicators(text: str, path: Optional[str] = None) -> IndicatorsData:
    data = _open_envelope(text, "indicators", path)
    try:
        return IndicatorsData(
            version=data["version"],
            indicators=[_dict_to_indicator(d) for d in data.get("indicators", [])],
        )
    except _DECODE_ERRORS as e:
        raise _corrupt(f"Invalid indicators: {e}", path, text) from e


# ========== Observations (NDJSON) ==========

def _observation_to_dict(o: Observation) -> Dict[str, Any]:
    return {
        "id": o.id,
        "indicator_id": o.indicator_id,
        "when": format_date(o.when),
        "value": o.value,
        "unit": _unit_to_dict(o.unit),
        "source": o.source.value,
        "action_id": o.action_id,
        "note": o.note,
        "created": format_timestamp(o.created),
    }


def _dict_to_observation(d: Dict[str, Any]) -> Observation:
    return Observation(
        id=d["id"],
        indicator_id=d["indicator_id"],
        when=parse_date(d["when"]),
        value=float(d["value"]),
        unit=_dict_to_unit(d["unit"]),
        source=ObservationSource(d.get("source", ObservationSource.MANUAL.value)),
        action_id=d.get("action_id"),
        note=d.get("note"),
        created=parse_timestamp(d["created"]),
    )


def encode_observation(observation: Observation) -> str:
    """Single-line JSON record, no trailing newline; newlines inside strings are escaped."""
    return json.dumps(_observation_to_dict(observation), ensure_ascii=False, separators=(",", ":"))


def decode_observation(line: str, path: Optional[str] = None, line_number: Optional[int] = None) -> Observation:
    try:
        data = json.loads(line)
        if not isinstance(data, dict):
            raise TypeError("observation record must be a JSON object")
        return _dict_to_observation(data)
    except _DECODE_ERRORS as e:
        raise _corrupt(f"Invalid observation record: {e}", path, line, line_number) from e


# ========== Reviews ==========

def _decision_to_dict(d: Decision) -> Dict[str, Any]:
    return {
        "summary": d.summary,
        "objective_id": d.objective_id,
        "indicator_id": d.indicator_id,
        "rationale": d.rationale,
    }


def _dict_to_decision(d: Dict[str, Any]) -> Decision:
    return Decision(
        summary=d["summary"],
        objective_id=d.get("objective_id"),
        indicator_id=d.get("indicator_id"),
        rationale=d.get("rationale"),
    )


def _review_to_dict(r: Review) -> Dict[str, Any]:
    return {
        "id": r.id,
        "date": format_date(r.date),
        "period": r.period.value,
        "notes": r.notes,
        "score_1_to_5": r.score_1_to_5,
        "decisions": [_decision_to_dict(d) for d in r.decisions],
    }


def _dict_to_review(d: Dict[str, Any]) -> Review:
    return Review(
        id=d["id"],
        date=parse_date(d["date"]),
        period=ReviewPeriod(d.get("period", ReviewPeriod.WEEKLY.value)),
        notes=d.get("notes"),
        score_1_to_5=int(d["score_1_to_5"]),
        decisions=[_dict_to_decision(x) for x in d.get("decisions", [])],
    )


def encode_review(review: Review) -> str:
    return _dump_document({"version": LIMITS.SCHEMA_VERSION, "review": _review_to_dict(review)})


def decode_review(text: str, path: Optional[str] = None) -> Review:
    data = _open_envelope(text, "review", path)
    try:
        return _dict_to_review(data["review"])
    except _DECODE_ERRORS as e:
        raise _corrupt(f"Invalid review: {e}", path, text) from e


# ========== Vision / Templates ==========

def encode_vision(vision: FiveYearVision) -> str:
    return _dump_document({
        "version": LIMITS.SCHEMA_VERSION,
        "work": vision.work,
        "health": vision.health,
        "family": vision.family,
        "created": format_timestamp(vision.created),
        "modified": format_timestamp(vision.modified),
    })


def decode_vision(text: str, path: Optional[str] = None) -> FiveYearVision:
    data = _open_envelope(text, "vision", path)
    try:
        return FiveYearVision(
            work=str(data.get("work", "")),
            health=str(data.get("health", "")),
            family=str(data.get("family", "")),
            created=parse_timestamp(data["created"]),
            modified=parse_timestamp(data["modified"]),
        )
    except _DECODE_ERRORS as e:
        raise _corrupt(f"Invalid vision: {e}", path, text) from e


def encode_templates(templates: ActionTemplates) -> str:
    return _dump_document({
        "version": LIMITS.SCHEMA_VERSION,
        "templates": {name: list(actions) for name, actions in templates.templates.items()},
        "created": format_timestamp(templates.created),
        "modified": format_timestamp(templates.modified),
    })


def decode_templates(text: str, path: Optional[str] = None) -> ActionTemplates:
    data = _open_envelope(text, "templates", path)
    try:
        raw: Dict[str, List[str]] = data.get("templates", {})
        if not isinstance(raw, dict):
            raise TypeError("templates must be an object")
        return ActionTemplates(
            templates={str(name): [str(t) for t in actions] for name, actions in raw.items()},
            created=parse_timestamp(data["created"]),
            modified=parse_timestamp(data["modified"]),
        )
    except _DECODE_ERRORS as e:
        raise _corrupt(f"Invalid templates: {e}", path, text) from e
