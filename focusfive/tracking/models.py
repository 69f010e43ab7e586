"""
Tracking models: Objective / Indicator / Observation / Review.

Objectives are longer-horizon aims per domain; indicators are named
measurement series optionally tied to an objective; observations are
datapoints against an indicator; reviews are ISO-week retrospectives.
Dataclasses so sidecar.py can map them field by field.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Tuple

from focusfive.exceptions import PreconditionViolation
from focusfive.models import OutcomeType, new_id, utc_now

MIN_REVIEW_SCORE = 1
MAX_REVIEW_SCORE = 5


class ObjectiveStatus(str, Enum):
    ACTIVE = "Active"
    PAUSED = "Paused"
    COMPLETED = "Completed"
    DROPPED = "Dropped"


class IndicatorKind(str, Enum):
    LEADING = "Leading"
    LAGGING = "Lagging"


class IndicatorDirection(str, Enum):
    HIGHER_IS_BETTER = "HigherIsBetter"
    LOWER_IS_BETTER = "LowerIsBetter"
    WITHIN_RANGE = "WithinRange"


class UnitType(str, Enum):
    COUNT = "Count"
    MINUTES = "Minutes"
    DOLLARS = "Dollars"
    PERCENT = "Percent"
    CUSTOM = "Custom"


class ObservationSource(str, Enum):
    MANUAL = "Manual"
    AUTOMATED = "Automated"
    IMPORT = "Import"


class ReviewPeriod(str, Enum):
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"


@dataclass(frozen=True)
class IndicatorUnit:
    """
    Tagged unit variant. Only Custom carries a label.

    Serialized as {"type": "Count"} or {"type": "Custom", "value": "<label>"}.
    """
    type: UnitType
    value: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "type", UnitType(self.type))
        if self.type == UnitType.CUSTOM:
            if not self.value:
                raise ValueError("Custom unit requires a label")
        elif self.value is not None:
            raise ValueError(f"{self.type.value} unit does not take a label")

    @classmethod
    def count(cls) -> "IndicatorUnit":
        return cls(UnitType.COUNT)

    @classmethod
    def minutes(cls) -> "IndicatorUnit":
        return cls(UnitType.MINUTES)

    @classmethod
    def dollars(cls) -> "IndicatorUnit":
        return cls(UnitType.DOLLARS)

    @classmethod
    def percent(cls) -> "IndicatorUnit":
        return cls(UnitType.PERCENT)

    @classmethod
    def custom(cls, label: str) -> "IndicatorUnit":
        return cls(UnitType.CUSTOM, label)

    @property
    def label(self) -> str:
        return self.value if self.type == UnitType.CUSTOM else self.type.value


@dataclass
class Objective:
    id: str
    domain: OutcomeType
    title: str
    description: Optional[str] = None
    start: date = field(default_factory=date.today)
    end: Optional[date] = None
    status: ObjectiveStatus = ObjectiveStatus.ACTIVE
    created: datetime = field(default_factory=utc_now)
    modified: datetime = field(default_factory=utc_now)
    parent_id: Optional[str] = None

    @classmethod
    def new(cls, domain: OutcomeType, title: str, description: Optional[str] = None) -> "Objective":
        return cls(id=new_id(), domain=OutcomeType(domain), title=title, description=description)

    def set_status(self, status: ObjectiveStatus) -> None:
        self.status = ObjectiveStatus(status)
        self.modified = utc_now()

    @property
    def is_active(self) -> bool:
        return self.status == ObjectiveStatus.ACTIVE


@dataclass
class IndicatorDef:
    id: str
    name: str
    kind: IndicatorKind
    unit: IndicatorUnit
    objective_id: Optional[str] = None
    target: Optional[float] = None
    direction: IndicatorDirection = IndicatorDirection.HIGHER_IS_BETTER
    active: bool = True
    created: datetime = field(default_factory=utc_now)
    modified: datetime = field(default_factory=utc_now)
    lineage_of: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def new(cls, name: str, kind: IndicatorKind, unit: IndicatorUnit) -> "IndicatorDef":
        return cls(id=new_id(), name=name, kind=IndicatorKind(kind), unit=unit)

    def deactivate(self) -> None:
        self.active = False
        self.modified = utc_now()


@dataclass
class Observation:
    id: str
    indicator_id: str
    when: date
    value: float
    unit: IndicatorUnit
    source: ObservationSource = ObservationSource.MANUAL
    action_id: Optional[str] = None
    note: Optional[str] = None
    created: datetime = field(default_factory=utc_now)

    @classmethod
    def new(
        cls,
        indicator_id: str,
        when: date,
        value: float,
        unit: IndicatorUnit,
        source: ObservationSource = ObservationSource.MANUAL,
        action_id: Optional[str] = None,
        note: Optional[str] = None,
    ) -> "Observation":
        return cls(
            id=new_id(),
            indicator_id=indicator_id,
            when=when,
            value=float(value),
            unit=unit,
            source=ObservationSource(source),
            action_id=action_id,
            note=note,
        )


@dataclass
class Decision:
    summary: str
    objective_id: Optional[str] = None
    indicator_id: Optional[str] = None
    rationale: Optional[str] = None


@dataclass
class Review:
    """Periodic retrospective; stored per ISO week."""
    id: str
    date: date
    period: ReviewPeriod = ReviewPeriod.WEEKLY
    notes: Optional[str] = None
    score_1_to_5: int = 3
    decisions: List[Decision] = field(default_factory=list)

    @classmethod
    def new(cls, review_date: date) -> "Review":
        return cls(id=new_id(), date=review_date)

    def set_score(self, score: int) -> None:
        validate_score(score)
        self.score_1_to_5 = score

    @property
    def iso_week(self) -> Tuple[int, int]:
        year, week, _ = self.date.isocalendar()
        return year, week


def validate_score(score: int) -> None:
    if isinstance(score, bool) or not isinstance(score, int):
        raise PreconditionViolation(f"Review score must be an integer, got {score!r}")
    if not MIN_REVIEW_SCORE <= score <= MAX_REVIEW_SCORE:
        raise PreconditionViolation(
            f"Review score must be between {MIN_REVIEW_SCORE} and {MAX_REVIEW_SCORE}, got {score}"
        )
