"""
Core data model for FocusFive.

Defines the daily structures (Action, Outcome, DailyGoals) and the
long-lived user artifacts stored next to them (FiveYearVision,
ActionTemplates). Persistence lives in storage.py; these types only
enforce their own invariants.
"""
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from focusfive.config import LIMITS
from focusfive.exceptions import InvalidFormat, PreconditionViolation
from focusfive.logger import get_logger

logger = get_logger("models")


def utc_now() -> datetime:
    """Current UTC time at second precision."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def new_id() -> str:
    return str(uuid.uuid4())


def truncate_text(text: Optional[str], limit: int, what: str = "Action text") -> str:
    """Clamp text to `limit` characters, logging when something is cut."""
    if not text:
        return ""
    if len(text) > limit:
        logger.warning(f"{what} truncated from {len(text)} to {limit} chars")
        return text[:limit]
    return text


def trim_blank_lines(lines: List[str]) -> List[str]:
    """Drop whitespace-only lines from both ends, keeping inner lines as-is."""
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return list(lines[start:end])


def normalize_goal(goal: Optional[str]) -> Optional[str]:
    """Single line, trimmed, at most MAX_GOAL_LENGTH chars; empty becomes None."""
    if goal is None:
        return None
    goal = " ".join(goal.splitlines()).strip()
    return truncate_text(goal, LIMITS.MAX_GOAL_LENGTH, "Goal").strip() or None


class OutcomeType(str, Enum):
    """The three life domains, in their fixed rendering order."""
    WORK = "Work"
    HEALTH = "Health"
    FAMILY = "Family"

    @property
    def position(self) -> int:
        return OUTCOME_ORDER.index(self)


OUTCOME_ORDER: Tuple[OutcomeType, ...] = (OutcomeType.WORK, OutcomeType.HEALTH, OutcomeType.FAMILY)


class ActionStatus(str, Enum):
    PLANNED = "Planned"
    IN_PROGRESS = "InProgress"
    DONE = "Done"
    SKIPPED = "Skipped"
    BLOCKED = "Blocked"

    def next(self) -> "ActionStatus":
        """Planned -> InProgress -> Done -> Skipped -> Blocked -> Planned."""
        order = list(ActionStatus)
        return order[(order.index(self) + 1) % len(order)]


class ActionOrigin(str, Enum):
    MANUAL = "Manual"
    TEMPLATE = "Template"
    CARRY_OVER = "CarryOver"


_TRACKED_FIELDS = {"text", "completed", "status", "origin"}


@dataclass
class Action:
    """
    A single to-do under one domain for one day.

    `completed` and `status` are kept in sync on every assignment:
    completed == (status == Done). Any tracked change refreshes `modified`.
    """
    text: str = ""
    completed: bool = False
    status: ActionStatus = ActionStatus.PLANNED
    origin: ActionOrigin = ActionOrigin.MANUAL
    id: str = field(default_factory=new_id)
    created: datetime = field(default_factory=utc_now)
    modified: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        status = ActionStatus(self.status)
        if self.completed and status != ActionStatus.DONE:
            status = ActionStatus.DONE
        object.__setattr__(self, "text", truncate_text(self.text, LIMITS.MAX_ACTION_LENGTH))
        object.__setattr__(self, "status", status)
        object.__setattr__(self, "completed", status == ActionStatus.DONE)
        object.__setattr__(self, "origin", ActionOrigin(self.origin))
        object.__setattr__(self, "_ready", True)

    def __setattr__(self, name, value):
        if not self.__dict__.get("_ready") or name not in _TRACKED_FIELDS:
            object.__setattr__(self, name, value)
            return

        if name == "text":
            value = truncate_text(value, LIMITS.MAX_ACTION_LENGTH)
        elif name == "completed":
            value = bool(value)
            if value:
                object.__setattr__(self, "status", ActionStatus.DONE)
            elif self.status == ActionStatus.DONE:
                object.__setattr__(self, "status", ActionStatus.PLANNED)
        elif name == "status":
            value = ActionStatus(value)
            object.__setattr__(self, "completed", value == ActionStatus.DONE)
        elif name == "origin":
            value = ActionOrigin(value)

        object.__setattr__(self, name, value)
        object.__setattr__(self, "modified", utc_now())

    @classmethod
    def new(cls, text: str = "") -> "Action":
        return cls(text=text)

    @classmethod
    def new_empty(cls) -> "Action":
        return cls()

    @classmethod
    def new_with_origin(cls, text: str, origin: ActionOrigin) -> "Action":
        return cls(text=text, origin=origin)

    @classmethod
    def from_markdown(cls, text: str, completed: bool) -> "Action":
        """Build an action from a parsed checkbox line; always gets a fresh id."""
        return cls(text=text, completed=completed)

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()

    def set_text(self, text: str) -> None:
        self.text = text

    def set_status(self, status: ActionStatus) -> None:
        self.status = status

    def cycle_status(self) -> ActionStatus:
        self.status = self.status.next()
        return self.status


def _default_actions() -> List[Action]:
    return [Action.new_empty() for _ in range(LIMITS.DEFAULT_ACTIONS)]


@dataclass
class Outcome:
    """Per-domain grouping: optional goal line, 1-5 actions, optional reflection."""
    outcome_type: OutcomeType
    goal: Optional[str] = None
    actions: List[Action] = field(default_factory=_default_actions)
    reflection: Optional[str] = None

    def __post_init__(self):
        self.outcome_type = OutcomeType(self.outcome_type)
        self.goal = normalize_goal(self.goal)
        if not LIMITS.MIN_ACTIONS <= len(self.actions) <= LIMITS.MAX_ACTIONS:
            raise PreconditionViolation(
                f"{self.outcome_type.value} must have between {LIMITS.MIN_ACTIONS} "
                f"and {LIMITS.MAX_ACTIONS} actions, got {len(self.actions)}"
            )

    def set_goal(self, goal: Optional[str]) -> None:
        self.goal = normalize_goal(goal)

    def set_reflection(self, reflection: Optional[str]) -> None:
        """Store reflection text without leading or trailing blank lines."""
        self.reflection = "\n".join(trim_blank_lines((reflection or "").splitlines())) or None

    def add_action(self, text: str = "", origin: ActionOrigin = ActionOrigin.MANUAL) -> Action:
        """Append a new action (max 5 total)."""
        if len(self.actions) >= LIMITS.MAX_ACTIONS:
            raise PreconditionViolation(f"Maximum {LIMITS.MAX_ACTIONS} actions per outcome")
        action = Action.new_with_origin(text, origin)
        self.actions.append(action)
        return action

    def remove_action(self, index: int) -> Action:
        """Remove an action by position (at least 1 must remain)."""
        if len(self.actions) <= LIMITS.MIN_ACTIONS:
            raise PreconditionViolation(f"Minimum {LIMITS.MIN_ACTIONS} action required per outcome")
        if not 0 <= index < len(self.actions):
            raise InvalidFormat(f"Invalid action index: {index}")
        return self.actions.pop(index)

    def count_completed(self) -> int:
        return sum(1 for a in self.actions if a.completed)

    def completion_ratio(self) -> float:
        if not self.actions:
            return 0.0
        return self.count_completed() / len(self.actions)

    def completion_percentage(self) -> int:
        """Completion as an integer percentage (0-100, floored)."""
        if not self.actions:
            return 0
        return (self.count_completed() * 100) // len(self.actions)

    def empty_slots(self) -> List[int]:
        return [i for i, a in enumerate(self.actions) if a.is_empty]

    def uncompleted_actions(self) -> List[Action]:
        """Actions eligible for carry-over: non-empty text and not completed."""
        return [a for a in self.actions if not a.is_empty and not a.completed]


@dataclass
class CompletionStats:
    completed: int
    total: int
    percentage: int
    by_outcome: List[Tuple[str, int, int]]
    streak_days: Optional[int] = None
    best_outcome: Optional[str] = None
    needs_attention: Set[str] = field(default_factory=set)


@dataclass
class DailyGoals:
    """
    The day's full structure.

    `warnings` carries non-fatal parser notes (e.g. dropped extra actions);
    it is not part of equality.
    """
    date: date
    day_number: Optional[int] = None
    work: Outcome = field(default_factory=lambda: Outcome(OutcomeType.WORK))
    health: Outcome = field(default_factory=lambda: Outcome(OutcomeType.HEALTH))
    family: Outcome = field(default_factory=lambda: Outcome(OutcomeType.FAMILY))
    warnings: List[str] = field(default_factory=list, compare=False, repr=False)

    def outcomes(self) -> List[Outcome]:
        return [self.work, self.health, self.family]

    def outcome(self, outcome_type: OutcomeType) -> Outcome:
        mapping = {
            OutcomeType.WORK: self.work,
            OutcomeType.HEALTH: self.health,
            OutcomeType.FAMILY: self.family,
        }
        return mapping[OutcomeType(outcome_type)]

    def find_action(self, action_id: str) -> Optional[Tuple[OutcomeType, int, Action]]:
        for outcome in self.outcomes():
            for i, action in enumerate(outcome.actions):
                if action.id == action_id:
                    return outcome.outcome_type, i, action
        return None

    def completion_stats(self) -> CompletionStats:
        """
        Compute completion statistics for the day.

        best_outcome is the domain with the highest completion ratio (ties go
        to the earlier domain); needs_attention holds every domain not fully
        complete.
        """
        by_outcome = [
            (o.outcome_type.value, o.count_completed(), len(o.actions))
            for o in self.outcomes()
        ]
        completed = sum(done for _, done, _ in by_outcome)
        total = sum(count for _, _, count in by_outcome)
        # Half-up rounding
        percentage = int((100 * completed / max(total, 1)) + 0.5)

        best_outcome = None
        if total > 0:
            best_ratio = -1.0
            for name, done, count in by_outcome:
                ratio = done / count if count else 0.0
                if ratio > best_ratio:
                    best_outcome, best_ratio = name, ratio

        needs_attention = {
            name for name, done, count in by_outcome
            if count and done / count < 1.0
        }

        return CompletionStats(
            completed=completed,
            total=total,
            percentage=percentage,
            by_outcome=by_outcome,
            streak_days=self.day_number,
            best_outcome=best_outcome,
            needs_attention=needs_attention,
        )


@dataclass
class FiveYearVision:
    """Long-horizon vision text per domain."""
    work: str = ""
    health: str = ""
    family: str = ""
    created: datetime = field(default_factory=utc_now)
    modified: datetime = field(default_factory=utc_now)

    def get_vision(self, outcome_type: OutcomeType) -> str:
        return getattr(self, OutcomeType(outcome_type).value.lower())

    def set_vision(self, outcome_type: OutcomeType, vision: str) -> None:
        vision = truncate_text(vision, LIMITS.MAX_VISION_LENGTH, "Vision")
        setattr(self, OutcomeType(outcome_type).value.lower(), vision)
        self.modified = utc_now()


@dataclass
class ActionTemplates:
    """Named lists of up to five action texts."""
    templates: Dict[str, List[str]] = field(default_factory=dict)
    created: datetime = field(default_factory=utc_now)
    modified: datetime = field(default_factory=utc_now)

    def add_template(self, name: str, actions: List[str]) -> None:
        """Add or replace a template; keeps the first five actions."""
        self.templates[name] = [
            truncate_text(text, LIMITS.MAX_ACTION_LENGTH)
            for text in actions[:LIMITS.MAX_TEMPLATE_ACTIONS]
        ]
        self.modified = utc_now()

    def remove_template(self, name: str) -> bool:
        removed = self.templates.pop(name, None) is not None
        if removed:
            self.modified = utc_now()
        return removed

    def get_template(self, name: str) -> Optional[List[str]]:
        return self.templates.get(name)

    def get_template_names(self) -> List[str]:
        return sorted(self.templates)
