"""
Day metadata sidecar and the reconciliation engine.

Markdown is the source of truth for what is visible (existence, order,
text, completion). DayMeta carries what markdown cannot: stable action
identity, the richer status, origin and objective links.

reconcile() rebuilds DayMeta so that, per domain, entry i has the id of
action i:
- entries are matched by action id; unmatched actions get a fresh entry
- completed actions force status Done
- incomplete actions keep InProgress / Skipped / Blocked, otherwise Planned
- entries whose id no longer appears are dropped
"""
import copy
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from focusfive.config import LIMITS
from focusfive.logger import get_logger
from focusfive.models import Action, ActionOrigin, ActionStatus, DailyGoals, OUTCOME_ORDER, OutcomeType

logger = get_logger("day_meta")

# Statuses the markdown checkbox cannot express; kept while the action is unchecked.
RICH_STATUSES = frozenset({ActionStatus.IN_PROGRESS, ActionStatus.SKIPPED, ActionStatus.BLOCKED})


@dataclass
class ActionMeta:
    id: str
    status: ActionStatus = ActionStatus.PLANNED
    origin: ActionOrigin = ActionOrigin.MANUAL
    objective_id: Optional[str] = None
    notes: Optional[str] = None
    estimated_min: Optional[int] = None
    actual_min: Optional[int] = None
    priority: Optional[int] = None
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_action(cls, action: Action) -> "ActionMeta":
        status = ActionStatus.DONE if action.completed else ActionStatus.PLANNED
        return cls(id=action.id, status=status, origin=action.origin)


@dataclass
class DayMeta:
    work: List[ActionMeta] = field(default_factory=list)
    health: List[ActionMeta] = field(default_factory=list)
    family: List[ActionMeta] = field(default_factory=list)
    version: int = LIMITS.SCHEMA_VERSION

    @classmethod
    def from_goals(cls, goals: DailyGoals) -> "DayMeta":
        meta = cls()
        meta.reconcile_with_goals(goals)
        return meta

    def entries(self, outcome_type: OutcomeType) -> List[ActionMeta]:
        return getattr(self, OutcomeType(outcome_type).value.lower())

    def set_entries(self, outcome_type: OutcomeType, entries: List[ActionMeta]) -> None:
        setattr(self, OutcomeType(outcome_type).value.lower(), entries)

    def all_entries(self) -> List[ActionMeta]:
        return self.work + self.health + self.family

    def get(self, action_id: str) -> Optional[ActionMeta]:
        for entry in self.all_entries():
            if entry.id == action_id:
                return entry
        return None

    def update_status(self, action_id: str, status: ActionStatus) -> bool:
        """Record an explicit status change (e.g. from a UI cycle)."""
        entry = self.get(action_id)
        if entry is None:
            return False
        entry.status = ActionStatus(status)
        return True

    def link_objective(self, action_id: str, objective_id: Optional[str]) -> bool:
        """Point an action at an objective; dangling ids are allowed."""
        entry = self.get(action_id)
        if entry is None:
            return False
        entry.objective_id = objective_id
        return True

    def reconcile_with_goals(self, goals: DailyGoals) -> None:
        """Align this DayMeta with `goals` in place."""
        for outcome_type in OUTCOME_ORDER:
            actions = goals.outcome(outcome_type).actions
            before = self.entries(outcome_type)
            after = reconcile_entries(before, actions)
            dropped = len({e.id for e in before} - {e.id for e in after})
            if dropped:
                logger.info(f"Dropped {dropped} stale {outcome_type.value} metadata entries")
            self.set_entries(outcome_type, after)


def sync_status(entry: ActionMeta, action: Action) -> None:
    if action.completed:
        entry.status = ActionStatus.DONE
    elif entry.status not in RICH_STATUSES:
        entry.status = ActionStatus.PLANNED


def reconcile_entries(entries: List[ActionMeta], actions: List[Action]) -> List[ActionMeta]:
    """Return entries matching `actions` one-to-one, reusing entries by id."""
    by_id: Dict[str, ActionMeta] = {entry.id: entry for entry in entries}
    result = []
    for action in actions:
        entry = by_id.get(action.id)
        if entry is None:
            entry = ActionMeta.from_action(action)
        else:
            entry.origin = action.origin
        sync_status(entry, action)
        result.append(entry)
    return result


def reconcile(meta: DayMeta, goals: DailyGoals) -> DayMeta:
    """Pure variant of DayMeta.reconcile_with_goals; `meta` is left untouched."""
    result = copy.deepcopy(meta)
    result.reconcile_with_goals(goals)
    return result
