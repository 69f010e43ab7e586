"""
Session: the in-memory state of one day plus the long-lived artifacts.

Mutators change state, keep DayMeta reconciled and raise the matching dirty
flag. flush() writes only what is dirty, always in this order:

    goals -> day meta -> vision -> templates -> objectives -> indicators

After the goals are written DayMeta is reconciled again and flagged, so
the metadata on disk never references action ids missing from the markdown.
Observations bypass the flags: the log is append-only and written at once.
"""
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional, Set

from focusfive import derivation, storage
from focusfive.config import Config
from focusfive.day_meta import DayMeta
from focusfive.exceptions import FocusFiveError, InvalidFormat, NotFound
from focusfive.logger import get_logger
from focusfive.models import (
    Action,
    ActionStatus,
    ActionTemplates,
    DailyGoals,
    FiveYearVision,
    OutcomeType,
)
from focusfive.tracking.models import (
    IndicatorDef,
    IndicatorDirection,
    IndicatorKind,
    IndicatorUnit,
    Objective,
    Observation,
)
from focusfive.tracking.registry import IndicatorsData, ObjectivesData

logger = get_logger("session")


class Session:
    """Dirty-flag controller over one day's goals and the shared sidecars."""

    def __init__(
        self,
        config: Config,
        goals: DailyGoals,
        day_meta: Optional[DayMeta] = None,
        vision: Optional[FiveYearVision] = None,
        templates: Optional[ActionTemplates] = None,
        objectives: Optional[ObjectivesData] = None,
        indicators: Optional[IndicatorsData] = None,
    ):
        self.config = config
        self.goals = goals
        self.day_meta = day_meta if day_meta is not None else DayMeta.from_goals(goals)
        self.vision = vision or FiveYearVision()
        self.templates = templates or ActionTemplates()
        self.objectives = objectives or ObjectivesData()
        self.indicators = indicators or IndicatorsData()

        self.goals_dirty = False
        self.meta_dirty = False
        self.vision_dirty = False
        self.templates_dirty = False
        self.objectives_dirty = False
        self.indicators_dirty = False

    @classmethod
    def open(cls, config: Config, day: Optional[date] = None) -> "Session":
        """Load everything for `day` (default: today); nothing is written."""
        day = day or date.today()
        goals = storage.load_or_create_goals(day, config)
        session = cls(
            config,
            goals,
            day_meta=storage.load_or_create_day_meta(day, goals, config),
            vision=storage.load_or_create_vision(config),
            templates=storage.load_or_create_templates(config),
            objectives=storage.load_or_create_objectives(config),
            indicators=storage.load_or_create_indicators(config),
        )
        logger.info(f"Opened session for {day.isoformat()}")
        return session

    @property
    def day(self) -> date:
        return self.goals.date

    @property
    def is_dirty(self) -> bool:
        return any((
            self.goals_dirty,
            self.meta_dirty,
            self.vision_dirty,
            self.templates_dirty,
            self.objectives_dirty,
            self.indicators_dirty,
        ))

    # ========== Goals ==========

    def _goals_changed(self) -> None:
        self.day_meta.reconcile_with_goals(self.goals)
        self.goals_dirty = True
        self.meta_dirty = True

    def _action(self, outcome_type: OutcomeType, index: int) -> Action:
        actions = self.goals.outcome(outcome_type).actions
        if not 0 <= index < len(actions):
            raise InvalidFormat(f"Invalid action index: {index}")
        return actions[index]

    def cycle_action_status(self, outcome_type: OutcomeType, index: int) -> ActionStatus:
        """Advance one action's status; the explicit status is kept in DayMeta."""
        action = self._action(outcome_type, index)
        status = action.cycle_status()
        self._goals_changed()
        self.day_meta.update_status(action.id, status)
        return status

    def set_action_status(self, outcome_type: OutcomeType, index: int, status: ActionStatus) -> None:
        action = self._action(outcome_type, index)
        action.set_status(status)
        self._goals_changed()
        self.day_meta.update_status(action.id, action.status)

    def set_action_text(self, outcome_type: OutcomeType, index: int, text: str) -> None:
        self._action(outcome_type, index).set_text(text)
        self._goals_changed()

    def add_action(self, outcome_type: OutcomeType, text: str = "") -> Action:
        action = self.goals.outcome(outcome_type).add_action(text)
        self._goals_changed()
        return action

    def remove_action(self, outcome_type: OutcomeType, index: int) -> Action:
        action = self.goals.outcome(outcome_type).remove_action(index)
        self._goals_changed()
        return action

    def set_goal(self, outcome_type: OutcomeType, goal: Optional[str]) -> None:
        self.goals.outcome(outcome_type).set_goal(goal)
        self.goals_dirty = True

    def set_reflection(self, outcome_type: OutcomeType, reflection: Optional[str]) -> None:
        self.goals.outcome(outcome_type).set_reflection(reflection)
        self.goals_dirty = True

    def link_action_objective(self, action_id: str, objective_id: Optional[str]) -> bool:
        linked = self.day_meta.link_objective(action_id, objective_id)
        if linked:
            self.meta_dirty = True
        return linked

    def carry_over_from_yesterday(self, selected: Optional[Set[str]] = None) -> List[Action]:
        """Fill today's empty slots with yesterday's unfinished actions."""
        yesterday = storage.get_yesterday_goals(self.day, self.config)
        if yesterday is None:
            logger.info(f"No goals file for the day before {self.day.isoformat()}")
            return []
        filled = derivation.apply_carry_over(self.goals, yesterday, selected)
        if filled:
            self._goals_changed()
        return filled

    def apply_template(self, outcome_type: OutcomeType, name: str) -> List[Action]:
        actions = self.templates.get_template(name)
        if actions is None:
            raise NotFound(f"Template not found: {name}")
        adopted = derivation.apply_template(self.goals.outcome(outcome_type), actions)
        self._goals_changed()
        return adopted

    # ========== Vision / templates ==========

    def set_vision(self, outcome_type: OutcomeType, text: str) -> None:
        self.vision.set_vision(outcome_type, text)
        self.vision_dirty = True

    def save_template(self, name: str, actions: List[str]) -> None:
        self.templates.add_template(name, actions)
        self.templates_dirty = True

    def remove_template(self, name: str) -> bool:
        removed = self.templates.remove_template(name)
        if removed:
            self.templates_dirty = True
        return removed

    # ========== Objectives / indicators / observations ==========

    def add_objective(self, domain: OutcomeType, title: str, description: Optional[str] = None) -> Objective:
        objective = self.objectives.add(Objective.new(domain, title, description))
        self.objectives_dirty = True
        return objective

    def add_indicator(
        self,
        name: str,
        kind: IndicatorKind,
        unit: IndicatorUnit,
        objective_id: Optional[str] = None,
        target: Optional[float] = None,
        direction: IndicatorDirection = IndicatorDirection.HIGHER_IS_BETTER,
    ) -> IndicatorDef:
        indicator = IndicatorDef.new(name, kind, unit)
        indicator.objective_id = objective_id
        indicator.target = target
        indicator.direction = IndicatorDirection(direction)
        self.indicators.add(indicator)
        self.indicators_dirty = True
        return indicator

    def record_observation(
        self,
        indicator_id: str,
        value: float,
        when: Optional[date] = None,
        note: Optional[str] = None,
        action_id: Optional[str] = None,
    ) -> Observation:
        """Append an observation for a known indicator, using its unit."""
        indicator = self.indicators.get(indicator_id)
        if indicator is None:
            raise NotFound(f"Indicator not found: {indicator_id}")
        observation = Observation.new(
            indicator_id,
            when or self.day,
            value,
            indicator.unit,
            action_id=action_id,
            note=note,
        )
        storage.append_observation(observation, self.config)
        return observation

    # ========== Flush ==========

    def _write(self, flag: str, what: str, save: Callable[[], Path], written: List[Path]) -> None:
        if not getattr(self, flag):
            return
        try:
            path = save()
        except FocusFiveError as e:
            logger.error(f"Failed to save {what}: {e.message}", exc_info=True)
            raise
        setattr(self, flag, False)
        written.append(path)

    def flush(self) -> List[Path]:
        """
        Write every dirty artifact in order.

        Returns:
            Paths written in this pass

        Raises:
            FocusFiveError: the first failed write; its flag stays set and
                later artifacts are not attempted
        """
        written: List[Path] = []
        day = self.day

        if self.goals_dirty:
            self._write("goals_dirty", "goals", lambda: storage.write_goals_file(self.goals, self.config), written)
            self.day_meta.reconcile_with_goals(self.goals)
            self.meta_dirty = True

        self._write("meta_dirty", "day meta",
                    lambda: storage.save_day_meta(day, self.day_meta, self.config), written)
        self._write("vision_dirty", "vision",
                    lambda: storage.save_vision(self.vision, self.config), written)
        self._write("templates_dirty", "templates",
                    lambda: storage.save_templates(self.templates, self.config), written)
        self._write("objectives_dirty", "objectives",
                    lambda: storage.save_objectives(self.objectives, self.config), written)
        self._write("indicators_dirty", "indicators",
                    lambda: storage.save_indicators(self.indicators, self.config), written)

        if written:
            logger.info(f"Flushed {len(written)} file(s)")
        return written
