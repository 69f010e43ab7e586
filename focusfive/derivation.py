"""
Query and derivation helpers over loaded data.

Nothing here writes to disk; callers persist the mutated goals through
storage or a Session.
"""
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Set, Tuple

from focusfive.config import LIMITS, Config
from focusfive.exceptions import FocusFiveError
from focusfive.logger import get_logger
from focusfive.models import Action, ActionOrigin, ActionStatus, DailyGoals, OUTCOME_ORDER, Outcome, OutcomeType
from focusfive.storage import goals_path, read_goals_file
from focusfive.tracking.models import IndicatorDef, IndicatorDirection, Observation

logger = get_logger("derivation")

# WithinRange tolerance around the target
WITHIN_RANGE_TOLERANCE = 0.10


def uncompleted_actions(goals: DailyGoals) -> Dict[OutcomeType, List[Action]]:
    """Carry-over candidates per domain: non-empty text, not completed."""
    return {outcome.outcome_type: outcome.uncompleted_actions() for outcome in goals.outcomes()}


def apply_carry_over(
    today: DailyGoals,
    yesterday: DailyGoals,
    selected: Optional[Set[str]] = None,
) -> List[Action]:
    """
    Copy yesterday's unfinished actions into today's empty slots.

    Per domain, candidates fill empty slots in positional order. Non-empty
    slots are never overwritten and no slots are added; candidates that do
    not fit are skipped.

    Args:
        today: goals receiving the actions (mutated in place)
        yesterday: source goals
        selected: optional set of source action ids to restrict the copy to

    Returns:
        The destination actions that were filled
    """
    filled = []
    for outcome_type in OUTCOME_ORDER:
        source = yesterday.outcome(outcome_type).uncompleted_actions()
        if selected is not None:
            source = [a for a in source if a.id in selected]

        destination = today.outcome(outcome_type)
        slots = destination.empty_slots()
        for slot, candidate in zip(slots, source):
            action = destination.actions[slot]
            action.text = candidate.text
            action.origin = ActionOrigin.CARRY_OVER
            action.status = ActionStatus.PLANNED
            filled.append(action)

        skipped = len(source) - len(slots)
        if skipped > 0:
            logger.info(f"No room to carry {skipped} {outcome_type.value} action(s)")
    return filled


def apply_template(outcome: Outcome, actions: List[str]) -> List[Action]:
    """
    Fill an outcome from a template.

    The outcome first grows (up to five actions) to the template's length,
    then each template entry goes into the slot at its position if that slot
    is empty. Adopted actions get origin Template.
    """
    actions = actions[:LIMITS.MAX_TEMPLATE_ACTIONS]
    while len(outcome.actions) < min(len(actions), LIMITS.MAX_ACTIONS):
        outcome.add_action()

    adopted = []
    for action, text in zip(outcome.actions, actions):
        if action.is_empty and text.strip():
            action.text = text
            action.origin = ActionOrigin.TEMPLATE
            action.status = ActionStatus.PLANNED
            adopted.append(action)
    return adopted


def has_completion(goals: DailyGoals) -> bool:
    return any(
        action.completed and not action.is_empty
        for outcome in goals.outcomes()
        for action in outcome.actions
    )


def calculate_streak(today: date, config: Config) -> int:
    """
    Count consecutive days ending at `today` with at least one completed action.

    A missing or unreadable day ends the streak. Bounded by MAX_STREAK_DAYS.
    """
    streak = 0
    current = today
    while streak < LIMITS.MAX_STREAK_DAYS:
        path = goals_path(current, config)
        if not path.exists():
            break
        try:
            goals = read_goals_file(path)
        except FocusFiveError as e:
            logger.warning(f"Streak stopped at unreadable file {path}: {e.message}")
            break
        if not has_completion(goals):
            break
        streak += 1
        current -= timedelta(days=1)
    return streak


def observations_for_indicator(observations: Iterable[Observation], indicator_id: str) -> List[Observation]:
    return [o for o in observations if o.indicator_id == indicator_id]


def latest_observation(observations: Iterable[Observation], indicator_id: str) -> Optional[Observation]:
    """Most recent observation by date; later records win ties."""
    latest = None
    for observation in observations_for_indicator(observations, indicator_id):
        if latest is None or observation.when >= latest.when:
            latest = observation
    return latest


def latest_value(observations: Iterable[Observation], indicator_id: str) -> Optional[float]:
    observation = latest_observation(observations, indicator_id)
    return observation.value if observation is not None else None


def indicator_progress(indicator: IndicatorDef, value: float) -> Optional[float]:
    """
    Progress toward the indicator target in [0.0, 1.0].

    Returns None when the indicator has no (non-zero) target.
    """
    target = indicator.target
    if not target:
        return None

    if indicator.direction == IndicatorDirection.HIGHER_IS_BETTER:
        progress = value / target
    elif indicator.direction == IndicatorDirection.LOWER_IS_BETTER:
        if value <= target:
            progress = 1.0
        else:
            progress = target / value
    else:
        progress = 1.0 if abs(value - target) <= abs(target) * WITHIN_RANGE_TOLERANCE else 0.0

    return max(0.0, min(progress, 1.0))


def review_week(day: date) -> Tuple[int, int]:
    """ISO (week-year, week) for a date; week-year may differ from day.year."""
    year, week, _ = day.isocalendar()
    return year, week
