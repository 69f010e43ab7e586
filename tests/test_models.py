from datetime import date

import pytest

from focusfive.config import LIMITS
from focusfive.exceptions import InvalidFormat, PreconditionViolation
from focusfive.models import (
    Action,
    ActionOrigin,
    ActionStatus,
    ActionTemplates,
    DailyGoals,
    FiveYearVision,
    Outcome,
    OutcomeType,
)


def test_status_cycle_keeps_completed_in_sync():
    action = Action.new("Write report")
    seen = []
    for _ in range(5):
        action.cycle_status()
        seen.append((action.status, action.completed))

    assert seen == [
        (ActionStatus.IN_PROGRESS, False),
        (ActionStatus.DONE, True),
        (ActionStatus.SKIPPED, False),
        (ActionStatus.BLOCKED, False),
        (ActionStatus.PLANNED, False),
    ]


def test_setting_completed_updates_status():
    action = Action.new("Run")
    action.completed = True
    assert action.status == ActionStatus.DONE
    action.completed = False
    assert action.status == ActionStatus.PLANNED


def test_completed_constructor_forces_done():
    action = Action(text="x", completed=True, status=ActionStatus.BLOCKED)
    assert action.status == ActionStatus.DONE
    assert action.completed is True


def test_status_change_touches_modified():
    action = Action.new("Read")
    old = action.modified.replace(year=2000)
    object.__setattr__(action, "modified", old)
    action.set_status(ActionStatus.BLOCKED)
    assert action.modified > old


def test_text_is_truncated_on_create_and_update():
    action = Action.new("a" * 600)
    assert len(action.text) == LIMITS.MAX_ACTION_LENGTH
    action.set_text("b" * 501)
    assert len(action.text) == LIMITS.MAX_ACTION_LENGTH


def test_action_ids_are_unique_and_long():
    ids = {Action.new().id for _ in range(100)}
    assert len(ids) == 100
    assert all(len(i) >= 32 for i in ids)


def test_new_with_origin():
    action = Action.new_with_origin("Stretch", ActionOrigin.TEMPLATE)
    assert action.origin == ActionOrigin.TEMPLATE
    assert action.status == ActionStatus.PLANNED


def test_outcome_defaults_to_three_empty_actions():
    outcome = Outcome(OutcomeType.HEALTH)
    assert len(outcome.actions) == 3
    assert all(a.is_empty for a in outcome.actions)


def test_outcome_rejects_sixth_action():
    outcome = Outcome(OutcomeType.WORK)
    outcome.add_action("four")
    outcome.add_action("five")
    with pytest.raises(PreconditionViolation):
        outcome.add_action("six")
    assert len(outcome.actions) == 5


def test_outcome_keeps_last_action():
    outcome = Outcome(OutcomeType.FAMILY, actions=[Action.new("only")])
    with pytest.raises(PreconditionViolation):
        outcome.remove_action(0)


def test_outcome_remove_bad_index():
    outcome = Outcome(OutcomeType.FAMILY)
    with pytest.raises(InvalidFormat):
        outcome.remove_action(7)


def test_outcome_constructor_validates_size():
    with pytest.raises(PreconditionViolation):
        Outcome(OutcomeType.WORK, actions=[])
    with pytest.raises(PreconditionViolation):
        Outcome(OutcomeType.WORK, actions=[Action.new() for _ in range(6)])


def test_goal_is_truncated():
    outcome = Outcome(OutcomeType.WORK, goal="g" * 150)
    assert len(outcome.goal) == LIMITS.MAX_GOAL_LENGTH


def test_outcome_completion_helpers():
    outcome = Outcome(
        OutcomeType.WORK,
        actions=[Action.from_markdown("a", True), Action.from_markdown("b", False), Action.new()],
    )
    assert outcome.count_completed() == 1
    assert outcome.completion_percentage() == 33
    assert outcome.empty_slots() == [2]
    assert [a.text for a in outcome.uncompleted_actions()] == ["b"]


def test_completion_stats():
    goals = DailyGoals(
        date=date(2025, 1, 15),
        day_number=4,
        work=Outcome(OutcomeType.WORK, actions=[Action.from_markdown("a", True)]),
        health=Outcome(OutcomeType.HEALTH, actions=[
            Action.from_markdown("b", True), Action.from_markdown("c", False),
        ]),
    )
    stats = goals.completion_stats()

    assert stats.completed == 2
    assert stats.total == 6
    assert stats.percentage == 33
    assert stats.by_outcome == [("Work", 1, 1), ("Health", 1, 2), ("Family", 0, 3)]
    assert stats.best_outcome == "Work"
    assert stats.needs_attention == {"Health", "Family"}
    assert stats.streak_days == 4


def test_completion_stats_rounds_half_up():
    goals = DailyGoals(
        date=date(2025, 1, 15),
        work=Outcome(OutcomeType.WORK, actions=[Action.from_markdown("a", True), Action.new()]),
        health=Outcome(OutcomeType.HEALTH, actions=[Action.new()]),
        family=Outcome(OutcomeType.FAMILY, actions=[Action.new() for _ in range(5)]),
    )
    # 1 of 8 -> 12.5%
    assert goals.completion_stats().percentage == 13


def test_best_outcome_ties_go_to_domain_order():
    goals = DailyGoals(date=date(2025, 1, 15))
    stats = goals.completion_stats()
    assert stats.best_outcome == "Work"
    assert stats.streak_days is None


def test_find_action():
    goals = DailyGoals(date=date(2025, 1, 15))
    target = goals.health.actions[1]
    assert goals.find_action(target.id) == (OutcomeType.HEALTH, 1, target)
    assert goals.find_action("missing") is None


def test_vision_set_and_truncate():
    vision = FiveYearVision()
    vision.set_vision(OutcomeType.HEALTH, "v" * 1200)
    assert len(vision.get_vision(OutcomeType.HEALTH)) == 1000
    assert vision.get_vision(OutcomeType.WORK) == ""


def test_templates_are_capped_and_sorted():
    templates = ActionTemplates()
    templates.add_template("morning", ["a", "b", "c", "d", "e", "f"])
    templates.add_template("Evening", ["x"])

    assert templates.get_template("morning") == ["a", "b", "c", "d", "e"]
    assert templates.get_template_names() == ["Evening", "morning"]
    assert templates.remove_template("Evening") is True
    assert templates.remove_template("Evening") is False
    assert templates.get_template("evening") is None


def test_outcome_goal_is_normalized_on_construction():
    outcome = Outcome(OutcomeType.WORK, goal=" Ship\r\nv1  ")
    assert outcome.goal == "Ship v1"
    assert Outcome(OutcomeType.WORK, goal="\n \n").goal is None

    long_goal = "g" * (LIMITS.MAX_GOAL_LENGTH - 1) + " tail"
    outcome.set_goal(long_goal)
    assert len(outcome.goal) <= LIMITS.MAX_GOAL_LENGTH
    assert outcome.goal == outcome.goal.strip()


def test_set_reflection_keeps_inner_indentation():
    outcome = Outcome(OutcomeType.HEALTH)
    outcome.set_reflection("\n  indented\n\n\tlast\n  \n")
    assert outcome.reflection == "  indented\n\n\tlast"
    outcome.set_reflection(None)
    assert outcome.reflection is None
