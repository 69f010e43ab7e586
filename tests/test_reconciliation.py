from datetime import date

from focusfive.day_meta import ActionMeta, DayMeta, reconcile
from focusfive.models import Action, ActionOrigin, ActionStatus, DailyGoals, OUTCOME_ORDER, Outcome, OutcomeType


def _assert_aligned(meta, goals):
    for outcome_type in OUTCOME_ORDER:
        entries = meta.entries(outcome_type)
        actions = goals.outcome(outcome_type).actions
        assert [e.id for e in entries] == [a.id for a in actions]


def test_reconcile_preserves_in_progress():
    action = Action.new("Draft proposal")
    goals = DailyGoals(date=date(2025, 1, 15), work=Outcome(OutcomeType.WORK, actions=[action]))
    meta = DayMeta(work=[ActionMeta(id=action.id, status=ActionStatus.IN_PROGRESS)])

    result = reconcile(meta, goals)

    assert result.work[0].status == ActionStatus.IN_PROGRESS
    _assert_aligned(result, goals)


def test_completion_forces_done():
    action = Action.from_markdown("Ship", True)
    goals = DailyGoals(date=date(2025, 1, 15), work=Outcome(OutcomeType.WORK, actions=[action]))
    meta = DayMeta(work=[ActionMeta(id=action.id, status=ActionStatus.BLOCKED)])

    assert reconcile(meta, goals).work[0].status == ActionStatus.DONE


def test_stale_done_falls_back_to_planned():
    action = Action.new("Ship")
    goals = DailyGoals(date=date(2025, 1, 15), work=Outcome(OutcomeType.WORK, actions=[action]))
    meta = DayMeta(work=[ActionMeta(id=action.id, status=ActionStatus.DONE)])

    assert reconcile(meta, goals).work[0].status == ActionStatus.PLANNED


def test_unknown_entries_are_dropped_and_new_ones_created():
    goals = DailyGoals(date=date(2025, 1, 15))
    goals.health.actions[0].completed = True
    meta = DayMeta(health=[ActionMeta(id="gone", status=ActionStatus.SKIPPED, notes="old")])

    result = reconcile(meta, goals)

    _assert_aligned(result, goals)
    assert result.get("gone") is None
    assert [e.status for e in result.health] == [ActionStatus.DONE, ActionStatus.PLANNED, ActionStatus.PLANNED]


def test_reconcile_is_idempotent(goals):
    meta = DayMeta(work=[ActionMeta(id=goals.work.actions[1].id, status=ActionStatus.SKIPPED, tags=["x"])])

    once = reconcile(meta, goals)
    twice = reconcile(once, goals)

    assert once == twice


def test_reconcile_does_not_mutate_input(goals):
    meta = DayMeta(work=[ActionMeta(id="stale")])
    reconcile(meta, goals)
    assert [e.id for e in meta.work] == ["stale"]


def test_identity_survives_reordering_and_text_edits():
    first, second = Action.new("a"), Action.new("b")
    goals = DailyGoals(date=date(2025, 1, 15), work=Outcome(OutcomeType.WORK, actions=[first, second]))
    meta = DayMeta.from_goals(goals)
    meta.link_objective(second.id, "obj-1")

    second.set_text("b, edited")
    goals.work.actions.reverse()
    meta.reconcile_with_goals(goals)

    assert [e.id for e in meta.work] == [second.id, first.id]
    assert meta.work[0].objective_id == "obj-1"


def test_origin_follows_action():
    action = Action.new("")
    goals = DailyGoals(date=date(2025, 1, 15), family=Outcome(OutcomeType.FAMILY, actions=[action]))
    meta = DayMeta.from_goals(goals)

    action.origin = ActionOrigin.CARRY_OVER
    meta.reconcile_with_goals(goals)

    assert meta.family[0].origin == ActionOrigin.CARRY_OVER


def test_added_and_removed_actions_keep_lengths_equal(goals):
    meta = DayMeta.from_goals(goals)
    goals.work.add_action("extra")
    goals.health.remove_action(0)
    meta.reconcile_with_goals(goals)

    _assert_aligned(meta, goals)
    assert len(meta.work) == 4
    assert len(meta.health) == 2


def test_update_status_unknown_id():
    meta = DayMeta()
    assert meta.update_status("nope", ActionStatus.DONE) is False
    assert meta.link_objective("nope", "o") is False
