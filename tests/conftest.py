import sys
from datetime import date
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from focusfive.config import Config
from focusfive.models import Action, DailyGoals, Outcome, OutcomeType


@pytest.fixture
def config(tmp_path):
    cfg = Config.for_root(tmp_path / "FocusFive")
    cfg.goals_dir.mkdir(parents=True)
    return cfg


def make_outcome(outcome_type, items, goal=None):
    """Build an Outcome from (text, completed) pairs."""
    actions = [Action.from_markdown(text, done) for text, done in items]
    return Outcome(outcome_type=outcome_type, goal=goal, actions=actions)


@pytest.fixture
def goals():
    return DailyGoals(
        date=date(2025, 1, 15),
        day_number=12,
        work=make_outcome(
            OutcomeType.WORK,
            [("Fix critical bugs", True), ("", False), ("", False)],
            goal="Ship MVP",
        ),
    )
