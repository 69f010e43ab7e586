"""
CLI: focusfive
Small command surface over the persistence core.
"""
from datetime import date
from pathlib import Path
from typing import Optional

import click

from focusfive import storage
from focusfive.config import Config, load_config
from focusfive.derivation import calculate_streak, review_week
from focusfive.exceptions import FocusFiveError
from focusfive.logger import setup_logging
from focusfive.session import Session
from focusfive.tracking.models import Review

DATE_TYPE = click.DateTime(formats=["%Y-%m-%d"])


def _day(value) -> date:
    return value.date() if value else date.today()


def _fail(error: FocusFiveError) -> click.ClickException:
    return click.ClickException(error.get_user_message())


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Root directory for goals and sidecar files.",
)
@click.pass_context
def focusfive(ctx: click.Context, data_dir: Optional[Path]):
    """FocusFive daily goals"""
    try:
        config = Config.for_root(data_dir) if data_dir else load_config()
    except FocusFiveError as e:
        raise _fail(e) from e
    setup_logging(config.logs_dir)
    ctx.obj = config


@focusfive.command()
@click.option("--date", "day", type=DATE_TYPE, default=None, help="Day to report (YYYY-MM-DD).")
@click.pass_obj
def status(config: Config, day):
    """Show completion for a day"""
    day = _day(day)
    try:
        goals = storage.load_or_create_goals(day, config)
        streak = calculate_streak(day, config)
    except FocusFiveError as e:
        raise _fail(e) from e

    stats = goals.completion_stats()
    click.echo(f"{day.isoformat()}: {stats.completed}/{stats.total} ({stats.percentage}%)")
    for name, done, total in stats.by_outcome:
        click.echo(f"  {name}: {done}/{total}")
    if stats.best_outcome:
        click.echo(f"Best: {stats.best_outcome}")
    if stats.needs_attention:
        click.echo(f"Needs attention: {', '.join(sorted(stats.needs_attention))}")
    click.echo(f"Streak: {streak} day(s)")


@focusfive.command()
@click.option("--date", "day", type=DATE_TYPE, default=None, help="Day receiving the actions.")
@click.pass_obj
def carry(config: Config, day):
    """Carry yesterday's unfinished actions into empty slots"""
    try:
        session = Session.open(config, _day(day))
        filled = session.carry_over_from_yesterday()
        session.flush()
    except FocusFiveError as e:
        raise _fail(e) from e

    if not filled:
        click.echo("Nothing to carry over")
        return
    click.echo(f"Carried over {len(filled)} action(s):")
    for action in filled:
        click.echo(f"  - {action.text}")


@focusfive.command()
@click.argument("indicator_id")
@click.argument("value", type=float)
@click.option("--date", "day", type=DATE_TYPE, default=None, help="Observation date.")
@click.option("--note", default=None, help="Free-form note.")
@click.pass_obj
def observe(config: Config, indicator_id: str, value: float, day, note: Optional[str]):
    """Record an observation for an indicator"""
    try:
        session = Session.open(config, _day(day))
        observation = session.record_observation(indicator_id, value, note=note)
    except FocusFiveError as e:
        raise _fail(e) from e

    click.echo(f"Recorded {observation.value:g} {observation.unit.label} on {observation.when.isoformat()}")


@focusfive.command()
@click.argument("score", type=int)
@click.option("--date", "day", type=DATE_TYPE, default=None, help="Any day in the reviewed week.")
@click.option("--notes", default=None, help="Review notes.")
@click.pass_obj
def review(config: Config, score: int, day, notes: Optional[str]):
    """Write the weekly review"""
    day = _day(day)
    week = review_week(day)
    try:
        entry = storage.load_review(week, config) or Review.new(day)
        entry.set_score(score)
        if notes is not None:
            entry.notes = notes
        path = storage.save_review(week, entry, config)
    except FocusFiveError as e:
        raise _fail(e) from e

    click.echo(f"Saved review {week[0]}-W{week[1]:02d} (score {score}) to {path}")


if __name__ == "__main__":
    focusfive()
