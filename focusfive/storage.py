"""
Persistence API for FocusFive.

Every function takes the Config explicitly. Loaders for sidecar documents
follow load-or-create semantics: a missing file yields an empty default and
nothing is written until the matching save_* call. All non-append writes go
through atomic_io.atomic_write.
"""
from datetime import date, timedelta
from pathlib import Path
from typing import List, Optional, Tuple, Union

from focusfive import sidecar
from focusfive.atomic_io import append_line, atomic_write
from focusfive.config import Config
from focusfive.day_meta import DayMeta
from focusfive.exceptions import InvalidFormat, IoFailure, NotFound
from focusfive.logger import get_logger
from focusfive.markdown import generate_markdown, parse_markdown
from focusfive.models import ActionTemplates, DailyGoals, FiveYearVision
from focusfive.tracking.models import Observation, Review, validate_score
from focusfive.tracking.registry import IndicatorsData, ObjectivesData

logger = get_logger("storage")

IsoWeek = Tuple[int, int]


# ========== Paths ==========

def goals_path(day: date, config: Config) -> Path:
    return config.goals_dir / f"{day.isoformat()}.md"


def day_meta_path(day: date, config: Config) -> Path:
    return config.meta_dir / f"{day.isoformat()}.meta.json"


def review_path(week: IsoWeek, config: Config) -> Path:
    year, week_number = week
    return config.reviews_dir / f"{year:04d}-W{week_number:02d}.json"


def _ensure_dir(directory: Path) -> None:
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise IoFailure(f"Failed to create directory {directory}: {e}", str(directory)) from e


def _read_text(path: Path) -> Optional[str]:
    """File content, or None when the file does not exist."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        raise IoFailure(f"Failed to read {path}: {e}", str(path)) from e


def _write_document(path: Path, content: str) -> Path:
    _ensure_dir(path.parent)
    atomic_write(path, content)
    logger.info(f"Saved {path}")
    return path


# ========== Daily goals (markdown) ==========

def read_goals_file(path: Union[str, Path]) -> DailyGoals:
    """
    Read and parse a daily goals file.

    Raises:
        NotFound: the file does not exist
        InvalidFormat: the file has no valid date header
        IoFailure: the file could not be read
    """
    path = Path(path)
    content = _read_text(path)
    if content is None:
        raise NotFound(f"Goals file not found: {path}", str(path))
    return parse_markdown(content)


def write_goals_file(goals: DailyGoals, config: Config) -> Path:
    """Write goals to `{goals_dir}/YYYY-MM-DD.md` atomically."""
    return _write_document(goals_path(goals.date, config), generate_markdown(goals))


def load_or_create_goals(day: date, config: Config) -> DailyGoals:
    """Goals for `day`, or a fresh empty day when the file is missing."""
    path = goals_path(day, config)
    if not path.exists():
        return DailyGoals(date=day)
    return read_goals_file(path)


def get_yesterday_goals(today: date, config: Config) -> Optional[DailyGoals]:
    path = goals_path(today - timedelta(days=1), config)
    if not path.exists():
        return None
    return read_goals_file(path)


# ========== Day metadata ==========

def load_or_create_day_meta(day: date, goals: DailyGoals, config: Config) -> DayMeta:
    """Load the DayMeta for `day` (or start empty) and reconcile it with `goals`."""
    path = day_meta_path(day, config)
    content = _read_text(path)
    meta = sidecar.decode_day_meta(content, str(path)) if content is not None else DayMeta()
    meta.reconcile_with_goals(goals)
    return meta


def save_day_meta(day: date, meta: DayMeta, config: Config) -> Path:
    return _write_document(day_meta_path(day, config), sidecar.encode_day_meta(meta))


# ========== Objectives / indicators ==========

def load_or_create_objectives(config: Config) -> ObjectivesData:
    path = config.objectives_path
    content = _read_text(path)
    if content is None:
        return ObjectivesData()
    return sidecar.decode_objectives(content, str(path))


def save_objectives(data: ObjectivesData, config: Config) -> Path:
    return _write_document(config.objectives_path, sidecar.encode_objectives(data))


def load_or_create_indicators(config: Config) -> IndicatorsData:
    path = config.indicators_path
    content = _read_text(path)
    if content is None:
        return IndicatorsData()
    return sidecar.decode_indicators(content, str(path))


def save_indicators(data: IndicatorsData, config: Config) -> Path:
    return _write_document(config.indicators_path, sidecar.encode_indicators(data))


# ========== Vision / templates ==========

def load_or_create_vision(config: Config) -> FiveYearVision:
    path = config.vision_path
    content = _read_text(path)
    if content is None:
        return FiveYearVision()
    return sidecar.decode_vision(content, str(path))


def save_vision(vision: FiveYearVision, config: Config) -> Path:
    return _write_document(config.vision_path, sidecar.encode_vision(vision))


def load_or_create_templates(config: Config) -> ActionTemplates:
    path = config.templates_path
    content = _read_text(path)
    if content is None:
        return ActionTemplates()
    return sidecar.decode_templates(content, str(path))


def save_templates(templates: ActionTemplates, config: Config) -> Path:
    return _write_document(config.templates_path, sidecar.encode_templates(templates))


# ========== Observations ==========

def append_observation(observation: Observation, config: Config) -> None:
    """Append one record to observations.ndjson, creating it if needed."""
    _ensure_dir(config.data_root)
    append_line(config.observations_path, sidecar.encode_observation(observation))
    logger.debug(f"Appended observation {observation.id} for {observation.indicator_id}")


def read_observations(config: Config) -> List[Observation]:
    """Every observation in file order; malformed lines fail the whole read."""
    path = config.observations_path
    content = _read_text(path)
    if content is None:
        return []

    observations = []
    for line_number, line in enumerate(content.split("\n"), start=1):
        if not line.strip():
            continue
        observations.append(sidecar.decode_observation(line, str(path), line_number))
    return observations


def read_observations_range(start: date, end: date, config: Config) -> List[Observation]:
    """Observations with start <= when <= end, in file order."""
    if end < start:
        return []
    return [o for o in read_observations(config) if start <= o.when <= end]


# ========== Reviews ==========

def _check_week(week: IsoWeek) -> None:
    year, week_number = week
    if not 1 <= week_number <= 53:
        raise InvalidFormat(f"ISO week must be between 1 and 53, got {week_number}")
    if not 1 <= year <= 9999:
        raise InvalidFormat(f"Invalid year: {year}")


def save_review(week: IsoWeek, review: Review, config: Config) -> Path:
    """
    Write the review for an ISO week to `reviews/YYYY-Www.json`.

    Raises:
        InvalidFormat: week outside 1..53
        PreconditionViolation: score outside 1..5
    """
    _check_week(week)
    validate_score(review.score_1_to_5)
    return _write_document(review_path(week, config), sidecar.encode_review(review))


def load_review(week: IsoWeek, config: Config) -> Optional[Review]:
    _check_week(week)
    path = review_path(week, config)
    content = _read_text(path)
    if content is None:
        return None
    return sidecar.decode_review(content, str(path))
