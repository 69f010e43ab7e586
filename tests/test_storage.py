import json
from datetime import date

import pytest

from focusfive import storage
from focusfive.config import Config, load_config
from focusfive.exceptions import InvalidFormat, NotFound, SerializationFailure
from focusfive.models import ActionStatus, ActionTemplates, FiveYearVision, OutcomeType
from focusfive.tracking.models import IndicatorDef, IndicatorKind, IndicatorUnit
from focusfive.tracking.registry import IndicatorsData


def test_write_and_read_goals_file(goals, config):
    path = storage.write_goals_file(goals, config)

    assert path == config.goals_dir / "2025-01-15.md"
    assert path.read_text(encoding="utf-8").startswith("# January 15, 2025 - Day 12\n")

    loaded = storage.read_goals_file(path)
    assert loaded.work.goal == "Ship MVP"
    assert loaded.work.actions[0].completed


def test_write_goals_creates_missing_directory(goals, tmp_path):
    config = Config.for_root(tmp_path / "fresh")
    path = storage.write_goals_file(goals, config)
    assert path.exists()


def test_read_missing_goals_file(config):
    with pytest.raises(NotFound):
        storage.read_goals_file(config.goals_dir / "2025-01-01.md")


def test_load_or_create_goals(goals, config):
    empty = storage.load_or_create_goals(date(2025, 2, 1), config)
    assert empty.date == date(2025, 2, 1)
    assert not (config.goals_dir / "2025-02-01.md").exists()

    storage.write_goals_file(goals, config)
    assert storage.load_or_create_goals(goals.date, config).work.goal == "Ship MVP"


def test_get_yesterday_goals(goals, config):
    assert storage.get_yesterday_goals(date(2025, 1, 16), config) is None
    storage.write_goals_file(goals, config)
    assert storage.get_yesterday_goals(date(2025, 1, 16), config).date == goals.date


def test_day_meta_load_or_create_reconciles_without_writing(goals, config):
    meta = storage.load_or_create_day_meta(goals.date, goals, config)

    assert [m.id for m in meta.work] == [a.id for a in goals.work.actions]
    assert meta.work[0].status == ActionStatus.DONE
    assert not config.meta_dir.exists()


def test_day_meta_save_and_reload(goals, config):
    meta = storage.load_or_create_day_meta(goals.date, goals, config)
    meta.update_status(goals.work.actions[1].id, ActionStatus.BLOCKED)
    path = storage.save_day_meta(goals.date, meta, config)

    assert path == config.meta_dir / "2025-01-15.meta.json"
    reloaded = storage.load_or_create_day_meta(goals.date, goals, config)
    assert reloaded.work[1].status == ActionStatus.BLOCKED


def test_stale_day_meta_is_replaced_after_reparse(goals, config):
    storage.write_goals_file(goals, config)
    meta = storage.load_or_create_day_meta(goals.date, goals, config)
    storage.save_day_meta(goals.date, meta, config)

    reparsed = storage.read_goals_file(config.goals_dir / "2025-01-15.md")
    fresh = storage.load_or_create_day_meta(goals.date, reparsed, config)

    assert [m.id for m in fresh.work] == [a.id for a in reparsed.work.actions]
    assert fresh.work[0].status == ActionStatus.DONE


def test_load_or_create_defaults_do_not_create_files(config):
    assert storage.load_or_create_objectives(config).objectives == []
    assert storage.load_or_create_indicators(config).version == 1
    assert storage.load_or_create_templates(config).templates == {}
    assert storage.load_or_create_vision(config).work == ""
    assert sorted(p.name for p in config.data_root.iterdir()) == ["goals"]


def test_indicators_vision_templates_persist(config):
    indicators = IndicatorsData()
    old = indicators.add(IndicatorDef.new("Steps", IndicatorKind.LEADING, IndicatorUnit.count()))
    indicators.supersede(old.id, IndicatorDef.new("Steps v2", IndicatorKind.LEADING, IndicatorUnit.count()))
    storage.save_indicators(indicators, config)

    vision = FiveYearVision()
    vision.set_vision(OutcomeType.WORK, "Lead a small team")
    storage.save_vision(vision, config)

    templates = ActionTemplates()
    templates.add_template("Gym", ["Warm up", "Lift"])
    storage.save_templates(templates, config)

    loaded = storage.load_or_create_indicators(config)
    assert [i.active for i in loaded.indicators] == [False, True]
    assert loaded.indicators[1].lineage_of == old.id
    assert storage.load_or_create_vision(config).work == "Lead a small team"
    assert storage.load_or_create_templates(config).get_template("Gym") == ["Warm up", "Lift"]
    assert config.vision_path.parent == config.data_root


def test_corrupt_sidecar_raises(config):
    config.objectives_path.write_text("{broken", encoding="utf-8")
    with pytest.raises(SerializationFailure):
        storage.load_or_create_objectives(config)


def test_unsupported_version_raises(config):
    config.templates_path.write_text(json.dumps({"version": 9, "templates": {}}), encoding="utf-8")
    with pytest.raises(SerializationFailure):
        storage.load_or_create_templates(config)


def test_default_config_uses_home(tmp_path, monkeypatch):
    monkeypatch.delenv("FOCUSFIVE_DATA_DIR", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))

    config = Config.default()

    assert config.data_root == (tmp_path / "FocusFive").resolve()
    assert config.goals_dir == (tmp_path / "FocusFive" / "goals").resolve()


def test_default_config_without_home(monkeypatch):
    monkeypatch.delenv("HOME", raising=False)
    monkeypatch.delenv("FOCUSFIVE_DATA_DIR", raising=False)

    config = Config.default()

    assert config.goals_dir.is_absolute()


def test_data_dir_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv("FOCUSFIVE_DATA_DIR", str(tmp_path / "custom"))
    config = Config.default()
    assert config.data_root == (tmp_path / "custom").resolve()
    assert config.goals_dir == config.data_root / "goals"


def test_load_config_yaml_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("FOCUSFIVE_DATA_DIR", str(tmp_path / "root"))
    config_file = tmp_path / "config.yaml"
    config_file.write_text(f"goals_dir: {tmp_path / 'notes'}\n", encoding="utf-8")

    config = load_config(config_file)

    assert config.goals_dir == tmp_path / "notes"
    assert config.data_root == (tmp_path / "root").resolve()


def test_load_config_rejects_bad_yaml(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(SerializationFailure):
        load_config(config_file)


def test_review_week_bounds(config):
    with pytest.raises(InvalidFormat):
        storage.load_review((2025, 54), config)
