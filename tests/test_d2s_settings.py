import json
from pathlib import Path

import d2s_settings


def test_missing_file_gives_defaults(tmp_path: Path):
    assert d2s_settings.load_settings(tmp_path / "settings.json") == d2s_settings.DEFAULT_SETTINGS


def test_malformed_file_gives_defaults(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert d2s_settings.load_settings(path) == d2s_settings.DEFAULT_SETTINGS
    path.write_text("[1, 2, 3]", encoding="utf-8")
    assert d2s_settings.load_settings(path) == d2s_settings.DEFAULT_SETTINGS


def test_wrong_types_are_ignored(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps({"language": "zh_cn", "make_backup": "yes", "profile": 3, "extra": True}),
        encoding="utf-8",
    )
    loaded = d2s_settings.load_settings(path)
    assert loaded["language"] == "zh_cn"
    assert loaded["make_backup"] is True
    assert loaded["profile"] == "minimal"
    assert "extra" not in loaded


def test_round_trip(tmp_path: Path):
    path = tmp_path / "settings.json"
    settings = dict(d2s_settings.DEFAULT_SETTINGS, profile="full", pause_on_exit=False, last_path="C:/x.d2s")
    assert d2s_settings.save_settings(settings, path) is True
    assert d2s_settings.load_settings(path) == settings


def test_save_failure_is_reported(tmp_path: Path):
    assert d2s_settings.save_settings({}, tmp_path / "missing" / "settings.json") is False
