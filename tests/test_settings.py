"""
Tests for settings loading.
"""

import json

from settings import AppConfig, load_config


def test_missing_settings_file_gives_defaults(tmp_path):
    config = load_config(str(tmp_path / "missing.json"))
    assert config == AppConfig()
    assert config.storage_key == "movies:data"
    assert config.debounce_ms == 250


def test_known_keys_are_applied(tmp_path):
    settings_file = tmp_path / "settings.json"
    settings_file.write_text(json.dumps({"debounce_ms": 400, "poster_size": [100, 150], "unknown": 1}), encoding="utf-8")
    config = load_config(str(settings_file))
    assert config.debounce_ms == 400
    assert config.poster_size == (100, 150)


def test_unreadable_settings_file_gives_defaults(tmp_path):
    settings_file = tmp_path / "settings.json"
    settings_file.write_text("{oops", encoding="utf-8")
    assert load_config(str(settings_file)) == AppConfig()


def test_overrides_win_and_none_is_ignored(tmp_path):
    config = load_config(str(tmp_path / "missing.json"), data_file="elsewhere.json", log_level=None)
    assert config.data_file == "elsewhere.json"
    assert config.log_level == "INFO"


def test_wrongly_typed_values_are_dropped(tmp_path):
    settings_file = tmp_path / "settings.json"
    settings_file.write_text(json.dumps({
        "debounce_ms": "abc",
        "poster_size": [100, "tall"],
        "log_level": 3,
        "request_timeout": [2, 5.5],
        "preview_size": [True, 10],
    }), encoding="utf-8")
    config = load_config(str(settings_file))
    assert config.debounce_ms == 250
    assert config.poster_size == (140, 200)
    assert config.log_level == "INFO"
    assert config.preview_size == (280, 160)
    assert config.request_timeout == (2.0, 5.5)
