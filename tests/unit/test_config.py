"""
Unit tests for clicklink.config.load_settings.

Covers defaults, file overrides, missing keys, the fatal missing-file case,
invalid values and environment knobs.
"""

import pytest

from clicklink.config import load_settings
from clicklink.exceptions import ConfigLoadError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "CLICKLINK_CONFIG_FILE",
        "CLICKLINK_BASE_URL",
        "CLICKLINK_CODE_STRATEGY",
        "CLICKLINK_CODE_LENGTH",
        "CLICKLINK_STORAGE_BACKEND",
    ):
        monkeypatch.delenv(name, raising=False)


def write_config(tmp_path, text):
    path = tmp_path / "config.properties"
    path.write_text(text, encoding="utf-8")
    return path


def test_values_from_file(tmp_path):
    path = write_config(tmp_path, "maxLifetimeHours=48\nclicksLimit=10\n")
    settings = load_settings(path)
    assert settings.max_lifetime_hours == 48
    assert settings.min_clicks_limit == 10
    assert settings.config_file == str(path)


def test_missing_keys_fall_back_to_defaults(tmp_path):
    settings = load_settings(write_config(tmp_path, "# nothing configured\n"))
    assert settings.max_lifetime_hours == 24
    assert settings.min_clicks_limit == 6


def test_one_key_missing(tmp_path):
    settings = load_settings(write_config(tmp_path, "clicksLimit=3\n"))
    assert settings.max_lifetime_hours == 24
    assert settings.min_clicks_limit == 3


def test_missing_file_is_fatal(tmp_path):
    with pytest.raises(ConfigLoadError, match="not found"):
        load_settings(tmp_path / "absent.properties")


def test_path_from_environment(tmp_path, monkeypatch):
    path = write_config(tmp_path, "maxLifetimeHours=12\n")
    monkeypatch.setenv("CLICKLINK_CONFIG_FILE", str(path))
    assert load_settings().max_lifetime_hours == 12


@pytest.mark.parametrize("text", ["clicksLimit=abc\n", "maxLifetimeHours=0\n", "clicksLimit=-2\n"])
def test_invalid_values_are_fatal(tmp_path, text):
    with pytest.raises(ConfigLoadError):
        load_settings(write_config(tmp_path, text))


def test_environment_knobs(tmp_path, monkeypatch):
    monkeypatch.setenv("CLICKLINK_BASE_URL", "https://s.io/")
    monkeypatch.setenv("CLICKLINK_CODE_STRATEGY", " Sequential ")
    monkeypatch.setenv("CLICKLINK_CODE_LENGTH", "100")
    settings = load_settings(write_config(tmp_path, ""))
    assert settings.base_url == "https://s.io/"
    assert settings.code_strategy == "sequential"
    assert settings.code_length == 32


def test_defaults_for_environment_knobs(tmp_path, monkeypatch):
    monkeypatch.setenv("CLICKLINK_CODE_LENGTH", "not-a-number")
    settings = load_settings(write_config(tmp_path, ""))
    assert settings.base_url == "http://clck.ru/"
    assert settings.code_strategy == "random"
    assert settings.code_length == 6
    assert settings.storage_backend == "memory"
