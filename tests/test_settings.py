"""Tests for environment-driven game settings."""

import pydantic
import pytest

from battleships import settings as settings_module
from battleships.settings import GameSettings


def test_defaults() -> None:
    settings = GameSettings()
    assert (settings.rows, settings.columns) == (12, 12)
    assert settings.map_count == 200
    assert settings.session_ttl_seconds == 7 * 24 * 60 * 60
    assert settings.placement_max_attempts is None


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MAP_COUNT", "5")
    monkeypatch.setenv("BATTLESHIPS_AVAILABLE_TRIES", "9")
    monkeypatch.setenv("BATTLESHIPS_PLACEMENT_MAX_ATTEMPTS", "50")
    monkeypatch.setenv("BATTLESHIPS_SESSION_TTL", " ")

    settings = GameSettings.from_env(rows=10)

    assert settings.map_count == 5
    assert settings.available_tries == 9
    assert settings.placement_max_attempts == 50
    assert settings.rows == 10
    assert settings.session_ttl_seconds == 7 * 24 * 60 * 60


def test_invalid_values_are_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MAP_COUNT", "0")
    with pytest.raises(pydantic.ValidationError):
        GameSettings.from_env()


def test_load_settings_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    settings_module.load_settings.cache_clear()
    monkeypatch.setenv("MAP_COUNT", "7")
    first = settings_module.load_settings()
    monkeypatch.setenv("MAP_COUNT", "8")
    assert settings_module.load_settings() is first
    assert first.map_count == 7
    settings_module.load_settings.cache_clear()
