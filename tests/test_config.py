"""Unit tests for centralized configuration parsing and validation."""

from __future__ import annotations

from datetime import tzinfo
from pathlib import Path
from typing import Any

import pytest

from infra.config import Settings, ValidationError, clear_settings_cache, get_settings, resolve_timezone


def test_settings_defaults() -> None:
    settings = Settings.from_env(env={}, env_file=".missing.env")

    assert settings.logging.level == "INFO"
    assert settings.logging.json_logs is False
    assert settings.export.out_dir == ""
    assert settings.export.flush_final_batch is False
    assert settings.export.timezone is None
    assert settings.export.zone() is None
    assert settings.export.write_manifest is False


def test_settings_reads_flat_env_keys() -> None:
    """Flat env keys should map to nested settings models."""
    env = {
        "VITAL2CSV_LOG_LEVEL": "debug",
        "VITAL2CSV_LOG_JSON": "1",
        "VITAL2CSV_OUT_DIR": "  output  ",
        "VITAL2CSV_FLUSH_FINAL": "yes",
        "VITAL2CSV_TZ": "Asia/Tokyo",
        "VITAL2CSV_MANIFEST": "on",
    }
    settings = Settings.from_env(env=env, env_file=".missing.env")

    assert settings.logging.level == "DEBUG"
    assert settings.logging.json_logs is True
    assert settings.export.out_dir == "output"
    assert settings.export.flush_final_batch is True
    assert settings.export.timezone == "Asia/Tokyo"
    assert isinstance(settings.export.zone(), tzinfo)
    assert settings.export.write_manifest is True


def test_settings_nested_keys_win_over_flat_keys() -> None:
    """Nested env keys should be supported with `__` delimiter and take precedence."""
    env = {
        "EXPORT__OUT_DIR": "nested",
        "VITAL2CSV_OUT_DIR": "flat",
        "LOGGING__LEVEL": "warning",
    }
    settings = Settings.from_env(env=env, env_file=".missing.env")

    assert settings.export.out_dir == "nested"
    assert settings.logging.level == "WARNING"


def test_settings_unknown_log_level_falls_back_to_info() -> None:
    settings = Settings.from_env(env={"VITAL2CSV_LOG_LEVEL": "chatty"}, env_file=".missing.env")
    assert settings.logging.level == "INFO"


def test_settings_invalid_timezone_raises_validation_error() -> None:
    with pytest.raises(ValidationError):
        Settings.from_env(env={"VITAL2CSV_TZ": "Mars/Olympus_Mons"}, env_file=".missing.env")


def test_dotenv_is_read_and_process_env_overrides_it(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# local overrides\nVITAL2CSV_OUT_DIR='from-dotenv'\nVITAL2CSV_FLUSH_FINAL=1\nnot a pair\n",
        encoding="utf-8",
    )

    settings = Settings.from_env(env={"VITAL2CSV_FLUSH_FINAL": "0"}, env_file=str(env_file))

    assert settings.export.out_dir == "from-dotenv"
    assert settings.export.flush_final_batch is False


def test_resolve_timezone() -> None:
    assert resolve_timezone(None) is None
    assert resolve_timezone("") is None
    assert resolve_timezone("UTC") is not None
    with pytest.raises(ValueError):
        resolve_timezone("Nowhere/Special")


def test_get_settings_reload_rebuilds_cache(monkeypatch: Any) -> None:
    """Reload should rebuild cached settings from current process env."""
    clear_settings_cache()
    monkeypatch.setenv("VITAL2CSV_OUT_DIR", "first")
    first = get_settings(reload=True)

    monkeypatch.setenv("VITAL2CSV_OUT_DIR", "second")
    cached = get_settings()
    second = get_settings(reload=True)

    assert first.export.out_dir == "first"
    assert cached.export.out_dir == "first"
    assert second.export.out_dir == "second"
