"""Centralized application configuration with schema validation.

This module is intentionally compatibility-first:
- Supports flat environment names (for example ``VITAL2CSV_OUT_DIR``).
- Supports nested names (for example ``EXPORT__OUT_DIR``) for consistency.
- Optionally reads a local ``.env`` file before process env values.

Command-line flags always win over values resolved here.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import tzinfo
from pathlib import Path
from threading import Lock
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    return default


class LoggingSettings(BaseModel):
    """Repository-wide logging settings."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO")
    json_logs: bool = Field(default=False)
    override_root_handlers: bool = Field(default=False)

    @field_validator("level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        text = str(value or "").strip().upper()
        if text in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            return text
        return "INFO"


class ExportConfig(BaseModel):
    """Defaults for the CSV export run."""

    model_config = ConfigDict(frozen=True)

    out_dir: str = Field(default="")
    flush_final_batch: bool = Field(default=False)
    timezone: str | None = Field(default=None, description="IANA zone name; unset means process local time")
    write_manifest: bool = Field(default=False)

    @field_validator("out_dir", mode="before")
    @classmethod
    def _normalize_out_dir(cls, value: object) -> str:
        return str(value or "").strip()

    @field_validator("flush_final_batch", "write_manifest", mode="before")
    @classmethod
    def _normalize_flags(cls, value: object) -> bool:
        return _parse_bool(value, False)

    @field_validator("timezone", mode="before")
    @classmethod
    def _normalize_timezone(cls, value: object) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        if not text:
            return None
        resolve_timezone(text)
        return text

    def zone(self) -> tzinfo | None:
        return resolve_timezone(self.timezone)


def resolve_timezone(name: str | None) -> tzinfo | None:
    """Return a ``ZoneInfo`` for *name*, or None (process local time) when unset."""
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"unknown time zone: {name!r}") from exc


class Settings(BaseModel):
    """Top-level settings model."""

    model_config = ConfigDict(frozen=True)

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    export: ExportConfig = Field(default_factory=ExportConfig)

    @classmethod
    def from_env(
        cls,
        *,
        env: Mapping[str, str] | None = None,
        env_file: str = ".env",
    ) -> Settings:
        """Build settings from `.env` then environment variables."""
        runtime_env = os.environ if env is None else env
        merged_env = _merge_env(_load_dotenv(Path(env_file)), runtime_env)
        payload = _build_payload(merged_env)
        return cls.model_validate(payload)


def _load_dotenv(path: Path) -> dict[str, str]:
    """Parse a minimal `.env` file format."""
    if not path.exists() or not path.is_file():
        return {}

    values: dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, raw_value = line.split("=", 1)
        key_clean = key.strip()
        value = raw_value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        if key_clean:
            values[key_clean] = value
    return values


def _merge_env(dotenv_values: Mapping[str, str], runtime_env: Mapping[str, str]) -> dict[str, str]:
    """Return env map where process env overrides `.env` values."""
    merged = {str(k): str(v) for k, v in dotenv_values.items()}
    for key, value in runtime_env.items():
        merged[str(key)] = str(value)
    return merged


def _first_non_empty(env: Mapping[str, str], *keys: str) -> str | None:
    """Return the first non-empty value for the provided keys."""
    for key in keys:
        value = str(env.get(key, "")).strip()
        if value:
            return value
    return None


def _build_payload(env: Mapping[str, str]) -> dict[str, object]:
    """Build nested settings payload from env values."""
    logging_settings = {
        "level": _first_non_empty(env, "LOGGING__LEVEL", "VITAL2CSV_LOG_LEVEL"),
        "json_logs": _first_non_empty(env, "LOGGING__JSON_LOGS", "VITAL2CSV_LOG_JSON"),
        "override_root_handlers": _first_non_empty(
            env, "LOGGING__OVERRIDE_ROOT_HANDLERS", "VITAL2CSV_LOG_OVERRIDE"
        ),
    }
    export = {
        "out_dir": _first_non_empty(env, "EXPORT__OUT_DIR", "VITAL2CSV_OUT_DIR"),
        "flush_final_batch": _first_non_empty(env, "EXPORT__FLUSH_FINAL_BATCH", "VITAL2CSV_FLUSH_FINAL"),
        "timezone": _first_non_empty(env, "EXPORT__TIMEZONE", "VITAL2CSV_TZ"),
        "write_manifest": _first_non_empty(env, "EXPORT__WRITE_MANIFEST", "VITAL2CSV_MANIFEST"),
    }
    return {
        "logging": {k: v for k, v in logging_settings.items() if v is not None},
        "export": {k: v for k, v in export.items() if v is not None},
    }


_SETTINGS_LOCK = Lock()
_SETTINGS_CACHE: Settings | None = None


def get_settings(*, reload: bool = False) -> Settings:
    """Return cached settings, optionally forcing reload from env."""
    global _SETTINGS_CACHE
    with _SETTINGS_LOCK:
        if reload or _SETTINGS_CACHE is None:
            _SETTINGS_CACHE = Settings.from_env()
        return _SETTINGS_CACHE


def clear_settings_cache() -> None:
    """Clear in-process settings cache."""
    global _SETTINGS_CACHE
    with _SETTINGS_LOCK:
        _SETTINGS_CACHE = None


__all__ = [
    "ExportConfig",
    "LoggingSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
    "resolve_timezone",
    "ValidationError",
]
