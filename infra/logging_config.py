"""Centralized logging configuration.

The tool supports both human-friendly text logs and structured JSON logs.
The runner uses this module to configure logging in a defensive way (so it
doesn't break environments that already configure root handlers).

Diagnostics go to stderr; stdout stays free for anything a caller may want to
pipe.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from infra.config import get_settings

# Context that follows a worker through the pipeline (e.g. signal="ECG").
# Each worker thread starts with an empty context.
log_ctx: ContextVar[dict[str, Any] | None] = ContextVar("log_ctx", default=None)


def set_log_context(**kwargs: Any) -> None:
    """Set context values that will be included in all subsequent log entries."""
    current = log_ctx.get()
    current = {} if current is None else dict(current)
    current.update(kwargs)
    log_ctx.set(current)


def get_log_context() -> dict[str, Any]:
    """Get a copy of the current log context."""
    ctx = log_ctx.get()
    return dict(ctx) if ctx else {}


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Temporarily extend the log context (restored on exit)."""
    token = log_ctx.set({**get_log_context(), **kwargs})
    try:
        yield
    finally:
        log_ctx.reset(token)


def _utc_iso8601() -> str:
    # Example: 2026-01-24T18:03:12.123Z
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


_STANDARD_ATTRS = frozenset(
    {
        "name", "msg", "args", "levelname", "levelno", "pathname", "filename", "module",
        "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created", "msecs",
        "relativeCreated", "thread", "threadName", "processName", "process", "taskName",
    }
)


class JsonFormatter(logging.Formatter):
    """
    Safe JSON formatter:
      - Always outputs valid JSON (message escaped via json.dumps)
      - Includes exception info when present
      - Merges the worker log context
    """

    def __init__(self, *, extra_fields: Mapping[str, Any] | None = None) -> None:
        super().__init__()
        self._extra_fields = dict(extra_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        base: dict[str, Any] = {
            "timestamp": _utc_iso8601(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "func": record.funcName,
            "line": record.lineno,
            "thread": record.threadName,
        }

        # Optional structured context via `extra={...}`
        for k, v in record.__dict__.items():
            if k not in _STANDARD_ATTRS and k not in base:
                base[k] = v

        for k, v in self._extra_fields.items():
            base.setdefault(k, v)

        if record.exc_info:
            base["exception"] = self.formatException(record.exc_info)

        for k, v in get_log_context().items():
            base.setdefault(k, v)

        return json.dumps(base, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """
    Human-friendly logs, but UTC timestamps.
    """
    converter = time.gmtime  # UTC

    def __init__(self) -> None:
        super().__init__("%(asctime)sZ | %(levelname)s | %(threadName)s | %(name)s | %(message)s")


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    json_logs: bool = False
    override_root_handlers: bool = False
    extra_fields: Mapping[str, Any] | None = None


def setup_logging(
    *,
    level: str | None = None,
    json_logs: bool | None = None,
    override_root_handlers: bool | None = None,
    extra_fields: Mapping[str, Any] | None = None,
) -> LoggingConfig:
    """
    Central logging setup for the tool.

    Env vars:
      - VITAL2CSV_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default INFO)
      - VITAL2CSV_LOG_JSON:  1/0 (default 0)
      - VITAL2CSV_LOG_OVERRIDE: 1/0 (default 0)
         If 1, replaces any pre-configured root handlers.
         If 0, only configures logging if root has no handlers.
    """
    config = get_settings(reload=True).logging

    cfg = LoggingConfig(
        level=(level or config.level).upper(),
        json_logs=json_logs if json_logs is not None else bool(config.json_logs),
        override_root_handlers=override_root_handlers
        if override_root_handlers is not None
        else bool(config.override_root_handlers),
        extra_fields=extra_fields,
    )

    root = logging.getLogger()
    root.setLevel(getattr(logging, cfg.level, logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    if cfg.json_logs:
        handler.setFormatter(JsonFormatter(extra_fields=cfg.extra_fields))
    else:
        handler.setFormatter(TextFormatter())

    if cfg.override_root_handlers:
        for h in list(root.handlers):
            root.removeHandler(h)
        root.addHandler(handler)
    elif not root.handlers:
        root.addHandler(handler)

    return cfg


__all__ = [
    "JsonFormatter",
    "LoggingConfig",
    "TextFormatter",
    "get_log_context",
    "log_context",
    "set_log_context",
    "setup_logging",
]
