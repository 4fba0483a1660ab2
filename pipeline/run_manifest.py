"""Run manifest helpers.

The manifest is an optional JSON file written next to the exported CSVs. It
records which input produced them, with which engine version and final-batch
policy, and the per-stream counters (or the error that stopped a stream), so
a partial CSV can be recognized as such later.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from version import CSV_FORMAT_VERSION, ENGINE_NAME, ENGINE_VERSION


def _utc_now_iso() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class RunManifest:
    """Identity and outcome of one export run."""

    input_path: str
    ok: bool
    flush_final_batch: bool
    timezone: str | None = None

    engine_name: str = ENGINE_NAME
    engine_version: str = ENGINE_VERSION
    csv_format_version: int = CSV_FORMAT_VERSION

    streams: dict[str, dict[str, Any]] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    created_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if not d.get("created_at"):
            d["created_at"] = _utc_now_iso()
        return d

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> RunManifest:
        return cls(
            input_path=str(payload.get("input_path") or "").strip(),
            ok=bool(payload.get("ok")),
            flush_final_batch=bool(payload.get("flush_final_batch")),
            timezone=(str(payload.get("timezone") or "").strip() or None),
            engine_name=str(payload.get("engine_name") or ENGINE_NAME),
            engine_version=str(payload.get("engine_version") or ENGINE_VERSION),
            csv_format_version=int(payload.get("csv_format_version") or CSV_FORMAT_VERSION),
            streams=dict(payload.get("streams") or {}),
            errors={str(k): str(v) for k, v in (payload.get("errors") or {}).items()},
            created_at=str(payload.get("created_at") or "").strip(),
        )

    def validate(self) -> None:
        if not self.input_path:
            raise ValueError("RunManifest missing input_path")


def write_manifest(path: str | Path, manifest: RunManifest) -> Path:
    """Write *manifest* to *path* (atomically best-effort)."""

    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(p.suffix + ".tmp")

    manifest.validate()
    payload = manifest.to_dict()

    tmp.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    tmp.replace(p)
    return p


def load_manifest(path: str | Path) -> RunManifest:
    """Load a manifest from *path* and validate it."""

    p = Path(path)
    payload = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"Manifest is not a JSON object: {p}")
    m = RunManifest.from_dict(payload)
    m.validate()
    return m


__all__ = ["RunManifest", "load_manifest", "write_manifest"]
