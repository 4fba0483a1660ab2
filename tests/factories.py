"""Shared lightweight factories for tests.

These helpers build small vital-log SQLite files and in-memory rows without
needing a real device export.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Sequence
from pathlib import Path

from contracts.signals import RawRow, SignalType

# Seconds between the Unix epoch and 2001-01-01T00:00:00Z.
REFERENCE_EPOCH = 978_307_200

_SCHEMA = """
CREATE TABLE ZLOGGEDTIME (
  Z_PK INTEGER PRIMARY KEY,
  ZTIME INTEGER
);
CREATE TABLE ZLOGGEDDATA (
  Z_PK INTEGER PRIMARY KEY,
  ZTYPE INTEGER,
  ZTIMESTAMP INTEGER,
  Z_FOK_TIMESTAMP INTEGER,
  ZVALUE FLOAT
);
"""


def make_rows(timestamps: Sequence[int], *, values: Sequence[float] | None = None, first_tie_break: int = 0) -> list[RawRow]:
    """Build RawRows with consecutive tie-breaks; values default to 0.5, 1.5, ..."""
    vals = list(values) if values is not None else [i + 0.5 for i in range(len(timestamps))]
    return [
        RawRow(coarse_timestamp=ts, tie_break=first_tie_break + i, value=v)
        for i, (ts, v) in enumerate(zip(timestamps, vals, strict=True))
    ]


def build_vital_db(
    path: Path,
    *,
    ecg: Iterable[tuple[int, int, float]] = (),
    accel: Iterable[tuple[int, int, float]] = (),
) -> Path:
    """
    Create a vital-log SQLite file at *path*.

    Rows are ``(epoch_seconds, z_fok_timestamp, value)``; they are inserted in
    the given order, so ordering in queries comes from ORDER BY, not insertion.
    """
    conn = sqlite3.connect(path)
    try:
        conn.executescript(_SCHEMA)
        time_pks: dict[int, int] = {}

        def _time_pk(epoch: int) -> int:
            if epoch not in time_pks:
                cur = conn.execute("INSERT INTO ZLOGGEDTIME (ZTIME) VALUES (?)", (epoch - REFERENCE_EPOCH,))
                time_pks[epoch] = int(cur.lastrowid)
            return time_pks[epoch]

        for signal, rows in ((SignalType.ECG, ecg), (SignalType.ACCEL, accel)):
            for epoch, zfok, value in rows:
                conn.execute(
                    "INSERT INTO ZLOGGEDDATA (ZTYPE, ZTIMESTAMP, Z_FOK_TIMESTAMP, ZVALUE) VALUES (?, ?, ?, ?)",
                    (signal.type_code, _time_pk(epoch), zfok, value),
                )
        conn.commit()
    finally:
        conn.close()
    return path


def read_csv_lines(path: Path) -> list[str]:
    return path.read_text(encoding="utf-8").splitlines()
