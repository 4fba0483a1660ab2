"""Read-only record source over a vital-log SQLite database.

Kept separate so the stream code depends on a small surface area: open the
database once, then ask for a lazy, ordered row iterator per signal type.

The source object itself only holds the database path and the query text, so
it can be shared by several workers. Each :meth:`VitalRecordSource.rows` call
opens its own connection because a stdlib ``sqlite3`` connection is bound to
the thread that created it.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Generator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from contracts.errors import AccessError, DecodeError, QueryError
from contracts.signals import RawRow, SignalType

logger = logging.getLogger(__name__)

# ZTIME counts seconds from this instant (UTC).
REFERENCE_DATE = "2001-01-01 00:00:00"

ROWS_SQL = """
SELECT
  CAST(t.ZTIME AS INTEGER) + CAST(strftime('%s', :reference_date) AS INTEGER) AS timestamp,
  d.Z_FOK_TIMESTAMP AS zfok_timestamp,
  d.ZVALUE AS value
FROM
  ZLOGGEDDATA d INNER JOIN ZLOGGEDTIME t ON d.ZTIMESTAMP = t.Z_PK
WHERE
  d.ZTYPE = :ztype
ORDER BY timestamp ASC, zfok_timestamp ASC
"""


def _as_int(value: Any, column: str) -> int:
    if value is None or isinstance(value, bool):
        raise DecodeError(f"column {column!r} has unexpected value {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise DecodeError(f"column {column!r} is not an integer: {value!r}")


def _as_float(value: Any, column: str) -> float:
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"column {column!r} is not numeric: {value!r}")
    return float(value)


def decode_row(row: tuple[Any, ...]) -> RawRow:
    """Map one ``(timestamp, zfok_timestamp, value)`` result tuple to a :class:`RawRow`."""
    if len(row) != 3:
        raise DecodeError(f"expected 3 columns, got {len(row)}")
    ts, zfok, value = row
    return RawRow(
        coarse_timestamp=_as_int(ts, "timestamp"),
        tie_break=_as_int(zfok, "zfok_timestamp"),
        value=_as_float(value, "value"),
    )


@dataclass(frozen=True)
class VitalRecordSource:
    """Ordered row access for one vital-log database file."""

    path: Path
    sql: str = ROWS_SQL

    @classmethod
    def open(cls, path: str | Path) -> VitalRecordSource:
        """Validate that *path* is a readable SQLite database and return a source for it."""
        src = cls(path=Path(path))
        conn = src._connect()
        try:
            # sqlite opens lazily; touching the schema surfaces "not a database" early.
            conn.execute("SELECT name FROM sqlite_master LIMIT 1").fetchall()
        except sqlite3.Error as exc:
            raise AccessError(f"{src.path}: {exc}") from exc
        finally:
            conn.close()
        return src

    def _connect(self) -> sqlite3.Connection:
        if not self.path.is_file():
            raise AccessError(f"{self.path}: no such file")
        uri = self.path.resolve().as_uri() + "?mode=ro"
        try:
            return sqlite3.connect(uri, uri=True)
        except sqlite3.Error as exc:
            raise AccessError(f"{self.path}: {exc}") from exc

    def rows(self, signal: SignalType) -> Generator[RawRow, None, None]:
        """Yield rows of *signal* ordered by ``(timestamp, zfok_timestamp)``.

        The iterator is single-pass; its connection is closed when it is
        exhausted, closed, or garbage collected.
        """
        conn = self._connect()
        try:
            try:
                cur = conn.execute(self.sql, {"ztype": signal.type_code, "reference_date": REFERENCE_DATE})
            except sqlite3.Error as exc:
                raise QueryError(f"{signal.name} (ztype={signal.type_code}): {exc}") from exc

            logger.debug("Query started for %s (ztype=%s)", signal.name, signal.type_code)
            while True:
                try:
                    row = cur.fetchone()
                except sqlite3.Error as exc:
                    raise QueryError(f"{signal.name} (ztype={signal.type_code}): {exc}") from exc
                if row is None:
                    break
                yield decode_row(row)
        finally:
            conn.close()


__all__ = ["REFERENCE_DATE", "ROWS_SQL", "VitalRecordSource", "decode_row"]
