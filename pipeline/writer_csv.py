"""Append-only CSV writer for finalized sample batches.

This is the output boundary: the header is written once when the writer is
created, then every finalized batch is appended in order. Rows are never
rewritten or reordered.
"""

from __future__ import annotations

import csv
import logging
import math
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from decimal import Decimal
from pathlib import Path
from typing import IO, Protocol

from contracts.errors import AccessError

logger = logging.getLogger(__name__)


class CsvRecord(Protocol):
    def as_row(self) -> list[object]: ...


def format_float(value: float) -> str:
    """Shortest round-trip digits in plain notation; integral values drop ``.0``."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    text = repr(value)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    if text.endswith(".0"):
        text = text[:-2]
    return text


def _format_cell(value: object) -> object:
    if isinstance(value, float):
        return format_float(value)
    return value


class CsvSampleWriter:
    """
    Writes one signal's samples to an open text stream.

    Expected input: batches whose samples expose ``as_row()`` in header order.
    """

    def __init__(self, stream: IO[str], header: Sequence[str]) -> None:
        self._writer = csv.writer(stream, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
        self._stream = stream
        self.header = tuple(header)
        self.rows_written = 0
        self.batches_written = 0
        self._writer.writerow(self.header)

    def append_batch(self, records: Iterable[CsvRecord]) -> int:
        """Append *records* as rows; return how many were written."""
        n = 0
        for rec in records:
            self._writer.writerow([_format_cell(v) for v in rec.as_row()])
            n += 1
        self.rows_written += n
        self.batches_written += 1
        return n

    def flush(self) -> None:
        self._stream.flush()


@contextmanager
def open_output(path: str | Path, header: Sequence[str]) -> Iterator[CsvSampleWriter]:
    """Create (or truncate) *path* and yield a writer with the header already written.

    The file is closed on exit, including when the body raises, so whatever was
    appended before a failure stays readable on disk.
    """
    p = Path(path)
    try:
        fh = p.open("w", encoding="utf-8", newline="")
    except OSError as exc:
        raise AccessError(f"{p}: {exc}") from exc

    with fh:
        writer = CsvSampleWriter(fh, header)
        yield writer
        writer.flush()
    logger.debug("Closed %s (%d rows)", p, writer.rows_written)


__all__ = ["CsvRecord", "CsvSampleWriter", "format_float", "open_output"]
