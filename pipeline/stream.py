"""One export stream: rows of one signal -> batches -> interpolated CSV.

A stream owns its batch accumulator, its counters and its output file. Errors
are not handled here; they propagate to the runner, which reads them from the
worker's future. The output file is closed on the way out either way.
"""

from __future__ import annotations

import logging
from collections.abc import Generator, Iterable, Iterator
from contextlib import closing
from dataclasses import asdict, dataclass
from datetime import tzinfo
from pathlib import Path
from typing import Any, Protocol

from contracts.signals import RawRow, SignalType, TimedSample
from infra.logging_config import log_context
from pipeline.assembler import AssemblyStats, assemble_motion, waveform_samples
from pipeline.batching import BatchGrouper, iter_batches
from pipeline.interpolate import interpolate
from pipeline.writer_csv import open_output

logger = logging.getLogger(__name__)


class RowSource(Protocol):
    def rows(self, signal: SignalType) -> Generator[RawRow, None, None]: ...


@dataclass
class StreamStats:
    signal: str
    out_path: str
    rows_read: int = 0
    samples: int = 0
    dropped_rows: int = 0
    batches_written: int = 0
    rows_written: int = 0
    unflushed_samples: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _samples_for(
    signal: SignalType,
    rows: Iterable[RawRow],
    *,
    tz: tzinfo | None,
    stats: AssemblyStats,
) -> Iterator[TimedSample]:
    if signal is SignalType.ACCEL:
        return assemble_motion(rows, tz=tz, stats=stats)
    return waveform_samples(rows, tz=tz, stats=stats)


def run_stream(
    signal: SignalType,
    source: RowSource,
    out_path: str | Path,
    *,
    flush_final: bool = False,
    tz: tzinfo | None = None,
) -> StreamStats:
    """Export *signal* from *source* into *out_path*; return the stream's counters."""
    stats = StreamStats(signal=signal.name, out_path=str(out_path))
    assembly = AssemblyStats()
    grouper: BatchGrouper[TimedSample] = BatchGrouper(flush_final=flush_final)

    with (
        log_context(signal=signal.name),
        open_output(out_path, signal.header) as writer,
        closing(source.rows(signal)) as rows,
    ):
        logger.info("Exporting %s -> %s", signal.name, out_path)
        samples = _samples_for(signal, rows, tz=tz, stats=assembly)
        for batch in iter_batches(samples, grouper=grouper):
            interpolate(batch.samples, batch.begin, batch.end, tz)
            writer.append_batch(batch.samples)

        stats.batches_written = writer.batches_written
        stats.rows_written = writer.rows_written

    stats.rows_read = assembly.rows_read
    stats.samples = assembly.samples
    stats.dropped_rows = assembly.dropped_rows
    stats.unflushed_samples = grouper.unflushed_samples

    logger.info(
        "OK: %s rows=%s samples=%s batches=%s written=%s unflushed=%s dropped=%s",
        signal.name,
        stats.rows_read,
        stats.samples,
        stats.batches_written,
        stats.rows_written,
        stats.unflushed_samples,
        stats.dropped_rows,
    )
    return stats


__all__ = ["RowSource", "StreamStats", "run_stream"]
