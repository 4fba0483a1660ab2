"""Turn raw database rows into output samples.

ECG rows map one-to-one onto samples. Accelerometer rows arrive as repeating
x, y, z triples (the record source's ordering guarantees that) and are merged
into one three-axis sample per triple.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import tzinfo

from contracts.signals import MotionSample, RawRow, WaveformSample

logger = logging.getLogger(__name__)

AXES_PER_SAMPLE = 3


@dataclass
class AssemblyStats:
    rows_read: int = 0
    samples: int = 0
    dropped_rows: int = 0


def waveform_samples(
    rows: Iterable[RawRow],
    *,
    tz: tzinfo | None = None,
    stats: AssemblyStats | None = None,
) -> Iterator[WaveformSample]:
    st = stats if stats is not None else AssemblyStats()
    for row in rows:
        st.rows_read += 1
        st.samples += 1
        yield WaveformSample.from_row(row, tz)


def assemble_motion(
    rows: Iterable[RawRow],
    *,
    tz: tzinfo | None = None,
    stats: AssemblyStats | None = None,
) -> Iterator[MotionSample]:
    """
    Merge every three consecutive rows into one :class:`MotionSample`.

    Values keep arrival order (first row -> x, second -> y, third -> z); the
    sample's timestamp and tie-break come from the first row. The rows of a
    triple are not cross-checked against each other. A trailing partial group
    of one or two rows is dropped.
    """
    st = stats if stats is not None else AssemblyStats()
    window: list[RawRow] = []
    for row in rows:
        st.rows_read += 1
        window.append(row)
        if len(window) < AXES_PER_SAMPLE:
            continue
        st.samples += 1
        yield MotionSample.from_triple(window[0], window[1], window[2], tz)
        window = []

    if window:
        st.dropped_rows += len(window)
        logger.debug("Dropped %d trailing accelerometer row(s) (incomplete triple)", len(window))


__all__ = ["AXES_PER_SAMPLE", "AssemblyStats", "assemble_motion", "waveform_samples"]
