"""Linear interpolation of sub-second timestamps inside a batch.

Samples of a batch are assumed evenly spaced between the batch's coarse
timestamp (``begin``) and the next batch's coarse timestamp (``end``):

    fine(i) = begin + i * (end - begin) / L

The offset is computed in integer nanoseconds (floored). ``end`` itself is
never assigned; it is where the following batch starts.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, tzinfo

from contracts.signals import LOCAL_TIME_FORMAT, TimedSample

NANOS_PER_SECOND = 1_000_000_000


def fine_offsets_ns(length: int, begin: int, end: int) -> list[int]:
    """Return the nanosecond offset from *begin* of each of *length* samples."""
    if length <= 0:
        raise ValueError(f"cannot interpolate an empty batch (length={length})")
    if end < begin:
        raise ValueError(f"end boundary {end} precedes begin boundary {begin}")
    period_ns = (end - begin) * NANOS_PER_SECOND
    return [i * period_ns // length for i in range(length)]


def format_fine_timestamp(epoch_ns: int, tz: tzinfo | None = None) -> str:
    """Format epoch nanoseconds as ``YYYY-MM-DD HH:MM:SS.nnnnnnnnn``."""
    seconds, nanos = divmod(epoch_ns, NANOS_PER_SECOND)
    wall = datetime.fromtimestamp(seconds, tz=tz).strftime(LOCAL_TIME_FORMAT)
    return f"{wall}.{nanos:09d}"


def interpolate(samples: Sequence[TimedSample], begin: int, end: int, tz: tzinfo | None = None) -> None:
    """Set ``fine_timestamp`` on every sample of a finalized batch, in place."""
    base_ns = begin * NANOS_PER_SECOND
    for sample, offset in zip(samples, fine_offsets_ns(len(samples), begin, end), strict=True):
        sample.fine_timestamp = format_fine_timestamp(base_ns + offset, tz)


__all__ = ["NANOS_PER_SECOND", "fine_offsets_ns", "format_fine_timestamp", "interpolate"]
