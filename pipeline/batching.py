"""Group samples into batches that share one coarse timestamp.

A batch is finalized only when a sample with a strictly greater coarse
timestamp arrives; that timestamp becomes the batch's right interpolation
boundary. The last batch of a stream therefore has no natural end boundary.
Two policies exist for it:

- ``flush_final=False`` (default): the last batch is not emitted; its size is
  reported as ``unflushed_samples``.
- ``flush_final=True``: the last batch is emitted with ``begin == end``, so
  every sample gets the batch's own coarse timestamp as fine timestamp.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from contracts.signals import TimedSample

S = TypeVar("S", bound=TimedSample)


@dataclass(frozen=True)
class FinalizedBatch(Generic[S]):
    """A complete batch plus the boundaries to interpolate it against."""

    samples: list[S]
    begin: int
    end: int

    def __len__(self) -> int:
        return len(self.samples)


@dataclass
class BatchGrouper(Generic[S]):
    """Incremental batch accumulator for one stream."""

    flush_final: bool = False
    current_boundary: int | None = None
    unflushed_samples: int = 0
    _pending: list[S] = field(default_factory=list)

    def push(self, sample: S) -> FinalizedBatch[S] | None:
        """Add *sample*; return the previous batch if this sample closes it."""
        ts = sample.coarse_timestamp
        if self.current_boundary is None:
            self.current_boundary = ts
            self._pending = [sample]
            return None

        if ts > self.current_boundary:
            done = FinalizedBatch(samples=self._pending, begin=self.current_boundary, end=ts)
            self._pending = [sample]
            self.current_boundary = ts
            return done

        # Equal (or, for out-of-order input, smaller) timestamps stay in the current batch.
        self._pending.append(sample)
        return None

    def finish(self) -> FinalizedBatch[S] | None:
        """Close the stream; apply the final-batch policy."""
        pending, self._pending = self._pending, []
        if not pending or self.current_boundary is None:
            return None
        if not self.flush_final:
            self.unflushed_samples = len(pending)
            return None
        return FinalizedBatch(samples=pending, begin=self.current_boundary, end=self.current_boundary)


def iter_batches(
    samples: Iterable[S],
    *,
    flush_final: bool = False,
    grouper: BatchGrouper[S] | None = None,
) -> Iterator[FinalizedBatch[S]]:
    """Yield finalized batches from an ordered sample stream."""
    g: BatchGrouper[S] = grouper if grouper is not None else BatchGrouper(flush_final=flush_final)
    for sample in samples:
        done = g.push(sample)
        if done is not None:
            yield done
    last = g.finish()
    if last is not None:
        yield last


__all__ = ["BatchGrouper", "FinalizedBatch", "iter_batches"]
