"""Unit tests for row -> sample assembly."""

from __future__ import annotations

from datetime import timezone

import pytest

from pipeline.assembler import AssemblyStats, assemble_motion, waveform_samples
from tests.factories import make_rows

UTC = timezone.utc


@pytest.mark.parametrize("k", [0, 1, 4])
@pytest.mark.parametrize("extra", [0, 1, 2])
def test_motion_emits_one_sample_per_complete_triple(k: int, extra: int) -> None:
    """3k+1 and 3k+2 rows give k samples; the remainder is dropped without error."""
    rows = make_rows([100] * (3 * k + extra))
    stats = AssemblyStats()

    samples = list(assemble_motion(rows, tz=UTC, stats=stats))

    assert len(samples) == k
    assert stats.rows_read == 3 * k + extra
    assert stats.samples == k
    assert stats.dropped_rows == extra


def test_motion_keeps_arrival_order_of_axis_values() -> None:
    rows = make_rows([5, 5, 5, 5, 5, 5, 6, 6, 6], values=[3.0, 1.0, 2.0, -1.5, 0.25, 9.0, 7.0, 8.0, 6.0])

    samples = list(assemble_motion(rows, tz=UTC))

    assert [(s.x, s.y, s.z) for s in samples] == [(3.0, 1.0, 2.0), (-1.5, 0.25, 9.0), (7.0, 8.0, 6.0)]


def test_motion_identity_comes_from_first_row_of_triple() -> None:
    # Timestamps inside a triple are deliberately inconsistent; they are not cross-checked.
    rows = make_rows([1_600_000_000, 1_600_000_001, 1_600_000_002], first_tie_break=40)

    (sample,) = assemble_motion(rows, tz=UTC)

    assert sample.timestamp == 1_600_000_000
    assert sample.zfok_timestamp == 40
    assert sample.time == "2020-09-13 12:26:40"
    assert sample.detailed_timestamp == ""


def test_waveform_maps_rows_one_to_one() -> None:
    rows = make_rows([1_600_000_000, 1_600_000_000], values=[0.1, -0.2])
    stats = AssemblyStats()

    samples = list(waveform_samples(rows, tz=UTC, stats=stats))

    assert [(s.timestamp, s.z_fok_timestamp, s.value) for s in samples] == [
        (1_600_000_000, 0, 0.1),
        (1_600_000_000, 1, -0.2),
    ]
    assert samples[0].time == "2020-09-13 12:26:40"
    assert stats.rows_read == stats.samples == 2
    assert stats.dropped_rows == 0
