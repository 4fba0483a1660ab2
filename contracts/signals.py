"""Signal types and sample records.

Two signals are exported from a vital log:

- ECG: a single-channel waveform, one database row per sample.
- ACCEL: a tri-axial accelerometer signal, three consecutive database rows
  (x, y, z) per sample.

Both sample variants implement :class:`TimedSample` so the interpolator can set
fine timestamps without caring about the concrete record shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import Enum
from typing import Protocol

LOCAL_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class SignalType(Enum):
    """Supported signals, keyed by their ``ZTYPE`` code in the vital log."""

    ECG = 8
    ACCEL = 1

    @property
    def type_code(self) -> int:
        return int(self.value)

    @property
    def file_suffix(self) -> str:
        return _FILE_SUFFIXES[self]

    @property
    def header(self) -> tuple[str, ...]:
        return _HEADERS[self]


@dataclass(frozen=True)
class RawRow:
    """One database record, as yielded by the record source."""

    coarse_timestamp: int
    tie_break: int
    value: float


class TimedSample(Protocol):
    """What the batch grouper and the interpolator need from a sample."""

    @property
    def coarse_timestamp(self) -> int: ...

    fine_timestamp: str


def local_time_string(epoch_seconds: int, tz: tzinfo | None = None) -> str:
    """Format epoch seconds as ``YYYY-MM-DD HH:MM:SS`` in *tz* (process local time if None)."""
    return datetime.fromtimestamp(epoch_seconds, tz=tz).strftime(LOCAL_TIME_FORMAT)


@dataclass
class WaveformSample:
    """One ECG sample; columns follow :data:`WAVEFORM_HEADER`."""

    time: str
    timestamp: int
    z_fok_timestamp: int
    value: float
    detailed_timestamp: str = ""

    @property
    def coarse_timestamp(self) -> int:
        return self.timestamp

    @property
    def fine_timestamp(self) -> str:
        return self.detailed_timestamp

    @fine_timestamp.setter
    def fine_timestamp(self, value: str) -> None:
        self.detailed_timestamp = value

    @classmethod
    def from_row(cls, row: RawRow, tz: tzinfo | None = None) -> WaveformSample:
        return cls(
            time=local_time_string(row.coarse_timestamp, tz),
            timestamp=row.coarse_timestamp,
            z_fok_timestamp=row.tie_break,
            value=row.value,
        )

    def as_row(self) -> list[object]:
        return [self.time, self.timestamp, self.z_fok_timestamp, self.value, self.detailed_timestamp]


@dataclass
class MotionSample:
    """One accelerometer sample; columns follow :data:`MOTION_HEADER`."""

    time: str
    timestamp: int
    zfok_timestamp: int
    x: float
    y: float
    z: float
    detailed_timestamp: str = ""

    @property
    def coarse_timestamp(self) -> int:
        return self.timestamp

    @property
    def fine_timestamp(self) -> str:
        return self.detailed_timestamp

    @fine_timestamp.setter
    def fine_timestamp(self, value: str) -> None:
        self.detailed_timestamp = value

    @classmethod
    def from_triple(cls, first: RawRow, second: RawRow, third: RawRow, tz: tzinfo | None = None) -> MotionSample:
        # Identity comes from the first row of the triple.
        return cls(
            time=local_time_string(first.coarse_timestamp, tz),
            timestamp=first.coarse_timestamp,
            zfok_timestamp=first.tie_break,
            x=first.value,
            y=second.value,
            z=third.value,
        )

    def as_row(self) -> list[object]:
        return [
            self.time,
            self.timestamp,
            self.zfok_timestamp,
            self.x,
            self.y,
            self.z,
            self.detailed_timestamp,
        ]


WAVEFORM_HEADER: tuple[str, ...] = ("time", "timestamp", "z_fok_timestamp", "value", "detailed_timestamp")
MOTION_HEADER: tuple[str, ...] = ("time", "timestamp", "zfok_timestamp", "x", "y", "z", "detailed_timestamp")

_HEADERS: dict[SignalType, tuple[str, ...]] = {
    SignalType.ECG: WAVEFORM_HEADER,
    SignalType.ACCEL: MOTION_HEADER,
}

_FILE_SUFFIXES: dict[SignalType, str] = {
    SignalType.ECG: ".ecg_i.csv",
    SignalType.ACCEL: ".acc_i.csv",
}

__all__ = [
    "LOCAL_TIME_FORMAT",
    "MOTION_HEADER",
    "MotionSample",
    "RawRow",
    "SignalType",
    "TimedSample",
    "WAVEFORM_HEADER",
    "WaveformSample",
    "local_time_string",
]
