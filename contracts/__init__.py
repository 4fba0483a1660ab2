"""Contracts shared by the export pipeline.

The contracts package defines:
- the signal types, their CSV headers and type codes
- the raw row and sample records passed between pipeline stages
- the error taxonomy used by workers and the runner

Main exports:
- SignalType, RawRow, WaveformSample, MotionSample, TimedSample
- ExportError, AccessError, QueryError, DecodeError
"""

from contracts.errors import AccessError, DecodeError, ExportError, QueryError
from contracts.signals import MotionSample, RawRow, SignalType, TimedSample, WaveformSample

__all__ = [
    "AccessError",
    "DecodeError",
    "ExportError",
    "MotionSample",
    "QueryError",
    "RawRow",
    "SignalType",
    "TimedSample",
    "WaveformSample",
]
