"""Pipeline components.

This package contains the SQLite record source, x/y/z sample assembly, batch
grouping, timestamp interpolation, the CSV writer and the per-signal stream
that wires them together.
"""
