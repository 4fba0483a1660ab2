"""Project version constants.

These constants are used in logs and embedded in the run manifest so that
exported CSV files can be traced back to a specific engine/format version.
"""

ENGINE_NAME: str = "vital2csv"
ENGINE_VERSION: str = "0.1.0"

CSV_FORMAT_VERSION: int = 1
