"""Error taxonomy for the export pipeline.

Every failure a worker can hit is one of three kinds. They are all handled the
same way by the runner (log ``"<context>: <error>"``, mark the run as failed),
so the classes mostly exist to keep the context label next to the cause.
"""

from __future__ import annotations


class ExportError(RuntimeError):
    """Base class for failures that abort a single signal stream."""

    context: str = "Export"

    def __init__(self, message: str, *, context: str | None = None) -> None:
        super().__init__(message)
        if context:
            self.context = context

    def describe(self) -> str:
        return f"{self.context}: {self}"


class AccessError(ExportError):
    """Raised when the input database or an output file cannot be opened."""

    context = "Open file"


class QueryError(ExportError):
    """Raised when the data-store query fails."""

    context = "Query"


class DecodeError(ExportError):
    """Raised when a result row cannot be mapped to its expected shape."""

    context = "Scan"


__all__ = ["AccessError", "DecodeError", "ExportError", "QueryError"]
