"""Error types raised across the deal aggregation pipeline."""

from __future__ import annotations


class DealPipelineError(RuntimeError):
    """Base class for recoverable pipeline failures."""


class SourceAcquisitionError(DealPipelineError):
    """Raised when a source adapter cannot retrieve candidate deals."""

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        self.message = message
        super().__init__(f"{source}: {message}")


class PersistenceError(DealPipelineError):
    """Raised when a single deal or audit row cannot be written."""


class QueryError(DealPipelineError):
    """Raised when a repository read fails."""


__all__ = [
    "DealPipelineError",
    "SourceAcquisitionError",
    "PersistenceError",
    "QueryError",
]
