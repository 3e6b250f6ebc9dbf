"""Exception types raised by ``scatterview``.

Only loading can fail once a chart is running: resize, zoom and tooltip
handling operate on already validated in-memory state.
"""

from __future__ import annotations


class ScatterviewError(Exception):
    """Base class for chart errors."""


class LoadError(ScatterviewError):
    """Raised when a dataset cannot be fetched, parsed or cleaned.

    Parameters
    ----------
    message : str
        Human-readable description shown in the chart status banner.
    source : str or None
        Dataset location that failed, when known.
    """

    def __init__(self, message: str, *, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source

    def __str__(self) -> str:
        base = super().__str__()
        if self.source:
            return f"{base} (source: {self.source})"
        return base


class EmptyDatasetError(ScatterviewError, ValueError):
    """Raised when a chart is asked to build a domain from zero records."""


__all__ = ["ScatterviewError", "LoadError", "EmptyDatasetError"]
