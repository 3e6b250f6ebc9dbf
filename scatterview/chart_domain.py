"""Domain calculator: padded numeric intervals for the two chart axes.

A domain is the data-space interval an axis may represent. It is the raw
``[min, max]`` of the selected field widened by ``padding * (max - min)`` on
each side so edge points are not drawn on the axis lines.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np

from .errors import EmptyDatasetError
from .records import Record, field_values

DEFAULT_PADDING = 0.125


@dataclass(frozen=True)
class Domain:
    """Closed numeric interval ``[lo, hi]``."""

    lo: float
    hi: float

    def __post_init__(self) -> None:
        if self.lo > self.hi:
            raise ValueError(f"Domain lower bound {self.lo} exceeds upper bound {self.hi}")

    @property
    def span(self) -> float:
        return self.hi - self.lo

    @property
    def is_degenerate(self) -> bool:
        """Return True when every value maps to the same pixel."""
        return self.span == 0.0

    def contains(self, value: float) -> bool:
        return self.lo <= value <= self.hi

    def as_tuple(self) -> tuple[float, float]:
        return (self.lo, self.hi)


def compute_domain(values: Iterable[float], padding: float = DEFAULT_PADDING) -> Domain:
    """Return the padded domain of ``values``.

    A zero-span input yields a zero-width domain; that is a valid, if
    degenerate, state.

    Raises
    ------
    EmptyDatasetError
        If ``values`` is empty.
    ValueError
        If ``padding`` is negative or a value is not finite.
    """
    if padding < 0:
        raise ValueError(f"padding must be >= 0, got {padding}")
    arr = np.asarray(list(values) if not isinstance(values, np.ndarray) else values, dtype=float)
    if arr.size == 0:
        raise EmptyDatasetError("Cannot compute a domain from an empty record collection")
    if not np.all(np.isfinite(arr)):
        raise ValueError("Domain values must be finite")
    lo = float(arr.min())
    hi = float(arr.max())
    pad = padding * (hi - lo)
    return Domain(lo - pad, hi + pad)


def compute_domains(
    records: Sequence[Record],
    x_field: str,
    y_field: str,
    padding: float = DEFAULT_PADDING,
) -> tuple[Domain, Domain]:
    """Return the padded ``(x, y)`` domains for ``records``.

    Raises
    ------
    EmptyDatasetError
        If ``records`` is empty.
    """
    if len(records) == 0:
        raise EmptyDatasetError("Cannot build a chart from an empty record collection")
    x_domain = compute_domain(field_values(records, x_field), padding)
    y_domain = compute_domain(field_values(records, y_field), padding)
    return x_domain, y_domain


__all__ = ["DEFAULT_PADDING", "Domain", "compute_domain", "compute_domains"]
