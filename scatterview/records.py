"""Record and axis-selector value types.

A ``Record`` is one cleaned dataset row. Numeric fields (raw and derived) are
stored in a read-only mapping so a record cannot change after load; the
chart relies on that when it keys marks and tooltips by ``Record.id``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import numpy as np


@dataclass(frozen=True)
class AxisSelector:
    """Record field feeding one axis, plus its display label.

    Parameters
    ----------
    field : str
        Numeric record field name (raw or derived).
    label : str
        Axis title. Defaults to the field name.
    """

    field: str
    label: str = ""

    def __post_init__(self) -> None:
        if not self.field:
            raise ValueError("AxisSelector.field must be a non-empty string")
        if not self.label:
            object.__setattr__(self, "label", self.field)


@dataclass(frozen=True)
class Record:
    """One immutable data row.

    Parameters
    ----------
    id : str
        Stable unique identifier used to key marks and tooltips.
    title : str
        Display title.
    authors : tuple[str, ...]
        Ordered author names.
    url : str
        Link shown in the detail panel.
    values : Mapping[str, float]
        Numeric fields, including derived ones.

    Examples
    --------
    >>> r = Record("X1", "Book", ("A",), "https://example.org", {"pages": 100.0})
    >>> r["pages"]
    100.0
    """

    id: str
    title: str
    authors: tuple[str, ...]
    url: str
    values: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", str(self.id))
        object.__setattr__(self, "authors", tuple(str(a) for a in self.authors))
        object.__setattr__(
            self,
            "values",
            MappingProxyType({str(k): float(v) for k, v in dict(self.values).items()}),
        )

    def __getitem__(self, field_name: str) -> float:
        try:
            return self.values[field_name]
        except KeyError:
            raise KeyError(
                f"Record {self.id!r} has no numeric field {field_name!r}"
            ) from None

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return (
            self.id == other.id
            and self.title == other.title
            and self.authors == other.authors
            and self.url == other.url
            and dict(self.values) == dict(other.values)
        )


def field_values(records: Iterable[Record], field_name: str) -> np.ndarray:
    """Return ``field_name`` for every record as a float array."""
    return np.asarray([r[field_name] for r in records], dtype=float)


def index_records(records: Iterable[Record]) -> dict[str, Record]:
    """Map record ids to records, rejecting duplicates."""
    out: dict[str, Record] = {}
    for record in records:
        if record.id in out:
            raise ValueError(f"Duplicate record id: {record.id!r}")
        out[record.id] = record
    return out


__all__ = ["AxisSelector", "Record", "field_values", "index_records"]
