"""Turn raw dataset rows into immutable :class:`~scatterview.records.Record` objects.

The chart core trusts the cleaner's contract without re-validating it: every
record carries a unique string id, a title, a url, an ordered author tuple,
finite floats for each configured numeric field, and every derived field.
Any row that cannot satisfy that contract aborts the load with
:class:`~scatterview.errors.LoadError`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import numpy as np

from .derived_fields import DerivedField, normalize_derived
from .errors import LoadError
from .field_convert import to_number
from .records import Record

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class RecordCleaner:
    """Coerce raw rows and compute derived fields.

    Parameters
    ----------
    numeric_fields : sequence[str]
        Raw fields coerced with :func:`~scatterview.field_convert.to_number`.
    derived : mapping or iterable of DerivedField, optional
        Derived fields computed after coercion, in order. A later derived
        field may read an earlier one.
    id_field, title_field, url_field, authors_field : str
        Names of the identity/display fields in the raw rows.

    Examples
    --------
    >>> cleaner = RecordCleaner(
    ...     numeric_fields=("pages", "sales_rank"),
    ...     derived={"log_sales_rank": "log10(sales_rank)"},
    ... )
    >>> rows = [{"id": "X1", "title": "T", "url": "u", "authors": ["A"],
    ...          "pages": "100", "sales_rank": 10}]
    >>> cleaner.clean(rows)[0]["log_sales_rank"]
    1.0
    """

    def __init__(
        self,
        numeric_fields: Sequence[str],
        *,
        derived: Mapping[str, str] | Iterable[DerivedField] | None = None,
        id_field: str = "id",
        title_field: str = "title",
        url_field: str = "url",
        authors_field: str = "authors",
    ) -> None:
        self.numeric_fields = tuple(str(f) for f in numeric_fields)
        self.derived = normalize_derived(derived)
        self.id_field = id_field
        self.title_field = title_field
        self.url_field = url_field
        self.authors_field = authors_field

    @property
    def field_names(self) -> tuple[str, ...]:
        """Return every numeric field a cleaned record will carry."""
        return self.numeric_fields + tuple(d.name for d in self.derived)

    def clean(self, rows: Sequence[Mapping[str, Any]], *, source: str | None = None) -> tuple[Record, ...]:
        """Return one record per row, in input order.

        Raises
        ------
        LoadError
            If a row is missing a required field, a numeric field cannot be
            coerced, a derived field is not finite, or ids collide.
        """
        ids: list[str] = []
        titles: list[str] = []
        urls: list[str] = []
        authors: list[tuple[str, ...]] = []
        columns: dict[str, list[float]] = {name: [] for name in self.numeric_fields}
        seen: set[str] = set()

        for index, row in enumerate(rows):
            if not isinstance(row, Mapping):
                raise LoadError(f"Row {index} is not an object", source=source)
            record_id = str(self._require(row, self.id_field, index, source))
            if record_id in seen:
                raise LoadError(f"Row {index}: duplicate id {record_id!r}", source=source)
            seen.add(record_id)
            ids.append(record_id)
            titles.append(str(self._require(row, self.title_field, index, source)))
            urls.append(str(self._require(row, self.url_field, index, source)))
            raw_authors = self._require(row, self.authors_field, index, source)
            authors.append(self._authors(raw_authors, index, source))
            for name in self.numeric_fields:
                raw = self._require(row, name, index, source)
                try:
                    columns[name].append(to_number(raw, field=name))
                except ValueError as e:
                    raise LoadError(f"Row {index}: {e}", source=source) from e

        arrays = {name: np.asarray(values, dtype=float) for name, values in columns.items()}
        for field in self.derived:
            try:
                values = field.evaluate(arrays)
            except (KeyError, ValueError, TypeError) as e:
                raise LoadError(f"Derived field {field.name!r}: {e}", source=source) from e
            bad = np.flatnonzero(~np.isfinite(values))
            if bad.size:
                raise LoadError(
                    f"Row {int(bad[0])}: derived field {field.name!r} is not finite",
                    source=source,
                )
            arrays[field.name] = values

        names = self.field_names
        records = tuple(
            Record(
                id=ids[i],
                title=titles[i],
                authors=authors[i],
                url=urls[i],
                values={name: float(arrays[name][i]) for name in names},
            )
            for i in range(len(ids))
        )
        logger.debug("cleaned %d rows into records with fields %s", len(records), names)
        return records

    @staticmethod
    def _require(row: Mapping[str, Any], key: str, index: int, source: str | None) -> Any:
        if key not in row or row[key] is None:
            raise LoadError(f"Row {index}: missing required field {key!r}", source=source)
        return row[key]

    @staticmethod
    def _authors(value: Any, index: int, source: str | None) -> tuple[str, ...]:
        if isinstance(value, str):
            return (value,)
        if not isinstance(value, Iterable) or isinstance(value, Mapping):
            raise LoadError(f"Row {index}: authors must be a list of names", source=source)
        return tuple(str(v) for v in value)


__all__ = ["RecordCleaner"]
