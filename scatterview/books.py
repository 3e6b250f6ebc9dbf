"""Preset for the book sales dataset (pages vs. log₁₀ sales rank).

Rows look like::

    {"ASIN": "0385537859", "title": "...", "authors": ["..."],
     "url": "https://www.amazon.com/dp/0385537859", "pages": "320",
     "sales_rank": "1234"}

``pages`` and ``sales_rank`` may arrive as strings; ``log_sales_rank`` is
derived from ``sales_rank`` at load.
"""

from __future__ import annotations

from typing import Any, Optional, Union
from pathlib import Path

from .ScatterChart import ScatterChart
from .cleaning import RecordCleaner

BOOKS_X_LABEL = "Pages"
BOOKS_Y_LABEL = "Sales Rank, log₁₀"
BOOKS_DETAIL_FIELDS = (("Sales Rank", "sales_rank"), ("Pages", "pages"))


def books_cleaner() -> RecordCleaner:
    """Return the cleaner for book rows (ASIN ids, derived log sales rank)."""
    return RecordCleaner(
        ("pages", "sales_rank"),
        derived={"log_sales_rank": "log10(sales_rank)"},
        id_field="ASIN",
    )


def make_books_chart(
    source: Optional[Union[str, Path]] = None,
    *,
    selector: str = "#scatter",
    title: str = "",
    **options: Any,
) -> ScatterChart:
    """Build the book chart and, if ``source`` is given, populate it.

    Parameters
    ----------
    source : str or Path, optional
        Dataset URL or path. When omitted the chart is returned empty.
    selector : str, optional
        Host selector.
    title : str, optional
        Title shown above the chart.
    **options : Any
        Forwarded to :class:`~scatterview.ScatterChart.ScatterChart`.

    Examples
    --------
    >>> chart = make_books_chart("https://example.org/books/npr-2015.json")  # doctest: +SKIP
    >>> chart  # doctest: +SKIP
    """
    chart = ScatterChart(
        selector,
        "pages",
        "log_sales_rank",
        BOOKS_X_LABEL,
        BOOKS_Y_LABEL,
        detail_fields=BOOKS_DETAIL_FIELDS,
        title=title,
        cleaner=books_cleaner(),
        **options,
    )
    if source is not None:
        chart.populate(source)
    return chart


__all__ = ["BOOKS_DETAIL_FIELDS", "books_cleaner", "make_books_chart"]
