"""Tooltip controller: the single floating detail panel.

The controller exclusively owns ``ChartState.tooltip``. Clicking a mark shows
its record's panel, clicking the same mark again hides it, and clicking a
different mark moves the one panel there. Resize and zoom controllers call :meth:`refresh_if_visible`
after moving marks so the panel follows its mark instead of floating over
stale pixels.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from .chart_marks import Mark, MarkRenderer
from .chart_state import ChartState, TooltipState
from .chart_surface import ChartSurface
from .records import Record

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class TooltipContent:
    """Display rows for one record's detail panel.

    Parameters
    ----------
    record_id : str
        Owning record.
    title, url : str
        Rendered as a link in the first row.
    rows : tuple[tuple[str, str], ...]
        ``(label, text)`` rows after the title.
    """

    record_id: str
    title: str
    url: str
    rows: tuple[tuple[str, str], ...]


def format_value(value: float) -> str:
    """Format a numeric field the way a reader expects (``1000``, ``2.5``)."""
    if math.isfinite(value) and float(value).is_integer() and abs(value) < 1e15:
        return str(int(value))
    return repr(float(value))


def build_content(
    record: Record,
    detail_fields: Sequence[tuple[str, str]],
    *,
    author_separator: str = ", ",
) -> TooltipContent:
    """Build the detail-panel rows for ``record``."""
    rows: list[tuple[str, str]] = [("Author", author_separator.join(record.authors))]
    for label, field_name in detail_fields:
        rows.append((label, format_value(record[field_name])))
    return TooltipContent(record.id, record.title, record.url, tuple(rows))


class TooltipController:
    """Show, hide and re-anchor the detail panel.

    Parameters
    ----------
    state : ChartState
        Shared chart state; ``state.tooltip`` is written only here.
    surface : ChartSurface
        Surface that draws the panel.
    marks : MarkRenderer
        Source of current mark positions.
    """

    def __init__(self, state: ChartState, surface: ChartSurface, marks: MarkRenderer) -> None:
        self._state = state
        self._surface = surface
        self._marks = marks

    @property
    def state(self) -> TooltipState:
        return self._state.tooltip

    @property
    def is_visible(self) -> bool:
        return self._state.tooltip.is_visible

    def on_mark_clicked(self, record: Record, mark: Mark) -> None:
        """Toggle ``record``'s panel.

        A second click on the mark owning the visible panel hides it. A click
        on any other mark moves the single panel to that mark.
        """
        if self._state.tooltip.record_id == record.id:
            self.hide()
        else:
            self.show(record, mark)

    def show(self, record: Record, mark: Mark) -> None:
        """Show ``record``'s panel anchored at ``mark``."""
        cfg = self._state.config
        content = build_content(
            record,
            cfg.resolved_detail_fields,
            author_separator=cfg.author_separator,
        )
        dims = self._state.dimensions
        if dims is None:
            raise RuntimeError("Cannot show a tooltip before the chart is laid out")
        self._surface.show_tooltip(content, mark, dims)
        self._state.tooltip = TooltipState.visible_for(record.id)
        logger.debug("tooltip shown for %s at (%.1f, %.1f)", record.id, mark.px, mark.py)

    def hide(self) -> None:
        """Hide the panel if it is visible."""
        if not self.is_visible:
            return
        self._surface.hide_tooltip()
        self._state.tooltip = TooltipState.hidden()

    def refresh_if_visible(self) -> None:
        """Re-anchor a visible panel at its mark's current position.

        A panel whose record no longer has a mark is hidden.
        """
        record_id = self._state.tooltip.record_id
        if record_id is None:
            return
        mark = self._marks.mark_for(record_id)
        record = self._state.records_by_id.get(record_id)
        if mark is None or record is None:
            self.hide()
            return
        self.show(record, mark)


__all__ = ["TooltipContent", "TooltipController", "build_content", "format_value"]
