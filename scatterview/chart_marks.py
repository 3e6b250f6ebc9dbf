"""Mark renderer: one circular glyph per record, keyed by record id.

Each ``Mark`` stores the record's data coordinates and its current on-screen
position, ``transform.apply(scale_x(record[x]), scale_y(record[y]))``. The
renderer performs a keyed join on every render so that re-rendering updates
existing marks instead of duplicating them, and it forwards surface clicks to
the registered handler together with the clicked record and mark.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import NamedTuple, Optional

import numpy as np

from .chart_state import ChartState
from .chart_surface import ChartSurface
from .records import Record, field_values

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

MarkClickHandler = Callable[[Record, "Mark"], None]


@dataclass(frozen=True)
class Mark:
    """Visual glyph for one record.

    Parameters
    ----------
    record_id : str
        Key of the record this mark represents.
    data_x, data_y : float
        Values of the selected axis fields.
    px, py : float
        Position inside the plotting region, after the view transform.
    radius : float
        Glyph radius in pixels.
    """

    record_id: str
    data_x: float
    data_y: float
    px: float
    py: float
    radius: float = 5.0


class MarkJoin(NamedTuple):
    """Counts from one keyed render."""

    entered: int
    updated: int
    exited: int


class MarkRenderer:
    """Maintain exactly one mark per loaded record.

    Parameters
    ----------
    state : ChartState
        Shared chart state (scales, transform and records are read from it).
    surface : ChartSurface
        Drawing surface receiving the marks.
    """

    def __init__(self, state: ChartState, surface: ChartSurface) -> None:
        self._state = state
        self._surface = surface
        self._marks: dict[str, Mark] = {}
        self._order: tuple[str, ...] = ()
        self._click_handler: Optional[MarkClickHandler] = None
        surface.set_click_handler(self._on_surface_click)

    @property
    def marks(self) -> tuple[Mark, ...]:
        """Return the current marks in record order."""
        return tuple(self._marks[rid] for rid in self._order)

    def __len__(self) -> int:
        return len(self._marks)

    def mark_for(self, record_id: str) -> Optional[Mark]:
        """Return the mark for ``record_id`` or ``None`` if it has none."""
        return self._marks.get(str(record_id))

    def set_click_handler(self, handler: Optional[MarkClickHandler]) -> None:
        """Register the callback invoked with ``(record, mark)`` on click."""
        self._click_handler = handler

    def render(self, records: Sequence[Record]) -> MarkJoin:
        """Join ``records`` against existing marks by id and redraw.

        Records without a mark get one, records with a mark have it updated,
        and marks whose record is absent are dropped.
        """
        keys = tuple(r.id for r in records)
        positions = self._positions(records)
        previous = self._marks
        radius = float(self._state.config.mark_radius)
        marks: dict[str, Mark] = {}
        for record, (dx, dy, px, py) in zip(records, positions):
            marks[record.id] = Mark(record.id, dx, dy, px, py, radius)
        entered = sum(1 for k in keys if k not in previous)
        exited = sum(1 for k in previous if k not in marks)
        join = MarkJoin(entered=entered, updated=len(keys) - entered, exited=exited)

        self._marks = marks
        self._order = keys
        self._surface.render_marks(self.marks)
        logger.debug("marks joined: %s", join)
        return join

    def reposition(self) -> None:
        """Recompute every mark's screen position from the current state."""
        records = [self._state.records_by_id[rid] for rid in self._order]
        self.render(records)

    def clear(self) -> None:
        """Drop every mark."""
        self._marks = {}
        self._order = ()
        self._surface.render_marks(())

    def _positions(self, records: Sequence[Record]) -> list[tuple[float, float, float, float]]:
        if not records:
            return []
        scales = self._state.scales
        if scales is None:
            raise RuntimeError("Cannot position marks before scales are built")
        cfg = self._state.config
        xs = field_values(records, cfg.x.field)
        ys = field_values(records, cfg.y.field)
        px, py = scales.position(xs, ys, self._state.transform)
        px = np.asarray(px, dtype=float)
        py = np.asarray(py, dtype=float)
        return [
            (float(xs[i]), float(ys[i]), float(px[i]), float(py[i]))
            for i in range(len(records))
        ]

    def _on_surface_click(self, record_id: str) -> None:
        mark = self._marks.get(record_id)
        if mark is None or self._click_handler is None:
            return
        self._click_handler(self._state.record(record_id), mark)


__all__ = ["Mark", "MarkJoin", "MarkRenderer"]
