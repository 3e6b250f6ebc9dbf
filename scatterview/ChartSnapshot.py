"""Immutable snapshot of a scatter chart's coordinate and interaction state.

A ``ChartSnapshot`` captures everything a reader needs to check what the
chart would draw: sizes, domains, scale domains after nice rounding, the view
transform, tick labels, the tooltip state and every mark's pixel position.
It holds only plain values, so two snapshots compare equal exactly when the
chart would render identically.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .chart_marks import Mark
from .chart_scales import Dimensions
from .chart_state import ChartState, TooltipState, ViewTransform


@dataclass(frozen=True)
class AxisSnapshot:
    """Immutable record of one rendered axis.

    Parameters
    ----------
    label : str
        Axis title.
    domain : tuple[float, float]
        Base scale domain (after nice rounding, before the view transform).
    visible_range : tuple[float, float]
        Data interval visible through the current view transform.
    tick_values : tuple[float, ...]
        Tick positions in data units.
    tick_labels : tuple[str, ...]
        Formatted tick labels.
    """

    label: str
    domain: Tuple[float, float]
    visible_range: Tuple[float, float]
    tick_values: tuple[float, ...]
    tick_labels: tuple[str, ...]


@dataclass(frozen=True)
class ChartSnapshot:
    """Immutable record of a full chart's state.

    Parameters
    ----------
    dimensions : Dimensions or None
        Current layout; ``None`` before the first layout pass.
    x_domain, y_domain : tuple[float, float] or None
        Padded data domains.
    x_axis, y_axis : AxisSnapshot or None
        Rendered axes; ``None`` before records are loaded.
    transform : ViewTransform
        Current view transform.
    tooltip : TooltipState
        Current detail panel state.
    marks : tuple[Mark, ...]
        Marks in record order.
    """

    dimensions: Optional[Dimensions]
    x_domain: Optional[Tuple[float, float]]
    y_domain: Optional[Tuple[float, float]]
    x_axis: Optional[AxisSnapshot]
    y_axis: Optional[AxisSnapshot]
    transform: ViewTransform
    tooltip: TooltipState
    marks: tuple[Mark, ...]

    @property
    def mark_positions(self) -> dict[str, tuple[float, float]]:
        """Return ``{record_id: (px, py)}``."""
        return {m.record_id: (m.px, m.py) for m in self.marks}

    def __repr__(self) -> str:
        size = (
            f"{self.dimensions.outer_width:.0f}x{self.dimensions.outer_height:.0f}"
            if self.dimensions is not None
            else "unsized"
        )
        return (
            f"ChartSnapshot(size={size}, marks={len(self.marks)}, "
            f"k={self.transform.k:g}, tooltip={self.tooltip.record_id!r})"
        )


def take_snapshot(state: ChartState, marks: tuple[Mark, ...]) -> ChartSnapshot:
    """Capture ``state`` and ``marks`` as a ``ChartSnapshot``."""
    x_axis = y_axis = None
    if state.scales is not None:
        base = state.scales
        view = state.view_scales()
        x_axis = AxisSnapshot(
            label=base.x_axis.label,
            domain=base.x.domain,
            visible_range=view.x_axis.visible_range,
            tick_values=view.x_axis.tick_values(),
            tick_labels=view.x_axis.tick_labels(),
        )
        y_axis = AxisSnapshot(
            label=base.y_axis.label,
            domain=base.y.domain,
            visible_range=view.y_axis.visible_range,
            tick_values=view.y_axis.tick_values(),
            tick_labels=view.y_axis.tick_labels(),
        )
    return ChartSnapshot(
        dimensions=state.dimensions,
        x_domain=state.x_domain.as_tuple() if state.x_domain is not None else None,
        y_domain=state.y_domain.as_tuple() if state.y_domain is not None else None,
        x_axis=x_axis,
        y_axis=y_axis,
        transform=state.transform,
        tooltip=state.tooltip,
        marks=tuple(marks),
    )


__all__ = ["AxisSnapshot", "ChartSnapshot", "take_snapshot"]
