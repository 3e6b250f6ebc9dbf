"""Zoom/pan controller: the interactive view transform over the base scales.

Purpose
-------
``ZoomController`` owns ``ChartState.transform``. Every interaction tick
replaces the transform (clamped to the configured scale extent) and then, as
one batched surface update:

1. re-renders both axes against the base scales seen through the transform,
2. repositions every mark with the same composed mapping,
3. refreshes the detail panel if it is visible.

The controller only changes presentation. Domains and records are never
touched.

Gesture sources
---------------
- Programmatic: :meth:`zoom_by`, :meth:`pan_by`, :meth:`set_transform`.
- Plotly drags: the surface reports new axis ranges; :meth:`on_relayout`
  converts them into a uniform transform (geometric mean of the per-axis
  factors, centers preserved), clamps it, and writes the corrected ranges
  back through the axes.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from .chart_marks import MarkRenderer
from .chart_scales import ScalePair
from .chart_state import ChartState, ViewTransform
from .chart_surface import ChartSurface
from .chart_tooltip import TooltipController

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


def render_view_axes(state: ChartState, surface: ChartSurface) -> None:
    """Render both axes for the base scales composed with the transform."""
    view = state.view_scales()
    surface.render_axes(view.x_axis, view.y_axis)


class ZoomController:
    """Apply pan/zoom gestures to the shared chart state.

    Parameters
    ----------
    state : ChartState
        Shared chart state.
    surface : ChartSurface
        Surface to redraw on every tick.
    marks : MarkRenderer
        Marks repositioned on every tick.
    tooltip : TooltipController
        Panel refreshed on every tick.
    """

    def __init__(
        self,
        state: ChartState,
        surface: ChartSurface,
        marks: MarkRenderer,
        tooltip: TooltipController,
    ) -> None:
        self._state = state
        self._surface = surface
        self._marks = marks
        self._tooltip = tooltip
        self._reference: Optional[ScalePair] = None
        self.ticks = 0
        surface.set_relayout_handler(self.on_relayout)

    @property
    def scale_extent(self) -> tuple[float, float]:
        return self._state.config.scale_extent

    @property
    def transform(self) -> ViewTransform:
        return self._state.transform

    @property
    def reference(self) -> Optional[ScalePair]:
        """Return the base scales gestures are interpreted against."""
        return self._reference

    def bind(self, scales: ScalePair) -> None:
        """Point the controller at freshly built base scales.

        The current transform and the scale extent are kept.
        """
        self._reference = scales

    def set_transform(self, transform: ViewTransform) -> ViewTransform:
        """Replace the transform (clamped) and run one interaction tick.

        Before records are loaded this is a no-op returning the current
        transform.
        """
        if not self._state.is_ready:
            return self._state.transform
        clamped = transform.clamped(self.scale_extent)
        self._state.transform = clamped
        self._tick()
        return clamped

    def zoom_by(self, factor: float, anchor: Optional[tuple[float, float]] = None) -> ViewTransform:
        """Scale by ``factor`` about ``anchor`` (default: plot center)."""
        if not (factor > 0 and math.isfinite(factor)):
            raise ValueError(f"zoom factor must be a positive finite number, got {factor}")
        if anchor is None:
            dims = self._state.dimensions
            anchor = (dims.width / 2.0, dims.height / 2.0) if dims is not None else (0.0, 0.0)
        transform = self._state.transform.scaled_about(factor, anchor, self.scale_extent)
        return self.set_transform(transform)

    def pan_by(self, dx: float, dy: float) -> ViewTransform:
        """Translate by ``(dx, dy)`` pixels."""
        return self.set_transform(self._state.transform.translated(dx, dy))

    def on_relayout(self, x_range: tuple[float, float], y_range: tuple[float, float]) -> None:
        """Convert a viewport reported by the surface into a view transform."""
        transform = self.transform_for_ranges(x_range, y_range)
        if transform is None:
            return
        if transform.is_close(self._state.transform):
            return
        self.set_transform(transform)

    def transform_for_ranges(
        self, x_range: tuple[float, float], y_range: tuple[float, float]
    ) -> Optional[ViewTransform]:
        """Return the clamped uniform transform that best shows the ranges.

        Returns ``None`` when no scales are bound or a range is empty.
        """
        scales = self._reference
        if scales is None:
            return None
        dims = scales.dimensions
        x0, x1 = (float(v) for v in x_range)
        y0, y1 = (float(v) for v in y_range)
        span_px = abs(scales.x(x1) - scales.x(x0))
        span_py = abs(scales.y(y1) - scales.y(y0))
        if dims.width <= 0 or dims.height <= 0 or span_px <= 0 or span_py <= 0:
            return None
        kx = dims.width / span_px
        ky = dims.height / span_py
        lo, hi = self.scale_extent
        k = min(max(math.sqrt(kx * ky), lo), hi)
        cx = scales.x((x0 + x1) / 2.0)
        cy = scales.y((y0 + y1) / 2.0)
        return ViewTransform(k=k, x=dims.width / 2.0 - k * cx, y=dims.height / 2.0 - k * cy)

    def _tick(self) -> None:
        if not self._state.is_ready:
            return
        self.ticks += 1
        with self._surface.batch():
            render_view_axes(self._state, self._surface)
            self._marks.reposition()
            self._tooltip.refresh_if_visible()
        logger.debug("zoom tick %d: %s", self.ticks, self._state.transform)


__all__ = ["ViewTransform", "ZoomController", "render_view_axes"]
