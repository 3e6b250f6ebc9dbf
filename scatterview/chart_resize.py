"""Resize controller: recompute layout when the host width or viewport changes.

A resize event runs, in order and inside one batched surface update:

1. recompute ``Dimensions`` from the container width and viewport height,
2. size the drawing surface,
3. rebuild both base scales from the *existing* domains,
4. re-render both axes (seen through the current view transform),
5. reposition every mark,
6. rebind the zoom controller to the new base scales,
7. re-anchor the detail panel if it is visible.

Domains are never recomputed here and the view transform is preserved, so a
resize changes where things are drawn but never which data is visible.
Running the same resize twice produces identical output.
"""

from __future__ import annotations

import logging

from .chart_marks import MarkRenderer
from .chart_scales import Dimensions, ScaleManager
from .chart_state import ChartState
from .chart_surface import ChartSurface
from .chart_tooltip import TooltipController
from .chart_zoom import ZoomController, render_view_axes

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class ResizeController:
    """Keep dimensions, scales, axes and marks consistent with the host size."""

    def __init__(
        self,
        state: ChartState,
        surface: ChartSurface,
        scales: ScaleManager,
        marks: MarkRenderer,
        zoom: ZoomController,
        tooltip: TooltipController,
    ) -> None:
        self._state = state
        self._surface = surface
        self._scales = scales
        self._marks = marks
        self._zoom = zoom
        self._tooltip = tooltip

    def on_resize(self, container_width: float, viewport_height: float) -> Dimensions:
        """Apply a new host size and return the resulting dimensions.

        Before any records are loaded only the size is remembered (and the
        surface sized); the full pass runs once scales exist.
        """
        state = self._state
        state.container_width = float(container_width)
        state.viewport_height = float(viewport_height)
        dims = self._scales.compute_dimensions(state.container_width, state.viewport_height)

        if not state.is_ready:
            state.dimensions = dims
            self._surface.configure(dims)
            return dims

        cfg = state.config
        with self._surface.batch():
            state.dimensions = dims
            self._surface.configure(dims)
            state.scales = self._scales.build_scales(
                dims,
                state.x_domain,
                state.y_domain,
                x_label=cfg.x.label,
                y_label=cfg.y.label,
            )
            render_view_axes(state, self._surface)
            self._marks.reposition()
            self._zoom.bind(state.scales)
            self._tooltip.refresh_if_visible()
        logger.debug(
            "resized to %.0fx%.0f (inner %.0fx%.0f)",
            dims.outer_width,
            dims.outer_height,
            dims.width,
            dims.height,
        )
        return dims


__all__ = ["ResizeController"]
