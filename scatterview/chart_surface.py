"""Drawing surfaces the chart controllers render into.

Purpose
-------
Controllers compute *what* the chart looks like (sizes, axis ticks, mark
positions, tooltip content); a surface turns that into pixels. The
``ChartSurface`` protocol lists the operations controllers may call, and
``PlotlySurface`` implements it on a Plotly ``FigureWidget``:

- dimensions become ``layout.width/height`` and fixed margins,
- axes become explicit ``range`` + ``tickvals``/``ticktext``,
- marks become one marker trace keyed by Plotly ``ids``,
- the detail panel becomes a single paper-anchored annotation,
- pan/zoom drags arrive as ``xaxis.range``/``yaxis.range`` changes.

Important gotchas
-----------------
- Plotly fires ``layout.on_change`` callbacks for Python-side writes too. The
  surface suppresses its relayout callback while it is writing so chart
  updates are not mistaken for user gestures.
- ``batch()`` wraps ``FigureWidget.batch_update`` so a whole resize or zoom
  tick reaches the frontend as one message.
"""

from __future__ import annotations

import html
import logging
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional, Protocol

import plotly.graph_objects as go

from .chart_scales import Axis, Dimensions

if TYPE_CHECKING:
    from .chart_marks import Mark
    from .chart_tooltip import TooltipContent

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

ClickHandler = Callable[[str], None]
RelayoutHandler = Callable[[tuple[float, float], tuple[float, float]], None]

# Plotly rejects figure sizes below 10 px.
_PLOTLY_MIN_SIZE = 10


class ChartSurface(Protocol):
    """Operations a chart controller may perform on its drawing surface."""

    def batch(self) -> Any: ...

    def configure(self, dimensions: Dimensions) -> None: ...

    def render_axes(self, x_axis: Axis, y_axis: Axis) -> None: ...

    def render_marks(self, marks: Sequence["Mark"]) -> None: ...

    def clear(self) -> None: ...

    def show_tooltip(self, content: "TooltipContent", mark: "Mark", dimensions: Dimensions) -> None: ...

    def hide_tooltip(self) -> None: ...

    def set_click_handler(self, handler: Optional[ClickHandler]) -> None: ...

    def set_relayout_handler(self, handler: Optional[RelayoutHandler]) -> None: ...


@dataclass(frozen=True)
class SurfaceStyle:
    """Visual options for :class:`PlotlySurface`."""

    mark_color: str = "#1f77b4"
    mark_opacity: float = 0.75
    mark_line_color: str = "#0b3c5d"
    tooltip_bgcolor: str = "rgba(0,0,0,0.8)"
    tooltip_font_color: str = "#ffffff"
    tooltip_font_size: int = 12
    font_family: str = "Inter, -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif"


def tooltip_text(content: "TooltipContent") -> str:
    """Render tooltip content in Plotly's annotation HTML subset."""
    link = (
        f'<a href="{html.escape(content.url, quote=True)}" target="_blank">'
        f"{html.escape(content.title)}</a>"
    )
    lines = [f"<b>Title</b>: {link}"]
    lines.extend(f"<b>{html.escape(label)}</b>: {html.escape(value)}" for label, value in content.rows)
    return "<br>".join(lines)


class PlotlySurface:
    """``ChartSurface`` backed by a Plotly ``FigureWidget``.

    Parameters
    ----------
    figure_widget : plotly.graph_objects.FigureWidget, optional
        Widget to draw into. A new one is created when omitted.
    style : SurfaceStyle, optional
        Colors and fonts.
    mark_radius : float, optional
        Marker radius in pixels (Plotly marker size is the diameter).
    tooltip_offset : float, optional
        Gap between the mark's top edge and the detail panel.
    """

    def __init__(
        self,
        figure_widget: Optional[go.FigureWidget] = None,
        *,
        style: SurfaceStyle = SurfaceStyle(),
        mark_radius: float = 5.0,
        tooltip_offset: float = 10.0,
    ) -> None:
        self.figure_widget = figure_widget if figure_widget is not None else go.FigureWidget()
        self.style = style
        self.mark_radius = float(mark_radius)
        self.tooltip_offset = float(tooltip_offset)
        self._click_handler: Optional[ClickHandler] = None
        self._relayout_handler: Optional[RelayoutHandler] = None
        self._writing = 0
        self._mark_ids: tuple[str, ...] = ()
        self._mark_signature: Optional[tuple[Any, ...]] = None

        self.figure_widget.update_layout(**self._default_layout())
        self.figure_widget.layout.on_change(self._on_range_change, "xaxis.range", "yaxis.range")
        self._ensure_trace()

    def _default_layout(self) -> dict[str, Any]:
        axis = dict(
            zeroline=False,
            showline=True,
            linecolor="#94a3b8",
            linewidth=1,
            ticks="outside",
            tickcolor="#94a3b8",
            ticklen=6,
            showgrid=True,
            gridcolor="rgba(148,163,184,0.35)",
            tickmode="array",
        )
        return dict(
            autosize=False,
            template="plotly_white",
            showlegend=False,
            dragmode="pan",
            hovermode="closest",
            font=dict(family=self.style.font_family, size=13, color="#1f2933"),
            paper_bgcolor="#ffffff",
            plot_bgcolor="#ffffff",
            xaxis=dict(axis),
            yaxis=dict(axis),
        )

    @property
    def writing(self) -> bool:
        """Return True while the surface is applying chart-driven updates."""
        return self._writing > 0

    @contextmanager
    def _suspend_relayout(self) -> Iterator[None]:
        self._writing += 1
        try:
            yield
        finally:
            self._writing -= 1

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Group updates into one frontend message."""
        with self._suspend_relayout(), self.figure_widget.batch_update():
            yield

    def configure(self, dimensions: Dimensions) -> None:
        """Size the drawing surface and the inner plotting region."""
        m = dimensions.margins
        with self._suspend_relayout():
            self.figure_widget.update_layout(
                width=max(_PLOTLY_MIN_SIZE, int(round(dimensions.outer_width))),
                height=max(_PLOTLY_MIN_SIZE, int(round(dimensions.outer_height))),
                margin=dict(t=m.top, r=m.right, b=m.bottom, l=m.left, pad=0, autoexpand=False),
            )

    def render_axes(self, x_axis: Axis, y_axis: Axis) -> None:
        with self._suspend_relayout():
            self.figure_widget.update_xaxes(**self._axis_update(x_axis))
            self.figure_widget.update_yaxes(**self._axis_update(y_axis))

    @staticmethod
    def _axis_update(axis: Axis) -> dict[str, Any]:
        return dict(
            range=list(axis.visible_range),
            autorange=False,
            tickmode="array",
            tickvals=list(axis.tick_values()),
            ticktext=list(axis.tick_labels()),
            title_text=axis.label,
        )

    def render_marks(self, marks: Sequence["Mark"]) -> None:
        """Show one marker per mark, keyed by record id.

        Marks are drawn at their data coordinates; the axis ranges carry the
        view transform, so repositioning after a pan/zoom needs no data push.
        """
        ids = tuple(m.record_id for m in marks)
        xs = [m.data_x for m in marks]
        ys = [m.data_y for m in marks]
        signature = (ids, tuple(xs), tuple(ys))
        if signature == self._mark_signature:
            return
        self._ensure_trace()
        with self._suspend_relayout():
            trace = self.figure_widget.data[0]
            trace.x = xs
            trace.y = ys
            trace.ids = list(ids)
            trace.customdata = list(ids)
        self._mark_ids = ids
        self._mark_signature = signature

    def _ensure_trace(self) -> None:
        """Create the empty marks trace if the figure has none.

        Adding a trace is a structural change; callers run this outside
        ``batch()``.
        """
        if self.figure_widget.data:
            return
        with self._suspend_relayout():
            self.figure_widget.add_scatter(
                x=[],
                y=[],
                ids=[],
                customdata=[],
                mode="markers",
                hoverinfo="none",
                cliponaxis=True,
                marker=dict(
                    size=2 * self.mark_radius,
                    color=self.style.mark_color,
                    opacity=self.style.mark_opacity,
                    line=dict(width=1, color=self.style.mark_line_color),
                ),
            )
            self.figure_widget.data[0].on_click(self._on_trace_click)

    def clear(self) -> None:
        """Remove every mark and annotation, leaving one empty marks trace."""
        with self._suspend_relayout():
            self.figure_widget.data = ()
            self.figure_widget.layout.annotations = ()
        self._mark_ids = ()
        self._mark_signature = None
        self._ensure_trace()

    def show_tooltip(self, content: "TooltipContent", mark: "Mark", dimensions: Dimensions) -> None:
        """Place the single detail panel just above ``mark``'s screen position."""
        fx = mark.px / dimensions.width if dimensions.width > 0 else 0.0
        fy = 1.0 - mark.py / dimensions.height if dimensions.height > 0 else 0.0
        annotation = dict(
            name="detail",
            xref="paper",
            yref="paper",
            x=fx,
            y=fy,
            xanchor="center",
            yanchor="bottom",
            yshift=mark.radius + self.tooltip_offset,
            showarrow=False,
            align="left",
            text=tooltip_text(content),
            bgcolor=self.style.tooltip_bgcolor,
            font=dict(color=self.style.tooltip_font_color, size=self.style.tooltip_font_size),
            borderpad=6,
            captureevents=True,
        )
        with self._suspend_relayout():
            self.figure_widget.layout.annotations = (annotation,)

    def hide_tooltip(self) -> None:
        with self._suspend_relayout():
            self.figure_widget.layout.annotations = ()

    @property
    def tooltip_annotation(self) -> Optional[Any]:
        """Return the visible detail annotation, if any."""
        annotations = self.figure_widget.layout.annotations
        return annotations[0] if annotations else None

    def set_click_handler(self, handler: Optional[ClickHandler]) -> None:
        self._click_handler = handler

    def set_relayout_handler(self, handler: Optional[RelayoutHandler]) -> None:
        self._relayout_handler = handler

    def _on_trace_click(self, _trace: Any, points: Any, _state: Any) -> None:
        inds = list(getattr(points, "point_inds", ()) or ())
        if not inds or self._click_handler is None:
            return
        idx = int(inds[0])
        if 0 <= idx < len(self._mark_ids):
            self._click_handler(self._mark_ids[idx])

    def _on_range_change(self, _layout: Any, x_range: Any, y_range: Any) -> None:
        if self._writing or self._relayout_handler is None:
            return
        if x_range is None or y_range is None:
            return
        self._relayout_handler(
            (float(x_range[0]), float(x_range[1])),
            (float(y_range[0]), float(y_range[1])),
        )


__all__ = ["ChartSurface", "PlotlySurface", "SurfaceStyle", "tooltip_text"]
