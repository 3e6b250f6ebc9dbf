"""Interactive scatter chart for Jupyter notebooks.

Purpose
-------
``ScatterChart`` is the public entry point. It owns one ``ChartState`` and
wires the coordinate engine (scale manager, mark renderer, resize, zoom/pan
and tooltip controllers) to a drawing surface and, for the default Plotly
surface, to a notebook widget tree that reports its own size.

Lifecycle
---------
1. Construction builds the configuration, the empty state, the surface and
   the controllers. Nothing is drawn yet.
2. :meth:`ScatterChart.populate` fetches and cleans a dataset, then calls
   :meth:`ScatterChart.load`, which tears down the previous chart (tooltip,
   marks, surface), resets the view transform and draws the new records.
3. Host size reports (or explicit :meth:`ScatterChart.resize` calls) re-lay
   the chart out without touching the data or the view transform.
4. Pan/zoom gestures and mark clicks are routed to the zoom and tooltip
   controllers.

Examples
--------
>>> chart = ScatterChart("#scatter", "pages", "sales_rank", "Pages", "Sales Rank")  # doctest: +SKIP
>>> chart.populate("https://example.org/books.json")  # doctest: +SKIP
>>> chart  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any, Optional, Union

import httpx
from IPython.display import display

from .ChartPane import ChartPane
from .ChartSnapshot import ChartSnapshot, take_snapshot
from .chart_domain import compute_domains
from .chart_layout import ChartLayout
from .chart_marks import MarkRenderer
from .chart_resize import ResizeController
from .chart_scales import Dimensions, ScaleManager
from .chart_state import IDENTITY, ChartConfig, ChartState, TooltipState, ViewTransform
from .chart_surface import ChartSurface, PlotlySurface
from .chart_tooltip import TooltipController
from .chart_zoom import ZoomController, render_view_axes
from .cleaning import RecordCleaner
from .debouncing import ResizeDebouncer
from .errors import ScatterviewError
from .loader import fetch_dataset
from .records import AxisSelector, Record, index_records

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class ScatterChart:
    """A responsive, zoomable scatter chart of one record collection.

    Parameters
    ----------
    selector : str
        CSS selector naming the chart host (``"#scatter"``). The host box
        carries the bare name as a CSS class.
    x_field, y_field : str
        Numeric record fields plotted on each axis.
    x_label, y_label : str, optional
        Axis titles; default to the field names.
    detail_fields : sequence of (label, field), optional
        Rows shown in the detail panel after title and authors. Defaults to
        the two axis fields.
    title : str, optional
        Title rendered above the chart (HTML/LaTeX).
    surface : ChartSurface, optional
        Drawing surface. Defaults to a new ``PlotlySurface``; any other
        surface gets no widget tree.
    cleaner : RecordCleaner, optional
        Cleaner used by :meth:`populate`. Defaults to one coercing the axis
        and detail fields.
    debug : bool, optional
        Enable frontend console logging in the size driver.
    **options : Any
        Further ``ChartConfig`` fields (``padding``, ``scale_extent``,
        ``mark_radius``, ``tick_count``, ``nice``, ``margins``,
        ``tooltip_offset``, ``author_separator``, ``resize_debounce_ms``,
        ``initial_width``, ``initial_viewport_height``).

    Notes
    -----
    Every controller receives the same ``ChartState`` by reference; use
    :meth:`snapshot` to inspect it without reaching into controllers.
    """

    def __init__(
        self,
        selector: str,
        x_field: str,
        y_field: str,
        x_label: str = "",
        y_label: str = "",
        *,
        detail_fields: Sequence[tuple[str, str]] = (),
        title: str = "",
        surface: Optional[ChartSurface] = None,
        cleaner: Optional[RecordCleaner] = None,
        debug: bool = False,
        **options: Any,
    ) -> None:
        self.config = ChartConfig(
            selector=selector,
            x=AxisSelector(x_field, x_label),
            y=AxisSelector(y_field, y_label),
            detail_fields=tuple(detail_fields),
            **options,
        )
        cfg = self.config
        self._debug = debug
        # Resizes may arrive on a timer thread outside an event loop.
        self._lock = threading.RLock()
        self.state = ChartState(cfg)
        self.scale_manager = ScaleManager(margins=cfg.margins, tick_count=cfg.tick_count, nice=cfg.nice)

        if surface is None:
            surface = PlotlySurface(mark_radius=cfg.mark_radius, tooltip_offset=cfg.tooltip_offset)
        self.surface = surface

        self.marks = MarkRenderer(self.state, surface)
        self.tooltip = TooltipController(self.state, surface, self.marks)
        self.marks.set_click_handler(self._on_mark_clicked)
        self.zoom = ZoomController(self.state, surface, self.marks, self.tooltip)
        surface.set_relayout_handler(self._on_relayout)
        self.resizer = ResizeController(
            self.state, surface, self.scale_manager, self.marks, self.zoom, self.tooltip
        )

        if cleaner is None:
            fields = dict.fromkeys([cfg.x.field, cfg.y.field, *(f for _, f in cfg.detail_fields)])
            cleaner = RecordCleaner(tuple(fields))
        self.cleaner = cleaner

        self._info_last_log_t = 0.0
        self._debug_last_log_t = 0.0

        self.pane: Optional[ChartPane] = None
        self.layout: Optional[ChartLayout] = None
        self._size_sink: Any = None
        if isinstance(surface, PlotlySurface):
            self.pane = ChartPane(
                surface.figure_widget,
                host_class=cfg.host_class,
                debug_js=debug,
            )
            self.layout = ChartLayout(self.pane.widget, title=title)
            if cfg.resize_debounce_ms > 0:
                self._size_sink = ResizeDebouncer(self.resize, wait_ms=cfg.resize_debounce_ms)
            else:
                self._size_sink = self.resize
            self.pane.observe_size(self._size_sink)

        # Size the empty surface so the host has its final footprint early.
        self.resizer.on_resize(self.state.container_width, self.state.viewport_height)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def records(self) -> tuple[Record, ...]:
        return self.state.records

    @property
    def dimensions(self) -> Optional[Dimensions]:
        return self.state.dimensions

    @property
    def transform(self) -> ViewTransform:
        return self.state.transform

    @property
    def tooltip_state(self) -> TooltipState:
        return self.state.tooltip

    @property
    def figure_widget(self) -> Any:
        """Return the Plotly ``FigureWidget`` (``None`` for other surfaces)."""
        return getattr(self.surface, "figure_widget", None)

    @property
    def widget(self) -> Any:
        """Return the root widget of the chart layout."""
        if self.layout is None:
            raise RuntimeError("This chart has no widget tree (custom surface).")
        return self.layout.root_widget

    def snapshot(self) -> ChartSnapshot:
        """Return an immutable snapshot of the current chart state."""
        return take_snapshot(self.state, self.marks.marks)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def populate(
        self,
        source: Union[str, Path],
        *,
        cleaner: Optional[RecordCleaner] = None,
        client: Optional[httpx.Client] = None,
    ) -> "ScatterChart":
        """Fetch, clean and draw a dataset.

        Parameters
        ----------
        source : str or Path
            ``http(s)://`` URL or path of a JSON array of objects.
        cleaner : RecordCleaner, optional
            Overrides the chart's cleaner for this load.
        client : httpx.Client, optional
            HTTP client to fetch with.

        Returns
        -------
        ScatterChart
            ``self``, for chaining.

        Raises
        ------
        LoadError
            Fetching, parsing or cleaning failed. The previous chart is kept.
        EmptyDatasetError
            The dataset has no records. The previous chart is kept.
        """
        try:
            rows = fetch_dataset(source, client=client)
            records = (cleaner or self.cleaner).clean(rows, source=str(source))
            self.load(records)
        except ScatterviewError as exc:
            logger.error("Failed to populate chart from %s: %s", source, exc)
            if self.layout is not None:
                self.layout.set_status(str(exc))
            raise
        return self

    def load(self, records: Iterable[Record]) -> None:
        """Replace the chart's records and redraw from scratch.

        Domains are validated before anything is torn down, so an invalid
        collection leaves the current chart as it was. The view transform
        is reset to identity and any visible tooltip is hidden.
        """
        with self._lock:
            state = self.state
            cfg = self.config
            records = tuple(records)
            by_id = index_records(records)
            x_domain, y_domain = compute_domains(records, cfg.x.field, cfg.y.field, cfg.padding)

            self.tooltip.hide()
            self.marks.clear()
            self.surface.clear()

            state.records = records
            state.records_by_id = by_id
            state.x_domain = x_domain
            state.y_domain = y_domain
            state.transform = IDENTITY

            dims = self.scale_manager.compute_dimensions(state.container_width, state.viewport_height)
            with self.surface.batch():
                state.dimensions = dims
                self.surface.configure(dims)
                state.scales = self.scale_manager.build_scales(
                    dims, x_domain, y_domain, x_label=cfg.x.label, y_label=cfg.y.label
                )
                render_view_axes(state, self.surface)
                self.marks.render(records)
                self.zoom.bind(state.scales)

            if self.layout is not None:
                self.layout.clear_status()
            logger.info(
                "loaded %d records: %s in %s, %s in %s",
                len(records),
                cfg.x.field,
                x_domain.as_tuple(),
                cfg.y.field,
                y_domain.as_tuple(),
            )

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def resize(self, container_width: float, viewport_height: float) -> Dimensions:
        """Re-lay the chart out for a new host width and viewport height."""
        with self._lock:
            dims = self.resizer.on_resize(container_width, viewport_height)
        self._log_event("resize")
        return dims

    def zoom_by(self, factor: float, anchor: Optional[tuple[float, float]] = None) -> ViewTransform:
        with self._lock:
            transform = self.zoom.zoom_by(factor, anchor)
        self._log_event("zoom")
        return transform

    def pan_by(self, dx: float, dy: float) -> ViewTransform:
        with self._lock:
            transform = self.zoom.pan_by(dx, dy)
        self._log_event("pan")
        return transform

    def set_transform(self, transform: ViewTransform) -> ViewTransform:
        with self._lock:
            return self.zoom.set_transform(transform)

    def reset_view(self) -> ViewTransform:
        """Return to the unzoomed, unpanned view."""
        return self.set_transform(IDENTITY)

    def click(self, record_id: str) -> TooltipState:
        """Simulate a click on ``record_id``'s mark and return the tooltip state.

        Raises
        ------
        KeyError
            No loaded record has this id.
        """
        with self._lock:
            record = self.state.record(record_id)
            mark = self.marks.mark_for(record.id)
            if mark is None:
                raise KeyError(f"Record {record.id!r} has no mark")
            self.tooltip.on_mark_clicked(record, mark)
            return self.state.tooltip

    def _on_mark_clicked(self, record: Record, mark: Any) -> None:
        with self._lock:
            self.tooltip.on_mark_clicked(record, mark)

    def _on_relayout(self, x_range: tuple[float, float], y_range: tuple[float, float]) -> None:
        with self._lock:
            self.zoom.on_relayout(x_range, y_range)

    def reflow(self) -> None:
        """Ask the frontend for a fresh size report."""
        if self.pane is not None:
            self.pane.reflow()

    # ------------------------------------------------------------------
    # Notebook integration
    # ------------------------------------------------------------------

    def _log_event(self, reason: str) -> None:
        now = time.monotonic()
        if logger.isEnabledFor(logging.INFO) and (now - self._info_last_log_t) > 1.0:
            self._info_last_log_t = now
            logger.info("%s: marks=%d k=%g", reason, len(self.marks), self.state.transform.k)

        if logger.isEnabledFor(logging.DEBUG) and (now - self._debug_last_log_t) > 0.5:
            self._debug_last_log_t = now
            dims = self.state.dimensions
            logger.debug("%s: dims=%s transform=%s", reason, dims, self.state.transform)

    def _ipython_display_(self, **kwargs: Any) -> None:
        """Display the chart's widget tree (IPython display hook)."""
        if self.layout is None:
            raise RuntimeError("This chart has no widget tree (custom surface).")
        display(self.layout.output_widget)

    def __repr__(self) -> str:
        return (
            f"ScatterChart({self.config.selector!r}, x={self.config.x.field!r}, "
            f"y={self.config.y.field!r}, records={len(self.state.records)})"
        )


__all__ = ["ScatterChart"]
