"""
ChartPane.py - host container + size reporter for a scatter chart widget

A scatter chart computes its own pixel layout in Python (outer size, margins,
scales), so unlike a free-floating Plotly pane it needs the *measurements*
rather than a frontend-side resize. This module provides:

- `ChartResizeDriver`
    An `anywidget.AnyWidget` whose frontend JavaScript measures the host
    container width and the browser viewport height and syncs both back to
    Python through traitlets. Measurements are taken:

      * once on render,
      * whenever a `ResizeObserver` on the host fires,
      * on every `window` `resize` event,
      * on an explicit `reflow()` message from Python.

    Reports are debounced in the frontend (`debounce_ms`) and tiny changes
    below `min_delta_px` are ignored. Each accepted report increments
    `revision`, which Python observes.

- `ChartPaneStyle`
    Frozen dataclass with the host's visual options.

- `ChartPane`
    Python wrapper assembling the host box (carrying the chart's CSS class,
    so the selector given to the chart names a real container) around the
    figure widget and the hidden driver.

Typical usage
-------------

    pane = ChartPane(figure_widget, host_class="scatter")
    pane.observe_size(lambda width, viewport_h: chart.resize(width, viewport_h))
    display(pane.widget)

Notes
-----
The driver node itself is hidden (`display: none`); it only coordinates
trait syncing and custom messages.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import anywidget
import ipywidgets as W
import traitlets

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

__all__ = ["ChartResizeDriver", "ChartPaneStyle", "ChartPane"]

SizeCallback = Callable[[float, float], None]


class ChartResizeDriver(anywidget.AnyWidget):
    """
    Frontend size reporter for a chart host container.

    Traitlets (synced to frontend)
    ------------------------------

    host_selector:
        Optional CSS selector. If non-empty the driver measures
        `document.querySelector(host_selector)`, otherwise its parent element.

    container_width / viewport_height:
        Last measured host width and `window.innerHeight`, in pixels. Written
        by the frontend.

    revision:
        Incremented by the frontend after each accepted measurement.

    debounce_ms:
        Frontend debounce delay for measurements.

    min_delta_px:
        Changes smaller than this in both width and height are ignored.

    debug_js:
        Enables console logging in the frontend.
    """

    host_selector = traitlets.Unicode("").tag(sync=True)
    container_width = traitlets.Float(0.0).tag(sync=True)
    viewport_height = traitlets.Float(0.0).tag(sync=True)
    revision = traitlets.Int(0).tag(sync=True)

    debounce_ms = traitlets.Int(60).tag(sync=True)
    min_delta_px = traitlets.Int(1).tag(sync=True)
    debug_js = traitlets.Bool(False).tag(sync=True)

    _esm = r"""
    function clampInt(x, dflt) {
      let n = Number(x);
      return Number.isFinite(n) ? Math.trunc(n) : dflt;
    }

    function safeLog(enabled, ...args) {
      if (enabled) console.log("[ChartResizeDriver]", ...args);
    }

    export default {
      render({ model, el }) {
        el.style.display = "none";
        const debug = !!model.get("debug_js");

        function resolveHost() {
          const sel = model.get("host_selector");
          if (sel && typeof sel === "string" && sel.trim()) {
            return document.querySelector(sel.trim());
          }
          return el.parentElement;
        }

        let host = resolveHost();
        if (!host) {
          safeLog(debug, "No host found; driver inactive.");
          return;
        }

        let last = { w: -1, h: -1 };
        let timer = null;

        function measure(reason, force) {
          host = resolveHost();
          if (!host) return;
          const w = Math.round(host.getBoundingClientRect().width);
          const h = Math.round(window.innerHeight);
          const minDelta = clampInt(model.get("min_delta_px"), 1);
          if (!force && Math.abs(w - last.w) < minDelta && Math.abs(h - last.h) < minDelta) {
            return;
          }
          last = { w, h };
          safeLog(debug, "measure", reason, w, h);
          model.set("container_width", w);
          model.set("viewport_height", h);
          model.set("revision", clampInt(model.get("revision"), 0) + 1);
          model.save_changes();
        }

        function schedule(reason, force) {
          if (timer) clearTimeout(timer);
          const wait = clampInt(model.get("debounce_ms"), 60);
          timer = setTimeout(() => { timer = null; measure(reason, force); }, wait);
        }

        const ro = new ResizeObserver(() => schedule("ResizeObserver:host", false));
        ro.observe(host);

        const onWindowResize = () => schedule("window:resize", false);
        window.addEventListener("resize", onWindowResize);

        const onMsg = (msg) => {
          if (msg && msg.type === "reflow") schedule("msg:reflow", true);
        };
        model.on("msg:custom", onMsg);

        measure("init", true);

        return () => {
          try { if (timer) clearTimeout(timer); } catch (e) {}
          try { ro.disconnect(); } catch (e) {}
          try { window.removeEventListener("resize", onWindowResize); } catch (e) {}
          try { model.off("msg:custom", onMsg); } catch (e) {}
        };
      }
    };
    """

    def reflow(self) -> None:
        """Ask the frontend to re-measure and report even if nothing changed."""
        self.send({"type": "reflow"})


@dataclass(frozen=True)
class ChartPaneStyle:
    """
    Visual styling options for `ChartPane`.

    Parameters
    ----------
    padding_px:
        Inner padding around the chart.
    border:
        CSS border string.
    border_radius_px:
        Corner radius in pixels.
    overflow:
        Overflow policy of the host.
    """

    padding_px: int = 0
    border: str = "none"
    border_radius_px: int = 0
    overflow: str = "hidden"


class ChartPane:
    """
    Host container for a chart widget plus its hidden size reporter.

    Parameters
    ----------
    figure_widget:
        Widget rendering the chart (typically a Plotly `FigureWidget`).
    host_class:
        CSS class added to the host box. The driver measures the element
        carrying this class.
    style:
        `ChartPaneStyle` for the host.
    debounce_ms:
        Frontend debounce delay for measurements.
    debug_js:
        Enable frontend console logs.
    """

    def __init__(
        self,
        figure_widget: W.Widget,
        *,
        host_class: str = "",
        style: ChartPaneStyle = ChartPaneStyle(),
        debounce_ms: int = 60,
        debug_js: bool = False,
    ) -> None:
        self.host_class = host_class
        self.driver = ChartResizeDriver(
            host_selector=f".{host_class}" if host_class else "",
            debounce_ms=int(debounce_ms),
            debug_js=debug_js,
        )
        self._callbacks: list[SizeCallback] = []

        self._host = W.Box(
            [figure_widget, self.driver],
            layout=W.Layout(
                width="100%",
                min_width="0",
                display="flex",
                flex_flow="column",
                padding=f"{int(style.padding_px)}px",
                border=style.border,
                border_radius=f"{int(style.border_radius_px)}px",
                overflow=style.overflow,
                box_sizing="border-box",
            ),
        )
        if host_class:
            self._host.add_class(host_class)

        self.driver.observe(self._on_revision, names="revision")

    @property
    def widget(self) -> W.Widget:
        """The host box to embed in a layout."""
        return self._host

    @property
    def size(self) -> Optional[tuple[float, float]]:
        """Return the last reported ``(container_width, viewport_height)``."""
        if self.driver.revision <= 0:
            return None
        return (float(self.driver.container_width), float(self.driver.viewport_height))

    def observe_size(self, callback: SizeCallback) -> None:
        """Call ``callback(container_width, viewport_height)`` on every report."""
        self._callbacks.append(callback)

    def _on_revision(self, _change: Any) -> None:
        size = self.size
        if size is None:
            return
        logger.debug("host size report #%d: %s", self.driver.revision, size)
        for callback in list(self._callbacks):
            callback(*size)

    def reflow(self) -> None:
        """Request a fresh measurement from the frontend."""
        self.driver.reflow()
