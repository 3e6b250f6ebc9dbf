"""Owned chart state shared by the chart controllers.

Purpose
-------
``ChartState`` bundles everything the coordinate and interaction engine
mutates: the loaded records, the padded domains, the current dimensions and
scale pair, the interactive view transform, and the tooltip state. Every
controller receives the same ``ChartState`` instance by reference; each field
is replaced wholesale by exactly one controller per event, never patched in
place.

This module also defines the value types stored in that state:

- ``ChartConfig``: construction-time configuration, frozen for the chart's
  lifetime.
- ``ViewTransform``: the pan/zoom affine transform layered over the base
  scales.
- ``TooltipState``: explicit ``hidden`` / ``visible(record_id)`` state.

Ownership
---------
=====================  ==========================================
Field                  Written by
=====================  ==========================================
records, domains       ``ScatterChart.load``
dimensions, scales     ``ScatterChart.load`` / ``ResizeController``
transform              ``ScatterChart.load`` / ``ZoomController``
tooltip                ``TooltipController``
=====================  ==========================================
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional, Union

import numpy as np

from .chart_domain import DEFAULT_PADDING, Domain
from .chart_scales import DEFAULT_TICK_COUNT, MARGINS, Dimensions, Margins, ScalePair
from .records import AxisSelector, Record

ArrayLike = Union[float, np.ndarray]

SCALE_EXTENT: tuple[float, float] = (0.5, 32.0)


# SECTION: ChartConfig [id: ChartConfig]
# =============================================================================


@dataclass(frozen=True)
class ChartConfig:
    """Construction-time chart configuration.

    Parameters
    ----------
    selector : str
        CSS selector naming the host container (``"#scatter"`` or
        ``".scatter"``). The host widget receives the bare name as a CSS class.
    x, y : AxisSelector
        Fields and labels for the two axes.
    detail_fields : tuple[tuple[str, str], ...]
        ``(label, field)`` rows shown in the detail panel after title and
        authors. Empty means "the two axis fields".
    padding : float
        Domain padding fraction applied on each side.
    scale_extent : tuple[float, float]
        Allowed zoom factor range.
    mark_radius : float
        Radius of every mark in pixels.
    tick_count : int
        Approximate ticks per axis.
    nice : bool
        Round scale domains outward to tick boundaries.
    margins : Margins
        Chart margins.
    tooltip_offset : float
        Gap in pixels between a mark and its detail panel.
    author_separator : str
        Joiner for author names in the detail panel.
    resize_debounce_ms : int
        Debounce window for frontend size reports; ``0`` applies them
        immediately.
    initial_width, initial_viewport_height : float
        Size assumed until the frontend reports a measurement.
    """

    selector: str
    x: AxisSelector
    y: AxisSelector
    detail_fields: tuple[tuple[str, str], ...] = ()
    padding: float = DEFAULT_PADDING
    scale_extent: tuple[float, float] = SCALE_EXTENT
    mark_radius: float = 5.0
    tick_count: int = DEFAULT_TICK_COUNT
    nice: bool = True
    margins: Margins = MARGINS
    tooltip_offset: float = 10.0
    author_separator: str = ", "
    resize_debounce_ms: int = 60
    initial_width: float = 800.0
    initial_viewport_height: float = 900.0

    def __post_init__(self) -> None:
        lo, hi = self.scale_extent
        if not (0 < lo <= hi):
            raise ValueError(f"scale_extent must satisfy 0 < min <= max, got {self.scale_extent}")
        if self.padding < 0:
            raise ValueError(f"padding must be >= 0, got {self.padding}")
        if self.mark_radius <= 0:
            raise ValueError(f"mark_radius must be > 0, got {self.mark_radius}")
        if self.resize_debounce_ms < 0:
            raise ValueError("resize_debounce_ms must be >= 0")
        object.__setattr__(
            self, "detail_fields", tuple((str(l), str(f)) for l, f in self.detail_fields)
        )

    @property
    def host_class(self) -> str:
        """Return the CSS class applied to the host container."""
        return self.selector.lstrip("#.").strip()

    @property
    def resolved_detail_fields(self) -> tuple[tuple[str, str], ...]:
        if self.detail_fields:
            return self.detail_fields
        return ((self.x.label, self.x.field), (self.y.label, self.y.field))


# SECTION: ViewTransform [id: ViewTransform]
# =============================================================================


@dataclass(frozen=True)
class ViewTransform:
    """Uniform scale + translation applied on top of the base scales.

    ``pixel' = k * pixel + (x, y)``. The transform lives in pixel space, so
    a resize that rebuilds the base scales keeps the same ``k``/``x``/``y``.
    """

    k: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def apply(self, px: ArrayLike, py: ArrayLike) -> tuple[ArrayLike, ArrayLike]:
        return px * self.k + self.x, py * self.k + self.y

    def invert(self, px: ArrayLike, py: ArrayLike) -> tuple[ArrayLike, ArrayLike]:
        return (px - self.x) / self.k, (py - self.y) / self.k

    def clamped(self, extent: tuple[float, float] = SCALE_EXTENT) -> "ViewTransform":
        """Return a copy with ``k`` clamped to ``extent`` (translation kept)."""
        lo, hi = extent
        k = min(max(self.k, lo), hi)
        return self if k == self.k else replace(self, k=k)

    def scaled_about(
        self,
        factor: float,
        anchor: tuple[float, float],
        extent: tuple[float, float] = SCALE_EXTENT,
    ) -> "ViewTransform":
        """Multiply ``k`` by ``factor`` (clamped) keeping ``anchor`` fixed on screen."""
        lo, hi = extent
        k = min(max(self.k * factor, lo), hi)
        ax, ay = anchor
        bx, by = self.invert(ax, ay)
        return ViewTransform(k=k, x=ax - bx * k, y=ay - by * k)

    def translated(self, dx: float, dy: float) -> "ViewTransform":
        return replace(self, x=self.x + dx, y=self.y + dy)

    def is_close(self, other: "ViewTransform", tol: float = 1e-9) -> bool:
        return (
            abs(self.k - other.k) <= tol * max(1.0, abs(self.k))
            and abs(self.x - other.x) <= tol * max(1.0, abs(self.x))
            and abs(self.y - other.y) <= tol * max(1.0, abs(self.y))
        )


IDENTITY = ViewTransform()


# SECTION: TooltipState [id: TooltipState]
# =============================================================================


@dataclass(frozen=True)
class TooltipState:
    """Either hidden (``record_id is None``) or visible for one record."""

    record_id: Optional[str] = None

    @classmethod
    def hidden(cls) -> "TooltipState":
        return cls(None)

    @classmethod
    def visible_for(cls, record_id: str) -> "TooltipState":
        return cls(str(record_id))

    @property
    def is_visible(self) -> bool:
        return self.record_id is not None


HIDDEN = TooltipState()


# SECTION: ChartState [id: ChartState]
# =============================================================================


@dataclass
class ChartState:
    """Mutable container for the chart's current coordinate state.

    Parameters
    ----------
    config : ChartConfig
        Fixed configuration.
    container_width, viewport_height : float
        Last measured host width and viewport height.
    """

    config: ChartConfig
    container_width: float = 0.0
    viewport_height: float = 0.0
    records: tuple[Record, ...] = ()
    records_by_id: dict[str, Record] = field(default_factory=dict)
    x_domain: Optional[Domain] = None
    y_domain: Optional[Domain] = None
    dimensions: Optional[Dimensions] = None
    scales: Optional[ScalePair] = None
    transform: ViewTransform = IDENTITY
    tooltip: TooltipState = HIDDEN

    def __post_init__(self) -> None:
        if not self.container_width:
            self.container_width = float(self.config.initial_width)
        if not self.viewport_height:
            self.viewport_height = float(self.config.initial_viewport_height)

    @property
    def is_ready(self) -> bool:
        """Return True once records are loaded and scales are built."""
        return self.scales is not None and self.x_domain is not None

    def record(self, record_id: str) -> Record:
        """Return the record for ``record_id`` or raise ``KeyError``."""
        try:
            return self.records_by_id[str(record_id)]
        except KeyError:
            raise KeyError(f"Unknown record id: {record_id!r}") from None

    def view_scales(self) -> ScalePair:
        """Return the base scale pair seen through the current transform."""
        if self.scales is None:
            raise RuntimeError("Chart scales are not built yet; load records first.")
        return self.scales.transformed(self.transform)


__all__ = [
    "HIDDEN",
    "IDENTITY",
    "SCALE_EXTENT",
    "ChartConfig",
    "ChartState",
    "TooltipState",
    "ViewTransform",
]
