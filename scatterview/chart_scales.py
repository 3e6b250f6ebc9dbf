"""Scale manager: chart dimensions, data→pixel scales and axis tick generators.

Purpose
-------
This module is the single source of truth for how a data value becomes a
pixel coordinate. It provides:

- ``Dimensions`` and :func:`compute_dimensions` (outer/inner chart size from
  the container width and the viewport height),
- ``LinearScale`` (an immutable linear mapping with nice rounding, ticks and
  inversion),
- ``Axis`` (a tick generator bound to exactly one scale),
- ``ScalePair`` and :func:`build_scales` (both scales and both axes, always
  rebuilt together).

Architecture notes
------------------
Scales and axes are frozen dataclasses. A resize never mutates a scale; it
replaces the whole ``ScalePair``, so an axis can never be paired with a scale
from an older layout.

The tick and nice-rounding rules follow the classic d3 (v3) linear-scale
algorithms so charts get the familiar 1/2/5 tick steps.

Examples
--------
>>> dims = compute_dimensions(800, 1000)
>>> dims.width, dims.outer_height
(730.0, 600.0)
>>> from scatterview.chart_domain import Domain
>>> pair = build_scales(dims, Domain(62.5, 437.5), Domain(0.75, 3.25))
>>> pair.x.domain
(50.0, 450.0)
>>> pair.x_axis.tick_values()
(100.0, 200.0, 300.0, 400.0)
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Union

import numpy as np

from .chart_domain import Domain

if TYPE_CHECKING:
    from .chart_state import ViewTransform

ArrayLike = Union[float, np.ndarray]

# Floor applied to the outer height when the viewport is very short.
MIN_OUTER_HEIGHT = 350.0
ASPECT_RATIO = 0.75
VIEWPORT_FRACTION = 0.9
DEFAULT_TICK_COUNT = 5
NICE_TICK_COUNT = 10

_EPS = 1e-10


@dataclass(frozen=True)
class Margins:
    """Fixed chart margins in pixels."""

    top: int = 15
    right: int = 35
    bottom: int = 35
    left: int = 35


MARGINS = Margins()


@dataclass(frozen=True)
class Dimensions:
    """Outer and inner chart size, always computed together.

    Parameters
    ----------
    outer_width, outer_height : float
        Size of the drawing surface.
    margins : Margins
        Space reserved around the plotting region for axes.
    width, height : float
        Size of the inner plotting region (outer minus margins, floored at 0).
    viewport_height : float
        Viewport height the dimensions were derived from.
    """

    outer_width: float
    outer_height: float
    margins: Margins
    width: float
    height: float
    viewport_height: float


def compute_dimensions(
    container_width: float,
    viewport_height: float,
    margins: Margins = MARGINS,
) -> Dimensions:
    """Derive chart dimensions from the container width and viewport height.

    ``outer_height = min(outer_width * 0.75, viewport_height * 0.9)``, except
    that viewports no taller than ``350 / 0.9`` get a fixed 350 px outer
    height. A zero or negative container width produces a zero-size inner
    region rather than an error.

    Parameters
    ----------
    container_width : float
        Current rendered width of the host container in pixels.
    viewport_height : float
        Current browser viewport height in pixels.
    margins : Margins, optional
        Chart margins.

    Returns
    -------
    Dimensions
    """
    outer_width = max(0.0, float(container_width))
    viewport_height = float(viewport_height)
    outer_height = min(outer_width * ASPECT_RATIO, viewport_height * VIEWPORT_FRACTION)
    if viewport_height <= MIN_OUTER_HEIGHT / VIEWPORT_FRACTION:
        outer_height = MIN_OUTER_HEIGHT
    width = max(0.0, outer_width - margins.left - margins.right)
    height = max(0.0, outer_height - margins.top - margins.bottom)
    return Dimensions(
        outer_width=outer_width,
        outer_height=outer_height,
        margins=margins,
        width=width,
        height=height,
        viewport_height=viewport_height,
    )


# SECTION: tick arithmetic [id: ticks]
# =============================================================================


def tick_step(lo: float, hi: float, count: int) -> float:
    """Return a 1/2/5×10ⁿ step giving roughly ``count`` ticks over ``[lo, hi]``.

    Returns ``0.0`` for an empty or non-finite span.
    """
    span = hi - lo
    if not (span > 0 and math.isfinite(span)) or count <= 0:
        return 0.0
    step = 10.0 ** math.floor(math.log10(span / count))
    err = count / span * step
    if err <= 0.15:
        step *= 10
    elif err <= 0.35:
        step *= 5
    elif err <= 0.75:
        step *= 2
    return step


def _step_digits(step: float) -> int:
    """Decimal digits needed to print multiples of ``step`` exactly."""
    return max(0, -math.floor(math.log10(step) + 0.01))


def ticks(lo: float, hi: float, count: int) -> tuple[float, ...]:
    """Return evenly spaced round values inside ``[lo, hi]``."""
    if lo == hi:
        return (float(lo),) if math.isfinite(lo) else ()
    step = tick_step(lo, hi, count)
    if step == 0.0:
        return ()
    digits = _step_digits(step) + 1
    i0 = math.ceil(lo / step - _EPS)
    i1 = math.floor(hi / step + _EPS)
    return tuple(round(i * step, digits) + 0.0 for i in range(i0, i1 + 1))


def tick_formatter(lo: float, hi: float, count: int) -> Callable[[float], str]:
    """Return a formatter with just enough precision for the tick step."""
    step = tick_step(lo, hi, count)
    digits = _step_digits(step) if step else 0
    return lambda value: f"{value:,.{digits}f}"


# SECTION: LinearScale [id: LinearScale]
# =============================================================================


@dataclass(frozen=True)
class LinearScale:
    """Immutable linear map from a data domain to a pixel range.

    Parameters
    ----------
    domain : tuple[float, float]
        Data interval. A zero-span domain maps every value to ``range[0]``.
    range : tuple[float, float]
        Pixel interval (``(height, 0)`` for an inverted y axis).

    Notes
    -----
    Outputs are not clamped to ``range``: marks panned out of view must
    still receive coordinates.
    """

    domain: tuple[float, float]
    range: tuple[float, float]

    def __post_init__(self) -> None:
        object.__setattr__(self, "domain", (float(self.domain[0]), float(self.domain[1])))
        object.__setattr__(self, "range", (float(self.range[0]), float(self.range[1])))

    @property
    def _d_span(self) -> float:
        return self.domain[1] - self.domain[0]

    @property
    def _r_span(self) -> float:
        return self.range[1] - self.range[0]

    def __call__(self, value: ArrayLike) -> ArrayLike:
        """Map data value(s) to pixel coordinate(s)."""
        d0 = self.domain[0]
        span = self._d_span
        if isinstance(value, np.ndarray):
            t = (value - d0) / span if span else np.zeros_like(value, dtype=float)
            return self.range[0] + t * self._r_span
        t = (float(value) - d0) / span if span else 0.0
        return self.range[0] + t * self._r_span

    def invert(self, pixel: ArrayLike) -> ArrayLike:
        """Map pixel coordinate(s) back to data value(s)."""
        r0 = self.range[0]
        span = self._r_span
        if isinstance(pixel, np.ndarray):
            t = (pixel - r0) / span if span else np.zeros_like(pixel, dtype=float)
            return self.domain[0] + t * self._d_span
        t = (float(pixel) - r0) / span if span else 0.0
        return self.domain[0] + t * self._d_span

    def nice(self, count: int = NICE_TICK_COUNT) -> "LinearScale":
        """Return a copy whose domain is extended outward to round values."""
        lo, hi = self.domain
        step = tick_step(lo, hi, count)
        if step == 0.0:
            return self
        digits = _step_digits(step) + 1
        new_lo = round(math.floor(lo / step + _EPS) * step, digits)
        new_hi = round(math.ceil(hi / step - _EPS) * step, digits)
        return replace(self, domain=(new_lo, new_hi))

    def ticks(self, count: int = DEFAULT_TICK_COUNT) -> tuple[float, ...]:
        return ticks(self.domain[0], self.domain[1], count)

    def tick_format(self, count: int = DEFAULT_TICK_COUNT) -> Callable[[float], str]:
        return tick_formatter(self.domain[0], self.domain[1], count)

    def rescaled(self, factor: float, offset: float) -> "LinearScale":
        """Return the scale seen through ``pixel' = factor * pixel + offset``.

        The range is unchanged; the domain becomes the data interval now
        visible across that range.
        """
        r0, r1 = self.range
        lo = self.invert((r0 - offset) / factor)
        hi = self.invert((r1 - offset) / factor)
        return replace(self, domain=(lo, hi))


# SECTION: Axis [id: Axis]
# =============================================================================


@dataclass(frozen=True)
class Axis:
    """Tick generator bound to one scale.

    Parameters
    ----------
    scale : LinearScale
        Scale the ticks are computed from.
    orient : str
        ``"bottom"`` (x axis) or ``"left"`` (y axis).
    tick_count : int
        Approximate number of ticks.
    label : str
        Axis title.
    """

    scale: LinearScale
    orient: str
    tick_count: int = DEFAULT_TICK_COUNT
    label: str = ""

    def __post_init__(self) -> None:
        if self.orient not in ("bottom", "left"):
            raise ValueError(f"Unsupported axis orientation: {self.orient!r}")

    @property
    def visible_range(self) -> tuple[float, float]:
        """Return the data interval shown along the axis, ascending."""
        lo, hi = self.scale.domain
        return (lo, hi) if lo <= hi else (hi, lo)

    def tick_values(self) -> tuple[float, ...]:
        lo, hi = self.visible_range
        return ticks(lo, hi, self.tick_count)

    def tick_labels(self) -> tuple[str, ...]:
        lo, hi = self.visible_range
        fmt = tick_formatter(lo, hi, self.tick_count)
        return tuple(fmt(v) for v in self.tick_values())

    def tick_positions(self) -> np.ndarray:
        """Return the pixel offset of each tick along the axis."""
        return np.asarray(self.scale(np.asarray(self.tick_values(), dtype=float)))

    def with_scale(self, scale: LinearScale) -> "Axis":
        return replace(self, scale=scale)


# SECTION: ScalePair [id: ScalePair]
# =============================================================================


@dataclass(frozen=True)
class ScalePair:
    """Both base scales with the axes bound to them."""

    x: LinearScale
    y: LinearScale
    x_axis: Axis
    y_axis: Axis
    dimensions: Dimensions = field(repr=False)

    def transformed(self, transform: "ViewTransform") -> "ScalePair":
        """Return the pair as seen through an interactive view transform."""
        x = self.x.rescaled(transform.k, transform.x)
        y = self.y.rescaled(transform.k, transform.y)
        return replace(
            self,
            x=x,
            y=y,
            x_axis=self.x_axis.with_scale(x),
            y_axis=self.y_axis.with_scale(y),
        )

    def position(self, x_value: ArrayLike, y_value: ArrayLike, transform: Any = None) -> tuple[ArrayLike, ArrayLike]:
        """Return pixel coordinates for data values, optionally transformed."""
        px = self.x(x_value)
        py = self.y(y_value)
        if transform is None:
            return px, py
        return transform.apply(px, py)


def build_scales(
    dimensions: Dimensions,
    x_domain: Domain,
    y_domain: Domain,
    *,
    tick_count: int = DEFAULT_TICK_COUNT,
    nice: bool = True,
    x_label: str = "",
    y_label: str = "",
) -> ScalePair:
    """Build both scales and their axes for ``dimensions``.

    Parameters
    ----------
    dimensions : Dimensions
        Current chart dimensions.
    x_domain, y_domain : Domain
        Padded data domains.
    tick_count : int, optional
        Approximate ticks per axis.
    nice : bool, optional
        Extend each domain outward so tick boundaries land on round numbers.
    x_label, y_label : str, optional
        Axis titles carried by the axes.

    Returns
    -------
    ScalePair
    """
    x = LinearScale(x_domain.as_tuple(), (0.0, float(dimensions.width)))
    y = LinearScale(y_domain.as_tuple(), (float(dimensions.height), 0.0))
    if nice:
        x = x.nice()
        y = y.nice()
    return ScalePair(
        x=x,
        y=y,
        x_axis=Axis(x, "bottom", tick_count, x_label),
        y_axis=Axis(y, "left", tick_count, y_label),
        dimensions=dimensions,
    )


class ScaleManager:
    """Own the layout constants and produce dimensions and scales on demand.

    Nothing is cached: every call recomputes from its inputs so a resize can
    never observe a stale width next to a fresh height.
    """

    def __init__(
        self,
        *,
        margins: Margins = MARGINS,
        tick_count: int = DEFAULT_TICK_COUNT,
        nice: bool = True,
    ) -> None:
        self.margins = margins
        self.tick_count = int(tick_count)
        self.nice = bool(nice)

    def compute_dimensions(self, container_width: float, viewport_height: float) -> Dimensions:
        return compute_dimensions(container_width, viewport_height, self.margins)

    def build_scales(
        self,
        dimensions: Dimensions,
        x_domain: Domain,
        y_domain: Domain,
        *,
        x_label: str = "",
        y_label: str = "",
    ) -> ScalePair:
        return build_scales(
            dimensions,
            x_domain,
            y_domain,
            tick_count=self.tick_count,
            nice=self.nice,
            x_label=x_label,
            y_label=y_label,
        )


__all__ = [
    "MARGINS",
    "MIN_OUTER_HEIGHT",
    "Axis",
    "Dimensions",
    "LinearScale",
    "Margins",
    "ScaleManager",
    "ScalePair",
    "build_scales",
    "compute_dimensions",
    "tick_formatter",
    "tick_step",
    "ticks",
]
