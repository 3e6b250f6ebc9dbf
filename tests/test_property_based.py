"""Property-based checks for the coordinate engine.

These exercise domains, nice scales, tick generation and the view transform
over wide numeric inputs, beyond the worked examples in the unit tests.
"""

from __future__ import annotations

import pytest

from scatterview.chart_domain import compute_domain
from scatterview.chart_scales import LinearScale, compute_dimensions, ticks
from scatterview.chart_state import SCALE_EXTENT, ViewTransform

try:
    from hypothesis import assume, given
    from hypothesis import strategies as st
except ModuleNotFoundError:  # pragma: no cover - environment-specific fallback
    pytest.skip("hypothesis is required for property-based tests", allow_module_level=True)


DATA_FLOATS = st.floats(min_value=-1e9, max_value=1e9, allow_nan=False, allow_infinity=False)
SIZES = st.floats(min_value=0, max_value=10_000, allow_nan=False, allow_infinity=False)
FACTORS = st.floats(min_value=1e-3, max_value=1e3, allow_nan=False, allow_infinity=False)


@given(values=st.lists(DATA_FLOATS, min_size=1, max_size=50))
def test_domain_contains_every_value(values: list[float]) -> None:
    domain = compute_domain(values)
    assert domain.lo <= domain.hi
    for v in values:
        assert domain.contains(v)


@given(lo=DATA_FLOATS, span=st.floats(min_value=1e-3, max_value=1e6))
def test_nice_domain_contains_input_domain(lo: float, span: float) -> None:
    hi = lo + span
    assume(hi > lo)
    nice = LinearScale((lo, hi), (0, 500)).nice()
    tol = 1e-9 * max(1.0, abs(lo), abs(hi))
    assert nice.domain[0] <= lo + tol
    assert nice.domain[1] >= hi - tol


@given(lo=DATA_FLOATS, span=st.floats(min_value=1e-3, max_value=1e6))
def test_ticks_lie_inside_interval_and_increase(lo: float, span: float) -> None:
    hi = lo + span
    assume(hi > lo)
    values = ticks(lo, hi, 5)
    tol = 1e-9 * max(1.0, abs(lo), abs(hi))
    assert list(values) == sorted(values)
    for v in values:
        assert lo - tol <= v <= hi + tol


@given(width=SIZES, viewport=SIZES)
def test_dimensions_are_never_negative(width: float, viewport: float) -> None:
    dims = compute_dimensions(width, viewport)
    assert dims.width >= 0
    assert dims.height >= 0
    assert dims.outer_height <= max(350.0, dims.outer_width * 0.75) + 1e-9


@given(start=FACTORS, factor=FACTORS)
def test_zoom_factor_stays_within_extent(start: float, factor: float) -> None:
    t = ViewTransform(k=start).clamped().scaled_about(factor, (100.0, 50.0))
    lo, hi = SCALE_EXTENT
    assert lo <= t.k <= hi


@given(factor=st.floats(min_value=0.5, max_value=32), ax=SIZES, ay=SIZES)
def test_zoom_keeps_anchor_fixed(factor: float, ax: float, ay: float) -> None:
    base = ViewTransform(k=1.0, x=12.0, y=-7.0)
    zoomed = base.scaled_about(factor, (ax, ay))
    data = base.invert(ax, ay)
    px, py = zoomed.apply(*data)
    assert px == pytest.approx(ax, abs=1e-6)
    assert py == pytest.approx(ay, abs=1e-6)
