"""Top-level public API for the ``scatterview`` package.

This module re-exports the notebook-facing surface so users can import from a
single namespace, for example:

>>> from scatterview import ScatterChart, make_books_chart  # doctest: +SKIP

It exposes the high-level chart together with the coordinate-engine building
blocks (domains, scales, view transform, controllers) for integrations that
drive their own surface.
"""

from .books import books_cleaner, make_books_chart
from .chart_domain import DEFAULT_PADDING, Domain, compute_domain, compute_domains
from .chart_layout import ChartLayout, OneShotOutput
from .chart_marks import Mark, MarkJoin, MarkRenderer
from .chart_resize import ResizeController
from .chart_scales import (
    MARGINS,
    Axis,
    Dimensions,
    LinearScale,
    Margins,
    ScaleManager,
    ScalePair,
    build_scales,
    compute_dimensions,
)
from .chart_state import (
    IDENTITY,
    SCALE_EXTENT,
    ChartConfig,
    ChartState,
    TooltipState,
    ViewTransform,
)
from .chart_surface import ChartSurface, PlotlySurface, SurfaceStyle
from .chart_tooltip import TooltipContent, TooltipController, build_content
from .chart_zoom import ZoomController
from .ChartPane import ChartPane, ChartPaneStyle, ChartResizeDriver
from .ChartSnapshot import AxisSnapshot, ChartSnapshot
from .cleaning import RecordCleaner
from .debouncing import ResizeDebouncer
from .derived_fields import DerivedField, compile_expression
from .errors import EmptyDatasetError, LoadError, ScatterviewError
from .field_convert import to_number
from .loader import fetch_dataset
from .records import AxisSelector, Record
from .ScatterChart import ScatterChart
