from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import pytest

_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from scatterview.records import Record  # noqa: E402


class RecordingSurface:
    """Chart surface that records what the controllers ask it to draw."""

    def __init__(self) -> None:
        self.batches = 0
        self.batch_depth = 0
        self.dimensions = None
        self.x_axis = None
        self.y_axis = None
        self.marks: tuple = ()
        self.tooltip = None
        self.cleared = 0
        self.calls: list[str] = []
        self.click_handler = None
        self.relayout_handler = None

    @contextmanager
    def batch(self):
        self.batches += 1
        self.batch_depth += 1
        try:
            yield
        finally:
            self.batch_depth -= 1

    def configure(self, dimensions: Any) -> None:
        self.calls.append("configure")
        self.dimensions = dimensions

    def render_axes(self, x_axis: Any, y_axis: Any) -> None:
        self.calls.append("axes")
        self.x_axis = x_axis
        self.y_axis = y_axis

    def render_marks(self, marks: Any) -> None:
        self.calls.append("marks")
        self.marks = tuple(marks)

    def clear(self) -> None:
        self.calls.append("clear")
        self.cleared += 1
        self.marks = ()
        self.tooltip = None

    def show_tooltip(self, content: Any, mark: Any, dimensions: Any) -> None:
        self.calls.append("show_tooltip")
        self.tooltip = (content, mark)

    def hide_tooltip(self) -> None:
        self.calls.append("hide_tooltip")
        self.tooltip = None

    def set_click_handler(self, handler: Any) -> None:
        self.click_handler = handler

    def set_relayout_handler(self, handler: Any) -> None:
        self.relayout_handler = handler


def make_record(record_id: str, x: float, y: float, **extra: float) -> Record:
    values = {"x": float(x), "y": float(y)}
    values.update({k: float(v) for k, v in extra.items()})
    return Record(
        id=record_id,
        title=f"Title {record_id}",
        authors=(f"Author {record_id}", "Co Author"),
        url=f"https://example.org/{record_id}",
        values=values,
    )


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def sample_records() -> tuple[Record, ...]:
    """Three records spanning x in [100, 400] and y in [1, 3]."""
    return (
        make_record("A", 100, 1),
        make_record("B", 250, 2),
        make_record("C", 400, 3),
    )


@pytest.fixture
def chart(surface: RecordingSurface, sample_records: tuple[Record, ...]):
    from scatterview import ScatterChart

    c = ScatterChart(
        "#scatter",
        "x",
        "y",
        "X label",
        "Y label",
        surface=surface,
        initial_width=800,
        initial_viewport_height=1000,
    )
    c.load(sample_records)
    return c
