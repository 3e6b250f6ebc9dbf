from __future__ import annotations

import json
import logging

import httpx
import pytest

from scatterview import ScatterChart, make_books_chart
from scatterview.books import BOOKS_DETAIL_FIELDS, books_cleaner
from scatterview.chart_state import IDENTITY
from scatterview.errors import EmptyDatasetError, LoadError

BOOK_ROWS = [
    {
        "ASIN": "B001",
        "title": "Short Book",
        "authors": ["Ann Author"],
        "url": "https://example.org/dp/B001",
        "pages": "100",
        "sales_rank": "10",
    },
    {
        "ASIN": "B002",
        "title": "Long Book",
        "authors": ["Bob Writer", "Cy Editor"],
        "url": "https://example.org/dp/B002",
        "pages": "400",
        "sales_rank": "1,000",
    },
]


@pytest.fixture
def books_file(tmp_path):
    path = tmp_path / "npr-2015.json"
    path.write_text(json.dumps(BOOK_ROWS), encoding="utf-8")
    return path


def _books_chart(surface) -> ScatterChart:
    return ScatterChart(
        "#scatter",
        "pages",
        "log_sales_rank",
        "Pages",
        "Sales Rank, log₁₀",
        detail_fields=BOOKS_DETAIL_FIELDS,
        surface=surface,
        cleaner=books_cleaner(),
        initial_width=800,
        initial_viewport_height=1000,
    )


def test_populate_from_file_draws_books(books_file, surface, caplog) -> None:
    chart = _books_chart(surface)
    with caplog.at_level(logging.INFO, logger="scatterview.ScatterChart"):
        assert chart.populate(books_file) is chart

    assert [r.id for r in chart.records] == ["B001", "B002"]
    assert chart.state.y_domain.as_tuple() == (0.75, 3.25)
    assert chart.state.x_domain.as_tuple() == (62.5, 437.5)
    assert len(surface.marks) == 2
    assert "loaded 2 records" in caplog.text

    chart.click("B002")
    content, _ = surface.tooltip
    assert content.rows == (
        ("Author", "Bob Writer, Cy Editor"),
        ("Sales Rank", "1000"),
        ("Pages", "400"),
    )


def test_populate_over_http(surface) -> None:
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=BOOK_ROWS)))
    chart = _books_chart(surface)
    chart.populate("https://example.org/books/npr-2015.json", client=client)
    assert len(chart.records) == 2


def test_failed_load_keeps_previous_chart_and_raises(books_file, tmp_path, surface, caplog) -> None:
    chart = _books_chart(surface)
    chart.populate(books_file)
    chart.zoom_by(2)
    before = chart.snapshot()

    bad = tmp_path / "bad.json"
    bad.write_text("{oops", encoding="utf-8")
    with caplog.at_level(logging.ERROR, logger="scatterview.ScatterChart"):
        with pytest.raises(LoadError):
            chart.populate(bad)

    assert chart.snapshot() == before
    assert "Failed to populate chart" in caplog.text


def test_empty_dataset_is_reported_and_previous_chart_kept(books_file, tmp_path, surface) -> None:
    chart = _books_chart(surface)
    chart.populate(books_file)
    empty = tmp_path / "empty.json"
    empty.write_text("[]", encoding="utf-8")

    with pytest.raises(EmptyDatasetError):
        chart.populate(empty)
    assert len(chart.records) == 2
    assert len(chart.marks) == 2


def test_reload_resets_transform_and_hides_tooltip(chart, surface, sample_records) -> None:
    chart.zoom_by(4)
    chart.click("A")

    chart.load(sample_records[1:])

    assert chart.transform == IDENTITY
    assert not chart.tooltip_state.is_visible
    assert surface.tooltip is None
    assert surface.cleared >= 1
    assert [m.record_id for m in chart.marks.marks] == ["B", "C"]
    assert chart.state.x_domain.as_tuple() == (231.25, 418.75)


def test_load_rejects_duplicate_ids_before_teardown(chart, sample_records) -> None:
    with pytest.raises(ValueError, match="Duplicate"):
        chart.load([sample_records[0], sample_records[0]])
    assert len(chart.marks) == 3


def test_snapshot_describes_axes_and_marks(chart) -> None:
    snap = chart.snapshot()
    assert snap.x_axis.label == "X label"
    assert snap.x_axis.domain == (50.0, 450.0)
    assert snap.x_axis.tick_labels == ("100", "200", "300", "400")
    assert snap.mark_positions["A"][0] == pytest.approx(91.25)
    assert "marks=3" in repr(snap)


def test_default_cleaner_coerces_axis_fields(tmp_path, surface) -> None:
    rows = [
        {"id": "p", "title": "P", "authors": ["x"], "url": "u", "x": "1", "y": 2},
        {"id": "q", "title": "Q", "authors": ["y"], "url": "v", "x": "3", "y": "4"},
    ]
    path = tmp_path / "rows.json"
    path.write_text(json.dumps(rows), encoding="utf-8")
    chart = ScatterChart("#scatter", "x", "y", surface=surface)
    chart.populate(path)
    assert chart.records[1]["x"] == 3.0


def test_custom_surface_has_no_widget_tree(chart) -> None:
    assert chart.layout is None
    assert chart.figure_widget is None
    with pytest.raises(RuntimeError):
        chart.widget


def test_make_books_chart_uses_plotly_widgets(books_file) -> None:
    chart = make_books_chart(books_file, title="NPR 2015", resize_debounce_ms=0)

    assert chart.config.y.label == "Sales Rank, log₁₀"
    assert chart.layout.get_title() == "NPR 2015"
    assert "scatter" in chart.pane.widget._dom_classes
    trace = chart.figure_widget.data[0]
    assert tuple(trace.ids) == ("B001", "B002")
    assert chart.records[1]["log_sales_rank"] == 3.0


def test_host_size_reports_drive_resize(books_file) -> None:
    chart = make_books_chart(books_file, resize_debounce_ms=0)
    driver = chart.pane.driver
    driver.container_width = 400
    driver.viewport_height = 1000
    driver.revision = driver.revision + 1

    assert chart.dimensions.outer_width == 400
    assert chart.figure_widget.layout.width == 400
    assert chart.figure_widget.layout.height == 300


def test_failed_populate_shows_status_banner(tmp_path) -> None:
    chart = make_books_chart(resize_debounce_ms=0)
    with pytest.raises(LoadError):
        chart.populate(tmp_path / "missing.json")
    assert "Could not read dataset file" in chart.layout.status
    assert chart.layout.status_html.layout.display == "flex"


def test_undecodable_dataset_file_is_reported_in_banner(tmp_path, caplog) -> None:
    path = tmp_path / "latin.json"
    path.write_bytes(b"[\xff\xfe]")
    chart = make_books_chart(resize_debounce_ms=0)
    with caplog.at_level(logging.ERROR, logger="scatterview.ScatterChart"):
        with pytest.raises(LoadError):
            chart.populate(path)
    assert "not valid UTF-8" in chart.layout.status
    assert "Failed to populate chart" in caplog.text
