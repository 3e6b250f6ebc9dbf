from __future__ import annotations

import ipywidgets as widgets
import pytest

from scatterview.chart_layout import ChartLayout, OneShotOutput
from scatterview.ChartPane import ChartPane, ChartPaneStyle


def test_chartpane_reflow_delegates_to_driver() -> None:
    pane = ChartPane(widgets.Label("x"))
    called = []
    pane.driver.reflow = lambda: called.append(True)

    pane.reflow()

    assert called == [True]


def test_chartpane_applies_style_and_host_class() -> None:
    pane = ChartPane(
        widgets.Label("x"),
        host_class="scatter",
        style=ChartPaneStyle(padding_px=7, border="1px solid red"),
    )
    assert pane.widget.layout.padding == "7px"
    assert pane.widget.layout.border == "1px solid red"
    assert "scatter" in pane.widget._dom_classes
    assert pane.driver.host_selector == ".scatter"


def test_chartpane_forwards_size_reports() -> None:
    pane = ChartPane(widgets.Label("x"))
    sizes = []
    pane.observe_size(lambda w, h: sizes.append((w, h)))
    assert pane.size is None

    pane.driver.container_width = 640
    pane.driver.viewport_height = 900
    pane.driver.revision = 1

    assert sizes == [(640.0, 900.0)]
    assert pane.size == (640.0, 900.0)


def test_layout_status_banner_escapes_and_clears() -> None:
    layout = ChartLayout(widgets.Label("chart"), title="Books")
    layout.set_status("Bad <data>")
    assert layout.status == "Bad <data>"
    assert "Bad &lt;data&gt;" in layout.status_html.value
    assert layout.status_html.layout.display == "flex"

    layout.clear_status()
    assert layout.status == ""
    assert layout.status_html.layout.display == "none"

    with pytest.raises(ValueError):
        layout.set_status("x", level="loud")


def test_layout_title_toggles_visibility() -> None:
    layout = ChartLayout(widgets.Label("chart"))
    assert layout.title_html.layout.display == "none"
    layout.set_title("Sales")
    assert layout.get_title() == "Sales"
    assert layout.title_html.layout.display == "flex"


def test_one_shot_output_refuses_second_display() -> None:
    out = OneShotOutput()
    out._repr_mimebundle_()
    assert out.has_been_displayed
    with pytest.raises(RuntimeError, match="already been displayed"):
        out._repr_mimebundle_()
    out.reset_display_state()
    assert not out.has_been_displayed
