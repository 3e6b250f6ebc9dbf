"""Notebook widget tree for a scatter chart.

The layout is deliberately small: a title row, a status banner used for load
errors and notices, and the chart host produced by :class:`ChartPane`.
"""

from __future__ import annotations

import html
from typing import Any

import ipywidgets as widgets
from IPython.display import display

# SECTION: OneShotOutput [id: OneShotOutput]
# =============================================================================


class OneShotOutput(widgets.Output):
    """
    Output widget that refuses a second display.

    A chart's widgets are live objects bound to one frontend view. Showing the
    same output twice produces two views that fight over size reports, so the
    second display raises instead.

    Examples
    --------
    >>> out = OneShotOutput()  # doctest: +SKIP
    >>> display(out)  # doctest: +SKIP
    >>> display(out)  # doctest: +SKIP
    RuntimeError: OneShotOutput has already been displayed...
    """

    def __init__(self) -> None:
        super().__init__()
        self._displayed = False

    def _repr_mimebundle_(self, include: Any = None, exclude: Any = None, **kwargs: Any) -> Any:
        if self._displayed:
            raise RuntimeError(
                "OneShotOutput has already been displayed. "
                "Create a new chart output instead of displaying this one again."
            )
        self._displayed = True
        return super()._repr_mimebundle_(include=include, exclude=exclude, **kwargs)

    @property
    def has_been_displayed(self) -> bool:
        return self._displayed

    def reset_display_state(self) -> None:
        """Allow one more display of this widget."""
        self._displayed = False


# =============================================================================
# SECTION: ChartLayout [id: ChartLayout]
# =============================================================================


class ChartLayout:
    """
    Widget hierarchy around a chart host.

    Parameters
    ----------
    host : ipywidgets.Widget
        The chart host (usually ``ChartPane.widget``).
    title : str, optional
        Title text; HTML and LaTeX are rendered.

    Examples
    --------
    >>> layout = ChartLayout(widgets.Label("chart"), title="Books")  # doctest: +SKIP
    >>> layout.set_status("Loading…")  # doctest: +SKIP
    """

    _STATUS_COLORS = {
        "error": ("#991b1b", "#fef2f2", "#fecaca"),
        "info": ("#1e3a8a", "#eff6ff", "#bfdbfe"),
    }

    def __init__(self, host: widgets.Widget, title: str = "") -> None:
        self.host = host
        self._status_text = ""
        self.title_html = widgets.HTMLMath(
            value=title,
            layout=widgets.Layout(margin="0 0 6px 0", display="flex" if title else "none"),
        )
        self.status_html = widgets.HTML(
            value="", layout=widgets.Layout(display="none", width="100%", margin="0 0 6px 0")
        )
        self.root_widget = widgets.VBox(
            [self.title_html, self.status_html, self.host],
            layout=widgets.Layout(width="100%", position="relative"),
        )

    @property
    def output_widget(self) -> OneShotOutput:
        """Return a fresh ``OneShotOutput`` displaying the layout."""
        out = OneShotOutput()
        with out:
            display(self.root_widget)
        return out

    def set_title(self, text: str) -> None:
        self.title_html.value = text
        self.title_html.layout.display = "flex" if text else "none"

    def get_title(self) -> str:
        return self.title_html.value

    @property
    def status(self) -> str:
        """Return the plain text currently shown in the status banner."""
        return self._status_text

    def set_status(self, message: str, *, level: str = "error") -> None:
        """Show ``message`` in the banner above the chart.

        Parameters
        ----------
        message : str
            Plain text; it is escaped before rendering.
        level : {"error", "info"}
            Banner color scheme.
        """
        if level not in self._STATUS_COLORS:
            raise ValueError(f"Unknown status level: {level!r}")
        fg, bg, border = self._STATUS_COLORS[level]
        self._status_text = message
        self.status_html.value = (
            f'<div style="color:{fg};background:{bg};border:1px solid {border};'
            f'border-radius:6px;padding:6px 10px;">{html.escape(message)}</div>'
        )
        self.status_html.layout.display = "flex"

    def clear_status(self) -> None:
        self._status_text = ""
        self.status_html.value = ""
        self.status_html.layout.display = "none"


__all__ = ["ChartLayout", "OneShotOutput"]
