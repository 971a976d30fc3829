"""Rich.Live renderer for modscout frames.

Draws a title line, the list and detail panes side by side, an optional
status line and the keybinding footer on the alternate screen.
"""

from __future__ import annotations

import logging

from rich.console import Console, Group
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from rich_menu import DEFAULT_THEME, Pane, Theme, render_row

from .projector import Frame

logger = logging.getLogger(__name__)


class RichRenderer:
    """Renderer backed by ``rich.live.Live`` on the alternate screen.

    Use as a context manager; the screen is restored on exit even when the
    session loop raises.
    """

    def __init__(self, console: Console | None = None, theme: Theme | None = None):
        self.console = console or Console(highlight=False)
        self.theme = theme or DEFAULT_THEME
        self._live: Live | None = None

    def __enter__(self) -> "RichRenderer":
        self._live = Live(
            Text(""),
            console=self.console,
            screen=True,
            auto_refresh=False,
            transient=True,
        )
        self._live.__enter__()
        return self

    def __exit__(self, *exc) -> bool:
        if self._live is not None:
            live, self._live = self._live, None
            live.__exit__(*exc)
        return False

    def viewport_size(self) -> tuple[int, int]:
        """Current terminal size as (columns, rows)."""
        size = self.console.size
        return size.width, size.height

    def _row(self, row) -> Text:
        text = Text.from_markup(render_row(row, self.theme), overflow="ellipsis")
        text.no_wrap = True
        return text

    def _pane(self, pane: Pane) -> Panel:
        body = Text("\n").join(self._row(row) for row in pane.rows)
        return Panel(
            body,
            title=Text(pane.title, style=self.theme.title_color, overflow="ellipsis"),
            title_align="left",
            border_style=self.theme.border_color,
        )

    def build(self, frame: Frame) -> Layout:
        """Build the Rich layout for a frame (exposed for tests)."""
        theme = self.theme
        layout = Layout()
        layout.split_column(
            Layout(Text(frame.title, style=theme.title_color, no_wrap=True, overflow="ellipsis"), size=1),
            Layout(name="body", ratio=1),
            Layout(name="bottom", size=2),
        )
        layout["body"].split_row(
            Layout(self._pane(frame.list_pane), ratio=theme.list_ratio),
            Layout(self._pane(frame.detail_pane), ratio=theme.detail_ratio),
        )
        status = Text("")
        if frame.status is not None:
            status = Text(frame.status.text, style=theme.style_for(frame.status.style), no_wrap=True)
        footer = Text(frame.footer, style=theme.muted_color, no_wrap=True, overflow="ellipsis")
        layout["bottom"].update(Group(status, footer))
        return layout

    def draw(self, frame: Frame) -> None:
        if self._live is None:
            raise RuntimeError("RichRenderer.draw called outside its context")
        self._live.update(self.build(frame), refresh=True)
