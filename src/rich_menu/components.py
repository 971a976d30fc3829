"""Pane building blocks for rich_menu.

This module provides the renderer-agnostic pieces a frame is made of:
- Row: one line of text plus a semantic style token
- Pane: a titled column of rows
- list_rows / pager_rows: turn scroll windows into rows with markers
- render_row: Rich markup for a row under a Theme
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, TypeVar

from rich.markup import escape

from .filter_list import ListWindow
from .pager import PagerWindow
from .themes import DEFAULT_THEME, Theme

T = TypeVar("T")


@dataclass(frozen=True)
class Row:
    """One rendered line.

    Attributes:
        text: Plain text (never markup).
        style: Semantic token: selected, normal, muted, derived, alias,
            error, info or marker.
        cursor: Whether the cursor icon is drawn before this row.
    """

    text: str
    style: str = "normal"
    cursor: bool = False


@dataclass(frozen=True)
class Pane:
    """A titled column of rows."""

    title: str
    rows: tuple[Row, ...] = ()


def marker_row(count: int, above: bool) -> Row:
    word = "above" if above else "below"
    return Row(text=f"{count} more {word}", style="marker")


def list_rows(
    window: ListWindow[T],
    label: Callable[[T], str],
    style: Callable[[T], str] | None = None,
    empty_text: str = "No matches",
) -> tuple[Row, ...]:
    """Rows for a list window, bracketed by "more" markers when truncated."""
    if not window.rows:
        return (Row(text=empty_text, style="muted"),)

    rows: list[Row] = []
    if window.more_above:
        rows.append(marker_row(window.above, above=True))
    for i, item in enumerate(window.rows):
        is_selected = i == window.selected
        token = "selected" if is_selected else (style(item) if style else "normal")
        rows.append(Row(text=label(item), style=token, cursor=is_selected))
    if window.more_below:
        rows.append(marker_row(window.below, above=False))
    return tuple(rows)


def pager_rows(window: PagerWindow, style: str = "normal") -> tuple[Row, ...]:
    """Rows for a pager window; the empty placeholder is muted."""
    if window.placeholder:
        return (Row(text=window.lines[0], style="muted"),)
    rows: list[Row] = []
    if window.more_above:
        rows.append(marker_row(window.above, above=True))
    rows.extend(Row(text=line, style=style) for line in window.lines)
    if window.more_below:
        rows.append(marker_row(window.below, above=False))
    return tuple(rows)


def render_row(row: Row, theme: Theme = DEFAULT_THEME) -> str:
    """Render a row as a Rich markup string."""
    color = theme.style_for(row.style)
    text = escape(row.text)
    if row.style == "marker":
        icon = theme.scroll_up_icon if row.text.endswith("above") else theme.scroll_down_icon
        text = f"{icon} {text}"
    if row.cursor:
        prefix = f"[{theme.selected_color}]{theme.cursor_icon}[/] "
    else:
        prefix = "  "
    if color == "default":
        return f"{prefix}{text}"
    return f"{prefix}[{color}]{text}[/]"
