"""Rich-based building blocks for poll-driven terminal navigators.

A reusable library for filterable, scrollable panes.

Example:
    from rich_menu import PagedFilterList, ContentPager, list_rows

    modules = PagedFilterList(["json", "pathlib", "re"], page_size=10)
    modules.set_filter("pa")
    rows = list_rows(modules.visible_window(), label=str)
"""

from .components import Pane, Row, list_rows, marker_row, pager_rows, render_row
from .filter_list import ListWindow, PagedFilterList
from .keys import (
    Key,
    KeyEvent,
    KeyReader,
    is_backspace,
    is_down,
    is_enter,
    is_escape,
    is_filter_char,
    is_up,
    normalize,
)
from .pager import ContentPager, PagerWindow
from .themes import DEFAULT_THEME, Theme

__all__ = [
    # State
    "PagedFilterList",
    "ListWindow",
    "ContentPager",
    "PagerWindow",
    # Components
    "Row",
    "Pane",
    "list_rows",
    "pager_rows",
    "marker_row",
    "render_row",
    # Theming
    "Theme",
    "DEFAULT_THEME",
    # Keys
    "Key",
    "KeyEvent",
    "KeyReader",
    "normalize",
    "is_enter",
    "is_escape",
    "is_up",
    "is_down",
    "is_backspace",
    "is_filter_char",
]
