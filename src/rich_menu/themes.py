"""Configurable themes for rich_menu components.

This module provides theming support for pane styling. The Theme dataclass
holds all configurable visual elements (colors, icons, layout). Views emit
semantic style tokens; only ``Theme.style_for`` turns them into colors.
"""

from dataclasses import dataclass, fields
from typing import Any


@dataclass
class Theme:
    """Visual theme for two-pane navigators.

    All colors use Rich markup format (e.g., "green", "bold cyan", "dim").

    Attributes:
        selected_color: Color for the cursor row.
        normal_color: Color for ordinary rows.
        muted_color: Color for de-emphasized rows and hints.
        derived_color: Color for derived sub-entries.
        alias_color: Color for alias sub-entries.
        error_color: Color for error documents.
        info_color: Color for informational messages.
        border_color: Color for panel borders.
        title_color: Color for the title line.

        cursor_icon: Character shown next to the selected row.
        scroll_up_icon: Character indicating more rows above.
        scroll_down_icon: Character indicating more rows below.

        list_ratio: Relative width of the list pane.
        detail_ratio: Relative width of the detail pane.
    """

    # Colors
    selected_color: str = "bold cyan"
    normal_color: str = "default"
    muted_color: str = "dim"
    derived_color: str = "green"
    alias_color: str = "magenta"
    error_color: str = "red"
    info_color: str = "yellow"
    border_color: str = "cyan"
    title_color: str = "bold"

    # Icons
    cursor_icon: str = "›"
    scroll_up_icon: str = "↑"
    scroll_down_icon: str = "↓"

    # Layout
    list_ratio: int = 2
    detail_ratio: int = 3

    def style_for(self, token: str) -> str:
        """Return the Rich style for a semantic row token."""
        mapping = {
            "selected": self.selected_color,
            "normal": self.normal_color,
            "muted": self.muted_color,
            "marker": self.muted_color,
            "derived": self.derived_color,
            "alias": self.alias_color,
            "error": self.error_color,
            "info": self.info_color,
        }
        return mapping.get(token, self.normal_color)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Theme":
        """Build a theme from config overrides, ignoring unknown keys."""
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


# Default theme used when none is specified
DEFAULT_THEME = Theme()
