"""Scrollable text buffer for rich_menu."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

EMPTY_PLACEHOLDER = "(no content)"


@dataclass(frozen=True)
class PagerWindow:
    """Lines visible in a pager plus the hidden counts on each side."""

    lines: tuple[str, ...]
    offset: int
    above: int
    below: int
    placeholder: bool = False

    @property
    def more_above(self) -> bool:
        return self.above > 0

    @property
    def more_below(self) -> bool:
        return self.below > 0


class ContentPager:
    """Holds a sequence of lines and a window of ``page_size`` lines over it.

    Invariant: ``0 <= scroll_offset <= max(0, len(lines) - page_size)``.
    """

    def __init__(self, lines: Iterable[str] = (), page_size: int = 10):
        self._lines: list[str] = list(lines)
        self._page_size = max(1, page_size)
        self._scroll_offset = 0

    @property
    def lines(self) -> tuple[str, ...]:
        return tuple(self._lines)

    @property
    def scroll_offset(self) -> int:
        return self._scroll_offset

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def max_offset(self) -> int:
        return max(0, len(self._lines) - self._page_size)

    def load(self, lines: Iterable[str]) -> None:
        """Replace the buffer and scroll back to the top."""
        self._lines = list(lines)
        self._scroll_offset = 0

    def scroll_by(self, delta: int) -> None:
        self._scroll_offset = max(0, min(self._scroll_offset + delta, self.max_offset))

    def resize(self, page_size: int) -> None:
        self._page_size = max(1, page_size)
        self._scroll_offset = min(self._scroll_offset, self.max_offset)

    def visible_window(self) -> PagerWindow:
        if not self._lines:
            return PagerWindow(lines=(EMPTY_PLACEHOLDER,), offset=0, above=0, below=0, placeholder=True)
        start = self._scroll_offset
        end = min(start + self._page_size, len(self._lines))
        return PagerWindow(
            lines=tuple(self._lines[start:end]),
            offset=start,
            above=start,
            below=len(self._lines) - end,
        )
