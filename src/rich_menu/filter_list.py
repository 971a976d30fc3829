"""Filterable, scrollable list state for rich_menu.

PagedFilterList owns everything a list pane needs between two renders:
the master item sequence, the live filter text, the filtered subset, the
selected row and the scroll window. Every public operation leaves the
state satisfying these invariants:

- ``page_size >= 1``
- empty ``filtered`` => ``selected_index is None`` and ``scroll_offset == 0``
- otherwise ``0 <= selected_index < len(filtered)``
- ``0 <= scroll_offset <= max(0, len(filtered) - page_size)``
- ``scroll_offset <= selected_index < scroll_offset + page_size``

Example:
    from rich_menu import PagedFilterList

    names = PagedFilterList(["alpha", "beta", "gamma"], page_size=2)
    names.set_filter("a")
    names.move_selection(+1)
    window = names.visible_window()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Iterable, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ListWindow(Generic[T]):
    """Slice of a filtered list that fits on screen.

    Attributes:
        rows: Items to draw, top to bottom.
        offset: Index in the filtered list of the first row.
        selected: Index within ``rows`` of the selected item, or None.
        above: Number of filtered items hidden above the window.
        below: Number of filtered items hidden below the window.
    """

    rows: tuple[T, ...]
    offset: int
    selected: int | None
    above: int
    below: int

    @property
    def more_above(self) -> bool:
        return self.above > 0

    @property
    def more_below(self) -> bool:
        return self.below > 0


class PagedFilterList(Generic[T]):
    """Filterable list with a selection cursor and a scroll window.

    Args:
        items: Initial items (master, unfiltered order is preserved).
        label: Returns the display name of an item; the filter matches it.
        page_size: Number of visible rows (clamped to at least 1).
        filterable: When False, ``set_filter`` is a no-op.
    """

    def __init__(
        self,
        items: Iterable[T] = (),
        label: Callable[[T], str] = str,
        page_size: int = 10,
        filterable: bool = True,
    ):
        self._items: list[T] = list(items)
        self._label = label
        self._filterable = filterable
        self._filter_text = ""
        self._filtered: list[T] = list(self._items)
        self._page_size = max(1, page_size)
        self._scroll_offset = 0
        self._selected_index: int | None = 0 if self._filtered else None

    # ── Queries ──

    @property
    def items(self) -> Sequence[T]:
        return tuple(self._items)

    @property
    def filtered(self) -> Sequence[T]:
        return tuple(self._filtered)

    @property
    def filter_text(self) -> str:
        return self._filter_text

    @property
    def filterable(self) -> bool:
        return self._filterable

    @property
    def selected_index(self) -> int | None:
        return self._selected_index

    @property
    def scroll_offset(self) -> int:
        return self._scroll_offset

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def selected(self) -> T | None:
        """The selected item, or None when nothing matches the filter."""
        if self._selected_index is None:
            return None
        return self._filtered[self._selected_index]

    def label_of(self, item: T) -> str:
        return self._label(item)

    def __len__(self) -> int:
        return len(self._filtered)

    def visible_window(self) -> ListWindow[T]:
        """Return the rows to render plus the hidden counts on each side."""
        start = self._scroll_offset
        end = min(start + self._page_size, len(self._filtered))
        selected = None
        if self._selected_index is not None:
            selected = self._selected_index - start
        return ListWindow(
            rows=tuple(self._filtered[start:end]),
            offset=start,
            selected=selected,
            above=start,
            below=len(self._filtered) - end,
        )

    # ── Mutations ──

    def set_filter(self, text: str) -> None:
        """Refilter by case-insensitive substring and recentre the window.

        The previously selected item stays selected when it survives the
        filter; otherwise the first match is selected.
        """
        if not self._filterable:
            return
        self._filter_text = text
        self._refilter()
        if self._selected_index is not None:
            self._scroll_offset = max(0, self._selected_index - self._page_size // 2)
        self._clamp_window()

    def append_filter_char(self, char: str) -> None:
        self.set_filter(self._filter_text + char)

    def pop_filter_char(self) -> bool:
        """Drop the last filter character. Returns False if the filter was empty."""
        if not self._filter_text:
            return False
        self.set_filter(self._filter_text[:-1])
        return True

    def clear_filter(self) -> None:
        if self._filter_text:
            self.set_filter("")

    def move_selection(self, delta: int) -> None:
        """Move the cursor by ``delta`` rows, scrolling as little as possible."""
        if self._selected_index is None:
            return
        self._selected_index = _clamp(self._selected_index + delta, 0, len(self._filtered) - 1)
        self._clamp_window()

    def select_index(self, index: int) -> None:
        """Select ``index`` in the filtered list; out-of-range values clamp."""
        if not self._filtered:
            return
        self._selected_index = _clamp(index, 0, len(self._filtered) - 1)
        self._clamp_window()

    def select_item(self, item: T) -> bool:
        """Select ``item`` if it is visible under the current filter."""
        try:
            index = self._filtered.index(item)
        except ValueError:
            return False
        self.select_index(index)
        return True

    def append(self, items: Iterable[T]) -> None:
        self._items.extend(items)
        self._refilter()
        self._clamp_window()

    def replace(self, items: Iterable[T]) -> None:
        """Swap in a new master list, keeping the selection when it survives."""
        self._items = list(items)
        self._refilter()
        self._clamp_window()

    def resize(self, page_size: int) -> None:
        """Change the page size without moving the selection."""
        self._page_size = max(1, page_size)
        self._clamp_window()

    # ── Internals ──

    def _matches(self, item: T, needle: str) -> bool:
        return needle in self._label(item).lower()

    def _refilter(self) -> None:
        previous = self.selected
        needle = self._filter_text.lower()
        if needle:
            self._filtered = [item for item in self._items if self._matches(item, needle)]
        else:
            self._filtered = list(self._items)

        if not self._filtered:
            self._selected_index = None
            return
        if previous is not None:
            try:
                self._selected_index = self._filtered.index(previous)
                return
            except ValueError:
                pass
        self._selected_index = 0

    def _clamp_window(self) -> None:
        """Restore the scroll invariants, keeping the selection on screen."""
        total = len(self._filtered)
        if total == 0:
            self._selected_index = None
            self._scroll_offset = 0
            return

        max_offset = max(0, total - self._page_size)
        offset = _clamp(self._scroll_offset, 0, max_offset)
        cursor = self._selected_index
        if cursor < offset:
            offset = cursor
        elif cursor >= offset + self._page_size:
            offset = cursor - self._page_size + 1
        self._scroll_offset = offset


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))
