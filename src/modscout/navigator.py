"""Navigation state machine for the module browser.

The user drills down five levels:

    ENTRY_LIST → SUB_ENTRY_LIST → OPTION_MENU → PARAMETER_LIST → CONTENT
                                            ╰───────────────→ CONTENT

Each level is a ``View`` on a ``NavigationStack`` and owns exactly one
``PagedFilterList`` or ``ContentPager``. Key events are dispatched through
a (view kind, key) table; pairs missing from the table are ignored.
Provider failures never escape ``dispatch``: they become a one-line error
document or a status message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Union

from rich_menu import ContentPager, Key, KeyEvent, PagedFilterList, is_filter_char

from .providers.base import Catalog, ContentProvider
from .types import (
    Entry,
    OptionMenuItem,
    Parameter,
    SubEntry,
    SubEntryCache,
    collapse_families,
    sort_parameters,
)

logger = logging.getLogger(__name__)

BusyHook = Callable[[str], None]


class ViewKind(str, Enum):
    """Levels of the navigation hierarchy."""

    ENTRY_LIST = "entry_list"
    SUB_ENTRY_LIST = "sub_entry_list"
    OPTION_MENU = "option_menu"
    PARAMETER_LIST = "parameter_list"
    CONTENT = "content"

    def __str__(self) -> str:
        return self.value


LIST_PANE_KINDS = (ViewKind.ENTRY_LIST, ViewKind.SUB_ENTRY_LIST)


@dataclass
class View:
    """One level of the stack plus the context selected to reach it."""

    kind: ViewKind
    state: Union[PagedFilterList, ContentPager]
    entry: Entry | None = None
    sub_entry: SubEntry | None = None
    option: OptionMenuItem | None = None
    parameter: Parameter | None = None
    is_error: bool = False

    @property
    def list(self) -> PagedFilterList:
        if not isinstance(self.state, PagedFilterList):
            raise TypeError(f"{self.kind} view has no list")
        return self.state

    @property
    def pager(self) -> ContentPager:
        if not isinstance(self.state, ContentPager):
            raise TypeError(f"{self.kind} view has no pager")
        return self.state


@dataclass(frozen=True)
class Status:
    """Transient one-line message shown under the panes."""

    text: str
    level: str = "info"


class NavigationStack:
    """Ordered views; the root (entry list) is never popped."""

    def __init__(self, root: View):
        self._views: list[View] = [root]

    @property
    def views(self) -> tuple[View, ...]:
        return tuple(self._views)

    @property
    def root(self) -> View:
        return self._views[0]

    @property
    def top(self) -> View:
        return self._views[-1]

    @property
    def depth(self) -> int:
        return len(self._views)

    def push(self, view: View) -> None:
        self._views.append(view)

    def pop(self) -> View | None:
        if len(self._views) == 1:
            return None
        return self._views.pop()

    def unwind(self) -> None:
        """Pop everything above the root."""
        del self._views[1:]

    def find(self, kind: ViewKind) -> View | None:
        """The topmost view of ``kind``, if any."""
        for view in reversed(self._views):
            if view.kind is kind:
                return view
        return None

    def list_pane_view(self) -> View:
        """The entry or sub-entry list that owns the active sub-hierarchy."""
        for view in reversed(self._views):
            if view.kind in LIST_PANE_KINDS:
                return view
        return self.root


def _entry_label(entry: Entry) -> str:
    return entry.name


def _name_label(item: SubEntry | Parameter) -> str:
    return item.name


def _option_label(option: OptionMenuItem) -> str:
    return option.label


def error_line(exc: BaseException) -> str:
    """Render a provider failure as a single line."""
    message = " ".join(str(exc).split()) or type(exc).__name__
    return f"Error: {message}"


class ViewStateMachine:
    """Owns the navigation stack and maps key events to transitions.

    Args:
        catalog: Source of top-level entries (used again on refresh).
        provider: Source of sub-entries, parameters and documents.
        entries: Initial entry listing.
        page_size: Rows per list/pager until the first resize.
        pattern: Catalog filter used when refreshing.
        group_threshold: Collapse same-prefix families of this size or
            larger into one entry (0 disables grouping).
        on_busy: Called with a message right before a blocking fetch.
    """

    def __init__(
        self,
        catalog: Catalog,
        provider: ContentProvider,
        entries: list[Entry],
        page_size: int = 10,
        pattern: str | None = None,
        group_threshold: int = 0,
        on_busy: BusyHook | None = None,
    ):
        self.catalog = catalog
        self.provider = provider
        self.pattern = pattern
        self.group_threshold = group_threshold
        self.on_busy = on_busy
        self.page_size = max(1, page_size)
        self.finished = False
        self.status: Status | None = None
        self.cache: SubEntryCache | None = None

        root = View(
            kind=ViewKind.ENTRY_LIST,
            state=PagedFilterList(self._group(entries), label=_entry_label, page_size=self.page_size),
        )
        self.stack = NavigationStack(root)

        self._handlers: dict[ViewKind, dict[Key, Callable[..., None]]] = {
            ViewKind.ENTRY_LIST: {
                Key.RIGHT: self._select_entry,
                Key.ENTER: self._select_entry,
                Key.LEFT: self._back_from_entries,
                Key.BACKSPACE: self._erase_filter_char,
                Key.UP: self._move_up,
                Key.DOWN: self._move_down,
                Key.CHAR: self._type_filter_char,
                Key.REFRESH: self._refresh_entries,
            },
            ViewKind.SUB_ENTRY_LIST: {
                Key.RIGHT: self._select_sub_entry,
                Key.ENTER: self._select_sub_entry,
                Key.LEFT: self._back_from_sub_entries,
                Key.BACKSPACE: self._erase_filter_char,
                Key.UP: self._move_up,
                Key.DOWN: self._move_down,
                Key.CHAR: self._type_filter_char,
            },
            ViewKind.OPTION_MENU: {
                Key.RIGHT: self._select_option,
                Key.ENTER: self._select_option,
                Key.LEFT: self._pop,
                Key.BACKSPACE: self._pop,
                Key.UP: self._move_up,
                Key.DOWN: self._move_down,
            },
            ViewKind.PARAMETER_LIST: {
                Key.RIGHT: self._select_parameter,
                Key.ENTER: self._select_parameter,
                Key.LEFT: self._pop,
                Key.BACKSPACE: self._pop,
                Key.UP: self._move_up,
                Key.DOWN: self._move_down,
            },
            ViewKind.CONTENT: {
                Key.RIGHT: self._activate_content,
                Key.ENTER: self._activate_content,
                Key.LEFT: self._pop,
                Key.BACKSPACE: self._pop,
                Key.UP: self._scroll_up,
                Key.DOWN: self._scroll_down,
            },
        }

    # ── Public API ──

    @property
    def top(self) -> View:
        return self.stack.top

    @property
    def entry_list(self) -> PagedFilterList:
        return self.stack.root.list

    def dispatch(self, event: KeyEvent) -> None:
        """Apply one key event to the active view."""
        if self.finished:
            return
        if event.key is Key.ESCAPE:
            self.exit()
            return
        view = self.stack.top
        handler = self._handlers[view.kind].get(event.key)
        if handler is None:
            return
        self.status = None
        if event.key is Key.CHAR:
            handler(view, event.char)
        else:
            handler(view)

    def exit(self) -> None:
        """End the session, discarding every pushed view."""
        self.stack.unwind()
        self.cache = None
        self.finished = True

    def resize(self, page_size: int) -> None:
        """Apply a new page size to every list and pager on the stack."""
        self.page_size = max(1, page_size)
        for view in self.stack.views:
            view.state.resize(self.page_size)

    # ── Helpers ──

    def _group(self, entries: list[Entry]) -> list[Entry]:
        if self.group_threshold:
            return collapse_families(entries, self.group_threshold)
        return list(entries)

    def _busy(self, message: str) -> None:
        if self.on_busy is not None:
            self.on_busy(message)

    def _push_list(self, kind: ViewKind, items, label, filterable: bool = False, **context) -> View:
        view = View(
            kind=kind,
            state=PagedFilterList(items, label=label, page_size=self.page_size, filterable=filterable),
            **context,
        )
        self.stack.push(view)
        return view

    def _push_content(self, lines: list[str], is_error: bool = False, **context) -> View:
        pager = ContentPager(page_size=self.page_size)
        pager.load(lines)
        view = View(kind=ViewKind.CONTENT, state=pager, is_error=is_error, **context)
        self.stack.push(view)
        return view

    # ── Shared handlers ──

    def _move_up(self, view: View) -> None:
        view.list.move_selection(-1)

    def _move_down(self, view: View) -> None:
        view.list.move_selection(+1)

    def _scroll_up(self, view: View) -> None:
        view.pager.scroll_by(-1)

    def _scroll_down(self, view: View) -> None:
        view.pager.scroll_by(+1)

    def _type_filter_char(self, view: View, char: str) -> None:
        if is_filter_char(char):
            view.list.append_filter_char(char)

    def _erase_filter_char(self, view: View) -> None:
        view.list.pop_filter_char()

    def _pop(self, view: View) -> None:
        self.stack.pop()

    # ── Entry list ──

    def _select_entry(self, view: View) -> None:
        entry = view.list.selected
        if entry is None:
            return
        self._busy(f"Loading commands for {entry.name}…")
        try:
            sub_entries = self.provider.list_sub_entries(entry)
        except Exception as e:
            logger.warning("Listing commands for %s failed: %s", entry.name, e)
            self.status = Status(f"Could not list commands for {entry.name}: {e}", "error")
            return
        if not sub_entries:
            self.status = Status(f"No commands found in {entry.name}")
            return
        self.cache = SubEntryCache(entry=entry)
        self._push_list(
            ViewKind.SUB_ENTRY_LIST,
            sub_entries,
            label=_name_label,
            filterable=True,
            entry=entry,
        )

    def _back_from_entries(self, view: View) -> None:
        if not view.list.pop_filter_char():
            self.exit()

    def _refresh_entries(self, view: View) -> None:
        self._busy("Refreshing modules…")
        try:
            entries = self.catalog.list_entries(self.pattern)
        except Exception as e:
            logger.warning("Refreshing modules failed: %s", e)
            self.status = Status(f"Refresh failed: {e}", "error")
            return
        if not entries:
            self.status = Status("Refresh found no modules; keeping the previous list")
            return
        view.list.replace(self._group(entries))
        self.status = Status(f"Refreshed {len(entries)} modules")

    # ── Sub-entry list ──

    def _select_sub_entry(self, view: View) -> None:
        sub_entry = view.list.selected
        if sub_entry is None:
            return
        view.list.clear_filter()
        self._push_list(
            ViewKind.OPTION_MENU,
            OptionMenuItem.all(),
            label=_option_label,
            entry=view.entry,
            sub_entry=sub_entry,
        )

    def _back_from_sub_entries(self, view: View) -> None:
        if view.list.pop_filter_char():
            return
        self.stack.pop()
        self.cache = None

    # ── Option menu ──

    def _select_option(self, view: View) -> None:
        option = view.list.selected
        sub_entry = view.sub_entry
        if option is None or sub_entry is None:
            return
        context = {"entry": view.entry, "sub_entry": sub_entry, "option": option}

        if option is OptionMenuItem.PARAMETERS:
            parameters = self._parameters_for(sub_entry)
            if parameters is None:
                return
            if not parameters:
                self.status = Status(f"{sub_entry.name} takes no parameters")
                return
            self._push_list(ViewKind.PARAMETER_LIST, parameters, label=_name_label, **context)
        elif option.is_document:
            self._busy(f"Fetching {option.label.lower()} help for {sub_entry.name}…")
            try:
                lines = list(self.provider.fetch_document(sub_entry, option))
            except Exception as e:
                logger.warning("Fetching %s for %s failed: %s", option, sub_entry.name, e)
                self._push_content([error_line(e)], is_error=True, **context)
                return
            self._push_content(lines, **context)
        else:
            self._push_content([self.provider.online_hint], **context)

    def _parameters_for(self, sub_entry: SubEntry) -> list[Parameter] | None:
        """Cached parameter list; None (with an error status) on failure."""
        if self.cache is not None and sub_entry in self.cache.parameters:
            return self.cache.parameters[sub_entry]
        self._busy(f"Loading parameters for {sub_entry.name}…")
        try:
            parameters = sort_parameters(list(self.provider.list_parameters(sub_entry)))
        except Exception as e:
            logger.warning("Listing parameters for %s failed: %s", sub_entry.name, e)
            self.status = Status(f"Could not list parameters for {sub_entry.name}: {e}", "error")
            return None
        if self.cache is not None:
            self.cache.parameters[sub_entry] = parameters
        return parameters

    # ── Parameter list ──

    def _select_parameter(self, view: View) -> None:
        parameter = view.list.selected
        sub_entry = view.sub_entry
        if parameter is None or sub_entry is None:
            return
        context = {
            "entry": view.entry,
            "sub_entry": sub_entry,
            "option": OptionMenuItem.PARAMETERS,
            "parameter": parameter,
        }
        self._busy(f"Fetching help for {parameter.name}…")
        try:
            text = self.provider.fetch_parameter_help(sub_entry, parameter)
        except Exception as e:
            logger.warning("Fetching help for %s %s failed: %s", sub_entry.name, parameter.name, e)
            self._push_content([error_line(e)], is_error=True, **context)
            return
        self._push_content((text or "").splitlines(), **context)

    # ── Content ──

    def _activate_content(self, view: View) -> None:
        if view.option is not OptionMenuItem.ONLINE or view.sub_entry is None:
            return
        try:
            self.provider.open_online_document(view.sub_entry)
        except Exception as e:
            logger.warning("Opening online help for %s failed: %s", view.sub_entry.name, e)
            view.pager.load([error_line(e)])
            view.is_error = True
            return
        if view.is_error:
            view.pager.load([self.provider.online_hint])
            view.is_error = False
        self.status = Status(f"Opened online help for {view.sub_entry.name}")
