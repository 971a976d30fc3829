"""Projection of navigator state into a renderer-agnostic frame.

``project`` only reads the state machine; it never moves a cursor or
touches a provider. Rows carry semantic style tokens and the renderer
decides what they look like.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from rich_menu import Pane, Row, list_rows, pager_rows

from .navigator import View, ViewKind, ViewStateMachine
from .types import Entry, OptionMenuItem, Parameter, SubEntry, SubEntryKind

APP_TITLE = "modscout"
BREADCRUMB_SEPARATOR = " › "

_KIND_STYLES = {
    SubEntryKind.PRIMARY: "normal",
    SubEntryKind.DERIVED: "derived",
    SubEntryKind.ALIAS: "alias",
}

_FOOTERS = {
    ViewKind.ENTRY_LIST: ["type to filter", "↑↓ move", "→ commands", "← erase/quit", "ctrl+r refresh"],
    ViewKind.SUB_ENTRY_LIST: ["type to filter", "↑↓ move", "→ help options", "← erase/back"],
    ViewKind.OPTION_MENU: ["↑↓ move", "→ open", "← back"],
    ViewKind.PARAMETER_LIST: ["↑↓ move", "→ parameter help", "← back"],
    ViewKind.CONTENT: ["↑↓ scroll", "← back"],
}


@dataclass(frozen=True)
class Frame:
    """Everything a renderer needs to draw one screen."""

    title: str
    list_pane: Pane
    detail_pane: Pane
    footer: str
    status: Row | None = None


def keybinding_hint(actions: list[str], include_quit: bool = True) -> str:
    """Return a standardized keybinding hint line."""
    parts = list(actions)
    if include_quit:
        parts.append("esc quit")
    return " · ".join(parts)


def entry_label(entry: Entry) -> str:
    if entry.is_group:
        return f"{entry.name} ({len(entry.members)} modules)"
    return entry.display_name


def sub_entry_label(sub_entry: SubEntry) -> str:
    target = sub_entry.alias_target
    if target:
        return f"{sub_entry.name} → {target}"
    return sub_entry.name


def sub_entry_style(sub_entry: SubEntry) -> str:
    return _KIND_STYLES.get(sub_entry.kind, "normal")


def parameter_style(parameter: Parameter) -> str:
    return "muted" if parameter.is_common else "normal"


def _filter_suffix(view: View) -> str:
    text = view.list.filter_text
    return f" / {text}" if text else ""


def _breadcrumb(machine: ViewStateMachine) -> str:
    parts = ["Modules"]
    top = machine.top
    if top.entry is not None:
        parts.append(top.entry.name)
    if top.sub_entry is not None and top.kind is not ViewKind.SUB_ENTRY_LIST:
        parts.append(top.sub_entry.name)
    if top.option is not None:
        parts.append(top.option.label)
    if top.parameter is not None:
        parts.append(top.parameter.name)
    return BREADCRUMB_SEPARATOR.join(parts)


def _list_pane(machine: ViewStateMachine) -> Pane:
    view = machine.stack.list_pane_view()
    if view.kind is ViewKind.ENTRY_LIST:
        title = f"Modules ({len(view.list)}){_filter_suffix(view)}"
        rows = list_rows(
            view.list.visible_window(),
            label=entry_label,
            style=lambda e: "derived" if e.is_group else "normal",
            empty_text="No modules match",
        )
    else:
        title = f"{view.entry.name} ({len(view.list)}){_filter_suffix(view)}"
        rows = list_rows(
            view.list.visible_window(),
            label=sub_entry_label,
            style=sub_entry_style,
            empty_text="No commands match",
        )
    return Pane(title=title, rows=rows)


def _entry_detail(entry: Entry | None) -> Pane:
    if entry is None:
        return Pane(title="Module", rows=(Row("Nothing selected", "muted"),))
    rows = [Row(entry.name, "selected")]
    if entry.is_group:
        rows.append(Row(f"Family of {len(entry.members)} modules", "muted"))
        rows.extend(Row(f"  {name}") for name in entry.members)
    else:
        rows.append(Row(f"Version: {entry.version or 'unknown'}"))
        rows.append(Row(f"Family:  {entry.group_key}", "muted"))
    return Pane(title="Module", rows=tuple(rows))


def _sub_entry_detail(sub_entry: SubEntry | None) -> Pane:
    if sub_entry is None:
        return Pane(title="Description", rows=(Row("Nothing selected", "muted"),))
    rows = [
        Row(sub_entry.name, "selected"),
        Row(f"Kind:   {sub_entry.kind.value}", sub_entry_style(sub_entry)),
        Row(f"Module: {sub_entry.source_module or 'unknown'}"),
    ]
    if sub_entry.alias_target:
        rows.append(Row(f"Alias of: {sub_entry.alias_target}", "alias"))
    rows.append(Row(""))
    rows.append(Row(sub_entry.summary or "No summary available.", "normal" if sub_entry.summary else "muted"))
    return Pane(title="Description", rows=tuple(rows))


def _detail_pane(machine: ViewStateMachine) -> Pane:
    top = machine.top
    if top.kind is ViewKind.ENTRY_LIST:
        return _entry_detail(top.list.selected)
    if top.kind is ViewKind.SUB_ENTRY_LIST:
        return _sub_entry_detail(top.list.selected)
    if top.kind is ViewKind.OPTION_MENU:
        rows = list_rows(top.list.visible_window(), label=lambda o: o.label)
        return Pane(title=f"Help for {top.sub_entry.name}", rows=rows)
    if top.kind is ViewKind.PARAMETER_LIST:
        rows = list_rows(top.list.visible_window(), label=lambda p: p.name, style=parameter_style)
        return Pane(title=f"Parameters of {top.sub_entry.name}", rows=rows)

    title = top.option.label if top.option else "Content"
    if top.parameter is not None:
        title = f"Parameter {top.parameter.name}"
    style = "error" if top.is_error else "normal"
    return Pane(title=title, rows=pager_rows(top.pager.visible_window(), style=style))


def _footer(top: View) -> str:
    actions = list(_FOOTERS[top.kind])
    if top.kind is ViewKind.CONTENT and top.option is OptionMenuItem.ONLINE:
        actions.insert(1, "→ open in browser")
    return keybinding_hint(actions)


def project(machine: ViewStateMachine) -> Frame:
    """Build the frame for the current state without mutating it."""
    status = None
    if machine.status is not None:
        status = Row(machine.status.text, "error" if machine.status.level == "error" else "info")
    return Frame(
        title=f"{APP_TITLE}{BREADCRUMB_SEPARATOR}{_breadcrumb(machine)}",
        list_pane=_list_pane(machine),
        detail_pane=_detail_pane(machine),
        footer=_footer(machine.top),
        status=status,
    )


def busy_frame(frame: Frame, message: str) -> Frame:
    """Copy of ``frame`` with the detail pane replaced by a placeholder."""
    placeholder = Pane(title=frame.detail_pane.title, rows=(Row(message, "info"),))
    return replace(frame, detail_pane=placeholder, status=None)
