"""Tests for the navigation state machine."""

import pytest

from conftest import FakeProvider, fail, keys
from modscout.errors import ProviderError
from modscout.navigator import NavigationStack, View, ViewKind, ViewStateMachine, error_line
from modscout.types import Entry, OptionMenuItem, Parameter, SubEntry
from rich_menu import ContentPager, PagedFilterList


def press(machine, *names):
    for event in keys(*names):
        machine.dispatch(event)


def open_options(machine, sub_entry_downs: int = 0):
    """Enter Alpha, move to a sub-entry and open its option menu."""
    press(machine, "right", *(["down"] * sub_entry_downs), "right")
    assert machine.top.kind is ViewKind.OPTION_MENU


def select_option(machine, option: OptionMenuItem):
    menu = machine.top.list
    menu.select_item(option)
    press(machine, "right")


class TestInitialState:
    def test_starts_on_entry_list(self, machine):
        assert machine.top.kind is ViewKind.ENTRY_LIST
        assert machine.entry_list.selected.name == "Alpha"
        assert machine.entry_list.filter_text == ""
        assert machine.stack.depth == 1
        assert not machine.finished

    def test_empty_listing_has_no_selection(self, provider):
        machine = ViewStateMachine(provider, provider, entries=[])
        assert machine.entry_list.selected is None
        press(machine, "right")
        assert machine.top.kind is ViewKind.ENTRY_LIST


class TestEntryList:
    def test_right_pushes_sub_entries(self, machine, provider):
        press(machine, "right")
        assert machine.top.kind is ViewKind.SUB_ENTRY_LIST
        assert machine.top.entry.name == "Alpha"
        assert [s.name for s in machine.top.list.filtered] == ["Get-Foo", "Set-Foo", "gf"]
        assert machine.cache.entry.name == "Alpha"
        assert ("list_sub_entries", "Alpha") in provider.calls

    def test_enter_selects_like_right(self, machine):
        press(machine, "enter")
        assert machine.top.kind is ViewKind.SUB_ENTRY_LIST

    def test_typing_filters(self, machine):
        press(machine, "bet")
        assert machine.entry_list.filter_text == "bet"
        assert [e.name for e in machine.entry_list.filtered] == ["Beta"]

    def test_invalid_filter_chars_are_ignored(self, machine):
        press(machine, "a.b *")
        assert machine.entry_list.filter_text == "ab"

    def test_left_erases_filter_then_exits(self, machine):
        press(machine, "al", "left")
        assert machine.entry_list.filter_text == "a"
        assert not machine.finished
        press(machine, "left")
        assert machine.entry_list.filter_text == ""
        assert not machine.finished
        press(machine, "left")
        assert machine.finished

    def test_backspace_erases_filter_only(self, machine):
        press(machine, "a", "bs", "bs")
        assert machine.entry_list.filter_text == ""
        assert not machine.finished

    def test_no_sub_entries_stays_with_status(self, machine):
        press(machine, "down", "right")
        assert machine.top.kind is ViewKind.ENTRY_LIST
        assert machine.status.level == "info"
        assert "Beta" in machine.status.text

    def test_listing_failure_stays_with_error_status(self, machine, provider):
        fail(provider, "list_sub_entries", "Alpha")
        press(machine, "right")
        assert machine.top.kind is ViewKind.ENTRY_LIST
        assert machine.status.level == "error"

    def test_status_clears_on_next_key(self, machine):
        press(machine, "down", "right")
        assert machine.status is not None
        press(machine, "up")
        assert machine.status is None

    def test_refresh_replaces_entries_and_keeps_selection(self, machine, provider):
        press(machine, "down")
        provider.entries.insert(0, Entry(name="Aardvark"))
        press(machine, "refresh")
        assert [e.name for e in machine.entry_list.filtered] == ["Aardvark", "Alpha", "Beta"]
        assert machine.entry_list.selected.name == "Beta"

    def test_refresh_failure_keeps_list(self, machine, provider):
        fail(provider, "list_entries", None)
        press(machine, "refresh")
        assert len(machine.entry_list.filtered) == 2
        assert machine.status.level == "error"

    def test_refresh_with_empty_result_keeps_list(self, machine, provider):
        provider.entries.clear()
        press(machine, "refresh")
        assert len(machine.entry_list.filtered) == 2


class TestSubEntryList:
    def test_typing_filters_sub_entries(self, machine):
        press(machine, "right", "set")
        assert [s.name for s in machine.top.list.filtered] == ["Set-Foo"]

    def test_left_erases_then_pops(self, machine):
        press(machine, "right", "gf", "left")
        assert machine.top.list.filter_text == "g"
        press(machine, "left", "left")
        assert machine.top.kind is ViewKind.ENTRY_LIST
        assert machine.cache is None

    def test_select_clears_filter_and_keeps_item(self, machine):
        press(machine, "right", "set", "right")
        assert machine.top.kind is ViewKind.OPTION_MENU
        assert machine.top.sub_entry.name == "Set-Foo"
        sub_list = machine.stack.find(ViewKind.SUB_ENTRY_LIST).list
        assert sub_list.filter_text == ""
        assert sub_list.selected.name == "Set-Foo"

    def test_option_menu_lists_all_options(self, machine):
        open_options(machine)
        assert list(machine.top.list.filtered) == OptionMenuItem.all()
        assert machine.top.list.selected is OptionMenuItem.EXAMPLES


class TestOptionMenu:
    def test_typing_is_ignored(self, machine):
        open_options(machine)
        press(machine, "abc")
        assert machine.top.kind is ViewKind.OPTION_MENU
        assert machine.top.list.filter_text == ""

    def test_alias_examples_fit_on_page(self, machine):
        open_options(machine, sub_entry_downs=2)
        assert machine.top.sub_entry.name == "gf"
        press(machine, "right")
        top = machine.top
        assert top.kind is ViewKind.CONTENT
        window = top.pager.visible_window()
        assert window.lines == ("Example 1", "gf -Name x", "Example 2")
        assert not window.more_above
        assert not window.more_below

    def test_fetch_failure_becomes_error_document(self, machine, provider):
        fail(provider, "fetch_document", "Get-Foo", OptionMenuItem.DETAILED, error=ProviderError("Get-Help", "no help"))
        open_options(machine)
        select_option(machine, OptionMenuItem.DETAILED)
        top = machine.top
        assert top.kind is ViewKind.CONTENT
        assert top.is_error
        assert top.pager.lines == ("Error: Get-Help failed: no help",)

        press(machine, "left")
        assert machine.top.kind is ViewKind.OPTION_MENU
        assert machine.top.list.selected is OptionMenuItem.DETAILED

        del provider.failures[("fetch_document", "Get-Foo", OptionMenuItem.DETAILED)]
        press(machine, "right")
        assert machine.top.kind is ViewKind.CONTENT
        assert not machine.top.is_error
        assert len(machine.top.pager.lines) == 30
        fetches = [c for c in provider.calls if c[0] == "fetch_document"]
        assert len(fetches) == 2

    def test_unexpected_exception_is_contained(self, machine, provider):
        fail(provider, "fetch_document", "Get-Foo", OptionMenuItem.FULL, error=OSError("disk\non fire"))
        open_options(machine)
        select_option(machine, OptionMenuItem.FULL)
        assert machine.top.pager.lines == ("Error: disk on fire",)

    def test_online_shows_instructions_then_opens(self, machine, provider):
        open_options(machine)
        select_option(machine, OptionMenuItem.ONLINE)
        assert machine.top.kind is ViewKind.CONTENT
        assert machine.top.pager.lines == (provider.online_hint,)
        assert not any(c[0] == "fetch_document" for c in provider.calls)

        press(machine, "right")
        assert provider.opened == ["Get-Foo"]
        assert machine.top.kind is ViewKind.CONTENT
        assert machine.status.level == "info"

    def test_online_failure_is_error_document(self, machine, provider):
        fail(provider, "open_online_document", "Get-Foo")
        open_options(machine)
        select_option(machine, OptionMenuItem.ONLINE)
        press(machine, "right")
        assert machine.top.is_error
        assert len(machine.top.pager.lines) == 1

    def test_empty_parameters_stay_with_status(self, machine):
        open_options(machine, sub_entry_downs=1)
        select_option(machine, OptionMenuItem.PARAMETERS)
        assert machine.top.kind is ViewKind.OPTION_MENU
        assert "no parameters" in machine.status.text

    def test_parameter_listing_failure(self, machine, provider):
        fail(provider, "list_parameters", "Get-Foo")
        open_options(machine)
        select_option(machine, OptionMenuItem.PARAMETERS)
        assert machine.top.kind is ViewKind.OPTION_MENU
        assert machine.status.level == "error"

    def test_busy_hook_runs_before_fetch(self, make_machine):
        messages = []
        machine = make_machine(on_busy=messages.append)
        open_options(machine)
        select_option(machine, OptionMenuItem.EXAMPLES)
        assert any("Loading commands" in m for m in messages)
        assert any("Fetching examples" in m for m in messages)


class TestParameterList:
    def test_common_parameters_sort_last(self, machine):
        open_options(machine)
        select_option(machine, OptionMenuItem.PARAMETERS)
        assert machine.top.kind is ViewKind.PARAMETER_LIST
        assert [p.name for p in machine.top.list.filtered] == ["Name", "Path", "Verbose"]

    def test_parameters_are_fetched_once(self, machine, provider):
        open_options(machine)
        select_option(machine, OptionMenuItem.PARAMETERS)
        press(machine, "left")
        select_option(machine, OptionMenuItem.PARAMETERS)
        assert provider.calls.count(("list_parameters", "Get-Foo")) == 1

    def test_parameter_help_content(self, machine):
        open_options(machine)
        select_option(machine, OptionMenuItem.PARAMETERS)
        press(machine, "right")
        top = machine.top
        assert top.kind is ViewKind.CONTENT
        assert top.parameter.name == "Name"
        assert top.pager.lines == ("The name of the foo.",)

        press(machine, "left")
        assert machine.top.kind is ViewKind.PARAMETER_LIST

    def test_parameter_help_failure(self, machine, provider):
        fail(provider, "fetch_parameter_help", "Get-Foo", "Name")
        open_options(machine)
        select_option(machine, OptionMenuItem.PARAMETERS)
        press(machine, "right")
        assert machine.top.is_error
        assert len(machine.top.pager.lines) == 1

    def test_typing_is_ignored(self, machine):
        open_options(machine)
        select_option(machine, OptionMenuItem.PARAMETERS)
        press(machine, "pa")
        assert machine.top.list.filter_text == ""


class TestContent:
    def test_up_down_scroll(self, make_machine):
        machine = make_machine(page_size=10)
        open_options(machine)
        select_option(machine, OptionMenuItem.DETAILED)
        press(machine, "down", "down", "up", "down")
        assert machine.top.pager.scroll_offset == 2
        press(machine, *(["down"] * 50))
        assert machine.top.pager.scroll_offset == 20

    def test_right_on_document_is_noop(self, machine):
        open_options(machine)
        select_option(machine, OptionMenuItem.DETAILED)
        depth = machine.stack.depth
        press(machine, "right")
        assert machine.stack.depth == depth


def _reach(machine, kind: ViewKind):
    if kind is ViewKind.ENTRY_LIST:
        press(machine, "al")
        return
    press(machine, "right", "g")
    if kind is ViewKind.SUB_ENTRY_LIST:
        return
    press(machine, "right")
    if kind is ViewKind.OPTION_MENU:
        return
    if kind is ViewKind.PARAMETER_LIST:
        select_option(machine, OptionMenuItem.PARAMETERS)
        return
    select_option(machine, OptionMenuItem.DETAILED)
    press(machine, "down", "down")


@pytest.mark.parametrize("kind", list(ViewKind))
def test_escape_terminates_from_every_state(machine, kind):
    _reach(machine, kind)
    assert machine.top.kind is kind
    press(machine, "esc")
    assert machine.finished
    assert machine.stack.depth == 1
    assert machine.cache is None


def test_keys_after_finish_are_ignored(machine):
    press(machine, "esc", "right")
    assert machine.stack.depth == 1


def test_resize_reaches_every_view(make_machine):
    machine = make_machine(page_size=10)
    open_options(machine)
    select_option(machine, OptionMenuItem.DETAILED)
    machine.resize(3)
    assert all(view.state.page_size == 3 for view in machine.stack.views)
    press(machine, "left")
    select_option(machine, OptionMenuItem.PARAMETERS)
    assert machine.top.list.page_size == 3


def test_grouped_families(provider):
    family = [Entry(name=f"Az.{n}") for n in ("Accounts", "Compute", "Network", "Storage", "Sql")]
    provider.entries = family + [Entry(name="Other")]
    provider.sub_entries.update(
        {
            "Az.Accounts": [SubEntry(name="Connect-AzAccount", source_module="Az.Accounts")],
            "Az.Compute": [SubEntry(name="Get-AzVM", source_module="Az.Compute")],
        }
    )
    machine = ViewStateMachine(provider, provider, provider.list_entries(), group_threshold=5)
    assert [e.name for e in machine.entry_list.filtered] == ["Az.*", "Other"]
    press(machine, "right")
    assert [s.name for s in machine.top.list.filtered] == ["Connect-AzAccount", "Get-AzVM"]


def test_same_named_commands_in_a_family_keep_their_own_parameters(provider):
    members = [f"fam.m{i}" for i in range(5)]
    provider.entries = [Entry(name=name) for name in members]
    for name in members:
        provider.sub_entries[name] = [SubEntry(name="join", source_module=name)]
        provider.parameters[(name, "join")] = [Parameter(name=f"{name}_arg")]
    machine = ViewStateMachine(provider, provider, provider.list_entries(), group_threshold=5)

    seen = []
    press(machine, "right")
    for index in (0, 1, 0):
        machine.top.list.select_index(index)
        press(machine, "right")
        select_option(machine, OptionMenuItem.PARAMETERS)
        seen.append((machine.top.sub_entry.source_module, [p.name for p in machine.top.list.filtered]))
        press(machine, "left", "left")

    assert seen == [
        ("fam.m0", ["fam.m0_arg"]),
        ("fam.m1", ["fam.m1_arg"]),
        ("fam.m0", ["fam.m0_arg"]),
    ]
    assert provider.calls.count(("list_parameters", "join")) == 2


class TestNavigationStack:
    def test_root_is_never_popped(self):
        root = View(kind=ViewKind.ENTRY_LIST, state=PagedFilterList([]))
        stack = NavigationStack(root)
        assert stack.pop() is None
        assert stack.top is root

    def test_list_pane_view_is_owning_list(self):
        root = View(kind=ViewKind.ENTRY_LIST, state=PagedFilterList([]))
        stack = NavigationStack(root)
        subs = View(kind=ViewKind.SUB_ENTRY_LIST, state=PagedFilterList([]))
        stack.push(subs)
        stack.push(View(kind=ViewKind.CONTENT, state=ContentPager()))
        assert stack.list_pane_view() is subs
        assert stack.find(ViewKind.CONTENT) is stack.top
        stack.unwind()
        assert stack.depth == 1
        assert stack.list_pane_view() is root

    def test_view_accessors_check_type(self):
        view = View(kind=ViewKind.CONTENT, state=ContentPager())
        with pytest.raises(TypeError):
            view.list


def test_error_line_is_single_line():
    assert error_line(ProviderError("Get-Help", "a\nb")) == "Error: Get-Help failed: a b"
    assert error_line(RuntimeError()) == "Error: RuntimeError"
    assert FakeProvider().online_hint
