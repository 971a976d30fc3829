"""Pytest fixtures for modscout tests."""

from __future__ import annotations

import pytest

from modscout.errors import ProviderError
from modscout.navigator import ViewStateMachine
from modscout.providers.base import HostProvider
from modscout.types import Entry, OptionMenuItem, Parameter, SubEntry, SubEntryKind
from rich_menu import Key, KeyEvent


class FakeProvider(HostProvider):
    """In-memory provider that records calls and can be told to fail."""

    name = "fake"

    def __init__(self, entries=None, sub_entries=None, documents=None, parameters=None):
        self.entries = list(entries or [])
        self.sub_entries = dict(sub_entries or {})
        self.documents = dict(documents or {})
        self.parameters = dict(parameters or {})
        self.failures: dict[tuple, Exception] = {}
        self.calls: list[tuple] = []
        self.opened: list[str] = []

    def _maybe_fail(self, key: tuple) -> None:
        self.calls.append(key)
        if key in self.failures:
            raise self.failures[key]

    def list_entries(self, pattern=None):
        self._maybe_fail(("list_entries", pattern))
        if pattern:
            return [e for e in self.entries if pattern.lower() in e.name.lower()]
        return list(self.entries)

    def list_sub_entries(self, entry):
        self._maybe_fail(("list_sub_entries", entry.name))
        names = entry.members or (entry.name,)
        result = []
        for name in names:
            result.extend(self.sub_entries.get(name, []))
        return result

    def fetch_document(self, sub_entry, option):
        self._maybe_fail(("fetch_document", sub_entry.name, option))
        return list(self.documents.get((sub_entry.name, option), []))

    def list_parameters(self, sub_entry):
        self._maybe_fail(("list_parameters", sub_entry.name))
        scoped = self.parameters.get((sub_entry.source_module, sub_entry.name))
        return list(scoped if scoped is not None else self.parameters.get(sub_entry.name, []))

    def fetch_parameter_help(self, sub_entry, parameter):
        self._maybe_fail(("fetch_parameter_help", sub_entry.name, parameter.name))
        return parameter.help_text or f"{parameter.name} help"

    def open_online_document(self, sub_entry):
        self._maybe_fail(("open_online_document", sub_entry.name))
        self.opened.append(sub_entry.name)


class ScriptedKeys:
    """Key source that replays a script; None entries simulate idle polls."""

    def __init__(self, events):
        self.events = list(events)
        self.entered = False
        self.exited = False

    def __enter__(self):
        self.entered = True
        return self

    def __exit__(self, *exc):
        self.exited = True
        return False

    def poll(self):
        if not self.events:
            return KeyEvent(Key.ESCAPE)
        return self.events.pop(0)


class FakeRenderer:
    """Records frames; viewport height can be changed between polls."""

    def __init__(self, rows: int = 18, columns: int = 100):
        self.rows = rows
        self.columns = columns
        self.frames = []
        self.active = False
        self.fail_on_draw: Exception | None = None

    def __enter__(self):
        self.active = True
        return self

    def __exit__(self, *exc):
        self.active = False
        return False

    def viewport_size(self):
        return self.columns, self.rows

    def draw(self, frame):
        if self.fail_on_draw is not None:
            raise self.fail_on_draw
        self.frames.append(frame)


def keys(*names: str) -> list[KeyEvent]:
    """Build key events: arrow names, 'enter', 'esc', 'bs', or literal chars."""
    mapping = {
        "up": Key.UP,
        "down": Key.DOWN,
        "left": Key.LEFT,
        "right": Key.RIGHT,
        "enter": Key.ENTER,
        "esc": Key.ESCAPE,
        "bs": Key.BACKSPACE,
        "refresh": Key.REFRESH,
    }
    events = []
    for name in names:
        if name in mapping:
            events.append(KeyEvent(mapping[name]))
        else:
            events.extend(KeyEvent.of(ch) for ch in name)
    return events


@pytest.fixture
def provider():
    """Two modules; Alpha has a cmdlet, a function and an alias."""
    get_foo = SubEntry(name="Get-Foo", kind=SubEntryKind.PRIMARY, source_module="Alpha", summary="Gets foo.")
    set_foo = SubEntry(name="Set-Foo", kind=SubEntryKind.DERIVED, source_module="Alpha")
    gf = SubEntry(name="gf", kind=SubEntryKind.ALIAS, source_module="Alpha", raw_definition="Get-Foo")
    return FakeProvider(
        entries=[Entry(name="Alpha", version="1.0"), Entry(name="Beta")],
        sub_entries={"Alpha": [get_foo, set_foo, gf], "Beta": []},
        documents={
            ("gf", OptionMenuItem.EXAMPLES): ["Example 1", "gf -Name x", "Example 2"],
            ("Get-Foo", OptionMenuItem.DETAILED): [f"line {i}" for i in range(30)],
        },
        parameters={
            "Get-Foo": [
                Parameter(name="Verbose", is_common=True),
                Parameter(name="Name", help_text="The name of the foo."),
                Parameter(name="Path"),
            ],
        },
    )


@pytest.fixture
def make_machine(provider):
    """Factory for a navigator over the fake provider."""

    def _make(page_size: int = 10, **kwargs):
        return ViewStateMachine(
            catalog=provider,
            provider=provider,
            entries=provider.list_entries(),
            page_size=page_size,
            **kwargs,
        )

    return _make


@pytest.fixture
def machine(make_machine):
    return make_machine()


def fail(provider: FakeProvider, *key, error: Exception | None = None) -> None:
    provider.failures[tuple(key)] = error or ProviderError("fetch", "boom")
