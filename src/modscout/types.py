"""Type definitions for modscout.

Shared enums and dataclasses used by providers, the navigator and the
projector. All item types are frozen: providers create them, nothing
mutates them afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SubEntryKind(str, Enum):
    """How a sub-entry is defined; controls display styling."""

    PRIMARY = "primary"
    DERIVED = "derived"
    ALIAS = "alias"

    def __str__(self) -> str:
        return self.value


class OptionMenuItem(str, Enum):
    """Content categories offered for every sub-entry."""

    EXAMPLES = "examples"
    DETAILED = "detailed"
    FULL = "full"
    ONLINE = "online"
    PARAMETERS = "parameters"

    def __str__(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def is_document(self) -> bool:
        """Whether selecting this option fetches a text document."""
        return self in DOCUMENT_OPTIONS

    @classmethod
    def all(cls) -> list["OptionMenuItem"]:
        return list(cls)


DOCUMENT_OPTIONS = frozenset(
    {OptionMenuItem.EXAMPLES, OptionMenuItem.DETAILED, OptionMenuItem.FULL}
)


def group_key_for(name: str) -> str:
    """Family key of a module name: the text before the first dot."""
    return name.split(".", 1)[0]


@dataclass(frozen=True)
class Entry:
    """A top-level module.

    ``members`` is non-empty only for a collapsed family, in which case it
    holds the names of the modules folded into this entry.
    """

    name: str
    version: str | None = None
    group_key: str = ""
    members: tuple[str, ...] = ()

    def __post_init__(self):
        if not self.group_key:
            object.__setattr__(self, "group_key", group_key_for(self.name))

    @property
    def is_group(self) -> bool:
        return bool(self.members)

    @property
    def display_name(self) -> str:
        if self.version:
            return f"{self.name} ({self.version})"
        return self.name


@dataclass(frozen=True)
class SubEntry:
    """A command exposed by a module."""

    name: str
    kind: SubEntryKind = SubEntryKind.PRIMARY
    source_module: str = ""
    raw_definition: str = ""
    summary: str = ""

    @property
    def alias_target(self) -> str | None:
        if self.kind is SubEntryKind.ALIAS and self.raw_definition:
            return self.raw_definition
        return None


@dataclass(frozen=True)
class Parameter:
    """An input accepted by a sub-entry."""

    name: str
    is_common: bool = False
    help_text: str = ""


def sort_parameters(parameters: list[Parameter]) -> list[Parameter]:
    """Non-common parameters first, each group in its original order."""
    return sorted(parameters, key=lambda p: p.is_common)


def collapse_families(entries: list[Entry], threshold: int) -> list[Entry]:
    """Fold families of ``threshold`` or more same-prefix entries into one entry.

    The folded entry is named ``<group_key>.*`` and sits where the family's
    first member was; smaller families pass through unchanged.
    """
    if threshold < 2:
        return list(entries)

    families: dict[str, list[Entry]] = {}
    for entry in entries:
        families.setdefault(entry.group_key, []).append(entry)

    result: list[Entry] = []
    emitted: set[str] = set()
    for entry in entries:
        family = families[entry.group_key]
        if len(family) < threshold:
            result.append(entry)
            continue
        if entry.group_key in emitted:
            continue
        emitted.add(entry.group_key)
        result.append(
            Entry(
                name=f"{entry.group_key}.*",
                group_key=entry.group_key,
                members=tuple(member.name for member in family),
            )
        )
    return result


@dataclass
class SubEntryCache:
    """Parameters fetched while one entry is open, keyed by sub-entry.

    Keys are whole ``SubEntry`` values: members of a collapsed family may
    export commands with the same name.
    """

    entry: Entry
    parameters: dict[SubEntry, list[Parameter]] = field(default_factory=dict)
