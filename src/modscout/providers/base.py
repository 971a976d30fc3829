"""Abstract base classes for catalog and content providers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..types import Entry, OptionMenuItem, Parameter, SubEntry


class Catalog(ABC):
    """Enumerates the top-level modules available on the host."""

    @abstractmethod
    def list_entries(self, pattern: str | None = None) -> list[Entry]:
        """Return modules whose name contains ``pattern`` (all when None)."""


class ContentProvider(ABC):
    """Enumerates commands and fetches their help text.

    Fetch methods raise ``ProviderError`` on failure. The navigator also
    treats any other exception raised from a fetch as a failed fetch.
    """

    @abstractmethod
    def list_sub_entries(self, entry: Entry) -> list[SubEntry]:
        """List the commands of a module."""

    @abstractmethod
    def fetch_document(self, sub_entry: SubEntry, option: OptionMenuItem) -> list[str]:
        """Fetch the Examples, Detailed or Full document as lines."""

    @abstractmethod
    def list_parameters(self, sub_entry: SubEntry) -> list[Parameter]:
        """List the parameters a command accepts."""

    @abstractmethod
    def fetch_parameter_help(self, sub_entry: SubEntry, parameter: Parameter) -> str:
        """Fetch the help text for one parameter."""

    @abstractmethod
    def open_online_document(self, sub_entry: SubEntry) -> None:
        """Open the command's online documentation (fire-and-forget)."""

    @property
    def online_hint(self) -> str:
        """Static text shown in place of the Online document."""
        return "Press → (or Enter) to open the online documentation in your browser."


class HostProvider(Catalog, ContentProvider):
    """A provider that is both the catalog and the content source."""

    name: str = "host"
