"""Python host provider.

Entries are importable top-level modules, sub-entries are the public
callables each module exposes, and documents come from docstrings via
``inspect``, ``doctest`` and ``pydoc``.
"""

from __future__ import annotations

import doctest
import importlib
import importlib.metadata
import inspect
import logging
import pkgutil
import pydoc
import re
import sys
import webbrowser
from typing import Any

from ..errors import ProviderError
from ..types import Entry, OptionMenuItem, Parameter, SubEntry, SubEntryKind
from .base import HostProvider

logger = logging.getLogger(__name__)

STDLIB_DOCS_URL = "https://docs.python.org/3/library/{module}.html#{target}"
PYPI_URL = "https://pypi.org/project/{project}/"

_COMMON_NAMES = frozenset({"self", "cls"})
_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


def _first_line(text: str | None) -> str:
    if not text:
        return ""
    return text.strip().splitlines()[0].strip()


def _safe_doc(obj: Any) -> str:
    try:
        return inspect.getdoc(obj) or ""
    except Exception:
        return ""


def _signature(obj: Any) -> inspect.Signature | None:
    try:
        return inspect.signature(obj)
    except (TypeError, ValueError):
        return None


class PythonProvider(HostProvider):
    """Catalog and content provider over the running interpreter."""

    name = "python"

    def __init__(self, include_private: bool = False):
        self.include_private = include_private
        self._distributions: dict[str, list[str]] | None = None

    def _dists_for(self, module: str) -> list[str]:
        if self._distributions is None:
            try:
                self._distributions = importlib.metadata.packages_distributions()
            except Exception as e:
                logger.debug("packages_distributions failed: %s", e)
                self._distributions = {}
        return self._distributions.get(module, [])

    def _version_of(self, module: str) -> str | None:
        for dist in self._dists_for(module):
            try:
                return importlib.metadata.version(dist)
            except importlib.metadata.PackageNotFoundError:
                continue
        return None

    def _is_public(self, name: str) -> bool:
        return self.include_private or not name.startswith("_")

    # ── Catalog ──

    def list_entries(self, pattern: str | None = None) -> list[Entry]:
        names = {info.name for info in pkgutil.iter_modules()}
        names.update(name for name in sys.builtin_module_names if name != "__main__")
        needle = (pattern or "").lower()
        selected = sorted(
            (n for n in names if self._is_public(n) and needle in n.lower()),
            key=str.lower,
        )
        return [Entry(name=name, version=self._version_of(name)) for name in selected]

    # ── Content ──

    def _import(self, module_name: str):
        try:
            return importlib.import_module(module_name)
        except Exception as e:
            raise ProviderError(f"import {module_name}", str(e) or type(e).__name__) from e

    def _members(self, module) -> list[str]:
        exported = getattr(module, "__all__", None)
        if isinstance(exported, (list, tuple)):
            return [str(name) for name in exported]
        return [name for name in dir(module) if self._is_public(name)]

    def _describe(self, module_name: str, attr: str, obj: Any) -> SubEntry | None:
        if inspect.ismodule(obj) or not callable(obj):
            return None
        kind = SubEntryKind.DERIVED if inspect.isclass(obj) else SubEntryKind.PRIMARY
        target_name = getattr(obj, "__name__", attr)
        raw_definition = ""
        if target_name != attr:
            kind = SubEntryKind.ALIAS
            owner = getattr(obj, "__module__", None) or module_name
            raw_definition = f"{owner}.{getattr(obj, '__qualname__', target_name)}"
        return SubEntry(
            name=attr,
            kind=kind,
            source_module=module_name,
            raw_definition=raw_definition,
            summary=_first_line(_safe_doc(obj)),
        )

    def list_sub_entries(self, entry: Entry) -> list[SubEntry]:
        result: list[SubEntry] = []
        for module_name in entry.members or (entry.name,):
            module = self._import(module_name)
            for attr in self._members(module):
                obj = getattr(module, attr, None)
                if obj is None:
                    continue
                sub_entry = self._describe(module_name, attr, obj)
                if sub_entry is not None:
                    result.append(sub_entry)
        return sorted(result, key=lambda s: s.name.lower())

    def _resolve(self, sub_entry: SubEntry) -> Any:
        module = self._import(sub_entry.source_module)
        try:
            return getattr(module, sub_entry.name)
        except AttributeError as e:
            raise ProviderError("lookup", f"{sub_entry.source_module}.{sub_entry.name} not found") from e

    def fetch_document(self, sub_entry: SubEntry, option: OptionMenuItem) -> list[str]:
        obj = self._resolve(sub_entry)
        if option is OptionMenuItem.EXAMPLES:
            return self._examples(sub_entry, obj)
        if option is OptionMenuItem.DETAILED:
            signature = _signature(obj)
            header = f"{sub_entry.name}{signature}" if signature else sub_entry.name
            doc = _safe_doc(obj) or "No documentation."
            return [header, ""] + doc.splitlines()
        if option is OptionMenuItem.FULL:
            try:
                text = pydoc.render_doc(obj, title="%s", renderer=pydoc.plaintext)
            except Exception as e:
                raise ProviderError("pydoc", str(e) or type(e).__name__) from e
            return text.splitlines()
        raise ProviderError("fetch", f"{option.label} is not a text document")

    def _examples(self, sub_entry: SubEntry, obj: Any) -> list[str]:
        doc = _safe_doc(obj)
        try:
            examples = doctest.DocTestParser().get_examples(doc)
        except ValueError as e:
            raise ProviderError("doctest", str(e)) from e
        if not examples:
            return [f"No examples found for {sub_entry.name}."]

        lines: list[str] = []
        for example in examples:
            source = example.source.rstrip("\n").splitlines()
            lines.append(f">>> {source[0]}")
            lines.extend(f"... {line}" for line in source[1:])
            lines.extend(example.want.rstrip("\n").splitlines())
            lines.append("")
        return lines[:-1]

    def list_parameters(self, sub_entry: SubEntry) -> list[Parameter]:
        signature = _signature(self._resolve(sub_entry))
        if signature is None:
            return []
        parameters = []
        for param in signature.parameters.values():
            display = param.name
            if param.kind is inspect.Parameter.VAR_POSITIONAL:
                display = f"*{param.name}"
            elif param.kind is inspect.Parameter.VAR_KEYWORD:
                display = f"**{param.name}"
            parameters.append(
                Parameter(
                    name=display,
                    is_common=param.kind in _VARIADIC or param.name in _COMMON_NAMES,
                    help_text=self._fallback_help(param),
                )
            )
        return parameters

    @staticmethod
    def _fallback_help(param: inspect.Parameter) -> str:
        text = param.name
        if param.annotation is not inspect.Parameter.empty:
            text += f": {inspect.formatannotation(param.annotation)}"
        if param.default is not inspect.Parameter.empty:
            text += f" = {param.default!r}"
        return text

    def fetch_parameter_help(self, sub_entry: SubEntry, parameter: Parameter) -> str:
        doc = _safe_doc(self._resolve(sub_entry))
        name = re.escape(parameter.name.lstrip("*"))
        pattern = re.compile(rf"^(\s*)(?::param\s+)?\**{name}\b\s*(\(.*?\))?\s*:")
        lines = doc.splitlines()
        for i, line in enumerate(lines):
            match = pattern.match(line)
            if not match:
                continue
            indent = len(match.group(1))
            block = [line.strip()]
            for follow in lines[i + 1:]:
                if follow.strip() and len(follow) - len(follow.lstrip()) <= indent:
                    break
                block.append(follow.strip())
            return "\n".join(block).strip()
        return parameter.help_text or f"No documentation for parameter {parameter.name}."

    def online_url(self, sub_entry: SubEntry) -> str:
        top = sub_entry.source_module.split(".", 1)[0]
        if top in getattr(sys, "stdlib_module_names", ()):
            return STDLIB_DOCS_URL.format(
                module=sub_entry.source_module,
                target=f"{sub_entry.source_module}.{sub_entry.name}",
            )
        dists = self._dists_for(top)
        return PYPI_URL.format(project=dists[0] if dists else top)

    def open_online_document(self, sub_entry: SubEntry) -> None:
        url = self.online_url(sub_entry)
        logger.debug("Opening %s", url)
        if not webbrowser.open(url):
            raise ProviderError("open browser", f"no browser available for {url}")
