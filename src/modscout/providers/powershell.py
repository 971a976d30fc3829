"""PowerShell host provider.

Runs ``pwsh`` (or ``powershell``) once per query and reads JSON produced
by ``ConvertTo-Json``. Help documents come back as plain text from
``Get-Help ... | Out-String``.
"""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
from typing import Any

from ..errors import ProviderError, ProviderUnavailableError
from ..types import Entry, OptionMenuItem, Parameter, SubEntry, SubEntryKind
from .base import HostProvider

logger = logging.getLogger(__name__)

COMMON_PARAMETERS = frozenset(
    {
        "Verbose",
        "Debug",
        "ErrorAction",
        "WarningAction",
        "InformationAction",
        "ProgressAction",
        "ErrorVariable",
        "WarningVariable",
        "InformationVariable",
        "OutVariable",
        "OutBuffer",
        "PipelineVariable",
        "WhatIf",
        "Confirm",
    }
)

_KIND_MAP = {
    "Cmdlet": SubEntryKind.PRIMARY,
    "Alias": SubEntryKind.ALIAS,
}

_HELP_SWITCHES = {
    OptionMenuItem.EXAMPLES: "-Examples",
    OptionMenuItem.DETAILED: "-Detailed",
    OptionMenuItem.FULL: "-Full",
}


def quote(value: str) -> str:
    """Quote a value as a PowerShell single-quoted string literal."""
    return "'" + value.replace("'", "''") + "'"


def _as_list(data: Any) -> list:
    """ConvertTo-Json emits a bare object for single results."""
    if data is None:
        return []
    if isinstance(data, list):
        return data
    return [data]


class PowerShellProvider(HostProvider):
    """Catalog and content provider backed by a PowerShell executable."""

    name = "powershell"

    def __init__(self, executable: str = "pwsh", width: int = 120, timeout: float = 60):
        self.executable = executable
        self.width = width
        self.timeout = timeout

    @classmethod
    def detect(cls, executable: str = "pwsh") -> str | None:
        """Return the path of a usable PowerShell executable, if any."""
        for candidate in (executable, "pwsh", "powershell"):
            path = shutil.which(candidate)
            if path:
                return path
        return None

    def _run(self, operation: str, script: str) -> str:
        command = [
            self.executable,
            "-NoLogo",
            "-NoProfile",
            "-NonInteractive",
            "-Command",
            "$ErrorActionPreference = 'Stop'; " + script,
        ]
        logger.debug("Running %s: %s", operation, script)
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise ProviderUnavailableError(f"PowerShell not found: {self.executable}") from e
        except subprocess.TimeoutExpired as e:
            raise ProviderError(operation, f"timed out after {self.timeout}s") from e

        if result.returncode != 0:
            detail = (result.stderr or result.stdout or "").strip().splitlines()
            raise ProviderError(operation, detail[0] if detail else f"exit code {result.returncode}")
        return result.stdout

    def _run_json(self, operation: str, script: str) -> list:
        output = self._run(operation, script + " | ConvertTo-Json -Compress -Depth 3").strip()
        if not output:
            return []
        try:
            return _as_list(json.loads(output))
        except json.JSONDecodeError as e:
            raise ProviderError(operation, f"unreadable output: {e}") from e

    def _run_text(self, operation: str, script: str) -> list[str]:
        output = self._run(operation, f"{script} | Out-String -Width {self.width}")
        lines = [line.rstrip() for line in output.splitlines()]
        while lines and not lines[0]:
            lines.pop(0)
        while lines and not lines[-1]:
            lines.pop()
        return lines

    # ── Catalog ──

    def list_entries(self, pattern: str | None = None) -> list[Entry]:
        name_arg = f" -Name {quote('*' + pattern + '*')}" if pattern else ""
        script = (
            f"Get-Module -ListAvailable{name_arg} | Sort-Object Name -Unique | "
            "Select-Object Name, @{n='Version';e={$_.Version.ToString()}}"
        )
        rows = self._run_json("Get-Module", script)
        return [Entry(name=row["Name"], version=row.get("Version") or None) for row in rows]

    # ── Content ──

    def list_sub_entries(self, entry: Entry) -> list[SubEntry]:
        modules = ",".join(quote(name) for name in (entry.members or (entry.name,)))
        script = (
            f"Get-Command -Module {modules} | Sort-Object Name | Select-Object Name, "
            "@{n='Kind';e={$_.CommandType.ToString()}}, "
            "@{n='Source';e={$_.Source}}, "
            "@{n='Definition';e={if ($_.CommandType -eq 'Alias') { $_.Definition } else { '' }}}"
        )
        rows = self._run_json("Get-Command", script)
        return [
            SubEntry(
                name=row["Name"],
                kind=_KIND_MAP.get(row.get("Kind", ""), SubEntryKind.DERIVED),
                source_module=row.get("Source") or entry.name,
                raw_definition=row.get("Definition") or "",
            )
            for row in rows
        ]

    def fetch_document(self, sub_entry: SubEntry, option: OptionMenuItem) -> list[str]:
        switch = _HELP_SWITCHES.get(option)
        if switch is None:
            raise ProviderError("Get-Help", f"{option.label} is not a text document")
        return self._run_text("Get-Help", f"Get-Help -Name {quote(sub_entry.name)} {switch}")

    def list_parameters(self, sub_entry: SubEntry) -> list[Parameter]:
        script = (
            f"$c = Get-Command -Name {quote(sub_entry.name)}; "
            "if ($c.CommandType -eq 'Alias') { $c = $c.ResolvedCommand }; "
            "@($c.Parameters.Keys)"
        )
        names = self._run_json("Get-Command", script)
        return [Parameter(name=str(name), is_common=str(name) in COMMON_PARAMETERS) for name in names]

    def fetch_parameter_help(self, sub_entry: SubEntry, parameter: Parameter) -> str:
        if parameter.is_common:
            return parameter.help_text or (
                f"-{parameter.name} is a common parameter. See about_CommonParameters."
            )
        lines = self._run_text(
            "Get-Help",
            f"Get-Help -Name {quote(sub_entry.name)} -Parameter {quote(parameter.name)}",
        )
        if not lines:
            return parameter.help_text or f"No help available for -{parameter.name}."
        return "\n".join(lines)

    def open_online_document(self, sub_entry: SubEntry) -> None:
        self._run("Get-Help -Online", f"Get-Help -Name {quote(sub_entry.name)} -Online")
