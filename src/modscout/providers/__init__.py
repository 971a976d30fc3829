"""Host providers for modscout.

Each provider knows how to enumerate modules and fetch command help for
one kind of host (a PowerShell installation or the Python interpreter).
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import ProviderUnavailableError
from .base import Catalog, ContentProvider, HostProvider

logger = logging.getLogger(__name__)

__all__ = ["Catalog", "ContentProvider", "HostProvider", "get_provider"]


def get_provider(name: str, cfg: dict[str, Any] | None = None) -> HostProvider:
    """Build the provider called ``name`` ("auto", "python" or "powershell")."""
    from .powershell import PowerShellProvider
    from .python import PythonProvider

    ps_cfg = (cfg or {}).get("powershell", {})
    executable = ps_cfg.get("executable", "pwsh")

    if name in ("auto", "powershell"):
        found = PowerShellProvider.detect(executable)
        if found:
            logger.debug("Using PowerShell at %s", found)
            return PowerShellProvider(
                executable=found,
                width=int(ps_cfg.get("width", 120)),
                timeout=float(ps_cfg.get("timeout", 60)),
            )
        if name == "powershell":
            raise ProviderUnavailableError(f"PowerShell executable not found: {executable}")

    if name in ("auto", "python"):
        return PythonProvider()

    raise ValueError(f"No provider named: {name}")
