"""YAML-based configuration management.

Config lives at ``$XDG_CONFIG_HOME/modscout/config.yaml`` (default
``~/.config/modscout/config.yaml``). Missing or corrupt files fall back to
the defaults; a partial file is deep-merged over them. A few keys can be
overridden from the environment (``MODSCOUT_PROVIDER``, ``MODSCOUT_DEBUG``,
``MODSCOUT_POLL_MS``).
"""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

PROVIDER_CHOICES = ("auto", "python", "powershell")

DEFAULT_CONFIG: dict[str, Any] = {
    "provider": "auto",
    "poll_interval_ms": 30,
    "chrome_rows": 8,
    "group_families": False,
    "group_threshold": 5,
    "debug": False,
    "log_file": "~/.cache/modscout/modscout.log",
    "theme": {},
    "powershell": {
        "executable": "pwsh",
        "width": 120,
        "timeout": 60,
    },
}


def get_config_dir() -> Path:
    """Get the modscout config directory."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(xdg_config) / "modscout"


def get_config_path() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.yaml"


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_env(cfg: dict[str, Any]) -> dict[str, Any]:
    provider = (os.environ.get("MODSCOUT_PROVIDER") or "").strip().lower()
    if provider:
        if provider in PROVIDER_CHOICES:
            cfg["provider"] = provider
        else:
            logger.warning("Ignoring MODSCOUT_PROVIDER=%r (expected one of %s)", provider, PROVIDER_CHOICES)

    debug = os.environ.get("MODSCOUT_DEBUG")
    if debug:
        cfg["debug"] = _env_flag(debug)

    poll = (os.environ.get("MODSCOUT_POLL_MS") or "").strip()
    if poll:
        try:
            cfg["poll_interval_ms"] = int(poll)
        except ValueError:
            logger.warning("Ignoring non-numeric MODSCOUT_POLL_MS=%r", poll)
    return cfg


def load_config() -> dict[str, Any]:
    """Load config.yaml merged over defaults, then apply env overrides."""
    config_path = get_config_path()
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
        if isinstance(data, dict):
            cfg = _deep_merge(cfg, data)
        elif data is not None:
            logger.warning("Ignoring %s: top level is not a mapping", config_path)
    except FileNotFoundError:
        pass
    except (yaml.YAMLError, OSError) as e:
        logger.warning("Could not read %s: %s", config_path, e)
    return _apply_env(cfg)


def get_poll_interval(cfg: dict[str, Any]) -> float:
    """Idle sleep between key polls, in seconds (clamped to 5..500 ms)."""
    try:
        millis = int(cfg.get("poll_interval_ms", DEFAULT_CONFIG["poll_interval_ms"]))
    except (TypeError, ValueError):
        millis = DEFAULT_CONFIG["poll_interval_ms"]
    return max(5, min(millis, 500)) / 1000.0


def get_chrome_rows(cfg: dict[str, Any]) -> int:
    try:
        return max(0, int(cfg.get("chrome_rows", DEFAULT_CONFIG["chrome_rows"])))
    except (TypeError, ValueError):
        return DEFAULT_CONFIG["chrome_rows"]


def get_log_path(cfg: dict[str, Any]) -> Path:
    raw = cfg.get("log_file") or DEFAULT_CONFIG["log_file"]
    return Path(os.path.expanduser(raw))
