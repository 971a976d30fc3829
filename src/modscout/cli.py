"""CLI interface for modscout."""

from __future__ import annotations

import argparse
import logging
import sys

from rich.console import Console

from . import __version__, config
from .errors import ModscoutError, NotFoundError

logger = logging.getLogger(__name__)

_console = Console(highlight=False)


def configure_logging(cfg: dict) -> None:
    """Send DEBUG logs to the log file when debugging is enabled.

    The terminal belongs to the live display, so nothing is logged to it.
    """
    if not cfg.get("debug"):
        return
    log_path = config.get_log_path(cfg)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(log_path),
        level=logging.DEBUG,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug("modscout %s starting", __version__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="modscout",
        description="Browse modules, their commands and help text interactively.",
    )
    parser.add_argument("--version", action="version", version=f"modscout {__version__}")
    parser.add_argument("pattern", nargs="?", help="Only list modules whose name contains this text")
    parser.add_argument(
        "--provider",
        choices=config.PROVIDER_CHOICES,
        help="Where modules come from (default: config, then auto)",
    )
    parser.add_argument(
        "--group",
        dest="group",
        action="store_true",
        default=None,
        help="Collapse large same-prefix module families into one entry",
    )
    parser.add_argument("--no-group", dest="group", action="store_false", help="Never collapse families")
    parser.add_argument("--debug", action="store_true", help="Write debug logs to the log file")
    return parser


def run(args: argparse.Namespace) -> int:
    """Load config, list modules and run the interactive session."""
    from rich_menu import KeyReader, Theme

    from .navigator import ViewStateMachine
    from .providers import get_provider
    from .renderer import RichRenderer
    from .session import run_session

    cfg = config.load_config()
    if args.debug:
        cfg["debug"] = True
    configure_logging(cfg)

    provider = get_provider(args.provider or cfg.get("provider", "auto"), cfg)
    logger.debug("Provider: %s", provider.name)

    entries = provider.list_entries(args.pattern)
    if not entries:
        raise NotFoundError(args.pattern)

    group = cfg.get("group_families") if args.group is None else args.group
    machine = ViewStateMachine(
        catalog=provider,
        provider=provider,
        entries=entries,
        pattern=args.pattern,
        group_threshold=int(cfg.get("group_threshold", 5)) if group else 0,
    )
    renderer = RichRenderer(console=_console, theme=Theme.from_dict(cfg.get("theme")))
    return run_session(
        machine,
        renderer,
        KeyReader(),
        chrome_rows=config.get_chrome_rows(cfg),
        poll_interval=config.get_poll_interval(cfg),
    )


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        code = run(args)
    except NotFoundError as e:
        _console.print(f"[yellow]{e}[/yellow]")
        sys.exit(1)
    except ModscoutError as e:
        _console.print(f"[red]Error:[/red] {e}")
        sys.exit(2)
    except KeyboardInterrupt:
        print()
        sys.exit(130)
    sys.exit(code)


if __name__ == "__main__":
    main()
