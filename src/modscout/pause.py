"""Acknowledgment prompt shown after the live display has been torn down."""

from __future__ import annotations

import readchar
from rich.console import Console

console = Console(highlight=False)


def wait_for_continue(prompt: str = "[dim]Press Enter to continue...[/dim]") -> None:
    """Wait for Enter, q, Escape or Ctrl+C before returning.

    Escape counts as well; it is also the navigator's quit key.
    """
    console.print(prompt)
    while True:
        try:
            key = readchar.readkey()
        except (KeyboardInterrupt, EOFError):
            return
        if key in ("\r", "\n", readchar.key.ENTER, readchar.key.ESC, "q", "Q", readchar.key.CTRL_C):
            return
