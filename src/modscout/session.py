"""Poll-driven session loop.

Each iteration resizes, projects, draws (only when the frame changed) and
polls for one key without blocking. When no key is waiting the loop sleeps
for ``poll_interval`` seconds, which is its only suspension point. The loop
is the single recovery boundary: anything a collaborator raises ends the
session gracefully after one acknowledgment prompt.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Protocol

from rich.console import Console
from rich.markup import escape

from rich_menu import KeyEvent

from .navigator import ViewStateMachine
from .pause import wait_for_continue
from .projector import Frame, busy_frame, project
from .resize import ResizeAdapter

logger = logging.getLogger(__name__)

console = Console(highlight=False)

EXIT_OK = 0
EXIT_FAULT = 1


class Renderer(Protocol):
    def __enter__(self): ...

    def __exit__(self, *exc): ...

    def viewport_size(self) -> tuple[int, int]: ...

    def draw(self, frame: Frame) -> None: ...


class KeySource(Protocol):
    def __enter__(self): ...

    def __exit__(self, *exc): ...

    def poll(self) -> KeyEvent | None: ...


class Session:
    """Runs one navigator against a renderer and a key source."""

    def __init__(
        self,
        machine: ViewStateMachine,
        renderer: Renderer,
        keys: KeySource,
        chrome_rows: int = 8,
        poll_interval: float = 0.03,
        sleep: Callable[[float], None] = time.sleep,
        acknowledge: Callable[[], None] = wait_for_continue,
    ):
        self.machine = machine
        self.renderer = renderer
        self.keys = keys
        self.resize = ResizeAdapter(machine, chrome_rows=chrome_rows)
        self.poll_interval = poll_interval
        self.sleep = sleep
        self.acknowledge = acknowledge
        self.last_frame: Frame | None = None
        machine.on_busy = self._show_busy

    def _show_busy(self, message: str) -> None:
        self.renderer.draw(busy_frame(project(self.machine), message))
        self.last_frame = None

    def step(self) -> bool:
        """Run one loop iteration. Returns True if a key was dispatched."""
        _, rows = self.renderer.viewport_size()
        self.resize.apply(rows)

        frame = project(self.machine)
        if frame != self.last_frame:
            self.renderer.draw(frame)
            self.last_frame = frame

        event = self.keys.poll()
        if event is None:
            self.sleep(self.poll_interval)
            return False
        logger.debug("Key %s %r in %s", event.key, event.char, self.machine.top.kind)
        self.machine.dispatch(event)
        return True

    def run(self) -> int:
        """Loop until the user exits. Returns a process exit status."""
        try:
            with self.renderer, self.keys:
                while not self.machine.finished:
                    self.step()
        except Exception as e:
            logger.exception("Session aborted by unexpected error")
            self.machine.exit()
            console.print(f"[red]Unexpected error:[/red] {escape(str(e) or type(e).__name__)}")
            self.acknowledge()
            return EXIT_FAULT
        return EXIT_OK


def run_session(machine: ViewStateMachine, renderer: Renderer, keys: KeySource, **kwargs) -> int:
    """Convenience wrapper: build a Session and run it."""
    return Session(machine, renderer, keys, **kwargs).run()
