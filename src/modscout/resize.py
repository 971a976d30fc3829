"""Viewport → page size adaptation, run once per loop iteration."""

from __future__ import annotations

import logging

from .navigator import ViewStateMachine

logger = logging.getLogger(__name__)


def page_size_for(rows: int, chrome_rows: int) -> int:
    """Rows left for list content once the chrome is drawn (at least 1)."""
    return max(1, rows - chrome_rows)


class ResizeAdapter:
    """Keeps every list and pager sized to the current viewport.

    The page size is derived from the latest viewport reading on every
    call, so both growing and shrinking the terminal take effect on the
    next frame. Views pushed later pick up ``machine.page_size`` directly.
    """

    def __init__(self, machine: ViewStateMachine, chrome_rows: int = 8):
        self.machine = machine
        self.chrome_rows = chrome_rows
        self.last_page_size: int | None = None

    def apply(self, rows: int) -> bool:
        """Resize for a viewport ``rows`` high. Returns True if the size changed."""
        page_size = page_size_for(rows, self.chrome_rows)
        if page_size == self.last_page_size:
            return False
        logger.debug("Page size %s -> %s (viewport %s rows)", self.last_page_size, page_size, rows)
        self.machine.resize(page_size)
        self.last_page_size = page_size
        return True
