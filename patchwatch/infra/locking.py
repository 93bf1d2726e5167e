"""Process-wide exclusive section guarding store access."""

from __future__ import annotations

import time
from contextlib import contextmanager
from threading import Lock
from typing import Iterator

from ..logging_conf import get_logger


class ExclusiveSection:
    """Serialize scrape cycles and queries against the shared store.

    Use as ``with section.hold("scrape"):``; the lock is released on every
    exit path, including exceptions raised inside the block.
    """

    def __init__(self, name: str = "store") -> None:
        self.name = name
        self._lock = Lock()
        self.logger = get_logger("locking")

    @contextmanager
    def hold(self, operation: str) -> Iterator[None]:
        started = time.monotonic()
        self._lock.acquire()
        waited = time.monotonic() - started
        if waited > 1.0:
            self.logger.debug(
                "exclusive_section_waited",
                section=self.name,
                operation=operation,
                waited_seconds=round(waited, 3),
            )
        try:
            yield
        finally:
            self._lock.release()

    def locked(self) -> bool:
        return self._lock.locked()


__all__ = ["ExclusiveSection"]
