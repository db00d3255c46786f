"""Cooperative cancellation for long-running device operations."""

import threading
from typing import Optional


class CancelToken:
    """Set once from any thread (or a signal handler), polled by workers."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Sleep up to ``timeout`` seconds, returning early if cancelled."""
        return self._event.wait(timeout)
