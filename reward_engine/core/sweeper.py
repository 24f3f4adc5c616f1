"""
Periodic background task.

Runs a callable on a daemon thread at a fixed interval until stopped.
Used to evict finished and stale battles once per second.

Usage:
    task = PeriodicTask(tracker.sweep, interval=1.0, name="battle-sweeper")
    task.start()

    # Later...
    task.stop()
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    """
    Calls a function repeatedly from a background thread.

    The first call happens one interval after start(). Exceptions raised
    by the function are logged and do not stop the loop.
    """

    def __init__(
        self,
        func: Callable[[], object],
        interval: float = 1.0,
        name: str = "periodic-task",
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._func = func
        self._interval = interval
        self._name = name
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._runs = 0

    @property
    def is_running(self) -> bool:
        """Check if the task thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def runs(self) -> int:
        """Number of completed invocations."""
        return self._runs

    def start(self) -> bool:
        """
        Start the background thread.

        Returns:
            True if started (or already running)
        """
        if self.is_running:
            return True

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name=self._name, daemon=True)
        self._thread.start()
        logger.debug("Started %s (every %.2fs)", self._name, self._interval)
        return True

    def run_once(self) -> None:
        """Invoke the function on the calling thread."""
        try:
            self._func()
        except Exception:
            logger.exception("%s failed", self._name)
        finally:
            self._runs += 1

    def _loop(self) -> None:
        """Loop until stop() is called."""
        while not self._stop_event.wait(self._interval):
            self.run_once()

    def stop(self, timeout: float = 2.0) -> None:
        """Stop the background thread and wait for it to finish."""
        if self._thread is None:
            return

        self._stop_event.set()
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
        self._thread = None
        logger.debug("Stopped %s", self._name)

    def __enter__(self) -> PeriodicTask:
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.stop()
