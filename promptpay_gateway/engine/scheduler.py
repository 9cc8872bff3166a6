"""Deferred single-shot callbacks for delayed state transitions."""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    """Runs a callback once after a delay. Scheduled callbacks cannot be cancelled."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        ...


class ThreadingScheduler:
    """Fire callbacks from daemon ``threading.Timer`` threads."""

    def __init__(self) -> None:
        self._timers: list[threading.Timer] = []
        self._lock = threading.Lock()

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        timer = threading.Timer(delay, self._run, args=(callback,))
        timer.daemon = True
        with self._lock:
            self._timers = [t for t in self._timers if t.is_alive()]
            self._timers.append(timer)
        timer.start()

    def _run(self, callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception:
            logger.exception("Scheduled callback %r failed", callback)

    def join(self, timeout: float | None = None) -> None:
        """Wait for every timer scheduled so far, including ones they schedule."""
        while True:
            with self._lock:
                pending = [t for t in self._timers if t.is_alive()]
            if not pending:
                return
            for timer in pending:
                timer.join(timeout)
            if timeout is not None:
                return


class ManualScheduler:
    """Virtual-clock scheduler for tests and simulations.

    Nothing runs until ``advance`` or ``run_until_idle`` is called.
    Callbacks due at the same time run in the order they were scheduled.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, Callable[[], None]]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        heapq.heappush(self._queue, (self.now + max(delay, 0.0), next(self._counter), callback))

    @property
    def pending(self) -> int:
        return len(self._queue)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every callback that falls due.

        Returns
        -------
        int
            Number of callbacks run.
        """
        target = self.now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, callback = heapq.heappop(self._queue)
            self.now = due
            callback()
            ran += 1
        self.now = target
        return ran

    def run_until_idle(self, max_callbacks: int = 10_000) -> int:
        """Run callbacks in due order until none are left."""
        ran = 0
        while self._queue:
            if ran >= max_callbacks:
                raise RuntimeError(f"Scheduler still busy after {max_callbacks} callbacks")
            due, _, callback = heapq.heappop(self._queue)
            self.now = max(self.now, due)
            callback()
            ran += 1
        return ran
