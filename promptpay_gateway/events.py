"""Synchronous publish/subscribe channel."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Broadcaster(Generic[T]):
    """Deliver values to subscribers in subscription order.

    Delivery is synchronous: ``publish`` returns once every subscriber
    has been called. A subscriber that raises is logged and skipped; the
    remaining subscribers still receive the value. Subscribers added or
    removed while a publish is in progress take effect from the next
    publish.
    """

    def __init__(self) -> None:
        self._subscribers: list[Callable[[T], None]] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register a callback.

        Parameters
        ----------
        callback : Callable[[T], None]
            Called with every published value.

        Returns
        -------
        Callable[[], None]
            Unsubscribe function. Calling it more than once is harmless.
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, value: T) -> None:
        """Call every subscriber with ``value``."""
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(value)
            except Exception:
                logger.exception("Subscriber %r failed", callback)

    def __len__(self) -> int:
        return len(self._subscribers)
