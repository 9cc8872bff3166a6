"""Append-only audit log."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable

from promptpay_gateway.events import Broadcaster
from promptpay_gateway.models.enums import LogLevel, LogModule
from promptpay_gateway.models.transaction import LogEntry
from promptpay_gateway.security import fingerprint

logger = logging.getLogger("promptpay_gateway.audit")


class AuditLog:
    """Global audit trail, exposed newest first.

    Every appended entry is also written to the ``promptpay_gateway.audit``
    logger at the matching level and published to subscribers, which are
    responsible for display and persistence.

    Parameters
    ----------
    clock : Callable[[], datetime]
        Returns the current UTC time (default ``datetime.now(timezone.utc)``).
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._entries: list[LogEntry] = []  # oldest first internally
        self._lock = threading.Lock()
        self._subscribers: Broadcaster[LogEntry] = Broadcaster()

    def append(
        self,
        module: LogModule,
        message: str,
        level: LogLevel = LogLevel.INFO,
    ) -> LogEntry:
        """Record a new entry and return it."""
        timestamp = self._clock()
        millis = int(timestamp.timestamp() * 1000)
        entry = LogEntry(
            timestamp=timestamp,
            level=level,
            module=module,
            message=message,
            fingerprint=fingerprint(f"{message}{millis}"),
        )
        with self._lock:
            self._entries.append(entry)

        logger.log(
            level.logging_level,
            "[%s] %s",
            module.value,
            message,
            extra={"audit_module": module.value, "fingerprint": entry.fingerprint},
        )
        self._subscribers.publish(entry)
        return entry

    def entries(self) -> list[LogEntry]:
        """Return all entries, newest first."""
        with self._lock:
            return list(reversed(self._entries))

    def subscribe(self, callback: Callable[[LogEntry], None]) -> Callable[[], None]:
        """Receive each entry as it is appended."""
        return self._subscribers.subscribe(callback)

    def __len__(self) -> int:
        return len(self._entries)
