"""Custody reserves mutated by settlement."""

from __future__ import annotations

import logging
import threading
from decimal import Decimal
from typing import Callable

from promptpay_gateway.engine.audit import AuditLog
from promptpay_gateway.events import Broadcaster
from promptpay_gateway.models.enums import LogLevel, LogModule
from promptpay_gateway.models.ledger import ReserveSnapshot
from promptpay_gateway.models.transaction import LogEntry

logger = logging.getLogger(__name__)


class OrderBook:
    """THB and USDT custody balances plus hedging settings.

    ``lock`` is the single mutual-exclusion boundary for reserve changes;
    the transaction state machine holds it for every transition so that a
    delayed settlement and a new transaction cannot interleave.
    """

    def __init__(
        self,
        audit_log: AuditLog,
        thb_reserves: Decimal = Decimal("5000000"),
        usdt_reserves: Decimal = Decimal("150000"),
        auto_hedge: bool = True,
        spread: Decimal = Decimal("0.008"),
    ) -> None:
        self.audit_log = audit_log
        self.lock = threading.RLock()
        self._thb_reserves = thb_reserves
        self._usdt_reserves = usdt_reserves
        self._auto_hedge = auto_hedge
        self._spread = spread
        self._entry_listeners: Broadcaster[LogEntry] = Broadcaster()

    @property
    def thb_reserves(self) -> Decimal:
        return self._thb_reserves

    @property
    def usdt_reserves(self) -> Decimal:
        return self._usdt_reserves

    @property
    def auto_hedge(self) -> bool:
        return self._auto_hedge

    def snapshot(self) -> ReserveSnapshot:
        """Return the current reserves."""
        with self.lock:
            return ReserveSnapshot(
                thb_reserves=self._thb_reserves,
                usdt_reserves=self._usdt_reserves,
                auto_hedge=self._auto_hedge,
                spread=self._spread,
            )

    def subscribe_entries(self, callback: Callable[[LogEntry], None]) -> Callable[[], None]:
        """Receive audit entries written by the order book itself."""
        return self._entry_listeners.subscribe(callback)

    def toggle_auto_hedge(self) -> bool:
        """Flip the auto-hedge flag and return its new value.

        The WARN ledger entry goes to the audit log and to ``subscribe_entries``
        listeners, which attach it to the active transaction.
        """
        with self.lock:
            self._auto_hedge = not self._auto_hedge
            enabled = self._auto_hedge
        entry = self.audit_log.append(
            LogModule.LEDGER,
            f"Auto-Hedge Logic switched to {'ON' if enabled else 'OFF'}",
            LogLevel.WARN,
        )
        self._entry_listeners.publish(entry)
        return enabled

    def apply_settlement(self, amount_thb: Decimal, amount_usdt: Decimal) -> ReserveSnapshot:
        """Credit THB and debit USDT for one settled transaction."""
        with self.lock:
            self._thb_reserves += amount_thb
            self._usdt_reserves -= amount_usdt
            logger.debug(
                "Reserves after settlement: THB=%s USDT=%s",
                self._thb_reserves,
                self._usdt_reserves,
            )
            return self.snapshot()
