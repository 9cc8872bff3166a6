"""Transaction lifecycle state machine.

Lifecycle::

    AWAITING_PAYMENT -> VERIFYING_BANK -> DISBURSING -> COMPLETED
                                |     \\-> AWAITING_APPROVAL -> DISBURSING
                                \\-> FAILED

Transitions are driven by the bank webhook (``on_incoming_transfer``),
an operator approval (``approve``) and two delayed callbacks (bank
verification and settlement) scheduled through an injected scheduler.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from collections import deque
from decimal import Decimal
from typing import TYPE_CHECKING, Callable

from promptpay_gateway.config import EngineConfig
from promptpay_gateway.engine.audit import AuditLog
from promptpay_gateway.engine.scheduler import Scheduler
from promptpay_gateway.events import Broadcaster
from promptpay_gateway.models.enums import LogLevel, LogModule, TransactionStatus
from promptpay_gateway.models.transaction import LogEntry, Transaction
from promptpay_gateway.security import mask_pii

if TYPE_CHECKING:
    from promptpay_gateway.store.order_book import OrderBook

logger = logging.getLogger(__name__)


def names_match(expected: str, actual: str) -> bool:
    """Case-insensitive containment in either direction.

    Either name containing the other passes, which tolerates banks that
    reorder or abbreviate legal names.
    """
    expected_upper = expected.strip().upper()
    actual_upper = actual.strip().upper()
    if not expected_upper or not actual_upper:
        return False
    return actual_upper in expected_upper or expected_upper in actual_upper


class TransactionStateMachine:
    """Drive the single active transaction through its lifecycle.

    Only one transaction is active at a time. ``create`` replaces the
    active slot unconditionally; the previous transaction stays in the
    history in whatever state it had reached. Delayed callbacks remember
    the transaction they were scheduled for and do nothing if it is no
    longer active or no longer in the expected state.

    All mutations happen under ``order_book.lock``. Every mutation queues
    one deep-copied snapshot, and queued snapshots are delivered to
    subscribers in order once the lock is released. A subscriber that
    triggers a further transition (for example by calling ``approve``)
    has its snapshot delivered after the current one reaches every
    subscriber.

    Parameters
    ----------
    order_book : OrderBook
        Reserves credited and debited on settlement.
    audit_log : AuditLog
        Global audit trail.
    scheduler : Scheduler
        Runs the verification and settlement callbacks.
    config : EngineConfig | None
        Delays and the auto-approval ceiling.
    """

    def __init__(
        self,
        order_book: OrderBook,
        audit_log: AuditLog,
        scheduler: Scheduler,
        config: EngineConfig | None = None,
    ) -> None:
        self.order_book = order_book
        self.audit_log = audit_log
        self.scheduler = scheduler
        self.config = config or EngineConfig()
        self._lock = order_book.lock
        self._active: Transaction | None = None
        self._history: list[Transaction] = []
        self._subscribers: Broadcaster[Transaction] = Broadcaster()
        self._outbox: deque[Transaction] = deque()
        self._delivery_lock = threading.RLock()
        self._delivering = False
        order_book.subscribe_entries(self._attach_ledger_entry)

    # Queries
    @property
    def active(self) -> Transaction | None:
        """Snapshot of the active transaction, if any."""
        with self._lock:
            return self._active.snapshot() if self._active else None

    @property
    def status(self) -> TransactionStatus | None:
        with self._lock:
            return self._active.status if self._active else None

    def history(self) -> list[Transaction]:
        """Snapshots of every created transaction, oldest first."""
        with self._lock:
            return [tx.snapshot() for tx in self._history]

    def subscribe(self, callback: Callable[[Transaction], None]) -> Callable[[], None]:
        """Receive a snapshot after every mutation of the active transaction."""
        return self._subscribers.subscribe(callback)

    # Transitions
    def create(self, tx: Transaction) -> Transaction:
        """Make ``tx`` the active transaction in AWAITING_PAYMENT.

        The caller's object is copied; later transitions never touch it.
        """
        try:
            with self._lock:
                active = dataclasses.replace(
                    tx.snapshot(),
                    status=TransactionStatus.AWAITING_PAYMENT,
                    logs=[],
                )
                if self._active and not self._active.status.is_terminal:
                    logger.warning(
                        "Transaction %s superseded while %s",
                        self._active.reference_id,
                        self._active.status.value,
                    )
                self._active = active
                self._history.append(active)

                beneficiary = active.beneficiary
                self._record(
                    active,
                    LogModule.KYC,
                    f"New User Session: {beneficiary.full_name} ({mask_pii(beneficiary.national_id)})",
                )
                self._record(
                    active,
                    LogModule.LEDGER,
                    f"Created TX {active.reference_id}. Expecting THB {active.amount_thb}",
                )
                self._notify(active)
                return active.snapshot()
        finally:
            self._flush()

    def on_incoming_transfer(self, amount: Decimal, sender_name: str, reference_id: str) -> None:
        """Handle the bank's ``incoming_transfer`` webhook.

        Late or duplicate deliveries are logged at WARN and dropped.
        """
        try:
            with self._lock:
                tx = self._active
                if tx is None:
                    logger.warning("incoming_transfer %s dropped: no active transaction", reference_id)
                    return

                self._record(
                    tx,
                    LogModule.WEBHOOK,
                    f"Received incoming_transfer: THB {amount} from {sender_name}. Ref: {reference_id}",
                )

                if tx.status is not TransactionStatus.AWAITING_PAYMENT:
                    self._record(
                        tx,
                        LogModule.WEBHOOK,
                        "Warning: Duplicate or late webhook received.",
                        LogLevel.WARN,
                    )
                    return

                tx.status = TransactionStatus.VERIFYING_BANK
                self._notify(tx)

            self.scheduler.call_later(
                self.config.verification_delay,
                lambda: self._verify_sender(tx, sender_name),
            )
        finally:
            self._flush()

    def _verify_sender(self, tx: Transaction, sender_name: str) -> None:
        """Logic Guard: match the sender against the KYC name."""
        try:
            with self._lock:
                if self._active is not tx or tx.status is not TransactionStatus.VERIFYING_BANK:
                    logger.debug("Stale verification for %s ignored", tx.reference_id)
                    return

                expected = tx.beneficiary.full_name.upper()
                actual = sender_name.upper()
                if names_match(expected, actual):
                    self._record(tx, LogModule.KYC, f"Logic Guard Passed: {actual} matches KYC record.")
                    self._begin_disbursement(tx)
                    return

                self._record(
                    tx,
                    LogModule.KYC,
                    f"Logic Guard FAILED: {actual} does not match {expected}. Freezing funds.",
                    LogLevel.CRITICAL,
                )
                tx.status = TransactionStatus.FAILED
                self._notify(tx)
        finally:
            self._flush()

    def _begin_disbursement(self, tx: Transaction) -> None:
        ceiling = self.config.auto_approve_ceiling_usdt
        if tx.amount_usdt > ceiling:
            self._record(
                tx,
                LogModule.DISBURSER,
                f"Amount exceeds ${ceiling}. Multi-Sig Approval Required.",
                LogLevel.WARN,
            )
            tx.status = TransactionStatus.AWAITING_APPROVAL
            self._notify(tx)
            return

        tx.status = TransactionStatus.DISBURSING
        self._notify(tx)
        self.settle()

    def approve(self) -> bool:
        """Release a transaction held in AWAITING_APPROVAL.

        Returns
        -------
        bool
            Whether the approval was applied.
        """
        try:
            with self._lock:
                tx = self._active
                if tx is None or tx.status is not TransactionStatus.AWAITING_APPROVAL:
                    logger.debug("approve() ignored in state %s", tx.status.value if tx else None)
                    return False

                self._record(
                    tx,
                    LogModule.DISBURSER,
                    "Manual Approval received from Administrator. Proceeding to settlement.",
                )
                tx.status = TransactionStatus.DISBURSING
                self._notify(tx)
                self.settle()
                return True
        finally:
            self._flush()

    def settle(self) -> bool:
        """Schedule settlement of the active DISBURSING transaction.

        Returns
        -------
        bool
            Whether a settlement was scheduled.
        """
        with self._lock:
            tx = self._active
            if tx is None or tx.status is not TransactionStatus.DISBURSING:
                logger.debug("settle() ignored in state %s", tx.status.value if tx else None)
                return False

        self.scheduler.call_later(self.config.settlement_delay, lambda: self._finalize_settlement(tx))
        return True

    def _finalize_settlement(self, tx: Transaction) -> None:
        try:
            with self._lock:
                # Guards against double-crediting reserves
                if self._active is not tx or tx.status is not TransactionStatus.DISBURSING:
                    logger.debug("Stale settlement for %s ignored", tx.reference_id)
                    return

                self._record(
                    tx,
                    LogModule.DISBURSER,
                    f"Broadcasting TRC20 transfer of USDT {tx.amount_usdt} to {tx.beneficiary.wallet_address}",
                )

                reserves = self.order_book.apply_settlement(tx.amount_thb, tx.amount_usdt)

                if reserves.auto_hedge:
                    self._record(
                        tx,
                        LogModule.LEDGER,
                        f"Auto-Hedge: Placed Buy Order for USDT {tx.amount_usdt} on Binance.",
                    )
                else:
                    self._record(
                        tx,
                        LogModule.LEDGER,
                        "Auto-Hedge Skipped (Manual Mode). Reserves may unbalance.",
                    )

                tx.status = TransactionStatus.COMPLETED
                self._record(
                    tx,
                    LogModule.LEDGER,
                    f"Transaction Finalized. Reconciliation ID: {tx.reference_id}",
                )
                self._notify(tx)
        finally:
            self._flush()

    def _attach_ledger_entry(self, entry: LogEntry) -> None:
        """Prefix an order book entry onto the active transaction's logs."""
        try:
            with self._lock:
                if self._active is None:
                    return
                self._active.logs.insert(0, entry)
                self._notify(self._active)
        finally:
            self._flush()

    # Internals
    def _record(
        self,
        tx: Transaction,
        module: LogModule,
        message: str,
        level: LogLevel = LogLevel.INFO,
    ) -> None:
        entry = self.audit_log.append(module, message, level)
        tx.logs.insert(0, entry)

    def _notify(self, tx: Transaction) -> None:
        self._outbox.append(tx.snapshot())

    def _flush(self) -> None:
        """Deliver queued snapshots in order.

        Reentrant calls made by a subscriber return at once; the outer
        call picks up whatever they queued.
        """
        with self._delivery_lock:
            if self._delivering:
                return
            self._delivering = True
            try:
                while True:
                    with self._lock:
                        if not self._outbox:
                            break
                        snapshot = self._outbox.popleft()
                    self._subscribers.publish(snapshot)
            finally:
                self._delivering = False
