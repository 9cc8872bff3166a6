"""Explicitly owned gateway context wiring the core components."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable

from promptpay_gateway.config import ConfigProvider, EngineConfig, GatewayConfig
from promptpay_gateway.engine.audit import AuditLog
from promptpay_gateway.engine.scheduler import Scheduler, ThreadingScheduler
from promptpay_gateway.engine.state_machine import TransactionStateMachine
from promptpay_gateway.exceptions import InvalidBeneficiaryError
from promptpay_gateway.models.enums import TransactionStatus
from promptpay_gateway.models.ledger import Quote, ReserveSnapshot
from promptpay_gateway.models.transaction import Beneficiary, IncomingTransfer, LogEntry, Transaction
from promptpay_gateway.payload.encoder import encode
from promptpay_gateway.pricing import quote, to_amount
from promptpay_gateway.security import ReferenceIdGenerator
from promptpay_gateway.store.order_book import OrderBook

logger = logging.getLogger(__name__)


class PaymentGateway:
    """One gateway instance per process, or per test.

    Owns the audit log, order book and state machine, and turns a
    verified beneficiary plus THB amount into an active transaction with
    its QR payload.

    Parameters
    ----------
    config : ConfigProvider | GatewayConfig | None
        Operator settings, read afresh for every operation.
    engine_config : EngineConfig | None
        State machine delays and approval ceiling.
    scheduler : Scheduler | None
        Defaults to a ThreadingScheduler.
    reference_ids : ReferenceIdGenerator | None
        Source of reconciliation reference IDs.
    order_book : OrderBook | None
        Pre-built order book; one with default reserves is created otherwise.
    """

    def __init__(
        self,
        config: ConfigProvider | GatewayConfig | None = None,
        engine_config: EngineConfig | None = None,
        scheduler: Scheduler | None = None,
        reference_ids: ReferenceIdGenerator | None = None,
        order_book: OrderBook | None = None,
        audit_log: AuditLog | None = None,
    ) -> None:
        if isinstance(config, ConfigProvider):
            self.config = config
        else:
            self.config = ConfigProvider(config)
        self.audit_log = audit_log or (order_book.audit_log if order_book else AuditLog())
        self.order_book = order_book or OrderBook(self.audit_log)
        self.scheduler = scheduler or ThreadingScheduler()
        self.reference_ids = reference_ids or ReferenceIdGenerator()
        self.state_machine = TransactionStateMachine(
            order_book=self.order_book,
            audit_log=self.audit_log,
            scheduler=self.scheduler,
            config=engine_config,
        )

    def quote(self, amount_thb: Decimal | float | int | str | None = None) -> Quote:
        """Price a THB amount; the configured default amount is used when omitted."""
        config = self.config.get()
        return quote(config.default_amount if amount_thb is None else amount_thb, config)

    def open_transaction(
        self,
        beneficiary: Beneficiary,
        amount_thb: Decimal | float | int | str | None = None,
        memo: str | None = None,
    ) -> Transaction:
        """Create the active transaction for a verified beneficiary.

        Returns
        -------
        Transaction
            Snapshot of the new transaction in AWAITING_PAYMENT, carrying
            the QR payload the payer must scan.

        Raises
        ------
        InvalidBeneficiaryError
            If a beneficiary field is blank.
        InvalidAmountError
            If the amount is not positive.
        """
        _validate_beneficiary(beneficiary)
        config = self.config.get()
        priced = quote(config.default_amount if amount_thb is None else amount_thb, config)

        tx = Transaction(
            transaction_id=uuid.uuid4().hex,
            reference_id=self.reference_ids.next(),
            beneficiary=beneficiary,
            amount_thb=priced.amount_thb,
            amount_usdt=priced.amount_usdt,
            rate=priced.rate,
            status=TransactionStatus.AWAITING_PAYMENT,
            created_at=datetime.now(timezone.utc),
            qr_payload=encode(config.merchant_target_id, priced.amount_thb, config.merchant_name),
            memo=memo.strip() if memo and memo.strip() else None,
        )
        logger.info(
            "Opening transaction %s: THB %s -> USDT %s @ %s",
            tx.reference_id,
            tx.amount_thb,
            tx.amount_usdt,
            tx.rate,
        )
        return self.state_machine.create(tx)

    def incoming_transfer(
        self,
        amount: Decimal | float | int | str,
        sender_name: str,
        reference_id: str | None = None,
    ) -> None:
        """Deliver a simulated bank webhook to the active transaction."""
        if not sender_name or not sender_name.strip():
            raise InvalidBeneficiaryError("Sender name is required")
        active = self.state_machine.active
        ref = reference_id or (active.reference_id if active else "")
        self.state_machine.on_incoming_transfer(to_amount(amount), sender_name.strip(), ref)

    def deliver(self, transfer: IncomingTransfer) -> None:
        """Deliver a pre-built webhook body."""
        self.incoming_transfer(transfer.amount, transfer.sender_name, transfer.reference_id)

    def approve(self) -> bool:
        return self.state_machine.approve()

    def toggle_auto_hedge(self) -> bool:
        return self.order_book.toggle_auto_hedge()

    def reserves(self) -> ReserveSnapshot:
        return self.order_book.snapshot()

    def logs(self) -> list[LogEntry]:
        """Global audit log, newest first."""
        return self.audit_log.entries()

    def history(self) -> list[Transaction]:
        return self.state_machine.history()

    @property
    def active_transaction(self) -> Transaction | None:
        return self.state_machine.active

    def subscribe(self, callback: Callable[[Transaction], None]) -> Callable[[], None]:
        """Receive transaction snapshots after every state mutation."""
        return self.state_machine.subscribe(callback)

    def subscribe_logs(self, callback: Callable[[LogEntry], None]) -> Callable[[], None]:
        """Receive each audit entry as it is appended."""
        return self.audit_log.subscribe(callback)

    def attach_sink(self, sink: Any, entity_type: str = "transactions") -> Callable[[], None]:
        """Stream transaction snapshots (or audit entries for ``"audit_log"``) into a sink."""
        if entity_type == "audit_log":
            return self.subscribe_logs(lambda entry: sink.write(entity_type, entry))
        return self.subscribe(lambda tx: sink.write(entity_type, tx))


def _validate_beneficiary(beneficiary: Beneficiary) -> None:
    missing = [
        name
        for name in ("full_name", "national_id", "wallet_address")
        if not str(getattr(beneficiary, name) or "").strip()
    ]
    if missing:
        raise InvalidBeneficiaryError(f"Beneficiary is missing: {', '.join(missing)}")
