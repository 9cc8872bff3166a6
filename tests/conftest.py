"""Pytest configuration and fixtures."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable

import pytest

from promptpay_gateway.config import EngineConfig, GatewayConfig
from promptpay_gateway.engine.audit import AuditLog
from promptpay_gateway.engine.scheduler import ManualScheduler
from promptpay_gateway.engine.state_machine import TransactionStateMachine
from promptpay_gateway.gateway import PaymentGateway
from promptpay_gateway.models import Beneficiary, Transaction, TransactionStatus
from promptpay_gateway.security import ReferenceIdGenerator
from promptpay_gateway.store.order_book import OrderBook


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Virtual-clock scheduler; nothing fires until advanced."""
    return ManualScheduler()


@pytest.fixture
def audit_log() -> AuditLog:
    return AuditLog()


@pytest.fixture
def order_book(audit_log: AuditLog) -> OrderBook:
    return OrderBook(audit_log)


@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig(verification_delay=2.0, settlement_delay=3.0, auto_approve_ceiling_usdt=Decimal("5000"))


@pytest.fixture
def state_machine(
    order_book: OrderBook,
    audit_log: AuditLog,
    scheduler: ManualScheduler,
    engine_config: EngineConfig,
) -> TransactionStateMachine:
    return TransactionStateMachine(order_book, audit_log, scheduler, engine_config)


@pytest.fixture
def beneficiary() -> Beneficiary:
    return Beneficiary(
        full_name="SOMCHAI JAIDEE",
        national_id="1101700203451",
        wallet_address="TXYZabc123SimulatedBeneficiaryWallet",
    )


@pytest.fixture
def make_transaction(beneficiary: Beneficiary) -> Callable[..., Transaction]:
    """Factory for transactions with overridable amounts."""
    counter = iter(range(1, 10_000))

    def _make(
        amount_thb: str = "1000.00",
        amount_usdt: str = "28.82",
        reference_id: str | None = None,
        **overrides,
    ) -> Transaction:
        n = next(counter)
        fields = dict(
            transaction_id=f"tx-test-{n:03d}",
            reference_id=reference_id or f"TX-TEST-{n:03d}",
            beneficiary=beneficiary,
            amount_thb=Decimal(amount_thb),
            amount_usdt=Decimal(amount_usdt),
            rate=Decimal("34.6986"),
            status=TransactionStatus.AWAITING_PAYMENT,
            created_at=datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc),
        )
        fields.update(overrides)
        return Transaction(**fields)

    return _make


@pytest.fixture
def gateway(scheduler: ManualScheduler, engine_config: EngineConfig, seed: int) -> PaymentGateway:
    return PaymentGateway(
        GatewayConfig(),
        engine_config=engine_config,
        scheduler=scheduler,
        reference_ids=ReferenceIdGenerator(seed=seed),
    )
