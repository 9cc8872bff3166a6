"""Transaction lifecycle models."""

import copy
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from promptpay_gateway.models.enums import LogLevel, LogModule, TransactionStatus


@dataclass(frozen=True)
class Beneficiary:
    """Verified recipient of the USDT disbursement."""

    full_name: str
    national_id: str  # Thai ID or passport number
    wallet_address: str
    is_verified: bool = True


@dataclass(frozen=True)
class LogEntry:
    """Audit log record. Never modified after it is appended."""

    timestamp: datetime
    level: LogLevel
    module: LogModule
    message: str
    fingerprint: str  # DJB2 of message + epoch millis, not a security primitive


@dataclass(frozen=True)
class IncomingTransfer:
    """Body of a simulated bank ``incoming_transfer`` webhook."""

    amount: Decimal
    sender_name: str
    reference_id: str
    received_at: datetime | None = None


@dataclass
class Transaction:
    """THB-in / USDT-out exchange transaction."""

    transaction_id: str
    reference_id: str  # For bank reconciliation
    beneficiary: Beneficiary
    amount_thb: Decimal
    amount_usdt: Decimal
    rate: Decimal
    status: TransactionStatus
    created_at: datetime
    qr_payload: str | None = None
    memo: str | None = None
    logs: list[LogEntry] = field(default_factory=list)  # newest first

    @property
    def failure_reason(self) -> str | None:
        """Message of the most recent CRITICAL entry once the transaction failed."""
        if self.status is not TransactionStatus.FAILED:
            return None
        for entry in self.logs:
            if entry.level is LogLevel.CRITICAL:
                return entry.message
        return None

    def snapshot(self) -> "Transaction":
        """Return a deep copy safe to hand to observers."""
        return copy.deepcopy(self)
