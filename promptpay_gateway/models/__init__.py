"""Domain models for the PromptPay gateway."""

from promptpay_gateway.models.enums import LogLevel, LogModule, TargetType, TransactionStatus
from promptpay_gateway.models.ledger import Quote, ReserveSnapshot
from promptpay_gateway.models.target import PaymentTarget
from promptpay_gateway.models.transaction import (
    Beneficiary,
    IncomingTransfer,
    LogEntry,
    Transaction,
)

__all__ = [
    "Beneficiary",
    "IncomingTransfer",
    "LogEntry",
    "LogLevel",
    "LogModule",
    "PaymentTarget",
    "Quote",
    "ReserveSnapshot",
    "TargetType",
    "Transaction",
    "TransactionStatus",
]
