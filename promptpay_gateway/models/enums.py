"""Enumeration types for gateway entities."""

import logging
from enum import Enum


class TransactionStatus(str, Enum):
    AWAITING_PAYMENT = "AWAITING_PAYMENT"
    VERIFYING_BANK = "VERIFYING_BANK"
    AWAITING_APPROVAL = "AWAITING_APPROVAL"
    DISBURSING = "DISBURSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (TransactionStatus.COMPLETED, TransactionStatus.FAILED)


class LogLevel(str, Enum):
    INFO = "INFO"
    WARN = "WARN"
    CRITICAL = "CRITICAL"

    @property
    def logging_level(self) -> int:
        """Matching stdlib logging level."""
        return _LOGGING_LEVELS[self]


_LOGGING_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.CRITICAL: logging.CRITICAL,
}


class LogModule(str, Enum):
    WEBHOOK = "WEBHOOK"
    KYC = "KYC"
    LEDGER = "LEDGER"
    DISBURSER = "DISBURSER"


class TargetType(str, Enum):
    """PromptPay proxy types, valued by their merchant-info sub-tag."""

    MOBILE = "01"
    NATIONAL_ID = "02"
    EWALLET = "03"

    @property
    def tag(self) -> str:
        return self.value
