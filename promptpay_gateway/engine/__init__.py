"""Transaction lifecycle engine."""

from promptpay_gateway.engine.audit import AuditLog
from promptpay_gateway.engine.scheduler import ManualScheduler, Scheduler, ThreadingScheduler
from promptpay_gateway.engine.state_machine import TransactionStateMachine, names_match

__all__ = [
    "AuditLog",
    "ManualScheduler",
    "Scheduler",
    "ThreadingScheduler",
    "TransactionStateMachine",
    "names_match",
]
