"""Output sinks for exporting transactions and audit entries."""

from promptpay_gateway.sinks.console import ConsoleSink
from promptpay_gateway.sinks.json_file import JsonFileSink
from promptpay_gateway.sinks.kafka import KafkaSink

__all__ = ["ConsoleSink", "JsonFileSink", "KafkaSink"]
