"""Configuration management for promptpay-gateway."""

from __future__ import annotations

import dataclasses
import threading
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Callable

from promptpay_gateway.events import Broadcaster
from promptpay_gateway.exceptions import ConfigurationError

DEFAULT_MERCHANT_TARGET_ID = "0899999999"
DEFAULT_MERCHANT_NAME = "PromptPay Gateway"


@dataclass(frozen=True)
class GatewayConfig:
    """Operator-editable gateway settings.

    ``fee_percent`` is a percentage (``11.0`` means 11%).
    """

    base_rate: Decimal = Decimal("31.26")
    fee_percent: Decimal = Decimal("11.0")
    merchant_target_id: str = DEFAULT_MERCHANT_TARGET_ID
    provider_wallet_address: str = "TWd4...SimulatedProviderHotWallet"
    default_amount: Decimal = Decimal("1000")
    merchant_name: str = DEFAULT_MERCHANT_NAME

    def validate(self) -> None:
        """Raise ConfigurationError if any value is unusable."""
        if self.base_rate <= 0:
            raise ConfigurationError(f"base_rate must be positive, got {self.base_rate}")
        if self.fee_percent < 0:
            raise ConfigurationError(f"fee_percent must not be negative, got {self.fee_percent}")
        if self.default_amount < 0:
            raise ConfigurationError(f"default_amount must not be negative, got {self.default_amount}")
        if not self.merchant_target_id.strip():
            raise ConfigurationError("merchant_target_id is required")

    @property
    def effective_rate(self) -> Decimal:
        """Base rate with the service fee applied."""
        return self.base_rate * (1 + self.fee_percent / 100)


@dataclass
class EngineConfig:
    """Timing and approval thresholds for the transaction state machine."""

    verification_delay: float = 2.0
    settlement_delay: float = 3.0
    auto_approve_ceiling_usdt: Decimal = Decimal("5000")


@dataclass
class KafkaConfig:
    """Kafka producer configuration."""

    bootstrap_servers: str = "localhost:9092"
    acks: str = "all"
    batch_size: int = 16384
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3
    topic_prefix: str = "dev.promptpay"

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "acks": self.acks,
            "batch.size": self.batch_size,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }


@dataclass
class OutputConfig:
    """Output configuration."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class AppConfig:
    """Main configuration for promptpay-gateway."""

    gateway: GatewayConfig = field(default_factory=GatewayConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    seed: int | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create config from environment variables."""
        import os

        defaults = GatewayConfig()
        gateway = GatewayConfig(
            base_rate=_decimal_env("PROMPTPAY_BASE_RATE", defaults.base_rate),
            fee_percent=_decimal_env("PROMPTPAY_FEE_PERCENT", defaults.fee_percent),
            merchant_target_id=os.getenv("PROMPTPAY_MERCHANT_ID", defaults.merchant_target_id),
            provider_wallet_address=os.getenv("PROMPTPAY_PROVIDER_WALLET", defaults.provider_wallet_address),
            default_amount=_decimal_env("PROMPTPAY_DEFAULT_AMOUNT", defaults.default_amount),
            merchant_name=os.getenv("PROMPTPAY_MERCHANT_NAME", defaults.merchant_name),
        )
        gateway.validate()

        engine = EngineConfig(
            verification_delay=float(os.getenv("PROMPTPAY_VERIFICATION_DELAY", "2.0")),
            settlement_delay=float(os.getenv("PROMPTPAY_SETTLEMENT_DELAY", "3.0")),
            auto_approve_ceiling_usdt=_decimal_env("PROMPTPAY_AUTO_APPROVE_CEILING", Decimal("5000")),
        )

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            acks=os.getenv("KAFKA_ACKS", "all"),
            topic_prefix=os.getenv("TOPIC_PREFIX", "dev.promptpay"),
        )

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        return cls(
            gateway=gateway,
            engine=engine,
            kafka=kafka,
            output=output,
            seed=int(os.getenv("SEED")) if os.getenv("SEED") else None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


def _decimal_env(name: str, default: Decimal) -> Decimal:
    import os

    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return Decimal(raw)
    except InvalidOperation as exc:
        raise ConfigurationError(f"{name} is not a number: {raw!r}") from exc


class ConfigProvider:
    """Holds the current GatewayConfig and announces changes.

    Callers read ``get()`` at the moment of each operation; the returned
    object is frozen, so a later ``update`` never changes a value already
    handed out.
    """

    def __init__(self, initial: GatewayConfig | None = None) -> None:
        self._default = initial or GatewayConfig()
        self._default.validate()
        self._current = self._default
        self._lock = threading.Lock()
        self._listeners: Broadcaster[GatewayConfig] = Broadcaster()

    def get(self) -> GatewayConfig:
        """Return the current configuration snapshot."""
        return self._current

    def update(self, **changes: Any) -> GatewayConfig:
        """Apply field changes, validate, and notify listeners.

        Raises
        ------
        ConfigurationError
            If a field name is unknown or the resulting config is invalid.
        """
        known = {f.name for f in dataclasses.fields(GatewayConfig)}
        unknown = set(changes) - known
        if unknown:
            raise ConfigurationError(f"Unknown config fields: {', '.join(sorted(unknown))}")

        for key in ("base_rate", "fee_percent", "default_amount"):
            if key in changes and not isinstance(changes[key], Decimal):
                try:
                    changes[key] = Decimal(str(changes[key]))
                except InvalidOperation as exc:
                    raise ConfigurationError(f"{key} is not a number: {changes[key]!r}") from exc

        with self._lock:
            candidate = dataclasses.replace(self._current, **changes)
            candidate.validate()
            self._current = candidate

        self._listeners.publish(candidate)
        return candidate

    def reset(self) -> GatewayConfig:
        """Restore the configuration this provider was created with."""
        with self._lock:
            self._current = self._default
        self._listeners.publish(self._default)
        return self._default

    def subscribe(self, callback: Callable[[GatewayConfig], None]) -> Callable[[], None]:
        """Subscribe to config changes; the callback fires once immediately."""
        unsubscribe = self._listeners.subscribe(callback)
        callback(self._current)
        return unsubscribe
