"""Payment target model."""

from dataclasses import dataclass

from promptpay_gateway.models.enums import TargetType


@dataclass(frozen=True)
class PaymentTarget:
    """A classified PromptPay proxy.

    ``value`` is the canonical form written into the QR payload: mobile
    numbers carry the ``0066`` international prefix, national IDs and
    e-wallet IDs are the bare digits.
    """

    target_type: TargetType
    value: str

    @property
    def tag(self) -> str:
        return self.target_type.tag
