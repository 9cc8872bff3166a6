"""Reserve and pricing models."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class ReserveSnapshot:
    """Point-in-time view of the custody balances."""

    thb_reserves: Decimal
    usdt_reserves: Decimal
    auto_hedge: bool
    spread: Decimal


@dataclass(frozen=True)
class Quote:
    """THB to USDT conversion locked at transaction creation."""

    amount_thb: Decimal
    amount_usdt: Decimal
    rate: Decimal
    base_rate: Decimal
    fee_percent: Decimal
