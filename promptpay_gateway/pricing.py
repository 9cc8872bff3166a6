"""THB to USDT quoting."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from promptpay_gateway.config import GatewayConfig
from promptpay_gateway.exceptions import InvalidAmountError
from promptpay_gateway.models.ledger import Quote

_CENTS = Decimal("0.01")


def to_amount(value: Decimal | float | int | str) -> Decimal:
    """Parse a positive monetary amount."""
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as exc:
        raise InvalidAmountError(f"Amount is not a number: {value!r}") from exc
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmountError(f"Amount must be a positive number, got {value!r}")
    return amount


def quote(amount_thb: Decimal | float | int | str, config: GatewayConfig) -> Quote:
    """Convert a THB amount to USDT at the configured rate plus fee.

    Parameters
    ----------
    amount_thb : Decimal | float | int | str
        Amount the payer transfers.
    config : GatewayConfig
        Configuration read at the moment of quoting.

    Returns
    -------
    Quote
        USDT amount rounded half-up to cents, with the rate it was locked at.
    """
    amount = to_amount(amount_thb)
    rate = config.effective_rate
    try:
        amount_usdt = (amount / rate).quantize(_CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise InvalidAmountError(f"Amount is too large to quote: {amount_thb!r}") from exc
    return Quote(
        amount_thb=amount,
        amount_usdt=amount_usdt,
        rate=rate,
        base_rate=config.base_rate,
        fee_percent=config.fee_percent,
    )
