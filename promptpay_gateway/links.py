"""Shareable quick-pay links carrying an amount and memo."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

from promptpay_gateway.pricing import to_amount


@dataclass(frozen=True)
class PaymentLink:
    """Amount and optional memo decoded from a quick-pay link."""

    amount: Decimal
    memo: str | None = None


def build_payment_link(base_url: str, amount: Decimal | float | int | str, memo: str | None = None) -> str:
    """Append ``amt`` and, when given, ``ref`` query parameters to ``base_url``.

    Any existing query string on ``base_url`` is replaced.
    """
    params = {"amt": str(to_amount(amount))}
    if memo and memo.strip():
        params["ref"] = memo.strip()
    scheme, netloc, path, _, fragment = urlsplit(base_url)
    return urlunsplit((scheme, netloc, path, urlencode(params), fragment))


def parse_payment_link(url: str) -> PaymentLink | None:
    """Decode a quick-pay link; ``None`` unless ``amt`` is a positive number."""
    query = parse_qs(urlsplit(url).query)
    raw_amount = query.get("amt", [None])[0]
    if raw_amount is None:
        return None
    try:
        amount = Decimal(raw_amount)
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    memo = query.get("ref", [None])[0]
    return PaymentLink(amount=amount, memo=memo or None)
