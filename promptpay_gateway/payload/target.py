"""Classify raw PromptPay IDs into payment targets."""

import re

from promptpay_gateway.models.enums import TargetType
from promptpay_gateway.models.target import PaymentTarget

_NON_DIGITS = re.compile(r"[^0-9]")

THAI_COUNTRY_PREFIX = "0066"


def classify(raw: str) -> PaymentTarget:
    """Normalize a phone number, national ID or e-wallet ID.

    Everything except ASCII 0-9 is stripped first. Rules are checked in
    this order and the first match wins:

    1. 15 digits: e-wallet.
    2. 13 digits starting ``0066``: mobile, already canonical.
    3. 13 digits starting 0-5: national ID.
    4. 11 digits starting ``66``: mobile, prefixed with ``00``.
    5. 10 digits starting ``0``: mobile, ``0066`` + digits without the 0.
    6. Anything else: national ID, digits passed through unchanged.

    Classification never fails. Callers wanting stricter input checks
    must validate before calling.
    """
    digits = _NON_DIGITS.sub("", raw)
    length = len(digits)

    if length == 15:
        return PaymentTarget(TargetType.EWALLET, digits)
    if length == 13 and digits.startswith(THAI_COUNTRY_PREFIX):
        return PaymentTarget(TargetType.MOBILE, digits)
    if length == 13 and digits[0] in "012345":
        return PaymentTarget(TargetType.NATIONAL_ID, digits)
    if length == 11 and digits.startswith("66"):
        return PaymentTarget(TargetType.MOBILE, f"00{digits}")
    if length == 10 and digits.startswith("0"):
        return PaymentTarget(TargetType.MOBILE, f"{THAI_COUNTRY_PREFIX}{digits[1:]}")
    return PaymentTarget(TargetType.NATIONAL_ID, digits)
