"""PromptPay (Thai QR Payment) payload encoder."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from promptpay_gateway.config import DEFAULT_MERCHANT_NAME
from promptpay_gateway.exceptions import InvalidAmountError, PayloadEncodingError
from promptpay_gateway.payload.checksum import crc16
from promptpay_gateway.payload.target import classify
from promptpay_gateway.payload.tlv import field, parse

PROMPTPAY_AID = "A000000677010111"
CURRENCY_THB = "764"
COUNTRY_CODE = "TH"
MERCHANT_CITY = "Bangkok"
MERCHANT_NAME_MAX_LENGTH = 25

# Root field IDs
ID_PAYLOAD_FORMAT = "00"
ID_POI_METHOD = "01"
ID_MERCHANT_INFO = "29"
ID_CURRENCY = "53"
ID_AMOUNT = "54"
ID_COUNTRY = "58"
ID_MERCHANT_NAME = "59"
ID_MERCHANT_CITY = "60"
ID_CRC = "63"

POI_STATIC = "11"
POI_DYNAMIC = "12"

CRC_HEADER = ID_CRC + "04"

_CENTS = Decimal("0.01")


def encode(
    target: str,
    amount: Decimal | float | int | str | None = None,
    merchant_name: str = DEFAULT_MERCHANT_NAME,
) -> str:
    """Build a PromptPay QR payload.

    Parameters
    ----------
    target : str
        Raw PromptPay ID (mobile number, national ID or e-wallet ID).
    amount : Decimal | float | int | str | None
        Amount in THB. ``None`` or zero produces a static QR without
        an amount field.
    merchant_name : str
        Name shown by the payer's banking app, cut to 25 characters.

    Returns
    -------
    str
        ASCII payload ending in the 4-digit CRC field. Identical
        arguments always produce an identical payload.

    Raises
    ------
    InvalidAmountError
        If ``amount`` is not a number or is negative.
    PayloadEncodingError
        If any field value exceeds the two-digit length limit.
    """
    payment_target = classify(target)
    merchant_info = field("00", PROMPTPAY_AID) + field(payment_target.tag, payment_target.value)

    amount_text = format_amount(amount)

    data = "".join(
        [
            field(ID_PAYLOAD_FORMAT, "01"),
            field(ID_POI_METHOD, POI_DYNAMIC if amount_text else POI_STATIC),
            field(ID_MERCHANT_INFO, merchant_info),
            field(ID_CURRENCY, CURRENCY_THB),
            field(ID_AMOUNT, amount_text),
            field(ID_COUNTRY, COUNTRY_CODE),
            field(ID_MERCHANT_NAME, merchant_name[:MERCHANT_NAME_MAX_LENGTH]),
            field(ID_MERCHANT_CITY, MERCHANT_CITY),
        ]
    )
    data += CRC_HEADER
    return data + crc16(data)


def format_amount(amount: Decimal | float | int | str | None) -> str:
    """Render an amount with exactly two decimals, or ``""`` when absent or zero."""
    if amount is None or amount == "":
        return ""
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except InvalidOperation as exc:
        raise InvalidAmountError(f"Amount is not a number: {amount!r}") from exc
    if not value.is_finite():
        raise InvalidAmountError(f"Amount is not a finite number: {amount!r}")
    if value < 0:
        raise InvalidAmountError(f"Amount must not be negative: {amount!r}")
    if value == 0:
        return ""
    try:
        return str(value.quantize(_CENTS, rounding=ROUND_HALF_UP))
    except InvalidOperation as exc:
        raise InvalidAmountError(f"Amount is too large: {amount!r}") from exc


def verify(payload: str) -> bool:
    """Check the trailing CRC of a payload.

    The checksum is recomputed over every character before the last
    four (which includes the ``6304`` header) and compared
    case-insensitively.
    """
    if len(payload) < len(CRC_HEADER) + 4:
        return False
    body, checksum = payload[:-4], payload[-4:]
    if not body.endswith(CRC_HEADER):
        return False
    return crc16(body) == checksum.upper()


def decode(payload: str) -> dict[str, str]:
    """Parse a verified payload into its root fields, in payload order.

    Raises
    ------
    PayloadEncodingError
        If the checksum does not match or the TLV structure is malformed.
    """
    if not verify(payload):
        raise PayloadEncodingError("Payload checksum mismatch")
    return dict(parse(payload))
