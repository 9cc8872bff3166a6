"""EMVCo QR payload construction for the PromptPay profile."""

from promptpay_gateway.payload.checksum import crc16
from promptpay_gateway.payload.encoder import decode, encode, verify
from promptpay_gateway.payload.target import classify
from promptpay_gateway.payload.tlv import field, parse

__all__ = ["classify", "crc16", "decode", "encode", "field", "parse", "verify"]
