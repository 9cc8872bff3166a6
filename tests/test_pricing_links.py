"""Tests for quoting and quick-pay links."""

from decimal import Decimal

import pytest

from promptpay_gateway.config import GatewayConfig
from promptpay_gateway.exceptions import InvalidAmountError
from promptpay_gateway.links import PaymentLink, build_payment_link, parse_payment_link
from promptpay_gateway.pricing import quote, to_amount


class TestQuote:
    """Tests for quote()."""

    def test_default_rate_includes_fee(self) -> None:
        result = quote(1000, GatewayConfig())
        assert result.rate == Decimal("34.698600")
        assert result.amount_thb == Decimal("1000")
        assert result.amount_usdt == Decimal("28.82")
        assert result.base_rate == Decimal("31.26")
        assert result.fee_percent == Decimal("11.0")

    def test_zero_fee(self) -> None:
        config = GatewayConfig(base_rate=Decimal("40"), fee_percent=Decimal("0"))
        assert quote("100", config).amount_usdt == Decimal("2.50")

    def test_rounds_half_up_to_cents(self) -> None:
        config = GatewayConfig(base_rate=Decimal("8"), fee_percent=Decimal("0"))
        assert quote("0.2", config).amount_usdt == Decimal("0.03")

    @pytest.mark.parametrize("amount", [0, -5, "abc", "NaN", "Infinity"])
    def test_invalid_amounts(self, amount) -> None:
        with pytest.raises(InvalidAmountError):
            quote(amount, GatewayConfig())

    def test_amount_beyond_decimal_precision(self) -> None:
        with pytest.raises(InvalidAmountError, match="too large"):
            quote(Decimal("1e30"), GatewayConfig())


class TestToAmount:
    """Tests for to_amount()."""

    def test_float_goes_through_str(self) -> None:
        assert to_amount(0.1) == Decimal("0.1")

    def test_decimal_passthrough(self) -> None:
        value = Decimal("12.34")
        assert to_amount(value) is value


class TestPaymentLinks:
    """Tests for build_payment_link() and parse_payment_link()."""

    def test_build_with_memo(self) -> None:
        link = build_payment_link("https://pay.example.com/", 500, "Invoice 42")
        assert link == "https://pay.example.com/?amt=500&ref=Invoice+42"

    def test_build_without_memo(self) -> None:
        assert build_payment_link("https://pay.example.com/", "250.50") == "https://pay.example.com/?amt=250.50"

    def test_build_replaces_existing_query(self) -> None:
        link = build_payment_link("https://pay.example.com/pay?old=1", 10, "  ")
        assert link == "https://pay.example.com/pay?amt=10"

    def test_build_rejects_bad_amount(self) -> None:
        with pytest.raises(InvalidAmountError):
            build_payment_link("https://pay.example.com/", 0)

    def test_parse_round_trip(self) -> None:
        link = build_payment_link("https://pay.example.com/", 500, "Invoice 42")
        assert parse_payment_link(link) == PaymentLink(amount=Decimal("500"), memo="Invoice 42")

    def test_parse_without_memo(self) -> None:
        assert parse_payment_link("https://pay.example.com/?amt=99") == PaymentLink(Decimal("99"))

    @pytest.mark.parametrize(
        "url",
        [
            "https://pay.example.com/",
            "https://pay.example.com/?ref=abc",
            "https://pay.example.com/?amt=abc",
            "https://pay.example.com/?amt=-10",
            "https://pay.example.com/?amt=0",
        ],
    )
    def test_parse_rejects_invalid(self, url: str) -> None:
        assert parse_payment_link(url) is None
