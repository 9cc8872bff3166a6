"""Tests for TLV field formatting and parsing."""

import pytest

from promptpay_gateway.exceptions import PayloadEncodingError
from promptpay_gateway.payload.tlv import field, parse


class TestField:
    """Tests for field()."""

    def test_formats_tag_length_value(self) -> None:
        assert field("00", "01") == "000201"
        assert field("58", "TH") == "5802TH"

    def test_length_is_zero_padded(self) -> None:
        assert field("53", "764") == "5303764"

    def test_empty_value_omits_field(self) -> None:
        assert field("54", "") == ""

    def test_two_digit_length_for_long_values(self) -> None:
        value = "A" * 37
        assert field("29", value) == "2937" + value

    def test_max_length_accepted(self) -> None:
        value = "9" * 99
        assert field("62", value) == "6299" + value

    def test_over_max_length_rejected(self) -> None:
        with pytest.raises(PayloadEncodingError, match="limit is 99"):
            field("62", "9" * 100)

    @pytest.mark.parametrize("tag", ["0", "000", "AB", ""])
    def test_invalid_tag_rejected(self, tag: str) -> None:
        with pytest.raises(PayloadEncodingError):
            field(tag, "value")


class TestParse:
    """Tests for parse()."""

    def test_parses_ordered_fields(self) -> None:
        assert parse("0002015802TH") == [("00", "01"), ("58", "TH")]

    def test_nested_value_kept_intact(self) -> None:
        inner = field("00", "A000000677010111") + field("01", "0066899999999")
        assert parse(field("29", inner)) == [("29", inner)]
        assert parse(inner) == [("00", "A000000677010111"), ("01", "0066899999999")]

    def test_empty_string(self) -> None:
        assert parse("") == []

    def test_truncated_value(self) -> None:
        with pytest.raises(PayloadEncodingError, match="truncated"):
            parse("5910Bangkok")

    def test_malformed_header(self) -> None:
        with pytest.raises(PayloadEncodingError, match="Malformed"):
            parse("0002015X")
