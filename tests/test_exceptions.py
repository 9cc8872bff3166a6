"""Tests for custom exception hierarchy."""

from promptpay_gateway.exceptions import (
    ConfigurationError,
    GatewayError,
    InvalidAmountError,
    InvalidBeneficiaryError,
    PayloadEncodingError,
    SinkError,
)


class TestExceptionHierarchy:
    """Test exception inheritance chain."""

    def test_gateway_error_is_exception(self) -> None:
        assert isinstance(GatewayError("test"), Exception)

    def test_payload_encoding_error_is_gateway_error(self) -> None:
        assert isinstance(PayloadEncodingError("test"), GatewayError)

    def test_invalid_amount_is_gateway_error(self) -> None:
        assert isinstance(InvalidAmountError("test"), GatewayError)

    def test_invalid_beneficiary_is_gateway_error(self) -> None:
        assert isinstance(InvalidBeneficiaryError("test"), GatewayError)

    def test_configuration_error_is_gateway_error(self) -> None:
        assert isinstance(ConfigurationError("test"), GatewayError)

    def test_sink_error_is_gateway_error(self) -> None:
        assert isinstance(SinkError("test"), GatewayError)

    def test_exception_message(self) -> None:
        err = PayloadEncodingError("TLV value for tag 29 is 114 characters; limit is 99")
        assert str(err) == "TLV value for tag 29 is 114 characters; limit is 99"
