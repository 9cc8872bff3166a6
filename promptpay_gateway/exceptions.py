"""Custom exception hierarchy for promptpay-gateway."""


class GatewayError(Exception):
    """Base exception for all promptpay-gateway errors."""


class PayloadEncodingError(GatewayError):
    """Raised when a QR payload cannot be encoded or decoded faithfully."""


class InvalidAmountError(GatewayError):
    """Raised when a monetary amount is missing, non-numeric or not positive."""


class InvalidBeneficiaryError(GatewayError):
    """Raised when beneficiary details are incomplete."""


class ConfigurationError(GatewayError):
    """Raised when configuration is invalid or missing."""


class SinkError(GatewayError):
    """Raised when a sink operation fails."""
