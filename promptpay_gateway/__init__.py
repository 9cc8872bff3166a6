"""PromptPay QR payload encoding and simulated settlement engine."""

__version__ = "0.1.0"
