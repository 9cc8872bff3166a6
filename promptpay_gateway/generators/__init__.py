"""Simulation data generators."""

from promptpay_gateway.generators.beneficiary import BeneficiaryGenerator
from promptpay_gateway.generators.webhook import WebhookGenerator

__all__ = ["BeneficiaryGenerator", "WebhookGenerator"]
