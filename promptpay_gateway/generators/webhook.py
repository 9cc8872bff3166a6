"""Simulated bank webhook generator."""

import random
from datetime import datetime, timezone

from promptpay_gateway.engine.state_machine import names_match
from promptpay_gateway.generators.base import BaseGenerator
from promptpay_gateway.models.transaction import IncomingTransfer, Transaction


class WebhookGenerator(BaseGenerator):
    """Generate ``incoming_transfer`` webhook bodies for a transaction."""

    # Banks report the payer name in varying case and sometimes with a title
    SENDER_STYLES = ("upper", "lower", "titled")

    def generate(self, tx: Transaction, matching: bool = True) -> IncomingTransfer:
        """Generate a webhook for ``tx``.

        Parameters
        ----------
        tx : Transaction
            Transaction the payer is paying for.
        matching : bool
            Whether the sender name should pass the beneficiary name check.

        Returns
        -------
        IncomingTransfer
            Webhook for the exact THB amount of ``tx``.
        """
        expected = tx.beneficiary.full_name
        if matching:
            sender = self._restyle(expected)
        else:
            sender = self.fake.name()
            while names_match(expected, sender):
                sender = self.fake.name()

        return IncomingTransfer(
            amount=tx.amount_thb,
            sender_name=sender,
            reference_id=tx.reference_id,
            received_at=datetime.now(timezone.utc),
        )

    def _restyle(self, name: str) -> str:
        style = random.choice(self.SENDER_STYLES)
        if style == "upper":
            return name.upper()
        if style == "lower":
            return name.lower()
        return f"MR. {name}"
