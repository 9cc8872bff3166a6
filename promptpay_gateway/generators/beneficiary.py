"""Beneficiary generator for simulated KYC submissions."""

import random
from typing import Iterator

from promptpay_gateway.generators.base import BaseGenerator
from promptpay_gateway.models.transaction import Beneficiary

BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"


def thai_id_check_digit(first_twelve: str) -> int:
    """Mod-11 check digit of a Thai national ID."""
    total = sum(int(digit) * (13 - i) for i, digit in enumerate(first_twelve))
    return (11 - total % 11) % 10


class BeneficiaryGenerator(BaseGenerator):
    """Generate verified beneficiaries with TRC20 wallet addresses."""

    def generate(self) -> Beneficiary:
        """Generate a single beneficiary.

        Returns
        -------
        Beneficiary
            Beneficiary with a Faker name, a check-digit-valid national
            ID and a ``T``-prefixed 34-character wallet address.
        """
        return Beneficiary(
            full_name=self.fake.name(),
            national_id=self.national_id(),
            wallet_address=self.wallet_address(),
            is_verified=True,
        )

    def generate_batch(self, count: int) -> Iterator[Beneficiary]:
        """Generate multiple beneficiaries."""
        for _ in range(count):
            yield self.generate()

    def national_id(self) -> str:
        # First digit 1-8 is the registration category
        first_twelve = str(random.randint(1, 8)) + "".join(
            str(random.randint(0, 9)) for _ in range(11)
        )
        return first_twelve + str(thai_id_check_digit(first_twelve))

    def wallet_address(self) -> str:
        return "T" + "".join(random.choices(BASE58_ALPHABET, k=33))
