"""Reference IDs, PII masking and log fingerprints."""

from __future__ import annotations

import random
import string
import threading
import time
from typing import Callable

BASE36_ALPHABET = string.digits + string.ascii_uppercase
REFERENCE_PREFIX = "TX"


def fingerprint(data: str) -> str:
    """32-bit DJB2 hash of ``data`` as unpadded lowercase hex.

    Used to tag audit entries for visual integrity checks only.
    """
    value = 5381
    for char in data:
        value = ((value << 5) + value + ord(char)) & 0xFFFFFFFF
    return f"{value:x}"


def mask_pii(data: str | None) -> str:
    """Keep the first and last two characters of ``data``."""
    if not data or len(data) < 4:
        return "****"
    return f"{data[:2]}****{data[-2:]}"


def to_base36(number: int) -> str:
    """Encode a non-negative integer in uppercase base 36."""
    if number < 0:
        raise ValueError(f"number must be non-negative, got {number}")
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


class ReferenceIdGenerator:
    """Generate ``TX-<millis base36>-<4 random chars>`` reference IDs.

    The time component strictly increases per generator: when the clock
    has not moved since the previous ID it is bumped by one millisecond,
    so IDs from one generator never repeat.

    Parameters
    ----------
    seed : int | None
        Seed for the random suffix.
    clock : Callable[[], float]
        Returns seconds since the epoch (default ``time.time``).
    """

    def __init__(
        self,
        seed: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._random = random.Random(seed)
        self._clock = clock
        self._last_millis = -1
        self._lock = threading.Lock()

    def next(self) -> str:
        """Return the next reference ID."""
        with self._lock:
            millis = int(self._clock() * 1000)
            if millis <= self._last_millis:
                millis = self._last_millis + 1
            self._last_millis = millis
            suffix = "".join(self._random.choices(BASE36_ALPHABET, k=4))
        return f"{REFERENCE_PREFIX}-{to_base36(millis)}-{suffix}"
