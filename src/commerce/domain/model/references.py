"""Opaque human-readable references (order numbers, transaction ids)."""

from __future__ import annotations

import random
import string
import time

_ALPHABET = string.digits + string.ascii_lowercase


def to_base36(number: int) -> str:
    if number < 0:
        raise ValueError("number must be non-negative")
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_reference(prefix: str, rng: random.Random | None = None) -> str:
    """Build an opaque ``PREFIX-<time>-<random>`` reference.

    The time part is the base-36 millisecond clock; the random part is six
    base-36 characters.  Collisions are unlikely but not impossible, and
    nothing retries on one.
    """
    rng = rng or random.SystemRandom()
    timestamp = to_base36(time.time_ns() // 1_000_000)
    suffix = "".join(rng.choice(_ALPHABET) for _ in range(6))
    return f"{prefix}-{timestamp}-{suffix}".upper()
