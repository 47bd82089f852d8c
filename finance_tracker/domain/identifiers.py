"""Client-side provisional identifiers"""

import secrets
import string
import time

_ALPHABET = string.digits + string.ascii_lowercase


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_transaction_id(suffix_length: int = 11) -> str:
    """
    Millisecond timestamp in base 36 followed by a random base-36 suffix.

    Unique within a session with overwhelming probability, not globally.
    Records stored by the server get a server-assigned UUID instead.
    """
    timestamp = to_base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(suffix_length))
    return timestamp + suffix


def is_provisional_id(identifier: str) -> bool:
    """Server ids are UUIDs (contain dashes); provisional ids never do"""
    return "-" not in identifier
