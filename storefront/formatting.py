"""Format-as-you-type masks for card input fields.

All functions are pure and idempotent on already formatted input.
"""

import re

_NON_DIGITS = re.compile(r"[^0-9]")
_WHITESPACE_RUN = re.compile(r"\s+")

CARD_NUMBER_MAX_LENGTH = 19  # 16 digits + 3 separators
CARD_GROUP_SIZE = 4
EXPIRY_DIGITS = 4


def digits_only(raw: str) -> str:
    """Strip everything but ASCII digits."""
    return _NON_DIGITS.sub("", raw) if raw else ""


def format_card_number(raw: str) -> str:
    """Group card digits in blocks of four separated by single spaces.

    Example:
        format_card_number("4111-1111-1111-1111")  # "4111 1111 1111 1111"
    """
    digits = digits_only(raw)
    groups = [digits[i:i + CARD_GROUP_SIZE] for i in range(0, len(digits), CARD_GROUP_SIZE)]
    return " ".join(groups)[:CARD_NUMBER_MAX_LENGTH]


def format_expiry(raw: str) -> str:
    """Mask expiry input as MM/YY once more than two digits are present."""
    digits = digits_only(raw)[:EXPIRY_DIGITS]
    if len(digits) > 2:
        return f"{digits[:2]}/{digits[2:]}"
    return digits


def normalize_holder_name(raw: str) -> str:
    return _WHITESPACE_RUN.sub(" ", raw).strip().upper()
