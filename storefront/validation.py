"""Structural validation for payment drafts.

Each field is checked against an ordered list of rules; the first violated
rule supplies the field's message. Validation never raises: callers get a
ValidationResult holding either a normalized draft or a field -> message map.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from .formatting import normalize_holder_name
from .models import PaymentDraft

CARD_NUMBER = "card_number"
HOLDER_NAME = "holder_name"
EXPIRY = "expiry"
CVV = "cvv"

ERRMSG_CARD_LENGTH = "Card number must have 16 digits"
ERRMSG_CARD_CHECKSUM = "Invalid card number"
ERRMSG_HOLDER_LENGTH = "Name must be at least 3 characters"
ERRMSG_HOLDER_CHARSET = "Name may only contain letters and spaces"
ERRMSG_EXPIRY_FORMAT = "Expiry must be in MM/YY format"
ERRMSG_EXPIRY_RANGE = (
    "Invalid expiry date. Must be a valid future date no more than 10 years out"
)
ERRMSG_CVV_FORMAT = "CVV must be 3 or 4 digits"
ERRMSG_CVV_LENGTH = "Invalid CVV length"

VISA = "VISA"
MASTERCARD = "MasterCard"

CARD_DIGITS = 16
HOLDER_MIN_LENGTH = 3
EXPIRY_WINDOW_YEARS = 10

_CARD_DIGITS = re.compile(r"[0-9]{16}")
_HOLDER_CHARSET = re.compile(r"[A-Za-z\s]+")
_EXPIRY_SHAPE = re.compile(r"[0-9]{2}/[0-9]{2}")
_CVV_SHAPE = re.compile(r"[0-9]{3,4}")
_WHITESPACE = re.compile(r"\s+")
_MASTERCARD_PREFIX = re.compile(r"^5[1-5]")

# A rule returns an error message when violated, None otherwise.
Rule = Callable[[str], Optional[str]]


def luhn_checksum_valid(digits: str) -> bool:
    """Return True if the digit string passes the Luhn checksum.

    Scanning right to left, every second digit is doubled (minus 9 when the
    result exceeds 9); the number is valid when the total is a multiple of 10.
    """
    total = 0
    for position, char in enumerate(reversed(digits)):
        digit = int(char)
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def classify_card_number(value: str) -> Optional[str]:
    """Classify a card number by prefix: VISA, MasterCard, or None.

    Embedded whitespace is ignored, and the number does not need to be complete.
    """
    digits = _WHITESPACE.sub("", value or "")
    if digits.startswith("4"):
        return VISA
    if _MASTERCARD_PREFIX.match(digits):
        return MASTERCARD
    return None


@dataclass(frozen=True)
class CvvPolicy:
    """CVV length selection.

    ``network_lengths`` maps a card classification to its CVV length. Without
    a mapping every card requires ``required_length`` digits.
    """

    required_length: int = 3
    network_lengths: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        lengths = [self.required_length, *self.network_lengths.values()]
        if any(length not in (3, 4) for length in lengths):
            raise ValueError("CVV length must be 3 or 4")

    def length_for(self, card_number: str) -> int:
        network = classify_card_number(card_number)
        if network is not None and network in self.network_lengths:
            return self.network_lengths[network]
        return self.required_length


@dataclass(frozen=True)
class ValidationResult:
    errors: Mapping[str, str] = field(default_factory=dict)
    draft: Optional[PaymentDraft] = None

    @property
    def success(self) -> bool:
        return not self.errors


def first_violation(value: str, rules: list[Rule]) -> Optional[str]:
    """Return the message of the first rule the value violates."""
    for rule in rules:
        message = rule(value)
        if message is not None:
            return message
    return None


# Card number


def require_card_length(value: str) -> Optional[str]:
    if not _CARD_DIGITS.fullmatch(_WHITESPACE.sub("", value)):
        return ERRMSG_CARD_LENGTH
    return None


def require_luhn(value: str) -> Optional[str]:
    if not luhn_checksum_valid(_WHITESPACE.sub("", value)):
        return ERRMSG_CARD_CHECKSUM
    return None


# Holder name


def require_holder_length(value: str) -> Optional[str]:
    if len(value.strip()) < HOLDER_MIN_LENGTH:
        return ERRMSG_HOLDER_LENGTH
    return None


def require_holder_charset(value: str) -> Optional[str]:
    if not _HOLDER_CHARSET.fullmatch(value):
        return ERRMSG_HOLDER_CHARSET
    return None


# Expiry


def require_expiry_shape(value: str) -> Optional[str]:
    if not _EXPIRY_SHAPE.fullmatch(value):
        return ERRMSG_EXPIRY_FORMAT
    return None


def expiry_in_window(value: str, today: date) -> bool:
    """Check an MM/YY expiry against the window [this month, +10 years]."""
    month_text, year_text = value.split("/")
    month = int(month_text)
    year = 2000 + int(year_text)

    if month < 1 or month > 12:
        return False
    if year < today.year or year > today.year + EXPIRY_WINDOW_YEARS:
        return False
    if year == today.year and month < today.month:
        return False
    return True


def require_expiry_window(today: date) -> Rule:
    def rule(value: str) -> Optional[str]:
        if not expiry_in_window(value, today):
            return ERRMSG_EXPIRY_RANGE
        return None

    return rule


# CVV


def require_cvv_shape(value: str) -> Optional[str]:
    if not _CVV_SHAPE.fullmatch(value):
        return ERRMSG_CVV_FORMAT
    return None


def require_cvv_length(expected: int) -> Rule:
    def rule(value: str) -> Optional[str]:
        if len(value) != expected:
            return ERRMSG_CVV_LENGTH
        return None

    return rule


def validate_payment_draft(
    draft: PaymentDraft,
    cvv_policy: Optional[CvvPolicy] = None,
    today: Optional[date] = None,
) -> ValidationResult:
    """Validate every field of a draft.

    Args:
        draft: Raw card details as entered.
        cvv_policy: CVV length policy; defaults to exactly 3 digits.
        today: Reference date for the expiry window; defaults to date.today().

    Returns:
        ValidationResult with at most one message per field. On success the
        result carries a normalized draft (digits-only card number, uppercase
        single-spaced holder name).
    """
    policy = cvv_policy or CvvPolicy()
    today = today or date.today()

    checks: dict[str, tuple[str, list[Rule]]] = {
        CARD_NUMBER: (draft.card_number, [require_card_length, require_luhn]),
        HOLDER_NAME: (draft.holder_name, [require_holder_length, require_holder_charset]),
        EXPIRY: (draft.expiry, [require_expiry_shape, require_expiry_window(today)]),
        CVV: (
            draft.cvv,
            [require_cvv_shape, require_cvv_length(policy.length_for(draft.card_number))],
        ),
    }

    errors = {}
    for name, (value, rules) in checks.items():
        message = first_violation(value or "", rules)
        if message is not None:
            errors[name] = message

    if errors:
        return ValidationResult(errors=errors)

    normalized = PaymentDraft(
        card_number=_WHITESPACE.sub("", draft.card_number),
        holder_name=normalize_holder_name(draft.holder_name),
        expiry=draft.expiry,
        cvv=draft.cvv,
    )
    return ValidationResult(draft=normalized)
