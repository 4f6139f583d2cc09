"""Shared test data and collaborator doubles."""

import asyncio
from datetime import date
from decimal import Decimal
from typing import Optional

from storefront.errors import PaymentDeclinedError
from storefront.gateways import PaymentGateway
from storefront.models import PaymentDraft, PaymentReceipt, Product

VALID_CARD = "4111111111111111"
DECLINED_CARD = "4111111111111110"  # fails Luhn; only used where validation is bypassed
# Luhn-valid and ending in 0, so the simulated gateway declines it.
LUHN_VALID_ENDING_IN_ZERO = "4000000000000010"


def make_products() -> list[Product]:
    return [
        Product(id="A", name="Alpha", price=Decimal("10.00"), available_quantity=10),
        Product(id="B", name="Bravo", price=Decimal("2.50"), available_quantity=5),
        Product(id="C", name="Charlie", price=Decimal("99.99"), available_quantity=0),
    ]


def future_expiry(years_ahead: int = 2, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"{today.month:02d}/{(today.year + years_ahead) % 100:02d}"


def make_draft(card_number: str = VALID_CARD, **overrides) -> PaymentDraft:
    fields = {
        "card_number": card_number,
        "holder_name": "John Doe",
        "expiry": future_expiry(),
        "cvv": "123",
    }
    fields.update(overrides)
    return PaymentDraft(**fields)


class ScriptedGateway(PaymentGateway):
    """Gateway returning a fixed outcome, optionally held until released."""

    def __init__(self, decline_reason: Optional[str] = None, hold: bool = False, error: Optional[Exception] = None):
        self.decline_reason = decline_reason
        self.error = error
        self.release = asyncio.Event() if hold else None
        self.calls: list[PaymentDraft] = []

    async def charge(self, draft: PaymentDraft) -> PaymentReceipt:
        self.calls.append(draft)
        if self.release is not None:
            await self.release.wait()
        if self.error is not None:
            raise self.error
        if self.decline_reason is not None:
            raise PaymentDeclinedError(self.decline_reason)
        return PaymentReceipt(transaction_id="TX-1")


class SlowGateway(PaymentGateway):
    def __init__(self, seconds: float):
        self.seconds = seconds

    async def charge(self, draft: PaymentDraft) -> PaymentReceipt:
        await asyncio.sleep(self.seconds)
        return PaymentReceipt(transaction_id="TX-slow")
