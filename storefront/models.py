"""Storefront data model.

Products are the only records the ledger mutates. Cart items are derived on
demand from a product and its reservation, so they are frozen snapshots.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum
from typing import Optional


@dataclass
class Product:
    id: str
    name: str
    price: Decimal
    available_quantity: int
    image: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Product ID is required")
        if not isinstance(self.price, Decimal):
            self.price = Decimal(str(self.price))
        if self.price < 0:
            raise ValueError("Price cannot be negative")
        if self.available_quantity < 0:
            raise ValueError("Quantity cannot be negative")


@dataclass(frozen=True)
class CartItem:
    """A product joined with the quantity reserved for it in the cart."""

    product_id: str
    name: str
    price: Decimal
    image: Optional[str]
    available_quantity: int
    reserved_quantity: int

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.reserved_quantity

    @classmethod
    def of(cls, product: Product, reserved_quantity: int) -> CartItem:
        return cls(
            product_id=product.id,
            name=product.name,
            price=product.price,
            image=product.image,
            available_quantity=product.available_quantity,
            reserved_quantity=reserved_quantity,
        )


@dataclass(frozen=True)
class RedactedDraft:
    """Payment details safe to persist for form pre-fill. Never holds the CVV."""

    card_number: str
    holder_name: str
    expiry: str
    last_four_digits: str
    timestamp: int
    transaction_id: Optional[str] = None


@dataclass(frozen=True)
class PaymentDraft:
    """Card details collected during a single checkout session."""

    card_number: str
    holder_name: str
    expiry: str
    cvv: str

    @property
    def last_four_digits(self) -> str:
        digits = "".join(c for c in self.card_number if c.isdigit())
        return digits[-4:]

    def redact(self, transaction_id: Optional[str] = None) -> RedactedDraft:
        timestamp = int(time.time() * 1000)
        return RedactedDraft(
            card_number=self.card_number,
            holder_name=self.holder_name,
            expiry=self.expiry,
            last_four_digits=self.last_four_digits,
            timestamp=timestamp,
            transaction_id=transaction_id or f"TX-{timestamp}",
        )

    def __repr__(self) -> str:
        return (
            f"PaymentDraft(card_number='**** {self.last_four_digits}', "
            f"holder_name={self.holder_name!r}, expiry={self.expiry!r}, cvv='***')"
        )


class TransactionStatus(StrEnum):
    """Checkout transaction status values."""

    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class TransactionState:
    status: TransactionStatus = TransactionStatus.IDLE
    message: Optional[str] = None
    transaction_id: Optional[str] = None

    def is_idle(self) -> bool:
        return self.status == TransactionStatus.IDLE

    def is_pending(self) -> bool:
        return self.status == TransactionStatus.PENDING

    def is_terminal(self) -> bool:
        return self.status in (TransactionStatus.SUCCEEDED, TransactionStatus.FAILED)


@dataclass(frozen=True)
class PaymentReceipt:
    transaction_id: str
    status: str = "ok"
