"""Ledger change notifications.

One event per applied mutation. Listeners registered with
InventoryLedger.subscribe() receive them after the state change is complete;
declined operations emit nothing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class StockReserved:
    product_id: str
    quantity: int
    new_available: int
    new_reserved: int


@dataclass(frozen=True)
class ReservationAdjusted:
    product_id: str
    old_quantity: int
    new_quantity: int
    new_available: int


@dataclass(frozen=True)
class ReservationReleased:
    product_id: str
    quantity: int
    new_available: int


@dataclass(frozen=True)
class CartCleared:
    released: dict[str, int] = field(default_factory=dict)  # product_id -> quantity


@dataclass(frozen=True)
class StockLevelSet:
    product_id: str
    total: int
    new_available: int
    new_reserved: int


@dataclass(frozen=True)
class ProductAdded:
    product_id: str
    available_quantity: int


@dataclass(frozen=True)
class ProductRemoved:
    product_id: str
    released_quantity: int


LedgerEvent = Union[
    StockReserved,
    ReservationAdjusted,
    ReservationReleased,
    CartCleared,
    StockLevelSet,
    ProductAdded,
    ProductRemoved,
]
