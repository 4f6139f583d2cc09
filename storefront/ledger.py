"""Inventory ledger: available stock and cart reservations.

The ledger owns both sides of the conservation law

    available(p) + reserved(p) == original(p)

for every product p, and every mutation moves units between the two sides in
one step. Operations the stock cannot satisfy are declined silently: the
ledger is returned unchanged and no event is emitted.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import replace
from decimal import Decimal
from typing import Optional

import structlog

from .errors import DuplicateProductError
from .events import (
    CartCleared,
    LedgerEvent,
    ProductAdded,
    ProductRemoved,
    ReservationAdjusted,
    ReservationReleased,
    StockLevelSet,
    StockReserved,
)
from .models import CartItem, Product

Listener = Callable[[LedgerEvent], None]


class InventoryLedger:
    """Single owner of product stock and the cart reservation mapping.

    Mutations return the ledger itself so calls can be chained. The
    reservation mapping preserves insertion order and never holds an entry
    at zero.

    Example::

        ledger = InventoryLedger(default_catalog())
        ledger.reserve("1").reserve("1").set_reserved_quantity("2", 3)
        ledger.cart_total()
    """

    def __init__(self, products: Iterable[Product] = ()) -> None:
        self._products: dict[str, Product] = {}
        self._originals: dict[str, int] = {}
        self._reservations: dict[str, int] = {}
        self._listeners: list[Listener] = []
        self._log = structlog.get_logger().bind(component="inventory_ledger")

        for product in products:
            if product.id in self._products:
                raise DuplicateProductError(product.id)
            self._products[product.id] = replace(product)
            self._originals[product.id] = product.available_quantity

    # -- observers -------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for applied mutations. Returns an unsubscribe callable.

        A listener that raises is logged and skipped; the mutation stands.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: LedgerEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                self._log.exception("listener_failed", event_type=type(event).__name__)

    # -- mutations -------------------------------------------------------

    def reserve(self, product_id: str) -> InventoryLedger:
        """Move one unit from available stock into the cart."""
        product = self._products.get(product_id)
        if product is None:
            self._log.debug("reserve_declined", product_id=product_id, reason="unknown_product")
            return self
        if product.available_quantity <= 0:
            self._log.debug("reserve_declined", product_id=product_id, reason="out_of_stock")
            return self

        new_reserved = self._reservations.get(product_id, 0) + 1
        product.available_quantity -= 1
        self._reservations[product_id] = new_reserved

        self._log.info(
            "reserving_stock",
            product_id=product_id,
            quantity=1,
            new_available=product.available_quantity,
            new_reserved=new_reserved,
        )
        self._emit(
            StockReserved(
                product_id=product_id,
                quantity=1,
                new_available=product.available_quantity,
                new_reserved=new_reserved,
            )
        )
        return self

    def set_reserved_quantity(self, product_id: str, target_quantity: int) -> InventoryLedger:
        """Adjust the cart quantity for a product to exactly target_quantity.

        Increases need enough available stock to cover the whole difference;
        otherwise nothing changes. Decreases are always allowed. A target of
        zero or less releases the product from the cart.
        """
        product = self._products.get(product_id)
        if product is None:
            self._log.debug("adjust_declined", product_id=product_id, reason="unknown_product")
            return self
        if target_quantity <= 0:
            return self.release(product_id)

        current = self._reservations.get(product_id, 0)
        delta = target_quantity - current
        if delta == 0:
            return self
        if delta > 0 and product.available_quantity < delta:
            self._log.debug(
                "adjust_declined",
                product_id=product_id,
                reason="insufficient_stock",
                available=product.available_quantity,
                requested=delta,
            )
            return self

        product.available_quantity -= delta
        self._reservations[product_id] = target_quantity

        self._log.info(
            "updating_quantity",
            product_id=product_id,
            old_quantity=current,
            new_quantity=target_quantity,
            new_available=product.available_quantity,
        )
        self._emit(
            ReservationAdjusted(
                product_id=product_id,
                old_quantity=current,
                new_quantity=target_quantity,
                new_available=product.available_quantity,
            )
        )
        return self

    def release(self, product_id: str) -> InventoryLedger:
        """Return every reserved unit of a product to stock and drop its cart entry."""
        if product_id not in self._reservations:
            return self

        quantity = self._reservations.pop(product_id)
        product = self._products[product_id]
        product.available_quantity += quantity

        self._log.info(
            "releasing_reservation",
            product_id=product_id,
            quantity=quantity,
            new_available=product.available_quantity,
        )
        self._emit(
            ReservationReleased(
                product_id=product_id,
                quantity=quantity,
                new_available=product.available_quantity,
            )
        )
        return self

    def clear(self) -> InventoryLedger:
        """Return all reserved units to stock and empty the cart."""
        if not self._reservations:
            return self

        released = dict(self._reservations)
        for product_id, quantity in released.items():
            self._products[product_id].available_quantity += quantity
        self._reservations = {}

        self._log.info("clearing_cart", products=len(released), units=sum(released.values()))
        self._emit(CartCleared(released=released))
        return self

    def set_available_quantity(self, product_id: str, new_quantity: int) -> InventoryLedger:
        """Override the total stock of a product.

        The new value is the product's total (available plus reserved). A
        reservation larger than the new total is capped to it; whatever is not
        reserved becomes available.
        """
        if new_quantity < 0:
            raise ValueError("Quantity cannot be negative")
        product = self._products.get(product_id)
        if product is None:
            self._log.debug("stock_override_declined", product_id=product_id, reason="unknown_product")
            return self

        reserved = min(self._reservations.get(product_id, 0), new_quantity)
        product.available_quantity = new_quantity - reserved
        self._originals[product_id] = new_quantity
        if reserved > 0:
            self._reservations[product_id] = reserved
        else:
            self._reservations.pop(product_id, None)

        self._log.info(
            "setting_stock_level",
            product_id=product_id,
            total=new_quantity,
            new_available=product.available_quantity,
            new_reserved=reserved,
        )
        self._emit(
            StockLevelSet(
                product_id=product_id,
                total=new_quantity,
                new_available=product.available_quantity,
                new_reserved=reserved,
            )
        )
        return self

    def add_product(self, product: Product) -> InventoryLedger:
        if product.id in self._products:
            raise DuplicateProductError(product.id)

        self._products[product.id] = replace(product)
        self._originals[product.id] = product.available_quantity

        self._log.info("adding_product", product_id=product.id, quantity=product.available_quantity)
        self._emit(ProductAdded(product_id=product.id, available_quantity=product.available_quantity))
        return self

    def remove_product(self, product_id: str) -> InventoryLedger:
        """Delete a product from the catalog, releasing any reservation first."""
        if product_id not in self._products:
            return self

        released = self._reservations.pop(product_id, 0)
        del self._products[product_id]
        del self._originals[product_id]

        self._log.info("removing_product", product_id=product_id, released=released)
        self._emit(ProductRemoved(product_id=product_id, released_quantity=released))
        return self

    # -- reads -----------------------------------------------------------

    def product(self, product_id: str) -> Optional[Product]:
        """Return a copy of the product, or None if unknown."""
        product = self._products.get(product_id)
        return replace(product) if product is not None else None

    def products(self) -> list[Product]:
        return [replace(p) for p in self._products.values()]

    def available_quantity(self, product_id: str) -> int:
        product = self._products.get(product_id)
        return product.available_quantity if product is not None else 0

    def reserved_quantity(self, product_id: str) -> int:
        return self._reservations.get(product_id, 0)

    def original_quantity(self, product_id: str) -> int:
        return self._originals.get(product_id, 0)

    def reservations(self) -> dict[str, int]:
        return dict(self._reservations)

    def cart_items(self) -> list[CartItem]:
        """Cart contents in the order products were first reserved."""
        return [
            CartItem.of(self._products[product_id], quantity)
            for product_id, quantity in self._reservations.items()
        ]

    def cart_total(self) -> Decimal:
        return sum(
            (self._products[pid].price * qty for pid, qty in self._reservations.items()),
            Decimal("0"),
        )

    def cart_item_count(self) -> int:
        return sum(self._reservations.values())

    def item_by_id(self, product_id: str) -> Optional[CartItem]:
        quantity = self._reservations.get(product_id)
        if quantity is None:
            return None
        return CartItem.of(self._products[product_id], quantity)

    def is_cart_empty(self) -> bool:
        return not self._reservations

    def check_conservation(self) -> bool:
        """Return True if available + reserved equals the original stock for every product."""
        return all(
            product.available_quantity + self._reservations.get(pid, 0) == self._originals[pid]
            for pid, product in self._products.items()
        )
