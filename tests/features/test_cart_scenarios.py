"""BDD scenarios for cart reservations."""

from decimal import Decimal

import pytest
from pytest_bdd import scenarios, given, when, then, parsers

from storefront.ledger import InventoryLedger
from storefront.models import Product

scenarios("cart.feature")


@pytest.fixture
def ledger():
    return InventoryLedger()


# --- Given steps ---

@given(parsers.parse('a product "{product_id}" priced {price} with {quantity:d} in stock'))
def product_in_stock(ledger, product_id, price, quantity):
    ledger.add_product(
        Product(id=product_id, name=product_id, price=Decimal(price), available_quantity=quantity)
    )


# --- When steps ---

@when(parsers.parse('I reserve "{product_id}" {times:d} times'))
def reserve_times(ledger, product_id, times):
    for _ in range(times):
        ledger.reserve(product_id)


@when(parsers.parse('I set the cart quantity of "{product_id}" to {quantity:d}'))
def set_cart_quantity(ledger, product_id, quantity):
    ledger.set_reserved_quantity(product_id, quantity)


@when("I clear the cart")
def clear_cart(ledger):
    ledger.clear()


@when(parsers.parse('the stock of "{product_id}" is set to {quantity:d}'))
def set_stock(ledger, product_id, quantity):
    ledger.set_available_quantity(product_id, quantity)


# --- Then steps ---

@then(parsers.parse('"{product_id}" has {available:d} available and {reserved:d} reserved'))
def check_quantities(ledger, product_id, available, reserved):
    assert ledger.available_quantity(product_id) == available
    assert ledger.reserved_quantity(product_id) == reserved


@then(parsers.parse("the cart total is {total}"))
def check_total(ledger, total):
    assert ledger.cart_total() == Decimal(total)


@then("the cart is empty")
def check_empty(ledger):
    assert ledger.is_cart_empty()
    assert ledger.cart_items() == []


@then("stock is conserved")
def check_conservation(ledger):
    assert ledger.check_conservation()


@then(parsers.parse('the cart lists "{product_ids}"'))
def check_order(ledger, product_ids):
    assert [item.product_id for item in ledger.cart_items()] == product_ids.split(",")


@then(parsers.parse("the cart holds {count:d} items"))
def check_count(ledger, count):
    assert ledger.cart_item_count() == count
