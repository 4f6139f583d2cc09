"""Shared pytest fixtures for storefront tests."""

import pytest

from storefront.ledger import InventoryLedger
from storefront.models import PaymentDraft, Product

from tests.fixtures import make_draft, make_products


@pytest.fixture
def products() -> list[Product]:
    return make_products()


@pytest.fixture
def ledger(products) -> InventoryLedger:
    return InventoryLedger(products)


@pytest.fixture
def draft() -> PaymentDraft:
    return make_draft()
