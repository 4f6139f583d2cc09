"""Tests for storefront wiring."""

import asyncio
import json

from storefront.app import create_storefront
from storefront.config import StorefrontConfig
from storefront.models import TransactionStatus

from tests.fixtures import ScriptedGateway, make_draft


class TestCreateStorefront:
    def test_sample_catalog(self) -> None:
        storefront = create_storefront(StorefrontConfig(payment_delay=0))
        assert len(storefront.ledger.products()) == 5
        assert storefront.checkout.ledger is storefront.ledger
        assert storefront.checkout.store is not None

    def test_catalog_file_and_cvv_length(self, tmp_path) -> None:
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps([{"id": "x", "name": "Widget", "price": "3", "quantity": 2}]), encoding="utf-8")

        storefront = create_storefront(StorefrontConfig(catalog_path=str(path), cvv_length=4, payment_timeout=1.0))

        assert [p.id for p in storefront.ledger.products()] == ["x"]
        assert storefront.checkout.cvv_policy.required_length == 4
        assert storefront.checkout.timeout == 1.0

    def test_purchase_end_to_end(self) -> None:
        storefront = create_storefront(StorefrontConfig(), gateway=ScriptedGateway())
        storefront.ledger.reserve("1").reserve("2")

        asyncio.run(storefront.checkout.submit(make_draft()))

        assert storefront.checkout.state.status == TransactionStatus.SUCCEEDED
        assert storefront.ledger.is_cart_empty()
        assert storefront.ledger.available_quantity("1") == 5
