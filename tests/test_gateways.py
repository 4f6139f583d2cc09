"""Tests for the payment gateway and secure store collaborators."""

import asyncio
import json

import pytest

from storefront.errors import PaymentDeclinedError, StorageError
from storefront.gateways import (
    ERRMSG_CARD_DECLINED,
    PAYMENT_DATA_KEY,
    InMemorySecureStore,
    SimulatedPaymentGateway,
)

from tests.fixtures import LUHN_VALID_ENDING_IN_ZERO, make_draft


class BrokenStore(InMemorySecureStore):
    """Store whose backend fails on every call."""

    async def _set_item(self, key: str, value: str) -> None:
        raise OSError("write failed")

    async def _get_item(self, key: str):
        raise OSError("read failed")

    async def _remove_item(self, key: str) -> None:
        raise OSError("remove failed")

    async def _clear(self) -> None:
        raise OSError("clear failed")


class TestSimulatedPaymentGateway:
    def test_approves(self) -> None:
        gateway = SimulatedPaymentGateway(delay=0)
        receipt = asyncio.run(gateway.charge(make_draft()))
        assert receipt.status == "ok"
        assert receipt.transaction_id.startswith("TX-")

    def test_declines_trailing_zero(self) -> None:
        gateway = SimulatedPaymentGateway(delay=0)
        with pytest.raises(PaymentDeclinedError) as exc_info:
            asyncio.run(gateway.charge(make_draft(card_number=LUHN_VALID_ENDING_IN_ZERO)))
        assert exc_info.value.reason == ERRMSG_CARD_DECLINED

    def test_custom_decline_suffix(self) -> None:
        gateway = SimulatedPaymentGateway(delay=0, decline_suffix="1111")
        with pytest.raises(PaymentDeclinedError):
            asyncio.run(gateway.charge(make_draft()))

    def test_negative_delay_rejected(self) -> None:
        with pytest.raises(ValueError):
            SimulatedPaymentGateway(delay=-1)


class TestInMemorySecureStore:
    def test_save_and_load(self) -> None:
        store = InMemorySecureStore()
        redacted = make_draft().redact(transaction_id="TX-42")

        asyncio.run(store.save(redacted))
        loaded = asyncio.run(store.load())

        assert loaded == redacted

    def test_persisted_payload_has_no_cvv(self) -> None:
        store = InMemorySecureStore()
        asyncio.run(store.save(make_draft(cvv="987").redact()))

        payload = json.loads(store._items[PAYMENT_DATA_KEY])

        assert "cvv" not in payload
        assert "987" not in store._items[PAYMENT_DATA_KEY]
        assert payload["last_four_digits"] == "1111"

    def test_load_missing(self) -> None:
        assert asyncio.run(InMemorySecureStore().load()) is None

    def test_load_corrupt_payload(self) -> None:
        store = InMemorySecureStore()
        store._items[PAYMENT_DATA_KEY] = "{not json"
        assert asyncio.run(store.load()) is None

    def test_delete_and_clear(self) -> None:
        store = InMemorySecureStore()
        asyncio.run(store.save(make_draft().redact()))
        asyncio.run(store.delete())
        assert asyncio.run(store.load()) is None

        asyncio.run(store.save(make_draft().redact()))
        asyncio.run(store.clear())
        assert store._items == {}


class TestStoreFailures:
    """save/delete/clear raise StorageError; load degrades to None."""

    def test_save(self) -> None:
        with pytest.raises(StorageError) as exc_info:
            asyncio.run(BrokenStore().save(make_draft().redact()))
        assert exc_info.value.message == "Failed to store payment data securely"
        assert isinstance(exc_info.value.cause, OSError)

    def test_load(self) -> None:
        assert asyncio.run(BrokenStore().load()) is None

    def test_delete(self) -> None:
        with pytest.raises(StorageError) as exc_info:
            asyncio.run(BrokenStore().delete())
        assert str(exc_info.value) == "Failed to remove payment data: remove failed"

    def test_clear(self) -> None:
        with pytest.raises(StorageError, match="Failed to clear storage"):
            asyncio.run(BrokenStore().clear())
