"""External collaborators consumed by checkout.

PaymentGateway: opaque async charge call. Success returns a receipt, failure
raises PaymentDeclinedError carrying a human-readable reason.

SecureStore: async key-value persistence for the redacted payment draft.
save() and delete() raise StorageError on any failure; load() degrades to
None instead of raising.
"""

from __future__ import annotations

import asyncio
import json
import time
from abc import ABC, abstractmethod
from dataclasses import asdict
from typing import Optional

import structlog

from .errors import PaymentDeclinedError, StorageError
from .models import PaymentDraft, PaymentReceipt, RedactedDraft

PAYMENT_DATA_KEY = "SECURE_PAYMENT_DATA"

ERRMSG_CARD_DECLINED = "Card declined"

logger = structlog.get_logger()


class PaymentGateway(ABC):
    @abstractmethod
    async def charge(self, draft: PaymentDraft) -> PaymentReceipt:
        """Charge the card described by draft.

        Raises:
            PaymentDeclinedError: The charge was refused.
        """


class SimulatedPaymentGateway(PaymentGateway):
    """Payment gateway stand-in with network-like latency.

    Cards whose number ends in the decline digit are refused; every other
    card is approved.
    """

    def __init__(self, delay: float = 3.0, decline_suffix: str = "0") -> None:
        if delay < 0:
            raise ValueError("Delay cannot be negative")
        self.delay = delay
        self.decline_suffix = decline_suffix
        self._log = logger.bind(component="simulated_gateway")

    async def charge(self, draft: PaymentDraft) -> PaymentReceipt:
        if self.delay:
            await asyncio.sleep(self.delay)

        if draft.card_number.endswith(self.decline_suffix):
            self._log.info("charge_declined", last_four=draft.last_four_digits)
            raise PaymentDeclinedError(ERRMSG_CARD_DECLINED)

        receipt = PaymentReceipt(transaction_id=f"TX-{int(time.time() * 1000)}")
        self._log.info("charge_approved", last_four=draft.last_four_digits, transaction_id=receipt.transaction_id)
        return receipt


class SecureStore(ABC):
    """Redacted draft persistence over a string key-value backend.

    Subclasses provide the raw item primitives; failure policy and JSON
    encoding live here.
    """

    def __init__(self) -> None:
        self._log = logger.bind(component=type(self).__name__)

    @abstractmethod
    async def _set_item(self, key: str, value: str) -> None: ...

    @abstractmethod
    async def _get_item(self, key: str) -> Optional[str]: ...

    @abstractmethod
    async def _remove_item(self, key: str) -> None: ...

    @abstractmethod
    async def _clear(self) -> None: ...

    async def save(self, draft: RedactedDraft) -> None:
        try:
            await self._set_item(PAYMENT_DATA_KEY, json.dumps(asdict(draft)))
        except Exception as e:
            self._log.error("store_payment_data_failed", error=str(e))
            raise StorageError("Failed to store payment data securely", e) from e
        self._log.info("payment_data_stored", last_four=draft.last_four_digits)

    async def load(self) -> Optional[RedactedDraft]:
        try:
            raw = await self._get_item(PAYMENT_DATA_KEY)
            if raw is None:
                return None
            return RedactedDraft(**json.loads(raw))
        except Exception as e:
            self._log.warning("load_payment_data_failed", error=str(e))
            return None

    async def delete(self) -> None:
        try:
            await self._remove_item(PAYMENT_DATA_KEY)
        except Exception as e:
            self._log.error("remove_payment_data_failed", error=str(e))
            raise StorageError("Failed to remove payment data", e) from e
        self._log.info("payment_data_removed")

    async def clear(self) -> None:
        try:
            await self._clear()
        except Exception as e:
            self._log.error("clear_storage_failed", error=str(e))
            raise StorageError("Failed to clear storage", e) from e
        self._log.info("storage_cleared")


class InMemorySecureStore(SecureStore):
    """Process-local SecureStore backed by a dict of JSON strings."""

    def __init__(self) -> None:
        super().__init__()
        self._items: dict[str, str] = {}

    async def _set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def _get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def _remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    async def _clear(self) -> None:
        self._items.clear()
