"""Checkout orchestration.

Sequences validate -> charge -> finalize or keep the cart for a retry.

State machine:
    IDLE ---submit---> PENDING
    FAILED -submit---> PENDING       (retry with the cart still reserved)
    PENDING --ok-----> SUCCEEDED     (cart cleared, draft discarded)
    PENDING --error--> FAILED        (cart stays reserved, message kept)
    PENDING --timeout> FAILED
    SUCCEEDED|FAILED --acknowledge--> IDLE

Exactly one terminal transition is applied per submission. Resolutions that
arrive once the submission is no longer pending (a second resolve, a gateway
answer after the timeout fired) are ignored.
"""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Optional

import structlog

from .errors import CheckoutRejectedError, PaymentDeclinedError, PaymentTimeoutError, StorageError
from .gateways import PaymentGateway, SecureStore
from .ledger import InventoryLedger
from .models import PaymentDraft, RedactedDraft, TransactionState, TransactionStatus
from .validation import CvvPolicy, ValidationResult, validate_payment_draft

ERRMSG_ALREADY_PENDING = "A payment is already in progress"
ERRMSG_ALREADY_SUCCEEDED = "Transaction already completed; acknowledge it first"
ERRMSG_EMPTY_CART = "Cart is empty"
ERRMSG_NOTHING_TO_ACKNOWLEDGE = "No finished transaction to acknowledge"
ERRMSG_PAYMENT_REJECTED = "Payment rejected. Check your details."
ERRMSG_PAYMENT_TIMEOUT = "Payment timed out. Please try again."
ERRMSG_PAYMENT_CANCELLED = "Payment cancelled."

logger = structlog.get_logger()


class CheckoutOrchestrator:
    """Drives one checkout session over a ledger and a payment gateway.

    The orchestrator reads cart totals from the ledger and clears the cart
    after a successful charge; it holds no inventory logic of its own.

    Args:
        ledger: Inventory ledger owning the cart.
        gateway: Payment collaborator.
        store: Optional secure store used for draft pre-fill.
        cvv_policy: CVV length policy applied during validation.
        timeout: Seconds to wait for the gateway; None waits indefinitely.
    """

    def __init__(
        self,
        ledger: InventoryLedger,
        gateway: PaymentGateway,
        store: Optional[SecureStore] = None,
        cvv_policy: Optional[CvvPolicy] = None,
        timeout: Optional[float] = None,
    ) -> None:
        if timeout is not None and timeout <= 0:
            raise ValueError("Timeout must be positive")
        self.ledger = ledger
        self.gateway = gateway
        self.store = store
        self.cvv_policy = cvv_policy or CvvPolicy()
        self.timeout = timeout
        self._state = TransactionState()
        self._draft: Optional[PaymentDraft] = None
        self._submission = 0
        self._log = logger.bind(component="checkout")

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def draft(self) -> Optional[PaymentDraft]:
        """The normalized draft of the active session, if any."""
        return self._draft

    # -- submission ------------------------------------------------------

    def start(self, draft: PaymentDraft, today: Optional[date] = None) -> ValidationResult:
        """Validate the draft and move to PENDING without calling the gateway.

        Callers that drive the payment themselves finish the transaction with
        resolve_succeeded() or resolve_failed().

        Raises:
            CheckoutRejectedError: A payment is already pending, the last one
                succeeded and was not acknowledged, or the cart is empty.
        """
        if self._state.status == TransactionStatus.PENDING:
            raise CheckoutRejectedError(ERRMSG_ALREADY_PENDING)
        if self._state.status == TransactionStatus.SUCCEEDED:
            raise CheckoutRejectedError(ERRMSG_ALREADY_SUCCEEDED)
        if self.ledger.is_cart_empty():
            raise CheckoutRejectedError(ERRMSG_EMPTY_CART)

        result = validate_payment_draft(draft, self.cvv_policy, today)
        if not result.success:
            self._log.info("checkout_invalid_draft", fields=sorted(result.errors))
            return result

        self._submission += 1
        self._draft = result.draft
        self._state = TransactionState(status=TransactionStatus.PENDING)
        self._log.info(
            "checkout_submitted",
            submission=self._submission,
            total=str(self.ledger.cart_total()),
            items=self.ledger.cart_item_count(),
            last_four=result.draft.last_four_digits,
        )
        return result

    async def submit(self, draft: PaymentDraft, today: Optional[date] = None) -> ValidationResult:
        """Validate, charge, and settle the transaction.

        Returns the validation result. When the draft is valid, the
        transaction has reached SUCCEEDED or FAILED by the time this returns.
        Gateway errors of any kind end in FAILED; none propagate.

        Raises:
            CheckoutRejectedError: See start().
        """
        result = self.start(draft, today)
        if not result.success:
            return result

        submission = self._submission
        try:
            receipt = await self._charge(result.draft)
        except PaymentTimeoutError as e:
            self._log.warning("payment_timed_out", submission=submission, seconds=e.seconds)
            self._resolve(submission, TransactionStatus.FAILED, ERRMSG_PAYMENT_TIMEOUT)
        except PaymentDeclinedError as e:
            self._resolve(submission, TransactionStatus.FAILED, e.reason)
        except asyncio.CancelledError:
            self._resolve(submission, TransactionStatus.FAILED, ERRMSG_PAYMENT_CANCELLED)
            raise
        except Exception as e:
            self._log.error("payment_error", submission=submission, error=str(e))
            self._resolve(submission, TransactionStatus.FAILED, ERRMSG_PAYMENT_REJECTED)
        else:
            self._resolve(submission, TransactionStatus.SUCCEEDED, transaction_id=receipt.transaction_id)
        return result

    async def _charge(self, draft: PaymentDraft):
        if self.timeout is None:
            return await self.gateway.charge(draft)
        try:
            return await asyncio.wait_for(self.gateway.charge(draft), self.timeout)
        except asyncio.TimeoutError as e:
            raise PaymentTimeoutError(self.timeout) from e

    # -- resolution ------------------------------------------------------

    def resolve_succeeded(self, transaction_id: Optional[str] = None) -> bool:
        """Settle the pending transaction as successful. Returns False if nothing was pending."""
        return self._resolve(self._submission, TransactionStatus.SUCCEEDED, transaction_id=transaction_id)

    def resolve_failed(self, message: str) -> bool:
        """Settle the pending transaction as failed. Returns False if nothing was pending."""
        return self._resolve(self._submission, TransactionStatus.FAILED, message)

    def _resolve(
        self,
        submission: int,
        status: TransactionStatus,
        message: Optional[str] = None,
        transaction_id: Optional[str] = None,
    ) -> bool:
        if submission != self._submission or not self._state.is_pending():
            self._log.info(
                "late_resolution_ignored",
                submission=submission,
                current=self._submission,
                status=str(self._state.status),
                attempted=str(status),
            )
            return False

        if status == TransactionStatus.SUCCEEDED:
            self._state = TransactionState(status=status, transaction_id=transaction_id)
            self._draft = None
            self.ledger.clear()
            self._log.info("payment_succeeded", submission=submission, transaction_id=transaction_id)
        else:
            self._state = TransactionState(status=status, message=message)
            self._log.info("payment_failed", submission=submission, message=message)
        return True

    def acknowledge(self) -> TransactionState:
        """Return to IDLE after a finished transaction.

        A failed transaction keeps its cart reserved.

        Raises:
            CheckoutRejectedError: The transaction is idle or still pending.
        """
        if not self._state.is_terminal():
            raise CheckoutRejectedError(ERRMSG_NOTHING_TO_ACKNOWLEDGE)

        previous = self._state.status
        self._state = TransactionState()
        self._log.info("transaction_acknowledged", previous=str(previous))
        return self._state

    # -- pre-fill --------------------------------------------------------

    async def prefill(self) -> Optional[RedactedDraft]:
        """Load the remembered draft for form pre-fill, or None."""
        if self.store is None:
            return None
        return await self.store.load()

    async def remember_draft(self, draft: PaymentDraft) -> bool:
        """Persist the redacted draft. Returns False if storage failed."""
        if self.store is None:
            return False
        try:
            await self.store.save(draft.redact())
        except StorageError as e:
            self._log.warning("remember_draft_failed", error=str(e))
            return False
        return True

    async def forget_draft(self) -> bool:
        """Delete the remembered draft. Returns False if storage failed."""
        if self.store is None:
            return False
        try:
            await self.store.delete()
        except StorageError as e:
            self._log.warning("forget_draft_failed", error=str(e))
            return False
        return True
