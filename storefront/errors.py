"""Error types for the storefront core."""

from typing import Optional


class StorefrontError(Exception):
    """Base class for storefront errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message


class CheckoutRejectedError(StorefrontError):
    """Checkout command was rejected by the transaction state machine."""


class DuplicateProductError(StorefrontError):
    """A product with the same identifier is already in the catalog."""

    def __init__(self, product_id: str):
        super().__init__(f"product already exists: {product_id}")
        self.product_id = product_id


class PaymentDeclinedError(StorefrontError):
    """The payment gateway declined the charge."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class PaymentTimeoutError(StorefrontError):
    """The payment gateway did not answer in time."""

    def __init__(self, seconds: float):
        super().__init__(f"payment timed out after {seconds:g}s")
        self.seconds = seconds


class StorageError(StorefrontError):
    """Secure storage operation failed."""
