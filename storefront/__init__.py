"""Storefront core: inventory reservation ledger, card input handling, and checkout."""

from .models import (
    Product,
    CartItem,
    PaymentDraft,
    RedactedDraft,
    PaymentReceipt,
    TransactionStatus,
    TransactionState,
)
from .errors import (
    StorefrontError,
    CheckoutRejectedError,
    DuplicateProductError,
    PaymentDeclinedError,
    PaymentTimeoutError,
    StorageError,
)
from .events import (
    LedgerEvent,
    StockReserved,
    ReservationAdjusted,
    ReservationReleased,
    CartCleared,
    StockLevelSet,
    ProductAdded,
    ProductRemoved,
)
from .ledger import InventoryLedger
from .formatting import (
    digits_only,
    format_card_number,
    format_expiry,
    normalize_holder_name,
)
from .validation import (
    CvvPolicy,
    ValidationResult,
    classify_card_number,
    luhn_checksum_valid,
    validate_payment_draft,
)
from .gateways import (
    PaymentGateway,
    SimulatedPaymentGateway,
    SecureStore,
    InMemorySecureStore,
)
from .checkout import CheckoutOrchestrator
from .catalog import default_catalog, load_catalog
from .config import StorefrontConfig, configure_logging, load_config
from .app import Storefront, create_storefront

__version__ = "0.1.0"

__all__ = [
    # Models
    "Product",
    "CartItem",
    "PaymentDraft",
    "RedactedDraft",
    "PaymentReceipt",
    "TransactionStatus",
    "TransactionState",
    # Errors
    "StorefrontError",
    "CheckoutRejectedError",
    "DuplicateProductError",
    "PaymentDeclinedError",
    "PaymentTimeoutError",
    "StorageError",
    # Ledger events
    "LedgerEvent",
    "StockReserved",
    "ReservationAdjusted",
    "ReservationReleased",
    "CartCleared",
    "StockLevelSet",
    "ProductAdded",
    "ProductRemoved",
    # Ledger
    "InventoryLedger",
    # Formatting
    "digits_only",
    "format_card_number",
    "format_expiry",
    "normalize_holder_name",
    # Validation
    "CvvPolicy",
    "ValidationResult",
    "classify_card_number",
    "luhn_checksum_valid",
    "validate_payment_draft",
    # Collaborators
    "PaymentGateway",
    "SimulatedPaymentGateway",
    "SecureStore",
    "InMemorySecureStore",
    # Checkout
    "CheckoutOrchestrator",
    # Catalog
    "default_catalog",
    "load_catalog",
    # Configuration
    "StorefrontConfig",
    "configure_logging",
    "load_config",
    "Storefront",
    "create_storefront",
]
