"""Wiring for a ready-to-use storefront session."""

from dataclasses import dataclass
from typing import Optional

import structlog

from .catalog import default_catalog, load_catalog
from .checkout import CheckoutOrchestrator
from .config import StorefrontConfig, configure_logging, load_config
from .gateways import InMemorySecureStore, PaymentGateway, SecureStore, SimulatedPaymentGateway
from .ledger import InventoryLedger
from .validation import CvvPolicy

logger = structlog.get_logger()


@dataclass
class Storefront:
    config: StorefrontConfig
    ledger: InventoryLedger
    checkout: CheckoutOrchestrator


def create_storefront(
    config: Optional[StorefrontConfig] = None,
    gateway: Optional[PaymentGateway] = None,
    store: Optional[SecureStore] = None,
) -> Storefront:
    """Build a ledger seeded from the configured catalog and a checkout over it.

    Collaborators default to the simulated gateway and an in-memory store.
    """
    config = config or load_config()
    configure_logging(config.log_level)

    products = load_catalog(config.catalog_path) if config.catalog_path else default_catalog()
    ledger = InventoryLedger(products)
    checkout = CheckoutOrchestrator(
        ledger,
        gateway or SimulatedPaymentGateway(delay=config.payment_delay),
        store=store or InMemorySecureStore(),
        cvv_policy=CvvPolicy(required_length=config.cvv_length),
        timeout=config.payment_timeout,
    )

    logger.info(
        "storefront_ready",
        products=len(products),
        catalog=config.catalog_path or "sample",
        payment_timeout=config.payment_timeout,
    )
    return Storefront(config=config, ledger=ledger, checkout=checkout)
