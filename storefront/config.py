"""Runtime configuration and logging setup.

Configuration comes from environment variables:
    STOREFRONT_LOG_LEVEL: debug, info (default), warning, error, critical
    STOREFRONT_PAYMENT_TIMEOUT: seconds before a pending payment fails (default: none)
    STOREFRONT_PAYMENT_DELAY: simulated gateway latency in seconds (default: 3.0)
    STOREFRONT_CVV_LENGTH: required CVV digits, 3 (default) or 4
    STOREFRONT_CATALOG_PATH: JSON catalog file (default: sample catalog)
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

import structlog

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


@dataclass(frozen=True)
class StorefrontConfig:
    log_level: str = "info"
    payment_timeout: Optional[float] = None
    payment_delay: float = 3.0
    cvv_length: int = 3
    catalog_path: Optional[str] = None


def configure_logging(level: str = "info") -> None:
    """Configure structlog with JSON rendering and ISO timestamps."""
    if level not in LOG_LEVELS:
        raise ValueError(f"unknown log level: {level}")
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVELS[level]),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )


def _float_or_none(environ: Mapping[str, str], name: str) -> Optional[float]:
    raw = environ.get(name, "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def load_config(environ: Optional[Mapping[str, str]] = None) -> StorefrontConfig:
    """Read configuration from the environment.

    Raises:
        ValueError: A variable is set to an invalid value.
    """
    env = os.environ if environ is None else environ

    log_level = env.get("STOREFRONT_LOG_LEVEL", "info").strip().lower()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"STOREFRONT_LOG_LEVEL must be one of {sorted(LOG_LEVELS)}, got {log_level!r}")

    delay_raw = env.get("STOREFRONT_PAYMENT_DELAY", "3.0").strip()
    try:
        payment_delay = float(delay_raw)
    except ValueError as e:
        raise ValueError(f"STOREFRONT_PAYMENT_DELAY must be a number, got {delay_raw!r}") from e
    if payment_delay < 0:
        raise ValueError(f"STOREFRONT_PAYMENT_DELAY cannot be negative, got {delay_raw!r}")

    cvv_raw = env.get("STOREFRONT_CVV_LENGTH", "3").strip()
    if cvv_raw not in ("3", "4"):
        raise ValueError(f"STOREFRONT_CVV_LENGTH must be 3 or 4, got {cvv_raw!r}")

    return StorefrontConfig(
        log_level=log_level,
        payment_timeout=_float_or_none(env, "STOREFRONT_PAYMENT_TIMEOUT"),
        payment_delay=payment_delay,
        cvv_length=int(cvv_raw),
        catalog_path=env.get("STOREFRONT_CATALOG_PATH") or None,
    )
