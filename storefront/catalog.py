"""Product catalog seed.

The sample catalog is the default stock for a fresh ledger. A JSON file with
the same record shape can replace it:

    [{"id": "1", "name": "Smartphone Pro X", "price": "899.99", "quantity": 5,
      "image": "https://..."}]
"""

from __future__ import annotations

import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Union

from .models import Product

SAMPLE_PRODUCTS: tuple[dict[str, Any], ...] = (
    {
        "id": "1",
        "name": "Smartphone Pro X",
        "price": "899.99",
        "quantity": 5,
        "image": "https://images.unsplash.com/photo-1511707171634-5f897ff02aa9?w=500&q=80",
    },
    {
        "id": "2",
        "name": "Bluetooth Headphones",
        "price": "129.50",
        "quantity": 4,
        "image": "https://images.unsplash.com/photo-1505740420928-5e560c06d30e?w=500&q=80",
    },
    {
        "id": "3",
        "name": "Gaming Laptop XYZ",
        "price": "1599.00",
        "quantity": 1,
        "image": "https://images.unsplash.com/photo-1496181133206-80ce9b88a853?w=500&q=80",
    },
    {
        "id": "4",
        "name": "Smartwatch Series 5",
        "price": "249.99",
        "quantity": 2,
        "image": "https://images.unsplash.com/photo-1579586337278-3befd40fd17a?w=500&q=80",
    },
    {
        "id": "5",
        "name": "4K Camera",
        "price": "999.00",
        "quantity": 1,
        "image": "https://images.unsplash.com/photo-1516035069371-29a1b244cc32?w=500&q=80",
    },
)


def product_from_record(record: dict[str, Any]) -> Product:
    """Build a Product from a catalog record.

    Raises:
        ValueError: A required key is missing, a value cannot be parsed or is
            out of range, or the record is not a mapping.
    """
    try:
        return Product(
            id=str(record["id"]),
            name=str(record["name"]),
            price=Decimal(str(record["price"])),
            available_quantity=int(record["quantity"]),
            image=record.get("image"),
        )
    except KeyError as e:
        raise ValueError(f"catalog record missing key {e}") from e
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"invalid catalog record: {record!r}") from e


def default_catalog() -> list[Product]:
    """Fresh copies of the sample products."""
    return [product_from_record(record) for record in SAMPLE_PRODUCTS]


def load_catalog(path: Union[str, Path]) -> list[Product]:
    """Read a JSON catalog file.

    Raises:
        ValueError: The file is not a JSON list of valid product records.
        OSError: The file cannot be read.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError("catalog must be a JSON list of products")
    return [product_from_record(record) for record in data]
