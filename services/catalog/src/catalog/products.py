# services/catalog/src/catalog/products.py
"""
Reshape raw product documents from the search index into listing cards.
"""

import re
from typing import Any, Dict, List, Mapping
from urllib.parse import quote

from .config import config

FALLBACK_PRICE = {"condition": "New", "value": "99.99"}

RELATED_FIELDS = ("name", "subcategory", "favorManufacturer", "url", "specs")
ACCESSORY_FIELDS = ("name", "subcategory", "favorManufacturer", "url", "manufacturers")

PROJECTIONS = {"related": RELATED_FIELDS, "accessory": ACCESSORY_FIELDS}

_WHITESPACE = re.compile(r"\s+")
# Characters browsers leave unescaped in URI components
_URL_SAFE = "!*'()"


def _display_name(value: Any) -> Any:
    if isinstance(value, Mapping) and value.get("name"):
        return value["name"]
    return value or "Unknown"


def _price_text(value: Any) -> str:
    if value is None:
        return FALLBACK_PRICE["value"]
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _least_price(prices: Any) -> Dict[str, str]:
    if not isinstance(prices, list) or not prices:
        return dict(FALLBACK_PRICE)

    price = next(
        (p for p in prices if isinstance(p, Mapping) and p.get("type") == config.default_price_type),
        prices[0],
    )
    if not isinstance(price, Mapping):
        return dict(FALLBACK_PRICE)
    return {
        "condition": price.get("condition") or FALLBACK_PRICE["condition"],
        "value": _price_text(price.get("value")),
    }


def _base_product(product: Mapping[str, Any]) -> Dict[str, Any]:
    name = product.get("name")
    manufacturers = product.get("manufacturers")
    if not isinstance(manufacturers, list):
        manufacturers = [manufacturers or "Unknown"]

    slug_source = name or "unknown"
    specs = product.get("specs")

    return {
        "name": name or "Unknown Product",
        "category": _display_name(product.get("category")),
        "subcategory": _display_name(product.get("subcategory")),
        "manufacturers": manufacturers,
        "favorManufacturer": product.get("favorManufacturer")
        or (manufacturers[0] if manufacturers else None)
        or "Unknown",
        "url": f"/product/{quote(slug_source, safe=_URL_SAFE)}",
        "image": f"{_WHITESPACE.sub('-', slug_source.lower())}.jpg",
        "weight": product.get("weight") or 1.0,
        "specs": specs if isinstance(specs, list) else [],
    }


def format_product(product: Mapping[str, Any], type: str = "products") -> Dict[str, Any]:
    formatted = _base_product(product)
    formatted["leastPrice"] = _least_price(product.get("prices"))

    inventory = product.get("inventory")
    if isinstance(inventory, list):
        formatted["stock"] = sum(
            (entry.get("value") or 0) for entry in inventory if isinstance(entry, Mapping)
        )

    fields = PROJECTIONS.get(type)
    if fields:
        return {field: formatted[field] for field in fields}
    return formatted


def format_products(records: Any, type: str = "products") -> List[Dict[str, Any]]:
    """
    Format product records for listings.

    `type` selects the card: "related" and "accessory" keep a reduced field
    set, anything else keeps the full card with price and stock.
    Non-list input yields an empty list.
    """
    if not isinstance(records, list):
        return []
    return [
        format_product(record if isinstance(record, Mapping) else {}, type)
        for record in records
    ]
