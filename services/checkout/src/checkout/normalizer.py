# services/checkout/src/checkout/normalizer.py
"""
Order normalization for the checkout flow.

A raw checkout payload goes through validate -> sanitize -> assign id ->
shipping weight -> map before it is handed to the ERP integration. Every
step returns a new record; the caller's payload is never mutated.

Stateless steps are plain functions. Mapping needs the shipping-method and
item-condition tables, so it lives on `OrderNormalizer`, which owns them.
"""

import math
import re
import time
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from libs.storefront_shared.logging import get_logger
from libs.storefront_shared.metrics import Metrics

from .config import config
from .models import (
    BillingInfo,
    CanonicalOrder,
    CheckoutResult,
    ConditionMapping,
    CustomerInfo,
    PaymentInfo,
    ShippingInfo,
)

logger = get_logger(__name__)

# -------------------------------------------------------------------------
# LOOKUP TABLES
# -------------------------------------------------------------------------

DEFAULT_SHIPPING_METHODS: Mapping[str, str] = MappingProxyType(
    {
        "Ground": "ground",
        "2nd Day Air": "2day_air",
        "2nd Day Air A.M.": "2day_air_am",
        "Next Day Air Saver": "nextday_air_saver",
        "Next Day Air": "nextday_air",
        "UPS Next Day Air Early": "nextday_air_earlyam",
        "3 Day Select": "3day_select",
        "Worldwide Expedited": "worldwide_expedited",
        "Saver": "saver",
        "Worldwide Express": "worldwide_express",
        "Worldwide Express Plus": "worldwide_express_plus",
        "Freight": "freight",
        "International": "international",
    }
)

DEFAULT_CONDITION_MAPPINGS: Tuple[ConditionMapping, ...] = (
    ConditionMapping(ui="New", schema_key="newInBox", downstream="New in Box"),
    ConditionMapping(ui="New Surplus", schema_key="newSurplus", downstream="New Surplus"),
    ConditionMapping(ui="Re-Certified", schema_key="refurbished", downstream="Refurbished"),
    ConditionMapping(ui="Aftermarket", schema_key="aftermarket", downstream="Aftermarket"),
)

REQUIRED_STRING_FIELDS = (
    "firstName",
    "lastName",
    "email",
    "phone",
    "billingStreet",
    "billingCity",
    "billingZip",
    "billingState",
    "billingCountry",
    "shippingStreet",
    "shippingCity",
    "shippingZip",
    "shippingState",
    "shippingCountry",
    "shippingMethod",
    "cardName",
    "cardNumber",
    "cardExp",
)

REQUIRED_NUMBER_FIELDS = ("shippingRate", "taxRate")

# Letters, digits, space and the punctuation a postal address or card name needs
SANITIZE_PATTERN = re.compile(r"""[^A-Za-z0-9 !@#$%&()\-_+=\[\]:;"',./?]""")

# Leading decimal literal, the part of a string a form amount is read from
_AMOUNT_PREFIX = re.compile(
    r"^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))"
)

# Complete numeric literals accepted when coercing form values
_DECIMAL_LITERAL = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)", re.ASCII)
_RADIX_LITERAL = re.compile(r"0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")

FULL_STOCK = 100


class AmountParseError(ValueError):
    """Raised by `parse_amount_strict` when a string holds no number."""


class InvalidOrderError(ValueError):
    """Raised when a checkout payload fails the required-field check."""


# -------------------------------------------------------------------------
# NUMBERS
# -------------------------------------------------------------------------


def parse_amount(value: Any) -> Any:
    """
    Read a form amount such as "1,234.56".

    Strings have their commas removed and the leading number parsed;
    anything else is returned unchanged. A string without a leading number
    yields NaN rather than an error.
    """
    if not isinstance(value, str):
        return value

    match = _AMOUNT_PREFIX.match(value.replace(",", ""))
    if not match:
        return math.nan
    return float(match.group(1).replace("Infinity", "inf"))


def parse_amount_strict(value: Any) -> float:
    """
    Like `parse_amount`, but always returns a float and raises instead of
    producing NaN.

    Raises:
        AmountParseError: If the value cannot be read as a number
    """
    parsed = parse_amount(value)
    if isinstance(parsed, bool) or not isinstance(parsed, (int, float)):
        raise AmountParseError(f"Cannot read an amount from {value!r}")
    if math.isnan(parsed):
        raise AmountParseError(f"Cannot read an amount from {value!r}")
    return float(parsed)


def _to_number(value: Any) -> float:
    """
    Numeric coercion used by the validator, with the rules a browser form
    applies: null is 0, blank strings are 0, and strings must be a complete
    decimal, hex/octal/binary or `Infinity` literal. Anything else is NaN.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if _RADIX_LITERAL.fullmatch(text):
            return float(int(text, 0))
        if _DECIMAL_LITERAL.fullmatch(text):
            return float(text)
    return math.nan


def _is_valid_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _is_valid_number(value: Any) -> bool:
    return math.isfinite(_to_number(value))


def _is_truthy_number(value: Any) -> bool:
    number = _to_number(value)
    return math.isfinite(number) and number != 0


# -------------------------------------------------------------------------
# VALIDATION
# -------------------------------------------------------------------------


def _validate_item(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    return (
        _is_valid_string(item.get("name"))
        and _is_valid_string(item.get("condition"))
        and _is_truthy_number(item.get("quantity"))
        and _is_truthy_number(item.get("rate"))
    )


def validate_required(order: Dict[str, Any]) -> bool:
    """
    Check that a raw checkout payload carries everything the ERP needs.

    All of the following must hold:
    - every field in REQUIRED_STRING_FIELDS is a non-empty string
    - shippingRate and taxRate are present and finite numbers (null reads as 0)
    - items is a non-empty list of items with name, condition and a
      non-zero numeric quantity and rate

    Never raises; an invalid order simply yields False.
    """
    if not isinstance(order, dict):
        return False

    missing = [f for f in REQUIRED_STRING_FIELDS if not _is_valid_string(order.get(f))]
    if missing:
        logger.debug(f"Order rejected, missing string fields: {missing}")
        return False

    bad_numbers = [
        f for f in REQUIRED_NUMBER_FIELDS if f not in order or not _is_valid_number(order[f])
    ]
    if bad_numbers:
        logger.debug(f"Order rejected, non-numeric fields: {bad_numbers}")
        return False

    items = order.get("items")
    if not isinstance(items, list) or not items:
        logger.debug("Order rejected, no items")
        return False

    if not all(_validate_item(item) for item in items):
        logger.debug("Order rejected, malformed item")
        return False

    return True


# -------------------------------------------------------------------------
# SANITIZING
# -------------------------------------------------------------------------


def _sanitize_value(value: Any) -> Any:
    if isinstance(value, dict):
        return sanitize(value)
    if isinstance(value, str):
        return SANITIZE_PATTERN.sub("", value)
    return value


def sanitize(order: Dict[str, Any]) -> Dict[str, Any]:
    """
    Strip every character outside the allow-list from string values.

    Nested dicts are cleaned recursively; lists and non-string leaves are
    passed through untouched. This is an allow-list, not HTML escaping.
    """
    return {key: _sanitize_value(value) for key, value in order.items()}


# -------------------------------------------------------------------------
# ENRICHMENT
# -------------------------------------------------------------------------


def assign_order_id(order: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of the order with `orderId` set to the epoch in milliseconds."""
    return {**order, "orderId": str(time.time_ns() // 1_000_000)}


def compute_shipping_weight(order: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of the order with `shippingWeight` set.

    The weight is the sum of weight * quantity over all items. It never
    drops to zero: a missing or zero total falls back to 1.
    """
    items = order.get("items")
    weight = 0.0
    if isinstance(items, list):
        for item in items:
            weight += _to_number(item.get("weight") or 0) * _to_number(item.get("quantity"))

    if math.isnan(weight) or weight == 0:
        weight = 1
    return {**order, "shippingWeight": weight}


def compute_subtotal(order: Dict[str, Any]) -> float:
    """Sum quantity * rate over the items, plus any attached warranty price."""
    subtotal = 0.0
    for item in order.get("items") or []:
        quantity = _to_number(item.get("quantity"))
        subtotal += quantity * _to_number(item.get("rate"))

        warranty = item.get("warranty")
        if isinstance(warranty, dict):
            price = _to_number(warranty.get("price"))
            if not math.isnan(price):
                subtotal += quantity * price
    return subtotal


# -------------------------------------------------------------------------
# MAPPING
# -------------------------------------------------------------------------


def _prior_warnings(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


class OrderNormalizer:
    """
    Maps checkout payloads onto the canonical ERP order record.

    The lookup tables are owned by the instance and frozen, so one
    normalizer can be shared freely between requests.
    """

    def __init__(
        self,
        shipping_methods: Optional[Mapping[str, str]] = None,
        condition_mappings: Optional[Sequence[ConditionMapping]] = None,
        default_method: Optional[str] = None,
        production: Optional[bool] = None,
    ):
        self.shipping_methods = MappingProxyType(
            dict(DEFAULT_SHIPPING_METHODS if shipping_methods is None else shipping_methods)
        )
        self.condition_mappings = tuple(
            DEFAULT_CONDITION_MAPPINGS if condition_mappings is None else condition_mappings
        )
        self.default_method = default_method or config.default_shipping_method
        self.production = config.is_production if production is None else production

    def resolve_shipping_method(self, name: Any) -> Tuple[str, List[str]]:
        """Look up the downstream code; unknown names fall back with a warning."""
        code = self.shipping_methods.get(name) if isinstance(name, str) else None
        if code is not None:
            return code, []

        logger.warning(f"Unmapped shipping method '{name}', using '{self.default_method}'")
        Metrics.counter("checkout_shipping_method_fallback_total", {"method": str(name)})
        return self.default_method, [
            "Order's shipping method is not available in Netsuite; "
            f"shipping method used: {name}"
        ]

    def translate_condition(self, condition: Any) -> Optional[str]:
        for mapping in self.condition_mappings:
            if mapping.ui == condition:
                return mapping.downstream
        return None

    def map_items(self, items: Any) -> Tuple[List[Dict[str, Any]], List[str]]:
        mapped: List[Dict[str, Any]] = []
        warnings: List[str] = []
        for item in items or []:
            downstream = self.translate_condition(item.get("condition"))
            if downstream is None:
                warnings.append(
                    f"Item condition is not mapped for Netsuite; condition used: "
                    f"{item.get('condition')} for item: {item.get('name')}"
                )
                mapped.append(dict(item))
            else:
                mapped.append({**item, "condition": downstream})
        return mapped, warnings

    def map_order(self, order: Dict[str, Any]) -> Tuple[CanonicalOrder, List[str]]:
        """
        Project a checkout payload onto the canonical order record.

        No validation happens here. Warnings already on the payload are
        carried over and new ones appended to a fresh list; the payload
        itself is left untouched.

        Returns:
            The canonical order and the complete warnings list
        """
        method, method_warnings = self.resolve_shipping_method(order.get("shippingMethod"))
        items, item_warnings = self.map_items(order.get("items"))
        warnings = _prior_warnings(order.get("warnings")) + method_warnings + item_warnings

        name_parts = [order.get("firstName"), order.get("lastName")]
        stock = order.get("productsStock")
        is_full_stock = (
            stock is not None
            and not isinstance(stock, bool)
            and _to_number(stock) == FULL_STOCK
        )

        canonical = CanonicalOrder(
            orderId=order.get("orderId"),
            test=not self.production,
            lead="web_paid" if order.get("referrer") == "paid" else "web",
            sessionId=order.get("sessionId") or None,
            customer_po_number=order.get("referenceOrderNo"),
            memo="\n".join(warnings),
            is_taxable="F" if order.get("attachment") else "T",
            products_stock=stock,
            fulfillment_tier=1 if is_full_stock else None,
            quantity_flag=order.get("quantity_flag"),
            referrer=order.get("referrer") or "organic",
            customer=CustomerInfo(
                company=order.get("company"),
                name=" ".join(str(part) for part in name_parts if part),
                email=order.get("email"),
                phone=order.get("phone"),
                fax=order.get("fax"),
            ),
            billing=BillingInfo(
                address1=order.get("billingStreet"),
                city=order.get("billingCity"),
                state=order.get("billingState"),
                zip=order.get("billingZip"),
                country=order.get("billingCountry"),
            ),
            payment=PaymentInfo(
                name=order.get("cardName"),
                card=order.get("cardNumber"),
                exp=order.get("cardExp"),
            ),
            shipping=ShippingInfo(
                address1=order.get("shippingStreet"),
                city=order.get("shippingCity"),
                state=order.get("shippingState"),
                zip=order.get("shippingZip"),
                country=order.get("shippingCountry"),
                method=method,
                rate=order.get("shippingRate"),
            ),
            items=items,
            warnings=warnings,
        )
        return canonical, warnings

    def normalize(self, order: Dict[str, Any]) -> CheckoutResult:
        """
        Run the whole checkout pipeline on a raw payload.

        Raises:
            InvalidOrderError: If the payload fails `validate_required`
        """
        if not validate_required(order):
            raise InvalidOrderError("Missing required fields")

        prepared = compute_shipping_weight(assign_order_id(sanitize(order)))
        canonical, warnings = self.map_order(prepared)

        logger.info(
            f"Normalized order {prepared['orderId']} with "
            f"{len(canonical.items)} items and {len(warnings)} warnings"
        )
        Metrics.counter("checkout_orders_normalized_total")

        return CheckoutResult(
            orderId=prepared["orderId"],
            subtotal=compute_subtotal(prepared),
            shippingWeight=prepared["shippingWeight"],
            taxRate=prepared.get("taxRate"),
            warnings=warnings,
            order=canonical,
        )
