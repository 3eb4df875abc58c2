# services/checkout/src/checkout/models.py
"""
Checkout models: the canonical order record handed to the downstream ERP,
and the request/response shapes of the checkout helper endpoints.

Raw checkout payloads are untrusted and stay plain dicts until they pass
`validate_required`; everything produced after that is modelled here.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

# -------------------------------------------------------------------------
# LOOKUP TABLE MODELS
# -------------------------------------------------------------------------


class ConditionMapping(BaseModel):
    """One item-condition translation: storefront label -> schema key -> ERP label."""

    ui: str = Field(..., description="Label shown in the storefront")
    schema_key: str = Field(..., description="Key used in the product schema")
    downstream: str = Field(..., description="Label expected by the ERP")

    model_config = ConfigDict(frozen=True)


# -------------------------------------------------------------------------
# CANONICAL ORDER MODELS
# -------------------------------------------------------------------------

_LENIENT = ConfigDict(coerce_numbers_to_str=True)


class CustomerInfo(BaseModel):
    model_config = _LENIENT

    company: Optional[str] = None
    name: str = Field(..., description="First and last name joined by a space")
    email: Optional[str] = None
    phone: Optional[str] = None
    fax: Optional[str] = None


class AddressInfo(BaseModel):
    model_config = _LENIENT

    address1: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None


class BillingInfo(AddressInfo):
    """Billing address projected from the billing* checkout fields."""


class ShippingInfo(AddressInfo):
    """Shipping address plus the resolved downstream shipping method."""

    method: str = Field(..., description="Downstream shipping method code")
    rate: Optional[Any] = Field(None, description="Shipping rate as sent by checkout")


class PaymentInfo(BaseModel):
    model_config = _LENIENT

    name: Optional[str] = None
    card: Optional[str] = None
    exp: Optional[str] = None


class CanonicalOrder(BaseModel):
    """
    Normalized order record in the shape the ERP integration expects.

    Field names follow the downstream contract, hence the mix of camelCase
    and snake_case.
    """

    model_config = _LENIENT

    orderId: Optional[str] = Field(None, description="Time-derived order identifier")
    test: bool = Field(..., description="True unless the service runs in production")
    lead: Literal["web", "web_paid"] = Field(..., description="Lead source tag")
    sessionId: Optional[str] = None
    customer_po_number: Optional[Any] = None
    memo: str = Field("", description="Warnings joined by newlines")
    is_taxable: Literal["T", "F"] = Field(
        ..., description="'F' when a tax exemption attachment was uploaded"
    )
    products_stock: Optional[Any] = None
    fulfillment_tier: Optional[int] = Field(
        None, description="1 when every product is fully in stock, else None"
    )
    quantity_flag: Optional[Any] = None
    referrer: str = "organic"
    customer: CustomerInfo
    billing: BillingInfo
    payment: PaymentInfo
    shipping: ShippingInfo
    items: List[Dict[str, Any]] = Field(default_factory=list)
    warnings: List[str] = Field(
        default_factory=list, description="Advisory notes about lossy translations"
    )


class CheckoutResult(BaseModel):
    """Outcome of the full checkout normalization pipeline."""

    orderId: str
    subtotal: float
    shippingWeight: float
    taxRate: Optional[Any] = None
    warnings: List[str] = Field(default_factory=list)
    order: CanonicalOrder


# -------------------------------------------------------------------------
# REQUEST MODELS
# -------------------------------------------------------------------------


class AmountRequest(BaseModel):
    """Body of the number conversion endpoint."""

    input: Optional[Any] = Field(
        None, description="Amount as sent by a form, e.g. '1,234.56' or 1000"
    )
