# checkout-service/app.py
import math
from typing import Any, Dict

from fastapi import Body, Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from libs.storefront_shared.errors import bad_request_error, service_error
from libs.storefront_shared.health import format_health_response
from libs.storefront_shared.logging import get_logger
from libs.storefront_shared.middleware import CorrelationIdMiddleware, MetricsMiddleware
from libs.storefront_shared.models import HealthStatus

from .config import config
from .models import AmountRequest, CanonicalOrder, CheckoutResult
from .normalizer import (
    InvalidOrderError,
    OrderNormalizer,
    assign_order_id,
    compute_shipping_weight,
    parse_amount,
    sanitize,
    validate_required,
)

logger = get_logger(__name__)


app = FastAPI(
    title="Checkout Service",
    description="Checkout order validation, sanitizing and ERP mapping helpers",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware, exclude_paths=["/health"])
app.add_middleware(CorrelationIdMiddleware)


def get_order_normalizer() -> OrderNormalizer:
    """
    Dependency provider for OrderNormalizer.
    In tests, this can be overridden to provide differently configured tables.
    """
    if not hasattr(app.state, "order_normalizer"):
        app.state.order_normalizer = OrderNormalizer()
    return app.state.order_normalizer


@app.get("/health", tags=["checkout"], operation_id="checkout_health")
async def health(normalizer: OrderNormalizer = Depends(get_order_normalizer)):
    """Service health check endpoint."""
    return format_health_response(
        status=HealthStatus.OK,
        version=app.version,
        config=config,
        shipping_methods=len(normalizer.shipping_methods),
        condition_mappings=len(normalizer.condition_mappings),
    )


@app.post("/api/convert-number", tags=["checkout"])
async def convert_number(request: AmountRequest):
    """
    Read a form amount. Unparsable and infinite amounts come back as
    `converted: null` with `valid: false`, since JSON cannot represent them.
    """
    converted = parse_amount(request.input)
    valid = not (isinstance(converted, float) and not math.isfinite(converted))
    return {
        "input": request.input,
        "converted": converted if valid else None,
        "valid": valid,
    }


@app.post("/api/validate-required-fields", tags=["checkout"])
async def validate_required_fields(order: Dict[str, Any] = Body(...)):
    return {"isValid": validate_required(order)}


@app.post("/api/clean-values", tags=["checkout"])
async def clean_values(order: Dict[str, Any] = Body(...)):
    return {"original": order, "cleaned": sanitize(order)}


@app.post("/api/set-order-id", tags=["checkout"])
async def set_order_id(order: Dict[str, Any] = Body(...)):
    return assign_order_id(order)


@app.post("/api/set-shipping-weight", tags=["checkout"])
async def set_shipping_weight(order: Dict[str, Any] = Body(...)):
    return compute_shipping_weight(order)


@app.post("/api/map-order", response_model=CanonicalOrder, tags=["checkout"])
async def map_order(
    order: Dict[str, Any] = Body(...),
    normalizer: OrderNormalizer = Depends(get_order_normalizer),
):
    """Map a checkout payload onto the ERP order record, without validation."""
    try:
        canonical, _ = normalizer.map_order(order)
        return canonical
    except Exception as e:
        logger.error("Error mapping order", exc_info=e)
        raise service_error(str(e))


@app.post("/api/checkout/complete", response_model=CheckoutResult, tags=["checkout"])
async def complete_checkout(
    order: Dict[str, Any] = Body(...),
    normalizer: OrderNormalizer = Depends(get_order_normalizer),
):
    """
    Run the full checkout pipeline: validate, sanitize, assign an order id,
    compute shipping weight and map onto the ERP record.

    Returns 400 when required fields are missing or malformed.
    """
    try:
        return normalizer.normalize(order)
    except InvalidOrderError as e:
        raise bad_request_error(str(e))
    except Exception as e:
        logger.error("Error completing checkout", exc_info=e)
        raise service_error(str(e))
