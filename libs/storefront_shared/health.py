# libs/storefront_shared/health.py
"""
Health check utilities for all services.
"""

from typing import Any

from .config import BaseServiceConfig
from .models import HealthResponse, HealthStatus


def format_health_response(
    status: HealthStatus,
    version: str,
    config: BaseServiceConfig,
    **details: Any,
) -> HealthResponse:
    """
    Create a standardized health response.

    The service environment is always reported so test runs against a
    production-configured service are easy to spot.

    Args:
        status: Health status
        version: Service version
        config: The service configuration in effect
        **details: Service-specific health details

    Returns:
        Formatted health response
    """
    return HealthResponse(
        status=status,
        version=version,
        details={"environment": config.environment, **details},
    )
