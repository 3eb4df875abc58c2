"""
Shared utilities for the storefront-helpers project.

This package provides common configuration, logging, error helpers,
middleware and models used by the checkout and catalog services.
"""

# Configuration
from .config import BaseServiceConfig

# Error helpers
from .errors import bad_request_error, service_error, validation_error

# Health check
from .health import format_health_response

# Logging
from .logging import get_logger

# Metrics
from .metrics import Metrics

# Middleware
from .middleware import CorrelationIdMiddleware, MetricsMiddleware

# Models
from .models import ErrorResponse, HealthResponse, HealthStatus

__all__ = [
    # Configuration
    "BaseServiceConfig",
    # Errors
    "bad_request_error",
    "validation_error",
    "service_error",
    # Health
    "format_health_response",
    # Logging
    "get_logger",
    # Metrics
    "Metrics",
    # Middleware
    "CorrelationIdMiddleware",
    "MetricsMiddleware",
    # Models
    "ErrorResponse",
    "HealthResponse",
    "HealthStatus",
]
