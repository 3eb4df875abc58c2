"""Checkout service configuration."""

from libs.storefront_shared.config import BaseServiceConfig
from pydantic import Field


class CheckoutConfig(BaseServiceConfig):
    """Checkout service specific configuration."""

    # Service settings
    port: int = Field(8002, env="PORT")

    # Shipping method used when the checkout sends a name we cannot map
    default_shipping_method: str = Field(
        "ground",
        env="DEFAULT_SHIPPING_METHOD",
        description="Downstream shipping code used for unmapped shipping methods",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Singleton instance
config = CheckoutConfig()
