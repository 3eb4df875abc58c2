"""Catalog service configuration."""

from typing import List

from libs.storefront_shared.config import BaseServiceConfig
from pydantic import Field


class CatalogConfig(BaseServiceConfig):
    """Catalog service specific configuration."""

    # Service settings
    port: int = Field(8003, env="PORT")

    # Aggregation settings
    aggregation_size: int = Field(
        500,
        env="AGGREGATION_SIZE",
        description="Bucket limit for top-level facet aggregations",
    )
    specs_aggregation_size: int = Field(
        100,
        env="SPECS_AGGREGATION_SIZE",
        description="Bucket limit for per-spec value aggregations",
    )

    # Listing settings
    default_page_size: int = Field(
        10, env="DEFAULT_PAGE_SIZE", description="Products per listing page"
    )
    search_fields: List[str] = Field(
        default_factory=lambda: ["name", "description"],
        description="Fields searched by full-text queries",
    )
    search_tie_breaker: float = Field(
        0.7,
        ge=0,
        le=1,
        env="SEARCH_TIE_BREAKER",
        description="dis_max tie breaker for product name search",
    )

    # Price sorting
    default_price_domain: str = Field(
        "Electrical.com",
        env="DEFAULT_PRICE_DOMAIN",
        description="Storefront domain whose prices are used for sorting",
    )
    default_price_type: str = Field("Default Price", env="DEFAULT_PRICE_TYPE")
    price_conditions: List[str] = Field(
        default_factory=lambda: ["newInBox", "newSurplus", "refurbished", "used"],
        description="Item conditions considered when sorting by price",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Singleton instance
config = CatalogConfig()
