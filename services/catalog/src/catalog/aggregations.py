# services/catalog/src/catalog/aggregations.py
"""
Aggregation requests for the storefront filter sidebar, and the inversion of
their bucket results into filter descriptors.
"""

from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from libs.storefront_shared.logging import get_logger

from .config import CatalogConfig, config as default_config
from .models import FilterDescriptor, SpecDefinition
from .text import capitalize_words

logger = get_logger(__name__)

SPECS_PREFIX = "specs."
SUBCATEGORIES_KEY = "subcategories"
SUBCATEGORY_FACET = "subcategory.name"

BASIC_AGGREGATIONS = ("manufacturers", "product_type.name", "familyNames")
STATIC_AGGREGATIONS = BASIC_AGGREGATIONS + (SUBCATEGORY_FACET,)

DEFAULT_FACET_TITLES: Mapping[str, str] = MappingProxyType(
    {
        "manufacturers": "Manufacturers",
        "product_type.name": "Product Type",
        "familyNames": "Family Names",
        SUBCATEGORIES_KEY: "Subcategories",
    }
)

SpecLike = Union[SpecDefinition, Dict[str, Any]]


def _as_spec(spec: SpecLike) -> SpecDefinition:
    if isinstance(spec, SpecDefinition):
        return spec
    return SpecDefinition.model_validate(spec)


def _bucket_keys(buckets: Any) -> List[Any]:
    if not isinstance(buckets, list):
        return []
    return [bucket.get("key") for bucket in buckets if isinstance(bucket, dict)]


class AggregationBuilder:
    """
    Builds facet and spec aggregations and turns their results back into
    FilterDescriptors.

    Bucket limits come from CatalogConfig; facet titles are instance-owned
    so a storefront can relabel them without touching module state.
    """

    def __init__(
        self,
        settings: Optional[CatalogConfig] = None,
        facet_titles: Optional[Mapping[str, str]] = None,
    ):
        settings = settings or default_config
        self.aggregation_size = settings.aggregation_size
        self.specs_aggregation_size = settings.specs_aggregation_size
        self.facet_titles: Mapping[str, str] = MappingProxyType(
            dict(facet_titles if facet_titles is not None else DEFAULT_FACET_TITLES)
        )

    # ---------------------------------------------------------------------
    # REQUESTS
    # ---------------------------------------------------------------------

    def build_aggregation_request(
        self,
        base_fields: Optional[Iterable[str]] = None,
        is_static_query: bool = False,
    ) -> Dict[str, Any]:
        """
        One terms aggregation per facet field.

        Static queries are cached and rendered without a second lookup, so the
        subcategory facet is requested as name+slug pairs instead.
        """
        fields = BASIC_AGGREGATIONS if base_fields is None else base_fields
        aggregations: Dict[str, Any] = {}
        for field in fields:
            if field == SUBCATEGORY_FACET and is_static_query:
                aggregations[field] = {
                    "multi_terms": {
                        "terms": [
                            {"field": "subcategory.name"},
                            {"field": "subcategory.slug"},
                        ],
                        "size": self.aggregation_size,
                    }
                }
            else:
                aggregations[field] = {
                    "terms": {"field": field, "size": self.aggregation_size}
                }
        return aggregations

    def build_spec_aggregations(self, specs: Any) -> Dict[str, Any]:
        """Filtered `unique_values` aggregation per spec, keyed `specs.<name>`."""
        if not isinstance(specs, list):
            return {}

        aggregations: Dict[str, Any] = {}
        for raw_spec in specs:
            spec = _as_spec(raw_spec)
            aggregations[f"{SPECS_PREFIX}{spec.name}"] = {
                "filter": {
                    "bool": {"filter": [{"term": {"specs.name": spec.name}}]}
                },
                "aggs": {
                    "unique_values": {
                        "terms": {
                            "field": spec.value_field,
                            "size": self.specs_aggregation_size,
                        }
                    }
                },
            }
        return aggregations

    # ---------------------------------------------------------------------
    # RESULTS
    # ---------------------------------------------------------------------

    def invert_aggregation_buckets(self, raw: Mapping[str, Any]) -> List[FilterDescriptor]:
        """
        Convert raw aggregation results into filter descriptors.

        Keys are processed in input order, which is the display order of the
        sidebar. Empty aggregations and unknown keys produce nothing.
        """
        descriptors: List[FilterDescriptor] = []
        for key, value in raw.items():
            if key.startswith(SPECS_PREFIX):
                descriptor = self._spec_descriptor(key, value)
            elif key == SUBCATEGORIES_KEY:
                descriptor = self._subcategory_descriptor(value)
            elif self.facet_titles.get(key):
                descriptor = self._facet_descriptor(key, value)
            else:
                logger.debug(f"Dropping unknown aggregation '{key}'")
                descriptor = None

            if descriptor is not None:
                descriptors.append(descriptor)
        return descriptors

    def _spec_descriptor(self, key: str, value: Any) -> Optional[FilterDescriptor]:
        value = value if isinstance(value, dict) else {}
        values = _bucket_keys((value.get("unique_values") or {}).get("buckets"))
        if not values:
            return None
        return FilterDescriptor(
            field=key,
            title=capitalize_words(key.replace(SPECS_PREFIX, "", 1)),
            specID=value.get("id") or None,
            values=values,
        )

    def _subcategory_descriptor(self, value: Any) -> Optional[FilterDescriptor]:
        # Subcategories arrive already resolved to {title, slug} records
        if not isinstance(value, list):
            return None
        values = [
            {"title": sub.get("title"), "slug": sub.get("slug")}
            for sub in value
            if isinstance(sub, dict)
        ]
        if not values:
            return None
        return FilterDescriptor(
            field="subcategory",
            title=self.facet_titles.get(SUBCATEGORIES_KEY),
            values=values,
        )

    def _facet_descriptor(self, key: str, value: Any) -> Optional[FilterDescriptor]:
        value = value if isinstance(value, dict) else {}
        values = _bucket_keys(value.get("buckets"))
        if not values:
            return None
        return FilterDescriptor(field=key, title=self.facet_titles[key], values=values)

    def attach_spec_ids(
        self, raw: Mapping[str, Any], specs_with_ids: Sequence[SpecLike]
    ) -> Dict[str, Any]:
        """
        Stamp spec ids from the specs index onto spec aggregations.

        Spec names are matched case-insensitively. Spec aggregations with no
        known spec or no buckets are dropped; everything else passes through.
        """
        known: Dict[str, SpecDefinition] = {}
        for raw_spec in specs_with_ids or []:
            spec = _as_spec(raw_spec)
            known.setdefault(spec.name.lower(), spec)

        enhanced: Dict[str, Any] = {}
        for key, value in raw.items():
            if not key.startswith(SPECS_PREFIX):
                enhanced[key] = value
                continue

            spec = known.get(key[len(SPECS_PREFIX):].lower())
            value = value if isinstance(value, dict) else {}
            buckets = (value.get("unique_values") or {}).get("buckets") or []
            if spec is None or not buckets:
                logger.debug(f"Dropping spec aggregation '{key}'")
                continue

            enhanced[key] = {**value, "id": spec.id}
        return enhanced
