# services/catalog/src/catalog/query_builder.py
"""
Search query construction for product listing and filter pages.

Filter parameters arrive as a flat mapping from the storefront URL
(`manufacturers=[...]`, `specs.voltage=[...]`, `search_text=...`). The
builder turns them into bool query documents for the search cluster. It
never talks to the cluster itself; callers execute the documents.
"""

import json
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

from libs.storefront_shared.logging import get_logger

from .aggregations import (
    BASIC_AGGREGATIONS,
    SPECS_PREFIX,
    STATIC_AGGREGATIONS,
    AggregationBuilder,
)
from .config import CatalogConfig, config as default_config
from .models import SortDirection
from .text import like_name

logger = get_logger(__name__)

RESERVED_PARAMS = frozenset(
    {"category", "subcategory", "slug", "amplifyId", "count", "search_text"}
)

DEFAULT_FACET_FIELDS: Mapping[str, str] = MappingProxyType(
    {
        "manufacturers": "manufacturers",
        "product_type.name": "product_type.name",
        "familyNames": "familyNames",
    }
)

SUBCATEGORY_ID_FIELDS = ("subcategory.id", "category.id")

# Listing parameters consumed by build_product_list_query itself
LISTING_PARAMS = frozenset(
    {"page", "size", "inStock", "sortByManuf", "sortByPrice", "relevant", "amplifyId"}
)


class InvalidSortDirectionError(ValueError):
    """Raised when a sort direction is neither 'asc' nor 'desc'."""

    def __init__(self, direction: Any):
        self.direction = direction
        super().__init__("Sorting key not valid!")


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class QueryBuilder:
    """Builds bool query documents, sort lists and full filter queries."""

    def __init__(
        self,
        settings: Optional[CatalogConfig] = None,
        reserved_params: Optional[Iterable[str]] = None,
        facet_fields: Optional[Mapping[str, str]] = None,
        aggregations: Optional[AggregationBuilder] = None,
    ):
        self.settings = settings or default_config
        self.reserved_params = frozenset(
            reserved_params if reserved_params is not None else RESERVED_PARAMS
        )
        self.facet_fields: Mapping[str, str] = MappingProxyType(
            dict(facet_fields if facet_fields is not None else DEFAULT_FACET_FIELDS)
        )
        self.aggregations = aggregations or AggregationBuilder(self.settings)

    # ---------------------------------------------------------------------
    # FILTER CLAUSES
    # ---------------------------------------------------------------------

    def clip_params(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        """Drop routing/pagination keys; everything else is a filter."""
        return {k: v for k, v in params.items() if k not in self.reserved_params}

    def build_filter_clauses(self, params: Mapping[str, Any]) -> List[Dict[str, Any]]:
        """
        Translate filter params into bool filter clauses.

        Every list starts with the online / not-deleted clauses. Non-empty
        lists become terms clauses, or nested spec clauses for `specs.*`
        keys; non-empty strings become term clauses. Other values are ignored.
        """
        clauses: List[Dict[str, Any]] = [
            {"term": {"online": True}},
            {"term": {"is_deleted": False}},
        ]

        for key, value in params.items():
            if isinstance(value, list) and value:
                if key.startswith(SPECS_PREFIX):
                    clauses.append(self._spec_clause(key, value))
                else:
                    clauses.append({"terms": {self.facet_fields.get(key, key): value}})
            elif isinstance(value, str) and value:
                clauses.append({"term": {key: value}})

        logger.debug(f"Built {len(clauses)} filter clauses from {len(params)} params")
        return clauses

    def _spec_clause(self, key: str, values: List[Any]) -> Dict[str, Any]:
        name = key.replace(SPECS_PREFIX, "", 1)
        return self.build_nested_filter(
            "specs",
            {
                "bool": {
                    "must": [
                        {"term": {"specs.name": name}},
                        {"terms": {"specs.valueString": values}},
                    ]
                }
            },
        )

    def build_should_clauses(self, specs: Any) -> List[Dict[str, Any]]:
        """One `specs.name` term per spec; boosts products carrying the specs."""
        if not isinstance(specs, list):
            return []
        return [{"term": {"specs.name": _spec_name(spec)}} for spec in specs]

    def parse_filters(self, text: Any) -> Dict[str, Any]:
        """Decode a serialized filter object, or {} if it can't be read."""
        try:
            parsed = json.loads(text)
        except (TypeError, ValueError):
            logger.warning("Ignoring unparsable filter string")
            return {}
        if not isinstance(parsed, dict):
            logger.warning(f"Ignoring filter string of type {type(parsed).__name__}")
            return {}
        return parsed

    # ---------------------------------------------------------------------
    # QUERY CONSTRUCTORS
    # ---------------------------------------------------------------------

    def build_search_query(
        self, text: Any, fields: Optional[List[str]] = None
    ) -> Optional[Dict[str, Any]]:
        if not text or not isinstance(text, str):
            return None
        return {
            "multi_match": {
                "query": text,
                "fields": list(fields) if fields is not None else list(self.settings.search_fields),
                "type": "best_fields",
                "fuzziness": "AUTO",
            }
        }

    @staticmethod
    def build_range_filter(field: str, min: Any = None, max: Any = None) -> Dict[str, Any]:
        bounds: Dict[str, Any] = {}
        if min is not None:
            bounds["gte"] = min
        if max is not None:
            bounds["lte"] = max
        return {"range": {field: bounds}}

    @staticmethod
    def build_nested_filter(path: str, query: Dict[str, Any]) -> Dict[str, Any]:
        return {"nested": {"path": path, "query": query}}

    @staticmethod
    def build_bool_query(
        must: Optional[List[Dict[str, Any]]] = None,
        filter: Optional[List[Dict[str, Any]]] = None,
        should: Optional[List[Dict[str, Any]]] = None,
        must_not: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """Bool query with empty clause lists left out."""
        bool_query: Dict[str, Any] = {}
        for slot, clauses in (
            ("must", must),
            ("filter", filter),
            ("should", should),
            ("must_not", must_not),
        ):
            if clauses:
                bool_query[slot] = clauses
        return {"bool": bool_query}

    # ---------------------------------------------------------------------
    # FILTER QUERIES
    # ---------------------------------------------------------------------

    def _subcategory_match(self, amplify_id: Any) -> Dict[str, Any]:
        return {
            "multi_match": {"query": amplify_id, "fields": list(SUBCATEGORY_ID_FIELDS)}
        }

    def build_filters_query(
        self,
        aggregations: Optional[Dict[str, Any]] = None,
        filter: Optional[List[Dict[str, Any]]] = None,
        should: Optional[List[Dict[str, Any]]] = None,
        amplify_id: Optional[str] = None,
        base_aggregations: Optional[Iterable[str]] = None,
        is_static_query: bool = False,
    ) -> Dict[str, Any]:
        """
        Query document that computes the filter sidebar for a result set.

        Spec aggregations run under a nested `specs` aggregation; facet
        aggregations sit beside it. `amplify_id` scopes the result set to a
        subcategory or category.
        """
        must: List[Dict[str, Any]] = [
            {"term": {"online": True}},
            {"term": {"is_deleted": False}},
        ]
        if amplify_id:
            must.append(self._subcategory_match(amplify_id))

        base_fields = BASIC_AGGREGATIONS if base_aggregations is None else base_aggregations
        return {
            "query": self.build_bool_query(
                must=must, filter=list(filter or []), should=list(should or [])
            ),
            "aggs": {
                "specs": {"nested": {"path": "specs"}, "aggs": dict(aggregations or {})},
                **self.aggregations.build_aggregation_request(base_fields, is_static_query),
            },
        }

    def build_static_filters_query(self, specs: List[Any]) -> Dict[str, Any]:
        """Filter query over the whole catalog, used to precompute static filters."""
        return self.build_filters_query(
            aggregations=self.aggregations.build_spec_aggregations(specs),
            should=self.build_should_clauses(specs),
            base_aggregations=STATIC_AGGREGATIONS,
            is_static_query=True,
        )

    def build_dynamic_filters_query(
        self, params: Mapping[str, Any], specs: List[Any]
    ) -> Dict[str, Any]:
        """Filter query for a subcategory page with the shopper's filters applied."""
        return self.build_filters_query(
            aggregations=self.aggregations.build_spec_aggregations(specs),
            filter=self.build_filter_clauses(self.clip_params(params)),
            amplify_id=params.get("amplifyId"),
        )

    # ---------------------------------------------------------------------
    # LISTING
    # ---------------------------------------------------------------------

    def _validate_direction(self, direction: Any) -> str:
        try:
            return SortDirection(direction).value
        except ValueError:
            raise InvalidSortDirectionError(direction)

    def build_sort(self, sort_by_manufacturer: Any = None, sort_by_price: Any = None) -> List[Dict[str, Any]]:
        """
        Sort list for product listings, always ending with name ascending.

        Manufacturer sort wins over price sort. Price sort reads the nested
        default-domain price for the configured item conditions.
        """
        sort: List[Dict[str, Any]] = [{"name": "asc"}]

        if sort_by_manufacturer:
            order = self._validate_direction(sort_by_manufacturer)
            sort.insert(0, {"favorManufacturer.keyword": {"order": order}})
        elif sort_by_price:
            order = self._validate_direction(sort_by_price)
            sort.insert(
                0,
                {
                    "prices.value": {
                        "order": order,
                        "nested": {
                            "path": "prices",
                            "filter": {
                                "bool": {
                                    "filter": [
                                        {"term": {"prices.domain": self.settings.default_price_domain}},
                                        {"term": {"prices.type": self.settings.default_price_type}},
                                        {"terms": {"prices.condition": list(self.settings.price_conditions)}},
                                    ]
                                }
                            },
                        },
                    }
                },
            )
        return sort

    def _search_text_clause(self, text: str) -> Dict[str, Any]:
        return {
            "dis_max": {
                "queries": [
                    {"wildcard": {"name": {"value": f"{text}*", "case_insensitive": True}}}
                ],
                "tie_breaker": self.settings.search_tie_breaker,
            }
        }

    def build_product_list_query(
        self,
        filters: Mapping[str, Any],
        relevant_product: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Query, page window and sort for a product listing request.

        `relevant_product` is the record named by the `relevant` param, looked
        up by the caller; its subcategory and favored manufacturer narrow the
        listing. Count requests (`count` set) get a zero-size window.
        """
        filters = filters or {}
        page = filters.get("page", 1)
        size = filters.get("size", 0 if filters.get("count") else self.settings.default_page_size)

        page_number, page_size = _to_int(page), _to_int(size)
        offset = 0
        if page_number is not None and page_size is not None:
            offset = page_number * page_size - page_size

        rest = {k: v for k, v in filters.items() if k not in LISTING_PARAMS}
        must: List[Dict[str, Any]] = []
        if filters.get("slug"):
            must.append(self._subcategory_match(filters.get("amplifyId", "")))

        filter_clauses = self.build_filter_clauses(self.clip_params(rest))

        search_text = filters.get("search_text") or ""
        if isinstance(search_text, str) and search_text:
            must.append(self._search_text_clause(search_text))

        if relevant_product is not None:
            subcategory = relevant_product.get("subcategory")
            if isinstance(subcategory, Mapping):
                subcategory = subcategory.get("name")
            filter_clauses.extend(
                [
                    {"term": {"subcategory.name": subcategory}},
                    {"term": {"favorManufacturer.keyword": relevant_product.get("favorManufacturer")}},
                ]
            )

        if filters.get("inStock"):
            must.append(
                self.build_nested_filter(
                    "inventory", {"range": {"inventory.value": {"gt": 0}}}
                )
            )

        return {
            "query": self.build_bool_query(must=must, filter=filter_clauses),
            "size": page_size or 0,
            "from": max(offset, 0),
            "sort": self.build_sort(filters.get("sortByManuf"), filters.get("sortByPrice")),
        }

    def build_related_product_query(
        self, name: Optional[str], subcategory: Optional[str], type: Optional[str]
    ) -> Optional[Dict[str, Any]]:
        """Products of the same type and subcategory with a similar name."""
        if not name or not subcategory or not type:
            return None
        return self.build_bool_query(
            must=[
                {"term": {"product_type.name": type}},
                {"term": {"subcategory.name": subcategory}},
                {
                    "regexp": {
                        "name": {
                            "value": f"{like_name(name, type)}.*",
                            "case_insensitive": True,
                        }
                    }
                },
            ]
        )


def _spec_name(spec: Any) -> Any:
    if isinstance(spec, Mapping):
        return spec.get("name")
    return getattr(spec, "name", None)
