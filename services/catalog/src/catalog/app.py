# catalog-service/app.py
from typing import Any, Dict

from fastapi import Body, Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from libs.storefront_shared.errors import service_error, validation_error
from libs.storefront_shared.health import format_health_response
from libs.storefront_shared.logging import get_logger
from libs.storefront_shared.middleware import CorrelationIdMiddleware, MetricsMiddleware
from libs.storefront_shared.models import HealthStatus

from .aggregations import AggregationBuilder
from .config import config
from .models import (
    AggregationResultRequest,
    BasicAggregationsRequest,
    BoolQueryRequest,
    CapitalizeRequest,
    FiltersQueryRequest,
    LikeNameRequest,
    ManufacturerObjectsRequest,
    ManufacturersRequest,
    NestedFilterRequest,
    ParseFiltersRequest,
    ProductsRequest,
    RangeFilterRequest,
    SearchQueryRequest,
    SortRequest,
    SpecsAggregationsRequest,
    SpecsRequest,
)
from .products import format_products
from .query_builder import InvalidSortDirectionError, QueryBuilder
from .text import (
    capitalize_words,
    format_manufacturer_objects,
    format_manufacturer_values,
    like_name,
)

logger = get_logger(__name__)


app = FastAPI(
    title="Catalog Service",
    description="Search query, aggregation and product card helpers for the storefront catalog",
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


def get_aggregation_builder() -> AggregationBuilder:
    if not hasattr(app.state, "aggregation_builder"):
        app.state.aggregation_builder = AggregationBuilder(config)
    return app.state.aggregation_builder


def get_query_builder(
    aggregations: AggregationBuilder = Depends(get_aggregation_builder),
) -> QueryBuilder:
    """
    Dependency provider for QueryBuilder.
    In tests, this can be overridden to provide a builder with other settings.
    """
    if not hasattr(app.state, "query_builder"):
        app.state.query_builder = QueryBuilder(config, aggregations=aggregations)
    return app.state.query_builder


@app.get("/health", tags=["catalog"], operation_id="catalog_health")
async def health(builder: QueryBuilder = Depends(get_query_builder)):
    """Service health check endpoint."""
    return format_health_response(
        status=HealthStatus.OK,
        version=app.version,
        config=config,
        aggregation_size=builder.aggregations.aggregation_size,
        specs_aggregation_size=builder.aggregations.specs_aggregation_size,
        default_page_size=builder.settings.default_page_size,
    )


# -------------------------------------------------------------------------
# TEXT HELPERS
# -------------------------------------------------------------------------


@app.post("/api/capitalize-words", tags=["text"])
async def capitalize(request: CapitalizeRequest):
    return {"original": request.text, "capitalized": capitalize_words(request.text)}


@app.post("/api/like-name", tags=["text"])
async def like(request: LikeNameRequest):
    return {
        "original": {"name": request.name, "type": request.type},
        "result": like_name(request.name, request.type),
    }


@app.post("/api/format-manufacturers", tags=["text"])
async def format_manufacturers(request: ManufacturersRequest):
    return {
        "original": request.manufacturers,
        "formatted": format_manufacturer_values(request.manufacturers),
    }


@app.post("/api/format-manufacturer-object", tags=["text"])
async def format_manufacturer_object(request: ManufacturerObjectsRequest):
    return {
        "original": request.manufacturers,
        "formatted": format_manufacturer_objects(request.manufacturers),
    }


# -------------------------------------------------------------------------
# FILTERS AND AGGREGATIONS
# -------------------------------------------------------------------------


@app.post("/api/clip-params", tags=["filters"])
async def clip_params(
    params: Dict[str, Any] = Body(...),
    builder: QueryBuilder = Depends(get_query_builder),
):
    return {"original": params, "clipped": builder.clip_params(params)}


@app.post("/api/formate-filters-array", tags=["filters"])
async def filters_array(
    params: Dict[str, Any] = Body(...),
    builder: QueryBuilder = Depends(get_query_builder),
):
    return {"original": params, "filtersArray": builder.build_filter_clauses(params)}


@app.post("/api/formate-should-array", tags=["filters"])
async def should_array(
    request: SpecsRequest,
    builder: QueryBuilder = Depends(get_query_builder),
):
    specs = [spec.model_dump() for spec in request.specs] if request.specs is not None else None
    return {"specs": specs, "shouldArray": builder.build_should_clauses(request.specs)}


@app.post("/api/parse-filters", tags=["filters"])
async def parse_filters(
    request: ParseFiltersRequest,
    builder: QueryBuilder = Depends(get_query_builder),
):
    return {"original": request.filterString, "parsed": builder.parse_filters(request.filterString)}


@app.post("/api/get-basic-aggregations", tags=["aggregations"])
async def basic_aggregations(
    request: BasicAggregationsRequest,
    aggregations: AggregationBuilder = Depends(get_aggregation_builder),
):
    return aggregations.build_aggregation_request(request.aggregations, request.isStaticQuery)


@app.post("/api/formate-specs-aggregations", tags=["aggregations"])
async def specs_aggregations(
    request: SpecsAggregationsRequest,
    aggregations: AggregationBuilder = Depends(get_aggregation_builder),
):
    specs = [spec.model_dump() for spec in request.specsList] if request.specsList is not None else None
    return {
        "specsList": specs,
        "filters": request.filters,
        "aggregations": aggregations.build_spec_aggregations(request.specsList),
    }


@app.post("/api/formate-filters-agg", tags=["aggregations"])
async def filters_agg(
    request: AggregationResultRequest,
    aggregations: AggregationBuilder = Depends(get_aggregation_builder),
):
    descriptors = aggregations.invert_aggregation_buckets(request.aggregationRawResult)
    return {
        "original": request.aggregationRawResult,
        "formatted": [descriptor.to_dict() for descriptor in descriptors],
    }


# -------------------------------------------------------------------------
# QUERY CONSTRUCTORS
# -------------------------------------------------------------------------


@app.post("/api/build-search-query", tags=["queries"])
async def search_query(
    request: SearchQueryRequest,
    builder: QueryBuilder = Depends(get_query_builder),
):
    return {
        "searchText": request.searchText,
        "fields": request.fields,
        "query": builder.build_search_query(request.searchText, request.fields),
    }


@app.post("/api/build-range-filter", tags=["queries"])
async def range_filter(request: RangeFilterRequest):
    return {
        "field": request.field,
        "min": request.min,
        "max": request.max,
        "filter": QueryBuilder.build_range_filter(request.field, request.min, request.max),
    }


@app.post("/api/build-nested-filter", tags=["queries"])
async def nested_filter(request: NestedFilterRequest):
    return {
        "path": request.path,
        "query": request.query,
        "filter": QueryBuilder.build_nested_filter(request.path, request.query),
    }


@app.post("/api/build-bool-query", tags=["queries"])
async def bool_query(request: BoolQueryRequest):
    return {
        "must": request.must,
        "filter": request.filter,
        "should": request.should,
        "mustNot": request.mustNot,
        "query": QueryBuilder.build_bool_query(
            request.must, request.filter, request.should, request.mustNot
        ),
    }


@app.post("/api/format-filters-query", tags=["queries"])
async def filters_query(
    request: FiltersQueryRequest,
    builder: QueryBuilder = Depends(get_query_builder),
):
    return builder.build_filters_query(
        aggregations=request.aggregations,
        filter=request.filter,
        should=request.should,
        amplify_id=request.amplifyId,
        base_aggregations=request.baseAggregations,
        is_static_query=request.isStaticQuery,
    )


@app.post("/api/build-sort", tags=["queries"])
async def sort(
    request: SortRequest,
    builder: QueryBuilder = Depends(get_query_builder),
):
    """Returns 500 for a sort direction other than 'asc' or 'desc'."""
    try:
        return {"sort": builder.build_sort(request.sortByManuf, request.sortByPrice)}
    except InvalidSortDirectionError as e:
        logger.error(f"Rejected sort direction {e.direction!r}")
        raise service_error(str(e))


@app.post("/api/product-list-query", tags=["queries"])
async def product_list_query(
    filters: Dict[str, Any] = Body(...),
    builder: QueryBuilder = Depends(get_query_builder),
):
    """
    Query document, page window and sort for a listing request.

    Returns 422 for a non-numeric page or size, 500 for an invalid sort
    direction.
    """
    for field in ("page", "size"):
        value = filters.get(field)
        if value is not None and not str(value).strip().lstrip("-").isdigit():
            raise validation_error("Pagination must be an integer", field=field, value=value)

    try:
        return builder.build_product_list_query(filters)
    except InvalidSortDirectionError as e:
        logger.error(f"Rejected sort direction {e.direction!r}")
        raise service_error(str(e))


# -------------------------------------------------------------------------
# PRODUCTS
# -------------------------------------------------------------------------


@app.post("/api/formate-products", tags=["products"])
async def formate_products(request: ProductsRequest):
    return {"original": request.records, "formatted": format_products(request.records, request.type)}
