# services/catalog/src/catalog/models.py
"""
Catalog models: filter descriptors shown in the storefront sidebar, the
product specification definitions aggregations are built from, and the
request bodies of the catalog helper endpoints.

Query documents and aggregation requests themselves stay plain dicts; they
are handed verbatim to the search cluster.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# -------------------------------------------------------------------------
# DOMAIN MODELS
# -------------------------------------------------------------------------


class SortDirection(str, Enum):
    """Sort directions accepted by the product listing."""

    ASC = "asc"
    DESC = "desc"


class SpecDefinition(BaseModel):
    """
    A dynamic product specification (voltage, power, ...).

    Specs live under the nested `specs` path of a product document rather
    than as flat fields, so filtering and aggregating them needs nested
    clauses scoped by spec name.
    """

    name: str = Field(..., description="Spec name as stored in specs.name", example="voltage")
    type: str = Field(
        "string",
        description="'string' specs aggregate specs.valueString, anything else specs.valueInt",
        example="string",
    )
    id: Optional[Any] = Field(None, description="Spec identifier in the specs index")

    @property
    def value_field(self) -> str:
        return "specs.valueString" if self.type == "string" else "specs.valueInt"


class FilterDescriptor(BaseModel):
    """
    One filter group for the storefront, built from aggregation buckets.

    `specID` is only present for filters built from a dynamic spec.
    """

    field: str = Field(..., description="Field the filter applies to", example="specs.voltage")
    title: Optional[str] = Field(None, description="Display title", example="Voltage")
    values: List[Any] = Field(..., description="Bucket keys, or {title, slug} pairs")
    specID: Optional[Any] = Field(None, description="Spec identifier for spec filters")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


# -------------------------------------------------------------------------
# REQUEST MODELS
# -------------------------------------------------------------------------


class CapitalizeRequest(BaseModel):
    text: Optional[str] = None


class LikeNameRequest(BaseModel):
    name: Optional[str] = ""
    type: Optional[str] = ""

    @field_validator("name", "type", mode="before")
    def default_empty(cls, v):
        """Treat null like an absent value."""
        return "" if v is None else v


class ManufacturersRequest(BaseModel):
    manufacturers: Optional[Any] = Field(
        None,
        description="A manufacturer name or list of names",
        example=["Samsung Electronics", "Apple Inc"],
    )


class ManufacturerObjectsRequest(BaseModel):
    manufacturers: List[Dict[str, Any]] = Field(default_factory=list)


class BasicAggregationsRequest(BaseModel):
    aggregations: List[str] = Field(default_factory=list)
    isStaticQuery: bool = False


class SpecsRequest(BaseModel):
    specs: Optional[List[SpecDefinition]] = None


class SpecsAggregationsRequest(BaseModel):
    specsList: Optional[List[SpecDefinition]] = None
    filters: Optional[Dict[str, Any]] = None


class AggregationResultRequest(BaseModel):
    aggregationRawResult: Dict[str, Any] = Field(default_factory=dict)


class ProductsRequest(BaseModel):
    records: Optional[Any] = None
    type: str = Field("products", description="'products', 'related' or 'accessory'")


class ParseFiltersRequest(BaseModel):
    filterString: Optional[Any] = None


class SearchQueryRequest(BaseModel):
    searchText: Optional[Any] = None
    fields: Optional[List[str]] = None


class RangeFilterRequest(BaseModel):
    field: str
    min: Optional[Any] = None
    max: Optional[Any] = None


class NestedFilterRequest(BaseModel):
    path: str
    query: Dict[str, Any]


class BoolQueryRequest(BaseModel):
    must: List[Dict[str, Any]] = Field(default_factory=list)
    filter: List[Dict[str, Any]] = Field(default_factory=list)
    should: List[Dict[str, Any]] = Field(default_factory=list)
    mustNot: List[Dict[str, Any]] = Field(default_factory=list)


class FiltersQueryRequest(BaseModel):
    """Inputs of the full filter query: clauses plus the aggregations to run."""

    aggregations: Dict[str, Any] = Field(default_factory=dict)
    filter: List[Dict[str, Any]] = Field(default_factory=list)
    should: List[Dict[str, Any]] = Field(default_factory=list)
    amplifyId: Optional[str] = None
    baseAggregations: Optional[List[str]] = None
    isStaticQuery: bool = False


class SortRequest(BaseModel):
    # Plain strings so an unknown direction reaches the builder and is
    # rejected there with an explicit error
    sortByManuf: Optional[str] = None
    sortByPrice: Optional[str] = None

    model_config = ConfigDict(extra="ignore")
