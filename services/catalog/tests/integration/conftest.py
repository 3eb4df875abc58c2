import pytest
from fastapi.testclient import TestClient

from catalog.aggregations import AggregationBuilder
from catalog.app import app, get_aggregation_builder, get_query_builder
from catalog.config import CatalogConfig
from catalog.query_builder import QueryBuilder


@pytest.fixture
def client():
    """Test client with builders using default settings."""
    settings = CatalogConfig()
    aggregations = AggregationBuilder(settings)
    app.dependency_overrides[get_aggregation_builder] = lambda: aggregations
    app.dependency_overrides[get_query_builder] = lambda: QueryBuilder(
        settings, aggregations=aggregations
    )
    yield TestClient(app)
    app.dependency_overrides.clear()
