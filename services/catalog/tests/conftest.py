# services/catalog/tests/conftest.py
"""
Shared test configuration and fixtures for catalog service tests.
"""

import copy
import os
import sys
from pathlib import Path

import pytest

os.environ["TESTING"] = "true"


# Configure Python path for testing
def setup_python_path():
    """Set up Python path to allow imports from both service and shared libs."""
    project_root = Path(__file__).parent.parent.parent.parent.absolute()
    catalog_src = Path(__file__).parent.parent / "src"

    paths_to_add = [str(catalog_src), str(project_root)]
    for path in paths_to_add:
        if path not in sys.path:
            sys.path.insert(0, path)


# Set up paths immediately when module is imported
setup_python_path()


RAW_AGGREGATIONS = {
    "specs.voltage": {
        "doc_count": 12,
        "unique_values": {"buckets": [{"key": "110V", "doc_count": 8}, {"key": "220V", "doc_count": 4}]},
    },
    "specs.frame_size": {"doc_count": 0, "unique_values": {"buckets": []}},
    "manufacturers": {"buckets": [{"key": "Siemens", "doc_count": 7}, {"key": "Eaton", "doc_count": 5}]},
    "product_type.name": {"buckets": [{"key": "Breaker", "doc_count": 12}]},
    "familyNames": {"buckets": []},
    "subcategories": [
        {"title": "Molded Case Breakers", "slug": "molded-case-breakers"},
        {"title": "Miniature Breakers", "slug": "miniature-breakers"},
    ],
    "unknownFacet": {"buckets": [{"key": "x", "doc_count": 1}]},
}

SPECS = [
    {"name": "voltage", "type": "string", "id": "spec-1"},
    {"name": "amperage", "type": "number", "id": "spec-2"},
]

PRODUCT_RECORD = {
    "name": "Siemens Breaker 20A",
    "category": {"name": "Circuit Breakers"},
    "subcategory": {"name": "Molded Case Breakers"},
    "manufacturers": ["Siemens", "Siemens Energy"],
    "favorManufacturer": "Siemens",
    "weight": 2.5,
    "specs": [{"name": "voltage", "valueString": "240V"}],
    "prices": [
        {"type": "Sale Price", "condition": "newSurplus", "value": 80},
        {"type": "Default Price", "condition": "newInBox", "value": 99.5},
    ],
    "inventory": [{"value": 3}, {"value": 4}, {}],
}


@pytest.fixture
def raw_aggregations():
    """Aggregation results as returned by the search cluster."""
    return copy.deepcopy(RAW_AGGREGATIONS)


@pytest.fixture
def specs():
    return copy.deepcopy(SPECS)


@pytest.fixture
def product_record():
    return copy.deepcopy(PRODUCT_RECORD)
