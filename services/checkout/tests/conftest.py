# services/checkout/tests/conftest.py
"""
Shared test configuration and fixtures for checkout service tests.
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
    checkout_src = Path(__file__).parent.parent / "src"

    paths_to_add = [str(checkout_src), str(project_root)]
    for path in paths_to_add:
        if path not in sys.path:
            sys.path.insert(0, path)


# Set up paths immediately when module is imported
setup_python_path()


VALID_ORDER = {
    "firstName": "Jane",
    "lastName": "Doe",
    "company": "Acme Electric",
    "email": "jane.doe@example.com",
    "phone": "555-123-4567",
    "billingStreet": "123 Main St.",
    "billingCity": "Springfield",
    "billingZip": "62701",
    "billingState": "IL",
    "billingCountry": "US",
    "shippingStreet": "456 Oak Ave.",
    "shippingCity": "Springfield",
    "shippingZip": "62702",
    "shippingState": "IL",
    "shippingCountry": "US",
    "shippingMethod": "Ground",
    "cardName": "Jane Doe",
    "cardNumber": "4111111111111111",
    "cardExp": "12/30",
    "shippingRate": 15.5,
    "taxRate": "8.25",
    "referrer": "paid",
    "sessionId": "sess-42",
    "referenceOrderNo": "PO-1001",
    "productsStock": 100,
    "quantity_flag": "10/10",
    "items": [
        {"name": "Breaker 20A", "condition": "New", "quantity": 2, "rate": "1299.99", "weight": 2.5},
        {"name": "Contactor", "condition": "Re-Certified", "quantity": "1", "rate": 45, "weight": 1},
    ],
}


@pytest.fixture
def raw_order():
    """A checkout payload that passes validation."""
    return copy.deepcopy(VALID_ORDER)
