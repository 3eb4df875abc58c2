# services/catalog/tests/unit/test_products.py
"""
Unit tests for product card formatting.
"""

import pytest

from catalog.products import format_products


@pytest.mark.unit
class TestFormatProducts:
    def test_full_card(self, product_record):
        [card] = format_products([product_record])

        assert card == {
            "name": "Siemens Breaker 20A",
            "category": "Circuit Breakers",
            "subcategory": "Molded Case Breakers",
            "manufacturers": ["Siemens", "Siemens Energy"],
            "favorManufacturer": "Siemens",
            "url": "/product/Siemens%20Breaker%2020A",
            "image": "siemens-breaker-20a.jpg",
            "weight": 2.5,
            "specs": [{"name": "voltage", "valueString": "240V"}],
            "leastPrice": {"condition": "newInBox", "value": "99.5"},
            "stock": 7,
        }

    def test_defaults_for_sparse_record(self):
        [card] = format_products([{"manufacturers": "Eaton", "category": "Panels"}])

        assert card["name"] == "Unknown Product"
        assert card["category"] == "Panels"
        assert card["subcategory"] == "Unknown"
        assert card["manufacturers"] == ["Eaton"]
        assert card["favorManufacturer"] == "Eaton"
        assert card["url"] == "/product/unknown"
        assert card["weight"] == 1.0
        assert card["specs"] == []
        assert card["leastPrice"] == {"condition": "New", "value": "99.99"}
        assert "stock" not in card

    def test_first_price_when_no_default(self):
        [card] = format_products([{"name": "Relay", "prices": [{"condition": "used", "value": 12.0}]}])
        assert card["leastPrice"] == {"condition": "used", "value": "12"}

    def test_related_projection(self, product_record):
        [card] = format_products([product_record], "related")
        assert list(card) == ["name", "subcategory", "favorManufacturer", "url", "specs"]

    def test_accessory_projection(self, product_record):
        [card] = format_products([product_record], "accessory")
        assert list(card) == ["name", "subcategory", "favorManufacturer", "url", "manufacturers"]

    @pytest.mark.parametrize("records", [None, "products", {"name": "x"}])
    def test_non_list_is_empty(self, records):
        assert format_products(records) == []
