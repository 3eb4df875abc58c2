# services/catalog/tests/unit/test_text_helpers.py
"""
Unit tests for the catalog text helpers.
"""

import pytest

from catalog.text import (
    capitalize_words,
    format_manufacturer_objects,
    format_manufacturer_values,
    like_name,
)


@pytest.mark.unit
class TestCapitalizeWords:
    def test_camel_case(self):
        assert capitalize_words("firstName") == "First Name"

    def test_snake_case(self):
        assert capitalize_words("first_name") == "First Name"
        assert capitalize_words("FRAME_SIZE") == "Frame Size"

    def test_single_word(self):
        assert capitalize_words("voltage") == "Voltage"

    def test_only_first_camel_boundary_is_split(self):
        assert capitalize_words("maxContinuousCurrent") == "Max ContinuousCurrent"

    @pytest.mark.parametrize("value", ["", None])
    def test_empty_is_none(self, value):
        assert capitalize_words(value) is None


@pytest.mark.unit
class TestLikeName:
    def test_half_of_name(self):
        assert like_name("Samsung Galaxy Phone", "Phone") == "Samsung Ga"

    def test_extends_when_name_starts_with_type(self):
        # 13 // 2 + 7 // 2
        assert like_name("Breaker Panel", "Breaker") == "Breaker P"

    def test_strips_punctuation(self):
        assert like_name("Acme (R) Widget", "") == "Acme R"

    def test_empty_name(self):
        assert like_name("", "Breaker") == ""
        assert like_name(None, None) == ""


@pytest.mark.unit
class TestFormatManufacturerValues:
    def test_multi_word_gets_hyphen_variant(self):
        assert format_manufacturer_values("Samsung Electronics") == [
            "Samsung Electronics",
            "Samsung-Electronics",
        ]

    def test_single_word(self):
        assert format_manufacturer_values("Apple") == ["Apple"]

    def test_list_is_concatenated(self):
        assert format_manufacturer_values(["Apple", "General Electric", 5]) == [
            "Apple",
            "General Electric",
            "General-Electric",
        ]

    @pytest.mark.parametrize("value", [None, "", []])
    def test_empty(self, value):
        assert format_manufacturer_values(value) == []


@pytest.mark.unit
def test_format_manufacturer_objects_drops_distributor():
    records = [
        {"name": "Siemens", "authorized_distributor": True},
        {"name": "Eaton"},
    ]

    formatted = format_manufacturer_objects(records)

    assert formatted == [{"name": "Siemens"}, {"name": "Eaton"}]
    assert records[0]["authorized_distributor"] is True
