# services/checkout/tests/integration/test_checkout_api.py
"""
Integration tests driving the checkout helpers over HTTP.
"""

import pytest


@pytest.mark.integration
class TestHealthEndpoint:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["details"]["shipping_methods"] == 13
        assert "environment" in body["details"]

    def test_correlation_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Correlation-ID": "abc-123"})
        assert response.headers["X-Correlation-ID"] == "abc-123"


@pytest.mark.integration
class TestHelperEndpoints:
    def test_convert_number(self, client):
        response = client.post("/api/convert-number", json={"input": "1,234.56"})
        assert response.json() == {"input": "1,234.56", "converted": 1234.56, "valid": True}

    def test_convert_number_unparsable(self, client):
        body = client.post("/api/convert-number", json={"input": "abc"}).json()
        assert body["converted"] is None
        assert body["valid"] is False

    @pytest.mark.parametrize("value", ["Infinity", "-Infinity"])
    def test_convert_number_infinite_is_invalid(self, client, value):
        body = client.post("/api/convert-number", json={"input": value}).json()
        assert body == {"input": value, "converted": None, "valid": False}

    def test_validate_required_fields(self, client, raw_order):
        assert client.post("/api/validate-required-fields", json=raw_order).json() == {
            "isValid": True
        }
        del raw_order["phone"]
        assert client.post("/api/validate-required-fields", json=raw_order).json() == {
            "isValid": False
        }

    def test_clean_values(self, client):
        body = client.post("/api/clean-values", json={"note": "<b>hi</b>"}).json()
        assert body["cleaned"] == {"note": "bhi/b"}

    def test_set_order_id(self, client, raw_order):
        body = client.post("/api/set-order-id", json=raw_order).json()
        assert body["orderId"].isdigit()

    def test_set_shipping_weight(self, client, raw_order):
        body = client.post("/api/set-shipping-weight", json=raw_order).json()
        assert body["shippingWeight"] == 6.0

    def test_map_order_unknown_method(self, client, raw_order):
        raw_order["shippingMethod"] = "Not A Real Method"
        body = client.post("/api/map-order", json=raw_order).json()
        assert body["shipping"]["method"] == "ground"
        assert "Not A Real Method" in body["memo"]
        assert body["test"] is True


@pytest.mark.integration
class TestCheckoutComplete:
    def test_complete(self, client, raw_order):
        response = client.post("/api/checkout/complete", json=raw_order)
        assert response.status_code == 200
        body = response.json()
        assert body["orderId"] == body["order"]["orderId"]
        assert body["shippingWeight"] == 6.0
        assert body["order"]["items"][0]["condition"] == "New in Box"

    def test_missing_fields_is_bad_request(self, client, raw_order):
        raw_order["items"] = []
        response = client.post("/api/checkout/complete", json=raw_order)
        assert response.status_code == 400
        assert response.json()["detail"]["detail"] == "Missing required fields"

    @pytest.mark.parametrize("quantity", ["infinity", "inf", "1_000"])
    def test_non_numeric_quantity_is_bad_request(self, client, raw_order, quantity):
        raw_order["items"][0]["quantity"] = quantity
        response = client.post("/api/checkout/complete", json=raw_order)
        assert response.status_code == 400

    def test_unknown_route(self, client):
        assert client.post("/api/nonexistent-endpoint", json={}).status_code == 404
