# services/catalog/tests/integration/test_catalog_api.py
"""
Integration tests driving the catalog helpers over HTTP.
"""

import pytest


@pytest.mark.integration
class TestHealthEndpoint:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["details"]["aggregation_size"] == 500
        assert body["details"]["specs_aggregation_size"] == 100

    def test_correlation_id_is_generated(self, client):
        response = client.get("/health")
        assert response.headers["X-Correlation-ID"]


@pytest.mark.integration
class TestTextEndpoints:
    def test_capitalize_words(self, client):
        response = client.post("/api/capitalize-words", json={"text": "firstName"})
        assert response.json() == {"original": "firstName", "capitalized": "First Name"}

    def test_capitalize_empty(self, client):
        assert client.post("/api/capitalize-words", json={"text": ""}).json()["capitalized"] is None

    def test_like_name(self, client):
        body = client.post("/api/like-name", json={"name": "Breaker Panel", "type": "Breaker"}).json()
        assert body == {"original": {"name": "Breaker Panel", "type": "Breaker"}, "result": "Breaker P"}

    def test_format_manufacturers(self, client):
        body = client.post(
            "/api/format-manufacturers", json={"manufacturers": ["Samsung Electronics", "Apple"]}
        ).json()
        assert body["formatted"] == ["Samsung Electronics", "Samsung-Electronics", "Apple"]

    def test_format_manufacturer_object(self, client):
        body = client.post(
            "/api/format-manufacturer-object",
            json={"manufacturers": [{"name": "Eaton", "authorized_distributor": False}]},
        ).json()
        assert body["formatted"] == [{"name": "Eaton"}]


@pytest.mark.integration
class TestFilterEndpoints:
    def test_clip_params(self, client):
        body = client.post(
            "/api/clip-params", json={"category": "x", "manufacturers": ["A"], "validParam": "y"}
        ).json()
        assert body["clipped"] == {"manufacturers": ["A"], "validParam": "y"}

    def test_filters_array(self, client):
        body = client.post("/api/formate-filters-array", json={"manufacturers": ["Eaton"]}).json()
        assert body["filtersArray"] == [
            {"term": {"online": True}},
            {"term": {"is_deleted": False}},
            {"terms": {"manufacturers": ["Eaton"]}},
        ]

    def test_should_array(self, client):
        body = client.post("/api/formate-should-array", json={"specs": [{"name": "voltage"}]}).json()
        assert body["shouldArray"] == [{"term": {"specs.name": "voltage"}}]

    def test_parse_filters(self, client):
        assert client.post("/api/parse-filters", json={"filterString": "{bad"}).json() == {
            "original": "{bad",
            "parsed": {},
        }


@pytest.mark.integration
class TestAggregationEndpoints:
    def test_basic_aggregations(self, client):
        body = client.post(
            "/api/get-basic-aggregations",
            json={"aggregations": ["manufacturers", "subcategory.name"], "isStaticQuery": True},
        ).json()
        assert body["manufacturers"] == {"terms": {"field": "manufacturers", "size": 500}}
        assert "multi_terms" in body["subcategory.name"]

    def test_specs_aggregations(self, client, specs):
        body = client.post("/api/formate-specs-aggregations", json={"specsList": specs}).json()
        assert set(body["aggregations"]) == {"specs.voltage", "specs.amperage"}

    def test_filters_agg(self, client, raw_aggregations):
        body = client.post(
            "/api/formate-filters-agg", json={"aggregationRawResult": raw_aggregations}
        ).json()
        assert body["formatted"][0] == {
            "field": "specs.voltage",
            "title": "Voltage",
            "specID": None,
            "values": ["110V", "220V"],
        }
        assert "specID" not in body["formatted"][1]


@pytest.mark.integration
class TestQueryEndpoints:
    def test_search_query(self, client):
        body = client.post("/api/build-search-query", json={"searchText": "qo"}).json()
        assert body["query"]["multi_match"]["fields"] == ["name", "description"]

    def test_range_filter(self, client):
        body = client.post("/api/build-range-filter", json={"field": "price", "max": 50}).json()
        assert body["filter"] == {"range": {"price": {"lte": 50}}}

    def test_nested_filter(self, client):
        query = {"term": {"specs.name": "voltage"}}
        body = client.post("/api/build-nested-filter", json={"path": "specs", "query": query}).json()
        assert body["filter"] == {"nested": {"path": "specs", "query": query}}

    def test_bool_query(self, client):
        clause = {"term": {"online": True}}
        body = client.post("/api/build-bool-query", json={"must": [clause]}).json()
        assert body["query"] == {"bool": {"must": [clause]}}

    def test_filters_query(self, client):
        body = client.post("/api/format-filters-query", json={"amplifyId": "sub-1"}).json()
        assert len(body["query"]["bool"]["must"]) == 3
        assert body["aggs"]["specs"] == {"nested": {"path": "specs"}, "aggs": {}}

    def test_sort(self, client):
        body = client.post("/api/build-sort", json={"sortByManuf": "asc"}).json()
        assert body["sort"] == [{"favorManufacturer.keyword": {"order": "asc"}}, {"name": "asc"}]

    def test_invalid_sort_is_server_error(self, client):
        response = client.post("/api/build-sort", json={"sortByPrice": "invalid"})
        assert response.status_code == 500
        assert response.json()["detail"]["detail"] == "Sorting key not valid!"

    def test_product_list_query(self, client):
        body = client.post(
            "/api/product-list-query", json={"page": 2, "size": 5, "manufacturers": ["Eaton"]}
        ).json()
        assert body["size"] == 5
        assert body["from"] == 5

    def test_product_list_query_rejects_bad_page(self, client):
        response = client.post("/api/product-list-query", json={"page": "two"})
        assert response.status_code == 422


@pytest.mark.integration
def test_formate_products(client, product_record):
    body = client.post(
        "/api/formate-products", json={"records": [product_record], "type": "related"}
    ).json()
    assert body["formatted"][0]["url"] == "/product/Siemens%20Breaker%2020A"
