"""
API tests for the catalog, grid query and entity endpoints.
"""

from fastapi.testclient import TestClient


class TestCatalogAPI:
    """Field catalog endpoints"""

    def test_list_modules(self, client: TestClient):
        response = client.get("/api/catalog/modules")
        assert response.status_code == 200

        modules = {m["module"]: m for m in response.json()}
        assert set(modules) == {"Acquisition", "LetterAgreement", "Buyer", "Operator", "County", "Referrer"}
        assert modules["Acquisition"]["pages"] == ["AcquisitionIndex"]
        assert modules["Buyer"]["field_count"] > 0

    def test_module_fields_in_display_order(self, client: TestClient):
        response = client.get("/api/catalog/Buyer/fields")
        assert response.status_code == 200

        fields = response.json()
        orders = [f["display_order"] for f in fields]
        assert orders == sorted(orders)
        name = next(f for f in fields if f["field_name"] == "BuyerName")
        assert name["field_type"] == "string"

    def test_unknown_module_is_404(self, client: TestClient):
        response = client.get("/api/catalog/Lease/fields")
        assert response.status_code == 404
        assert response.json()["type"] == "NotFoundError"

    def test_operators_for_field_type(self, client: TestClient):
        response = client.get("/api/catalog/operators/boolean")
        assert response.status_code == 200
        assert [o["value"] for o in response.json()] == ["isTrue", "isFalse", "isNull"]

    def test_operators_for_unknown_type(self, client: TestClient):
        response = client.get("/api/catalog/operators/money")
        assert response.status_code == 422

    def test_named_filters(self, client: TestClient):
        response = client.get("/api/catalog/Acquisition/named-filters")
        assert response.status_code == 200
        names = [f["name"] for f in response.json()]
        assert names == ["All Records", "Pending Approval", "Drafts Due", "With Liens"]

    def test_named_filters_for_unknown_module_is_404(self, client: TestClient):
        response = client.get("/api/catalog/Lease/named-filters")
        assert response.status_code == 404


class TestGridQueryAPI:
    """Grid query endpoint"""

    def test_filtered_sorted_page(self, client: TestClient, api_headers, sample_buyers):
        payload = {
            "criteria": [
                {"field_name": "BuyerName", "operator": "contains", "value": "oil"},
                {"field_name": "DefaultCommission", "operator": "gte", "value": "2.5"},
            ],
            "sort": [{"field_name": "BuyerName", "descending": False}],
            "skip": 0,
            "take": 10,
        }
        response = client.post("/api/grids/Buyer/query", json=payload, headers=api_headers)
        assert response.status_code == 200

        body = response.json()
        assert body["total_count"] == 4
        assert body["items"][0]["BuyerName"] == "Boiling Springs Oil Co"

    def test_illegal_operator_is_400(self, client: TestClient, sample_buyers):
        payload = {"criteria": [{"field_name": "DefaultCommission", "operator": "contains", "value": "2"}]}
        response = client.post("/api/grids/Buyer/query", json=payload)
        assert response.status_code == 400
        assert response.json()["type"] == "ValidationError"

    def test_unknown_sort_field_is_400(self, client: TestClient):
        response = client.post("/api/grids/Buyer/query", json={"sort": [{"field_name": "Nope"}]})
        assert response.status_code == 400

    def test_negative_skip_is_400(self, client: TestClient):
        response = client.post("/api/grids/Buyer/query", json={"skip": -1})
        assert response.status_code == 400

    def test_missing_saved_filter_is_404(self, client: TestClient):
        response = client.post("/api/grids/Acquisition/query", json={"saved_filter_id": 12345})
        assert response.status_code == 404

    def test_unknown_module_is_404(self, client: TestClient):
        response = client.post("/api/grids/Lease/query", json={})
        assert response.status_code == 404

    def test_named_filter_query(self, client: TestClient, sample_acquisitions):
        payload = {"named_filter": "Pending Approval", "fields": ["AcquisitionNumber", "DealStatus"]}
        response = client.post("/api/grids/Acquisition/query", json=payload)
        assert response.status_code == 200
        body = response.json()
        assert body["total_count"] == 1
        assert body["items"] == [{"AcquisitionNumber": "ACQ-4", "DealStatus": "Pending"}]

    def test_unknown_named_filter_is_404(self, client: TestClient):
        response = client.post("/api/grids/Acquisition/query", json={"named_filter": "Invoices Due"})
        assert response.status_code == 404


class TestEntityAPI:
    """Entity CRUD endpoints"""

    def test_crud_round_trip(self, client: TestClient, api_headers):
        response = client.post("/api/entities/County", json={"CountyName": "Reeves", "StateCode": "TX"})
        assert response.status_code == 201
        county_id = response.json()["CountyID"]

        response = client.get(f"/api/entities/County/{county_id}")
        assert response.status_code == 200
        assert response.json()["CountyName"] == "Reeves"

        response = client.put(f"/api/entities/County/{county_id}", json={"CountyName": "Loving"})
        assert response.status_code == 200
        assert client.get(f"/api/entities/County/{county_id}").json()["CountyName"] == "Loving"

        response = client.delete(f"/api/entities/County/{county_id}")
        assert response.status_code == 204
        assert client.get(f"/api/entities/County/{county_id}").status_code == 404

    def test_list(self, client: TestClient, sample_operators):
        response = client.get("/api/entities/Operator")
        assert response.status_code == 200
        assert len(response.json()) == len(sample_operators)

    def test_invalid_field(self, client: TestClient):
        response = client.post("/api/entities/County", json={"Population": 10})
        assert response.status_code == 400


class TestHealth:
    def test_health_reports_cache_stats(self, client: TestClient):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
