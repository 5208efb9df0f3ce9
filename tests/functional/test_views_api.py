"""
API tests for saved filters, view configurations and session hooks.
"""

from fastapi.testclient import TestClient


def fields(*names):
    return [{"field_name": n, "is_selected": True, "display_order": i + 1} for i, n in enumerate(names)]


class TestSavedFilterAPI:
    def test_filter_lifecycle(self, client: TestClient, api_headers):
        payload = {
            "module": "Acquisition",
            "name": "High Value",
            "criteria": [{"field_name": "TotalBonus", "operator": "gt", "value": "100000"}],
        }
        response = client.post("/api/filters", json=payload, headers=api_headers)
        assert response.status_code == 201
        filter_id = response.json()["id"]

        response = client.get("/api/filters", params={"module": "Acquisition"})
        assert [f["name"] for f in response.json()] == ["High Value"]

        response = client.put(
            f"/api/filters/{filter_id}",
            json={"name": "Very High Value", "criteria": [{"field_name": "TotalBonus", "operator": "gt", "value": "500000"}]},
        )
        assert response.status_code == 200
        assert response.json()["criteria"][0]["value"] == "500000"

        assert client.delete(f"/api/filters/{filter_id}").status_code == 204
        assert client.get(f"/api/filters/{filter_id}").status_code == 404
        response = client.post("/api/grids/Acquisition/query", json={"saved_filter_id": filter_id})
        assert response.status_code == 404

    def test_duplicate_name_is_409(self, client: TestClient):
        payload = {"module": "Buyer", "name": "Dupes", "criteria": []}
        assert client.post("/api/filters", json=payload).status_code == 201
        response = client.post("/api/filters", json=payload)
        assert response.status_code == 409

    def test_blank_name_is_422(self, client: TestClient):
        response = client.post("/api/filters", json={"module": "Buyer", "name": "   ", "criteria": []})
        assert response.status_code == 422

    def test_filter_builder_endpoints(self, client: TestClient):
        response = client.get("/api/filters/fields/Acquisition")
        assert response.status_code == 200
        assert "DealStatus" in [f["field_name"] for f in response.json()]

        response = client.get("/api/filters/fields/Acquisition/DealStatus/operators")
        assert response.status_code == 200
        assert response.json()[0]["value"] == "contains"


class TestViewAPI:
    def test_default_view_for_new_user(self, client: TestClient):
        response = client.get("/api/views/users/42/pages/AcquisitionIndex")
        assert response.status_code == 200

        body = response.json()
        assert body["view_id"] is None
        assert body["view_name"] == "Default"
        assert all(f["is_selected"] for f in body["fields"])

    def test_user_page_round_trip(self, client: TestClient):
        response = client.put(
            "/api/views/users/42/pages/BuyerIndex",
            json={"fields": fields("BuyerName", "City")},
        )
        assert response.status_code == 200
        saved = response.json()
        assert saved["view_name"].startswith("User 42 - BuyerIndex #")

        assert client.post("/api/session/42/logout").status_code == 204
        login = client.post("/api/session/42/login")
        assert login.json()["pages"] == 1

        response = client.get("/api/views/users/42/pages/BuyerIndex")
        assert response.json() == saved

    def test_view_crud(self, client: TestClient):
        response = client.post(
            "/api/views",
            json={"module": "County", "view_name": "Contacts", "fields": fields("CountyName", "ContactEmail")},
        )
        assert response.status_code == 201
        view_id = response.json()["view_id"]

        response = client.get("/api/views/County")
        assert [v["view_name"] for v in response.json()] == ["Contacts"]

        response = client.put(f"/api/views/{view_id}", json={"view_name": "County contacts"})
        assert response.status_code == 200
        assert response.json()["view_name"] == "County contacts"

        assert client.delete(f"/api/views/{view_id}").status_code == 204
        assert client.get("/api/views/County").json() == []

    def test_reserved_suffix_is_400(self, client: TestClient):
        response = client.post(
            "/api/views", json={"module": "County", "view_name": "Mine #3", "fields": fields("CountyName")}
        )
        assert response.status_code == 400

    def test_default_view_endpoint(self, client: TestClient):
        response = client.get("/api/views/Referrer/default")
        assert response.status_code == 200
        assert response.json()["fields"][0]["field_name"] == "ReferrerID"

    def test_unknown_page_is_404(self, client: TestClient):
        assert client.get("/api/views/users/1/pages/Nowhere").status_code == 404
