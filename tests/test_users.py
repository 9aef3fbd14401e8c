"""
Integration tests for the user endpoints.
"""

from fastapi.testclient import TestClient


class TestCreateUser:
    """Tests for POST /api/users."""

    def test_create_user_form_encoded(self, test_client: TestClient):
        response = test_client.post("/api/users", data={"username": "fcc_test"})

        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "fcc_test"
        assert isinstance(data["_id"], str) and data["_id"]

    def test_create_user_json(self, test_client: TestClient):
        response = test_client.post("/api/users", json={"username": "json_user"})

        assert response.status_code == 200
        assert response.json()["username"] == "json_user"

    def test_username_is_returned_exactly(self, test_client: TestClient):
        response = test_client.post("/api/users", data={"username": "  Mixed Case  "})
        assert response.json()["username"] == "  Mixed Case  "

    def test_missing_username(self, test_client: TestClient, store):
        response = test_client.post("/api/users", data={})

        assert response.status_code == 400
        assert response.json() == {"error": "Username is required"}
        assert store.collections.get("users", []) == []

    def test_empty_username(self, test_client: TestClient):
        response = test_client.post("/api/users", json={"username": ""})
        assert response.status_code == 400

    def test_non_string_username(self, test_client: TestClient):
        response = test_client.post("/api/users", json={"username": 42})
        assert response.status_code == 400
        assert response.json() == {"error": "Username must be a string"}

    def test_invalid_json_body(self, test_client: TestClient):
        response = test_client.post(
            "/api/users",
            content="{not json",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400
        assert "error" in response.json()

    def test_duplicate_username_conflicts(self, test_client: TestClient, store):
        first = test_client.post("/api/users", data={"username": "twin"})
        assert first.status_code == 200
        size_before = len(store.collections["users"])

        second = test_client.post("/api/users", data={"username": "twin"})

        assert second.status_code == 409
        assert second.json() == {"error": "Username already exists"}
        assert len(store.collections["users"]) == size_before


class TestListUsers:
    """Tests for GET /api/users."""

    def test_empty(self, test_client: TestClient):
        response = test_client.get("/api/users")
        assert response.status_code == 200
        assert response.json() == []

    def test_lists_id_and_username_in_insert_order(self, test_client: TestClient, create_user):
        ann = create_user("ann")
        bob = create_user("bob")

        response = test_client.get("/api/users")

        assert response.status_code == 200
        assert response.json() == [
            {"_id": ann["_id"], "username": "ann"},
            {"_id": bob["_id"], "username": "bob"},
        ]
