"""Tests for the item endpoints of the demo app."""

from typing import Any

from fastapi.testclient import TestClient

import apiutils.app as demo
from apiutils.app import ITEMS, app


def _create(client: TestClient, name: str, tags=None) -> dict:
    response = client.post("/items", json={"name": name, "tags": tags or ["x"]})
    assert response.status_code == 201
    return response.json()["data"]


class TestCreateItem:
    """Tests for POST /items."""

    def test_create_item_success(self, client: TestClient, sample_item_data: dict[str, Any]) -> None:
        """Test successful item creation."""
        response = client.post("/items", json=sample_item_data)

        assert response.status_code == 201
        json_data = response.json()
        assert json_data["success"] is True

        item = json_data["data"]
        assert item["name"] == "Widget"
        assert item["tags"] == ["tools"]
        assert item["description"] == "A small widget"
        assert item["quantity"] == 3
        assert "id" in item
        assert "createdAt" in item
        assert item["id"] in ITEMS

    def test_create_item_omits_empty_description(self, client: TestClient) -> None:
        """Test omitempty fields are left out of the response."""
        response = client.post("/items", json={"name": "Widget", "tags": ["a"]})

        item = response.json()["data"]
        assert "description" not in item
        assert item["quantity"] == 0

    def test_create_item_missing_name(self, client: TestClient) -> None:
        """Test an absent required field is reported."""
        response = client.post("/items", json={"name": "", "tags": []})

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": {"code": "Bad Request", "message": "name is required"},
        }
        assert ITEMS == {}

    def test_create_item_name_absent_from_body(self, client: TestClient) -> None:
        """Test a missing key decodes empty and fails validation."""
        response = client.post("/items", json={"tags": ["x"]})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "name is required"

    def test_create_item_short_name(self, client: TestClient) -> None:
        """Test the text minimum is enforced."""
        response = client.post("/items", json={"name": "Al", "tags": []})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "name must be at least 3 characters long"

    def test_create_item_no_tags(self, client: TestClient) -> None:
        """Test the collection minimum is enforced."""
        response = client.post("/items", json={"name": "Alice"})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "tags must have at least 1 items"

    def test_create_item_empty_body(self, client: TestClient) -> None:
        """Test an empty body is rejected by the decoder."""
        response = client.post("/items", content=b"")

        assert response.status_code == 400
        assert response.json()["error"] == {"code": "Bad Request", "message": "Request body is empty"}

    def test_create_item_invalid_json(self, client: TestClient) -> None:
        """Test malformed JSON is rejected."""
        response = client.post("/items", content=b"{not json", headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        json_data = response.json()
        assert json_data["success"] is False
        assert json_data["error"]["message"].startswith("Invalid JSON format: ")

    def test_create_item_unknown_field(self, client: TestClient) -> None:
        """Test unknown keys are rejected."""
        response = client.post("/items", json={"name": "Alice", "tags": ["x"], "color": "red"})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == 'Invalid JSON format: unknown field "color"'

    def test_create_item_wrong_type(self, client: TestClient) -> None:
        """Test a value of the wrong type is rejected naming the field."""
        response = client.post("/items", json={"name": 5, "tags": ["x"]})

        assert response.status_code == 400
        assert response.json()["error"]["message"].startswith("Invalid JSON format: name: ")

    def test_create_item_case_insensitive_keys(self, client: TestClient) -> None:
        """Test keys match field names regardless of case."""
        response = client.post("/items", json={"Name": "Alice", "TAGS": ["x"]})

        assert response.status_code == 201
        assert response.json()["data"]["name"] == "Alice"


class TestListItems:
    """Tests for GET /items."""

    def test_list_empty(self, client: TestClient) -> None:
        """Test an empty store lists nothing with default paging."""
        response = client.get("/items")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "data": {"items": [], "page": 1, "limit": 10, "total": 0},
        }

    def test_list_paginates(self, client: TestClient) -> None:
        """Test page and limit select a window in insertion order."""
        for name in ("Alpha", "Bravo", "Charlie"):
            _create(client, name)

        response = client.get("/items", params={"page": 2, "limit": 2})

        data = response.json()["data"]
        assert [item["name"] for item in data["items"]] == ["Charlie"]
        assert data["page"] == 2
        assert data["limit"] == 2
        assert data["total"] == 3

    def test_list_invalid_params_use_defaults(self, client: TestClient) -> None:
        """Test out-of-range parameters fall back to defaults."""
        _create(client, "Alpha")

        response = client.get("/items", params={"page": "zero", "limit": 500})

        data = response.json()["data"]
        assert data["page"] == 1
        assert data["limit"] == 10
        assert len(data["items"]) == 1


class TestGetAndDeleteItem:
    """Tests for GET and DELETE /items/{item_id}."""

    def test_get_item(self, client: TestClient) -> None:
        """Test a stored item is returned."""
        created = _create(client, "Alpha")

        response = client.get(f"/items/{created['id']}")

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": created}

    def test_get_missing_item(self, client: TestClient) -> None:
        """Test a missing item yields a 404 envelope."""
        response = client.get("/items/nope")

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": {"code": "Not Found", "message": "Item nope not found"},
        }

    def test_delete_item(self, client: TestClient) -> None:
        """Test deletion returns 204 and removes the item."""
        created = _create(client, "Alpha")

        response = client.delete(f"/items/{created['id']}")

        assert response.status_code == 204
        assert response.content == b""
        assert client.get(f"/items/{created['id']}").status_code == 404

    def test_delete_missing_item(self, client: TestClient) -> None:
        """Test deleting an unknown item yields 404."""
        response = client.delete("/items/nope")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "Not Found"


class TestUnhandledErrors:
    """Tests for the global exception handler."""

    def test_unhandled_exception_returns_envelope(self, monkeypatch) -> None:
        """Test unexpected failures become a 500 error envelope."""

        def explode(value):
            raise RuntimeError("boom")

        monkeypatch.setattr(demo, "validate_struct", explode)
        client = TestClient(app, raise_server_exceptions=False)

        response = client.post(
            "/items",
            json={"name": "Alice", "tags": ["x"]},
            headers={"Origin": "http://localhost:3000"},
        )

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": {"code": "Internal Server Error", "message": "Internal server error"},
        }
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
