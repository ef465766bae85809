"""Pytest fixtures for testing."""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request

from apiutils.app import ITEMS, app


@pytest.fixture(autouse=True)
def clear_items() -> Generator[None, None, None]:
    """Start every test with an empty item store."""
    ITEMS.clear()
    yield
    ITEMS.clear()


@pytest.fixture
def client() -> TestClient:
    """Provide an HTTP client for the demo app."""
    return TestClient(app)


@pytest.fixture
def make_request():
    """Build a bare Starlette request carrying the given query string."""

    def _make(query: str = "") -> Request:
        return Request({
            "type": "http",
            "method": "GET",
            "path": "/",
            "query_string": query.encode(),
            "headers": [],
        })

    return _make


@pytest.fixture
def sample_item_data() -> dict:
    """Valid item creation payload."""
    return {
        "name": "Widget",
        "tags": ["tools"],
        "description": "A small widget",
        "quantity": 3,
    }
