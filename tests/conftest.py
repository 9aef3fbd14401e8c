"""
Pytest configuration and fixtures for the exercise tracker API tests.
"""

import os
from typing import Any, Callable, Dict, Generator

import pytest
from fastapi.testclient import TestClient

# Override environment before settings are imported
os.environ["STORE_BACKEND"] = "memory"
os.environ["LOG_LEVEL"] = "WARNING"

from api.main import create_app  # noqa: E402
from models.database import USERS  # noqa: E402
from services.store import MemoryDocumentStore  # noqa: E402


@pytest.fixture
def store() -> MemoryDocumentStore:
    """Fresh in-memory store with the users unique index."""
    return MemoryDocumentStore(unique_fields={USERS: ["username"]})


@pytest.fixture
def test_client(store: MemoryDocumentStore) -> Generator[TestClient, None, None]:
    """TestClient running the app (and its lifespan) against the memory store."""
    with TestClient(create_app(store=store)) as client:
        yield client


@pytest.fixture
def create_user(test_client: TestClient) -> Callable[[str], Dict[str, Any]]:
    """Create a user through the API and return the response body."""
    def _create(username: str) -> Dict[str, Any]:
        response = test_client.post("/api/users", data={"username": username})
        assert response.status_code == 200, response.text
        return response.json()
    return _create


@pytest.fixture
def add_exercise(test_client: TestClient) -> Callable[..., Dict[str, Any]]:
    """Add an exercise through the API and return the response body."""
    def _add(user_id: str, description: str = "run", duration: Any = 30, date: str = None) -> Dict[str, Any]:
        body = {"description": description, "duration": duration}
        if date is not None:
            body["date"] = date
        response = test_client.post(f"/api/users/{user_id}/exercises", json=body)
        assert response.status_code == 200, response.text
        return response.json()
    return _add
