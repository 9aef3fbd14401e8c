"""
Tests for the tracker service, its log filter and store failure handling.
"""

import asyncio
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from models.database import USERS
from services.errors import PersistenceError, ValidationError
from services.store import MemoryDocumentStore
from services.tracker import ExerciseTrackerService, build_log_filter


class BrokenFindStore(MemoryDocumentStore):
    """Store whose queries fail the way an unreachable database would."""

    async def find(self, collection, filter=None, projection=None, sort=None, limit=None):
        raise PersistenceError("connection refused")


class LimitRecordingStore(MemoryDocumentStore):
    """Memory store remembering the last limit it was asked for."""

    async def find(self, collection, filter=None, projection=None, sort=None, limit=None):
        self.last_limit = limit
        return await super().find(collection, filter, projection, sort, limit)


class CrashingStore(MemoryDocumentStore):
    """Store raising an error outside the tracker taxonomy."""

    async def find(self, collection, filter=None, projection=None, sort=None, limit=None):
        raise RuntimeError("unexpected")


class TestBuildLogFilter:
    """Tests for build_log_filter."""

    def test_user_only(self):
        assert build_log_filter("u1") == {"user_id": "u1"}

    def test_both_bounds(self):
        assert build_log_filter("u1", "2024-01-01", "2024-01-31") == {
            "user_id": "u1",
            "date": {"$gte": datetime(2024, 1, 1), "$lte": datetime(2024, 1, 31)},
        }

    def test_blank_bounds_are_ignored(self):
        assert build_log_filter("u1", "", None) == {"user_id": "u1"}

    def test_bad_bound(self):
        with pytest.raises(ValidationError):
            build_log_filter("u1", "2024-01-01", "soon")


class TestService:
    """Direct service tests."""

    def test_create_then_log(self):
        service = ExerciseTrackerService(MemoryDocumentStore(unique_fields={USERS: ["username"]}))

        async def scenario():
            user = await service.create_user("direct")
            await service.add_exercise(user.id, "lift", "15", "2024-06-01")
            return await service.get_log(user.id)

        log = asyncio.run(scenario())

        assert log.count == 1
        assert log.log[0].date == "Sat Jun 01 2024"
        assert log.log[0].duration == 15

    def test_store_failure_surfaces_as_persistence_error(self):
        service = ExerciseTrackerService(BrokenFindStore())

        with pytest.raises(PersistenceError) as excinfo:
            asyncio.run(service.list_users())
        assert excinfo.value.message == "Server error retrieving users"


class TestFailureResponses:
    """HTTP responses when the store fails."""

    def test_persistence_error_is_generic_500(self):
        with TestClient(create_app(store=BrokenFindStore())) as client:
            response = client.get("/api/users")

        assert response.status_code == 500
        assert response.json() == {"error": "Server error retrieving users"}

    def test_unhandled_error_is_generic_500(self):
        app = create_app(store=CrashingStore())
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/api/users")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


def test_health(test_client: TestClient):
    response = test_client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_index_page(test_client: TestClient):
    response = test_client.get("/")
    assert response.status_code == 200
    assert "Exercise tracker" in response.text


@pytest.mark.parametrize("limit,expected", [("2", 2), (str(2 ** 63 - 1), 2 ** 63 - 1), (str(2 ** 63), None)])
def test_limit_beyond_64_bits_reaches_store_as_no_limit(limit, expected):
    store = LimitRecordingStore(unique_fields={USERS: ["username"]})
    service = ExerciseTrackerService(store)

    async def scenario():
        user = await service.create_user("capped")
        return await service.get_log(user.id, limit=limit)

    asyncio.run(scenario())

    assert store.last_limit == expected
