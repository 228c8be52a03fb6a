"""
Pytest configuration and shared test helpers for backend tests.
"""
import os

# Scheduler uses the memory job store under pytest (see server.py).
os.environ.setdefault("PYTEST_RUNNING", "1")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from unittest.mock import AsyncMock, MagicMock

# Shared TestClient fixture so tests can use in-process requests without a running server.
from fastapi.testclient import TestClient
from server import app
from auth import create_access_token


class AsyncCursor:
    """Stand-in for a Motor cursor: supports ``to_list`` and ``async for``."""

    def __init__(self, items):
        self.items = list(items)

    async def to_list(self, length=None):
        return list(self.items)

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self.items:
            raise StopAsyncIteration
        return self.items.pop(0)


def make_collection(find_items=None, find_one=None):
    collection = MagicMock()
    collection.find = MagicMock(return_value=AsyncCursor(find_items or []))
    collection.find_one = AsyncMock(return_value=find_one)
    collection.insert_one = AsyncMock()
    collection.update_one = AsyncMock(return_value=MagicMock(matched_count=1))
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
    collection.count_documents = AsyncMock(return_value=len(find_items or []))
    collection.find_one_and_update = AsyncMock(return_value=find_one)
    return collection


def make_db(**collections):
    """MagicMock database; named collections are replaced by the given mocks."""
    db = MagicMock()
    for name, collection in collections.items():
        setattr(db, name, collection)
    db.__getitem__.side_effect = lambda name: getattr(db, name)
    return db


def auth_headers(user_id="owner-1", email="owner@agencydesk.io"):
    token = create_access_token({"user_id": user_id, "email": email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client():
    """Return a TestClient for the main FastAPI app (server:app). Use for unit-style API tests."""
    return TestClient(app)


@pytest.fixture
def owner_headers():
    return auth_headers()
