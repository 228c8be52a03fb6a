"""Tests for index creation."""
from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo.errors import OperationFailure

from conftest import make_db
from database import create_indexes

COLLECTIONS = (
    "users", "clients", "sites", "hosting_accounts", "mobile_apps", "developer_accounts",
    "notification_settings", "audit_logs", "message_logs",
)


def _db():
    return make_db(**{name: MagicMock(create_index=AsyncMock()) for name in COLLECTIONS})


@pytest.mark.asyncio
async def test_settings_owner_index_is_unique():
    db = _db()

    await create_indexes(db)

    db.notification_settings.create_index.assert_awaited_once_with("owner_id", unique=True)


@pytest.mark.asyncio
async def test_settings_owner_index_survives_other_index_failures():
    db = _db()
    db.users.create_index.side_effect = OperationFailure("index exists with different options")
    db.sites.create_index.side_effect = OperationFailure("E11000 duplicate key")

    await create_indexes(db)

    db.notification_settings.create_index.assert_awaited_once_with("owner_id", unique=True)
