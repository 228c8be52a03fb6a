"""Owner-scoped persistence for agency records.

Every read and write is filtered by ``owner_id``; Motor/PyMongo errors are
translated into FetchFailed / WriteFailed so route handlers can recover at
their boundary without knowing about the driver.
"""
from database import database
from models import SourceType
from pymongo.errors import PyMongoError
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Dict, Any, List
import logging

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 1000


class RenewalDeskError(Exception):
    """Base error for recoverable record/reminder failures."""


class FetchFailed(RenewalDeskError):
    """Persistence read error."""


class WriteFailed(RenewalDeskError):
    """Persistence write error."""


class OwnerMissingFailure(RenewalDeskError):
    """Operation attempted without an authenticated owner."""


class InvalidReference(RenewalDeskError):
    """A write points at a related record (host, client) the owner does not have."""


def require_owner(owner_id: Optional[str]) -> str:
    if not owner_id:
        raise OwnerMissingFailure("No authenticated owner for this operation")
    return owner_id


class RecordStore:
    """CRUD plus the expiry range query over one owner-scoped collection."""

    def __init__(self, collection_name: str, id_field: str, expiry_field: Optional[str] = None):
        self.collection_name = collection_name
        self.id_field = id_field
        self.expiry_field = expiry_field

    def _collection(self):
        return database.get_db()[self.collection_name]

    async def list_for_owner(self, owner_id: str, limit: int = DEFAULT_LIST_LIMIT) -> List[Dict[str, Any]]:
        require_owner(owner_id)
        try:
            return await self._collection().find(
                {"owner_id": owner_id},
                {"_id": 0}
            ).to_list(limit)
        except PyMongoError as e:
            logger.error(f"Failed to list {self.collection_name} for owner {owner_id}: {e}")
            raise FetchFailed(f"Failed to fetch {self.collection_name}") from e

    async def count_for_owner(self, owner_id: str) -> int:
        require_owner(owner_id)
        try:
            return await self._collection().count_documents({"owner_id": owner_id})
        except PyMongoError as e:
            logger.error(f"Failed to count {self.collection_name} for owner {owner_id}: {e}")
            raise FetchFailed(f"Failed to fetch {self.collection_name}") from e

    async def get_by_id(self, owner_id: str, record_id: str) -> Optional[Dict[str, Any]]:
        require_owner(owner_id)
        try:
            return await self._collection().find_one(
                {"owner_id": owner_id, self.id_field: record_id},
                {"_id": 0}
            )
        except PyMongoError as e:
            logger.error(f"Failed to load {self.collection_name}/{record_id}: {e}")
            raise FetchFailed(f"Failed to fetch {self.collection_name}") from e

    async def list_expiring(self, owner_id: str, until: date, limit: int = DEFAULT_LIST_LIMIT) -> List[Dict[str, Any]]:
        """Records where owner = owner_id and expiry <= until.

        Expiry values are ISO date strings, optionally with a time part, so
        the bound is expressed as "< the day after" to keep the comparison
        lexicographic. Records without an expiry are never returned.
        """
        require_owner(owner_id)
        if not self.expiry_field:
            raise ValueError(f"{self.collection_name} has no expiry field")
        upper = (until + timedelta(days=1)).isoformat()
        try:
            return await self._collection().find(
                {
                    "owner_id": owner_id,
                    self.expiry_field: {"$gt": "", "$lt": upper}
                },
                {"_id": 0}
            ).to_list(limit)
        except PyMongoError as e:
            logger.error(f"Failed to list expiring {self.collection_name} for owner {owner_id}: {e}")
            raise FetchFailed(f"Failed to fetch expiring {self.collection_name}") from e

    async def insert(self, owner_id: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        require_owner(owner_id)
        doc = {**doc, "owner_id": owner_id}
        try:
            await self._collection().insert_one(doc)
        except PyMongoError as e:
            logger.error(f"Failed to insert into {self.collection_name}: {e}")
            raise WriteFailed(f"Failed to add {self.collection_name}") from e
        # Remove MongoDB _id from response
        doc.pop("_id", None)
        return doc

    async def update_by_id(self, owner_id: str, record_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply ``fields`` to one record. Returns the updated record, or None if it does not exist."""
        require_owner(owner_id)
        fields = {k: v for k, v in fields.items() if k not in ("owner_id", self.id_field, "_id")}
        fields["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = await self._collection().update_one(
                {"owner_id": owner_id, self.id_field: record_id},
                {"$set": fields}
            )
            if result.matched_count == 0:
                return None
            return await self._collection().find_one(
                {"owner_id": owner_id, self.id_field: record_id},
                {"_id": 0}
            )
        except PyMongoError as e:
            logger.error(f"Failed to update {self.collection_name}/{record_id}: {e}")
            raise WriteFailed(f"Failed to update {self.collection_name}") from e

    async def delete_by_id(self, owner_id: str, record_id: str) -> bool:
        require_owner(owner_id)
        try:
            result = await self._collection().delete_one(
                {"owner_id": owner_id, self.id_field: record_id}
            )
        except PyMongoError as e:
            logger.error(f"Failed to delete {self.collection_name}/{record_id}: {e}")
            raise WriteFailed(f"Failed to delete {self.collection_name}") from e
        return result.deleted_count > 0


clients_store = RecordStore("clients", "client_id")
sites_store = RecordStore("sites", "site_id", expiry_field="expiration_date")
hosting_store = RecordStore("hosting_accounts", "hosting_account_id", expiry_field="expiration_date")
mobile_apps_store = RecordStore("mobile_apps", "app_id", expiry_field="renewal_date")
developer_accounts_store = RecordStore("developer_accounts", "developer_account_id", expiry_field="expiry_date")

# Stores feeding the renewal monitor
EXPIRY_SOURCE_STORES = {
    SourceType.SITE: sites_store,
    SourceType.HOSTING: hosting_store,
    SourceType.MOBILE_APP: mobile_apps_store,
}
