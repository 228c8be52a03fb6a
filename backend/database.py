from motor.motor_asyncio import AsyncIOMotorClient
from dotenv import load_dotenv
import os
import logging
from pathlib import Path

ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

logger = logging.getLogger(__name__)

# Owner-scoped record collections and their primary id field
RECORD_COLLECTIONS = {
    "clients": "client_id",
    "sites": "site_id",
    "hosting_accounts": "hosting_account_id",
    "mobile_apps": "app_id",
    "developer_accounts": "developer_account_id",
}

class Database:
    client: AsyncIOMotorClient = None
    db = None

    async def connect(self):
        try:
            mongo_url = os.environ['MONGO_URL']
            self.client = AsyncIOMotorClient(mongo_url)
            self.db = self.client[os.environ['DB_NAME']]
            # Verify connection
            await self.db.command("ping")
            logger.info(f"Connected to MongoDB: {os.environ['DB_NAME']}")

            await self._create_indexes()
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    async def close(self):
        if self.client:
            self.client.close()
            logger.info("MongoDB connection closed")

    def get_db(self):
        return self.db

    async def _create_indexes(self):
        """Create MongoDB indexes for owner-scoped lookups and expiry range queries."""
        await create_indexes(self.db)

async def create_indexes(db):
    # At most one settings document per owner; backs the get-or-create upsert
    try:
        await db.notification_settings.create_index("owner_id", unique=True)
    except Exception as e:
        logger.error(f"Unique notification_settings.owner_id index not created: {e}")

    try:
        try:
            await db.users.create_index("email", unique=True)
        except Exception:
            pass  # Index may already exist with different options
        await db.users.create_index("user_id", unique=True)

        for collection_name, id_field in RECORD_COLLECTIONS.items():
            collection = db[collection_name]
            await collection.create_index(id_field, unique=True)
            await collection.create_index("owner_id")

        # Expiry range queries: owner = X and expiry <= Y
        await db.sites.create_index([("owner_id", 1), ("expiration_date", 1)])
        await db.hosting_accounts.create_index([("owner_id", 1), ("expiration_date", 1)])
        await db.mobile_apps.create_index([("owner_id", 1), ("renewal_date", 1)])

        await db.audit_logs.create_index([("owner_id", 1), ("timestamp", -1)])
        await db.audit_logs.create_index("action")
        await db.message_logs.create_index([("owner_id", 1), ("created_at", -1)])
        await db.message_logs.create_index([("status", 1), ("created_at", -1)])
        logger.info("MongoDB indexes created/verified")
    except Exception as e:
        # Indexes may already exist, log but don't fail
        logger.warning(f"Index creation note: {e}")

# Global database instance
database = Database()

