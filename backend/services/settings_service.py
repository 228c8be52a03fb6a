"""Per-owner reminder settings: one document per owner, created on first access."""
from database import database
from models import ReminderSettings, LeadTime, AuditAction
from services.record_store import FetchFailed, WriteFailed, require_owner
from utils.audit import create_audit_log
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError
from datetime import datetime, timezone
from typing import Optional, Dict
import logging

logger = logging.getLogger(__name__)


async def get_or_create_settings(owner_id: str) -> ReminderSettings:
    """Return the owner's settings, creating the all-enabled defaults if none exist.

    The upsert is atomic and notification_settings has a unique index on
    owner_id, so concurrent first calls converge on a single document.
    """
    require_owner(owner_id)
    db = database.get_db()

    defaults = ReminderSettings(owner_id=owner_id).model_dump(mode="json")
    defaults.pop("owner_id")

    try:
        try:
            doc = await db.notification_settings.find_one_and_update(
                {"owner_id": owner_id},
                {"$setOnInsert": defaults},
                upsert=True,
                return_document=ReturnDocument.AFTER,
                projection={"_id": 0}
            )
        except DuplicateKeyError:
            # Lost the insert race to a concurrent first call; read the winner
            doc = await db.notification_settings.find_one({"owner_id": owner_id}, {"_id": 0})
    except PyMongoError as e:
        logger.error(f"Failed to load notification settings for owner {owner_id}: {e}")
        raise FetchFailed("Failed to fetch notification settings") from e

    settings = ReminderSettings(**doc)

    if settings.settings_id == defaults["settings_id"]:
        logger.info(f"Default notification settings created for owner {owner_id}")
        await create_audit_log(
            action=AuditAction.SETTINGS_CREATED,
            owner_id=owner_id,
            resource_type="notification_settings",
            resource_id=settings.settings_id,
            after_state=doc
        )

    return settings


async def update_settings(
    owner_id: str,
    email_enabled: Optional[bool] = None,
    lead_times: Optional[Dict[str, Optional[bool]]] = None
) -> ReminderSettings:
    """Apply a partial update; fields left as None keep their stored value."""
    current = await get_or_create_settings(owner_id)
    before_state = current.model_dump(mode="json")

    update_fields = {}
    if email_enabled is not None:
        update_fields["email_enabled"] = email_enabled
    for lead_time in LeadTime:
        value = (lead_times or {}).get(lead_time.value)
        if value is not None:
            update_fields[f"lead_times.{lead_time.value}"] = value

    if not update_fields:
        return current

    update_fields["updated_at"] = datetime.now(timezone.utc).isoformat()

    db = database.get_db()
    try:
        doc = await db.notification_settings.find_one_and_update(
            {"owner_id": owner_id},
            {"$set": update_fields},
            return_document=ReturnDocument.AFTER,
            projection={"_id": 0}
        )
    except PyMongoError as e:
        logger.error(f"Failed to update notification settings for owner {owner_id}: {e}")
        raise WriteFailed("Failed to update notification settings") from e

    updated = ReminderSettings(**doc)

    await create_audit_log(
        action=AuditAction.SETTINGS_UPDATED,
        actor_id=owner_id,
        owner_id=owner_id,
        resource_type="notification_settings",
        resource_id=updated.settings_id,
        before_state=before_state,
        after_state=updated.model_dump(mode="json"),
        metadata={"action": "notification_settings_updated"}
    )

    logger.info(f"Notification settings updated for owner {owner_id}")
    return updated
