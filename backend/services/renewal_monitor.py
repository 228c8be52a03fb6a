"""Renewal monitor - wires the stores, the aggregator and the reminder scheduler together for one owner."""
from models import DispatchOutcome, DispatchStatus, ExpiringItem
from services.expiration_aggregator import aggregate, lookahead_horizon
from services.record_store import EXPIRY_SOURCE_STORES, require_owner
from services.reminder_scheduler import dispatch
from services.settings_service import get_or_create_settings
from datetime import date, datetime, timezone
from typing import Optional, List
import os
import logging

logger = logging.getLogger(__name__)

LOOKAHEAD_DAYS = int(os.getenv("REMINDER_LOOKAHEAD_DAYS", "30"))


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


async def collect_expiring_items(
    owner_id: str,
    as_of: Optional[date] = None,
    lookahead_days: int = LOOKAHEAD_DAYS
) -> List[ExpiringItem]:
    """Fetch the owner's sites, hosting accounts and mobile apps due within the window and aggregate them.

    Raises FetchFailed if any source cannot be read; no partial list is returned.
    """
    require_owner(owner_id)
    as_of = as_of or today_utc()
    horizon = lookahead_horizon(as_of, lookahead_days)

    sources = {}
    for source_type, store in EXPIRY_SOURCE_STORES.items():
        sources[source_type] = await store.list_expiring(owner_id, horizon)

    return aggregate(owner_id, as_of, sources, lookahead_days=lookahead_days)


async def run_owner_reminders(owner: dict, as_of: Optional[date] = None) -> List[DispatchOutcome]:
    """Evaluate every expiring item of one owner against their settings and send what is due today."""
    owner_id = require_owner(owner.get("user_id") if owner else None)
    settings = await get_or_create_settings(owner_id)
    items = await collect_expiring_items(owner_id, as_of=as_of)

    outcomes = []
    for item in items:
        outcomes.append(await dispatch(item, settings, owner))

    sent = sum(1 for o in outcomes if o.status == DispatchStatus.SENT)
    logger.info(f"Reminder pass for owner {owner_id}: {len(items)} expiring items, {sent} reminders sent")
    return outcomes
