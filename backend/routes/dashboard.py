from fastapi import APIRouter, Request
from middleware import owner_route_guard
from models import DashboardSummary, UrgencyTier
from services.record_store import (
    RenewalDeskError, clients_store, sites_store, hosting_store, mobile_apps_store, developer_accounts_store
)
from services.renewal_monitor import collect_expiring_items
from utils.errors import store_error_response
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

COUNTED_STORES = {
    "clients": clients_store,
    "sites": sites_store,
    "hosting_accounts": hosting_store,
    "mobile_apps": mobile_apps_store,
    "developer_accounts": developer_accounts_store,
}

@router.get("/summary", response_model=DashboardSummary)
async def get_summary(request: Request):
    """Record counts and expiring items per urgency tier."""
    owner_id = await owner_route_guard(request)

    try:
        counts = {}
        for name, store in COUNTED_STORES.items():
            counts[name] = await store.count_for_owner(owner_id)

        items = await collect_expiring_items(owner_id)
        by_urgency = {tier.value: 0 for tier in UrgencyTier}
        for item in items:
            if item.urgency:
                by_urgency[item.urgency.value] += 1

        return DashboardSummary(
            counts=counts,
            expiring_by_urgency=by_urgency,
            expiring_total=len(items)
        )
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to load dashboard. Please try again later.")
