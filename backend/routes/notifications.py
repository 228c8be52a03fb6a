"""Notification Routes
Expiring-items overview, reminder settings, and an on-demand reminder pass.
"""
from fastapi import APIRouter, HTTPException, Request, status
from database import database
from middleware import require_auth
from services.record_store import RenewalDeskError, FetchFailed
from services.renewal_monitor import collect_expiring_items, run_owner_reminders
from services.settings_service import get_or_create_settings, update_settings
from utils.errors import store_error_response
from pydantic import BaseModel
from typing import Optional
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/notifications", tags=["notifications"])

EXPIRING_FETCH_ERROR = "Failed to fetch sites. Please try again later."

class LeadTimesRequest(BaseModel):
    one_month: Optional[bool] = None
    two_weeks: Optional[bool] = None
    three_days: Optional[bool] = None
    on_expiry_day: Optional[bool] = None

class UpdateSettingsRequest(BaseModel):
    email_enabled: Optional[bool] = None
    lead_times: Optional[LeadTimesRequest] = None

@router.get("/expiring")
async def get_expiring_items(request: Request):
    """Unified list of sites, hosting accounts and mobile apps expiring within the lookahead window.

    A storage failure does not fail the request: the list comes back
    empty with a user-facing error message instead.
    """
    user = await require_auth(request)

    try:
        items = await collect_expiring_items(user["user_id"])
        return {
            "items": [
                {**item.model_dump(mode="json"), "urgency_label": item.urgency_label}
                for item in items
            ],
            "error": None
        }
    except FetchFailed as e:
        logger.error(f"Expiring items fetch failed for owner {user['user_id']}: {e}")
        return {"items": [], "error": EXPIRING_FETCH_ERROR}
    except RenewalDeskError as e:
        raise store_error_response(e, EXPIRING_FETCH_ERROR)

@router.get("/settings")
async def get_settings(request: Request):
    """Get reminder settings, creating the defaults on first access."""
    user = await require_auth(request)

    try:
        settings = await get_or_create_settings(user["user_id"])
        return settings.model_dump(mode="json")
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to load notification settings")

@router.put("/settings")
async def put_settings(request: Request, data: UpdateSettingsRequest):
    user = await require_auth(request)

    try:
        settings = await update_settings(
            user["user_id"],
            email_enabled=data.email_enabled,
            lead_times=data.lead_times.model_dump() if data.lead_times else None
        )
        return {
            "message": "Notification settings updated successfully",
            "settings": settings.model_dump(mode="json")
        }
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to update notification settings")

@router.post("/dispatch")
async def dispatch_reminders(request: Request):
    """Run the reminder pass for the current owner now."""
    user = await require_auth(request)
    db = database.get_db()

    try:
        owner = await db.users.find_one(
            {"user_id": user["user_id"]},
            {"_id": 0, "user_id": 1, "email": 1}
        )
        if not owner:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )

        outcomes = await run_owner_reminders(owner)
        return {"outcomes": [o.model_dump(mode="json") for o in outcomes]}

    except HTTPException:
        raise
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to run reminders. Please try again later.")
    except Exception as e:
        logger.error(f"Reminder dispatch error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to run reminders. Please try again later."
        )
