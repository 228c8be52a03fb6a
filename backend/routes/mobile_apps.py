from fastapi import APIRouter, HTTPException, Request, status
from middleware import owner_route_guard
from models import AppPlatform
from services.portfolio_service import create_mobile_app, update_mobile_app, delete_record
from services.record_store import RenewalDeskError, mobile_apps_store
from utils.errors import store_error_response
from pydantic import BaseModel
from datetime import date
from typing import Optional
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/mobile-apps", tags=["mobile-apps"])

class CreateMobileAppRequest(BaseModel):
    app_name: str
    platform: AppPlatform = AppPlatform.BOTH
    client_id: str
    app_domain: Optional[str] = None
    date_created: Optional[str] = None
    renewal_date: Optional[date] = None
    ios_developer_account_id: Optional[str] = None
    google_developer_account_id: Optional[str] = None
    apple_live_url: Optional[str] = None
    google_live_url: Optional[str] = None
    app_cost: float = 0
    amount_spent: float = 0
    status: Optional[str] = None
    version: Optional[str] = None

class UpdateMobileAppRequest(BaseModel):
    app_name: Optional[str] = None
    platform: Optional[AppPlatform] = None
    client_id: Optional[str] = None
    app_domain: Optional[str] = None
    date_created: Optional[str] = None
    renewal_date: Optional[date] = None
    ios_developer_account_id: Optional[str] = None
    google_developer_account_id: Optional[str] = None
    apple_live_url: Optional[str] = None
    google_live_url: Optional[str] = None
    app_cost: Optional[float] = None
    amount_spent: Optional[float] = None
    status: Optional[str] = None
    version: Optional[str] = None

@router.get("")
async def list_mobile_apps(request: Request):
    owner_id = await owner_route_guard(request)

    try:
        apps = await mobile_apps_store.list_for_owner(owner_id)
        return {"mobile_apps": apps}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to fetch mobile apps. Please try again later.")

@router.post("")
async def add_mobile_app(request: Request, data: CreateMobileAppRequest):
    """Create a mobile app and register its domain as a site."""
    owner_id = await owner_route_guard(request)

    try:
        app = await create_mobile_app(owner_id, data.model_dump(mode="json"))
        return {"message": "Mobile app added successfully", "mobile_app": app}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to add mobile app. Please try again.")

@router.put("/{app_id}")
async def edit_mobile_app(request: Request, app_id: str, data: UpdateMobileAppRequest):
    owner_id = await owner_route_guard(request)

    try:
        app = await update_mobile_app(owner_id, app_id, data.model_dump(mode="json", exclude_unset=True))
        if not app:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Mobile app not found"
            )
        return {"message": "Mobile app updated successfully", "mobile_app": app}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to update mobile app. Please try again.")

@router.delete("/{app_id}")
async def remove_mobile_app(request: Request, app_id: str):
    owner_id = await owner_route_guard(request)

    try:
        if not await delete_record(mobile_apps_store, owner_id, app_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Mobile app not found"
            )
        return {"message": "Mobile app deleted successfully"}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to delete mobile app. Please try again.")
