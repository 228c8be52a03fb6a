"""Site Routes - websites and domains the agency maintains."""
from fastapi import APIRouter, HTTPException, Request, status
from middleware import owner_route_guard
from services.portfolio_service import create_site, update_site, delete_record
from services.record_store import RenewalDeskError, sites_store
from utils.errors import store_error_response
from pydantic import BaseModel
from datetime import date
from typing import Optional
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/sites", tags=["sites"])

class CreateSiteRequest(BaseModel):
    name: str
    type: Optional[str] = None
    url: Optional[str] = None
    host_id: str
    domain_purchased_from: Optional[str] = None
    expiration_date: Optional[date] = None
    name_changed: bool = False
    old_domain_name: Optional[str] = None
    old_domain_expiration_date: Optional[date] = None
    amount_paid: float = 0
    amount_used_for_creation: float = 0

class UpdateSiteRequest(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    url: Optional[str] = None
    host_id: Optional[str] = None
    domain_purchased_from: Optional[str] = None
    expiration_date: Optional[date] = None
    name_changed: Optional[bool] = None
    old_domain_name: Optional[str] = None
    old_domain_expiration_date: Optional[date] = None
    amount_paid: Optional[float] = None
    amount_used_for_creation: Optional[float] = None

@router.get("")
async def list_sites(request: Request):
    owner_id = await owner_route_guard(request)

    try:
        sites = await sites_store.list_for_owner(owner_id)
        return {"sites": sites}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to fetch sites. Please try again later.")

@router.post("")
async def add_site(request: Request, data: CreateSiteRequest):
    """Create a site; host_name is copied from the selected hosting account."""
    owner_id = await owner_route_guard(request)

    try:
        site = await create_site(owner_id, data.model_dump(mode="json"))
        return {"message": "Site added successfully", "site": site}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to add site. Please try again.")

@router.put("/{site_id}")
async def edit_site(request: Request, site_id: str, data: UpdateSiteRequest):
    owner_id = await owner_route_guard(request)

    try:
        site = await update_site(owner_id, site_id, data.model_dump(mode="json", exclude_unset=True))
        if not site:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Site not found"
            )
        return {"message": "Site updated successfully", "site": site}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to update site. Please try again.")

@router.delete("/{site_id}")
async def remove_site(request: Request, site_id: str):
    owner_id = await owner_route_guard(request)

    try:
        if not await delete_record(sites_store, owner_id, site_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Site not found"
            )
        return {"message": "Site deleted successfully"}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to delete site. Please try again.")
