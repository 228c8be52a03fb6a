"""Hosting Account Routes

Hosting accounts carry the renewal date of the server plan; the list adds
an ``expiring_soon`` flag for rows due within 30 days (expired included).
"""
from fastapi import APIRouter, HTTPException, Request, status
from middleware import owner_route_guard
from models import HostType, HostingStatus
from services.portfolio_service import (
    create_hosting_account, create_quick_host, list_hosting_accounts, update_record, delete_record
)
from services.record_store import RenewalDeskError, hosting_store
from services.renewal_monitor import today_utc
from utils.errors import store_error_response
from pydantic import BaseModel
from datetime import date
from typing import Optional
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/hosting", tags=["hosting"])

class CreateHostingRequest(BaseModel):
    provider: str
    server_login_url: Optional[str] = None
    host_type: HostType = HostType.SHARED
    username: Optional[str] = None
    email: Optional[str] = None
    password_hint: Optional[str] = None
    expiration_date: Optional[date] = None
    status: HostingStatus = HostingStatus.ACTIVE

class UpdateHostingRequest(BaseModel):
    provider: Optional[str] = None
    server_login_url: Optional[str] = None
    host_type: Optional[HostType] = None
    username: Optional[str] = None
    email: Optional[str] = None
    password_hint: Optional[str] = None
    expiration_date: Optional[date] = None
    status: Optional[HostingStatus] = None

class QuickHostRequest(BaseModel):
    provider: str

@router.get("")
async def list_hosting(request: Request):
    owner_id = await owner_route_guard(request)

    try:
        accounts = await list_hosting_accounts(owner_id, today_utc())
        return {"hosting_accounts": accounts}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to fetch hosting accounts. Please try again later.")

@router.post("")
async def add_hosting(request: Request, data: CreateHostingRequest):
    owner_id = await owner_route_guard(request)

    try:
        account = await create_hosting_account(owner_id, data.model_dump(mode="json"))
        return {"message": "Hosting account added successfully", "hosting_account": account}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to add hosting account. Please try again.")

@router.post("/quick")
async def add_quick_host(request: Request, data: QuickHostRequest):
    """Add a provider-only host from the site form."""
    owner_id = await owner_route_guard(request)

    if not data.provider.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Provider is required"
        )

    try:
        account = await create_quick_host(owner_id, data.provider.strip())
        return {"message": "Host added successfully", "hosting_account": account}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to add host. Please try again.")

@router.put("/{hosting_account_id}")
async def edit_hosting(request: Request, hosting_account_id: str, data: UpdateHostingRequest):
    owner_id = await owner_route_guard(request)

    try:
        account = await update_record(
            hosting_store, owner_id, hosting_account_id, data.model_dump(mode="json", exclude_unset=True)
        )
        if not account:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Hosting account not found"
            )
        return {"message": "Hosting account updated successfully", "hosting_account": account}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to update hosting account. Please try again.")

@router.delete("/{hosting_account_id}")
async def remove_hosting(request: Request, hosting_account_id: str):
    owner_id = await owner_route_guard(request)

    try:
        if not await delete_record(hosting_store, owner_id, hosting_account_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Hosting account not found"
            )
        return {"message": "Hosting account deleted successfully"}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to delete hosting account. Please try again.")
