from fastapi import APIRouter, HTTPException, Request, status
from middleware import owner_route_guard
from models import DeveloperAccountType
from services.portfolio_service import (
    create_developer_account, list_developer_accounts, update_record, delete_record
)
from services.record_store import RenewalDeskError, developer_accounts_store
from utils.errors import store_error_response
from pydantic import BaseModel
from datetime import date
from typing import Optional
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/developer-accounts", tags=["developer-accounts"])

class CreateDeveloperAccountRequest(BaseModel):
    account_type: DeveloperAccountType = DeveloperAccountType.APPLE
    email: str
    mobile_number: Optional[str] = None
    expiry_date: Optional[date] = None
    duns: Optional[str] = None
    company_name: Optional[str] = None
    date_created: Optional[str] = None
    status: str = "pending approval"

class UpdateDeveloperAccountRequest(BaseModel):
    account_type: Optional[DeveloperAccountType] = None
    email: Optional[str] = None
    mobile_number: Optional[str] = None
    expiry_date: Optional[date] = None
    duns: Optional[str] = None
    company_name: Optional[str] = None
    date_created: Optional[str] = None
    status: Optional[str] = None

@router.get("")
async def list_accounts(request: Request):
    """List developer accounts with the number of mobile apps published under each."""
    owner_id = await owner_route_guard(request)

    try:
        accounts = await list_developer_accounts(owner_id)
        return {"developer_accounts": accounts}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to fetch developer accounts. Please try again later.")

@router.post("")
async def add_account(request: Request, data: CreateDeveloperAccountRequest):
    owner_id = await owner_route_guard(request)

    try:
        account = await create_developer_account(owner_id, data.model_dump(mode="json"))
        return {"message": "Developer account added successfully", "developer_account": account}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to add developer account. Please try again.")

@router.put("/{developer_account_id}")
async def edit_account(request: Request, developer_account_id: str, data: UpdateDeveloperAccountRequest):
    owner_id = await owner_route_guard(request)

    try:
        account = await update_record(
            developer_accounts_store, owner_id, developer_account_id,
            data.model_dump(mode="json", exclude_unset=True)
        )
        if not account:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Developer account not found"
            )
        return {"message": "Developer account updated successfully", "developer_account": account}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to update developer account. Please try again.")

@router.delete("/{developer_account_id}")
async def remove_account(request: Request, developer_account_id: str):
    owner_id = await owner_route_guard(request)

    try:
        if not await delete_record(developer_accounts_store, owner_id, developer_account_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Developer account not found"
            )
        return {"message": "Developer account deleted successfully"}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to delete developer account. Please try again.")
