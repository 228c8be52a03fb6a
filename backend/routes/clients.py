"""Client Routes - the agency's customers that mobile apps are built for."""
from fastapi import APIRouter, HTTPException, Request, status
from middleware import owner_route_guard
from services.portfolio_service import create_client, update_record, delete_record
from services.record_store import RenewalDeskError, clients_store
from utils.errors import store_error_response
from pydantic import BaseModel
from typing import Optional
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/clients", tags=["clients"])

class CreateClientRequest(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None

class UpdateClientRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

@router.get("")
async def list_clients(request: Request):
    owner_id = await owner_route_guard(request)

    try:
        clients = await clients_store.list_for_owner(owner_id)
        return {"clients": clients}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to fetch clients. Please try again later.")

@router.post("")
async def add_client(request: Request, data: CreateClientRequest):
    owner_id = await owner_route_guard(request)

    try:
        client = await create_client(owner_id, data.model_dump())
        return {"message": "Client added successfully", "client": client}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to add client. Please try again.")

@router.put("/{client_id}")
async def edit_client(request: Request, client_id: str, data: UpdateClientRequest):
    owner_id = await owner_route_guard(request)

    try:
        client = await update_record(clients_store, owner_id, client_id, data.model_dump(exclude_unset=True))
        if not client:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Client not found"
            )
        return {"message": "Client updated successfully", "client": client}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to update client. Please try again.")

@router.delete("/{client_id}")
async def remove_client(request: Request, client_id: str):
    owner_id = await owner_route_guard(request)

    try:
        if not await delete_record(clients_store, owner_id, client_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Client not found"
            )
        return {"message": "Client deleted successfully"}
    except RenewalDeskError as e:
        raise store_error_response(e, "Failed to delete client. Please try again.")
