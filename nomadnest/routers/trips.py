from typing import Optional

from fastapi import APIRouter, Depends
from fastapi import status as http_status

from ..schemas import TripCreate, TripUpdate, TripQuota
from ..services import trip_service
from ..services.document_store import DocumentStore, get_store
from ..services.jwt_service import JWTService


router = APIRouter(prefix="/trips", tags=["trips"])


@router.get("")
async def list_trips(
    status: Optional[str] = None,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await trip_service.list_trips(store, current_user["id"], status)


@router.get("/quota", response_model=TripQuota)
async def get_quota(
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await trip_service.get_trip_quota(store, current_user["id"])


@router.get("/{trip_id}")
async def get_trip(
    trip_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await trip_service.get_trip(store, trip_id, current_user["id"])


@router.post("", status_code=http_status.HTTP_201_CREATED)
async def create_trip(
    payload: TripCreate,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await trip_service.create_trip(store, current_user["id"], payload.model_dump(exclude_none=True))


@router.put("/{trip_id}")
async def update_trip(
    trip_id: str,
    payload: TripUpdate,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await trip_service.update_trip(
        store, trip_id, current_user["id"], payload.details.model_dump(exclude_none=True))


@router.post("/{trip_id}/cancel")
async def cancel_trip(
    trip_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await trip_service.cancel_trip(store, trip_id, current_user["id"])


@router.delete("/{trip_id}", status_code=http_status.HTTP_204_NO_CONTENT)
async def delete_trip(
    trip_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    await trip_service.delete_trip(store, trip_id, current_user["id"])
