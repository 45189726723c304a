from fastapi import APIRouter, Depends, status

from ..services import notification_service
from ..services.document_store import DocumentStore, get_store
from ..services.jwt_service import JWTService


router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
async def list_notifications(
    unread_only: bool = False,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await notification_service.list_notifications(store, current_user["id"], unread_only)


@router.get("/unread-count")
async def unread_count(
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return {"count": await notification_service.unread_count(store, current_user["id"])}


@router.post("/read-all")
async def mark_all_read(
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return {"updated": await notification_service.mark_all_read(store, current_user["id"])}


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await notification_service.mark_read(store, notification_id, current_user["id"])


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    await notification_service.delete_notification(store, notification_id, current_user["id"])
