from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..services import ad_service
from ..services.document_store import DocumentStore, get_store


router = APIRouter(prefix="/ads", tags=["ads"])


@router.get("")
async def active_placements(
    location: Optional[str] = Query(None, pattern="^(all-pages|home|blog|travel|community)$"),
    ad_type: Optional[str] = Query(None, alias="type"),
    store: DocumentStore = Depends(get_store),
):
    return await ad_service.active_placements(store, location=location, ad_type=ad_type)


@router.post("/{placement_id}/impression", status_code=status.HTTP_204_NO_CONTENT)
async def record_impression(placement_id: str, store: DocumentStore = Depends(get_store)):
    await ad_service.record_event(store, placement_id, "impression")


@router.post("/{placement_id}/click", status_code=status.HTTP_204_NO_CONTENT)
async def record_click(placement_id: str, store: DocumentStore = Depends(get_store)):
    await ad_service.record_event(store, placement_id, "click")
