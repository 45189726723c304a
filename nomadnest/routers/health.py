from fastapi import APIRouter, Depends
from ..config import settings
from ..services.document_store import DocumentStore, get_store

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(store: DocumentStore = Depends(get_store)):
    return {
        "status": "ok",
        "app": settings.app_name,
        "debug": settings.debug,
        "collections": await store.list_collections(),
    }
