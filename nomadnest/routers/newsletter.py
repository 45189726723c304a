from fastapi import APIRouter, Depends, status

from ..schemas import NewsletterSubscribe
from ..services import newsletter_service
from ..services.document_store import DocumentStore, get_store


router = APIRouter(prefix="/newsletter", tags=["newsletter"])


@router.post("/subscribe", status_code=status.HTTP_201_CREATED)
async def subscribe(payload: NewsletterSubscribe, store: DocumentStore = Depends(get_store)):
    return await newsletter_service.subscribe(store, payload.model_dump())


@router.post("/unsubscribe")
async def unsubscribe(email: str, store: DocumentStore = Depends(get_store)):
    subscriber = await newsletter_service.unsubscribe(store, email)
    return {"email": subscriber["email"], "active": subscriber["active"]}
