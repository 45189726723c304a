from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_current_admin_user
from ..schemas import CategoryCreate, CategoryUpdate, TopicCreate, TopicUpdate
from ..services import taxonomy_service
from ..services.document_store import DocumentStore, get_store


router = APIRouter(tags=["taxonomy"])


@router.get("/categories")
async def list_categories(store: DocumentStore = Depends(get_store)):
    return await taxonomy_service.list_categories(store)


@router.get("/categories/{category_id}")
async def get_category(category_id: str, store: DocumentStore = Depends(get_store)):
    return await taxonomy_service.get_category(store, category_id)


@router.post("/categories", status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    store: DocumentStore = Depends(get_store),
    admin: dict = Depends(get_current_admin_user),
):
    return await taxonomy_service.create_category(store, payload.model_dump(exclude_none=True))


@router.put("/categories/{category_id}")
async def update_category(
    category_id: str,
    payload: CategoryUpdate,
    store: DocumentStore = Depends(get_store),
    admin: dict = Depends(get_current_admin_user),
):
    return await taxonomy_service.update_category(store, category_id, payload.model_dump(exclude_none=True))


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: str,
    store: DocumentStore = Depends(get_store),
    admin: dict = Depends(get_current_admin_user),
):
    await taxonomy_service.delete_category(store, category_id)


@router.get("/topics")
async def list_topics(store: DocumentStore = Depends(get_store)):
    return await taxonomy_service.list_topics(store)


@router.get("/topics/trending")
async def trending_topics(
    limit: int = Query(10, ge=1, le=100),
    store: DocumentStore = Depends(get_store),
):
    return await taxonomy_service.trending_topics(store, limit)


@router.post("/topics", status_code=status.HTTP_201_CREATED)
async def create_topic(
    payload: TopicCreate,
    store: DocumentStore = Depends(get_store),
    admin: dict = Depends(get_current_admin_user),
):
    return await taxonomy_service.create_topic(store, payload.model_dump(exclude_none=True))


@router.put("/topics/{topic_id}")
async def update_topic(
    topic_id: str,
    payload: TopicUpdate,
    store: DocumentStore = Depends(get_store),
    admin: dict = Depends(get_current_admin_user),
):
    return await taxonomy_service.update_topic(store, topic_id, payload.model_dump(exclude_none=True))


@router.delete("/topics/{topic_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_topic(
    topic_id: str,
    store: DocumentStore = Depends(get_store),
    admin: dict = Depends(get_current_admin_user),
):
    await taxonomy_service.delete_topic(store, topic_id)
