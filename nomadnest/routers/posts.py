from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_active_user, get_current_admin_user
from ..exceptions import DocumentNotFoundError
from ..schemas import PostCreate, PostUpdate, CommentCreate, LikeResponse, Paginated
from ..services import blog_service
from ..services.document_store import DocumentStore, get_store
from ..services.jwt_service import JWTService


router = APIRouter(prefix="/posts", tags=["posts"])
comments_router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("", response_model=Paginated)
async def list_posts(
    category: Optional[str] = Query(None, description="Category name, or All"),
    search: Optional[str] = Query(None, description="Matches title or excerpt"),
    topic: Optional[str] = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    store: DocumentStore = Depends(get_store),
):
    items, total = await blog_service.list_posts(
        store, category=category, search=search, topic=topic,
        status="published", limit=limit, offset=offset,
    )
    return Paginated(items=items, total=total, limit=limit, offset=offset)


def _hide_draft(post: dict, current_user: Optional[dict], lookup: str) -> None:
    is_admin = bool(current_user and current_user.get("role") == "admin")
    if post.get("status") == "draft" and not is_admin:
        raise DocumentNotFoundError(blog_service.POSTS, lookup, "Post")


@router.get("/{id_or_slug}")
async def get_post(
    id_or_slug: str,
    store: DocumentStore = Depends(get_store),
    current_user: Optional[dict] = Depends(JWTService.get_optional_user),
):
    post = await blog_service.get_post(store, id_or_slug)
    _hide_draft(post, current_user, id_or_slug)
    return post


@router.get("/{post_id}/related")
async def related_posts(
    post_id: str,
    limit: int = Query(3, ge=1, le=20),
    store: DocumentStore = Depends(get_store),
    current_user: Optional[dict] = Depends(JWTService.get_optional_user),
):
    post = await blog_service.get_post(store, post_id)
    _hide_draft(post, current_user, post_id)
    return await blog_service.related_posts(store, post, limit)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: PostCreate,
    store: DocumentStore = Depends(get_store),
    admin: dict = Depends(get_current_admin_user),
):
    data = payload.model_dump(exclude_none=True)
    data.setdefault("author", {"name": admin.get("name"), "avatar": admin.get("avatar")})
    return await blog_service.create_post(store, data)


@router.put("/{post_id}")
async def update_post(
    post_id: str,
    payload: PostUpdate,
    store: DocumentStore = Depends(get_store),
    admin: dict = Depends(get_current_admin_user),
):
    return await blog_service.update_post(store, post_id, payload.model_dump(exclude_none=True))


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: str,
    store: DocumentStore = Depends(get_store),
    admin: dict = Depends(get_current_admin_user),
):
    await blog_service.delete_post(store, post_id)


@router.post("/{post_id}/like", response_model=LikeResponse)
async def like_post(
    post_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(get_active_user),
):
    return await blog_service.toggle_post_like(store, post_id, current_user["id"])


@router.get("/{post_id}/comments")
async def list_comments(post_id: str, store: DocumentStore = Depends(get_store)):
    return await blog_service.list_comments(store, post_id)


@router.post("/{post_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    post_id: str,
    payload: CommentCreate,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(get_active_user),
):
    return await blog_service.add_comment(store, post_id, current_user, payload.content)


@comments_router.post("/{comment_id}/replies", status_code=status.HTTP_201_CREATED)
async def add_reply(
    comment_id: str,
    payload: CommentCreate,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(get_active_user),
):
    return await blog_service.add_reply(store, comment_id, current_user, payload.content)


@comments_router.post("/{comment_id}/like")
async def like_comment(
    comment_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(get_active_user),
):
    return await blog_service.like_comment(store, comment_id)
