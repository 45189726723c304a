from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_active_user
from ..schemas import (
    ProfileUpdate,
    CommunityPostCreate,
    CommentCreate,
    LikeResponse,
    GroupCreate,
    EventCreate,
    BuddyRequestCreate,
    MatchPreferences,
    MatchResponse,
)
from ..services import community_service, matching_service, moderation_service
from ..services.document_store import DocumentStore, get_store
from ..services.jwt_service import JWTService


router = APIRouter(prefix="/community", tags=["community"])


# Profiles and connections

@router.get("/profiles/{user_id}")
async def get_profile(user_id: str, store: DocumentStore = Depends(get_store)):
    return await community_service.get_profile(store, user_id)


@router.put("/profile")
async def update_profile(
    payload: ProfileUpdate,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(get_active_user),
):
    return await community_service.update_profile(
        store, current_user["id"], payload.model_dump(exclude_none=True))


@router.post("/connect/{user_id}")
async def connect(
    user_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(get_active_user),
):
    return await community_service.connect(store, current_user, user_id)


@router.get("/connections")
async def list_connections(
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await community_service.list_connections(store, current_user["id"])


# Feed

@router.get("/posts")
async def list_feed(
    tag: Optional[str] = None,
    store: DocumentStore = Depends(get_store),
    current_user: Optional[dict] = Depends(JWTService.get_optional_user),
):
    viewer_id = current_user["id"] if current_user else None
    return await community_service.list_feed(store, viewer_id, tag=tag)


@router.post("/posts", status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: CommunityPostCreate,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(get_active_user),
):
    return await community_service.create_community_post(store, current_user, payload.model_dump())


@router.post("/posts/{post_id}/like", response_model=LikeResponse)
async def like_post(
    post_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(get_active_user),
):
    return await community_service.toggle_like(store, post_id, current_user["id"])


@router.post("/posts/{post_id}/save")
async def save_post(
    post_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(get_active_user),
):
    return await community_service.toggle_save(store, post_id, current_user["id"])


@router.get("/saved")
async def list_saved(
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await community_service.list_saved(store, current_user["id"])


@router.get("/posts/{post_id}/comments")
async def list_comments(post_id: str, store: DocumentStore = Depends(get_store)):
    return await community_service.list_post_comments(store, post_id)


@router.post("/posts/{post_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    post_id: str,
    payload: CommentCreate,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(get_active_user),
):
    return await community_service.add_post_comment(store, post_id, current_user, payload.content)


# Groups

@router.get("/groups")
async def list_groups(
    category: Optional[str] = None,
    featured: Optional[bool] = None,
    store: DocumentStore = Depends(get_store),
):
    return await community_service.list_groups(store, category, featured)


@router.post("/groups", status_code=status.HTTP_201_CREATED)
async def create_group(
    payload: GroupCreate,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(get_active_user),
):
    return await community_service.create_group(store, current_user, payload.model_dump())


@router.get("/groups/{group_id}")
async def get_group(group_id: str, store: DocumentStore = Depends(get_store)):
    return await community_service.get_group(store, group_id)


@router.post("/groups/{group_id}/join")
async def join_group(
    group_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(get_active_user),
):
    return await community_service.join_group(store, group_id, current_user["id"])


@router.post("/groups/{group_id}/leave")
async def leave_group(
    group_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(get_active_user),
):
    return await community_service.leave_group(store, group_id, current_user["id"])


# Events

@router.get("/events")
async def list_events(
    status: Optional[str] = Query(None, pattern="^(upcoming|ongoing|completed|canceled)$"),
    store: DocumentStore = Depends(get_store),
):
    return await community_service.list_events(store, status)


@router.post("/events", status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: EventCreate,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(get_active_user),
):
    return await community_service.create_event(store, current_user, payload.model_dump())


@router.post("/events/{event_id}/attend")
async def attend_event(
    event_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(get_active_user),
):
    return await community_service.attend_event(store, event_id, current_user)


# Travel buddies

@router.get("/buddy-requests")
async def list_buddy_requests(
    destination: Optional[str] = None,
    store: DocumentStore = Depends(get_store),
):
    return await community_service.list_buddy_requests(store, destination)


@router.post("/buddy-requests", status_code=status.HTTP_201_CREATED)
async def create_buddy_request(
    payload: BuddyRequestCreate,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(get_active_user),
):
    return await community_service.create_buddy_request(store, current_user, payload.model_dump())


@router.post("/buddy-requests/{request_id}/close")
async def close_buddy_request(
    request_id: str,
    cancelled: bool = False,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(get_active_user),
):
    return await community_service.close_buddy_request(
        store, request_id, current_user["id"], "cancelled" if cancelled else "completed")


# Matching

@router.put("/matching/preferences")
async def save_match_preferences(
    payload: MatchPreferences,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(get_active_user),
):
    return await matching_service.save_preferences(store, current_user["id"], payload.model_dump())


@router.get("/matching/matches")
async def find_matches(
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await matching_service.find_matches(store, current_user["id"])


@router.post("/matching/matches/{other_id}")
async def respond_to_match(
    other_id: str,
    payload: MatchResponse,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(get_active_user),
):
    return await matching_service.respond_to_match(store, current_user["id"], other_id, payload.accepted)


# Own moderation warnings

@router.get("/warnings")
async def my_warnings(
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await moderation_service.user_warnings(store, current_user["id"])


@router.post("/warnings/{warning_id}/acknowledge")
async def acknowledge_warning(
    warning_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await moderation_service.acknowledge_warning(store, warning_id, current_user["id"])
