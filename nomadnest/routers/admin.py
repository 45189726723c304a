"""
Back-office endpoints. Every route requires an admin token.
"""
import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import Response

from ..dependencies import get_current_admin_user
from ..schemas import (
    AdDailyStats,
    AdPlacementCreate,
    AdPlacementUpdate,
    AdToggle,
    AppearanceUpdate,
    BookingStatusUpdate,
    Paginated,
    RestoreResponse,
    ThemeUpdate,
    UserBlock,
)
from ..services import (
    ad_service,
    auth_service,
    backup_service,
    blog_service,
    community_service,
    dashboard_service,
    moderation_service,
    newsletter_service,
    settings_service,
    theme_service,
    travel_service,
)
from ..services.document_store import DocumentStore, get_store
from ..utils import public_user


router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(get_current_admin_user)],
)


@router.get("/dashboard")
async def dashboard(store: DocumentStore = Depends(get_store)):
    return await dashboard_service.dashboard_stats(store)


# Content

@router.get("/posts", response_model=Paginated)
async def list_posts(
    post_status: Optional[str] = Query(None, alias="status", pattern="^(published|draft)$"),
    category: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    store: DocumentStore = Depends(get_store),
):
    items, total = await blog_service.list_posts(
        store, category=category, search=search, status=post_status, limit=limit, offset=offset)
    return Paginated(items=items, total=total, limit=limit, offset=offset)


@router.get("/comments")
async def list_comments(
    post_id: Optional[str] = Query(None, alias="postId"),
    store: DocumentStore = Depends(get_store),
):
    return await blog_service.list_all_comments(store, post_id)


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(comment_id: str, store: DocumentStore = Depends(get_store)):
    await blog_service.delete_comment(store, comment_id)


# Settings

@router.get("/settings")
async def get_settings(store: DocumentStore = Depends(get_store)):
    return await settings_service.get_settings(store)


@router.put("/settings")
async def save_settings(
    payload: Dict[str, Dict[str, Any]] = Body(...),
    store: DocumentStore = Depends(get_store),
):
    return await settings_service.save_settings(store, payload)


@router.get("/settings/{path}")
async def get_setting(path: str, store: DocumentStore = Depends(get_store)):
    return {"path": path, "value": await settings_service.get_setting(store, path)}


# Theme and appearance

@router.get("/theme")
async def get_site_theme(store: DocumentStore = Depends(get_store)):
    return await theme_service.get_theme(store, theme_service.SITE_OWNER)


@router.put("/theme")
async def save_site_theme(payload: ThemeUpdate, store: DocumentStore = Depends(get_store)):
    return await theme_service.save_theme(
        store, theme_service.SITE_OWNER, payload.model_dump(exclude_none=True))


@router.get("/theme/presets")
async def list_presets():
    return theme_service.THEME_PRESETS


@router.post("/theme/presets/{preset_id}")
async def apply_preset(preset_id: str, store: DocumentStore = Depends(get_store)):
    return await theme_service.apply_preset(store, theme_service.SITE_OWNER, preset_id)


@router.get("/appearance")
async def get_appearance(store: DocumentStore = Depends(get_store)):
    return await theme_service.get_appearance(store)


@router.put("/appearance")
async def save_appearance(payload: AppearanceUpdate, store: DocumentStore = Depends(get_store)):
    return await theme_service.save_appearance(store, payload.model_dump(exclude_none=True))


# Backups

@router.post("/backups", status_code=status.HTTP_201_CREATED)
async def create_backup(store: DocumentStore = Depends(get_store)):
    record, _ = await backup_service.create_backup(store)
    return record


@router.get("/backups/download")
async def download_backup(store: DocumentStore = Depends(get_store)):
    record, payload = await backup_service.create_backup(store)
    return Response(
        content=json.dumps(payload, ensure_ascii=False),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{record["filename"]}"'},
    )


@router.get("/backups")
async def list_backups(store: DocumentStore = Depends(get_store)):
    return await backup_service.list_backups(store)


@router.delete("/backups/{backup_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_backup(backup_id: str, store: DocumentStore = Depends(get_store)):
    await backup_service.delete_backup(store, backup_id)


@router.post("/backups/restore", response_model=RestoreResponse)
async def restore_backup(payload: Any = Body(...), store: DocumentStore = Depends(get_store)):
    return await backup_service.restore_backup(store, payload)


# Moderation

@router.get("/moderation/warnings")
async def list_warnings(store: DocumentStore = Depends(get_store)):
    return await moderation_service.list_warnings(store)


@router.get("/moderation/posts")
async def list_moderated_posts(store: DocumentStore = Depends(get_store)):
    return await moderation_service.list_moderated_posts(store)


@router.get("/community/posts")
async def list_community_posts(store: DocumentStore = Depends(get_store)):
    return await community_service.list_feed(store, None, include_moderated=True)


@router.post("/moderation/posts/{post_id}/approve")
async def approve_post(post_id: str, store: DocumentStore = Depends(get_store)):
    return await moderation_service.approve_post(store, post_id)


@router.delete("/moderation/posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_post(post_id: str, store: DocumentStore = Depends(get_store)):
    await moderation_service.remove_post(store, post_id)


# Users

@router.get("/users")
async def list_users(
    user_status: Optional[str] = Query(None, alias="status", pattern="^(pending|active|blocked)$"),
    store: DocumentStore = Depends(get_store),
):
    return [public_user(user) for user in await auth_service.list_users(store, user_status)]


@router.post("/users/{user_id}/block")
async def block_user(user_id: str, payload: UserBlock, store: DocumentStore = Depends(get_store)):
    return public_user(await moderation_service.block_user(store, user_id, payload.reason))


@router.post("/users/{user_id}/unblock")
async def unblock_user(user_id: str, store: DocumentStore = Depends(get_store)):
    return public_user(await moderation_service.unblock_user(store, user_id))


# Bookings

@router.get("/bookings")
async def list_bookings(
    booking_type: Optional[str] = Query(None, alias="type", pattern="^(flight|hotel|guide)$"),
    booking_status: Optional[str] = Query(None, alias="status", pattern="^(confirmed|pending|cancelled)$"),
    store: DocumentStore = Depends(get_store),
):
    return await travel_service.list_bookings(store, booking_type, booking_status)


@router.get("/bookings/stats")
async def booking_stats(store: DocumentStore = Depends(get_store)):
    return await travel_service.booking_stats(store)


@router.put("/bookings/{booking_id}/status")
async def update_booking_status(
    booking_id: str,
    payload: BookingStatusUpdate,
    store: DocumentStore = Depends(get_store),
):
    return await travel_service.update_booking_status(store, booking_id, payload.status)


# Newsletter

@router.get("/newsletter")
async def list_subscribers(
    active_only: bool = Query(False, alias="activeOnly"),
    store: DocumentStore = Depends(get_store),
):
    return await newsletter_service.list_subscribers(store, active_only)


@router.delete("/newsletter/{subscriber_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subscriber(subscriber_id: str, store: DocumentStore = Depends(get_store)):
    await newsletter_service.delete_subscriber(store, subscriber_id)


# Ads

@router.get("/ads")
async def list_ad_placements(
    ad_type: Optional[str] = Query(None, alias="type"),
    location: Optional[str] = None,
    enabled: Optional[bool] = None,
    store: DocumentStore = Depends(get_store),
):
    return await ad_service.list_placements(store, ad_type=ad_type, location=location, enabled=enabled)


@router.post("/ads", status_code=status.HTTP_201_CREATED)
async def create_ad_placement(payload: AdPlacementCreate, store: DocumentStore = Depends(get_store)):
    return await ad_service.create_placement(store, payload.model_dump())


@router.get("/ads/stats")
async def ad_stats(days: int = Query(7, ge=1, le=365), store: DocumentStore = Depends(get_store)):
    return await ad_service.all_stats(store, days)


@router.get("/ads/{placement_id}")
async def get_ad_placement(placement_id: str, store: DocumentStore = Depends(get_store)):
    return await ad_service.get_placement(store, placement_id)


@router.put("/ads/{placement_id}")
async def update_ad_placement(
    placement_id: str,
    payload: AdPlacementUpdate,
    store: DocumentStore = Depends(get_store),
):
    return await ad_service.update_placement(store, placement_id, payload.model_dump(exclude_none=True))


@router.post("/ads/{placement_id}/toggle")
async def toggle_ad_placement(placement_id: str, payload: AdToggle, store: DocumentStore = Depends(get_store)):
    return await ad_service.set_enabled(store, placement_id, payload.isEnabled)


@router.delete("/ads/{placement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_ad_placement(placement_id: str, store: DocumentStore = Depends(get_store)):
    await ad_service.delete_placement(store, placement_id)


@router.get("/ads/{placement_id}/stats")
async def ad_placement_stats(
    placement_id: str,
    days: int = Query(7, ge=1, le=365),
    store: DocumentStore = Depends(get_store),
):
    return await ad_service.placement_stats(store, placement_id, days)


@router.put("/ads/{placement_id}/stats")
async def record_ad_stats(placement_id: str, payload: AdDailyStats, store: DocumentStore = Depends(get_store)):
    return await ad_service.record_daily_stats(
        store, placement_id, payload.date, payload.impressions, payload.clicks, payload.revenue)
