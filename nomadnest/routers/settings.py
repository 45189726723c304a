from fastapi import APIRouter, Depends
from fastapi.responses import Response

from ..schemas import ThemeUpdate
from ..services import settings_service, theme_service
from ..services.document_store import DocumentStore, get_store
from ..services.jwt_service import JWTService


router = APIRouter(tags=["settings"])


@router.get("/settings/public")
async def public_settings(store: DocumentStore = Depends(get_store)):
    return await settings_service.get_public_settings(store)


@router.get("/appearance/theme")
async def site_theme(store: DocumentStore = Depends(get_store)):
    return await theme_service.get_theme(store, theme_service.SITE_OWNER)


@router.get("/appearance/presets")
async def theme_presets():
    return theme_service.THEME_PRESETS


@router.get("/appearance/stylesheet.css")
async def stylesheet(store: DocumentStore = Depends(get_store)):
    css = await theme_service.site_stylesheet(store)
    return Response(content=css, media_type="text/css")


@router.get("/users/me/theme")
async def my_theme(
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await theme_service.get_theme(store, current_user["id"])


@router.put("/users/me/theme")
async def save_my_theme(
    payload: ThemeUpdate,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await theme_service.save_theme(store, current_user["id"], payload.model_dump(exclude_none=True))


@router.post("/users/me/theme/presets/{preset_id}")
async def apply_my_preset(
    preset_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await theme_service.apply_preset(store, current_user["id"], preset_id)
