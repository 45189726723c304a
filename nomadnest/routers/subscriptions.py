from fastapi import APIRouter, Depends, status

from ..schemas import SubscriptionCreate
from ..services import payment_service
from ..services.document_store import DocumentStore, get_store
from ..services.jwt_service import JWTService


router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def subscribe(
    payload: SubscriptionCreate,
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await payment_service.process_subscription_payment(
        store, current_user["id"], payload.planType, payload.payment.model_dump())


@router.get("/me")
async def my_subscription(
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    subscription = await payment_service.get_subscription(store, current_user["id"])
    return {
        "subscription": subscription,
        "active": bool(subscription and subscription.get("status") == "active"),
    }


@router.post("/cancel")
async def cancel_subscription(
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await payment_service.cancel_subscription(store, current_user["id"])


@router.get("/payments")
async def payment_history(
    store: DocumentStore = Depends(get_store),
    current_user: dict = Depends(JWTService.get_current_user),
):
    return await payment_service.payment_history(store, current_user["id"])
