import logging
from datetime import timedelta
from typing import Optional

from ..config import settings
from ..exceptions import ConflictError, DocumentNotFoundError
from ..utils import parse_datetime, random_token, utcnow, utcnow_iso
from .document_store import DocumentStore

logger = logging.getLogger(__name__)

PAYMENTS = "payments"
SUBSCRIPTIONS = "subscriptions"

PLAN_DAYS = {"monthly": 30, "annual": 365}


def plan_price(plan_type: str) -> float:
    if plan_type == "monthly":
        return settings.monthly_plan_price
    if plan_type == "annual":
        return settings.annual_plan_price
    raise ConflictError(f"Unknown subscription plan: {plan_type}")


def card_last_four(card_number: Optional[str]) -> Optional[str]:
    digits = "".join(ch for ch in (card_number or "") if ch.isdigit())
    return digits[-4:] if digits else None


async def process_subscription_payment(store: DocumentStore, user_id: str, plan_type: str, payment: dict) -> dict:
    """
    Record a simulated payment and activate the subscription it pays for.

    Args:
        plan_type: "monthly" or "annual"
        payment: method, cardNumber, cardholderName, expiryDate and cvv.
            Only the last four card digits are persisted.

    Returns:
        dict with the payment and subscription documents
    """
    amount = plan_price(plan_type)
    method = payment.get("method") or "card"
    last_four = card_last_four(payment.get("cardNumber"))

    payment_doc = await store.insert_one(PAYMENTS, {
        "userId": user_id,
        "paymentId": "pay_" + random_token(13),
        "amount": amount,
        "currency": settings.currency,
        "status": "completed",
        "processingDate": utcnow_iso(),
        "planType": plan_type,
        "method": method,
        "cardLastFour": last_four,
    })

    start = utcnow()
    subscription = {
        "userId": user_id,
        "planType": plan_type,
        "status": "active",
        "startDate": start.isoformat(),
        "endDate": (start + timedelta(days=PLAN_DAYS[plan_type])).isoformat(),
        "amount": amount,
        "currency": settings.currency,
        "autoRenew": True,
        "paymentId": payment_doc["paymentId"],
        "paymentMethod": {
            "method": method,
            "cardLastFour": last_four,
            "expiryDate": payment.get("expiryDate"),
        },
    }
    existing = await store.find_one(SUBSCRIPTIONS, {"userId": user_id})
    if existing:
        subscription = await store.update_by_id(SUBSCRIPTIONS, existing["id"], {
            "$set": subscription,
            "$unset": {"cancelledAt": ""},
        })
    else:
        subscription = await store.insert_one(SUBSCRIPTIONS, subscription)

    logger.info(f"User {user_id} subscribed to {plan_type} plan")
    return {"payment": payment_doc, "subscription": subscription}


async def get_subscription(store: DocumentStore, user_id: str) -> Optional[dict]:
    subscription = await store.find_one(SUBSCRIPTIONS, {"userId": user_id}, sort=[("createdAt", -1)])
    if subscription is None:
        return None
    end = parse_datetime(subscription.get("endDate"))
    if subscription.get("status") == "active" and end is not None and end < utcnow():
        subscription = await store.update_by_id(SUBSCRIPTIONS, subscription["id"], {"$set": {"status": "expired"}})
        logger.info(f"Subscription {subscription['id']} for user {user_id} expired")
    return subscription


async def has_active_subscription(store: DocumentStore, user_id: str) -> bool:
    subscription = await get_subscription(store, user_id)
    return bool(subscription and subscription.get("status") == "active")


async def cancel_subscription(store: DocumentStore, user_id: str) -> dict:
    subscription = await store.find_one(SUBSCRIPTIONS, {"userId": user_id})
    if subscription is None:
        raise DocumentNotFoundError(SUBSCRIPTIONS, user_id, "Subscription")
    logger.info(f"User {user_id} cancelled subscription {subscription['id']}")
    return await store.update_by_id(SUBSCRIPTIONS, subscription["id"], {"$set": {
        "status": "cancelled",
        "cancelledAt": utcnow_iso(),
        "autoRenew": False,
    }})


async def payment_history(store: DocumentStore, user_id: str) -> list[dict]:
    return await store.find(PAYMENTS, {"userId": user_id}, sort=[("processingDate", -1)])
