from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from athletics.database import get_db
from athletics.models.push_subscription import PushSubscription
from athletics.routers.subscriptions import validate_sports
from athletics.schemas.subscription import (
    PushSubscriptionCreate,
    PushSubscriptionResponse,
    PushUnsubscribeRequest,
)
from athletics.services.push import push_service

router = APIRouter(prefix="/api", tags=["Push"])


@router.get("/push/vapid-public-key")
async def get_vapid_public_key():
    """Public key the browser needs for PushManager.subscribe()"""
    public_key = push_service.get_public_key()
    if not public_key:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Push notifications are not configured",
        )
    return {"public_key": public_key}


@router.post("/push-subscriptions", response_model=PushSubscriptionResponse)
async def register_push_subscription(
    data: PushSubscriptionCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a browser for push reminders.

    An endpoint that is already registered gets its keys and sports updated.
    """
    sports = validate_sports(data.sports)

    result = await db.execute(
        select(PushSubscription).where(PushSubscription.endpoint == data.endpoint)
    )
    subscription = result.scalar_one_or_none()

    if subscription:
        subscription.sports = sports
        subscription.p256dh = data.keys.p256dh
        subscription.auth = data.keys.auth
    else:
        subscription = PushSubscription(
            endpoint=data.endpoint,
            p256dh=data.keys.p256dh,
            auth=data.keys.auth,
            sports=sports,
        )
        db.add(subscription)

    await db.commit()
    await db.refresh(subscription)
    return subscription


@router.delete("/push-subscriptions")
async def remove_push_subscription(
    data: PushUnsubscribeRequest,
    db: AsyncSession = Depends(get_db),
):
    """Stop push reminders for a browser"""
    result = await db.execute(
        select(PushSubscription).where(PushSubscription.endpoint == data.endpoint)
    )
    subscription = result.scalar_one_or_none()
    if subscription:
        await db.delete(subscription)
        await db.commit()
    return {"message": "Push subscription removed"}
