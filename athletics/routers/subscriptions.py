from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from athletics.database import get_db
from athletics.models.subscription import Subscription
from athletics.schemas.subscription import (
    SubscriptionCreate,
    SubscriptionResponse,
    SubscriptionSportsResponse,
    UnsubscribeRequest,
    UnsubscribeResponse,
)
from athletics.utils.sports import SPORTS, unknown_sports, normalize_sports

router = APIRouter(prefix="/api/subscriptions", tags=["Subscriptions"])


def validate_sports(sports: list) -> list:
    unknown = unknown_sports(sports)
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown sports: {', '.join(unknown)}. Choose from: {', '.join(SPORTS)}",
        )
    return normalize_sports(sports)


async def get_subscription_by_token(db: AsyncSession, token: str) -> Subscription:
    result = await db.execute(
        select(Subscription).where(Subscription.unsubscribe_token == token)
    )
    subscription = result.scalar_one_or_none()
    if not subscription:
        raise HTTPException(status_code=404, detail="Subscription not found")
    return subscription


@router.post("", response_model=SubscriptionResponse, status_code=status.HTTP_201_CREATED)
async def subscribe(
    data: SubscriptionCreate,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """
    Subscribe an email address to game reminders.

    Re-subscribing an existing address replaces its sports and returns 200.
    """
    sports = validate_sports(data.sports)
    email = data.email.strip().lower()

    result = await db.execute(select(Subscription).where(Subscription.email == email))
    subscription = result.scalar_one_or_none()

    if subscription:
        subscription.sports = sports
        message = "Subscription updated successfully"
        response.status_code = status.HTTP_200_OK
    else:
        subscription = Subscription(email=email, sports=sports)
        db.add(subscription)
        message = "Subscribed to game reminders"

    await db.commit()
    await db.refresh(subscription)

    payload = SubscriptionResponse.model_validate(subscription)
    payload.message = message
    return payload


@router.get("/by-token/{token}", response_model=SubscriptionSportsResponse)
async def get_subscription_sports(
    token: str,
    db: AsyncSession = Depends(get_db),
):
    """Current sports for the unsubscribe page (no email or other personal data)"""
    subscription = await get_subscription_by_token(db, token)
    return SubscriptionSportsResponse(sports=subscription.sports or [])


@router.post("/unsubscribe", response_model=UnsubscribeResponse)
async def unsubscribe(
    data: UnsubscribeRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Unsubscribe using the token from the reminder email.

    With a list of sports only those are dropped; the subscription is deleted
    once no sports remain. Without a list the whole subscription goes.
    """
    subscription = await get_subscription_by_token(db, data.token)

    if data.sports:
        remaining = [sport for sport in (subscription.sports or []) if sport not in data.sports]
        if remaining:
            subscription.sports = remaining
            await db.commit()
            return UnsubscribeResponse(
                message=f"Successfully unsubscribed from {', '.join(data.sports)}",
                fully_unsubscribed=False,
                remaining_sports=remaining,
            )

    await db.delete(subscription)
    await db.commit()
    return UnsubscribeResponse(
        message="Successfully unsubscribed from all sports",
        fully_unsubscribed=True,
    )
