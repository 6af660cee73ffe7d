"""
API endpoints for subscription management.

This module provides REST API endpoints for users to:
- Subscribe to a plan (replacing any current subscription)
- View their current subscription and today's usage
- View subscription history
- Cancel subscriptions
"""
from typing import List
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, get_clock
from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.core.rate_limit import limiter, get_default_rate_limit
from app.core.errors import NotFoundError
from app.core.subscription_ledger import SubscriptionLedger
from app.core.usage_counter import UsageCounter
from app.models.plan import ContentKind
from app.models.user import User
from app.schemas.subscription import (
    SubscriptionCreate,
    SubscriptionWithPlan,
    CurrentSubscriptionResponse
)

router = APIRouter()


@router.post("", response_model=SubscriptionWithPlan, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_default_rate_limit)
async def subscribe(
    request: Request,
    response: Response,
    data: SubscriptionCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    """
    Subscribe the authenticated user to a plan.

    If the user already has an active subscription it is ended (ends_at set
    to now) and replaced by the new one in the same transaction. Switching
    plans does not reset today's usage.

    Returns:
        SubscriptionWithPlan: The new active subscription

    Raises:
        NotFoundError 404: PLAN_NOT_FOUND
        PolicyDenialError 400: PLAN_INACTIVE
    """
    return await SubscriptionLedger.subscribe(db, user.id, data.plan_id, clock=clock)


@router.get("", response_model=List[SubscriptionWithPlan])
@limiter.limit(get_default_rate_limit)
async def get_subscription_history(
    request: Request,
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get all subscriptions (current and past) of the authenticated user, newest first.
    """
    return await SubscriptionLedger.list_subscriptions(db, user.id)


@router.get("/current", response_model=CurrentSubscriptionResponse)
@limiter.limit(get_default_rate_limit)
async def get_current_subscription(
    request: Request,
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    """
    Get the active subscription with today's usage counters.

    Raises:
        NotFoundError 404: NO_ACTIVE_SUBSCRIPTION (with has_subscriptions)
    """
    subscription = await SubscriptionLedger.get_active_subscription(db, user.id)

    if not subscription:
        has_subscriptions = await SubscriptionLedger.has_any_subscription(db, user.id)
        raise NotFoundError(
            "NO_ACTIVE_SUBSCRIPTION",
            "No active subscription found",
            extra={"has_subscriptions": has_subscriptions},
        )

    articles_read = await UsageCounter.count_today(db, user.id, ContentKind.ARTICLE, clock=clock)
    videos_watched = await UsageCounter.count_today(db, user.id, ContentKind.VIDEO, clock=clock)

    return CurrentSubscriptionResponse.model_validate(
        {
            **SubscriptionWithPlan.model_validate(subscription).model_dump(),
            "articles_read_today": articles_read,
            "videos_watched_today": videos_watched,
        }
    )


@router.get("/{subscription_id}", response_model=SubscriptionWithPlan)
@limiter.limit(get_default_rate_limit)
async def get_subscription(
    request: Request,
    response: Response,
    subscription_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get one subscription. Users can only see their own; admins see any.

    Raises:
        NotFoundError 404: SUBSCRIPTION_NOT_FOUND
        AuthorizationError 403: UNAUTHORIZED
    """
    return await SubscriptionLedger.get_subscription(db, user, subscription_id)


@router.delete("/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(get_default_rate_limit)
async def cancel_subscription(
    request: Request,
    response: Response,
    subscription_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    """
    Cancel a subscription.

    The row is kept as history with is_active=False and ends_at set. The
    user has no active subscription afterwards until they subscribe again.
    Cancelling an already cancelled subscription succeeds without changes.

    Raises:
        NotFoundError 404: SUBSCRIPTION_NOT_FOUND
        AuthorizationError 403: UNAUTHORIZED
    """
    await SubscriptionLedger.cancel(db, user, subscription_id, clock=clock)
