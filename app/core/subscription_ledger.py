"""
Service layer for subscription management.

The ledger owns the "one active subscription per user" rule. Switching
plans deactivates the current subscription and creates the new one inside a
single transaction; cancelled subscriptions stay in the table as history.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, exists
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.clock import Clock, get_clock
from app.core.errors import (
    AuthorizationError,
    DenialReason,
    NotFoundError,
    PolicyDenialError,
    StorageError,
)
from app.core.plan_registry import PlanRegistry
from app.models.subscription import Subscription
from app.models.user import User

logger = logging.getLogger(__name__)

# Attempts for a subscribe transaction that lost a race on the active-row index
SUBSCRIBE_ATTEMPTS = 2


class SubscriptionLedger:
    """
    Service class for subscription-related operations.

    Every method re-reads current state from the database; nothing about a
    user's subscription is cached between requests.
    """

    @staticmethod
    async def get_active_subscription(db: AsyncSession, user_id: int) -> Subscription | None:
        """
        Get the user's currently active subscription (plan eagerly loaded).

        Returns:
            Subscription | None: Active subscription or None if the user has none
        """
        result = await db.execute(
            select(Subscription)
            .where(Subscription.user_id == user_id)
            .where(Subscription.is_active == True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def has_any_subscription(db: AsyncSession, user_id: int) -> bool:
        result = await db.execute(
            select(exists().where(Subscription.user_id == user_id))
        )
        return bool(result.scalar())

    @staticmethod
    async def list_subscriptions(db: AsyncSession, user_id: int) -> list[Subscription]:
        """
        Get all subscriptions for a user (current and historical), newest first.
        """
        result = await db.execute(
            select(Subscription)
            .where(Subscription.user_id == user_id)
            .order_by(Subscription.starts_at.desc(), Subscription.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_subscription(db: AsyncSession, caller: User, subscription_id: int) -> Subscription:
        """
        Retrieve a subscription visible to the caller.

        Raises:
            NotFoundError 404: If subscription not found
            AuthorizationError 403: If it belongs to another user and caller is not admin
        """
        result = await db.execute(
            select(Subscription).where(Subscription.id == subscription_id)
        )
        subscription = result.scalar_one_or_none()

        if not subscription:
            raise NotFoundError("SUBSCRIPTION_NOT_FOUND", "Subscription not found")

        if subscription.user_id != caller.id and not caller.is_admin:
            raise AuthorizationError("Unauthorized to access this subscription")

        return subscription

    @staticmethod
    async def subscribe(
        db: AsyncSession,
        user_id: int,
        plan_id: int,
        clock: Clock | None = None,
    ) -> Subscription:
        """
        Enroll a user in a plan, replacing any active subscription.

        Flow:
        1. Validate the plan exists and is active
        2. Lock the user's row (serializes concurrent subscribe calls per user)
        3. Deactivate the current subscription (ends_at = now)
        4. Insert the new active subscription (starts_at = now)
        5. Commit steps 2-4 as one transaction

        If a concurrent transaction wins the race for the active-row index
        the whole transaction is rolled back and replayed, so the later
        writer ends up active.

        Raises:
            NotFoundError 404: If plan not found
            PolicyDenialError 400: If the plan is inactive (PLAN_INACTIVE)
            StorageError 500: If the transition could not be committed
        """
        clock = clock or get_clock()

        plan = await PlanRegistry.get_plan(db, plan_id)
        if not plan.is_active:
            raise PolicyDenialError(
                DenialReason.PLAN_INACTIVE,
                "Plan is not available",
                extra={"plan_id": plan_id},
            )

        for attempt in range(1, SUBSCRIBE_ATTEMPTS + 1):
            try:
                subscription = await SubscriptionLedger._switch_active_subscription(
                    db, user_id, plan_id, clock
                )
            except IntegrityError:
                await db.rollback()
                logger.warning(
                    f"[SUBSCRIBE] Concurrent subscription change for user {user_id} "
                    f"(attempt {attempt}/{SUBSCRIBE_ATTEMPTS})"
                )
                continue
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error(f"[SUBSCRIBE] Transaction failed for user {user_id}: {type(e).__name__}")
                raise StorageError() from e

            # Loads server defaults and the joined plan
            await db.refresh(subscription)
            logger.info(
                f"[SUBSCRIBE] User {user_id} subscribed to plan {plan_id} "
                f"(subscription {subscription.id})"
            )
            return subscription

        raise StorageError()

    @staticmethod
    async def _switch_active_subscription(
        db: AsyncSession,
        user_id: int,
        plan_id: int,
        clock: Clock,
    ) -> Subscription:
        now = clock.now()

        # Row lock on the user; a no-op on backends without SELECT ... FOR UPDATE
        await db.execute(select(User.id).where(User.id == user_id).with_for_update())

        await db.execute(
            update(Subscription)
            .where(Subscription.user_id == user_id)
            .where(Subscription.is_active == True)
            .values(is_active=False, ends_at=now)
            .execution_options(synchronize_session="fetch")
        )

        subscription = Subscription(
            user_id=user_id,
            plan_id=plan_id,
            starts_at=now,
            ends_at=None,
            is_active=True,
        )
        db.add(subscription)
        await db.commit()
        return subscription

    @staticmethod
    async def cancel(
        db: AsyncSession,
        caller: User,
        subscription_id: int,
        clock: Clock | None = None,
    ) -> Subscription:
        """
        Cancel a subscription.

        Cancelling an already inactive subscription succeeds without changes
        (its original ends_at is kept).

        Raises:
            NotFoundError 404: If subscription not found
            AuthorizationError 403: If it belongs to another user and caller is not admin
        """
        clock = clock or get_clock()

        subscription = await SubscriptionLedger.get_subscription(db, caller, subscription_id)

        if not subscription.is_active:
            logger.info(f"[CANCEL] Subscription {subscription_id} already inactive")
            return subscription

        subscription.is_active = False
        subscription.ends_at = clock.now()
        await db.commit()
        await db.refresh(subscription)

        logger.info(f"[CANCEL] Cancelled subscription {subscription_id} for user {subscription.user_id}")
        return subscription
