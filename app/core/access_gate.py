"""
Access decisions for metered content.

AccessGate.check() decides whether a caller may open one article or video,
and records the view when access is granted. It is a pure function of the
persisted state: subscription, today's usage and publication status are
re-read on every call.

Decision order (first match wins):
1. Admins are granted everything, unpublished content included, unmetered.
2. Unpublished content is refused.
3. A caller without an active subscription is refused.
4. A plan limit of -1 is unlimited; a limit of 0 refuses this content kind.
5. A caller whose distinct views today reached the limit is refused, unless
   the item was already viewed before (re-reads never consume quota).
6. Otherwise access is granted and the view recorded (idempotent per item).

Listings only go through steps 1-3 (see check_listing()).
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, get_clock
from app.core.errors import DenialReason, PolicyDenialError
from app.core.subscription_ledger import SubscriptionLedger
from app.core.usage_counter import UsageCounter, RecordResult
from app.models.plan import ContentKind, UNLIMITED
from app.models.user import User

logger = logging.getLogger(__name__)

NOT_PUBLISHED = {
    ContentKind.ARTICLE: DenialReason.ARTICLE_NOT_PUBLISHED,
    ContentKind.VIDEO: DenialReason.VIDEO_NOT_PUBLISHED,
}

DENIAL_MESSAGES = {
    DenialReason.ARTICLE_NOT_PUBLISHED: "This article is not published yet",
    DenialReason.VIDEO_NOT_PUBLISHED: "This video is not published yet",
}


@dataclass
class AccessDecision:
    """Outcome of an access check. Denials always carry a reason."""
    granted: bool
    reason: Optional[DenialReason] = None
    limit: Optional[int] = None
    used: Optional[int] = None
    recorded: Optional[RecordResult] = None

    def raise_for_denial(self, kind: ContentKind) -> None:
        """Raise PolicyDenialError if access was refused."""
        if self.granted:
            return

        if self.reason == DenialReason.DAILY_LIMIT_REACHED:
            noun = "article" if kind == ContentKind.ARTICLE else "video"
            raise PolicyDenialError(
                self.reason,
                f"Daily {noun} limit reached",
                extra={"limit": self.limit, "used": self.used},
            )

        if self.reason == DenialReason.SUBSCRIPTION_REQUIRED:
            noun = "articles" if kind == ContentKind.ARTICLE else "videos"
            raise PolicyDenialError(self.reason, f"Subscription required to view {noun}")

        raise PolicyDenialError(self.reason, DENIAL_MESSAGES.get(self.reason, "Access denied"))


class AccessGate:
    """
    Grant/deny decisions for single-item access and listings.
    """

    @staticmethod
    async def check(
        db: AsyncSession,
        caller: User,
        item,
        kind: ContentKind,
        clock: Clock | None = None,
    ) -> AccessDecision:
        """
        Decide access to one content item and record the view on grant.

        Args:
            db (AsyncSession): Database session
            caller (User): Authenticated user
            item: Article or Video (anything with id and is_published)
            kind (ContentKind): Kind of the item
            clock (Clock, optional): Source of "today"

        Returns:
            AccessDecision: granted, or denied with reason (and limit/used for quota denials)
        """
        clock = clock or get_clock()

        if caller.is_admin:
            return AccessDecision(granted=True)

        if not item.is_published:
            return AccessDecision(granted=False, reason=NOT_PUBLISHED[kind])

        subscription = await SubscriptionLedger.get_active_subscription(db, caller.id)
        if subscription is None:
            return AccessDecision(granted=False, reason=DenialReason.SUBSCRIPTION_REQUIRED)

        limit = subscription.plan.daily_limit_for(kind)
        used = None

        if limit == 0:
            logger.info(f"[ACCESS] User {caller.id}: plan {subscription.plan_id} has no {kind.value} quota")
            return AccessDecision(
                granted=False,
                reason=DenialReason.DAILY_LIMIT_REACHED,
                limit=0,
                used=0,
            )

        if limit != UNLIMITED:
            used = await UsageCounter.count_today(db, caller.id, kind, clock=clock)
            if used >= limit and not await UsageCounter.has_viewed(db, caller.id, item.id, kind):
                logger.info(f"[ACCESS] User {caller.id}: daily {kind.value} limit reached ({used}/{limit})")
                return AccessDecision(
                    granted=False,
                    reason=DenialReason.DAILY_LIMIT_REACHED,
                    limit=limit,
                    used=used,
                )

        recorded = await UsageCounter.record_view(db, caller.id, item.id, kind, clock=clock)
        return AccessDecision(granted=True, limit=limit, used=used, recorded=recorded)

    @staticmethod
    async def enforce(
        db: AsyncSession,
        caller: User,
        item,
        kind: ContentKind,
        clock: Clock | None = None,
    ) -> AccessDecision:
        """Like check(), but raises PolicyDenialError when access is refused."""
        decision = await AccessGate.check(db, caller, item, kind, clock=clock)
        decision.raise_for_denial(kind)
        return decision

    @staticmethod
    async def check_listing(db: AsyncSession, caller: User, kind: ContentKind) -> AccessDecision:
        """
        Decide whether the caller may browse a listing.

        Only an active subscription is required; quotas are not checked and
        no views are recorded.
        """
        if caller.is_admin:
            return AccessDecision(granted=True)

        subscription = await SubscriptionLedger.get_active_subscription(db, caller.id)
        if subscription is None:
            return AccessDecision(granted=False, reason=DenialReason.SUBSCRIPTION_REQUIRED)

        return AccessDecision(granted=True)

    @staticmethod
    async def enforce_listing(db: AsyncSession, caller: User, kind: ContentKind) -> None:
        decision = await AccessGate.check_listing(db, caller, kind)
        decision.raise_for_denial(kind)
