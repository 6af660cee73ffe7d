"""
Daily usage tracking for metered content.

Usage is derived from view records: one row per (user, item) pair, stamped
with the moment of first access. "Used today" is the number of those rows
whose timestamp falls inside the current local calendar day.
"""
import logging
from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.dialects import postgresql, sqlite

from app.core.clock import Clock, get_clock
from app.models.article_view import ArticleView
from app.models.plan import ContentKind
from app.models.video_view import VideoView

logger = logging.getLogger(__name__)


class RecordResult(str, Enum):
    RECORDED = "RECORDED"
    ALREADY_RECORDED = "ALREADY_RECORDED"


# View model and the column holding the content item id, per content kind
VIEW_MODELS = {
    ContentKind.ARTICLE: (ArticleView, ArticleView.article_id),
    ContentKind.VIDEO: (VideoView, VideoView.video_id),
}

_INSERT_BUILDERS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class UsageCounter:
    """
    Service class for counting and recording content views.
    """

    @staticmethod
    async def count_today(
        db: AsyncSession,
        user_id: int,
        kind: ContentKind,
        clock: Clock | None = None,
    ) -> int:
        """
        Number of distinct items of this kind the user first opened today.

        "Today" is the calendar day in the configured server timezone.
        """
        clock = clock or get_clock()
        model, _ = VIEW_MODELS[kind]
        day_start, day_end = clock.day_bounds()

        result = await db.execute(
            select(func.count(model.id))
            .where(model.user_id == user_id)
            .where(model.created_at >= day_start)
            .where(model.created_at < day_end)
        )
        return result.scalar() or 0

    @staticmethod
    async def has_viewed(db: AsyncSession, user_id: int, item_id: int, kind: ContentKind) -> bool:
        model, item_column = VIEW_MODELS[kind]
        result = await db.execute(
            select(model.id)
            .where(model.user_id == user_id)
            .where(item_column == item_id)
        )
        return result.first() is not None

    @staticmethod
    async def record_view(
        db: AsyncSession,
        user_id: int,
        item_id: int,
        kind: ContentKind,
        clock: Clock | None = None,
    ) -> RecordResult:
        """
        Record the first view of an item by a user.

        The existence check is only a fast path. The insert itself skips rows
        that violate the (user, item) unique constraint, so two concurrent
        requests for the same item still produce a single record.

        Returns:
            RecordResult: RECORDED if a row was inserted, ALREADY_RECORDED otherwise
        """
        clock = clock or get_clock()
        model, item_column = VIEW_MODELS[kind]

        if await UsageCounter.has_viewed(db, user_id, item_id, kind):
            return RecordResult.ALREADY_RECORDED

        # Other dialects are rejected when the engine is created (app.core.database)
        insert_builder = _INSERT_BUILDERS[db.get_bind().dialect.name]

        stmt = (
            insert_builder(model)
            .values({"user_id": user_id, item_column.key: item_id, "created_at": clock.now()})
            .on_conflict_do_nothing(index_elements=["user_id", item_column.key])
            .returning(model.id)
        )
        result = await db.execute(stmt)
        inserted_id = result.scalar_one_or_none()
        await db.commit()

        if inserted_id is None:
            logger.info(f"[VIEW] {kind.value} {item_id} already recorded for user {user_id} (concurrent)")
            return RecordResult.ALREADY_RECORDED

        logger.info(f"[VIEW] Recorded {kind.value} {item_id} for user {user_id}")
        return RecordResult.RECORDED
