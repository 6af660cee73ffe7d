"""
Tests for UsageCounter: idempotent view records and per-day counting.
"""
import asyncio
from datetime import datetime, date

import pytest
import pytz
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from app.core.clock import FixedClock
from app.core.database import Base, enable_sqlite_foreign_keys
from app.core.usage_counter import UsageCounter, RecordResult
from app.models.article_view import ArticleView
from app.models.plan import ContentKind
from app.tests.factories import make_user, make_admin, make_article, make_video


@pytest.mark.asyncio
async def test_record_view_is_idempotent(db, clock):
    user = await make_user(db)
    article = await make_article(db, await make_admin(db))

    first = await UsageCounter.record_view(db, user.id, article.id, ContentKind.ARTICLE, clock=clock)
    second = await UsageCounter.record_view(db, user.id, article.id, ContentKind.ARTICLE, clock=clock)

    assert first == RecordResult.RECORDED
    assert second == RecordResult.ALREADY_RECORDED

    rows = await db.execute(select(func.count(ArticleView.id)).where(ArticleView.user_id == user.id))
    assert rows.scalar() == 1
    assert await UsageCounter.count_today(db, user.id, ContentKind.ARTICLE, clock=clock) == 1


@pytest.mark.asyncio
async def test_counts_are_per_kind_and_per_user(db, clock):
    admin = await make_admin(db)
    alice = await make_user(db)
    bob = await make_user(db)
    articles = [await make_article(db, admin) for _ in range(2)]
    video = await make_video(db, admin)

    for article in articles:
        await UsageCounter.record_view(db, alice.id, article.id, ContentKind.ARTICLE, clock=clock)
    await UsageCounter.record_view(db, alice.id, video.id, ContentKind.VIDEO, clock=clock)
    await UsageCounter.record_view(db, bob.id, articles[0].id, ContentKind.ARTICLE, clock=clock)

    assert await UsageCounter.count_today(db, alice.id, ContentKind.ARTICLE, clock=clock) == 2
    assert await UsageCounter.count_today(db, alice.id, ContentKind.VIDEO, clock=clock) == 1
    assert await UsageCounter.count_today(db, bob.id, ContentKind.ARTICLE, clock=clock) == 1
    assert await UsageCounter.count_today(db, bob.id, ContentKind.VIDEO, clock=clock) == 0


@pytest.mark.asyncio
async def test_yesterdays_views_do_not_count_today(db, clock):
    user = await make_user(db)
    article = await make_article(db, await make_admin(db))

    await UsageCounter.record_view(db, user.id, article.id, ContentKind.ARTICLE, clock=clock)
    clock.advance(days=1)

    assert await UsageCounter.count_today(db, user.id, ContentKind.ARTICLE, clock=clock) == 0
    # The item stays "viewed" across days
    assert await UsageCounter.has_viewed(db, user.id, article.id, ContentKind.ARTICLE) is True


@pytest.mark.asyncio
async def test_day_boundary_follows_configured_timezone(db):
    """
    23:30 and 00:30 New York time fall on different local days even though
    both are 2026-03-11 in UTC.
    """
    user = await make_user(db)
    admin = await make_admin(db)
    late, early = await make_article(db, admin), await make_article(db, admin)

    evening = FixedClock(datetime(2026, 3, 11, 3, 30, tzinfo=pytz.utc), timezone="America/New_York")
    morning = FixedClock(datetime(2026, 3, 11, 4, 30, tzinfo=pytz.utc), timezone="America/New_York")

    await UsageCounter.record_view(db, user.id, late.id, ContentKind.ARTICLE, clock=evening)
    await UsageCounter.record_view(db, user.id, early.id, ContentKind.ARTICLE, clock=morning)

    assert evening.today() == date(2026, 3, 10)
    assert morning.today() == date(2026, 3, 11)
    assert await UsageCounter.count_today(db, user.id, ContentKind.ARTICLE, clock=evening) == 1
    assert await UsageCounter.count_today(db, user.id, ContentKind.ARTICLE, clock=morning) == 1


def test_day_bounds_cover_dst_change():
    clock = FixedClock(datetime(2026, 3, 8, 12, 0, tzinfo=pytz.utc), timezone="America/New_York")

    start, end = clock.day_bounds()

    assert start == datetime(2026, 3, 8, 5, 0, tzinfo=pytz.utc)
    assert end == datetime(2026, 3, 9, 4, 0, tzinfo=pytz.utc)
    assert (end - start).total_seconds() == 23 * 3600


async def count_views(db, user_id):
    result = await db.execute(select(func.count(ArticleView.id)).where(ArticleView.user_id == user_id))
    return result.scalar()


@pytest.mark.asyncio
async def test_unique_constraint_deduplicates_when_check_is_skipped(db, clock, monkeypatch):
    """
    A request that passed the existence check before another request's insert
    landed must still end up with a single record.
    """
    user = await make_user(db)
    article = await make_article(db, await make_admin(db))
    await UsageCounter.record_view(db, user.id, article.id, ContentKind.ARTICLE, clock=clock)

    async def not_viewed_yet(db, user_id, item_id, kind):
        return False

    monkeypatch.setattr(UsageCounter, "has_viewed", staticmethod(not_viewed_yet))
    result = await UsageCounter.record_view(db, user.id, article.id, ContentKind.ARTICLE, clock=clock)

    assert result == RecordResult.ALREADY_RECORDED
    assert await count_views(db, user.id) == 1


@pytest.mark.asyncio
async def test_concurrent_first_views_record_once(tmp_path, clock):
    """
    Two sessions on separate connections record the same first view at once.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'views.db'}")
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(bind=engine, expire_on_commit=False)

    try:
        async with factory() as setup:
            user = await make_user(setup)
            article = await make_article(setup, await make_admin(setup))

        async def record():
            async with factory() as session:
                return await UsageCounter.record_view(
                    session, user.id, article.id, ContentKind.ARTICLE, clock=clock
                )

        results = await asyncio.gather(record(), record())

        assert sorted(r.value for r in results) == ["ALREADY_RECORDED", "RECORDED"]
        async with factory() as check:
            assert await count_views(check, user.id) == 1
    finally:
        await engine.dispose()
