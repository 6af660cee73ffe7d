"""
Tests for AccessGate decisions against persisted subscriptions and usage.
"""
import pytest

from app.core.access_gate import AccessGate
from app.core.errors import DenialReason, PolicyDenialError
from app.core.usage_counter import UsageCounter, RecordResult
from app.models.plan import ContentKind, UNLIMITED
from app.tests.factories import make_user, make_admin, make_plan, make_article, make_video, subscribe


@pytest.mark.asyncio
async def test_admin_is_granted_without_metering(db, clock):
    admin = await make_admin(db)
    draft = await make_article(db, admin, published=False)

    decision = await AccessGate.check(db, admin, draft, ContentKind.ARTICLE, clock=clock)

    assert decision.granted is True
    assert decision.recorded is None
    assert await UsageCounter.count_today(db, admin.id, ContentKind.ARTICLE, clock=clock) == 0


@pytest.mark.asyncio
async def test_unpublished_is_refused_before_subscription_check(db, clock):
    member = await make_user(db)
    admin = await make_admin(db)
    draft = await make_article(db, admin, published=False)
    draft_video = await make_video(db, admin, published=False)

    article_decision = await AccessGate.check(db, member, draft, ContentKind.ARTICLE, clock=clock)
    video_decision = await AccessGate.check(db, member, draft_video, ContentKind.VIDEO, clock=clock)

    assert article_decision.reason == DenialReason.ARTICLE_NOT_PUBLISHED
    assert video_decision.reason == DenialReason.VIDEO_NOT_PUBLISHED


@pytest.mark.asyncio
async def test_no_subscription_is_refused(db, clock):
    member = await make_user(db)
    article = await make_article(db, await make_admin(db))

    decision = await AccessGate.check(db, member, article, ContentKind.ARTICLE, clock=clock)

    assert decision.granted is False
    assert decision.reason == DenialReason.SUBSCRIPTION_REQUIRED
    assert await UsageCounter.count_today(db, member.id, ContentKind.ARTICLE, clock=clock) == 0


@pytest.mark.asyncio
async def test_quota_reached_after_limit_distinct_items(db, clock):
    admin = await make_admin(db)
    member = await make_user(db)
    await subscribe(db, member, await make_plan(db, article_limit=2), clock=clock)
    a1, a2, a3 = [await make_article(db, admin) for _ in range(3)]

    assert (await AccessGate.check(db, member, a1, ContentKind.ARTICLE, clock=clock)).granted
    assert (await AccessGate.check(db, member, a2, ContentKind.ARTICLE, clock=clock)).granted

    denied = await AccessGate.check(db, member, a3, ContentKind.ARTICLE, clock=clock)
    assert denied.granted is False
    assert denied.reason == DenialReason.DAILY_LIMIT_REACHED
    assert (denied.limit, denied.used) == (2, 2)

    # Re-reading an item already viewed is still allowed and costs nothing
    again = await AccessGate.check(db, member, a1, ContentKind.ARTICLE, clock=clock)
    assert again.granted is True
    assert again.recorded == RecordResult.ALREADY_RECORDED
    assert await UsageCounter.count_today(db, member.id, ContentKind.ARTICLE, clock=clock) == 2


@pytest.mark.asyncio
async def test_quota_resets_next_day(db, clock):
    admin = await make_admin(db)
    member = await make_user(db)
    await subscribe(db, member, await make_plan(db, article_limit=1), clock=clock)
    first, second = await make_article(db, admin), await make_article(db, admin)

    assert (await AccessGate.check(db, member, first, ContentKind.ARTICLE, clock=clock)).granted
    assert not (await AccessGate.check(db, member, second, ContentKind.ARTICLE, clock=clock)).granted

    clock.advance(days=1)
    assert (await AccessGate.check(db, member, second, ContentKind.ARTICLE, clock=clock)).granted


@pytest.mark.asyncio
async def test_zero_limit_denies_that_kind_only(db, clock):
    admin = await make_admin(db)
    member = await make_user(db)
    await subscribe(db, member, await make_plan(db, article_limit=0, video_limit=UNLIMITED), clock=clock)
    article = await make_article(db, admin)
    video = await make_video(db, admin)

    article_decision = await AccessGate.check(db, member, article, ContentKind.ARTICLE, clock=clock)
    video_decision = await AccessGate.check(db, member, video, ContentKind.VIDEO, clock=clock)

    assert article_decision.reason == DenialReason.DAILY_LIMIT_REACHED
    assert (article_decision.limit, article_decision.used) == (0, 0)
    assert video_decision.granted is True


@pytest.mark.asyncio
async def test_unlimited_plan_never_denies(db, clock):
    admin = await make_admin(db)
    member = await make_user(db)
    await subscribe(db, member, await make_plan(db, article_limit=UNLIMITED), clock=clock)

    for _ in range(15):
        article = await make_article(db, admin)
        assert (await AccessGate.check(db, member, article, ContentKind.ARTICLE, clock=clock)).granted

    assert await UsageCounter.count_today(db, member.id, ContentKind.ARTICLE, clock=clock) == 15


@pytest.mark.asyncio
async def test_plan_switch_keeps_todays_usage(db, clock):
    admin = await make_admin(db)
    member = await make_user(db)
    await subscribe(db, member, await make_plan(db, article_limit=2), clock=clock)
    a1, a2, a3 = [await make_article(db, admin) for _ in range(3)]
    await AccessGate.check(db, member, a1, ContentKind.ARTICLE, clock=clock)
    await AccessGate.check(db, member, a2, ContentKind.ARTICLE, clock=clock)

    await subscribe(db, member, await make_plan(db, article_limit=3), clock=clock)

    assert (await AccessGate.check(db, member, a3, ContentKind.ARTICLE, clock=clock)).granted
    assert await UsageCounter.count_today(db, member.id, ContentKind.ARTICLE, clock=clock) == 3


@pytest.mark.asyncio
async def test_enforce_raises_with_limit_and_used(db, clock):
    admin = await make_admin(db)
    member = await make_user(db)
    await subscribe(db, member, await make_plan(db, video_limit=1), clock=clock)
    v1, v2 = await make_video(db, admin), await make_video(db, admin)
    await AccessGate.enforce(db, member, v1, ContentKind.VIDEO, clock=clock)

    with pytest.raises(PolicyDenialError) as exc_info:
        await AccessGate.enforce(db, member, v2, ContentKind.VIDEO, clock=clock)

    error = exc_info.value
    assert error.status_code == 403
    assert error.to_dict() == {
        "message": "Daily video limit reached",
        "error": "DAILY_LIMIT_REACHED",
        "limit": 1,
        "used": 1,
    }


@pytest.mark.asyncio
async def test_listing_requires_subscription_only(db, clock):
    admin = await make_admin(db)
    member = await make_user(db)

    assert (await AccessGate.check_listing(db, admin, ContentKind.ARTICLE)).granted
    denied = await AccessGate.check_listing(db, member, ContentKind.ARTICLE)
    assert denied.reason == DenialReason.SUBSCRIPTION_REQUIRED

    await subscribe(db, member, await make_plan(db, article_limit=0), clock=clock)
    assert (await AccessGate.check_listing(db, member, ContentKind.ARTICLE)).granted
