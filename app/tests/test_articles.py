"""
Test suite for the /api/v1/articles endpoints.

Covers listing, metered reads and admin management.
"""
import pytest

from app.tests.factories import auth_headers, make_admin, make_article, make_plan, make_user, subscribe


@pytest.mark.asyncio
async def test_daily_article_quota_scenario(client, db, clock):
    """
    Free plan (3 articles/day): three distinct reads succeed, the fourth is
    refused, and re-reading an article already opened is still allowed.
    """
    # Setup: Member on a 3-per-day plan and four published articles
    admin = await make_admin(db)
    member = await make_user(db)
    await subscribe(db, member, await make_plan(db, article_limit=3), clock=clock)
    a1, a2, a3, a4 = [await make_article(db, admin) for _ in range(4)]
    headers = auth_headers(member)

    # Execute: Read the first three
    for article in (a1, a2, a3):
        response = await client.get(f"/api/v1/articles/{article.id}", headers=headers)
        assert response.status_code == 200, response.text
        assert response.json()["content"] == article.content

    # Assert: Fourth distinct article is refused with limit/used
    denied = await client.get(f"/api/v1/articles/{a4.id}", headers=headers)
    assert denied.status_code == 403
    assert denied.json() == {
        "message": "Daily article limit reached",
        "error": "DAILY_LIMIT_REACHED",
        "limit": 3,
        "used": 3,
    }

    # Assert: Re-read does not consume quota
    again = await client.get(f"/api/v1/articles/{a1.id}", headers=headers)
    assert again.status_code == 200

    current = await client.get("/api/v1/subscriptions/current", headers=headers)
    assert current.json()["articles_read_today"] == 3


@pytest.mark.asyncio
async def test_quota_is_available_again_next_day(client, db, clock):
    admin = await make_admin(db)
    member = await make_user(db)
    await subscribe(db, member, await make_plan(db, article_limit=1), clock=clock)
    first, second = await make_article(db, admin), await make_article(db, admin)
    headers = auth_headers(member)

    assert (await client.get(f"/api/v1/articles/{first.id}", headers=headers)).status_code == 200
    assert (await client.get(f"/api/v1/articles/{second.id}", headers=headers)).status_code == 403

    clock.advance(days=1)

    assert (await client.get(f"/api/v1/articles/{second.id}", headers=headers)).status_code == 200


@pytest.mark.asyncio
async def test_read_requires_subscription(client, db):
    article = await make_article(db, await make_admin(db))

    response = await client.get(f"/api/v1/articles/{article.id}", headers=auth_headers(await make_user(db)))

    assert response.status_code == 403
    assert response.json() == {
        "message": "Subscription required to view articles",
        "error": "SUBSCRIPTION_REQUIRED",
    }


@pytest.mark.asyncio
async def test_unpublished_article(client, db, clock):
    admin = await make_admin(db)
    member = await make_user(db)
    await subscribe(db, member, await make_plan(db), clock=clock)
    draft = await make_article(db, admin, published=False)

    as_member = await client.get(f"/api/v1/articles/{draft.id}", headers=auth_headers(member))
    as_admin = await client.get(f"/api/v1/articles/{draft.id}", headers=auth_headers(admin))

    assert as_member.status_code == 403
    assert as_member.json()["error"] == "ARTICLE_NOT_PUBLISHED"
    assert as_admin.status_code == 200


@pytest.mark.asyncio
async def test_missing_article(client, db, clock):
    member = await make_user(db)
    await subscribe(db, member, await make_plan(db), clock=clock)

    response = await client.get("/api/v1/articles/999", headers=auth_headers(member))

    assert response.status_code == 404
    assert response.json()["error"] == "ARTICLE_NOT_FOUND"


@pytest.mark.asyncio
async def test_listing_is_paginated_and_does_not_consume_quota(client, db, clock):
    admin = await make_admin(db)
    member = await make_user(db)
    await subscribe(db, member, await make_plan(db, article_limit=1), clock=clock)
    for _ in range(12):
        await make_article(db, admin, content="x" * 500)
    await make_article(db, admin, published=False)
    headers = auth_headers(member)

    page_one = await client.get("/api/v1/articles", headers=headers)
    page_two = await client.get("/api/v1/articles", params={"page": 2}, headers=headers)
    admin_view = await client.get("/api/v1/articles", headers=auth_headers(admin))

    assert page_one.status_code == 200
    body = page_one.json()
    assert len(body["data"]) == 10
    assert body["meta"] == {"current_page": 1, "per_page": 10, "total": 12, "last_page": 2}
    assert len(page_two.json()["data"]) == 2

    entry = body["data"][0]
    assert "content" not in entry
    assert entry["excerpt"].endswith("...")
    assert len(entry["excerpt"]) <= 203

    assert admin_view.json()["meta"]["total"] == 13

    current = await client.get("/api/v1/subscriptions/current", headers=headers)
    assert current.json()["articles_read_today"] == 0


@pytest.mark.asyncio
async def test_listing_requires_subscription(client, db):
    await make_article(db, await make_admin(db))

    response = await client.get("/api/v1/articles", headers=auth_headers(await make_user(db)))

    assert response.status_code == 403
    assert response.json()["error"] == "SUBSCRIPTION_REQUIRED"


@pytest.mark.asyncio
async def test_admin_manages_articles(client, db):
    headers = auth_headers(await make_admin(db))

    created = await client.post(
        "/api/v1/articles",
        json={"title": "Hello World", "content": "First post body", "is_published": True},
        headers=headers,
    )
    assert created.status_code == 201, created.text
    article = created.json()
    assert article["slug"] == "hello-world"

    updated = await client.put(
        f"/api/v1/articles/{article['id']}",
        json={"title": "Hello Again"},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["slug"] == "hello-again"
    assert updated.json()["content"] == "First post body"

    deleted = await client.delete(f"/api/v1/articles/{article['id']}", headers=headers)
    assert deleted.status_code == 204

    gone = await client.get(f"/api/v1/articles/{article['id']}", headers=headers)
    assert gone.status_code == 404


@pytest.mark.asyncio
async def test_article_management_requires_admin(client, db):
    member = await make_user(db)
    article = await make_article(db, await make_admin(db))
    headers = auth_headers(member)

    create = await client.post("/api/v1/articles", json={"title": "T", "content": "C"}, headers=headers)
    update = await client.put(f"/api/v1/articles/{article.id}", json={"title": "T"}, headers=headers)
    delete = await client.delete(f"/api/v1/articles/{article.id}", headers=headers)

    assert [r.status_code for r in (create, update, delete)] == [403, 403, 403]


@pytest.mark.asyncio
async def test_create_article_validation(client, db):
    headers = auth_headers(await make_admin(db))

    response = await client.post("/api/v1/articles", json={"title": ""}, headers=headers)

    assert response.status_code == 422
    assert {"title", "content"} <= set(response.json()["errors"])


@pytest.mark.asyncio
async def test_deleting_a_read_article_keeps_todays_usage(client, db, clock):
    """
    A member at quota cannot read a new article after the one they read was
    deleted: the view still counts and the new article gets a fresh id.
    """
    # Setup: Member on a 1-per-day plan reads one article
    admin = await make_admin(db)
    member = await make_user(db)
    await subscribe(db, member, await make_plan(db, article_limit=1), clock=clock)
    read = await make_article(db, admin)
    headers = auth_headers(member)
    admin_headers = auth_headers(admin)
    assert (await client.get(f"/api/v1/articles/{read.id}", headers=headers)).status_code == 200

    # Execute: Admin deletes it and publishes a replacement
    deleted = await client.delete(f"/api/v1/articles/{read.id}", headers=admin_headers)
    created = await client.post(
        "/api/v1/articles",
        json={"title": "Replacement", "content": "New body", "is_published": True},
        headers=admin_headers,
    )
    assert deleted.status_code == 204
    assert created.status_code == 201
    replacement_id = created.json()["id"]

    # Assert: New id, quota still used up
    assert replacement_id != read.id
    denied = await client.get(f"/api/v1/articles/{replacement_id}", headers=headers)
    assert denied.status_code == 403
    assert denied.json()["error"] == "DAILY_LIMIT_REACHED"
    assert (denied.json()["limit"], denied.json()["used"]) == (1, 1)

    current = await client.get("/api/v1/subscriptions/current", headers=headers)
    assert current.json()["articles_read_today"] == 1
