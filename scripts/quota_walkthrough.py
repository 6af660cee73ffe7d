"""
Walk a running API through the daily quota flow.

Steps:
1. As admin, publish a few articles (one more than the plan allows)
2. Register a fresh member and subscribe it to the walkthrough plan
3. Read articles until the API answers DAILY_LIMIT_REACHED
4. Re-read the first article (must still succeed) and print today's usage

Run against a server whose plans were seeded (scripts.seed_plans):
    python -m scripts.quota_walkthrough <admin-token>
"""
import asyncio
import sys
import uuid
from datetime import datetime
from typing import Optional, List

import httpx

from scripts.config import API_BASE_URL, API_TIMEOUT, WALKTHROUGH_ARTICLES, WALKTHROUGH_PLAN_SLUG


class APIClient:
    """
    HTTP client for bearer-authenticated requests against the API.

    Keeps a log of every request and its status code.
    """

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: int = API_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.requests_log: List[dict] = []

    async def request(
        self,
        method: str,
        endpoint: str,
        json_data: Optional[dict] = None,
    ) -> tuple[Optional[dict], int]:
        """
        Make a request and return (JSON body, status code).

        Transport failures are re-raised; HTTP errors are returned so the
        caller can inspect the error body.
        """
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout) as client:
            response = await client.request(method, endpoint, headers=headers, json=json_data)

        self.requests_log.append({
            "timestamp": datetime.now(),
            "method": method,
            "endpoint": endpoint,
            "status_code": response.status_code,
        })

        if response.status_code == 204 or not response.content:
            return None, response.status_code
        return response.json(), response.status_code


def expect(status_code: int, expected: int, body, step: str):
    if status_code != expected:
        raise RuntimeError(f"{step}: expected {expected}, got {status_code}: {body}")


async def main():
    if len(sys.argv) < 2:
        print("Usage: python -m scripts.quota_walkthrough <admin-token>")
        sys.exit(1)

    admin = APIClient(API_BASE_URL, token=sys.argv[1])
    member = APIClient(API_BASE_URL)

    print("\n" + "="*70)
    print(" "*18 + "CONTENT API - DAILY QUOTA WALKTHROUGH")
    print("="*70)

    # ===== STEP 1: Publish articles =====
    print("\n[STEP 1/4] Publishing articles...")
    article_ids = []
    for n in range(WALKTHROUGH_ARTICLES):
        body, status = await admin.request("POST", "/api/v1/articles", {
            "title": f"Walkthrough article {uuid.uuid4().hex[:8]}",
            "content": f"Walkthrough body number {n + 1}.",
            "is_published": True,
        })
        expect(status, 201, body, "create article")
        article_ids.append(body["id"])
    print(f"   ✓ Created articles {article_ids}")

    # ===== STEP 2: Register and subscribe =====
    print("\n[STEP 2/4] Registering member and subscribing...")
    password = uuid.uuid4().hex
    body, status = await member.request("POST", "/api/v1/auth/register", {
        "name": "Walkthrough Member",
        "email": f"walkthrough_{uuid.uuid4().hex[:10]}@example.com",
        "password": password,
        "password_confirmation": password,
    })
    expect(status, 201, body, "register")
    member.token = body["token"]

    plans, status = await member.request("GET", "/api/v1/plans")
    expect(status, 200, plans, "list plans")
    plan = next((p for p in plans if p["slug"] == WALKTHROUGH_PLAN_SLUG), None)
    if plan is None:
        raise RuntimeError(f"Plan '{WALKTHROUGH_PLAN_SLUG}' not found; run scripts.seed_plans first")

    body, status = await member.request("POST", "/api/v1/subscriptions", {"plan_id": plan["id"]})
    expect(status, 201, body, "subscribe")
    print(f"   ✓ Subscribed to {plan['name']} (articles/day: {plan['daily_article_limit']})")

    # ===== STEP 3: Read until refused =====
    print("\n[STEP 3/4] Reading articles...")
    for article_id in article_ids:
        body, status = await member.request("GET", f"/api/v1/articles/{article_id}")
        if status == 200:
            print(f"   ✓ Article {article_id}: granted")
        else:
            print(f"   ✗ Article {article_id}: {status} {body.get('error')} "
                  f"(limit={body.get('limit')}, used={body.get('used')})")

    # ===== STEP 4: Re-read and report =====
    print("\n[STEP 4/4] Re-reading the first article...")
    body, status = await member.request("GET", f"/api/v1/articles/{article_ids[0]}")
    print(f"   {'✓' if status == 200 else '✗'} Re-read status: {status}")

    current, status = await member.request("GET", "/api/v1/subscriptions/current")
    expect(status, 200, current, "current subscription")
    print(f"   Articles read today: {current['articles_read_today']}")
    print(f"   Videos watched today: {current['videos_watched_today']}")

    print("\n" + "="*70)
    print(f"Requests made: {len(admin.requests_log) + len(member.requests_log)}")
    print("="*70 + "\n")


if __name__ == "__main__":
    asyncio.run(main())
