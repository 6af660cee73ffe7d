"""
Install the default plan catalog (Pro Reader, Plus Reader, Free).

Safe to run repeatedly: plans whose slug already exists are skipped.

    python -m scripts.seed_plans
"""
import asyncio

from scripts.config import require_database_url

require_database_url()

from app.core.database import AsyncSessionLocal, Base, engine
from app.core.plan_registry import PlanRegistry
from app.models import user, plan, subscription, article, video, article_view, video_view  # noqa: F401


async def main():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        created = await PlanRegistry.seed_default_plans(db)
        plans = await PlanRegistry.list_plans(db, include_inactive=True)

    print("\n" + "="*60)
    print(f"Created {len(created)} plan(s)")
    print("="*60)
    for p in plans:
        limits = f"articles={p.daily_article_limit}, videos={p.daily_video_limit}"
        print(f"  [{p.id}] {p.name:<15} {p.kind.value:<12} {limits} active={p.is_active}")
    print("="*60 + "\n")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
