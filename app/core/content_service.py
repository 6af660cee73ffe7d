"""
Service layer for articles and videos.

Admins create, edit and delete content; everyone else only reads it through
the access gate. Articles and videos share the same lifecycle, so one
service handles both, keyed by ContentKind.
"""
import logging
from typing import Any, Mapping

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from app.core.errors import NotFoundError
from app.core.slugs import slugify
from app.models.article import Article
from app.models.plan import ContentKind
from app.models.user import User
from app.models.video import Video

logger = logging.getLogger(__name__)

CONTENT_MODELS = {
    ContentKind.ARTICLE: Article,
    ContentKind.VIDEO: Video,
}


class ContentService:
    """
    Service class for content CRUD and listings.
    """

    @staticmethod
    async def get_item(db: AsyncSession, kind: ContentKind, item_id: int):
        """
        Retrieve an article or video by ID regardless of publication status.

        Raises:
            NotFoundError 404: ARTICLE_NOT_FOUND / VIDEO_NOT_FOUND
        """
        model = CONTENT_MODELS[kind]
        result = await db.execute(select(model).where(model.id == item_id))
        item = result.scalar_one_or_none()

        if not item:
            noun = kind.value.capitalize()
            raise NotFoundError(f"{kind.value}_NOT_FOUND", f"{noun} not found")

        return item

    @staticmethod
    async def list_items(
        db: AsyncSession,
        kind: ContentKind,
        caller: User,
        page: int = 1,
        per_page: int = 10,
    ) -> tuple[list, int]:
        """
        One page of content, newest first.

        Admins see drafts too; other callers only see published items.

        Returns:
            tuple[list, int]: Items on the requested page and the total count
        """
        model = CONTENT_MODELS[kind]

        stmt = select(model)
        count_stmt = select(func.count(model.id))
        if not caller.is_admin:
            stmt = stmt.where(model.is_published == True)
            count_stmt = count_stmt.where(model.is_published == True)

        total = (await db.execute(count_stmt)).scalar() or 0

        stmt = (
            stmt.order_by(model.created_at.desc(), model.id.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all()), total

    @staticmethod
    async def create_item(
        db: AsyncSession,
        kind: ContentKind,
        author: User,
        data: Mapping[str, Any],
    ):
        """Create an article or video owned by the given admin."""
        model = CONTENT_MODELS[kind]
        values = dict(data)
        values.setdefault("is_published", False)

        item = model(user_id=author.id, slug=slugify(values["title"]), **values)
        db.add(item)
        await db.commit()
        await db.refresh(item)

        logger.info(f"[CONTENT] {kind.value} {item.id} '{item.slug}' created by user {author.id}")
        return item

    @staticmethod
    async def update_item(
        db: AsyncSession,
        kind: ContentKind,
        item_id: int,
        changes: Mapping[str, Any],
    ):
        """Apply a partial update; the slug follows the title."""
        item = await ContentService.get_item(db, kind, item_id)

        for field, value in changes.items():
            setattr(item, field, value)
        if "title" in changes:
            item.slug = slugify(changes["title"])

        await db.commit()
        await db.refresh(item)

        logger.info(f"[CONTENT] {kind.value} {item.id} updated: {sorted(changes)}")
        return item

    @staticmethod
    async def delete_item(db: AsyncSession, kind: ContentKind, item_id: int) -> None:
        item = await ContentService.get_item(db, kind, item_id)
        await db.delete(item)
        await db.commit()

        logger.info(f"[CONTENT] {kind.value} {item_id} deleted")
