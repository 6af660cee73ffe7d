"""
API endpoints for articles.

Reading is metered by the access gate:
- Listings require an active subscription and never consume quota
- Opening an article counts against the plan's daily article limit
Admins manage articles and read them without limits.
"""
from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access_gate import AccessGate
from app.core.clock import Clock, get_clock
from app.core.config import PAGE_SIZE
from app.core.content_service import ContentService
from app.core.database import get_db
from app.core.dependencies import get_current_user, require_admin
from app.core.rate_limit import limiter, get_default_rate_limit
from app.models.plan import ContentKind
from app.models.user import User
from app.schemas.article import ArticleCreate, ArticleUpdate, ArticleResponse, ArticleSummary
from app.schemas.common import Page, build_page_meta

router = APIRouter()


@router.get("", response_model=Page[ArticleSummary])
@limiter.limit(get_default_rate_limit)
async def list_articles(
    request: Request,
    response: Response,
    page: int = Query(1, ge=1, description="Page number"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    List articles, newest first, with excerpts instead of full content.

    Members need an active subscription and only see published articles.
    Admins see drafts as well.

    Raises:
        PolicyDenialError 403: SUBSCRIPTION_REQUIRED
    """
    await AccessGate.enforce_listing(db, user, ContentKind.ARTICLE)

    items, total = await ContentService.list_items(
        db, ContentKind.ARTICLE, user, page=page, per_page=PAGE_SIZE
    )
    return Page[ArticleSummary](
        data=[ArticleSummary.model_validate(item) for item in items],
        meta=build_page_meta(page, PAGE_SIZE, total),
    )


@router.get("/{article_id}", response_model=ArticleResponse)
@limiter.limit(get_default_rate_limit)
async def get_article(
    request: Request,
    response: Response,
    article_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    """
    Read one article.

    The first read of an article counts towards today's quota; reading it
    again does not.

    Raises:
        NotFoundError 404: ARTICLE_NOT_FOUND
        PolicyDenialError 403: ARTICLE_NOT_PUBLISHED, SUBSCRIPTION_REQUIRED
            or DAILY_LIMIT_REACHED (with limit and used)
    """
    article = await ContentService.get_item(db, ContentKind.ARTICLE, article_id)
    await AccessGate.enforce(db, user, article, ContentKind.ARTICLE, clock=clock)
    return article


@router.post("", response_model=ArticleResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_default_rate_limit)
async def create_article(
    request: Request,
    response: Response,
    data: ArticleCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Create an article (admin only)."""
    return await ContentService.create_item(db, ContentKind.ARTICLE, admin, data.model_dump())


@router.put("/{article_id}", response_model=ArticleResponse)
@limiter.limit(get_default_rate_limit)
async def update_article(
    request: Request,
    response: Response,
    article_id: int,
    data: ArticleUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Update an article (admin only). Only provided fields change."""
    return await ContentService.update_item(
        db, ContentKind.ARTICLE, article_id, data.model_dump(exclude_unset=True)
    )


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(get_default_rate_limit)
async def delete_article(
    request: Request,
    response: Response,
    article_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await ContentService.delete_item(db, ContentKind.ARTICLE, article_id)
