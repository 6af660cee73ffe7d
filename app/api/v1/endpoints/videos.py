"""
API endpoints for videos.

Reading is metered by the access gate:
- Listings require an active subscription and never consume quota
- Opening a video counts against the plan's daily video limit
Admins manage videos and read them without limits.
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
from app.schemas.video import VideoCreate, VideoUpdate, VideoResponse, VideoSummary
from app.schemas.common import Page, build_page_meta

router = APIRouter()


@router.get("", response_model=Page[VideoSummary])
@limiter.limit(get_default_rate_limit)
async def list_videos(
    request: Request,
    response: Response,
    page: int = Query(1, ge=1, description="Page number"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    List videos, newest first, with excerpts instead of full content.

    Members need an active subscription and only see published videos.
    Admins see drafts as well.

    Raises:
        PolicyDenialError 403: SUBSCRIPTION_REQUIRED
    """
    await AccessGate.enforce_listing(db, user, ContentKind.VIDEO)

    items, total = await ContentService.list_items(
        db, ContentKind.VIDEO, user, page=page, per_page=PAGE_SIZE
    )
    return Page[VideoSummary](
        data=[VideoSummary.model_validate(item) for item in items],
        meta=build_page_meta(page, PAGE_SIZE, total),
    )


@router.get("/{video_id}", response_model=VideoResponse)
@limiter.limit(get_default_rate_limit)
async def get_video(
    request: Request,
    response: Response,
    video_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    """
    Watch one video.

    The first view of a video counts towards today's quota; watching it
    again does not.

    Raises:
        NotFoundError 404: VIDEO_NOT_FOUND
        PolicyDenialError 403: VIDEO_NOT_PUBLISHED, SUBSCRIPTION_REQUIRED
            or DAILY_LIMIT_REACHED (with limit and used)
    """
    video = await ContentService.get_item(db, ContentKind.VIDEO, video_id)
    await AccessGate.enforce(db, user, video, ContentKind.VIDEO, clock=clock)
    return video


@router.post("", response_model=VideoResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_default_rate_limit)
async def create_video(
    request: Request,
    response: Response,
    data: VideoCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Create a video (admin only)."""
    return await ContentService.create_item(db, ContentKind.VIDEO, admin, data.model_dump())


@router.put("/{video_id}", response_model=VideoResponse)
@limiter.limit(get_default_rate_limit)
async def update_video(
    request: Request,
    response: Response,
    video_id: int,
    data: VideoUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Update a video (admin only). Only provided fields change."""
    return await ContentService.update_item(
        db, ContentKind.VIDEO, video_id, data.model_dump(exclude_unset=True)
    )


@router.delete("/{video_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(get_default_rate_limit)
async def delete_video(
    request: Request,
    response: Response,
    video_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await ContentService.delete_item(db, ContentKind.VIDEO, video_id)
