"""
API endpoints for subscription plans.

Any authenticated user can browse active plans; only admins create, edit
and deactivate them. Plans are never physically deleted.
"""
from typing import List
from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import get_current_user, require_admin
from app.core.rate_limit import limiter, get_default_rate_limit
from app.core.errors import NotFoundError
from app.core.plan_registry import PlanRegistry
from app.models.user import User
from app.schemas.plan import PlanCreate, PlanUpdate, PlanResponse

router = APIRouter()


@router.get("", response_model=List[PlanResponse])
@limiter.limit(get_default_rate_limit)
async def list_plans(
    request: Request,
    response: Response,
    include_inactive: bool = Query(False, description="Admins only: include deactivated plans"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get available subscription plans with their daily limits.

    A limit of -1 means unlimited, 0 means no access to that content kind.
    The include_inactive flag is ignored for non-admin callers.

    Returns:
        List[PlanResponse]: Plans ordered by ID
    """
    return await PlanRegistry.list_plans(db, include_inactive=include_inactive and user.is_admin)


@router.get("/{plan_id}", response_model=PlanResponse)
@limiter.limit(get_default_rate_limit)
async def get_plan(
    request: Request,
    response: Response,
    plan_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get a single plan.

    Deactivated plans are only visible to admins.

    Raises:
        NotFoundError 404: PLAN_NOT_FOUND
    """
    plan = await PlanRegistry.get_plan(db, plan_id)

    if not plan.is_active and not user.is_admin:
        raise NotFoundError("PLAN_NOT_FOUND", f"Plan with ID {plan_id} not found")

    return plan


@router.post("", response_model=PlanResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_default_rate_limit)
async def create_plan(
    request: Request,
    response: Response,
    data: PlanCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Create a plan (admin only)."""
    return await PlanRegistry.create_plan(db, data.model_dump())


@router.put("/{plan_id}", response_model=PlanResponse)
@limiter.limit(get_default_rate_limit)
async def update_plan(
    request: Request,
    response: Response,
    plan_id: int,
    data: PlanUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Update a plan (admin only).

    New limits apply immediately to every subscriber of the plan, since
    quotas are read from the plan on each access.
    """
    return await PlanRegistry.update_plan(db, plan_id, data.model_dump(exclude_unset=True))


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(get_default_rate_limit)
async def deactivate_plan(
    request: Request,
    response: Response,
    plan_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Deactivate a plan (admin only).

    Existing subscribers keep the plan; new subscriptions are refused with
    PLAN_INACTIVE.
    """
    await PlanRegistry.deactivate_plan(db, plan_id)
