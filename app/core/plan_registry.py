"""
Service layer for plan definitions.

Plans carry the daily quotas enforced by the access gate. They are never
deleted: deactivating a plan only stops new enrollments, existing
subscribers keep their plan until they cancel.
"""
import logging
from typing import Any, Mapping

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from pydantic import ValidationError as PydanticValidationError

from app.core.errors import ValidationError, NotFoundError
from app.core.slugs import slugify
from app.schemas.plan import PlanCreate, PlanUpdate
from app.models.plan import Plan, PlanKind, UNLIMITED

logger = logging.getLogger(__name__)

# Catalog installed by seed_default_plans()
DEFAULT_PLANS = [
    {
        "name": "Pro Reader",
        "description": "Access all articles and videos",
        "kind": PlanKind.PRO_READER,
        "daily_article_limit": UNLIMITED,
        "daily_video_limit": UNLIMITED,
    },
    {
        "name": "Plus Reader",
        "description": "Access 10 articles and 10 videos each day",
        "kind": PlanKind.PLUS_READER,
        "daily_article_limit": 10,
        "daily_video_limit": 10,
    },
    {
        "name": "Free",
        "description": "Access 3 articles and 3 videos each day",
        "kind": PlanKind.FREE,
        "daily_article_limit": 3,
        "daily_video_limit": 3,
    },
]


def validate_plan_definition(definition: Mapping[str, Any], partial: bool = False) -> dict:
    """
    Check a plan definition against the plan schemas and return its fields.

    Args:
        definition: Field values (unknown keys are ignored)
        partial: When True, missing fields are allowed and left out (updates)

    Returns:
        dict: Normalized values ready to assign on a Plan

    Raises:
        ValidationError: Listing every offending field
    """
    schema = PlanUpdate if partial else PlanCreate
    try:
        validated = schema.model_validate(dict(definition))
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e.errors()) from e

    return validated.model_dump(exclude_unset=partial)


class PlanRegistry:
    """
    Service class for plan-related operations.
    """

    @staticmethod
    async def get_plan(db: AsyncSession, plan_id: int) -> Plan:
        """
        Retrieve a plan by its ID.

        Raises:
            NotFoundError 404: If plan not found
        """
        result = await db.execute(select(Plan).where(Plan.id == plan_id))
        plan = result.scalar_one_or_none()

        if not plan:
            raise NotFoundError("PLAN_NOT_FOUND", f"Plan with ID {plan_id} not found")

        return plan

    @staticmethod
    async def list_active_plans(db: AsyncSession) -> list[Plan]:
        """Active plans in creation order."""
        return await PlanRegistry.list_plans(db, include_inactive=False)

    @staticmethod
    async def list_plans(db: AsyncSession, include_inactive: bool = False) -> list[Plan]:
        stmt = select(Plan).order_by(Plan.id)
        if not include_inactive:
            stmt = stmt.where(Plan.is_active == True)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def create_plan(db: AsyncSession, definition: Mapping[str, Any]) -> Plan:
        """
        Create a plan from a validated definition.

        Raises:
            ValidationError 422: If name is empty, a limit is below -1 or kind is unknown
        """
        values = validate_plan_definition(definition)

        plan = Plan(slug=slugify(values["name"]), **values)
        db.add(plan)
        await db.commit()
        await db.refresh(plan)

        logger.info(f"[PLAN] Created plan {plan.id} '{plan.name}' ({plan.kind.value})")
        return plan

    @staticmethod
    async def update_plan(db: AsyncSession, plan_id: int, changes: Mapping[str, Any]) -> Plan:
        """Partially update a plan; the slug follows the name."""
        plan = await PlanRegistry.get_plan(db, plan_id)
        values = validate_plan_definition(changes, partial=True)

        for field, value in values.items():
            setattr(plan, field, value)
        if "name" in values:
            plan.slug = slugify(values["name"])

        await db.commit()
        await db.refresh(plan)

        logger.info(f"[PLAN] Updated plan {plan.id}: {sorted(values)}")
        return plan

    @staticmethod
    async def deactivate_plan(db: AsyncSession, plan_id: int) -> Plan:
        """
        Stop new enrollments in a plan.

        Existing subscriptions on the plan are left untouched.
        """
        plan = await PlanRegistry.get_plan(db, plan_id)
        plan.is_active = False
        await db.commit()
        await db.refresh(plan)

        logger.info(f"[PLAN] Deactivated plan {plan.id} '{plan.name}'")
        return plan

    @staticmethod
    async def seed_default_plans(db: AsyncSession) -> list[Plan]:
        """
        Insert the default catalog, skipping plans whose slug already exists.

        Returns:
            list[Plan]: Plans created by this call
        """
        result = await db.execute(select(Plan.slug))
        existing = set(result.scalars().all())

        created = []
        for definition in DEFAULT_PLANS:
            if slugify(definition["name"]) in existing:
                continue
            created.append(await PlanRegistry.create_plan(db, definition))

        return created
