"""
Budget service — budget plans and the items that break them down.

Plans belong to the user who created them. Owners manage their own plans;
admins may read and manage anyone's. Items are reached through their plan,
so every item operation goes through the same ownership check.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.exceptions import ResourceNotFoundError, UnauthorizedAccessError
from bizdesk.models.budget import BudgetItem, BudgetPlan
from bizdesk.models.user import Role, User

logger = logging.getLogger(__name__)


async def create_budget_plan(
    db: AsyncSession,
    user: User,
    name: str,
    start_date: date,
    end_date: date,
    total_budget: Decimal,
    description: str | None = None,
) -> BudgetPlan:
    """Create a budget plan owned by ``user``, with no items yet."""
    plan = BudgetPlan(
        user_id=user.id,
        name=name,
        description=description,
        start_date=start_date,
        end_date=end_date,
        total_budget=total_budget,
        items=[],
    )
    db.add(plan)
    await db.flush()

    logger.info("Budget plan %s created by user %s", plan.id, user.id)
    return plan


async def list_budget_plans(db: AsyncSession, user: User) -> list[BudgetPlan]:
    """Own plans (every plan for admins), newest first."""
    query = select(BudgetPlan).order_by(BudgetPlan.created_at.desc())
    if not user.has_role(Role.ADMIN):
        query = query.where(BudgetPlan.user_id == user.id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_budget_plan(
    db: AsyncSession,
    budget_plan_id: uuid.UUID,
    user: User,
) -> BudgetPlan:
    """
    Get a single plan with its items, verifying ownership (admins bypass).

    Raises:
        ResourceNotFoundError: If the plan doesn't exist.
        UnauthorizedAccessError: If it belongs to someone else.
    """
    plan = await db.get(BudgetPlan, budget_plan_id)
    if plan is None:
        raise ResourceNotFoundError("Budget plan", budget_plan_id)

    if plan.user_id != user.id and not user.has_role(Role.ADMIN):
        raise UnauthorizedAccessError("You do not have access to this budget plan")

    return plan


async def update_budget_plan(
    db: AsyncSession,
    budget_plan_id: uuid.UUID,
    user: User,
    name: str,
    start_date: date,
    end_date: date,
    total_budget: Decimal,
    description: str | None = None,
) -> BudgetPlan:
    """Replace a plan's fields. Its items are left as they are."""
    plan = await get_budget_plan(db, budget_plan_id, user)
    plan.name = name
    plan.description = description
    plan.start_date = start_date
    plan.end_date = end_date
    plan.total_budget = total_budget
    await db.flush()
    return plan


async def delete_budget_plan(
    db: AsyncSession,
    budget_plan_id: uuid.UUID,
    user: User,
) -> None:
    """Delete a plan together with its items."""
    plan = await get_budget_plan(db, budget_plan_id, user)
    await db.delete(plan)
    await db.flush()

    logger.info("Budget plan %s deleted by user %s", budget_plan_id, user.id)


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------

async def add_budget_item(
    db: AsyncSession,
    budget_plan_id: uuid.UUID,
    user: User,
    name: str,
    amount: Decimal,
    description: str | None = None,
) -> BudgetItem:
    """Add an item to a plan. New items always start as "planned"."""
    plan = await get_budget_plan(db, budget_plan_id, user)
    item = BudgetItem(name=name, amount=amount, description=description, status="planned")
    plan.items.append(item)
    await db.flush()
    return item


async def _get_budget_item(
    db: AsyncSession,
    budget_plan_id: uuid.UUID,
    item_id: uuid.UUID,
    user: User,
) -> tuple[BudgetPlan, BudgetItem]:
    plan = await get_budget_plan(db, budget_plan_id, user)
    for item in plan.items:
        if item.id == item_id:
            return plan, item
    raise ResourceNotFoundError("Budget item", item_id)


async def update_budget_item(
    db: AsyncSession,
    budget_plan_id: uuid.UUID,
    item_id: uuid.UUID,
    user: User,
    name: str,
    amount: Decimal,
    status: str,
    description: str | None = None,
) -> BudgetItem:
    _, item = await _get_budget_item(db, budget_plan_id, item_id, user)
    item.name = name
    item.amount = amount
    item.status = status
    item.description = description
    await db.flush()
    return item


async def delete_budget_item(
    db: AsyncSession,
    budget_plan_id: uuid.UUID,
    item_id: uuid.UUID,
    user: User,
) -> None:
    plan, item = await _get_budget_item(db, budget_plan_id, item_id, user)
    plan.items.remove(item)
    await db.flush()
