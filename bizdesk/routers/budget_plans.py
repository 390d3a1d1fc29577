"""
Budget plans router.

Endpoints:
  POST   /budget-plans                         — Create a plan
  GET    /budget-plans                         — List own plans (all for admins)
  GET    /budget-plans/{id}                    — Get a plan with its items
  PUT    /budget-plans/{id}                    — Update a plan
  DELETE /budget-plans/{id}                    — Delete a plan and its items
  POST   /budget-plans/{id}/items              — Add an item
  PUT    /budget-plans/{id}/items/{item_id}    — Update an item
  DELETE /budget-plans/{id}/items/{item_id}    — Delete an item
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.database import get_db
from bizdesk.dependencies import get_current_user
from bizdesk.models.user import User
from bizdesk.schemas.budget import (
    BudgetItemCreateRequest,
    BudgetItemResponse,
    BudgetItemUpdateRequest,
    BudgetPlanRequest,
    BudgetPlanResponse,
)
from bizdesk.services import budget_service

router = APIRouter()


@router.post(
    "",
    response_model=BudgetPlanResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a budget plan",
)
async def create_budget_plan(
    request: BudgetPlanRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Create a plan covering **start_date** to **end_date** (inclusive) with a
    **total_budget**. Plans whose end date is still ahead show up on the
    dashboard as upcoming payments.
    """
    return await budget_service.create_budget_plan(
        db=db,
        user=user,
        name=request.name,
        description=request.description,
        start_date=request.start_date,
        end_date=request.end_date,
        total_budget=request.total_budget,
    )


@router.get(
    "",
    response_model=list[BudgetPlanResponse],
    summary="List budget plans",
)
async def list_budget_plans(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await budget_service.list_budget_plans(db, user)


@router.get(
    "/{budget_plan_id}",
    response_model=BudgetPlanResponse,
    summary="Get a budget plan",
)
async def get_budget_plan(
    budget_plan_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await budget_service.get_budget_plan(db, budget_plan_id, user)


@router.put(
    "/{budget_plan_id}",
    response_model=BudgetPlanResponse,
    summary="Update a budget plan",
)
async def update_budget_plan(
    budget_plan_id: uuid.UUID,
    request: BudgetPlanRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await budget_service.update_budget_plan(
        db=db,
        budget_plan_id=budget_plan_id,
        user=user,
        name=request.name,
        description=request.description,
        start_date=request.start_date,
        end_date=request.end_date,
        total_budget=request.total_budget,
    )


@router.delete(
    "/{budget_plan_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a budget plan",
)
async def delete_budget_plan(
    budget_plan_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await budget_service.delete_budget_plan(db, budget_plan_id, user)


@router.post(
    "/{budget_plan_id}/items",
    response_model=BudgetItemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a budget item",
)
async def add_budget_item(
    budget_plan_id: uuid.UUID,
    request: BudgetItemCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await budget_service.add_budget_item(
        db=db,
        budget_plan_id=budget_plan_id,
        user=user,
        name=request.name,
        amount=request.amount,
        description=request.description,
    )


@router.put(
    "/{budget_plan_id}/items/{item_id}",
    response_model=BudgetItemResponse,
    summary="Update a budget item",
)
async def update_budget_item(
    budget_plan_id: uuid.UUID,
    item_id: uuid.UUID,
    request: BudgetItemUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await budget_service.update_budget_item(
        db=db,
        budget_plan_id=budget_plan_id,
        item_id=item_id,
        user=user,
        name=request.name,
        amount=request.amount,
        status=request.status,
        description=request.description,
    )


@router.delete(
    "/{budget_plan_id}/items/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a budget item",
)
async def delete_budget_item(
    budget_plan_id: uuid.UUID,
    item_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await budget_service.delete_budget_item(db, budget_plan_id, item_id, user)
