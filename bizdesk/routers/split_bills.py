"""
Split bills router.

Endpoints:
  POST   /split-bills        — Create a bill (title only, zero total)
  GET    /split-bills        — List own bills (all for admins)
  GET    /split-bills/{id}   — Get a bill with items and participants
  PUT    /split-bills/{id}   — Replace title, items and participants
  DELETE /split-bills/{id}   — Delete a bill
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.database import get_db
from bizdesk.dependencies import get_current_user
from bizdesk.models.user import User
from bizdesk.schemas.split_bill import (
    SplitBillCreateRequest,
    SplitBillResponse,
    SplitBillUpdateRequest,
)
from bizdesk.services import split_bill_service

router = APIRouter()


@router.post(
    "",
    response_model=SplitBillResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a split bill",
)
async def create_split_bill(
    request: SplitBillCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await split_bill_service.create_split_bill(db, user, request.title)


@router.get(
    "",
    response_model=list[SplitBillResponse],
    summary="List split bills",
)
async def list_split_bills(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await split_bill_service.list_split_bills(db, user)


@router.get(
    "/{split_bill_id}",
    response_model=SplitBillResponse,
    summary="Get a split bill",
)
async def get_split_bill(
    split_bill_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await split_bill_service.get_split_bill(db, split_bill_id, user)


@router.put(
    "/{split_bill_id}",
    response_model=SplitBillResponse,
    summary="Update a split bill",
)
async def update_split_bill(
    split_bill_id: uuid.UUID,
    request: SplitBillUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Replace the bill's **title**, **items** and **participants** in one go.

    The total is recomputed as the sum of price × quantity over the new
    items. Participants' amounts are stored as given.
    """
    return await split_bill_service.update_split_bill(
        db=db,
        split_bill_id=split_bill_id,
        user=user,
        title=request.title,
        items=[item.model_dump() for item in request.items],
        participants=[p.model_dump() for p in request.participants],
    )


@router.delete(
    "/{split_bill_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a split bill",
)
async def delete_split_bill(
    split_bill_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await split_bill_service.delete_split_bill(db, split_bill_id, user)
