"""
Subscriptions router — applications and the approval workflow.

Endpoints:
  POST /subscriptions/apply          — Apply for a product price
  GET  /subscriptions                — List (staff: all, others: own)
  GET  /subscriptions/{id}           — Get one subscription
  POST /subscriptions/{id}/approve   — [Manager] Approve, note optional
  POST /subscriptions/{id}/reject    — [Manager] Reject, note required
  POST /subscriptions/{id}/cancel    — Cancel an active one, note required
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.database import get_db
from bizdesk.dependencies import get_current_user, require_manager
from bizdesk.models.user import User
from bizdesk.schemas.subscription import (
    SubscriptionApplyRequest,
    SubscriptionNoteRequest,
    SubscriptionResponse,
)
from bizdesk.services import subscription_service

router = APIRouter()


def _note(request: SubscriptionNoteRequest | None) -> str | None:
    return request.note if request is not None else None


@router.post(
    "/apply",
    response_model=SubscriptionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Apply for a subscription",
)
async def apply_subscription(
    request: SubscriptionApplyRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Apply for a subscription to a product price.

    The application waits in **pending_approval** for a manager. The first
    billing date follows the price's billing cycle.
    """
    return await subscription_service.apply_subscription(
        db=db,
        user=user,
        product_price_id=request.product_price_id,
        start_date=request.start_date,
        end_date=request.end_date,
        auto_renew=request.auto_renew,
        notes=request.notes,
        subscription_number=request.subscription_number,
    )


@router.get(
    "",
    response_model=list[SubscriptionResponse],
    summary="List subscriptions",
)
async def list_subscriptions(
    status_filter: str | None = Query(None, alias="status", description="Filter by status"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await subscription_service.list_subscriptions(db, user, status_filter)


@router.get(
    "/{subscription_id}",
    response_model=SubscriptionResponse,
    summary="Get a subscription",
)
async def get_subscription(
    subscription_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await subscription_service.get_subscription(db, subscription_id, user)


@router.post(
    "/{subscription_id}/approve",
    response_model=SubscriptionResponse,
    summary="Approve a pending subscription",
)
async def approve_subscription(
    subscription_id: uuid.UUID,
    request: SubscriptionNoteRequest | None = None,
    manager: User = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Approve and make the subscriber a customer. The note is optional."""
    return await subscription_service.approve_subscription(
        db, subscription_id, manager, _note(request)
    )


@router.post(
    "/{subscription_id}/reject",
    response_model=SubscriptionResponse,
    summary="Reject a pending subscription",
)
async def reject_subscription(
    subscription_id: uuid.UUID,
    request: SubscriptionNoteRequest | None = None,
    manager: User = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Reject with a reason. An empty note fails with 422 missing_note."""
    return await subscription_service.reject_subscription(
        db, subscription_id, manager, _note(request)
    )


@router.post(
    "/{subscription_id}/cancel",
    response_model=SubscriptionResponse,
    summary="Cancel an active subscription",
)
async def cancel_subscription(
    subscription_id: uuid.UUID,
    request: SubscriptionNoteRequest | None = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Cancel an active subscription with a reason.

    Subscribers may cancel their own; managers and admins anyone's.
    """
    return await subscription_service.cancel_subscription(
        db, subscription_id, user, _note(request)
    )
