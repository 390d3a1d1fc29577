"""
Offers router — sales extend offers, leads decide on them.

Endpoints:
  POST /offers               — [Sales] Offer a product price to a lead
  GET  /offers               — List offers (staff: all, others: own)
  GET  /offers/{id}          — Get one offer
  POST /offers/{id}/accept   — Lead accepts; opens a subscription for approval
  POST /offers/{id}/reject   — Lead rejects

Accept/reject are open to any authenticated user at the HTTP layer; the
service refuses anyone but the lead the offer was made to.
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.database import get_db
from bizdesk.dependencies import get_current_user, require_sales
from bizdesk.models.user import User
from bizdesk.schemas.offer import OfferAcceptResponse, OfferCreateRequest, OfferResponse
from bizdesk.services import offer_service

router = APIRouter()


@router.post(
    "",
    response_model=OfferResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an offer for a lead",
)
async def create_offer(
    request: OfferCreateRequest,
    sales: User = Depends(require_sales),
    db: AsyncSession = Depends(get_db),
):
    return await offer_service.create_offer(
        db=db,
        lead_id=request.user_id,
        product_price_id=request.product_price_id,
        created_by=sales,
    )


@router.get(
    "",
    response_model=list[OfferResponse],
    summary="List offers",
)
async def list_offers(
    status_filter: str | None = Query(None, alias="status", description="pending, accepted or rejected"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await offer_service.list_offers(db, user, status_filter)


@router.get(
    "/{offer_id}",
    response_model=OfferResponse,
    summary="Get an offer",
)
async def get_offer(
    offer_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await offer_service.get_offer(db, offer_id, user)


@router.post(
    "/{offer_id}/accept",
    response_model=OfferAcceptResponse,
    summary="Accept an offer",
)
async def accept_offer(
    offer_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Accept a pending offer.

    Opens a subscription in **pending_approval** starting today. A manager
    must approve it before it takes effect. Deciding an offer twice fails
    with 409 invalid_state.
    """
    offer, subscription = await offer_service.accept_offer(db, offer_id, user)
    return OfferAcceptResponse(offer=offer, subscription=subscription)


@router.post(
    "/{offer_id}/reject",
    response_model=OfferResponse,
    summary="Reject an offer",
)
async def reject_offer(
    offer_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await offer_service.reject_offer(db, offer_id, user)
