"""
Offer service — extending offers to leads and recording their decision.

Lifecycle:
  1. A sales user creates an offer for a lead (status "pending").
  2. The lead accepts it, which opens a subscription awaiting manager
     approval, or rejects it. Either decision is final.

Atomicity:
  Accepting writes two rows (the offer update and the new subscription).
  Both are flushed into the request's single database transaction; the
  session is committed by get_db() only if the whole request succeeds, so
  a failure while creating the subscription also undoes the offer update.

Ownership:
  Only the lead an offer was made to may accept or reject it. Staff can
  read every offer but cannot decide on a lead's behalf.
"""

import logging
import secrets
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.exceptions import ResourceNotFoundError, UnauthorizedAccessError
from bizdesk.lifecycle import OfferStatus, SubscriptionStatus, add_months, ensure_transition
from bizdesk.models.offer import Offer
from bizdesk.models.product import ProductPrice
from bizdesk.models.subscription import Subscription
from bizdesk.models.user import Role, User
from bizdesk.services import product_service
from bizdesk.services.subscription_service import generate_subscription_number

logger = logging.getLogger(__name__)


def _generate_offer_number() -> str:
    """OFR- followed by six upper-case hex characters, e.g. OFR-3FA9C1."""
    return "OFR-" + secrets.token_hex(3).upper()


async def create_offer(
    db: AsyncSession,
    lead_id: uuid.UUID,
    product_price_id: uuid.UUID,
    created_by: User,
) -> Offer:
    """
    Create a pending offer of ``product_price_id`` for a lead.

    Raises:
        ResourceNotFoundError: If the lead or an active price doesn't exist.
    """
    lead = await db.get(User, lead_id)
    if lead is None:
        raise ResourceNotFoundError("User", lead_id)

    await product_service.get_active_price(db, product_price_id)

    # Retry on collision, extremely unlikely with 16M numbers
    for _ in range(10):
        offer_number = _generate_offer_number()
        existing = await db.execute(
            select(Offer).where(Offer.offer_number == offer_number)
        )
        if existing.scalar_one_or_none() is None:
            break
    else:
        raise RuntimeError("Failed to generate a unique offer number")

    offer = Offer(
        user_id=lead_id,
        product_price_id=product_price_id,
        created_by_id=created_by.id,
        offer_number=offer_number,
        status=OfferStatus.PENDING.value,
    )
    db.add(offer)
    await db.flush()

    logger.info("Offer %s created for user %s by %s", offer.offer_number, lead_id, created_by.id)
    return offer


async def _get_offer_for_decision(
    db: AsyncSession,
    offer_id: uuid.UUID,
    acting_user: User,
    target: OfferStatus,
) -> Offer:
    """Load an offer and run the ownership and state checks shared by accept/reject."""
    result = await db.execute(
        select(Offer).where(Offer.id == offer_id).with_for_update()
    )
    offer = result.scalar_one_or_none()
    if offer is None:
        raise ResourceNotFoundError("Offer", offer_id)

    if offer.user_id != acting_user.id:
        logger.warning("User %s tried to decide offer %s of another lead", acting_user.id, offer.id)
        raise UnauthorizedAccessError("This offer does not belong to you")

    ensure_transition(
        "offer", offer.status, target,
        detail=f"Only pending offers can be {target.value}; offer {offer.offer_number} is {offer.status}",
    )
    return offer


async def accept_offer(
    db: AsyncSession,
    offer_id: uuid.UUID,
    acting_user: User,
) -> tuple[Offer, Subscription]:
    """
    Accept a pending offer and open a subscription for it.

    The subscription:
      - starts today and ends ``term_months`` (the length of the price's
        billing cycle) later
      - is first billed exactly one month after today, whatever the cycle
      - awaits manager approval, with auto-renew off

    Raises:
        ResourceNotFoundError: If the offer doesn't exist.
        UnauthorizedAccessError: If the offer was made to someone else.
        InvalidStateError: If the offer is no longer pending.
    """
    offer = await _get_offer_for_decision(db, offer_id, acting_user, OfferStatus.ACCEPTED)

    product_price = await db.get(ProductPrice, offer.product_price_id)
    if product_price is None:
        raise ResourceNotFoundError("Product price", offer.product_price_id)

    offer.status = OfferStatus.ACCEPTED.value
    offer.accepted_at = datetime.now(timezone.utc)

    today = date.today()
    subscription = Subscription(
        user_id=acting_user.id,
        product_price_id=offer.product_price_id,
        subscription_number=await generate_subscription_number(db),
        start_date=today,
        end_date=add_months(today, product_price.term_months),
        # Fixed one-month lookahead on this path; see DESIGN.md open questions
        next_billing_date=add_months(today, 1),
        status=SubscriptionStatus.PENDING_APPROVAL.value,
        auto_renew=False,
    )
    db.add(subscription)
    await db.flush()

    logger.info(
        "Offer %s accepted by user %s; subscription %s awaiting approval",
        offer.offer_number, acting_user.id, subscription.subscription_number,
    )
    return offer, subscription


async def reject_offer(
    db: AsyncSession,
    offer_id: uuid.UUID,
    acting_user: User,
) -> Offer:
    """
    Reject a pending offer. No subscription is created.

    Raises:
        ResourceNotFoundError: If the offer doesn't exist.
        UnauthorizedAccessError: If the offer was made to someone else.
        InvalidStateError: If the offer is no longer pending.
    """
    offer = await _get_offer_for_decision(db, offer_id, acting_user, OfferStatus.REJECTED)
    offer.status = OfferStatus.REJECTED.value
    await db.flush()

    logger.info("Offer %s rejected by user %s", offer.offer_number, acting_user.id)
    return offer


async def list_offers(
    db: AsyncSession,
    user: User,
    status_filter: str | None = None,
) -> list[Offer]:
    """
    List offers visible to ``user``, newest first.

    Staff (sales, manager, admin) see every offer; everyone else sees only
    offers made to them.
    """
    query = select(Offer).order_by(Offer.created_at.desc())
    if not user.has_role(Role.SALES, Role.MANAGER, Role.ADMIN):
        query = query.where(Offer.user_id == user.id)
    if status_filter:
        query = query.where(Offer.status == status_filter)

    result = await db.execute(query)
    return list(result.scalars().all())


async def get_offer(db: AsyncSession, offer_id: uuid.UUID, user: User) -> Offer:
    """
    Get one offer, enforcing the same visibility as list_offers.

    Raises:
        ResourceNotFoundError: If the offer doesn't exist.
        UnauthorizedAccessError: If a non-staff user asks for someone else's offer.
    """
    offer = await db.get(Offer, offer_id)
    if offer is None:
        raise ResourceNotFoundError("Offer", offer_id)

    if offer.user_id != user.id and not user.has_role(Role.SALES, Role.MANAGER, Role.ADMIN):
        raise UnauthorizedAccessError("You do not have access to this offer")

    return offer
