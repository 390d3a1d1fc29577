"""
Subscription service — applications and the manager approval workflow.

Entry points into "pending_approval":
  - offer_service.accept_offer (lead accepts a sales offer)
  - apply_subscription (user applies for a price directly)

Decisions, each allowed only from the status listed in
bizdesk.lifecycle.SUBSCRIPTION_TRANSITIONS:
  - approve: pending_approval -> approved; grants the subscriber the
    "customer" role if they don't carry it yet
  - reject:  pending_approval -> rejected; a written reason is mandatory
  - cancel:  active -> cancelled; a written reason is mandatory

Moving an approved subscription to "active" is the billing system's job
and is not exposed here.
"""

import logging
import secrets
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.exceptions import (
    DuplicateResourceError,
    MissingNoteError,
    ResourceNotFoundError,
    UnauthorizedAccessError,
)
from bizdesk.lifecycle import SubscriptionStatus, ensure_transition, next_billing_date
from bizdesk.models.subscription import Subscription
from bizdesk.models.user import Role, User
from bizdesk.services import product_service, role_service

logger = logging.getLogger(__name__)


async def generate_subscription_number(db: AsyncSession) -> str:
    """
    Return an unused number like SUB-65F1A2B3C4D5E.

    Retries on collision, which with 52 random bits effectively never happens.
    """
    for _ in range(10):
        candidate = "SUB-" + secrets.token_hex(7)[:13].upper()
        existing = await db.execute(
            select(Subscription).where(Subscription.subscription_number == candidate)
        )
        if existing.scalar_one_or_none() is None:
            return candidate
    raise RuntimeError("Failed to generate a unique subscription number")


def _require_note(note: str | None, action: str) -> str:
    if note is None or not note.strip():
        raise MissingNoteError(action)
    return note.strip()


async def _lock_subscription(db: AsyncSession, subscription_id: uuid.UUID) -> Subscription:
    result = await db.execute(
        select(Subscription)
        .where(Subscription.id == subscription_id)
        .with_for_update()  # No-op on SQLite, locks row on PostgreSQL
    )
    subscription = result.scalar_one_or_none()
    if subscription is None:
        raise ResourceNotFoundError("Subscription", subscription_id)
    return subscription


async def apply_subscription(
    db: AsyncSession,
    user: User,
    product_price_id: uuid.UUID,
    start_date: date,
    end_date: date,
    auto_renew: bool = False,
    notes: str | None = None,
    subscription_number: str | None = None,
) -> Subscription:
    """
    Submit a subscription application for manager approval.

    Unlike the offer path, the first billing date follows the price's
    billing cycle (quarterly bills three months after start_date, etc.).

    Raises:
        ResourceNotFoundError: If the price doesn't exist or is inactive.
        DuplicateResourceError: If an explicit subscription_number is taken.
    """
    product_price = await product_service.get_active_price(db, product_price_id)

    if subscription_number:
        existing = await db.execute(
            select(Subscription).where(Subscription.subscription_number == subscription_number)
        )
        if existing.scalar_one_or_none() is not None:
            raise DuplicateResourceError(
                f"Subscription number {subscription_number} is already in use"
            )
    else:
        subscription_number = await generate_subscription_number(db)

    subscription = Subscription(
        user_id=user.id,
        product_price_id=product_price.id,
        subscription_number=subscription_number,
        start_date=start_date,
        end_date=end_date,
        next_billing_date=next_billing_date(start_date, product_price.billing_cycle),
        status=SubscriptionStatus.PENDING_APPROVAL.value,
        auto_renew=auto_renew,
        notes=notes,
    )
    db.add(subscription)
    await db.flush()

    logger.info("User %s applied for subscription %s", user.id, subscription.subscription_number)
    return subscription


async def approve_subscription(
    db: AsyncSession,
    subscription_id: uuid.UUID,
    acting_user: User,
    note: str | None = None,
) -> Subscription:
    """
    Approve a pending subscription and make the subscriber a customer.

    Raises:
        ResourceNotFoundError: If the subscription doesn't exist.
        InvalidStateError: If it is not pending approval.
    """
    subscription = await _lock_subscription(db, subscription_id)
    ensure_transition(
        "subscription", subscription.status, SubscriptionStatus.APPROVED,
        detail="This subscription cannot be approved because it is not pending approval",
    )

    subscription.status = SubscriptionStatus.APPROVED.value
    subscription.approved_by_id = acting_user.id
    subscription.approved_at = datetime.now(timezone.utc)
    subscription.approval_notes = note.strip() if note and note.strip() else None

    subscriber = await db.get(User, subscription.user_id)
    if subscriber is not None:
        await role_service.grant_role(db, subscriber, Role.CUSTOMER)

    await db.flush()
    logger.info("Subscription %s approved by %s", subscription.subscription_number, acting_user.id)
    return subscription


async def reject_subscription(
    db: AsyncSession,
    subscription_id: uuid.UUID,
    acting_user: User,
    note: str | None,
) -> Subscription:
    """
    Reject a pending subscription with a mandatory reason.

    Raises:
        MissingNoteError: If ``note`` is empty.
        ResourceNotFoundError: If the subscription doesn't exist.
        InvalidStateError: If it is not pending approval.
    """
    reason = _require_note(note, "reject a subscription")
    subscription = await _lock_subscription(db, subscription_id)
    ensure_transition(
        "subscription", subscription.status, SubscriptionStatus.REJECTED,
        detail="This subscription cannot be rejected because it is not pending approval",
    )

    subscription.status = SubscriptionStatus.REJECTED.value
    subscription.approved_by_id = acting_user.id
    subscription.rejected_at = datetime.now(timezone.utc)
    subscription.rejection_notes = reason
    await db.flush()

    logger.info("Subscription %s rejected by %s", subscription.subscription_number, acting_user.id)
    return subscription


async def cancel_subscription(
    db: AsyncSession,
    subscription_id: uuid.UUID,
    acting_user: User,
    note: str | None,
) -> Subscription:
    """
    Cancel an active subscription with a mandatory reason.

    The subscriber may cancel their own subscription; managers and admins
    may cancel anyone's.

    Raises:
        MissingNoteError: If ``note`` is empty.
        ResourceNotFoundError: If the subscription doesn't exist.
        UnauthorizedAccessError: If the user is neither subscriber nor staff.
        InvalidStateError: If the subscription is not active.
    """
    reason = _require_note(note, "cancel a subscription")
    subscription = await _lock_subscription(db, subscription_id)

    if subscription.user_id != acting_user.id and not acting_user.has_role(Role.MANAGER, Role.ADMIN):
        raise UnauthorizedAccessError("You do not have access to this subscription")

    ensure_transition(
        "subscription", subscription.status, SubscriptionStatus.CANCELLED,
        detail="This subscription cannot be cancelled because it is not active",
    )

    subscription.status = SubscriptionStatus.CANCELLED.value
    subscription.cancelled_at = datetime.now(timezone.utc)
    subscription.cancellation_notes = reason
    await db.flush()

    logger.info("Subscription %s cancelled by %s", subscription.subscription_number, acting_user.id)
    return subscription


async def list_subscriptions(
    db: AsyncSession,
    user: User,
    status_filter: str | None = None,
) -> list[Subscription]:
    """List subscriptions visible to ``user`` (staff see all), newest first."""
    query = select(Subscription).order_by(Subscription.created_at.desc())
    if not user.has_role(Role.SALES, Role.MANAGER, Role.ADMIN):
        query = query.where(Subscription.user_id == user.id)
    if status_filter:
        query = query.where(Subscription.status == status_filter)

    result = await db.execute(query)
    return list(result.scalars().all())


async def get_subscription(
    db: AsyncSession,
    subscription_id: uuid.UUID,
    user: User,
) -> Subscription:
    """
    Raises:
        ResourceNotFoundError: If the subscription doesn't exist.
        UnauthorizedAccessError: If a non-staff user asks for someone else's.
    """
    subscription = await db.get(Subscription, subscription_id)
    if subscription is None:
        raise ResourceNotFoundError("Subscription", subscription_id)

    if subscription.user_id != user.id and not user.has_role(Role.SALES, Role.MANAGER, Role.ADMIN):
        raise UnauthorizedAccessError("You do not have access to this subscription")

    return subscription
