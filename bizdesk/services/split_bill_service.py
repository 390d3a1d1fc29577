"""
Split bill service — shared bills divided between participants.

A bill is created with just a title and a zero total. Updating it replaces
the title, the whole item list and the whole participant list at once, and
recomputes the total from the new items. All of that is flushed into the
request's single database transaction, so a failure halfway leaves the
bill exactly as it was.
"""

import logging
import uuid
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.exceptions import ResourceNotFoundError, UnauthorizedAccessError
from bizdesk.models.split_bill import SplitBill, SplitBillItem, SplitBillParticipant
from bizdesk.models.user import Role, User

logger = logging.getLogger(__name__)


def bill_total(items: list[dict]) -> Decimal:
    """Σ price × quantity, to two decimal places. Quantity defaults to 1."""
    total = sum(
        (Decimal(item["price"]) * item.get("quantity", 1) for item in items),
        Decimal("0"),
    )
    return total.quantize(Decimal("0.01"))


async def create_split_bill(db: AsyncSession, user: User, title: str) -> SplitBill:
    split_bill = SplitBill(
        user_id=user.id,
        title=title,
        total_amount=Decimal("0.00"),
        items=[],
        participants=[],
    )
    db.add(split_bill)
    await db.flush()

    logger.info("Split bill %s created by user %s", split_bill.id, user.id)
    return split_bill


async def list_split_bills(db: AsyncSession, user: User) -> list[SplitBill]:
    """Own bills (every bill for admins), newest first."""
    query = select(SplitBill).order_by(SplitBill.created_at.desc())
    if not user.has_role(Role.ADMIN):
        query = query.where(SplitBill.user_id == user.id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_split_bill(
    db: AsyncSession,
    split_bill_id: uuid.UUID,
    user: User,
) -> SplitBill:
    """
    Get a bill with its items and participants (own, or any for admins).

    Raises:
        ResourceNotFoundError: If the bill doesn't exist.
        UnauthorizedAccessError: If it belongs to someone else.
    """
    split_bill = await db.get(SplitBill, split_bill_id)
    if split_bill is None:
        raise ResourceNotFoundError("Split bill", split_bill_id)

    if split_bill.user_id != user.id and not user.has_role(Role.ADMIN):
        raise UnauthorizedAccessError("You do not have access to this split bill")

    return split_bill


async def update_split_bill(
    db: AsyncSession,
    split_bill_id: uuid.UUID,
    user: User,
    title: str,
    items: list[dict],
    participants: list[dict],
) -> SplitBill:
    """
    Replace a bill's title, items and participants.

    Args:
        items: Dicts with name, price and quantity.
        participants: Dicts with name and amount_owed.

    The old items and participants are deleted (delete-orphan cascade)
    and total_amount is recomputed from the new items.
    """
    split_bill = await get_split_bill(db, split_bill_id, user)

    split_bill.title = title
    split_bill.total_amount = bill_total(items)
    split_bill.items = [
        SplitBillItem(name=item["name"], price=item["price"], quantity=item.get("quantity", 1))
        for item in items
    ]
    split_bill.participants = [
        SplitBillParticipant(name=p["name"], amount_owed=p["amount_owed"])
        for p in participants
    ]
    await db.flush()

    logger.info(
        "Split bill %s updated by user %s: %d items, %d participants, total %s",
        split_bill.id, user.id, len(items), len(participants), split_bill.total_amount,
    )
    return split_bill


async def delete_split_bill(
    db: AsyncSession,
    split_bill_id: uuid.UUID,
    user: User,
) -> None:
    split_bill = await get_split_bill(db, split_bill_id, user)
    await db.delete(split_bill)
    await db.flush()
