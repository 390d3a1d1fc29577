"""
SplitBill models: a shared bill, what was on it, and who owes what.

total_amount is derived, never entered: it is recomputed as
Σ(price × quantity) over the items every time the bill is updated, in the
same database transaction that replaces the items. Participants' shares
are recorded as given; they are not required to add up to the total.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Integer, Numeric, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bizdesk.database import Base


class SplitBill(Base):
    __tablename__ = "split_bills"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    # The user who created the bill
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        nullable=False,
        default=Decimal("0.00"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    items: Mapped[list["SplitBillItem"]] = relationship(
        back_populates="split_bill",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    participants: Mapped[list["SplitBillParticipant"]] = relationship(
        back_populates="split_bill",
        lazy="selectin",
        cascade="all, delete-orphan",
    )


class SplitBillItem(Base):
    __tablename__ = "split_bill_items"

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_split_bill_items_price"),
        CheckConstraint("quantity >= 1", name="ck_split_bill_items_quantity"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    split_bill_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("split_bills.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        nullable=False,
    )

    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )

    split_bill: Mapped["SplitBill"] = relationship(back_populates="items")


class SplitBillParticipant(Base):
    __tablename__ = "split_bill_participants"

    __table_args__ = (
        CheckConstraint("amount_owed >= 0", name="ck_split_bill_participants_owed"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    split_bill_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("split_bills.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Free text: participants need not have an account
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    amount_owed: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        nullable=False,
    )

    split_bill: Mapped["SplitBill"] = relationship(back_populates="participants")
