"""
BudgetPlan and BudgetItem models — money a user sets aside for a period.

A BudgetPlan covers a date range and carries a total budget. Its items
break the plan down ("Rent", "Groceries"), each with its own amount and
progress status. Items are planning data only: they never touch a wallet
balance or the transaction ledger.

The dashboard lists plans whose end date is still ahead as upcoming
payments.
"""

import uuid
from datetime import date as calendar_date, datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Text, Numeric, Date, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bizdesk.database import Base


class BudgetPlan(Base):
    __tablename__ = "budget_plans"

    __table_args__ = (
        CheckConstraint("total_budget >= 0", name="ck_budget_plans_non_negative"),
        CheckConstraint("end_date >= start_date", name="ck_budget_plans_dates"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    start_date: Mapped[calendar_date] = mapped_column(
        Date,
        nullable=False,
    )

    # Indexed for the dashboard's upcoming-payments query
    end_date: Mapped[calendar_date] = mapped_column(
        Date,
        nullable=False,
        index=True,
    )

    total_budget: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        nullable=False,
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

    items: Mapped[list["BudgetItem"]] = relationship(
        back_populates="budget_plan",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="BudgetItem.created_at",
    )


class BudgetItem(Base):
    __tablename__ = "budget_items"

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_budget_items_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    budget_plan_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("budget_plans.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        nullable=False,
    )

    # planned, in_progress, completed
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="planned",
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

    budget_plan: Mapped["BudgetPlan"] = relationship(back_populates="items")
