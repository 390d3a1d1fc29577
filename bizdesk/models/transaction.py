"""
Transaction model — one ledger posting against a UserWallet.

Key fields:
  - type: "credit" (money in) or "debit" (money out)
  - amount: Always positive (the direction is implied by the type)
  - date: The day the money moved, as entered by the user. It is distinct
    from created_at, which is when the row was written.

Why amount is always positive:
  Storing a positive amount with a separate type field (credit/debit) is
  clearer than using signed values — the type field makes the direction
  explicit, and reversing a posting is just applying the opposite type.

Rejected debits are NOT recorded. An overdraft attempt leaves the ledger
exactly as it was.
"""

import uuid
from datetime import date as calendar_date, datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Numeric, Date, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bizdesk.database import Base


class Transaction(Base):
    __tablename__ = "transactions"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_positive_amount"),
        CheckConstraint("type in ('credit', 'debit')", name="ck_transactions_type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    user_wallet_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("user_wallets.id"),
        nullable=False,
        index=True,
    )

    type: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    # Indexed for the dashboard's month-range queries
    date: Mapped[calendar_date] = mapped_column(
        Date,
        nullable=False,
        index=True,
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
