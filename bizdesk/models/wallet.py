"""
Wallet and UserWallet models — where a user's money sits.

  - Wallet is a named bucket type shared by everyone ("Cash", "Bank BCA").
  - UserWallet is one user's balance in one Wallet. Each (user, wallet)
    pair exists at most once.

Balance management:
  `balance` is a maintained running total. It is changed only as a side
  effect of posting, editing or deleting a Transaction, inside the same
  database transaction as the ledger row. It is never recomputed from the
  ledger on read; the reconciliation report compares the two instead.

  `opening_balance` records the amount the wallet was funded with at
  creation. It has no ledger row of its own, so reconciliation needs it to
  compute the expected balance.

Unlike the ledger tables, there is no CHECK constraint on `balance`: the
no-overdraft rule is enforced at write time by the transaction service,
which holds a row lock on the wallet while it checks.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Text, Numeric, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bizdesk.database import Base


class Wallet(Base):
    __tablename__ = "wallets"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


class UserWallet(Base):
    __tablename__ = "user_wallets"

    __table_args__ = (
        UniqueConstraint("user_id", "wallet_id", name="uq_user_wallets_user_wallet"),
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

    wallet_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("wallets.id"),
        nullable=False,
    )

    balance: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        nullable=False,
        default=Decimal("0.00"),
    )

    opening_balance: Mapped[Decimal] = mapped_column(
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

    wallet: Mapped["Wallet"] = relationship(lazy="selectin")

    @property
    def wallet_name(self) -> str:
        return self.wallet.name
