"""
Product and ProductPrice models — what can be offered and subscribed to.

A Product (e.g. "Fiber 100") has one price per billing cycle. Offers and
subscriptions always point at a ProductPrice, never at the bare Product,
because the cycle decides both the amount and the subscription length.

ProductPrice.term_months is the length of one billing cycle in months
(1 for monthly, 3 for quarterly, ...). An offer-driven subscription runs
for exactly that many months.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    String, Text, Boolean, Integer, Numeric, DateTime, ForeignKey,
    CheckConstraint, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bizdesk.database import Base


class Product(Base):
    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
    )

    code: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    prices: Mapped[list["ProductPrice"]] = relationship(
        back_populates="product",
        lazy="selectin",
    )


class ProductPrice(Base):
    __tablename__ = "product_prices"

    __table_args__ = (
        UniqueConstraint("product_id", "billing_cycle", name="uq_product_prices_cycle"),
        CheckConstraint("price >= 0", name="ck_product_prices_non_negative"),
        CheckConstraint("term_months >= 1", name="ck_product_prices_term"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("products.id"),
        nullable=False,
        index=True,
    )

    # monthly, quarterly, semi_annually, annually, biennially, triennially
    billing_cycle: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
    )

    term_months: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )

    # "active" or "inactive" — inactive prices can't be offered or applied for
    status: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default="active",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    product: Mapped["Product"] = relationship(
        back_populates="prices",
        lazy="selectin",
    )
