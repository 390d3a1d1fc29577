"""
Offer model — a product price extended to a lead by a sales user.

An offer starts "pending" and is decided exactly once by the lead:
"accepted" (which opens a subscription) or "rejected". The allowed moves
are defined in bizdesk.lifecycle; nothing here enforces them.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from bizdesk.database import Base
from bizdesk.lifecycle import OfferStatus


class Offer(Base):
    __tablename__ = "offers"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    # The lead receiving the offer
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    product_price_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("product_prices.id"),
        nullable=False,
    )

    # Sales user who created the offer
    created_by_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    # Human-readable, e.g. OFR-3FA9C1
    offer_number: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=OfferStatus.PENDING.value,
    )

    accepted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
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
