"""
Status enums and transition rules for offers and subscriptions.

Both entities store their status as a plain string column, but every
change goes through ``ensure_transition`` here, so the allowed moves live
in exactly one table per entity instead of being scattered across the
services as ``if status != ...`` checks.

    Offer:         pending ──► accepted
                           └─► rejected

    Subscription:  pending_approval ──► approved
                                    └─► rejected
                   active ──► cancelled

``approved → active`` happens outside this API (billing activation) and is
therefore not in the table.

This module also holds the date arithmetic the lifecycle needs
(``add_months`` and the billing-cycle aware ``next_billing_date``).
"""

import calendar
import enum
from datetime import date

from bizdesk.exceptions import InvalidStateError


class OfferStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class SubscriptionStatus(str, enum.Enum):
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"
    ACTIVE = "active"
    CANCELLED = "cancelled"


class BillingCycle(str, enum.Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMI_ANNUALLY = "semi_annually"
    ANNUALLY = "annually"
    BIENNIALLY = "biennially"
    TRIENNIALLY = "triennially"


OFFER_TRANSITIONS: dict[OfferStatus, set[OfferStatus]] = {
    OfferStatus.PENDING: {OfferStatus.ACCEPTED, OfferStatus.REJECTED},
    OfferStatus.ACCEPTED: set(),
    OfferStatus.REJECTED: set(),
}

SUBSCRIPTION_TRANSITIONS: dict[SubscriptionStatus, set[SubscriptionStatus]] = {
    SubscriptionStatus.PENDING_APPROVAL: {
        SubscriptionStatus.APPROVED,
        SubscriptionStatus.REJECTED,
    },
    SubscriptionStatus.APPROVED: set(),
    SubscriptionStatus.REJECTED: set(),
    SubscriptionStatus.ACTIVE: {SubscriptionStatus.CANCELLED},
    SubscriptionStatus.CANCELLED: set(),
}

_TABLES = {
    "offer": (OfferStatus, OFFER_TRANSITIONS),
    "subscription": (SubscriptionStatus, SUBSCRIPTION_TRANSITIONS),
}

# Months added per billing cycle when a subscription is self-applied
CYCLE_MONTHS: dict[BillingCycle, int] = {
    BillingCycle.MONTHLY: 1,
    BillingCycle.QUARTERLY: 3,
    BillingCycle.SEMI_ANNUALLY: 6,
    BillingCycle.ANNUALLY: 12,
    BillingCycle.BIENNIALLY: 24,
    BillingCycle.TRIENNIALLY: 36,
}


def can_transition(entity: str, current: str, target: str) -> bool:
    """Return True if ``entity`` may move from ``current`` to ``target``."""
    status_enum, table = _TABLES[entity]
    try:
        return status_enum(target) in table.get(status_enum(current), set())
    except ValueError:
        # Unknown status string (e.g. legacy "expired" rows)
        return False


def ensure_transition(entity: str, current: str, target: str, detail: str | None = None) -> None:
    """
    Raise InvalidStateError unless ``current → target`` is allowed.

    Args:
        entity: "offer" or "subscription".
        current: Status stored on the entity right now.
        target: Status the caller wants.
        detail: Optional user-facing message to use instead of the default.
    """
    current = getattr(current, "value", current)
    target = getattr(target, "value", target)
    if not can_transition(entity, current, target):
        raise InvalidStateError(entity, current, target, detail)


def add_months(start: date, months: int) -> date:
    """
    Shift ``start`` by whole calendar months.

    The day is clamped to the last day of the target month, so
    Jan 31 + 1 month is Feb 28 (or 29), never a date in March.
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def next_billing_date(start: date, billing_cycle: str) -> date:
    """
    First billing date after ``start`` for the given cycle.

    Unknown cycle names fall back to one month.
    """
    try:
        months = CYCLE_MONTHS[BillingCycle(billing_cycle.lower())]
    except ValueError:
        months = 1
    return add_months(start, months)
