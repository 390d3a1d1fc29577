"""
Pydantic schemas for Subscription endpoints.

Dates here are calendar days; `date` is imported as calendar_date so the
field names can stay start_date/end_date without shadowing the type.
"""

import uuid
from datetime import date as calendar_date, datetime

from pydantic import BaseModel, Field, field_validator, model_validator


class SubscriptionApplyRequest(BaseModel):
    """Request body for POST /subscriptions/apply."""
    product_price_id: uuid.UUID
    start_date: calendar_date
    end_date: calendar_date
    auto_renew: bool = False
    notes: str | None = Field(None, max_length=1000)
    subscription_number: str | None = Field(None, max_length=50)

    @field_validator("start_date")
    @classmethod
    def start_not_in_past(cls, value: calendar_date) -> calendar_date:
        if value < calendar_date.today():
            raise ValueError("start_date cannot be in the past")
        return value

    @model_validator(mode="after")
    def end_after_start(self):
        """A subscription must run for at least one day."""
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class SubscriptionNoteRequest(BaseModel):
    """
    Request body for approve/reject/cancel.

    The note is optional for approval and mandatory for rejection and
    cancellation; the service enforces that so a blank note gets the
    missing_note error instead of a generic validation error.
    """
    note: str | None = Field(None, max_length=1000)


class SubscriptionResponse(BaseModel):
    """Public representation of a subscription."""
    id: uuid.UUID
    user_id: uuid.UUID
    product_price_id: uuid.UUID
    approved_by_id: uuid.UUID | None
    subscription_number: str
    start_date: calendar_date
    end_date: calendar_date
    next_billing_date: calendar_date
    status: str
    auto_renew: bool
    notes: str | None
    approved_at: datetime | None
    approval_notes: str | None
    rejected_at: datetime | None
    rejection_notes: str | None
    cancelled_at: datetime | None
    cancellation_notes: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
