"""
Pydantic schemas for split bills.

total_amount only ever appears in responses; the service derives it from
the items.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class SplitBillCreateRequest(BaseModel):
    """Request body for POST /split-bills."""
    title: str = Field(min_length=1, max_length=255)


class SplitBillItemRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(ge=0, max_digits=15, decimal_places=2)
    quantity: int = Field(1, ge=1)


class SplitBillParticipantRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    amount_owed: Decimal = Field(ge=0, max_digits=15, decimal_places=2)


class SplitBillUpdateRequest(BaseModel):
    """
    Request body for PUT /split-bills/{id}.

    Items and participants replace the existing lists entirely; each list
    needs at least one entry.
    """
    title: str = Field(min_length=1, max_length=255)
    items: list[SplitBillItemRequest] = Field(min_length=1)
    participants: list[SplitBillParticipantRequest] = Field(min_length=1)


class SplitBillItemResponse(BaseModel):
    id: uuid.UUID
    name: str
    price: Decimal
    quantity: int

    model_config = {"from_attributes": True}


class SplitBillParticipantResponse(BaseModel):
    id: uuid.UUID
    name: str
    amount_owed: Decimal

    model_config = {"from_attributes": True}


class SplitBillResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    total_amount: Decimal
    items: list[SplitBillItemResponse]
    participants: list[SplitBillParticipantResponse]
    created_at: datetime

    model_config = {"from_attributes": True}
