"""
Pydantic schemas for Transaction endpoints.

Amounts are Decimal, positive, with at most two decimal places; the
direction comes from `type`. A posting's date may not lie in the future.
"""

import uuid
from datetime import date as calendar_date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from bizdesk.schemas.wallet import UserWalletResponse


class TransactionCreateRequest(BaseModel):
    """Request body for POST /transactions."""
    user_wallet_id: uuid.UUID
    type: Literal["credit", "debit"]
    amount: Decimal = Field(gt=0, max_digits=15, decimal_places=2, description="Must be positive")
    description: str | None = Field(None, max_length=255)
    date: calendar_date

    @field_validator("date")
    @classmethod
    def date_not_in_future(cls, value: calendar_date) -> calendar_date:
        if value > calendar_date.today():
            raise ValueError("Transaction date cannot be in the future")
        return value


class TransactionUpdateRequest(TransactionCreateRequest):
    """
    Request body for PUT /transactions/{id}.

    Same shape as a new posting; user_wallet_id may point at a different
    wallet of the same user to move the transaction.
    """


class TransactionResponse(BaseModel):
    """Public representation of a transaction."""
    id: uuid.UUID
    user_wallet_id: uuid.UUID
    type: str
    amount: Decimal
    description: str | None
    date: calendar_date
    created_at: datetime

    model_config = {"from_attributes": True}


class TransactionWithWalletResponse(BaseModel):
    """A posting together with the wallet balance it left behind."""
    transaction: TransactionResponse
    wallet: UserWalletResponse


class TransactionDeleteResponse(BaseModel):
    """Response body for DELETE /transactions/{id}."""
    transaction_id: uuid.UUID
    balance_reversed: bool
    wallet: UserWalletResponse | None = None
