"""
Pydantic schemas for wallet types, user wallets and balance checks.

All monetary amounts are Decimal with two decimal places. They are
serialized as strings so no precision is lost in JSON.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator


class WalletCreateRequest(BaseModel):
    """Request body for POST /wallets."""
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None


class WalletResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class UserWalletCreateRequest(BaseModel):
    """
    Request body for POST /user-wallets.

    Give exactly one of wallet_id (an existing wallet type) or
    new_wallet_name (create the type on the fly).
    """
    wallet_id: uuid.UUID | None = None
    new_wallet_name: str | None = Field(None, min_length=1, max_length=100)
    balance: Decimal = Field(ge=0, max_digits=15, decimal_places=2)

    @model_validator(mode="after")
    def exactly_one_wallet(self):
        if (self.wallet_id is None) == (self.new_wallet_name is None):
            raise ValueError("Provide either wallet_id or new_wallet_name")
        return self


class UserWalletResponse(BaseModel):
    """Public representation of a user wallet."""
    id: uuid.UUID
    user_id: uuid.UUID
    wallet_id: uuid.UUID
    wallet_name: str
    balance: Decimal
    opening_balance: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}


class BalanceResponse(BaseModel):
    """
    Maintained vs. ledger-computed balance for one wallet.

    match is False when the two have drifted apart.
    """
    user_wallet_id: uuid.UUID
    balance: Decimal
    computed_balance: Decimal
    match: bool


class ReconciliationEntry(BaseModel):
    """One wallet whose maintained balance disagrees with its ledger."""
    user_wallet_id: uuid.UUID
    user_id: uuid.UUID
    balance: Decimal
    computed_balance: Decimal
    difference: Decimal
