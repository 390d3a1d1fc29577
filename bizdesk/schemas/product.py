"""Pydantic schemas for the product catalogue."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from bizdesk.lifecycle import BillingCycle


class ProductCreateRequest(BaseModel):
    """Request body for POST /products."""
    name: str = Field(min_length=1, max_length=255)
    code: str = Field(min_length=1, max_length=50)
    description: str | None = None


class ProductPriceCreateRequest(BaseModel):
    """Request body for POST /products/{id}/prices."""
    billing_cycle: BillingCycle
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    term_months: int = Field(ge=1, description="Length of one term in months")


class ProductPriceResponse(BaseModel):
    id: uuid.UUID
    product_id: uuid.UUID
    billing_cycle: str
    price: Decimal
    term_months: int
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ProductResponse(BaseModel):
    id: uuid.UUID
    name: str
    code: str
    description: str | None
    is_active: bool
    created_at: datetime
    prices: list[ProductPriceResponse]

    model_config = {"from_attributes": True}
