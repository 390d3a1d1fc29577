"""Pydantic schemas for budget plans and budget items."""

import uuid
from datetime import date as calendar_date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, model_validator


class BudgetPlanRequest(BaseModel):
    """Request body for POST /budget-plans and PUT /budget-plans/{id}."""
    name: str = Field(min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    start_date: calendar_date
    end_date: calendar_date
    total_budget: Decimal = Field(ge=0, max_digits=15, decimal_places=2)

    @model_validator(mode="after")
    def end_not_before_start(self):
        # A one-day plan is allowed
        if self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class BudgetItemCreateRequest(BaseModel):
    """Request body for POST /budget-plans/{id}/items."""
    name: str = Field(min_length=1, max_length=255)
    amount: Decimal = Field(ge=0, max_digits=15, decimal_places=2)
    description: str | None = Field(None, max_length=1000)


class BudgetItemUpdateRequest(BudgetItemCreateRequest):
    status: Literal["planned", "in_progress", "completed"]


class BudgetItemResponse(BaseModel):
    id: uuid.UUID
    budget_plan_id: uuid.UUID
    name: str
    description: str | None
    amount: Decimal
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class BudgetPlanResponse(BaseModel):
    """Public representation of a budget plan, items included."""
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    description: str | None
    start_date: calendar_date
    end_date: calendar_date
    total_budget: Decimal
    items: list[BudgetItemResponse]
    created_at: datetime

    model_config = {"from_attributes": True}
