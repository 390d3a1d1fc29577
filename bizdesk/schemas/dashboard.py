"""Pydantic schemas for the dashboard summary."""

import uuid
from datetime import date as calendar_date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel


class CategoryExpense(BaseModel):
    name: str
    amount: Decimal
    percentage: int


class WalletBalanceShare(BaseModel):
    name: str
    balance: Decimal
    percentage: float


class DailyFlow(BaseModel):
    date: calendar_date
    income: Decimal
    expense: Decimal


class IncomeExpenseChart(BaseModel):
    """Per-day totals for the last 30 days; max_value sizes the chart axis."""
    data: list[DailyFlow]
    max_value: Decimal


class RecentTransaction(BaseModel):
    """A recent posting. amount is negative for debits."""
    id: uuid.UUID
    description: str | None
    amount: Decimal
    type: str
    date: calendar_date
    wallet_name: str


class UpcomingPayment(BaseModel):
    """A budget plan that has not ended yet."""
    id: uuid.UUID
    name: str
    amount: Decimal
    date: calendar_date
    priority: Literal["high", "medium"]


class DashboardResponse(BaseModel):
    """Response body for GET /dashboard."""
    total_balance: Decimal
    current_month_expenses: Decimal
    previous_month_expenses: Decimal
    expense_change_percentage: float
    expenses_by_category: list[CategoryExpense]
    wallet_balances: list[WalletBalanceShare]
    income_expense_chart: IncomeExpenseChart
    recent_transactions: list[RecentTransaction]
    upcoming_payments: list[UpcomingPayment]
    active_categories: int
