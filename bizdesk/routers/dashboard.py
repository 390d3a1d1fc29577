"""
Dashboard router.

Endpoints:
  GET /dashboard — Balances and this month's spending at a glance
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.database import get_db
from bizdesk.dependencies import get_current_user
from bizdesk.models.user import User
from bizdesk.schemas.dashboard import DashboardResponse
from bizdesk.services import dashboard_service

router = APIRouter()


@router.get(
    "",
    response_model=DashboardResponse,
    summary="Get the dashboard summary",
)
async def get_dashboard(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Summary of the caller's wallets (all wallets for admins):
    total balance, debit totals for this and last month with the change in
    percent, this month's spending by category, balance per wallet type,
    daily income and expense for the last 30 days, and the number of
    distinct descriptions used this month.

    **recent_transactions** and **upcoming_payments** always cover the
    caller only.
    """
    return await dashboard_service.get_summary(db, user)
