"""
Dashboard service — a read-only money summary for the acting user.

Builds, for the user's wallets (every user's wallets for admins):
  1. The total balance across wallets
  2. Debit totals for the current and the previous calendar month, and
     the percentage change between them
  3. This month's debits grouped into spending categories
  4. The balance held in each wallet type
  5. Daily income and expense totals over the last 30 days
  6. How many distinct descriptions were used this month

Two parts are always about the acting user alone, admin or not: the five
most recent transactions and the upcoming payments (budget plans that
have not ended yet).

Like the balance check in wallet_service, everything here is derived from
the rows at request time. Nothing is cached or written back.
"""

import string
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.lifecycle import add_months
from bizdesk.models.budget import BudgetPlan
from bizdesk.models.transaction import Transaction
from bizdesk.models.user import Role, User
from bizdesk.models.wallet import UserWallet

TOP_CATEGORIES = 5
OTHER_CATEGORY = "Other"
CHART_DAYS = 30
RECENT_TRANSACTIONS = 5
UPCOMING_PAYMENTS = 3
# Plans ending within this many days are flagged high priority
URGENT_DAYS = 7

# Checked in order; the first keyword found in the description wins
CATEGORY_KEYWORDS = [
    (("food", "makan"), "Food & Entertainment"),
    (("transport",), "Transportation"),
    (("shopping", "belanja"), "Shopping"),
    (("electric", "listrik"), "Bills"),
]


def categorize(description: str | None) -> str:
    """Map a free-text description onto a spending category name."""
    if description is None or not description.strip():
        return OTHER_CATEGORY

    lowered = description.lower()
    for keywords, category in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    # "mcdonald's meal" -> "Mcdonald's Meal"
    return string.capwords(lowered.strip())


def percentage_change(current: Decimal, previous: Decimal) -> float:
    """Change from ``previous`` to ``current`` in percent; 0 when there is no previous."""
    if previous <= 0:
        return 0.0
    return round(float((current - previous) / previous * 100), 1)


def group_expenses(debits: list[tuple[str | None, Decimal]]) -> list[dict]:
    """
    Group (description, amount) pairs by category, largest first.

    The five largest categories are kept and everything else is folded
    into "Other". Percentages are whole numbers of the grouped total.
    """
    totals: dict[str, Decimal] = defaultdict(Decimal)
    for description, amount in debits:
        totals[categorize(description)] += amount

    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    top = dict(ranked[:TOP_CATEGORIES])
    rest = sum((amount for _, amount in ranked[TOP_CATEGORIES:]), Decimal("0"))
    if rest:
        top[OTHER_CATEGORY] = top.get(OTHER_CATEGORY, Decimal("0")) + rest

    grand_total = sum(top.values(), Decimal("0"))
    return [
        {
            "name": name,
            "amount": amount,
            "percentage": round(float(amount / grand_total * 100)) if grand_total > 0 else 0,
        }
        for name, amount in top.items()
    ]


def daily_flows(rows: list[tuple[date, str, Decimal]]) -> dict:
    """
    Sum (date, type, amount) rows into one income/expense entry per day.

    Only days with at least one posting appear, oldest first. max_value is
    the largest single-day total of either kind, at least 1, plus 10%
    headroom for the chart axis.
    """
    by_day: dict[date, dict] = {}
    for day, txn_type, amount in rows:
        entry = by_day.setdefault(
            day, {"date": day, "income": Decimal("0"), "expense": Decimal("0")}
        )
        entry["income" if txn_type == "credit" else "expense"] += amount

    data = [by_day[day] for day in sorted(by_day)]
    peak = max(
        [Decimal("1")] + [max(e["income"], e["expense"]) for e in data]
    )
    return {
        "data": data,
        "max_value": (peak * Decimal("1.1")).quantize(Decimal("0.01")),
    }


def _month_start(day: date) -> date:
    return day.replace(day=1)


def _ledger_query(*columns, user: User, is_admin: bool):
    """Select ``columns`` over transactions joined to their wallets, admin-aware."""
    query = (
        select(*columns)
        .select_from(Transaction)
        .join(UserWallet, UserWallet.id == Transaction.user_wallet_id)
    )
    if not is_admin:
        query = query.where(UserWallet.user_id == user.id)
    return query


async def _recent_transactions(db: AsyncSession, user: User) -> list[dict]:
    """The acting user's latest postings; debits are reported as negative amounts."""
    result = await db.execute(
        select(Transaction, UserWallet)
        .join(UserWallet, UserWallet.id == Transaction.user_wallet_id)
        .where(UserWallet.user_id == user.id)
        .order_by(Transaction.date.desc(), Transaction.created_at.desc())
        .limit(RECENT_TRANSACTIONS)
    )
    return [
        {
            "id": txn.id,
            "description": txn.description,
            "amount": -txn.amount if txn.type == "debit" else txn.amount,
            "type": txn.type,
            "date": txn.date,
            "wallet_name": user_wallet.wallet_name,
        }
        for txn, user_wallet in result.all()
    ]


async def _upcoming_payments(db: AsyncSession, user: User, today: date) -> list[dict]:
    """The acting user's budget plans that end today or later, soonest first."""
    result = await db.execute(
        select(BudgetPlan)
        .where(BudgetPlan.user_id == user.id)
        .where(BudgetPlan.end_date >= today)
        .order_by(BudgetPlan.end_date)
        .limit(UPCOMING_PAYMENTS)
    )
    return [
        {
            "id": plan.id,
            "name": plan.name,
            "amount": plan.total_budget,
            "date": plan.end_date,
            "priority": "high" if (plan.end_date - today).days <= URGENT_DAYS else "medium",
        }
        for plan in result.scalars().all()
    ]


async def get_summary(
    db: AsyncSession,
    user: User,
    today: date | None = None,
) -> dict:
    """
    Build the dashboard summary.

    Args:
        db: Database session.
        user: The acting user; admins see every user's wallets.
        today: Reference day for "current month" (defaults to today).

    Returns:
        Dictionary matching DashboardResponse schema.
    """
    today = today or date.today()
    current_start = _month_start(today)
    previous_start = add_months(current_start, -1)
    next_start = add_months(current_start, 1)
    is_admin = user.has_role(Role.ADMIN)

    # --- Balances ---
    wallet_query = select(UserWallet)
    if not is_admin:
        wallet_query = wallet_query.where(UserWallet.user_id == user.id)
    user_wallets = list((await db.execute(wallet_query)).scalars().all())

    total_balance = sum((uw.balance for uw in user_wallets), Decimal("0"))

    by_wallet: dict[str, Decimal] = defaultdict(Decimal)
    for uw in user_wallets:
        by_wallet[uw.wallet.name] += uw.balance

    wallet_balances = [
        {
            "name": name,
            "balance": balance,
            "percentage": round(float(balance / total_balance * 100), 1) if total_balance > 0 else 0.0,
        }
        for name, balance in sorted(by_wallet.items(), key=lambda item: item[1], reverse=True)
    ]

    # --- Debits for the previous and current month ---
    debit_query = (
        _ledger_query(
            Transaction.date, Transaction.amount, Transaction.description,
            user=user, is_admin=is_admin,
        )
        .where(Transaction.type == "debit")
        .where(Transaction.date >= previous_start)
        .where(Transaction.date < next_start)
    )
    rows = (await db.execute(debit_query)).all()

    current_debits = [(description, amount) for day, amount, description in rows if day >= current_start]
    current_total = sum((amount for _, amount in current_debits), Decimal("0"))
    previous_total = sum(
        (amount for day, amount, _ in rows if day < current_start),
        Decimal("0"),
    )

    # --- Daily income and expense, last 30 days including today ---
    chart_query = (
        _ledger_query(
            Transaction.date, Transaction.type, Transaction.amount,
            user=user, is_admin=is_admin,
        )
        .where(Transaction.date >= today - timedelta(days=CHART_DAYS - 1))
        .where(Transaction.date <= today)
    )
    chart_rows = (await db.execute(chart_query)).all()

    # --- Distinct descriptions this month, any type ---
    categories_query = (
        _ledger_query(
            func.count(func.distinct(Transaction.description)),
            user=user, is_admin=is_admin,
        )
        .where(Transaction.date >= current_start)
        .where(Transaction.date < next_start)
    )
    active_categories = (await db.execute(categories_query)).scalar() or 0

    return {
        "total_balance": total_balance,
        "current_month_expenses": current_total,
        "previous_month_expenses": previous_total,
        "expense_change_percentage": percentage_change(current_total, previous_total),
        "expenses_by_category": group_expenses(current_debits),
        "wallet_balances": wallet_balances,
        "income_expense_chart": daily_flows(chart_rows),
        "recent_transactions": await _recent_transactions(db, user),
        "upcoming_payments": await _upcoming_payments(db, user, today),
        "active_categories": active_categories,
    }
