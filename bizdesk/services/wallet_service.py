"""
Wallet service — wallet types, user wallets and balance checks.

This module handles:
  - Wallet types (shared names like "Cash" or "Bank")
  - Opening a user wallet with an initial balance
  - Retrieval scoped to the owner (admins may read any wallet)
  - Balance verification: maintained balance vs. balance computed from
    the ledger, per wallet and across the whole system (reconciliation)

The maintained balance is only ever changed by transaction_service.
"""

import uuid
from decimal import Decimal

from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.exceptions import (
    DuplicateResourceError,
    ResourceNotFoundError,
    UnauthorizedAccessError,
)
from bizdesk.models.transaction import Transaction
from bizdesk.models.user import Role, User
from bizdesk.models.wallet import UserWallet, Wallet


async def create_wallet(
    db: AsyncSession,
    name: str,
    description: str | None = None,
) -> Wallet:
    """
    Create a wallet type.

    Raises:
        DuplicateResourceError: If the name is already taken.
    """
    existing = await db.execute(select(Wallet).where(Wallet.name == name))
    if existing.scalar_one_or_none() is not None:
        raise DuplicateResourceError(f"Wallet '{name}' already exists")

    wallet = Wallet(name=name, description=description)
    db.add(wallet)
    await db.flush()
    return wallet


async def list_wallets(db: AsyncSession) -> list[Wallet]:
    result = await db.execute(select(Wallet).order_by(Wallet.name))
    return list(result.scalars().all())


async def create_user_wallet(
    db: AsyncSession,
    user: User,
    balance: Decimal,
    wallet_id: uuid.UUID | None = None,
    new_wallet_name: str | None = None,
) -> UserWallet:
    """
    Open a wallet for ``user`` funded with ``balance``.

    Either pick an existing wallet type with ``wallet_id`` or name a new
    one with ``new_wallet_name``; a type with that name is reused if it
    already exists.

    Raises:
        ResourceNotFoundError: If ``wallet_id`` doesn't exist.
        DuplicateResourceError: If the user already has this wallet.
    """
    if new_wallet_name:
        existing = await db.execute(select(Wallet).where(Wallet.name == new_wallet_name))
        wallet = existing.scalar_one_or_none()
        if wallet is None:
            wallet = await create_wallet(db, new_wallet_name)
    else:
        wallet = await db.get(Wallet, wallet_id)
        if wallet is None:
            raise ResourceNotFoundError("Wallet", wallet_id)

    existing = await db.execute(
        select(UserWallet)
        .where(UserWallet.user_id == user.id)
        .where(UserWallet.wallet_id == wallet.id)
    )
    if existing.scalar_one_or_none() is not None:
        raise DuplicateResourceError(f"You already have a '{wallet.name}' wallet")

    user_wallet = UserWallet(
        user_id=user.id,
        wallet_id=wallet.id,
        wallet=wallet,
        balance=balance,
        opening_balance=balance,
    )
    db.add(user_wallet)
    await db.flush()
    return user_wallet


async def list_user_wallets(db: AsyncSession, user: User) -> list[UserWallet]:
    """List the user's own wallets, newest first."""
    result = await db.execute(
        select(UserWallet)
        .where(UserWallet.user_id == user.id)
        .order_by(UserWallet.created_at.desc())
    )
    return list(result.scalars().all())


async def get_user_wallet(
    db: AsyncSession,
    user_wallet_id: uuid.UUID,
    user: User,
) -> UserWallet:
    """
    Get a single user wallet, verifying ownership (admins bypass).

    Raises:
        ResourceNotFoundError: If the wallet doesn't exist.
        UnauthorizedAccessError: If it belongs to someone else.
    """
    user_wallet = await db.get(UserWallet, user_wallet_id)
    if user_wallet is None:
        raise ResourceNotFoundError("User wallet", user_wallet_id)

    if user_wallet.user_id != user.id and not user.has_role(Role.ADMIN):
        raise UnauthorizedAccessError("You do not have access to this wallet")

    return user_wallet


def _net_ledger_amount():
    """SUM expression: credits count positive, debits negative."""
    return func.coalesce(
        func.sum(
            case(
                (Transaction.type == "credit", Transaction.amount),
                else_=-Transaction.amount,
            )
        ),
        0,
    )


async def compute_balance_from_transactions(
    db: AsyncSession,
    user_wallet: UserWallet,
) -> Decimal:
    """Opening balance plus the net of every posting in the ledger."""
    result = await db.execute(
        select(_net_ledger_amount())
        .where(Transaction.user_wallet_id == user_wallet.id)
    )
    net = Decimal(str(result.scalar())).quantize(Decimal("0.01"))
    return user_wallet.opening_balance + net


async def get_balance(
    db: AsyncSession,
    user_wallet_id: uuid.UUID,
    user: User,
) -> dict:
    """
    Get the wallet balance — both maintained and computed from the ledger.

    A mismatch signals drift between the running total and the ledger
    (for example after a transaction was deleted without reversal).

    Returns:
        Dict with user_wallet_id, balance, computed_balance, match.
    """
    user_wallet = await get_user_wallet(db, user_wallet_id, user)
    computed = await compute_balance_from_transactions(db, user_wallet)

    return {
        "user_wallet_id": user_wallet.id,
        "balance": user_wallet.balance,
        "computed_balance": computed,
        "match": user_wallet.balance == computed,
    }


# ---------------------------------------------------------------------------
# Admin functions
# ---------------------------------------------------------------------------

async def reconcile_wallets(db: AsyncSession) -> list[dict]:
    """
    [ADMIN ONLY] Compare every wallet's maintained balance with its ledger.

    Returns only the wallets that disagree, each with the difference
    (maintained − computed). An empty list means the books are clean.
    """
    net_by_wallet = (
        select(
            Transaction.user_wallet_id.label("user_wallet_id"),
            _net_ledger_amount().label("net"),
        )
        .group_by(Transaction.user_wallet_id)
        .subquery()
    )
    result = await db.execute(
        select(UserWallet, net_by_wallet.c.net)
        .outerjoin(net_by_wallet, net_by_wallet.c.user_wallet_id == UserWallet.id)
    )

    mismatches = []
    for user_wallet, net in result.all():
        net = Decimal(str(net or 0)).quantize(Decimal("0.01"))
        computed = user_wallet.opening_balance + net
        if computed != user_wallet.balance:
            mismatches.append({
                "user_wallet_id": user_wallet.id,
                "user_id": user_wallet.user_id,
                "balance": user_wallet.balance,
                "computed_balance": computed,
                "difference": user_wallet.balance - computed,
            })
    return mismatches
