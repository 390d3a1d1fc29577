"""
Transaction service — ledger postings and the wallet balances they drive.

THIS IS THE MOST CRITICAL FILE IN THE PROJECT. It handles:
  - Posting credits and debits against a user wallet
  - Editing a posting, including moving it to another wallet
  - Deleting a posting (with or without reversing its effect)
  - Balance enforcement (a debit may never exceed the balance it meets)

Atomicity:
  Every balance change and its ledger row are flushed into the SAME
  database transaction, which get_db() commits only when the request
  succeeds and rolls back on any error. An edit therefore never leaves the
  original wallet reversed while the destination wallet rejected the new
  amount: the rejection raises, and the reversal is rolled back with it.

Concurrency:
  Wallet rows are read with SELECT ... FOR UPDATE before the overdraft
  check, so two concurrent debits against one wallet serialize instead of
  both passing the check against the same stale balance. When an edit
  touches two wallets they are locked in UUID order, the same order every
  time, so two edits moving money in opposite directions can't deadlock.

SQLite note:
  SQLite has no row-level locks; with_for_update() is a no-op there and
  SQLite's database-wide write lock provides the serialization instead.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.config import settings
from bizdesk.exceptions import (
    InsufficientFundsError,
    ResourceNotFoundError,
    UnauthorizedAccessError,
)
from bizdesk.models.transaction import Transaction
from bizdesk.models.user import Role, User
from bizdesk.models.wallet import UserWallet

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Balance arithmetic
# ---------------------------------------------------------------------------

def apply_effect(user_wallet: UserWallet, txn_type: str, amount: Decimal) -> None:
    """
    Apply one posting to a wallet's running balance.

    Debits are checked against the balance as it stands right now (exact
    Decimal comparison, no tolerance) and leave it untouched when refused.

    Raises:
        InsufficientFundsError: If a debit is larger than the balance.
    """
    if txn_type == "debit":
        if amount > user_wallet.balance:
            raise InsufficientFundsError(
                wallet_id=user_wallet.id,
                requested=amount,
                available=user_wallet.balance,
            )
        user_wallet.balance -= amount
    else:
        user_wallet.balance += amount


def reverse_effect(user_wallet: UserWallet, txn_type: str, amount: Decimal) -> None:
    """Undo a posting: give a debit back, take a credit away. Never refuses."""
    if txn_type == "debit":
        user_wallet.balance += amount
    else:
        user_wallet.balance -= amount


async def _lock_wallet(db: AsyncSession, user_wallet_id: uuid.UUID) -> UserWallet:
    result = await db.execute(
        select(UserWallet)
        .where(UserWallet.id == user_wallet_id)
        .with_for_update()  # No-op on SQLite, locks row on PostgreSQL
    )
    user_wallet = result.scalar_one_or_none()
    if user_wallet is None:
        raise ResourceNotFoundError("User wallet", user_wallet_id)
    return user_wallet


def _check_owner(user_wallet: UserWallet, user: User) -> None:
    if user_wallet.user_id != user.id and not user.has_role(Role.ADMIN):
        raise UnauthorizedAccessError("You do not have access to this wallet")


async def _get_owned_transaction(
    db: AsyncSession,
    transaction_id: uuid.UUID,
    user: User,
    lock: bool = False,
) -> tuple[Transaction, uuid.UUID]:
    """Load a transaction and the owner of its wallet, enforcing ownership."""
    query = (
        select(Transaction, UserWallet.user_id)
        .join(UserWallet, UserWallet.id == Transaction.user_wallet_id)
        .where(Transaction.id == transaction_id)
    )
    if lock:
        query = query.with_for_update(of=Transaction)

    row = (await db.execute(query)).one_or_none()
    if row is None:
        raise ResourceNotFoundError("Transaction", transaction_id)

    txn, owner_id = row
    if owner_id != user.id and not user.has_role(Role.ADMIN):
        raise UnauthorizedAccessError("You do not have access to this transaction")
    return txn, owner_id


# ---------------------------------------------------------------------------
# Postings
# ---------------------------------------------------------------------------

async def post_transaction(
    db: AsyncSession,
    user: User,
    user_wallet_id: uuid.UUID,
    txn_type: str,
    amount: Decimal,
    txn_date: date,
    description: str | None = None,
) -> tuple[Transaction, UserWallet]:
    """
    Post a credit or debit to a wallet.

    For CREDITS the amount is added unconditionally.
    For DEBITS the amount must not exceed the current balance; a refused
    debit changes nothing and leaves no ledger row behind.

    Args:
        db: Database session.
        user: The acting user (must own the wallet unless admin).
        user_wallet_id: The wallet to post to.
        txn_type: "credit" or "debit".
        amount: Positive Decimal amount.
        txn_date: Day the money moved.
        description: Optional memo; also drives the dashboard categories.

    Returns:
        Tuple of (new Transaction, updated UserWallet).

    Raises:
        ResourceNotFoundError: If the wallet doesn't exist.
        UnauthorizedAccessError: If the wallet belongs to someone else.
        InsufficientFundsError: If a debit would cause a negative balance.
    """
    user_wallet = await _lock_wallet(db, user_wallet_id)
    _check_owner(user_wallet, user)

    try:
        apply_effect(user_wallet, txn_type, amount)
    except InsufficientFundsError:
        logger.warning(
            "Refused debit of %s on wallet %s (balance %s)",
            amount, user_wallet.id, user_wallet.balance,
        )
        raise

    txn = Transaction(
        user_wallet_id=user_wallet.id,
        type=txn_type,
        amount=amount,
        description=description,
        date=txn_date,
    )
    db.add(txn)
    await db.flush()

    logger.info(
        "Posted %s of %s to wallet %s, balance now %s",
        txn_type, amount, user_wallet.id, user_wallet.balance,
    )
    return txn, user_wallet


async def edit_transaction(
    db: AsyncSession,
    user: User,
    transaction_id: uuid.UUID,
    user_wallet_id: uuid.UUID,
    txn_type: str,
    amount: Decimal,
    txn_date: date,
    description: str | None = None,
) -> tuple[Transaction, UserWallet]:
    """
    Rewrite a posting, keeping both wallets consistent with the ledger.

    Steps:
      1. Reverse the original effect on the original wallet.
      2. Pick the destination: the same (already adjusted) wallet object
         when unchanged, otherwise the newly referenced wallet.
      3. Apply the new effect to the destination. A debit is checked
         against the destination's balance as it stands after step 1.
      4. Update the transaction row.

    If step 3 refuses the debit, the exception propagates and the request
    session is rolled back, undoing step 1 too.

    The destination wallet must belong to the same user as the original
    one; postings can't be moved between users.

    Returns:
        Tuple of (updated Transaction, destination UserWallet).

    Raises:
        ResourceNotFoundError: If the transaction or a wallet doesn't exist.
        UnauthorizedAccessError: If the user can't touch the transaction or
                                 the destination wallet.
        InsufficientFundsError: If the new debit exceeds the destination balance.
    """
    txn, owner_id = await _get_owned_transaction(db, transaction_id, user, lock=True)
    original_wallet_id = txn.user_wallet_id

    # Lock every wallet involved in a consistent order (sorted by UUID)
    wallets: dict[uuid.UUID, UserWallet] = {}
    for wallet_id in sorted({original_wallet_id, user_wallet_id}):
        wallets[wallet_id] = await _lock_wallet(db, wallet_id)

    original_wallet = wallets[original_wallet_id]
    destination = wallets[user_wallet_id]
    if destination.user_id != owner_id:
        raise UnauthorizedAccessError("A transaction can only be moved between wallets of the same user")

    old_type, old_amount = txn.type, txn.amount

    # 1. Undo the original posting
    reverse_effect(original_wallet, old_type, old_amount)

    # 2-3. Apply the new posting (destination is original_wallet when unchanged)
    try:
        apply_effect(destination, txn_type, amount)
    except InsufficientFundsError:
        logger.warning(
            "Refused edit of transaction %s: debit %s exceeds wallet %s balance %s",
            txn.id, amount, destination.id, destination.balance,
        )
        raise

    # 4. Rewrite the ledger row
    txn.user_wallet_id = destination.id
    txn.type = txn_type
    txn.amount = amount
    txn.description = description
    txn.date = txn_date
    await db.flush()

    logger.info(
        "Edited transaction %s: %s %s on wallet %s -> %s %s on wallet %s",
        txn.id, old_type, old_amount, original_wallet_id,
        txn_type, amount, destination.id,
    )
    return txn, destination


async def delete_transaction(
    db: AsyncSession,
    user: User,
    transaction_id: uuid.UUID,
    reverse_balance: bool | None = None,
) -> UserWallet | None:
    """
    Delete a posting.

    By default (REVERSE_BALANCE_ON_DELETE=False) the wallet balance is left
    as it is, so the maintained balance and the ledger drift apart by the
    deleted amount; the reconciliation report will show it. With reversal
    enabled the posting's effect is undone first, and undoing a credit that
    has already been spent is refused.

    Args:
        reverse_balance: Overrides the REVERSE_BALANCE_ON_DELETE setting.

    Returns:
        The adjusted UserWallet when the balance was reversed, else None.

    Raises:
        ResourceNotFoundError: If the transaction doesn't exist.
        UnauthorizedAccessError: If it belongs to someone else.
        InsufficientFundsError: If reversing a credit would go negative.
    """
    if reverse_balance is None:
        reverse_balance = settings.REVERSE_BALANCE_ON_DELETE

    txn, _ = await _get_owned_transaction(db, transaction_id, user, lock=True)

    user_wallet = None
    if reverse_balance:
        user_wallet = await _lock_wallet(db, txn.user_wallet_id)
        # Taking a credit back is a debit of the same amount
        opposite = "credit" if txn.type == "debit" else "debit"
        apply_effect(user_wallet, opposite, txn.amount)

    await db.delete(txn)
    await db.flush()

    logger.info(
        "Deleted transaction %s (%s %s)%s",
        txn.id, txn.type, txn.amount,
        " with balance reversal" if reverse_balance else " without balance reversal",
    )
    return user_wallet


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

async def list_transactions(
    db: AsyncSession,
    user: User,
    user_wallet_id: uuid.UUID | None = None,
    type_filter: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Transaction]:
    """
    List transactions, newest ``date`` first.

    Users see postings on their own wallets; admins see everything.
    """
    query = (
        select(Transaction)
        .join(UserWallet, UserWallet.id == Transaction.user_wallet_id)
        .order_by(Transaction.date.desc(), Transaction.created_at.desc())
        .limit(limit)
        .offset(offset)
    )

    if not user.has_role(Role.ADMIN):
        query = query.where(UserWallet.user_id == user.id)
    if user_wallet_id:
        query = query.where(Transaction.user_wallet_id == user_wallet_id)
    if type_filter:
        query = query.where(Transaction.type == type_filter)

    result = await db.execute(query)
    return list(result.scalars().all())


async def get_transaction(
    db: AsyncSession,
    transaction_id: uuid.UUID,
    user: User,
) -> Transaction:
    """
    Get a single transaction by ID, verifying wallet ownership.

    Raises:
        ResourceNotFoundError: If the transaction doesn't exist.
        UnauthorizedAccessError: If it belongs to someone else.
    """
    txn, _ = await _get_owned_transaction(db, transaction_id, user)
    return txn
