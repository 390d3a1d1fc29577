"""
Transactions router — post, edit and delete ledger entries.

Endpoints (scoped to the authenticated user's wallets; admins see all):
  POST   /transactions        — Post a credit or debit
  GET    /transactions        — List transactions (with filters)
  GET    /transactions/{id}   — Get a single transaction
  PUT    /transactions/{id}   — Edit (amount, type, date, or move wallets)
  DELETE /transactions/{id}   — Delete

Every write returns the wallet as it stands afterwards so clients don't
need a second request to refresh the balance.
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.database import get_db
from bizdesk.dependencies import get_current_user
from bizdesk.models.user import User
from bizdesk.schemas.transaction import (
    TransactionCreateRequest,
    TransactionDeleteResponse,
    TransactionResponse,
    TransactionUpdateRequest,
    TransactionWithWalletResponse,
)
from bizdesk.services import transaction_service

router = APIRouter()


@router.post(
    "",
    response_model=TransactionWithWalletResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post a transaction (credit or debit)",
)
async def create_transaction(
    request: TransactionCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Post a credit (money in) or debit (money out) to one of your wallets.

    - **credit**: Adds to the wallet balance
    - **debit**: Subtracts from the balance; refused with 422
      insufficient_balance if it exceeds the balance. A refused debit
      leaves no trace in the ledger.

    Amounts are decimals with up to two places, e.g. "125000.50".
    """
    txn, user_wallet = await transaction_service.post_transaction(
        db=db,
        user=user,
        user_wallet_id=request.user_wallet_id,
        txn_type=request.type,
        amount=request.amount,
        txn_date=request.date,
        description=request.description,
    )
    return TransactionWithWalletResponse(transaction=txn, wallet=user_wallet)


@router.get(
    "",
    response_model=list[TransactionResponse],
    summary="List transactions",
)
async def list_transactions(
    user_wallet_id: uuid.UUID | None = Query(None, description="Only this wallet"),
    type: str | None = Query(None, description="Filter by type: credit, debit"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    List transactions, most recent date first.

    Supports filtering by wallet and type (credit/debit), plus pagination.
    """
    return await transaction_service.list_transactions(
        db=db,
        user=user,
        user_wallet_id=user_wallet_id,
        type_filter=type,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/{transaction_id}",
    response_model=TransactionResponse,
    summary="Get a single transaction",
)
async def get_transaction(
    transaction_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.get_transaction(db, transaction_id, user)


@router.put(
    "/{transaction_id}",
    response_model=TransactionWithWalletResponse,
    summary="Edit a transaction",
)
async def edit_transaction(
    transaction_id: uuid.UUID,
    request: TransactionUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Rewrite a transaction.

    The original effect is reversed and the new one applied, so wallet
    balances always match the edited ledger. If the new amount is a debit
    larger than what the destination wallet holds after the reversal, the
    edit is refused and nothing changes.
    """
    txn, user_wallet = await transaction_service.edit_transaction(
        db=db,
        user=user,
        transaction_id=transaction_id,
        user_wallet_id=request.user_wallet_id,
        txn_type=request.type,
        amount=request.amount,
        txn_date=request.date,
        description=request.description,
    )
    return TransactionWithWalletResponse(transaction=txn, wallet=user_wallet)


@router.delete(
    "/{transaction_id}",
    response_model=TransactionDeleteResponse,
    summary="Delete a transaction",
)
async def delete_transaction(
    transaction_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a transaction.

    Whether the wallet balance is reversed depends on the
    REVERSE_BALANCE_ON_DELETE setting (off by default, in which case the
    balance is left as it is and reconciliation will flag the wallet).
    """
    user_wallet = await transaction_service.delete_transaction(db, user, transaction_id)
    return TransactionDeleteResponse(
        transaction_id=transaction_id,
        balance_reversed=user_wallet is not None,
        wallet=user_wallet,
    )
