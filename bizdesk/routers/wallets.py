"""
Wallets router — wallet types and the user's own wallets.

Wallet types:
  POST /wallets                      — [Manager] Create a wallet type
  GET  /wallets                      — List wallet types

User wallets:
  POST /user-wallets                 — Open a wallet with an opening balance
  GET  /user-wallets                 — List own wallets
  GET  /user-wallets/{id}            — Get one wallet (own, or any for admins)
  GET  /user-wallets/{id}/balance    — Maintained vs. ledger-computed balance
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.database import get_db
from bizdesk.dependencies import get_current_user, require_manager
from bizdesk.models.user import User
from bizdesk.schemas.wallet import (
    BalanceResponse,
    UserWalletCreateRequest,
    UserWalletResponse,
    WalletCreateRequest,
    WalletResponse,
)
from bizdesk.services import wallet_service

wallet_router = APIRouter()
user_wallet_router = APIRouter()


@wallet_router.post(
    "",
    response_model=WalletResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a wallet type",
)
async def create_wallet(
    request: WalletCreateRequest,
    manager: User = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    return await wallet_service.create_wallet(db, request.name, request.description)


@wallet_router.get(
    "",
    response_model=list[WalletResponse],
    summary="List wallet types",
)
async def list_wallets(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await wallet_service.list_wallets(db)


@user_wallet_router.post(
    "",
    response_model=UserWalletResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a wallet",
)
async def create_user_wallet(
    request: UserWalletCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Open a wallet funded with an opening balance.

    - **wallet_id**: an existing wallet type, or
    - **new_wallet_name**: a type to create (reused if the name exists)
    - **balance**: opening balance, zero or more

    Each user can hold each wallet type once.
    """
    return await wallet_service.create_user_wallet(
        db=db,
        user=user,
        balance=request.balance,
        wallet_id=request.wallet_id,
        new_wallet_name=request.new_wallet_name,
    )


@user_wallet_router.get(
    "",
    response_model=list[UserWalletResponse],
    summary="List my wallets",
)
async def list_user_wallets(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await wallet_service.list_user_wallets(db, user)


@user_wallet_router.get(
    "/{user_wallet_id}",
    response_model=UserWalletResponse,
    summary="Get a wallet",
)
async def get_user_wallet(
    user_wallet_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await wallet_service.get_user_wallet(db, user_wallet_id, user)


@user_wallet_router.get(
    "/{user_wallet_id}/balance",
    response_model=BalanceResponse,
    summary="Check a wallet balance against its ledger",
)
async def get_balance(
    user_wallet_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Returns the maintained balance and the balance recomputed from the
    opening balance and every transaction. **match** is false when they
    have drifted apart.
    """
    return await wallet_service.get_balance(db, user_wallet_id, user)
