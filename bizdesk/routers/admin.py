"""
Admin router — role management and ledger reconciliation.

All endpoints require ADMIN role.

Endpoints:
  POST /admin/users/{user_id}/roles  — Grant a role (idempotent)
  GET  /admin/reconciliation         — Wallets whose balance disagrees with the ledger

By consolidating all admin routes in one router, we avoid route-ordering
conflicts that arise when multiple routers share a prefix and have
overlapping parameterized paths.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.database import get_db
from bizdesk.dependencies import require_admin
from bizdesk.models.user import User
from bizdesk.schemas.user import RoleGrantRequest, UserResponse
from bizdesk.schemas.wallet import ReconciliationEntry
from bizdesk.services import role_service, wallet_service

router = APIRouter()


@router.post(
    "/users/{user_id}/roles",
    response_model=UserResponse,
    summary="[Admin] Grant a role to a user",
)
async def admin_grant_role(
    user_id: uuid.UUID,
    request: RoleGrantRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Give a user a role tag (manager, sales, ...).

    Granting a role the user already has is a no-op.
    """
    return await role_service.grant_role_by_id(db, user_id, request.role)


@router.get(
    "/reconciliation",
    response_model=list[ReconciliationEntry],
    summary="[Admin] Find wallets that drifted from their ledger",
)
async def admin_reconciliation(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Compare every wallet's maintained balance with opening balance plus
    the net of its transactions.

    Only mismatching wallets are listed; an empty list means the books
    are clean. Deleting a transaction without balance reversal is the
    usual cause of a mismatch.
    """
    return await wallet_service.reconcile_wallets(db)
