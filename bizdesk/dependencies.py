"""
FastAPI dependencies for authentication and authorization.

Dependencies are reusable functions that FastAPI injects into route handlers.
They form a small chain:

  get_current_user (JWT -> User)
      └── require_roles(*roles) (User -> User, 403 unless a role matches)

Role checks here are coarse ("only managers may approve subscriptions").
Ownership checks ("only the lead an offer was made to may accept it") are
done in the service layer, because they need the loaded resource and
must hold no matter which router calls the service.
"""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.database import get_db
from bizdesk.models.user import Role, User
from bizdesk.security import decode_access_token


# Reads "Authorization: Bearer <token>"; tokenUrl feeds Swagger UI's Authorize button
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Extract and validate the JWT token, then return the corresponding User.

    Raises:
        HTTPException 401: If the token is invalid, or the user doesn't
                           exist or has been deactivated.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
        user_id_str: str | None = payload.get("sub")
        if user_id_str is None:
            raise credentials_exception
        user_id = uuid.UUID(user_id_str)
    except (JWTError, ValueError):
        raise credentials_exception

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        raise credentials_exception

    return user


def require_roles(*roles: Role):
    """
    Build a dependency that lets the request through only for ``roles``.

    Usage:
        @router.post("/{id}/approve")
        async def approve(manager: User = Depends(require_roles(Role.MANAGER, Role.ADMIN))):
            ...

    Raises:
        HTTPException 403: If the user carries none of the roles.
    """
    allowed = ", ".join(r.value for r in roles)

    async def dependency(user: User = Depends(get_current_user)) -> User:
        if not user.has_role(*roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"This action requires one of the roles: {allowed}",
            )
        return user

    return dependency


require_admin = require_roles(Role.ADMIN)
require_manager = require_roles(Role.MANAGER, Role.ADMIN)
require_sales = require_roles(Role.SALES, Role.ADMIN)
require_staff = require_roles(Role.SALES, Role.MANAGER, Role.ADMIN)
