"""
Role service — granting role tags to users.

Granting is idempotent: asking for a role the user already carries is a
no-op, not an error and not a second row. Subscription approval relies on
this when it hands out the "customer" role.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.exceptions import ResourceNotFoundError
from bizdesk.models.user import Role, User, UserRole

logger = logging.getLogger(__name__)


async def grant_role(db: AsyncSession, user: User, role: Role) -> bool:
    """
    Give ``user`` the ``role`` tag unless it already has it.

    Returns:
        True if a new role row was added, False if the user already had it.
    """
    if user.has_role(role):
        return False

    user.roles.append(UserRole(role=role.value))
    await db.flush()
    logger.info("Granted role %s to user %s", role.value, user.id)
    return True


async def grant_role_by_id(db: AsyncSession, user_id: uuid.UUID, role: Role) -> User:
    """
    [ADMIN ONLY] Grant a role to any user by id.

    Raises:
        ResourceNotFoundError: If the user doesn't exist.
    """
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise ResourceNotFoundError("User", user_id)

    await grant_role(db, user, role)
    return user
