"""
Authentication service — signup and login business logic.

This module contains the core auth logic, separated from HTTP concerns.
The router calls these functions and translates the results into HTTP
responses.

Signup flow:
  1. Check if email is already registered
  2. Hash the password with Argon2id
  3. Create the User together with its default role (DEFAULT_SIGNUP_ROLE)
  4. Return a JWT token so the user is immediately logged in

Login returns the same error for "wrong password", "email not found" and
"deactivated" so the endpoint can't be used to enumerate accounts.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.config import settings
from bizdesk.exceptions import DuplicateEmailError, InvalidCredentialsError
from bizdesk.models.user import Role, User, UserRole
from bizdesk.security import hash_password, verify_password, create_access_token

logger = logging.getLogger(__name__)


async def signup(
    db: AsyncSession,
    email: str,
    password: str,
    name: str,
) -> tuple[User, str]:
    """
    Register a new user.

    Args:
        db: Database session.
        email: User's email (must be unique).
        password: Plaintext password (hashed before storage).
        name: Display name.

    Returns:
        Tuple of (User instance, JWT token string).

    Raises:
        DuplicateEmailError: If the email is already registered.
    """
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise DuplicateEmailError(email)

    user = User(
        email=email,
        name=name,
        hashed_password=hash_password(password),
        roles=[UserRole(role=Role(settings.DEFAULT_SIGNUP_ROLE).value)],
    )
    db.add(user)
    await db.flush()

    logger.info("Registered user %s", user.id)
    token = create_access_token(str(user.id))
    return user, token


async def login(
    db: AsyncSession,
    email: str,
    password: str,
) -> tuple[User, str]:
    """
    Authenticate a user and return a JWT token.

    Raises:
        InvalidCredentialsError: If email doesn't exist, the password is
                                 wrong, or the user is deactivated.
    """
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(password, user.hashed_password):
        raise InvalidCredentialsError()

    if not user.is_active:
        raise InvalidCredentialsError()

    token = create_access_token(str(user.id))
    return user, token
