"""
Password hashing and JWT access tokens.

Passwords are hashed with Argon2id through passlib's CryptContext. Marking
the context ``deprecated="auto"`` means a future scheme can be added in
front of argon2 and old hashes keep verifying.

Access tokens are HS256-signed JWTs carrying the user id in ``sub``. Roles
are NOT put in the token: they are read from the database on every request
(see dependencies.get_current_user), so a role granted by a subscription
approval takes effect without the user logging in again.
"""

from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext

from bizdesk.config import settings


pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(plain_password: str) -> str:
    """Return the Argon2id hash for ``plain_password``."""
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a login attempt against the stored hash (constant time)."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(subject: str, expires_delta: timedelta | None = None) -> str:
    """
    Issue a signed token for ``subject`` (a user id as string).

    Args:
        subject: Goes into the standard "sub" claim.
        expires_delta: Lifetime override; defaults to
                       ACCESS_TOKEN_EXPIRE_MINUTES from settings.
    """
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {
        "sub": subject,
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Verify ``token`` and return its claims.

    Raises:
        jose.JWTError: If the token is expired, tampered with, or malformed.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
