"""
Authentication router — signup, login and "who am I".

Signup and login are the only public (unauthenticated) endpoints in the
API. Everything else requires a valid JWT token.

Endpoints:
  POST /auth/signup  — Register a new user (role "lead") and get a token
  POST /auth/login   — Authenticate and get a token
  GET  /auth/me      — The authenticated user and their roles

Security notes:
  - Plaintext passwords exist only in memory during request processing;
    they are hashed before any database operation and never logged.
  - JWT tokens appear only in response bodies, which are not logged by
    uvicorn (it logs method, path, and status code only).
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.database import get_db
from bizdesk.dependencies import get_current_user
from bizdesk.models.user import User
from bizdesk.schemas.auth import (
    UserSignupRequest,
    UserLoginRequest,
    TokenResponse,
    SignupResponse,
)
from bizdesk.schemas.user import UserResponse
from bizdesk.services import auth_service

router = APIRouter()


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def signup(
    request: UserSignupRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a new user.

    New users start as leads: they can receive offers and apply for
    subscriptions. Returns a JWT token so the user is immediately logged in.

    - **email**: Must be a valid email format and not already registered
    - **password**: Minimum 8 characters
    - **name**: Display name, 1-255 characters
    """
    user, token = await auth_service.signup(
        db=db,
        email=request.email,
        password=request.password,
        name=request.name,
    )

    return SignupResponse(
        user_id=user.id,
        email=user.email,
        roles=user.role_names,
        token=token,
    )


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Authenticate and get a token",
)
async def login(
    request: UserLoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Authenticate with email and password.

    Returns a JWT bearer token that must be included in the Authorization
    header for all subsequent requests:

        Authorization: Bearer <token>

    The token expires after ACCESS_TOKEN_EXPIRE_MINUTES (default: 30).
    """
    _, token = await auth_service.login(
        db=db,
        email=request.email,
        password=request.password,
    )

    return TokenResponse(token=token)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get the authenticated user",
)
async def me(user: User = Depends(get_current_user)):
    return user
