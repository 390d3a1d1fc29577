"""
Custom exception classes and FastAPI exception handlers.

Why custom exceptions?
  The service layer raises domain-specific errors (like InsufficientFundsError
  or InvalidStateError) without importing HTTP concepts. The handler layer
  then translates these into proper HTTP responses.

  This separation means:
    - Service code is testable without HTTP
    - Error responses are consistent across all endpoints
    - Adding new error types is straightforward

Exception hierarchy:
    BizdeskError (base)
    ├── UnauthorizedAccessError  — acting user does not own the resource
    ├── InvalidStateError        — transition not allowed from current status
    ├── MissingNoteError         — rejection/cancellation without a reason
    ├── InsufficientFundsError   — debit larger than the wallet balance
    ├── ResourceNotFoundError    — offer/subscription/wallet/... doesn't exist
    ├── DuplicateResourceError   — unique value already taken
    ├── DuplicateEmailError      — signup with a registered email
    └── InvalidCredentialsError  — bad login

Anything that is NOT a BizdeskError is treated as an unexpected failure:
logged with traceback and answered with a generic 500.
"""

import logging
import uuid
from decimal import Decimal

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class BizdeskError(Exception):
    """Base exception for all Bizdesk domain errors."""

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class UnauthorizedAccessError(BizdeskError):
    """Raised when a user attempts to act on a resource they don't own."""

    def __init__(self, detail: str = "You do not have access to this resource"):
        super().__init__(detail)


class InvalidStateError(BizdeskError):
    """
    Raised when a lifecycle transition is requested from the wrong status.

    Attributes:
        entity: "offer" or "subscription".
        current: The status the entity is in right now.
        target: The status the caller tried to move it to.
    """

    def __init__(self, entity: str, current: str, target: str, detail: str | None = None):
        self.entity = entity
        self.current = current
        self.target = target
        super().__init__(
            detail or f"Cannot move {entity} from '{current}' to '{target}'"
        )


class MissingNoteError(BizdeskError):
    """Raised when an action that requires a written reason gets none."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"A note is required to {action}")


class InsufficientFundsError(BizdeskError):
    """
    Raised when a debit would drive a wallet balance negative.

    Attributes:
        wallet_id: The user wallet that lacks sufficient funds.
        requested: The amount the user tried to debit.
        available: The balance at the time of the check.
    """

    def __init__(self, wallet_id: uuid.UUID, requested: Decimal, available: Decimal):
        self.wallet_id = wallet_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient balance: requested {requested}, available {available}"
        )


class ResourceNotFoundError(BizdeskError):
    """Raised when a requested entity does not exist."""

    def __init__(self, resource: str, resource_id: uuid.UUID | str):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} {resource_id} not found")


class DuplicateResourceError(BizdeskError):
    """Raised when a unique value (number, name, pair) is already taken."""


class DuplicateEmailError(BizdeskError):
    """Raised when attempting to register with an email that's already in use."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email {email} is already registered")


class InvalidCredentialsError(BizdeskError):
    """Raised when login credentials are incorrect."""

    def __init__(self):
        super().__init__("Invalid email or password")


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    Each handler maps a domain exception to an HTTP status code and
    consistent JSON response format: {"detail": ..., "error_type": ...}

    This is called once during app startup in main.py.
    """

    @app.exception_handler(UnauthorizedAccessError)
    async def unauthorized_access_handler(
        request: Request, exc: UnauthorizedAccessError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=403,
            content={"detail": exc.detail, "error_type": "forbidden"},
        )

    @app.exception_handler(InvalidStateError)
    async def invalid_state_handler(
        request: Request, exc: InvalidStateError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=409,  # Conflict — the resource is not in the required state
            content={
                "detail": exc.detail,
                "error_type": "invalid_state",
                "current_status": exc.current,
            },
        )

    @app.exception_handler(MissingNoteError)
    async def missing_note_handler(
        request: Request, exc: MissingNoteError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": exc.detail, "error_type": "missing_note"},
        )

    @app.exception_handler(InsufficientFundsError)
    async def insufficient_funds_handler(
        request: Request, exc: InsufficientFundsError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,  # Unprocessable Entity — valid request, rejected by business rules
            content={
                "detail": exc.detail,
                "error_type": "insufficient_balance",
                "requested": str(exc.requested),
                "available": str(exc.available),
            },
        )

    @app.exception_handler(ResourceNotFoundError)
    async def not_found_handler(
        request: Request, exc: ResourceNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"detail": exc.detail, "error_type": "not_found"},
        )

    @app.exception_handler(DuplicateResourceError)
    async def duplicate_resource_handler(
        request: Request, exc: DuplicateResourceError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={"detail": exc.detail, "error_type": "duplicate"},
        )

    @app.exception_handler(DuplicateEmailError)
    async def duplicate_email_handler(
        request: Request, exc: DuplicateEmailError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={"detail": exc.detail, "error_type": "duplicate_email"},
        )

    @app.exception_handler(InvalidCredentialsError)
    async def invalid_credentials_handler(
        request: Request, exc: InvalidCredentialsError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={"detail": exc.detail, "error_type": "invalid_credentials"},
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "Unhandled error on %s %s", request.method, request.url.path,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={
                "detail": "The operation failed and was rolled back. Please try again.",
                "error_type": "internal_error",
            },
        )
