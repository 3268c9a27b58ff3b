"""
Custom exception hierarchy for DevFlow.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.

The pure calculators in devflow.services raise these too; they carry no
HTTP dependency beyond the status constant.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class DevFlowException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidInputError(DevFlowException):
    """Malformed activity data (negative counts, bad dates, duplicate days)."""
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_INPUT"


class InvalidAmountError(DevFlowException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_AMOUNT"

    def __init__(self, amount: int):
        super().__init__(
            message=f"XP amount must be a positive integer. Received {amount}.",
            details={"amount": amount},
        )


class NoFreezeAvailableError(DevFlowException):
    http_status = status.HTTP_409_CONFLICT
    code = "NO_FREEZE_AVAILABLE"

    def __init__(self):
        super().__init__(message="No streak freezes available.")


class ConcurrentMutationConflictError(DevFlowException):
    http_status = status.HTTP_409_CONFLICT
    code = "CONCURRENT_MUTATION_CONFLICT"

    def __init__(self, user_id: int):
        super().__init__(
            message=f"User {user_id} was modified by another request. Retry the operation.",
            details={"user_id": user_id},
        )


class UserNotFoundError(DevFlowException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "USER_NOT_FOUND"

    def __init__(self, user_id: int):
        super().__init__(
            message=f"User {user_id} does not exist.",
            details={"user_id": user_id},
        )


class UserAlreadyExistsError(DevFlowException):
    http_status = status.HTTP_409_CONFLICT
    code = "USER_ALREADY_EXISTS"

    def __init__(self, github_login: str):
        super().__init__(
            message=f"A user with login '{github_login}' already exists.",
            details={"github_login": github_login},
        )


class SnapshotNotFoundError(DevFlowException):
    """Raised when a stored score or verdict is requested before evaluation."""
    http_status = status.HTTP_404_NOT_FOUND
    code = "NOT_COMPUTED"

    def __init__(self, kind: str, user_id: int, day: date):
        super().__init__(
            message=f"No {kind} computed for user {user_id} on {day}. Run an evaluation first.",
            details={"kind": kind, "user_id": user_id, "day": str(day)},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def devflow_exception_handler(request: Request, exc: DevFlowException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
