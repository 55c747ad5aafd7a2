"""
Custom exception hierarchy for the Dream Journal API.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from starlette import status

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class DreamJournalException(Exception):
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


class NotFoundError(DreamJournalException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class DreamNotFoundError(NotFoundError):
    def __init__(self, dream_id: int):
        super().__init__(
            message=f"Dream {dream_id} not found.",
            details={"dream_id": dream_id},
        )


class CommentNotFoundError(NotFoundError):
    def __init__(self, comment_id: int):
        super().__init__(
            message=f"Comment {comment_id} not found.",
            details={"comment_id": comment_id},
        )


class ForbiddenError(DreamJournalException):
    http_status = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"

    def __init__(self, resource: str, resource_id: int):
        super().__init__(
            message=f"Not authorized to modify {resource} {resource_id}.",
            details={"resource": resource, "id": resource_id},
        )


class UnauthenticatedError(DreamJournalException):
    http_status = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"

    def __init__(self, message: str = "A resolved user is required for this operation."):
        super().__init__(message=message)


class InvalidInputError(DreamJournalException):
    """Service-level validation failure (the HTTP layer uses pydantic)."""
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "VALIDATION_ERROR"


class UpstreamFailureError(DreamJournalException):
    http_status = status.HTTP_502_BAD_GATEWAY
    code = "UPSTREAM_FAILURE"

    def __init__(self, message: str, service: str = "ai"):
        super().__init__(message=message, details={"service": service})


class UpstreamTimeoutError(DreamJournalException):
    http_status = status.HTTP_504_GATEWAY_TIMEOUT
    code = "UPSTREAM_TIMEOUT"

    def __init__(self, service: str = "ai", timeout: float | None = None):
        details: dict[str, Any] = {"service": service, "retryable": True}
        if timeout is not None:
            details["timeout_seconds"] = timeout
        super().__init__(
            message=f"Upstream service '{service}' did not answer in time.",
            details=details,
        )


class StoreUnavailableError(DreamJournalException):
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "STORE_UNAVAILABLE"

    def __init__(self):
        super().__init__(message="The database is unavailable. Nothing was changed; retry later.")


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def app_exception_handler(request: Request, exc: DreamJournalException) -> JSONResponse:
    if exc.http_status >= 500:
        logger.warning("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    # "body" is the same prefix on every body error; drop it
    return [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """422 in the usual envelope, one entry per offending field."""
    error = InvalidInputError(
        "Request validation failed.",
        details={"errors": _field_errors(exc)},
    )
    return await app_exception_handler(request, error)


async def store_unavailable_handler(request: Request, exc: OperationalError) -> JSONResponse:
    logger.error("Store unavailable on %s %s: %s", request.method, request.url.path, exc)
    return await app_exception_handler(request, StoreUnavailableError())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=DreamJournalException("An unexpected error occurred.").to_dict(),
    )
