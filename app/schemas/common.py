"""
Shared schema primitives used across the API.
"""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict


class ErrorResponse(BaseModel):
    """Standard error envelope returned for all 4xx/5xx responses."""
    model_config = ConfigDict(from_attributes=True)

    code: str
    message: str
    details: Optional[dict[str, Any]] = None


# Documented on every route; route-specific codes are added per endpoint.
COMMON_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    401: {"model": ErrorResponse, "description": "No resolved user for a per-user call."},
    422: {"model": ErrorResponse, "description": "Request validation failed."},
    503: {"model": ErrorResponse, "description": "Database unavailable; nothing was changed."},
}


class AuthorOut(BaseModel):
    """Public display info of a dream or comment author."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: Optional[str] = None


class SuccessResponse(BaseModel):
    success: bool = True


def strip_non_empty(v, field_name: str):
    """Shared validator body: strip strings and reject blank ones."""
    if v is None:
        raise ValueError(f"{field_name} must not be null")
    stripped = v.strip() if isinstance(v, str) else v
    if isinstance(stripped, str) and not stripped:
        raise ValueError(f"{field_name} must not be empty after stripping whitespace")
    return stripped
