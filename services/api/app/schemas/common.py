"""Common schemas used across the API."""

from typing import Any

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Structured error detail.

    `code` is a stable classification (e.g. "stock_conflict", "stock_locked");
    `message` is safe to show to the seller as-is.
    """

    code: str
    message: str
    detail: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Standard error response format.

    Format: { "error": { "code": str, "message": str, "detail": object } }
    """

    error: ErrorDetail


def error_body(code: str, message: str, detail: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build a JSON-ready ErrorResponse payload."""
    return ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail)).model_dump()
