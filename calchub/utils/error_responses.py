"""Builders for the structured error payloads returned by the API.

Every payload carries the request id and a timezone-aware timestamp so that
clients can correlate a failure with server logs.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from calchub.schemas.error import (
    ErrorResponse,
    ErrorType,
    ValidationErrorDetail,
    ValidationErrorResponse,
)
from calchub.utils.request_context import get_request_id

__all__ = [
    "build_error_response",
    "build_validation_error_response",
]


def _current_timestamp() -> datetime:
    return datetime.now(UTC)


def build_validation_error_response(
    *,
    errors: Sequence[ValidationErrorDetail],
    message: str,
    status_code: int,
    path: str,
    detail: str | None = None,
    request_id: str | None = None,
) -> ValidationErrorResponse:
    """Construct a ``ValidationErrorResponse`` listing every offending field."""

    error_list = list(errors)
    return ValidationErrorResponse(
        error_type=ErrorType.VALIDATION_ERROR,
        message=message,
        detail=detail or f"{len(error_list)} validation error(s)",
        status_code=status_code,
        timestamp=_current_timestamp(),
        request_id=request_id or get_request_id() or None,
        path=path,
        errors=error_list,
    )


def build_error_response(
    *,
    error_type: ErrorType,
    message: str,
    status_code: int,
    path: str,
    detail: str | None = None,
    request_id: str | None = None,
) -> ErrorResponse:
    return ErrorResponse(
        error_type=error_type,
        message=message,
        detail=detail,
        status_code=status_code,
        timestamp=_current_timestamp(),
        request_id=request_id or get_request_id() or None,
        path=path,
    )
