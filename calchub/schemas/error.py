"""Error response schemas for consistent error handling."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorType(str, Enum):
    """Types of errors the API reports."""

    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    INTERNAL_ERROR = "internal_error"


class ErrorResponse(BaseModel):
    """Standardized error response model."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error_type": "not_found",
                "message": "Calculator not found",
                "detail": "No calculator is registered under 'mortgage-calc'",
                "status_code": 404,
                "timestamp": "2025-11-03T10:30:00Z",
                "request_id": "req_abc123xyz",
                "path": "/calculators/mortgage-calc",
            }
        }
    )

    error_type: ErrorType = Field(..., description="Category of error")
    message: str = Field(..., description="Human-readable error message")
    detail: str | None = Field(None, description="Additional error details or context")
    status_code: int = Field(..., description="HTTP status code")
    timestamp: datetime = Field(..., description="When the error occurred")
    request_id: str | None = Field(None, description="Unique request identifier for tracking")
    path: str | None = Field(None, description="Request path that caused the error")


class ValidationErrorDetail(BaseModel):
    """One offending field and the reason it was rejected."""

    field: str = Field(..., description="Field that failed validation")
    message: str = Field(..., description="Validation error message")
    value: Any = Field(None, description="Value that failed validation")


class ValidationErrorResponse(ErrorResponse):
    """Error response listing every field-level validation failure."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error_type": "validation_error",
                "message": "Calculator input validation failed",
                "detail": "1 validation error(s)",
                "status_code": 422,
                "timestamp": "2025-11-03T10:30:00Z",
                "request_id": "req_abc123xyz",
                "path": "/calculators/combinations-permutations-calculator/compute",
                "errors": [
                    {"field": "r", "message": "n must be greater than or equal to r", "value": 12},
                ],
            }
        }
    )

    error_type: ErrorType = Field(default=ErrorType.VALIDATION_ERROR)
    errors: list[ValidationErrorDetail] = Field(
        default_factory=list, description="List of validation errors"
    )
