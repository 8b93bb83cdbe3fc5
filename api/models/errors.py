"""
Error Response Models

Standardized error bodies returned by the API exception handlers.
"""

from datetime import datetime, timezone
from typing import Dict, Optional, Any, List

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ErrorResponse(BaseModel):
    """
    Standardized error response model for API errors.
    """
    status: str = Field(
        default="error",
        description="Error status indicator"
    )
    message: str = Field(
        ...,
        description="Human-readable error message"
    )
    error_code: str = Field(
        ...,
        description="Machine-readable error code, e.g. HTTP_429 or VALIDATION_ERROR"
    )
    details: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Additional error details"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="Error timestamp"
    )


class ValidationErrorItem(BaseModel):
    """A single field-level validation failure."""
    loc: List[str] = Field(
        ...,
        description="Error location (field path)"
    )
    msg: str
    type: str


class ValidationErrorResponse(ErrorResponse):
    """Error response carrying field-specific validation failures."""
    validation_errors: List[ValidationErrorItem] = Field(
        ...,
        description="List of specific validation errors"
    )
