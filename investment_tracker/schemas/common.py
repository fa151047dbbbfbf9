"""
Shared Pydantic schemas: the error envelopes and the healthcheck payload.

Declaring the error models lets the OpenAPI document describe failure
responses as well as the happy path.
"""

from datetime import datetime
from typing import List, Literal

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error envelope returned by every non-validation error handler."""

    error: bool = Field(default=True, description="Always ``true`` for errors")
    message: str = Field(
        ..., description="Human-readable error description", examples=["A database error occurred."]
    )


class ValidationErrorDetail(BaseModel):
    """Single field-level validation failure."""

    field: str = Field(
        ...,
        description="Path to the invalid input field",
        examples=["shares"],
    )
    message: str = Field(
        ...,
        description="Explanation of the validation failure",
        examples=["Value error, Number of shares must be a positive integer"],
    )


class ValidationErrorResponse(BaseModel):
    """Response body for 422 Unprocessable Entity."""

    error: bool = Field(default=True, description="Always ``true`` for errors")
    message: str = Field(default="Validation failed", description="Summary message")
    details: List[ValidationErrorDetail] = Field(..., description="Per-field validation failures")


class HealthResponse(BaseModel):
    """Liveness payload of the ``healthcheck`` procedure."""

    status: Literal["ok"] = "ok"
    timestamp: datetime
