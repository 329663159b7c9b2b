"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorBody(BaseModel):
    """Machine-readable code plus a human-readable message."""

    code: str = Field(..., description="Stable error code, e.g. VALIDATION_ERROR")
    message: str = Field(..., description="Description of the failure")


class ErrorResponse(BaseModel):
    """Envelope used by every error response."""

    error: ErrorBody
