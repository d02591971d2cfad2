"""Common Pydantic schemas shared across the simulator API."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Body of the ``error`` key in every failure response."""

    code: str = Field(description="Error code for programmatic handling")
    message: str = Field(description="Human-readable, sanitized message")
    path: str
    method: str
    details: Optional[Any] = None


class ErrorResponse(BaseModel):
    """Error response model."""

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
