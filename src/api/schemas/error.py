"""
Error schemas - Pydantic models for error responses
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ErrorDetail(BaseModel):
    """Detailed error information"""
    code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(
        None,
        description="Additional context (secret name, backend error code, ...)"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the error occurred"
    )


class ErrorResponse(BaseModel):
    """API error response - standardized format

    All lookup service errors use this structure so the consumer can
    distinguish a backend failure from a missing secret ({"secret": null}).
    """
    error: ErrorDetail = Field(description="Error information")
    request_id: Optional[str] = Field(None, description="Request ID for logging/debugging")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": {
                    "code": "SECRET_BACKEND_ERROR",
                    "message": "Secret lookup failed for 'db/password'",
                    "details": {
                        "secret_name": "db/password",
                        "backend_code": "AccessDeniedException"
                    },
                    "timestamp": "2025-11-26T10:30:00Z"
                },
                "request_id": "3f1c2a..."
            }
        }
    )
