"""
Secret schemas - Pydantic models for the lookup endpoint
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class SecretResponse(BaseModel):
    """Lookup result: string secrets verbatim, binary secrets base64-encoded, missing secrets null"""
    secret: Optional[str] = Field(
        None,
        description="Secret value, or null when the backend holds no payload"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"secret": "s3cr3t-value"}
        }
    )
