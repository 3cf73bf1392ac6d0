"""
Secret Manager Extension - Lookup Service API

Local-only HTTP surface queried by the function runtime during invocation.

Structure:
- routes/     : Endpoint handlers
- schemas/    : Pydantic response schemas
- middleware/ : Error handling
"""

from api.main import create_app

__all__ = ["create_app"]
