"""
API Dependencies - SecretService access for FastAPI endpoints

Pattern:
1. main_asyncio.py creates the SecretService during startup
2. main_asyncio.py calls set_secret_service()
3. Endpoints use get_secret_service() via Depends()

Example:
    @router.get("/secret/{secret_name}")
    async def get_secret(secret_name: str, secrets: SecretService = Depends(get_secret_service)):
        return await secrets.lookup(secret_name)
"""

from typing import Optional
from fastapi import HTTPException, status
from services.secret_service import SecretService


# Set by main_asyncio.py during initialization
_secret_service: Optional[SecretService] = None


def set_secret_service(service: Optional[SecretService]) -> None:
    """Store (or clear, with None) the SecretService used by the lookup endpoints."""
    global _secret_service
    _secret_service = service


async def get_secret_service() -> SecretService:
    """
    FastAPI dependency for accessing the SecretService.

    Raises:
        HTTPException: 503 Service Unavailable if no service is registered
    """
    if _secret_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Secret service not initialized. Extension may still be starting."
        )
    return _secret_service
