"""
Secret Endpoints - resolve identifier → value

GET /secret/{secret_name}
    200 {"secret": "<value>"}    string secret, returned unmodified
    200 {"secret": "<base64>"}   binary secret
    200 {"secret": null}         backend holds no payload for the name
    502 error envelope           backend rejected or failed the call

The identifier is opaque: no validation beyond URL decoding. The `path`
converter keeps hierarchical names such as "prod/db/password" intact.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_secret_service
from api.schemas.secret import SecretResponse
from services.secret_service import SecretService
from utils.logger import get_logger
from models.enums import LogCategory

log = get_logger().for_category(LogCategory.API)

router = APIRouter(tags=["Secrets"])


@router.get("/secret/{secret_name:path}", response_model=SecretResponse)
async def get_secret(
    secret_name: str,
    secrets: SecretService = Depends(get_secret_service),
) -> SecretResponse:
    """Look up one secret; no caching, one backend call per request."""
    result = await secrets.lookup(secret_name)
    return SecretResponse(secret=result.to_json_value())
