"""
FastAPI Application Factory

Creates the lookup service app:
- /secret/{secret_name}  secret resolution (one backend call per request)
- /health                liveness check
- exception handlers that turn backend failures into JSON error responses

The app binds to loopback only (see LookupServerWrapper); there is no
authentication layer.
"""

from fastapi import FastAPI

from api.routes import secrets
from api.middleware.error_handler import register_exception_handlers
from utils.logger import get_logger
from models.enums import LogCategory

log = get_logger().for_category(LogCategory.API)


def create_app(
    title: str = "Secret Manager Extension",
    version: str = "1.0.0",
) -> FastAPI:
    """
    Create and configure the lookup service FastAPI application.

    The SecretService is injected separately through
    api.dependencies.set_secret_service().
    """
    # No interactive docs: this is a loopback sidecar, not a public API
    app = FastAPI(
        title=title,
        version=version,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    register_exception_handlers(app)

    app.include_router(secrets.router)

    @app.get("/health", include_in_schema=False)
    async def health_check():
        """Simple health check endpoint for monitoring"""
        return {
            "status": "healthy",
            "service": "secretmanager-extension",
            "version": version,
        }

    log.debug("Lookup service app created", routes="/secret/{secret_name}, /health")

    return app
