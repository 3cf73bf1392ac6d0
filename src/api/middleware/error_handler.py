"""
Error handling for the lookup service

Exception handlers convert errors raised inside a request into JSON error
responses. They only ever affect the failing request; the process and the
lifecycle event loop keep running.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import uuid
from typing import Optional

from api.schemas.error import ErrorResponse, ErrorDetail
from services.secret_service import SecretBackendError
from utils.logger import get_logger
from models.enums import LogCategory

log = get_logger().for_category(LogCategory.API)


class DomainError(Exception):
    """Base class for domain-specific errors"""
    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
        status_code: int = 400
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.status_code = status_code
        super().__init__(message)


class SecretLookupFailedError(DomainError):
    """Backend rejected or failed the lookup"""
    def __init__(self, secret_name: str, backend_code: Optional[str] = None):
        super().__init__(
            code="SECRET_BACKEND_ERROR",
            message=f"Secret lookup failed for '{secret_name}'",
            details={"secret_name": secret_name, "backend_code": backend_code},
            status_code=status.HTTP_502_BAD_GATEWAY
        )


def _error_response(status_code: int, detail: ErrorDetail, request_id: str) -> JSONResponse:
    response = ErrorResponse(error=detail, request_id=request_id)
    return JSONResponse(
        status_code=status_code,
        content=response.model_dump(mode="json")
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with FastAPI app"""

    @app.exception_handler(DomainError)
    async def domain_exception_handler(request: Request, exc: DomainError):
        request_id = str(uuid.uuid4())

        log.warn(
            f"Domain error ({request_id}): {exc.code} - {exc.message}",
            path=request.url.path
        )

        return _error_response(
            exc.status_code,
            ErrorDetail(code=exc.code, message=exc.message, details=exc.details),
            request_id
        )

    @app.exception_handler(SecretBackendError)
    async def secret_backend_exception_handler(request: Request, exc: SecretBackendError):
        return await domain_exception_handler(
            request, SecretLookupFailedError(exc.secret_name, exc.code)
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        request_id = str(uuid.uuid4())

        log.error(
            f"Unexpected error ({request_id}): {type(exc).__name__}: {exc}",
            path=request.url.path
        )

        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorDetail(
                code="INTERNAL_SERVER_ERROR",
                message="An unexpected error occurred.",
                details={"request_id": request_id}
            ),
            request_id
        )
