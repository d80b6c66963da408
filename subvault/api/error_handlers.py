"""Error Handlers: global exception handlers for the SubVault API.

Invariants:
    - SubVaultError → structured JSON with error code, message, severity
    - RequestValidationError → 400 with field-level error details
    - RateLimitExceeded (slowapi) and RateLimitedError → the same 429 RATE_LIMITED envelope
    - Exception (catch-all) → 500, never leaks internal details
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from subvault.core.errors import ErrorSeverity, RateLimitedError, SubVaultError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_subvault_error_handler(app)
    _register_validation_error_handler(app)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    _register_generic_error_handler(app)


def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded,
) -> JSONResponse:
    """Breach of a slowapi-decorated limit (/unlock)."""
    error = RateLimitedError(str(exc.detail))
    logger.warning(
        f"Rate limit exceeded on {request.url.path}",
        extra={
            "error_code": error.code,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else None,
        },
    )
    return JSONResponse(
        status_code=error.http_status, content=error.to_response(),
    )


def _register_subvault_error_handler(app: FastAPI) -> None:

    @app.exception_handler(SubVaultError)
    async def subvault_error_handler(request: Request, exc: SubVaultError):
        """Handle all SubVault domain/infrastructure errors."""
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            f"SubVaultError: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "vault_id": exc.context.vault_id,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning(
            f"Validation error on {request.url.path}: {len(exc.errors())} error(s)",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all: never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Field paths only: rejected input values are not echoed back (may be secrets)."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
