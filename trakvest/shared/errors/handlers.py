"""
Centralized error handlers for FastAPI.

Maps domain error categories to HTTP responses.
No stack traces or internal details are exposed to clients.
All error responses use the ErrorResponse schema:
    {"error": <short label>, "detail": <human message>, "code": <MACHINE_CODE>}
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from trakvest.domain.portfolio.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    PortfolioDomainError,
    ProviderRateLimitedError,
    ProviderUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_401 = 401
HTTP_403 = 403
HTTP_404 = 404
HTTP_409 = 409
HTTP_429 = 429
HTTP_500 = 500
HTTP_503 = 503


def _error_response(
    status_code: int, error: str, detail: str | None = None, code: str | None = None
) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, str | None] = {"error": error}
    if detail:
        body["detail"] = detail
    if code:
        body["code"] = code
    return JSONResponse(status_code=status_code, content=body)


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Starlette resolves handlers along the exception's MRO, so each
    category handler covers every concrete error beneath it.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle malformed request bodies and parameters."""
        detail = _format_validation_errors(exc)
        logger.warning("Request validation failed: %s", detail)
        return _error_response(HTTP_400, "Validation error", detail, "VALIDATION_ERROR")

    @app.exception_handler(ValidationError)
    async def handle_validation(_request: Request, exc: ValidationError) -> JSONResponse:
        """Handle rejected business input (amounts, quantities, symbols, funds)."""
        logger.warning("Validation error (%s): %s", exc.code, exc.message)
        return _error_response(HTTP_400, "Validation error", exc.message, exc.code)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication(
        _request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        """Handle failed logins and invalid tokens."""
        logger.info("Authentication failed (%s)", exc.code)
        response = _error_response(HTTP_401, "Unauthorized", exc.message, exc.code)
        response.headers["WWW-Authenticate"] = "Bearer"
        return response

    @app.exception_handler(PermissionDeniedError)
    async def handle_permission_denied(
        _request: Request, exc: PermissionDeniedError
    ) -> JSONResponse:
        """Handle admin-only and owner-only violations."""
        logger.warning("Permission denied (%s): %s", exc.code, exc.message)
        return _error_response(HTTP_403, "Forbidden", exc.message, exc.code)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(_request: Request, exc: NotFoundError) -> JSONResponse:
        """Handle missing users, holdings, goals, instruments and quotes."""
        logger.warning("Not found (%s): %s", exc.code, exc.message)
        return _error_response(HTTP_404, "Not found", exc.message, exc.code)

    @app.exception_handler(ConflictError)
    async def handle_conflict(_request: Request, exc: ConflictError) -> JSONResponse:
        """Handle unique-key conflicts such as a registered email."""
        logger.warning("Conflict (%s): %s", exc.code, exc.message)
        return _error_response(HTTP_409, "Conflict", exc.message, exc.code)

    @app.exception_handler(ProviderRateLimitedError)
    async def handle_provider_rate_limited(
        _request: Request, exc: ProviderRateLimitedError
    ) -> JSONResponse:
        """Handle exhausted upstream market-data quota."""
        logger.warning("Market data rate limited: %s", exc.provider)
        return _error_response(HTTP_429, "Rate limit exceeded", exc.message, exc.code)

    @app.exception_handler(ProviderUnavailableError)
    async def handle_provider_unavailable(
        _request: Request, exc: ProviderUnavailableError
    ) -> JSONResponse:
        """Handle unconfigured or failing market-data providers."""
        logger.error("Market data unavailable (%s): %s", exc.provider, exc.reason)
        return _error_response(HTTP_503, "Service unavailable", exc.message, exc.code)

    @app.exception_handler(PortfolioDomainError)
    async def handle_portfolio_domain(
        _request: Request, exc: PortfolioDomainError
    ) -> JSONResponse:
        """Catch-all for unhandled portfolio domain errors."""
        logger.error("Unhandled portfolio domain error: %s", exc.message)
        return _error_response(HTTP_500, "Internal server error")

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, "Internal server error")
