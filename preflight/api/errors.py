"""
Global exception handlers.

Every error leaves the service as ``{"error": "<message>"}``.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.exceptions import AppError

logger = structlog.get_logger()

RATE_LIMIT_RETRY_SECONDS = 60


def validation_message(exc: RequestValidationError) -> str:
    """First violated constraint of a request, as a client-facing sentence."""
    errors = exc.errors()
    if not errors:
        return "Invalid request."

    first = errors[0]
    field = str(first.get("loc", ("",))[-1])

    if first.get("type") == "missing":
        return f"{field} is required."

    message = str(first.get("msg", "Invalid request."))
    return message.removeprefix("Value error, ")


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """
    Handle all custom AppError exceptions with proper HTTP status codes.

    Server-side failures are logged as errors, client mistakes as warnings.
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Application error occurred",
        path=request.url.path,
        method=request.method,
        **exc.to_dict(),
    )

    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    message = validation_message(exc)
    logger.info("Request rejected", path=request.url.path, error=message)
    return JSONResponse(status_code=400, content={"error": message})


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Global rate limit exceeded", path=request.url.path)
    return JSONResponse(
        status_code=429,
        content={"error": f"Rate limit exceeded: {exc.detail}"},
        headers={"Retry-After": str(RATE_LIMIT_RETRY_SECONDS)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers that render errors as ``{"error": ...}``."""
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)  # type: ignore[arg-type]
