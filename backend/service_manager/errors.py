"""JSON error responses.

Every error body has the shape ``{"error": str, "details"?: any}``.
"""
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings

logger = logging.getLogger(__name__)


def error_body(message: str, details: Optional[Any] = None) -> dict:
    body = {"error": message}
    if details is not None:
        body["details"] = details
    return body


def persistence_error(message: str, exc: Exception) -> StarletteHTTPException:
    """Build the 500 raised when a database operation fails.

    The underlying error text reaches the client only outside production.
    """
    details = str(exc) if settings.expose_error_details else None
    return StarletteHTTPException(status_code=500, detail=error_body(message, details))


def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON handlers on the application."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):
        if isinstance(exc.detail, dict) and "error" in exc.detail:
            content = exc.detail
        elif exc.status_code == 404 and exc.detail == "Not Found":
            # Raised by routing when no path matched
            content = {"error": "Route not found", "path": request.url.path}
        else:
            content = error_body(str(exc.detail))

        level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        logger.log(level, f"{request.method} {request.url.path} -> {exc.status_code}: {content['error']}")

        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):
        errors = jsonable_encoder(exc.errors())
        logger.warning(f"Validation failed for {request.method} {request.url.path}: {errors}")
        return JSONResponse(
            status_code=400,
            content=error_body("Validation failed", errors),
        )

    @app.exception_handler(Exception)
    async def unhandled_exc_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        message = str(exc) if settings.expose_error_details else "Internal server error"
        return JSONResponse(
            status_code=500,
            content={"error": "Something went wrong!", "message": message},
        )
