"""
Exception handlers - Render every failure as a ``{message}`` JSON body.

Domain errors carry their own HTTP status; request validation errors
become 400 with a per-field list; anything unexpected becomes a logged
500 without internal detail.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from localiz.domain.exceptions import LocalizError, MissingFields

logger = logging.getLogger(__name__)


def _param(loc: tuple) -> str:
    # drop the "body"/"query"/"path" prefix
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


def add_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the FastAPI app."""

    @app.exception_handler(LocalizError)
    async def localiz_exception_handler(request: Request, exc: LocalizError) -> JSONResponse:
        content: dict = {"message": exc.message}
        if isinstance(exc, MissingFields):
            content["missing"] = exc.missing
        if exc.status_code >= 500:
            logger.error("Request failed: %s %s - %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handles standard HTTP exceptions (404, 405, ...)."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handles Pydantic validation errors."""
        errors = [{"param": _param(tuple(e.get("loc", ()))), "msg": e.get("msg", "")} for e in exc.errors()]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Invalid request", "errors": errors},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions."""
        logger.error(
            "Unhandled exception: %s %s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Internal server error"},
        )
