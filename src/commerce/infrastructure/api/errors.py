"""Maps exceptions to the ``{success: false, error: {...}}`` envelope."""

from __future__ import annotations

import logging
import traceback
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as SchemaValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from commerce.domain.exceptions import DomainException

logger = logging.getLogger(__name__)


def error_response(
    request: Request,
    exc: Exception,
    status_code: int | None = None,
    message: str | None = None,
) -> JSONResponse:
    status = status_code or getattr(exc, "status_code", 500)
    body = {
        "message": message if message is not None else str(exc),
        "statusCode": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": request.url.path,
        "method": request.method,
    }
    if _is_development(request):
        body["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return JSONResponse(status_code=status, content={"success": False, "error": body})


def _is_development(request: Request) -> bool:
    container = getattr(request.app.state, "container", None)
    return container is not None and container.settings.app.is_development


def install_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(DomainException)
    async def domain_error_handler(request: Request, exc: DomainException) -> JSONResponse:
        logger.warning(
            f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}"
        )
        return error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info(f"Invalid request data on {request.method} {request.url.path}: {exc.errors()}")
        return error_response(request, exc, 400, "Invalid request data")

    @app.exception_handler(SchemaValidationError)
    async def schema_validation_handler(
        request: Request, exc: SchemaValidationError
    ) -> JSONResponse:
        logger.info(f"Invalid request data on {request.method} {request.url.path}: {exc.errors()}")
        return error_response(request, exc, 400, "Invalid request data")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code in (404, 405):
            return error_response(
                request, exc, 404, f"Route {request.method} {request.url.path} not found"
            )
        return error_response(request, exc, exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            f"Unhandled error on {request.method} {request.url.path}", exc_info=exc
        )
        message = str(exc) if _is_development(request) else "Something went wrong"
        return error_response(request, exc, 500, message)
