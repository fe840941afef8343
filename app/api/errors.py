"""Translate service errors into JSON responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.services.errors import ServiceError

logger = logging.getLogger(__name__)


def error_response(exc: ServiceError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.error_code},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handler that maps every ServiceError to its status and code."""

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
        log_fn = logger.error if exc.status_code >= 500 else logger.info
        log_fn(
            "%s %s -> %s %s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.error_code,
        )
        return error_response(exc)
