"""Exception handlers mapping service errors to JSON responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..exceptions import RouteFinderError

logger = logging.getLogger(__name__)


async def route_finder_error_handler(request: Request, exc: RouteFinderError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "%s: %s",
        exc.code,
        exc.message,
        extra={"path": request.url.path, "method": request.method, "status_code": exc.status_code},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method, "status_code": 500},
    )
    return JSONResponse(status_code=500, content={"detail": "internal_error", "code": "INTERNAL_ERROR"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RouteFinderError, route_finder_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
