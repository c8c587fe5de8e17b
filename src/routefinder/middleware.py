"""Request correlation and access logging."""

import logging
import re
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from .config import settings
from .logging_config import request_id_ctx

logger = logging.getLogger(__name__)

# Client-supplied ids end up in every log line of the request.
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def resolve_request_id(incoming: str | None) -> str:
    if incoming and _REQUEST_ID_PATTERN.match(incoming):
        return incoming
    return uuid.uuid4().hex[:12]


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with a correlation id and log one access line for it.

    Health checks are polled by the platform, so they are logged at debug
    level; server errors are logged as warnings.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        header_name = settings.request_id_header
        request_id = resolve_request_id(request.headers.get(header_name))
        token = request_id_ctx.set(request_id)
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response = await call_next(request)
            path = request.url.path
            if response.status_code >= 500:
                level = logging.WARNING
            elif path.startswith(f"{settings.api_prefix}/health"):
                level = logging.DEBUG
            else:
                level = logging.INFO
            logger.log(
                level,
                "%s %s -> %d",
                request.method,
                path,
                response.status_code,
                extra={
                    "path": path,
                    "method": request.method,
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 1),
                },
            )
        finally:
            request_id_ctx.reset(token)

        response.headers[header_name] = request_id
        return response
