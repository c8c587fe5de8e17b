"""JSON-line logging with request correlation ids.

Besides the usual level/logger/event keys each line can carry request
context (path, status, timing) and distance provenance (which strategy
answered, which one it fell back to, the bus involved), passed through
``extra=``.
"""

import json
import logging
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

CONTEXT_FIELDS = (
    "path",
    "method",
    "status_code",
    "duration_ms",
    "strategy",
    "fallback",
    "bus_id",
)

# Per-request chatter from libraries that call OSRM and Supabase.
NOISY_LOGGERS = ("httpx", "httpcore", "hpack")


class JsonLogFormatter(logging.Formatter):
    def __init__(self, service: str) -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "service": self.service,
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }

        request_id = request_id_ctx.get()
        if request_id:
            line["request_id"] = request_id

        line.update(
            (name, getattr(record, name))
            for name in CONTEXT_FIELDS
            if getattr(record, name, None) is not None
        )

        if record.exc_info:
            line["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=True, default=str)


def setup_logging(level: str = "INFO", service: str = "routefinder") -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(JsonLogFormatter(service))

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    root_logger.handlers = [handler]

    for name in ("uvicorn.access", "uvicorn.error"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = [handler]
        uvicorn_logger.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
