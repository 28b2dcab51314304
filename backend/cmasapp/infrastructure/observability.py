"""Structured Logging — JSON log lines and an access log for the users API.

Invariants:
    - Every line carries timestamp (of the record, not of formatting), service, level,
      logger and message
    - User-operation fields (user_id, operation, error_code) and request fields
      (method, path, status, duration_ms) are grouped under "context" when present
    - One access line per HTTP request, written to the "cmasapp.access" logger
    - setup_logging() is idempotent: re-running it replaces the handler it installed

Design Decisions:
    - JSONFormatter on stdlib logging: no extra dependency, full control over the shape
    - Access logging as an http middleware so it sees the final status after the
      error handlers have mapped failures
"""

import json
import logging
import time
from datetime import datetime, timezone

from fastapi import Request

CONTEXT_FIELDS = (
    "user_id", "operation", "error_code",
    "method", "path", "status", "duration_ms",
)
_HANDLER_NAME = "cmasapp"

access_logger = logging.getLogger("cmasapp.access")


class JSONFormatter(logging.Formatter):
    """One JSON object per line, tagged with the service name."""

    def __init__(self, service: str = "cmasapp"):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "service": self.service,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = {
            key: getattr(record, key)
            for key in CONTEXT_FIELDS
            if getattr(record, key, None) is not None
        }
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json", service: str = "cmasapp"):
    """Install the service's stream handler on the root logger."""
    root = logging.getLogger()
    for handler in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter(service))
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


async def log_requests(request: Request, call_next):
    """Access log: method, path, final status and latency of every request."""
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = round((time.perf_counter() - started) * 1000, 2)
    access_logger.info(
        f"{request.method} {request.url.path} {response.status_code}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response
