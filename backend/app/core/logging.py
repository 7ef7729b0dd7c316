"""Structured logging and request tracing for the SolarMatch API.

Every record carries the current request id through ``RequestIdFilter``.
Engine and API modules attach ``request_type``, ``category`` and
``error_count`` extras to recommendation and search records; the JSON
formatter copies them into the entry.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from contextvars import ContextVar
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

access_logger = logging.getLogger("solarmatch.access")

# Record attributes copied into JSON entries when set
_EXTRA_FIELDS = (
    "method", "path", "endpoint", "status_code", "duration_ms", "client_ip",
    "request_type", "category", "error_count",
)

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(request_id)s %(message)s"


class RequestIdFilter(logging.Filter):
    """Stamp the active request id (or "-") onto records that lack one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = request_id_var.get("") or "-"
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        rid = getattr(record, "request_id", "-")
        if rid != "-":
            entry["request_id"] = rid
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        for key in _EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = val
        return json.dumps(entry)


def _endpoint(path: str) -> str:
    """Short endpoint name for ``/api/v1/equipment/<name>`` paths."""
    parts = [p for p in path.split("/") if p]
    if parts[:3] == ["api", "v1", "equipment"]:
        return parts[3] if len(parts) > 3 else "catalog"
    return parts[0] if parts else "root"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Assign an X-Request-ID and log one access line per request.

    Server errors are logged at WARNING so they surface without the
    access log's INFO noise.
    """

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:8]
        token = request_id_var.set(rid)
        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 1)
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        path = request.url.path
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        access_logger.log(
            level,
            "%s %s -> %s (%.1fms)",
            request.method, path, response.status_code, duration_ms,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "endpoint": _endpoint(path),
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "client_ip": request.client.host if request.client else "unknown",
            },
        )
        return response


def setup_logging(json_format: bool = False, debug: bool = False) -> None:
    """Configure the root logger; ``json_format=True`` in production.

    With ``debug=True`` the engine loggers also emit candidate counts.
    """
    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    root.handlers.clear()
    root.addHandler(handler)

    logging.getLogger("engine").setLevel(logging.DEBUG if debug else logging.INFO)
    # uvicorn's own access log duplicates ours
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
