"""Structured request logging: request_id, route, status, latency. Optional LFS identity from state."""
import json
import logging
import time
import uuid
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from lfs_batch.core.config import get_settings
from lfs_batch.core.logging_redaction import redact_for_log
from lfs_batch.core.metrics import record_request

logger = logging.getLogger("lfs_batch.request")


def _safe_extra(request: Request, status_code: int, latency_ms: float) -> dict[str, Any]:
    extra: dict[str, Any] = {
        "request_id": getattr(request.state, "request_id", None),
        "method": request.method,
        "path": request.url.path,
        "status_code": status_code,
        "latency_ms": round(latency_ms, 2),
    }
    if getattr(request.state, "lfs_identity", None) is not None:
        extra["lfs_identity"] = request.state.lfs_identity
    if getattr(request.state, "lfs_operation", None) is not None:
        extra["lfs_operation"] = request.state.lfs_operation
        extra["object_count"] = getattr(request.state, "object_count", 0)
    return redact_for_log(extra)


def configure_logging() -> None:
    """Attach a plain-message handler to the request logger when LOG_JSON is set."""
    settings = get_settings()
    logging.getLogger("lfs_batch").setLevel(settings.log_level.upper())
    if not settings.log_json:
        return
    request_logger = logging.getLogger("lfs_batch.request")
    for h in request_logger.handlers[:]:
        request_logger.removeHandler(h)
    h = logging.StreamHandler()
    h.setFormatter(logging.Formatter("%(message)s"))
    request_logger.addHandler(h)
    request_logger.setLevel(logging.INFO)
    request_logger.propagate = False


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Assign request_id and log one structured line per request (route, status, latency)."""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = (time.perf_counter() - start) * 1000
        extra = _safe_extra(request, response.status_code, latency_ms)
        # Single JSON line when log_json; else standard log with extra
        if get_settings().log_json:
            logger.info(json.dumps({"event": "request", **extra}))
        else:
            logger.info("request %s %s %s %.2fms", request.method, request.url.path, response.status_code, latency_ms, extra=extra)
        response.headers["X-Request-ID"] = request_id
        if request.url.path not in ("/metrics", "/healthz"):
            record_request(request.method, request.url.path, response.status_code, latency_ms / 1000.0)
        return response
