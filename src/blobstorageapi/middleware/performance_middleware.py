"""
Request latency logging and the X-Process-Time header.
"""
import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger("blobstorageapi")

PROCESS_TIME_HEADER = "X-Process-Time"


def _route_group(path: str) -> str:
    """First path segment: blob, cosmosdb, health, or root."""
    segment = path.strip("/").split("/", 1)[0]
    return segment or "root"


class PerformanceMiddleware(BaseHTTPMiddleware):
    """
    Times every request and logs one structured record per response.

    Blob transfers are the slow path of this service, so the logged record
    carries the request and response sizes next to the latency. Health
    checks are logged at DEBUG to keep orchestrator polling out of the log.
    """

    def __init__(self, app: ASGIApp, slow_request_seconds: float = 1.0):
        super().__init__(app)
        self.slow_request_seconds = slow_request_seconds

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started
        elapsed_ms = round(elapsed * 1000, 2)

        response.headers[PROCESS_TIME_HEADER] = str(elapsed_ms)

        group = _route_group(request.url.path)
        request_id = getattr(request.state, "request_id", None)
        fields = {
            "method": request.method,
            "path": request.url.path,
            "route_group": group,
            "status": response.status_code,
            "latency_ms": elapsed_ms,
            "request_bytes": request.headers.get("content-length"),
            "response_bytes": response.headers.get("content-length"),
        }

        level = logging.DEBUG if group == "health" else logging.INFO
        logger.log(
            level,
            f"{request.method} {request.url.path} -> {response.status_code} in {elapsed_ms}ms",
            extra={"request_id": request_id, "extra_data": fields},
        )
        if elapsed > self.slow_request_seconds:
            logger.warning(
                f"Slow request: {request.method} {request.url.path} took {elapsed_ms}ms "
                f"(threshold {self.slow_request_seconds}s)",
                extra={"request_id": request_id, "extra_data": fields},
            )

        return response
