"""Request context middleware: request-id, timing and request logging in one pass.

- Generate or propagate ``X-Request-ID`` header
- Measure request duration
- Log every request/response as a structured record
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ..core.logging_config import request_id_var

logger = logging.getLogger(__name__)

# Probes are not worth a log line each.
_QUIET_PATHS = frozenset({"/", "/health"})


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Single middleware handling request-id, timing, and logging."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # --- Request ID ---
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        token = request_id_var.set(rid)

        try:
            # --- Timing ---
            start = time.monotonic()
            response = await call_next(request)
            duration_ms = round((time.monotonic() - start) * 1000, 1)

            # --- Response headers ---
            response.headers["X-Request-ID"] = rid
            response.headers["X-Response-Time"] = f"{duration_ms}ms"

            # --- Structured request log ---
            if request.url.path not in _QUIET_PATHS:
                logger.info(
                    f"{request.method} {request.url.path} {response.status_code}",
                    extra={
                        "method": request.method,
                        "path": request.url.path,
                        "status_code": response.status_code,
                        "duration_ms": duration_ms,
                    },
                )
            return response
        finally:
            request_id_var.reset(token)
