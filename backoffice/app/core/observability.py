"""
Observability Middleware.

Adds correlation IDs and timing headers to every response and writes one
log line per request.
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("backoffice.requests")


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        # Reuse the caller's correlation id when it sends one
        correlation_id = request.headers.get("X-Correlation-ID", str(uuid.uuid4()))
        start_time = time.time()

        response = await call_next(request)

        process_time = (time.time() - start_time) * 1000  # ms
        response.headers["X-Correlation-ID"] = correlation_id
        response.headers["X-Process-Time"] = str(process_time)

        log_data = {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(process_time, 2),
            "ip": request.client.host if request.client else "unknown",
        }
        message = "%(method)s %(path)s -> %(status_code)s in %(duration_ms)sms [%(correlation_id)s]"

        # Log level based on status
        if response.status_code >= 500:
            logger.error(message, log_data, extra=log_data)
        elif response.status_code >= 400:
            logger.warning(message, log_data, extra=log_data)
        else:
            logger.info(message, log_data, extra=log_data)

        return response
