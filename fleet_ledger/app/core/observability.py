"""
Observability Middleware.

Adds correlation IDs, timing and the ledger refresh generation to every
response, and logs one structured line per request.
"""

import time
import uuid
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from fleet_ledger.app.services.refresh import refresh_notifier

# Application logger; module loggers under fleet_ledger.* propagate here
logger = logging.getLogger("fleet_ledger")


def configure_logging(level: str = "INFO"):
    """Apply the configured level and a single stream handler to the app logger."""
    logger.setLevel(level.upper())
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        ))
        logger.addHandler(handler)


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get("X-Correlation-ID", str(uuid.uuid4()))
        generation_before = refresh_notifier.generation
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = (time.perf_counter() - start_time) * 1000  # ms
        generation = refresh_notifier.generation

        # Clients compare the generation to decide whether cached views are stale
        response.headers["X-Correlation-ID"] = correlation_id
        response.headers["X-Process-Time"] = f"{process_time:.2f}"
        response.headers["X-Refresh-Generation"] = str(generation)

        log_data = {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(process_time, 2),
            "ledger_writes": generation - generation_before,
        }

        if response.status_code >= 500:
            logger.error("Request Failed", extra=log_data)
        elif response.status_code >= 400:
            logger.warning("Request Error", extra=log_data)
        else:
            logger.info("Request API", extra=log_data)

        return response
