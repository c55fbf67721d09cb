"""FastAPI middleware components."""
import time
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from src.core.config import settings
from src.core.logging import clear_log_context, get_logger, log_context

logger = get_logger(__name__)


def is_quiet_path(path: str) -> bool:
    """Probe endpoints are too chatty to log."""
    return path in {
        f"{settings.api_prefix}/health",
        f"{settings.api_prefix}/ready",
        f"{settings.api_prefix}/live",
    }


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Request/response logging middleware."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        """Log request and response details."""
        request_id = request.headers.get("X-Request-ID") or uuid4().hex

        # Bind context for all logs in this request
        log_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000

            if not is_quiet_path(request.url.path):
                logger.info(
                    "Request completed",
                    status_code=response.status_code,
                    duration_ms=round(duration_ms, 2),
                )

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

            return response
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.exception(
                "Request failed",
                error=str(e),
                duration_ms=round(duration_ms, 2),
            )
            raise
        finally:
            clear_log_context()
