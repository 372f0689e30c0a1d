"""HTTP request logging with timing and metrics.

Every request is timed and recorded in the metrics registry that backs
``/actuator/metrics``. Requests to excluded paths (health and metrics probes
by default) are recorded but not logged.
"""

import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from autorest.api.constants import (
    HTTP_500_INTERNAL_SERVER_ERROR,
    MAX_USER_AGENT_LENGTH,
    REQUEST_ID_HEADER,
)
from autorest.core.config import Settings
from autorest.core.constants import MILLISECONDS_PER_SECOND
from autorest.core.metrics import get_metrics


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging and measuring HTTP requests.

    Args:
        app: The ASGI application.
        settings: Application settings; logging options come from ``log_config``.
    """

    def __init__(self, app: ASGIApp, *, settings: Settings) -> None:
        super().__init__(app)
        self.settings = settings
        self.log_config = settings.log_config
        self.excluded_paths = set(settings.log_config.excluded_paths)

    def _get_client_ip(self, request: Request) -> str:
        """Extract the client IP, trusting proxy headers only in production."""
        if self.settings.environment == "production":
            forwarded_for = request.headers.get("x-forwarded-for")
            if forwarded_for:
                return forwarded_for.split(",")[0].strip()

            real_ip = request.headers.get("x-real-ip")
            if real_ip:
                return real_ip.strip()

        if request.client:
            return request.client.host
        return "unknown"

    async def _measure(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> tuple[Response, float]:
        """Run the request and record it in the metrics registry.

        Raises:
            Exception: Re-raised after the failed request is recorded as a 500.
        """
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start_time) * MILLISECONDS_PER_SECOND
            get_metrics().record_request(HTTP_500_INTERNAL_SERVER_ERROR, duration_ms)
            raise

        duration_ms = (time.perf_counter() - start_time) * MILLISECONDS_PER_SECOND
        get_metrics().record_request(response.status_code, duration_ms)
        return response, duration_ms

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if request.url.path in self.excluded_paths:
            response, _ = await self._measure(request, call_next)
            return response

        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        user_agent = request.headers.get("user-agent", "")[:MAX_USER_AGENT_LENGTH]

        with logger.contextualize(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_host=self._get_client_ip(request),
            user_agent=user_agent or "unknown",
        ):
            logger.info(
                "Request started",
                query_params=(
                    dict(request.query_params) if request.query_params else None
                ),
            )

            try:
                response, duration_ms = await self._measure(request, call_next)
            except Exception as exc:
                logger.error(
                    "Request failed",
                    error_type=type(exc).__name__,
                    error_message=str(exc),
                )
                raise

            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
                response_size=int(response.headers.get("content-length", 0)),
            )
            response.headers[REQUEST_ID_HEADER] = request_id

            if duration_ms > self.log_config.slow_request_threshold_ms:
                logger.warning(
                    "Slow request detected",
                    duration_ms=round(duration_ms, 2),
                    threshold_ms=self.log_config.slow_request_threshold_ms,
                )

            return response
