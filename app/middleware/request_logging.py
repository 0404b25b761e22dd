"""
Request logging middleware.
Tags each request with an ID, logs it, and reports processing time in the response headers.
"""

from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging
import time
import uuid

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for request tracing and timing.
    Adds X-Request-ID and X-Processing-Time headers; warns on slow requests.
    """

    def __init__(
        self,
        app: ASGIApp,
        slow_request_threshold: float = 1.0,  # seconds
        enable_request_logging: bool = True
    ):
        super().__init__(app)
        self.slow_request_threshold = slow_request_threshold
        self.enable_request_logging = enable_request_logging

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        request.state.request_id = request_id

        if self.enable_request_logging:
            logger.info(f"Request [{request_id}]: {request.method} {request.url.path}")

        start_time = time.perf_counter()
        response = await call_next(request)
        processing_time = time.perf_counter() - start_time

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time"] = f"{processing_time:.3f}"

        if processing_time > self.slow_request_threshold:
            logger.warning(
                f"Slow request [{request_id}]: {request.method} {request.url.path} "
                f"took {processing_time:.3f}s",
                extra={"request_id": request_id, "processing_time": processing_time}
            )
        elif self.enable_request_logging:
            logger.info(
                f"Response [{request_id}]: {response.status_code} in {processing_time:.3f}s"
            )

        return response
