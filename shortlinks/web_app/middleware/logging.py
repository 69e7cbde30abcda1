"""Request logging middleware."""

import logging
import time
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with its owner, status and duration.

    Redirects and reads log at DEBUG so a busy link does not flood the log;
    mutations log at INFO and server errors at WARNING.
    """

    def __init__(self, app, logger: Optional[logging.Logger] = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger("shortlinks.web")

    async def dispatch(self, request: Request, call_next: Callable):
        started = time.perf_counter()
        owner = request.headers.get("x-owner-id") or "-"
        client_ip = request.client.host if request.client else "unknown"

        response = await call_next(request)

        duration_ms = (time.perf_counter() - started) * 1000
        if response.status_code >= 500:
            level = logging.WARNING
        elif request.method in ("GET", "HEAD"):
            level = logging.DEBUG
        else:
            level = logging.INFO

        self.logger.log(
            level,
            f"{request.method} {request.url.path} owner={owner} client={client_ip} "
            f"-> {response.status_code} ({duration_ms:.2f}ms)",
        )
        return response
