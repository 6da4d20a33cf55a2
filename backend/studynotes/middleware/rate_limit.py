"""
StudyNotes Backend: Rate Limiting Middleware
==============================================

What:  Per-IP sliding window limit on summarization requests.
How:   Keeps request timestamps per client IP in memory; requests beyond
       settings.rate_limit_requests within settings.rate_limit_window seconds
       get 429 with a Retry-After header.

Only POST requests under /api/summarize count. Every one of them is a paid
LLM call; listing, reading and searching notes are not limited.

Single-process only: each uvicorn worker keeps its own counters.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from studynotes.config import settings
from studynotes.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

LIMITED_PATH_PREFIX = "/api/summarize"


def is_limited(request: Request) -> bool:
    return request.method == "POST" and request.url.path.startswith(LIMITED_PATH_PREFIX)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter for summarization endpoints.

    Exceptions raised in middleware bypass FastAPI's exception handlers,
    so the 429 body is rendered here in the same shape the handlers use.
    """

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[str, List[float]] = defaultdict(list)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not is_limited(request):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"

        try:
            self.check(client_ip, time.time())
        except RateLimitExceededError as exc:
            logger.warning(
                "Rate limit exceeded for IP %s: %d summarize requests in %ds window",
                client_ip,
                len(self._requests[client_ip]),
                settings.rate_limit_window,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                },
                headers={"Retry-After": str(exc.retry_after)},
            )

        return await call_next(request)

    def check(self, client_ip: str, now: float) -> None:
        """
        Record a request at `now`, or raise if the window is full.

        Raises:
            RateLimitExceededError: with retry_after = seconds until the
                oldest request in the window expires.
        """
        window_start = now - settings.rate_limit_window
        timestamps = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = timestamps

        if len(timestamps) >= settings.rate_limit_requests:
            retry_after = int(timestamps[0] + settings.rate_limit_window - now) + 1
            raise RateLimitExceededError(retry_after=retry_after)

        timestamps.append(now)

        if len(self._requests) > 1000:
            self._cleanup_inactive_ips(window_start)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Drop IPs with no request inside the current window."""
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
