"""
StudyNotes Backend: Request ID Middleware
===========================================

What:  Assigns a short correlation ID to each request and echoes it in X-Request-ID.
How:   Reuses the client's X-Request-ID when present, otherwise generates one;
       stores it in a ContextVar so loggers and exception handlers can read it.

Error bodies carry the same ID as `request_id`, so a user can quote it when a
summary fails and the matching server log lines can be found directly.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    """First 8 hex characters of a UUID4; enough to correlate log lines."""
    return str(uuid.uuid4())[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Stores the ID in request_id_var and request.state.request_id."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or new_request_id()

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
