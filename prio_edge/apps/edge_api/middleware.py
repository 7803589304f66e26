"""Request context for the edge API: request ids and access logging."""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from prio_edge.core.logging import reset_request_id, set_request_id

request_logger = logging.getLogger("prio.edge.requests")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log its outcome.

    An incoming ``X-Request-ID`` is reused so ids can be correlated with the
    caller's logs; it is echoed on the response either way.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        token = set_request_id(request_id)
        start = time.perf_counter()
        try:
            try:
                response = await call_next(request)
            except Exception:
                request_logger.exception(
                    "HTTP %s %s failed after %.1f ms",
                    request.method,
                    request.url.path,
                    (time.perf_counter() - start) * 1000,
                )
                raise
            response.headers[REQUEST_ID_HEADER] = request_id
            request_logger.info(
                "HTTP %s %s -> %s (%.1f ms)",
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - start) * 1000,
            )
            return response
        finally:
            reset_request_id(token)


__all__ = ["REQUEST_ID_HEADER", "RequestContextMiddleware"]
