from __future__ import annotations

from typing import Any, Optional

from fastapi.responses import JSONResponse

from prio_edge.core.errors import ProxyError

from .cors import cors_headers


def json_response(data: Any, origin: str, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=data, status_code=status_code, headers=cors_headers(origin))


def error_response(error: ProxyError, origin: str, *, extra: Optional[dict[str, Any]] = None) -> JSONResponse:
    """The only place a ProxyError becomes an HTTP response."""
    body: dict[str, Any] = dict(extra or {})
    body["error"] = error.message
    return json_response(body, origin, status_code=error.http_status)


__all__ = ["error_response", "json_response"]
