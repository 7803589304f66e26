"""CORS handling for the dashboard origins.

Unknown origins are answered with the primary dashboard origin instead of
being echoed back, so browsers on other sites cannot read responses.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from fastapi import Request
from starlette.responses import Response

PREFLIGHT_MAX_AGE = 86400


def resolve_origin(origin: Optional[str], allowed_origins: Sequence[str]) -> str:
    if origin and origin in allowed_origins:
        return origin
    return allowed_origins[0] if allowed_origins else ""


def request_origin(request: Request) -> str:
    settings = request.app.state.settings
    return resolve_origin(request.headers.get("origin"), settings.allowed_origins)


def cors_headers(origin: str) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Credentials": "true",
        "Vary": "Origin",
    }


def preflight_response(origin: str, *, methods: Iterable[str], headers: Iterable[str]) -> Response:
    response_headers = cors_headers(origin)
    response_headers.update(
        {
            "Access-Control-Allow-Methods": ", ".join(methods),
            "Access-Control-Allow-Headers": ", ".join(headers),
            "Access-Control-Max-Age": str(PREFLIGHT_MAX_AGE),
        }
    )
    return Response(status_code=200, headers=response_headers)


__all__ = ["PREFLIGHT_MAX_AGE", "cors_headers", "preflight_response", "request_origin", "resolve_origin"]
