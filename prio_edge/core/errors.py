"""Error categories shared by the edge API handlers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    BAD_REQUEST = "bad_request"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    UPSTREAM_FAILURE = "upstream_failure"
    SERVER_MISCONFIG = "server_misconfig"
    INTERNAL = "internal"


_DEFAULT_STATUS = {
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.METHOD_NOT_ALLOWED: 405,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.UPSTREAM_FAILURE: 502,
    ErrorKind.SERVER_MISCONFIG: 500,
    ErrorKind.INTERNAL: 500,
}


@dataclass(frozen=True, slots=True)
class ProxyError:
    """A client-safe error. ``message`` is what the caller sees.

    ``status`` overrides the default code of the kind; upstream failures use it
    to carry a masked upstream 4xx status.
    """

    kind: ErrorKind
    message: str
    status: Optional[int] = None

    @property
    def http_status(self) -> int:
        if self.status is not None:
            return self.status
        return _DEFAULT_STATUS[self.kind]

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


def bad_request(message: str) -> ProxyError:
    return ProxyError(ErrorKind.BAD_REQUEST, message)


def method_not_allowed() -> ProxyError:
    return ProxyError(ErrorKind.METHOD_NOT_ALLOWED, "Method not allowed")


def rate_limited() -> ProxyError:
    return ProxyError(ErrorKind.RATE_LIMITED, "Rate limit exceeded. Please try again later.")


def server_misconfig() -> ProxyError:
    return ProxyError(ErrorKind.SERVER_MISCONFIG, "Server configuration error")


def internal_error() -> ProxyError:
    return ProxyError(ErrorKind.INTERNAL, "Internal server error")


def upstream_failure(message: str, upstream_status: int | None = None) -> ProxyError:
    """Map an upstream status to a masked client status.

    5xx (or unknown) becomes 502; 401 is reported as UNAUTHORIZED; any other
    status is passed through unchanged.
    """
    if upstream_status is None or upstream_status >= 500:
        return ProxyError(ErrorKind.UPSTREAM_FAILURE, message)
    if upstream_status == 401:
        return ProxyError(ErrorKind.UNAUTHORIZED, message)
    return ProxyError(ErrorKind.UPSTREAM_FAILURE, message, status=upstream_status)


__all__ = [
    "ErrorKind",
    "ProxyError",
    "bad_request",
    "internal_error",
    "method_not_allowed",
    "rate_limited",
    "server_misconfig",
    "upstream_failure",
]
