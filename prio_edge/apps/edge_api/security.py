"""Client identification for rate limiting."""

from __future__ import annotations

from fastapi import Request


def get_client_key(request: Request, *, trust_proxy_headers: bool = True) -> str:
    """
    Return the rate-limit key for a request.

    With TRUST_PROXY_HEADERS enabled (deployed behind Cloudflare or another
    reverse proxy), ``CF-Connecting-IP`` wins, then the leftmost
    ``X-Forwarded-For`` entry. Otherwise, or when neither header is present,
    the socket peer address is used, and ``"unknown"`` as a last resort.
    """
    if trust_proxy_headers:
        connecting_ip = (request.headers.get("cf-connecting-ip") or "").strip()
        if connecting_ip:
            return connecting_ip
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            client_ip = forwarded_for.split(",")[0].strip()
            if client_ip:
                return client_ip

    return request.client.host if request and request.client else "unknown"


__all__ = ["get_client_key"]
