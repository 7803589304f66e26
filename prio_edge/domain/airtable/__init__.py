"""Airtable proxy: path policy, upstream client and forwarding pipeline."""

from .client import AiohttpAirtableClient, AirtableClient, AirtableUpstreamError, UpstreamResponse
from .paths import AirtablePathPolicy, PathCheck, build_upstream_url, validate_airtable_path
from .proxy import AirtableProxy, ProxyRequest

__all__ = [
    "AiohttpAirtableClient",
    "AirtableClient",
    "AirtablePathPolicy",
    "AirtableProxy",
    "AirtableUpstreamError",
    "PathCheck",
    "ProxyRequest",
    "UpstreamResponse",
    "build_upstream_url",
    "validate_airtable_path",
]
