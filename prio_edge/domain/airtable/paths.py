"""Airtable path allow-listing and upstream URL construction.

The proxy takes the Airtable path from an untrusted query parameter, so every
path is checked against the configured base and tables before it is appended
to the Airtable API root. This keeps the proxy from being used to reach other
bases or arbitrary URLs.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional
from urllib.parse import quote

from prio_edge.core.settings import DEFAULT_AIRTABLE_BASE_ID, DEFAULT_AIRTABLE_TABLE_IDS

RECORD_ID_RE = re.compile(r"^rec[a-zA-Z0-9]+$")

# Characters encodeURIComponent leaves untouched.
_URI_COMPONENT_SAFE = "-_.!~*'()"


@dataclass(frozen=True)
class PathCheck:
    valid: bool
    error: Optional[str] = None
    base: Optional[str] = None
    table: Optional[str] = None
    record_id: Optional[str] = None


@dataclass(frozen=True)
class AirtablePathPolicy:
    base_id: str = DEFAULT_AIRTABLE_BASE_ID
    table_ids: tuple[str, ...] = DEFAULT_AIRTABLE_TABLE_IDS

    @classmethod
    def from_settings(cls, settings) -> "AirtablePathPolicy":
        return cls(base_id=settings.airtable_base_id, table_ids=tuple(settings.airtable_table_ids))

    def validate(self, path: Any) -> PathCheck:
        return validate_airtable_path(path, base_id=self.base_id, table_ids=self.table_ids)


def _invalid(error: str) -> PathCheck:
    return PathCheck(valid=False, error=error)


def validate_airtable_path(
    path: Any,
    *,
    base_id: str = DEFAULT_AIRTABLE_BASE_ID,
    table_ids: Iterable[str] = DEFAULT_AIRTABLE_TABLE_IDS,
) -> PathCheck:
    if not path or not isinstance(path, str):
        return _invalid("Invalid path")

    if ".." in path or "//" in path:
        return _invalid("Invalid path characters")

    clean = path[1:] if path.startswith("/") else path
    path_part = clean.split("?", 1)[0]
    parts = [segment for segment in path_part.split("/") if segment]

    if not 2 <= len(parts) <= 3:
        return _invalid("Invalid path structure")

    base, table = parts[0], parts[1]
    record_id = parts[2] if len(parts) == 3 else None

    if base != base_id:
        return _invalid("Invalid base")
    if table not in set(table_ids):
        return _invalid("Invalid table")
    if record_id is not None and not RECORD_ID_RE.match(record_id):
        return _invalid("Invalid record ID format")

    return PathCheck(valid=True, base=base, table=table, record_id=record_id)


def encode_uri_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def encode_query_string(query: str) -> str:
    """Re-encode a decoded query string for Airtable.

    Values arrive decoded (``+`` already turned into spaces), and Airtable
    only accepts ``%20`` for spaces inside formulas, so every key and value
    is percent-encoded with encodeURIComponent rules.
    """
    encoded_pairs = []
    for pair in query.split("&"):
        key, sep, value = pair.partition("=")
        if sep:
            encoded_pairs.append(f"{encode_uri_component(key)}={encode_uri_component(value)}")
        else:
            encoded_pairs.append(encode_uri_component(pair))
    return "&".join(encoded_pairs)


def build_upstream_url(api_base: str, path: str) -> str:
    clean = path[1:] if path.startswith("/") else path
    base_path, sep, query = clean.partition("?")
    url = f"{api_base.rstrip('/')}/{base_path}"
    if sep and query:
        url += "?" + encode_query_string(query)
    return url


__all__ = [
    "AirtablePathPolicy",
    "PathCheck",
    "RECORD_ID_RE",
    "build_upstream_url",
    "encode_query_string",
    "encode_uri_component",
    "validate_airtable_path",
]
