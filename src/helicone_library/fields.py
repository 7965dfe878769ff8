# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Named display fields for request and session records.

A field name such as "latency_ms" resolves to the record attribute the
remote service actually uses ("delay_ms"). The same resolvers drive table
columns, --fields projections and CSV export rows.
"""

import json
import re
from typing import Any, Callable, Dict, List, Optional

from .core.types import Record

FieldResolver = Callable[[Record, str], Any]

# =============================================================================
# REQUEST FIELDS
# =============================================================================

REQUEST_DEFAULT_FIELDS = [
    "request_id",
    "created_at",
    "model",
    "status",
    "latency_ms",
    "tokens",
    "cost",
]

REQUEST_FIELD_DESCRIPTIONS = {
    "request_id": "Unique request identifier",
    "created_at": "Request timestamp",
    "model": "Model name (resolved)",
    "provider": "LLM provider (OPENAI, ANTHROPIC, etc.)",
    "status": "HTTP response status code",
    "latency_ms": "Total latency in milliseconds",
    "ttft_ms": "Time to first token in milliseconds",
    "tokens": "Total token count",
    "prompt_tokens": "Input token count",
    "completion_tokens": "Output token count",
    "cost": "Cost in USD",
    "user_id": "Your application's user ID",
    "country": "Request origin country code",
    "cached": "Whether response was cached",
    "path": "API endpoint path",
}

REQUEST_AVAILABLE_FIELDS = list(REQUEST_FIELD_DESCRIPTIONS)

# display name -> record key
_REQUEST_FIELD_KEYS = {
    "request_id": "request_id",
    "created_at": "request_created_at",
    "provider": "provider",
    "status": "response_status",
    "latency_ms": "delay_ms",
    "ttft_ms": "time_to_first_token",
    "tokens": "total_tokens",
    "prompt_tokens": "prompt_tokens",
    "completion_tokens": "completion_tokens",
    "cost": "cost",
    "user_id": "request_user_id",
    "country": "country_code",
    "cached": "cache_enabled",
    "path": "request_path",
}


def request_model(record: Record) -> str:
    return record.get("model") or record.get("request_model") or "unknown"


def get_request_field(record: Record, name: str) -> Any:
    """Resolve a display field; unknown names fall back to the raw key."""
    if name == "model":
        return request_model(record)
    return record.get(_REQUEST_FIELD_KEYS.get(name, name))


# =============================================================================
# SESSION FIELDS
# =============================================================================

SESSION_DEFAULT_FIELDS = [
    "session_id",
    "name",
    "requests",
    "tokens",
    "cost",
    "avg_latency_ms",
    "last_request_at",
]

SESSION_FIELD_DESCRIPTIONS = {
    "session_id": "Unique session identifier",
    "name": "Session name",
    "requests": "Total request count in session",
    "tokens": "Total token count",
    "prompt_tokens": "Input token count",
    "completion_tokens": "Output token count",
    "cost": "Total cost in USD",
    "avg_latency_ms": "Average request latency",
    "created_at": "Session start time",
    "last_request_at": "Most recent request time",
}

SESSION_AVAILABLE_FIELDS = list(SESSION_FIELD_DESCRIPTIONS)

_SESSION_FIELD_KEYS = {
    "session_id": "session_id",
    "name": "session_name",
    "requests": "total_requests",
    "tokens": "total_tokens",
    "prompt_tokens": "prompt_tokens",
    "completion_tokens": "completion_tokens",
    "cost": "total_cost",
    "avg_latency_ms": "avg_latency",
    "created_at": "created_at",
    "last_request_at": "latest_request_created_at",
}


def get_session_field(record: Record, name: str) -> Any:
    return record.get(_SESSION_FIELD_KEYS.get(name, name))


# =============================================================================
# HELPERS
# =============================================================================


def parse_fields(text: Optional[str]) -> List[str]:
    """Split a comma-separated --fields value, dropping blanks."""
    if not text:
        return []
    return [part.strip() for part in text.split(",") if part.strip()]


def project(record: Record, fields: List[str], resolver: FieldResolver) -> Dict[str, Any]:
    return {name: resolver(record, name) for name in fields}


def to_text(value: Any) -> str:
    """Plain-text rendering used by CSV rows."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


_CSV_SPECIAL = (",", '"', "\n", "\r")


def escape_csv_value(value: Any) -> str:
    """Quote a CSV cell when it contains a comma, quote or line break."""
    text = to_text(value)
    if any(ch in text for ch in _CSV_SPECIAL):
        return '"' + text.replace('"', '""') + '"'
    return text


def csv_row(values: List[Any]) -> str:
    return ",".join(escape_csv_value(v) for v in values)


_PATH_SPLIT = re.compile(r"\.|\[|\]")


def extract_path(obj: Any, path: str, default: Any = None) -> Any:
    """
    Walk ``obj`` along a dotted path with list indices.

    ``"response_body.choices[0].message.content"``. Returns ``default`` when
    any step is missing.
    """
    current = obj
    for part in (p for p in _PATH_SPLIT.split(path) if p):
        if isinstance(current, dict):
            if part not in current:
                return default
            current = current[part]
        elif isinstance(current, list):
            try:
                current = current[int(part)]
            except (ValueError, IndexError):
                return default
        else:
            return default
    return current
