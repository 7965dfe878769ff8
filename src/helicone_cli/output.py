# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

"""Formatting of records and numbers for the terminal and for stdout data."""

import io
import json
from datetime import datetime
from typing import Any, List, Optional, Sequence

from rich.markup import escape
from rich.table import Table

from helicone_library.core.types import Record
from helicone_library.export.writers import create_writer
from helicone_library.fields import FieldResolver, project

# Latency thresholds (ms) for yellow/red highlighting
LATENCY_WARN_MS = 2000
LATENCY_SLOW_MS = 5000

# Error rate (%) above which it is shown in red
ERROR_RATE_WARN = 5.0

ID_DISPLAY_WIDTH = 15


def format_cost(value: Any, digits: int = 4) -> str:
    """Format cost for display."""
    try:
        cost = float(value)
    except (TypeError, ValueError):
        return "N/A"
    if cost == 0:
        return "[dim]$0.00[/dim]"
    return f"${cost:.{digits}f}"


def format_number(value: Any) -> str:
    """Thousands-separated integer, or N/A when not a finite number."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return "N/A"
    if number != number or number in (float("inf"), float("-inf")):
        return "N/A"
    return f"{round(number):,}"


def format_latency(ms: Any) -> str:
    try:
        value = float(ms)
    except (TypeError, ValueError):
        return "N/A"
    text = f"{value:.0f}ms"
    if value > LATENCY_SLOW_MS:
        return f"[red]{text}[/red]"
    if value > LATENCY_WARN_MS:
        return f"[yellow]{text}[/yellow]"
    return text


def status_style(status: Any) -> str:
    try:
        code = int(status)
    except (TypeError, ValueError):
        return "white"
    if 200 <= code < 300:
        return "green"
    if 400 <= code < 500:
        return "yellow"
    if code >= 500:
        return "red"
    return "white"


def format_status(status: Any) -> str:
    if status is None or status == "":
        return "N/A"
    return f"[{status_style(status)}]{status}[/{status_style(status)}]"


def format_error_rate(rate: float) -> str:
    color = "red" if rate > ERROR_RATE_WARN else "green"
    return f"[{color}]{rate:.1f}%[/{color}]"


def format_timestamp(value: Any) -> str:
    """Local time for an ISO timestamp; the raw value if it does not parse."""
    if not value:
        return "N/A"
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return str(value)
    return parsed.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def shorten_id(value: str) -> str:
    if len(value) > ID_DISPLAY_WIDTH:
        return value[:ID_DISPLAY_WIDTH] + "..."
    return value


def format_cell(value: Any, field: str) -> str:
    """Rich markup for one table cell."""
    if value is None:
        return "[dim]-[/dim]"
    if field in ("request_id", "session_id"):
        return escape(shorten_id(str(value)))
    if field in ("created_at", "last_request_at"):
        return format_timestamp(value)
    if field == "status":
        return format_status(value)
    if field in ("latency_ms", "ttft_ms", "avg_latency_ms"):
        return format_latency(value)
    if field == "cost":
        return format_cost(value)
    if field in ("tokens", "prompt_tokens", "completion_tokens", "requests"):
        return format_number(value)
    if field == "cached":
        return "[cyan]yes[/cyan]" if value else "[dim]no[/dim]"
    return escape(str(value))


def new_table(*headers: str) -> Table:
    table = Table(box=None, show_header=True, header_style="bold", padding=(0, 1))
    for header in headers:
        table.add_column(header)
    return table


def records_table(
    records: Sequence[Record], fields: List[str], resolver: FieldResolver
) -> Table:
    table = new_table(*fields)
    for record in records:
        table.add_row(*(format_cell(resolver(record, f), f) for f in fields))
    return table


def format_records(
    records: Sequence[Record],
    fmt: str,
    fields: List[str],
    resolver: FieldResolver,
    default_fields: List[str],
) -> str:
    """
    Serialise records for stdout as json, jsonl or csv.

    With an explicit field list, json/jsonl objects are projected onto those
    fields; otherwise whole records are written. csv always uses a field list.
    """
    if fmt == "json":
        rows = [project(r, fields, resolver) for r in records] if fields else list(records)
        return json.dumps(rows, indent=2, ensure_ascii=False)

    buffer = io.StringIO()
    writer = create_writer(
        fmt,
        buffer,
        fields=fields or default_fields,
        resolver=resolver,
        close_stream=False,
    )
    for record in records:
        writer.write(project(record, fields, resolver) if fields and fmt == "jsonl" else record)
    writer.close()
    return buffer.getvalue().rstrip("\n")


def showing_line(shown: int, total: Optional[int] = None) -> str:
    if total is not None and total > shown:
        return f"Showing {shown:,} of {total:,} results"
    return f"Showing {shown:,} results"


def percent(part: float, whole: float) -> str:
    return f"{(part / whole * 100) if whole else 0:.1f}%"
