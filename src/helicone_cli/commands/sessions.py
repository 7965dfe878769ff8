# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

"""helicone sessions: list, get, export and fields."""

import json
from datetime import timedelta
from typing import Any, Dict

import click
from rich.markup import escape

from helicone_library.core.constants import (
    DEFAULT_SESSION_QUERY_LIMIT,
    DEFAULT_SESSIONS_EXPORT_PATH,
    SESSION_EXPORT_BATCH_SIZE,
    SESSION_LOOKBACK_DAYS,
)
from helicone_library.core.types import SessionQueryParams
from helicone_library.export import (
    EXPORT_FORMATS,
    ExportEngine,
    SessionSource,
    create_writer,
    open_export_file,
)
from helicone_library.export.sources import fetch_session_requests
from helicone_library.fields import (
    SESSION_AVAILABLE_FIELDS,
    SESSION_DEFAULT_FIELDS,
    SESSION_FIELD_DESCRIPTIONS,
    get_session_field,
    parse_fields,
    request_model,
)
from helicone_library.filters import session_filter
from helicone_library.timerange import local_timezone_difference, resolve_window, utc_now

from ..console import console, emit, fail, handle_errors, notice, run_async
from ..options import (
    connection_options,
    fields_option,
    format_option,
    open_client,
    session_query_options,
    time_window_options,
)
from ..output import (
    format_cost,
    format_latency,
    format_number,
    format_timestamp,
    format_records,
    records_table,
    showing_line,
    status_style,
)
from .requests import report_export, run_export


def session_params(options: Dict[str, Any], default_since: str) -> SessionQueryParams:
    start, end = resolve_window(options.get("since"), options.get("until"), default_since)
    return SessionQueryParams.for_range(
        start,
        end,
        search=options.get("search") or "",
        name_equals=options.get("name"),
        timezone_difference=local_timezone_difference(),
    )


@click.group("sessions")
def sessions_group():
    """Query and export sessions (direct mode only)."""


@sessions_group.command("list")
@time_window_options("7d")
@session_query_options
@click.option(
    "-n",
    "--limit",
    type=click.IntRange(min=1),
    default=DEFAULT_SESSION_QUERY_LIMIT,
    show_default=True,
)
@click.option("--offset", type=click.IntRange(min=0), default=0, show_default=True)
@format_option(["table", "json", "jsonl", "csv"], "table")
@fields_option
@connection_options
@handle_errors
def list_sessions(**options: Any):
    """List sessions in a time window."""
    params = session_params(options, "7d").page(options["offset"], options["limit"])
    fields = parse_fields(options.get("fields"))
    run_async(_list_sessions(options, params, fields))


async def _list_sessions(options: Dict[str, Any], params: SessionQueryParams, fields) -> None:
    async with open_client(options) as client:
        result = await client.query_sessions(params)
    if result.error:
        fail(result.error)

    sessions = result.data or []
    if not sessions:
        notice("No sessions found matching the filters")
        return

    if options["fmt"] != "table":
        emit(
            format_records(
                sessions, options["fmt"], fields, get_session_field, SESSION_DEFAULT_FIELDS
            )
        )
        return

    console.print(
        records_table(sessions, fields or SESSION_DEFAULT_FIELDS, get_session_field)
    )
    console.print(f"\n[dim]{showing_line(len(sessions))}[/dim]")


@sessions_group.command("get")
@click.argument("session_id")
@click.option("--include-requests", is_flag=True, help="Include the session's requests")
@format_option(["table", "json"], "json")
@connection_options
@handle_errors
def get_session(session_id: str, **options: Any):
    """Show one session, optionally with its requests."""
    run_async(_get_session(session_id, options))


async def _get_session(session_id: str, options: Dict[str, Any]) -> None:
    end = utc_now()
    params = SessionQueryParams.for_range(
        end - timedelta(days=SESSION_LOOKBACK_DAYS),
        end,
        timezone_difference=local_timezone_difference(),
        filter=session_filter(session_id),
        limit=1,
    )
    async with open_client(options) as client:
        result = await client.query_sessions(params)
        if result.error:
            fail(result.error)
        if not result.data:
            fail(f"Session not found: {session_id}")

        session = result.data[0]
        requests = None
        if options.get("include_requests"):
            requests = await fetch_session_requests(client, session_id)

    if options["fmt"] == "json":
        output: Dict[str, Any] = {"session": session}
        if requests is not None:
            output["requests"] = requests
        emit(json.dumps(output, indent=2, ensure_ascii=False))
        return

    rows = [
        ("Session ID", f"[cyan]{escape(str(session.get('session_id')))}[/cyan]"),
        ("Name", escape(str(session.get("session_name") or "")) or "[dim](unnamed)[/dim]"),
        ("Requests", format_number(session.get("total_requests"))),
        ("Total Tokens", format_number(session.get("total_tokens"))),
        ("Total Cost", format_cost(session.get("total_cost"))),
        ("Avg Latency", format_latency(session.get("avg_latency"))),
        ("Created", format_timestamp(session.get("created_at"))),
        ("Last Request", format_timestamp(session.get("latest_request_created_at"))),
    ]
    console.print("\n[bold]Session Details:[/bold]\n")
    for label, value in rows:
        console.print(f"  {label + ':':<14}{value}")

    if requests is not None:
        console.print(f"\n[bold]Requests ({len(requests)}):[/bold]\n")
        for req in requests:
            status = req.get("response_status")
            style = status_style(status)
            console.print(
                f"  [{style}]{status}[/{style}] {escape(request_model(req))} "
                f"[dim]{req.get('delay_ms')}ms {format_timestamp(req.get('request_created_at'))}[/dim]"
            )


@sessions_group.command("export")
@time_window_options("30d")
@session_query_options
@click.option(
    "-o",
    "--output",
    default=DEFAULT_SESSIONS_EXPORT_PATH,
    show_default=True,
    type=click.Path(dir_okay=False),
)
@click.option("-n", "--limit", type=click.IntRange(min=1), help="Maximum sessions to export")
@format_option(list(EXPORT_FORMATS), "jsonl")
@fields_option
@click.option("--include-requests", is_flag=True, help="Attach each session's requests")
@click.option("-q", "--quiet", is_flag=True, help="Hide the progress line")
@connection_options
@handle_errors
def export_sessions(**options: Any):
    """Export sessions to a file."""
    params = session_params(options, "30d")
    fields = parse_fields(options.get("fields")) or SESSION_DEFAULT_FIELDS
    run_async(_export_sessions(options, params, fields))


async def _export_sessions(options: Dict[str, Any], params: SessionQueryParams, fields) -> None:
    output = options["output"]

    def writer_factory():
        return create_writer(
            options["fmt"],
            open_export_file(output),
            fields=fields,
            resolver=get_session_field,
        )

    async with open_client(options) as client:
        engine = ExportEngine(
            SessionSource(client, params, include_requests=options.get("include_requests")),
            writer_factory,
            batch_size=SESSION_EXPORT_BATCH_SIZE,
            limit=options.get("limit"),
        )
        result = await run_export(engine, quiet=options.get("quiet"))

    report_export(result, output, "sessions", "No sessions found matching the filters")


@sessions_group.command("fields")
def session_fields():
    """List the fields available to --fields."""
    console.print("\n[bold]Available Session Fields:[/bold]\n")
    for name in SESSION_AVAILABLE_FIELDS:
        default = " [dim](default)[/dim]" if name in SESSION_DEFAULT_FIELDS else ""
        console.print(f"  [cyan]{name:<20}[/cyan] {SESSION_FIELD_DESCRIPTIONS[name]}{default}")
    console.print("\n[dim]Use --fields to choose which fields to display[/dim]\n")
