# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

"""helicone requests: list, get, export and fields."""

import json
from typing import Any, Dict

import click
from rich.progress import BarColumn, Progress, TextColumn

from helicone_library.core.constants import (
    DEFAULT_EXPORT_BATCH_SIZE,
    DEFAULT_QUERY_LIMIT,
    DEFAULT_REQUESTS_EXPORT_PATH,
)
from helicone_library.core.types import QueryParams
from helicone_library.export import (
    EXPORT_FORMATS,
    ExportEngine,
    ExportProgress,
    ExportResult,
    RequestSource,
    create_writer,
    open_export_file,
)
from helicone_library.fields import (
    REQUEST_AVAILABLE_FIELDS,
    REQUEST_DEFAULT_FIELDS,
    REQUEST_FIELD_DESCRIPTIONS,
    extract_path,
    get_request_field,
    parse_fields,
)

from ..console import (
    console,
    emit,
    err_console,
    fail,
    handle_errors,
    info,
    notice,
    run_async,
    success,
)
from ..options import (
    build_request_filter,
    connection_options,
    fields_option,
    format_option,
    open_client,
    request_filter_options,
)
from ..output import format_records, records_table, showing_line
from ..views import BODYLESS_SECTIONS, SECTION_PRINTERS, SHOW_SECTIONS, validate_section


@click.group("requests")
def requests_group():
    """Query and export request data."""


# =============================================================================
# LIST
# =============================================================================


@requests_group.command("list")
@request_filter_options(default_since="7d")
@click.option(
    "-n", "--limit", type=click.IntRange(min=1), default=DEFAULT_QUERY_LIMIT, show_default=True
)
@click.option("--offset", type=click.IntRange(min=0), default=0, show_default=True)
@format_option(["table", "json", "jsonl", "csv"], "table")
@fields_option
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-essential output")
@connection_options
@handle_errors
def list_requests(**options: Any):
    """List requests matching the filters, newest first."""
    filter_node = build_request_filter(options)
    fields = parse_fields(options.get("fields"))
    run_async(_list_requests(options, filter_node, fields))


async def _list_requests(options: Dict[str, Any], filter_node, fields) -> None:
    limit = options["limit"]
    async with open_client(options) as client:
        result = await client.query_requests(
            QueryParams(
                filter=filter_node,
                offset=options["offset"],
                limit=limit,
                sort={"created_at": "desc"},
            )
        )
        if result.error:
            fail(result.error)

        records = result.data or []
        if not records:
            notice("No requests found matching the filters")
            return

        fmt = options["fmt"]
        if fmt != "table":
            emit(
                format_records(
                    records, fmt, fields, get_request_field, REQUEST_DEFAULT_FIELDS
                )
            )
            return

        console.print(
            records_table(records, fields or REQUEST_DEFAULT_FIELDS, get_request_field)
        )
        if options.get("quiet"):
            return

        total = None
        if len(records) >= min(limit, 1000):
            count = await client.count_requests(filter_node)
            total = count.data if count.ok else None
        info(showing_line(len(records), total))


# =============================================================================
# GET
# =============================================================================


@requests_group.command("get")
@click.argument("request_id")
@click.option(
    "-s",
    "--show",
    default="summary",
    show_default=True,
    help=f"What to show: {', '.join(SHOW_SECTIONS)}",
)
@click.option(
    "-e",
    "--extract",
    metavar="PATH",
    help="Extract one field, e.g. 'response_body.choices[0].message.content'",
)
@click.option("--raw", is_flag=True, help="Print the raw record as JSON")
@format_option(["json", "jsonl"], "json")
@connection_options
@handle_errors
def get_request(request_id: str, **options: Any):
    """Show a single request by ID."""
    section = validate_section(options["show"])
    run_async(_get_request(request_id, section, options))


async def _get_request(request_id: str, section: str, options: Dict[str, Any]) -> None:
    needs_body = bool(options.get("extract") or options.get("raw")) or (
        section not in BODYLESS_SECTIONS
    )
    async with open_client(options) as client:
        result = await client.get_request(request_id, include_body=needs_body)
    if result.error:
        fail(result.error)

    record = result.data
    if not record:
        notice("Request not found")
        return

    if options.get("extract"):
        missing = object()
        value = extract_path(record, options["extract"], default=missing)
        if value is missing:
            notice(f"Path '{options['extract']}' not found")
        elif isinstance(value, str):
            emit(value)
        else:
            emit(json.dumps(value, indent=2, ensure_ascii=False))
        return

    if options.get("raw") or section == "all":
        if section == "all" and options["fmt"] == "jsonl":
            emit(json.dumps(record, ensure_ascii=False))
        else:
            emit(json.dumps(record, indent=2, ensure_ascii=False))
        return

    SECTION_PRINTERS[section](console, record)


# =============================================================================
# EXPORT
# =============================================================================


def progress_text(progress: ExportProgress) -> str:
    return (
        f"Exported {progress.exported:,}/{progress.target:,} ({progress.percent:.1f}%) "
        f"- {progress.rate:.0f} rec/s - ETA: {progress.eta_seconds:.0f}s"
    )


def report_export(result: ExportResult, output: str, noun: str, empty_message: str) -> None:
    if result.status == "empty":
        notice(empty_message)
        return
    if result.error:
        if result.exported:
            info(f"Partial output ({result.exported:,} {noun}) left in {output}")
        fail(result.error)
    success(f"Exported {result.exported:,} {noun} to {output} in {result.elapsed:.1f}s")


async def run_export(engine: ExportEngine, quiet: bool = False) -> ExportResult:
    """Run an export job with a progress line on stderr."""
    with Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        console=err_console,
        disable=quiet,
        transient=False,
    ) as progress:
        task = progress.add_task("Counting records...", total=None)

        def on_progress(update: ExportProgress) -> None:
            progress.update(
                task,
                description=progress_text(update),
                completed=update.exported,
                total=update.target,
            )

        engine.on_progress = on_progress
        return await engine.run()


@requests_group.command("export")
@request_filter_options(default_since="30d")
@click.option(
    "-o",
    "--output",
    default=DEFAULT_REQUESTS_EXPORT_PATH,
    show_default=True,
    type=click.Path(dir_okay=False),
    help="Output file path",
)
@click.option("-n", "--limit", type=click.IntRange(min=1), help="Maximum records to export")
@format_option(list(EXPORT_FORMATS), "jsonl")
@fields_option
@click.option("--include-body", is_flag=True, help="Include full request/response bodies")
@click.option(
    "--batch-size",
    type=click.IntRange(min=1, max=1000),
    default=DEFAULT_EXPORT_BATCH_SIZE,
    show_default=True,
    help="Records per API request",
)
@click.option("-q", "--quiet", is_flag=True, help="Hide the progress line")
@connection_options
@handle_errors
def export_requests(**options: Any):
    """Export requests to a file, paging through every match."""
    filter_node = build_request_filter(options)
    fields = parse_fields(options.get("fields")) or REQUEST_DEFAULT_FIELDS
    run_async(_export_requests(options, filter_node, fields))


async def _export_requests(options: Dict[str, Any], filter_node, fields) -> None:
    output = options["output"]

    def writer_factory():
        return create_writer(
            options["fmt"],
            open_export_file(output),
            fields=fields,
            resolver=get_request_field,
        )

    async with open_client(options) as client:
        engine = ExportEngine(
            RequestSource(client, filter_node, include_body=options.get("include_body")),
            writer_factory,
            batch_size=options["batch_size"],
            limit=options.get("limit"),
        )
        result = await run_export(engine, quiet=options.get("quiet"))

    report_export(result, output, "records", "No requests found matching the filters")


# =============================================================================
# FIELDS
# =============================================================================


@requests_group.command("fields")
def request_fields():
    """List the fields available to --fields."""
    console.print("\n[bold]Available Request Fields:[/bold]\n")
    for name in REQUEST_AVAILABLE_FIELDS:
        default = " [dim](default)[/dim]" if name in REQUEST_DEFAULT_FIELDS else ""
        console.print(f"  [cyan]{name:<20}[/cyan] {REQUEST_FIELD_DESCRIPTIONS[name]}{default}")
    console.print("\n[dim]Use --fields to choose which fields to display[/dim]\n")
