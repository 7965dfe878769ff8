# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

"""
helicone metrics: summary, cost and errors.

Figures come from a bounded sample of the newest matching requests; totals
are extrapolated to the reported count where the sample is smaller.
"""

import json
from typing import Any, Dict

import click
from rich.markup import escape

from helicone_library.config import get_mode, get_sample_limit
from helicone_library.core.types import UserMetricsQueryParams
from helicone_library.filters import FilterConditions, build_filter
from helicone_library.metrics import (
    COST_GROUPINGS,
    aggregate,
    cost_breakdown,
    error_breakdown,
    fetch_sample,
    user_cost_breakdown,
)
from helicone_library.timerange import format_iso, resolve_window

from ..console import console, emit, err_console, fail, handle_errors, run_async
from ..options import connection_options, format_option, open_client, time_window_options
from ..output import (
    format_cost,
    format_error_rate,
    format_latency,
    format_number,
    new_table,
    percent,
    status_style,
)


@click.group("metrics")
def metrics_group():
    """View aggregate metrics and statistics."""


def _window(options: Dict[str, Any], default_since: str):
    return resolve_window(options.get("since"), options.get("until"), default_since)


def _time_range(start, end) -> Dict[str, str]:
    return {"start": format_iso(start), "end": format_iso(end)}


def _range_line(start, end) -> str:
    return f"[dim]Time range: {start.astimezone():%Y-%m-%d} - {end.astimezone():%Y-%m-%d}[/dim]"


# =============================================================================
# SUMMARY
# =============================================================================


@metrics_group.command("summary")
@time_window_options("7d")
@click.option("--model", help="Filter by model name")
@format_option(["table", "json"], "table")
@connection_options
@handle_errors
def summary(**options: Any):
    """Show summary metrics for a time period."""
    start, end = _window(options, "7d")
    filter_node = build_filter(
        FilterConditions(model=options.get("model"), start_date=start, end_date=end)
    )
    sample_limit = get_sample_limit(get_mode(options.get("mode")))
    run_async(_summary(options, filter_node, sample_limit, start, end))


async def _summary(options, filter_node, sample_limit: int, start, end) -> None:
    async with open_client(options) as client:
        with err_console.status("Fetching metrics..."):
            result = await fetch_sample(client, filter_node, sample_limit)
    if result.error:
        fail(result.error)

    sample = result.data
    metrics = aggregate(sample.records, sample.reported_count)

    if options["fmt"] == "json":
        output = {"timeRange": _time_range(start, end)}
        output.update(metrics.to_dict())
        emit(json.dumps(output, indent=2))
        return

    console.print("\n[bold]Metrics Summary[/bold]\n")
    console.print(_range_line(start, end))
    if options.get("model"):
        console.print(f"[dim]Model filter: {escape(options['model'])}[/dim]")
    console.print()

    table = new_table("Metric", "Value")
    table.show_header = False
    table.add_row("[bold]Total Requests[/bold]", format_number(metrics.total_requests))
    table.add_row(
        "[bold]Estimated Total Cost[/bold]", format_cost(metrics.estimated_total_cost, 2)
    )
    table.add_row(
        "[bold]Estimated Total Tokens[/bold]", format_number(metrics.estimated_total_tokens)
    )
    table.add_row("[bold]Avg Latency[/bold]", format_latency(metrics.average_latency_ms))
    table.add_row(
        "[bold]Avg Tokens/Request[/bold]", format_number(metrics.average_tokens_per_request)
    )
    table.add_row(
        "[bold]Avg Cost/Request[/bold]", format_cost(metrics.average_cost_per_request)
    )
    table.add_row("[bold]Error Rate[/bold]", format_error_rate(metrics.error_rate))
    console.print(table)

    for title, rows, width in (
        ("Top Models", metrics.top_models(), 30),
        ("Providers", metrics.top_providers(), 20),
    ):
        if not rows:
            continue
        console.print(f"\n[bold]{title}:[/bold]\n")
        for name, count in rows:
            console.print(
                f"  [cyan]{escape(name):<{width}}[/cyan] {count} ({percent(count, metrics.sample_size)})"
            )

    if metrics.is_sampled:
        console.print(
            f"\n[dim]* Metrics based on sample of {metrics.sample_size:,} requests[/dim]"
        )


# =============================================================================
# COST
# =============================================================================


@metrics_group.command("cost")
@time_window_options("30d")
@click.option(
    "--by",
    type=click.Choice(COST_GROUPINGS),
    default="model",
    show_default=True,
    help="Grouping",
)
@click.option(
    "-n",
    "--limit",
    type=click.IntRange(min=1),
    default=50,
    show_default=True,
    help="Maximum users (--by user)",
)
@format_option(["table", "json"], "table")
@connection_options
@handle_errors
def cost(**options: Any):
    """Show a cost breakdown."""
    start, end = _window(options, "30d")
    if options["by"] == "user":
        run_async(_user_cost(options, start, end))
        return
    filter_node = build_filter(FilterConditions(start_date=start, end_date=end))
    sample_limit = get_sample_limit(get_mode(options.get("mode")))
    run_async(_grouped_cost(options, filter_node, sample_limit, start, end))


async def _grouped_cost(options, filter_node, sample_limit: int, start, end) -> None:
    grouping = options["by"]
    async with open_client(options) as client:
        with err_console.status("Calculating costs..."):
            result = await fetch_sample(client, filter_node, sample_limit, with_count=False)
    if result.error:
        fail(result.error)

    records = result.data.records
    groups = cost_breakdown(records, grouping)
    total_cost = sum(g.cost for g in groups)

    if options["fmt"] == "json":
        output = {
            "grouping": grouping,
            "timeRange": _time_range(start, end),
            "totalCost": total_cost,
            "sampleSize": len(records),
            "groups": {g.key: g.to_dict() for g in groups},
        }
        emit(json.dumps(output, indent=2))
        return

    console.print(f"\n[bold]Cost Breakdown (by {grouping})[/bold]\n")
    console.print(_range_line(start, end))
    console.print()

    table = new_table(grouping, "Cost", "Requests", "Tokens", "%")
    for g in groups:
        table.add_row(
            f"[cyan]{escape(g.key)}[/cyan]",
            format_cost(g.cost),
            format_number(g.count),
            format_number(g.tokens),
            f"{g.share:.1f}%",
        )
    console.print(table)
    console.print(f"\n[bold]Total: {format_cost(total_cost)}[/bold]")
    if len(records) >= sample_limit:
        console.print(
            f"\n[dim]* Based on sample of {sample_limit:,} most recent requests[/dim]"
        )


async def _user_cost(options, start, end) -> None:
    params = UserMetricsQueryParams.for_range(start, end, limit=options["limit"])
    async with open_client(options) as client:
        with err_console.status("Fetching user metrics..."):
            result = await client.query_user_metrics(params)
    if result.error:
        fail(result.error)

    data = result.data if isinstance(result.data, dict) else {}
    breakdown = user_cost_breakdown(data.get("users") or [])

    if options["fmt"] == "json":
        output = {
            "grouping": "user",
            "timeRange": _time_range(start, end),
            "totalCost": breakdown.total_cost,
            "totalRequests": breakdown.total_requests,
            "users": [row.to_dict() for row in breakdown.rows],
        }
        emit(json.dumps(output, indent=2))
        return

    console.print("\n[bold]Cost Breakdown (by user)[/bold]\n")
    console.print(_range_line(start, end))
    console.print()

    table = new_table("User", "Cost", "Requests", "Prompt Tokens", "Completion Tokens", "%")
    for row in breakdown.rows:
        table.add_row(
            f"[cyan]{escape(row.user_id)}[/cyan]",
            format_cost(row.cost),
            format_number(row.requests),
            format_number(row.prompt_tokens),
            format_number(row.completion_tokens),
            f"{row.share:.1f}%",
        )
    console.print(table)
    console.print(
        f"\n[bold]Total: {format_cost(breakdown.total_cost, 2)} across "
        f"{breakdown.total_requests:,} requests from {len(breakdown.rows)} users[/bold]"
    )


# =============================================================================
# ERRORS
# =============================================================================


@metrics_group.command("errors")
@time_window_options("7d")
@format_option(["table", "json"], "table")
@connection_options
@handle_errors
def errors(**options: Any):
    """Show error statistics."""
    start, end = _window(options, "7d")
    filter_node = build_filter(FilterConditions(start_date=start, end_date=end))
    sample_limit = get_sample_limit(get_mode(options.get("mode")))
    run_async(_errors(options, filter_node, sample_limit))


async def _errors(options, filter_node, sample_limit: int) -> None:
    async with open_client(options) as client:
        with err_console.status("Analyzing errors..."):
            result = await fetch_sample(client, filter_node, sample_limit, with_count=False)
    if result.error:
        fail(result.error)

    breakdown = error_breakdown(result.data.records)

    if options["fmt"] == "json":
        emit(json.dumps(breakdown.to_dict(), indent=2))
        return

    console.print("\n[bold]Error Analysis[/bold]\n")
    console.print(
        f"Error Rate: {format_error_rate(breakdown.error_rate)} "
        f"({breakdown.total_errors} of {breakdown.total_requests} requests)\n"
    )

    console.print("[bold]Status Codes:[/bold]")
    for status, count in breakdown.status_counts:
        style = status_style(status)
        console.print(
            f"  [{style}]{status:<5}[/{style}] {count} ({percent(count, breakdown.total_requests)})"
        )

    if breakdown.errors_by_model:
        console.print("\n[bold]Errors by Model:[/bold]")
        for model, count in breakdown.errors_by_model[:10]:
            console.print(f"  [cyan]{escape(model):<30}[/cyan] {count}")
