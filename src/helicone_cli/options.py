# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

"""
Reusable click option groups and the helpers that turn them into library
objects (filter trees, clients).
"""

from typing import Any, Callable, Dict, List, Optional

import click

from helicone_library.client import AnalyticsClient, create_client
from helicone_library.core.constants import MODES, REGIONS
from helicone_library.core.types import FilterNode
from helicone_library.filters import (
    FilterConditions,
    build_filter,
    combine_filters,
    parse_property_args,
    resolve_user_filter,
)
from helicone_library.timerange import parse_date

Decorator = Callable[[Callable[..., Any]], Callable[..., Any]]


def _apply(options: List[Decorator]) -> Decorator:
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        for option in reversed(options):
            func = option(func)
        return func

    return decorator


# =============================================================================
# CONNECTION
# =============================================================================

connection_options = _apply(
    [
        click.option("--api-key", help="Helicone API key"),
        click.option(
            "--region", type=click.Choice(REGIONS), help="API region (us or eu)"
        ),
        click.option(
            "--mode", type=click.Choice(MODES), help="Connection mode (raw or gateway)"
        ),
        click.option("--gateway-url", help="Gateway base URL"),
        click.option("--gateway-token", help="Gateway token"),
    ]
)


def open_client(options: Dict[str, Any]) -> AnalyticsClient:
    """
    Build the configured backend from a command's connection options.

    Raises:
        ConfigError: If credentials for the selected mode are missing
    """
    return create_client(
        api_key=options.get("api_key"),
        region=options.get("region"),
        mode=options.get("mode"),
        gateway_url=options.get("gateway_url"),
        gateway_token=options.get("gateway_token"),
    )


# =============================================================================
# FILTERS
# =============================================================================


def time_window_options(default_since: str) -> Decorator:
    return _apply(
        [
            click.option(
                "--since",
                default=default_since,
                show_default=True,
                help="Start date (ISO format or relative like 7d, 24h)",
            ),
            click.option("--until", help="End date (ISO format or relative)"),
        ]
    )


def request_filter_options(default_since: str = "7d") -> Decorator:
    return _apply(
        [
            time_window_options(default_since),
            click.option("--model", help="Filter by exact model name"),
            click.option("--model-contains", help="Filter by model name substring"),
            click.option("--status", type=int, help="Filter by HTTP status code"),
            click.option("--user-id", help="Filter by user ID"),
            click.option("--provider", help="Filter by provider (OPENAI, ANTHROPIC, ...)"),
            click.option(
                "-p",
                "--property",
                "properties",
                multiple=True,
                metavar="KEY=VALUE",
                help="Filter by custom property (repeatable)",
            ),
            click.option("--search", help="Text in either the request or response body"),
            click.option("--request-contains", help="Text in the request body"),
            click.option("--response-contains", help="Text in the response body"),
            click.option("--min-cost", type=float, help="Minimum cost in USD"),
            click.option("--max-cost", type=float, help="Maximum cost in USD"),
            click.option("--min-latency", type=int, help="Minimum latency in milliseconds"),
            click.option("--max-latency", type=int, help="Maximum latency in milliseconds"),
            click.option("--cached", is_flag=True, help="Only cached requests"),
            click.option(
                "--filter", "filter_json", metavar="JSON", help="Raw filter tree as JSON"
            ),
            click.option(
                "--filter-file",
                type=click.Path(dir_okay=False),
                help="Read the raw filter tree from a JSON file",
            ),
        ]
    )


session_query_options = _apply(
    [
        click.option("--search", help="Search session names and content"),
        click.option("--name", help="Only sessions with exactly this name"),
    ]
)


def build_request_filter(options: Dict[str, Any]) -> FilterNode:
    """
    Compile the request filter options into one tree.

    Flag-derived conditions are AND-combined with any --filter/--filter-file
    tree.

    Raises:
        UserInputError: On bad dates, bad filter JSON or bad property pairs
    """
    since: Optional[str] = options.get("since")
    until: Optional[str] = options.get("until")

    conditions = FilterConditions(
        model=options.get("model"),
        model_contains=options.get("model_contains"),
        status=options.get("status"),
        user_id=options.get("user_id"),
        provider=options.get("provider"),
        start_date=parse_date(since) if since else None,
        end_date=parse_date(until) if until else None,
        min_cost=options.get("min_cost"),
        max_cost=options.get("max_cost"),
        min_latency=options.get("min_latency"),
        max_latency=options.get("max_latency"),
        properties=parse_property_args(options.get("properties") or ()),
        cached=True if options.get("cached") else None,
        search=options.get("search"),
        request_contains=options.get("request_contains"),
        response_contains=options.get("response_contains"),
    )
    user_filter = resolve_user_filter(
        options.get("filter_json"), options.get("filter_file")
    )
    return combine_filters(user_filter, build_filter(conditions))


# =============================================================================
# OUTPUT
# =============================================================================


def format_option(choices: List[str], default: str) -> Decorator:
    return click.option(
        "-f",
        "--format",
        "fmt",
        type=click.Choice(choices),
        default=default,
        show_default=True,
        help="Output format",
    )


fields_option = click.option(
    "--fields", help="Comma-separated fields to include (see the 'fields' command)"
)
