# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

"""Section views for a single request (``requests get --show``)."""

import json
from typing import Any, Callable, Dict, List, Optional, Tuple

from rich.console import Console
from rich.markup import escape

from helicone_library.core.errors import UserInputError
from helicone_library.core.types import Record
from helicone_library.metrics.aggregator import coerce_number

from .output import format_latency, format_status, format_timestamp

SHOW_SECTIONS = (
    "summary",
    "messages",
    "request",
    "response",
    "metadata",
    "properties",
    "scores",
    "all",
)

# Sections that do not need the request/response bodies
BODYLESS_SECTIONS = ("metadata", "properties", "scores")

ROLE_COLORS = {
    "system": "magenta",
    "user": "blue",
    "assistant": "green",
    "function": "yellow",
    "tool": "yellow",
}


def validate_section(section: str) -> str:
    if section not in SHOW_SECTIONS:
        raise UserInputError(
            f"Unknown section: {section}. Available: {', '.join(SHOW_SECTIONS)}"
        )
    return section


def _first(record: Record, *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value not in (None, ""):
            return value
    return None


def _usage(body: Any, key: str) -> Any:
    if isinstance(body, dict) and isinstance(body.get("usage"), dict):
        return body["usage"].get(key)
    return None


def _properties(record: Record) -> Optional[Dict[str, Any]]:
    props = _first(record, "properties", "request_properties")
    return props if isinstance(props, dict) else None


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def _format_usd(value: Any) -> Optional[str]:
    cost = coerce_number(value)
    return f"${cost:.6f}" if cost else None


def summary_rows(record: Record) -> List[Tuple[str, str]]:
    created = _first(record, "request_created_at", "created_at")
    ttft = _first(record, "time_to_first_token")
    rows = [
        ("ID", escape(str(_first(record, "request_id", "id") or "N/A"))),
        ("Created", format_timestamp(created)),
        ("Model", escape(str(_first(record, "model", "request_model", "model_override") or "Unknown"))),
        ("Provider", escape(str(record.get("provider") or "Unknown"))),
        ("Status", format_status(_first(record, "response_status", "status"))),
        ("Latency", format_latency(_first(record, "delay_ms", "latency_ms"))),
        ("TTFT", f"{ttft}ms" if ttft else "N/A"),
    ]

    prompt = record.get("prompt_tokens") or _usage(record.get("request_body"), "prompt_tokens")
    completion = record.get("completion_tokens") or _usage(
        record.get("response_body"), "completion_tokens"
    )
    total = record.get("total_tokens")
    if not total and prompt and completion:
        total = coerce_number(prompt) + coerce_number(completion)
    if total:
        rows.append(
            ("Tokens", f"{int(coerce_number(total))} ({prompt or '?'} prompt, {completion or '?'} completion)")
        )

    cost = _format_usd(_first(record, "cost_usd", "cost"))
    if cost:
        rows.append(("Cost", cost))
    user = _first(record, "request_user_id", "user_id")
    if user:
        rows.append(("User ID", escape(str(user))))
    path = _first(record, "request_path", "path", "target_url")
    if path:
        rows.append(("Path", escape(str(path))))
    return rows


def print_summary(console: Console, record: Record) -> None:
    console.print("\n[bold]Request Summary[/bold]\n")
    for label, value in summary_rows(record):
        console.print(f"  [dim]{label:<12}[/dim] {value}", soft_wrap=True)

    props = _properties(record)
    if props:
        console.print(f"\n  [dim]Properties:[/dim] {escape(', '.join(props))}")
    scores = record.get("scores")
    if isinstance(scores, dict) and scores:
        console.print(f"  [dim]Scores:[/dim] {escape(', '.join(scores))}")

    console.print(
        "\n[dim]  Use --show <section> for more details: "
        "messages, request, response, metadata, properties, scores, all[/dim]"
    )
    console.print(
        "[dim]  Use --extract <path> to extract specific fields, "
        "e.g. --extract response_body.choices\\[0].message.content[/dim]\n"
    )


def _print_content(console: Console, content: Any) -> None:
    if isinstance(content, str):
        for line in content.split("\n"):
            console.print(f"    {line}", markup=False, soft_wrap=True)
    elif isinstance(content, list):
        for part in content:
            if not isinstance(part, dict):
                continue
            if part.get("type") == "text" and part.get("text"):
                for line in str(part["text"]).split("\n"):
                    console.print(f"    {line}", markup=False, soft_wrap=True)
            elif part.get("type") == "image_url":
                console.print("    [dim]\\[Image][/dim]")
            else:
                console.print(f"    {json.dumps(part)}", markup=False, soft_wrap=True)
    elif content is not None:
        console.print(
            "    " + _dump(content).replace("\n", "\n    "), markup=False, soft_wrap=True
        )


def _print_message(console: Console, role: str, content: Any) -> None:
    color = ROLE_COLORS.get(role, "white")
    console.print(f"[{color}]  \\[{escape(role.upper())}][/{color}]")
    _print_content(console, content)
    console.print()


def print_messages(console: Console, record: Record) -> None:
    console.print("\n[bold]Messages[/bold]\n")
    request_body = record.get("request_body")
    response_body = record.get("response_body")
    inputs = request_body.get("messages") if isinstance(request_body, dict) else None
    choices = response_body.get("choices") if isinstance(response_body, dict) else None

    if not isinstance(inputs, list) and not isinstance(choices, list):
        console.print(
            "[yellow]  No chat messages found. This may not be a chat completion request.[/yellow]"
        )
        console.print("[dim]  Use --show request or --show response to see raw bodies.[/dim]\n")
        return

    for message in inputs or []:
        if isinstance(message, dict):
            _print_message(console, str(message.get("role", "unknown")), message.get("content"))

    if choices:
        choice = choices[0] if isinstance(choices[0], dict) else {}
        content = (choice.get("message") or {}).get("content") or (
            choice.get("delta") or {}
        ).get("content")
        if content:
            _print_message(console, "assistant", content)


def print_section(console: Console, title: str, data: Any) -> None:
    console.print(f"\n[bold]{title}[/bold]\n")
    if data is None:
        console.print("[yellow]  No data available[/yellow]\n")
        return
    text = _dump(data) if isinstance(data, (dict, list)) else str(data)
    console.print(text, markup=False, soft_wrap=True)
    console.print()


def print_metadata(console: Console, record: Record) -> None:
    def line(label: str, value: Any) -> None:
        shown = "N/A" if value in (None, "") else value
        console.print(f"    [dim]{label + ':':<14}[/dim]{shown}", soft_wrap=True)

    ttft = record.get("time_to_first_token")
    console.print("\n[bold]Request Metadata[/bold]\n")
    console.print("[cyan]  Timing:[/cyan]")
    line("Created", _first(record, "request_created_at", "created_at"))
    line("Latency", format_latency(_first(record, "delay_ms", "latency_ms")))
    line("TTFT", f"{ttft}ms" if ttft else None)

    console.print("\n[cyan]  Model:[/cyan]")
    line("Model", escape(str(_first(record, "model", "request_model") or "N/A")))
    line("Provider", record.get("provider"))
    line("Status", format_status(_first(record, "response_status", "status")))

    console.print("\n[cyan]  Tokens:[/cyan]")
    line("Prompt", record.get("prompt_tokens"))
    line("Completion", record.get("completion_tokens"))
    line("Total", record.get("total_tokens"))

    console.print("\n[cyan]  Cost:[/cyan]")
    line("Cost (USD)", _format_usd(_first(record, "cost_usd", "cost")))

    country = _first(record, "country_code", "country")
    if country:
        console.print("\n[cyan]  Location:[/cyan]")
        line("Country", country)

    if "cache_enabled" in record or "cached" in record:
        cached = _first(record, "cache_enabled", "cached")
        console.print("\n[cyan]  Cache:[/cyan]")
        line("Cached", "Yes" if cached else "No")
    console.print()


SectionPrinter = Callable[[Console, Record], None]

SECTION_PRINTERS: Dict[str, SectionPrinter] = {
    "summary": print_summary,
    "messages": print_messages,
    "request": lambda c, r: print_section(c, "Request Body", r.get("request_body")),
    "response": lambda c, r: print_section(c, "Response Body", r.get("response_body")),
    "metadata": print_metadata,
    "properties": lambda c, r: print_section(c, "Properties", _properties(r)),
    "scores": lambda c, r: print_section(c, "Scores", r.get("scores")),
}
