# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Filter-tree construction and combination.

Convenience flags (model, status, date range, ...) compile into leaves that
are AND-chained in a fixed order. A raw tree supplied by the user as JSON is
always AND-combined with the flag-derived tree, never replacing it.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .core.constants import REQUEST_TABLE, SESSION_ID_PROPERTY
from .core.errors import UserInputError
from .core.types import (
    ALL,
    BRANCH_OPERATORS,
    FILTER_OPERATORS,
    AllFilter,
    BranchFilter,
    FilterNode,
    FilterValue,
    LeafFilter,
)
from .timerange import format_iso

lib_logger = logging.getLogger("helicone_library")


@dataclass
class FilterConditions:
    """
    Named convenience conditions.

    Every field is optional; ``None`` (or an empty string/map) means the
    condition is absent and contributes nothing to the built filter.
    """

    model: Optional[str] = None
    model_contains: Optional[str] = None
    status: Optional[int] = None
    user_id: Optional[str] = None
    provider: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    min_cost: Optional[float] = None
    max_cost: Optional[float] = None
    min_latency: Optional[int] = None
    max_latency: Optional[int] = None
    properties: Optional[Dict[str, str]] = None
    cached: Optional[bool] = None
    search: Optional[str] = None
    request_contains: Optional[str] = None
    response_contains: Optional[str] = None


def _leaf(column: str, operator: str, value: FilterValue) -> LeafFilter:
    return LeafFilter(REQUEST_TABLE, (column,), operator, value)


def chain_and(nodes: Iterable[FilterNode]) -> FilterNode:
    """
    Left-associated AND chain of ``nodes`` in order.

    Zero nodes yield ALL, one node is returned as-is.
    """
    result: Optional[FilterNode] = None
    for node in nodes:
        result = node if result is None else BranchFilter(result, "and", node)
    return ALL if result is None else result


def build_filter(conditions: FilterConditions) -> FilterNode:
    """Compile convenience conditions into a single filter tree."""
    c = conditions
    leaves: List[FilterNode] = []

    if c.model:
        leaves.append(_leaf("model", "equals", c.model))
    if c.model_contains:
        leaves.append(_leaf("model", "ilike", f"%{c.model_contains}%"))
    if c.status is not None:
        leaves.append(_leaf("status", "equals", c.status))
    if c.user_id:
        leaves.append(_leaf("user_id", "equals", c.user_id))
    if c.provider:
        leaves.append(_leaf("provider", "equals", c.provider))
    if c.start_date is not None:
        leaves.append(_leaf("request_created_at", "gte", format_iso(c.start_date)))
    if c.end_date is not None:
        leaves.append(_leaf("request_created_at", "lte", format_iso(c.end_date)))
    if c.min_cost is not None:
        leaves.append(_leaf("cost", "gte", c.min_cost))
    if c.max_cost is not None:
        leaves.append(_leaf("cost", "lte", c.max_cost))
    if c.min_latency is not None:
        leaves.append(_leaf("latency", "gte", c.min_latency))
    if c.max_latency is not None:
        leaves.append(_leaf("latency", "lte", c.max_latency))
    for key, value in (c.properties or {}).items():
        leaves.append(LeafFilter(REQUEST_TABLE, ("properties", key), "equals", value))
    if c.cached is not None:
        leaves.append(_leaf("cache_enabled", "equals", c.cached))
    if c.search:
        # Search must match either side of the exchange
        leaves.append(
            BranchFilter(
                _leaf("request_body", "contains", c.search),
                "or",
                _leaf("response_body", "contains", c.search),
            )
        )
    if c.request_contains:
        leaves.append(_leaf("request_body", "contains", c.request_contains))
    if c.response_contains:
        leaves.append(_leaf("response_body", "contains", c.response_contains))

    return chain_and(leaves)


def is_empty_filter(node: Union[FilterNode, Mapping[str, Any], str, None]) -> bool:
    """None, ALL, "all" and {} all mean "no filter"."""
    if node is None or isinstance(node, AllFilter):
        return True
    if isinstance(node, str):
        return node == "all"
    if isinstance(node, Mapping):
        return len(node) == 0
    return False


def combine_filters(
    user_supplied: Union[FilterNode, Mapping[str, Any], str, None],
    derived: Union[FilterNode, Mapping[str, Any], str, None],
) -> FilterNode:
    """
    AND-combine a user-supplied tree with a flag-derived tree.

    If either side is empty the other is returned unchanged.
    """
    user_node = ALL if is_empty_filter(user_supplied) else coerce_filter(user_supplied)
    derived_node = ALL if is_empty_filter(derived) else coerce_filter(derived)

    if isinstance(user_node, AllFilter):
        return derived_node
    if isinstance(derived_node, AllFilter):
        return user_node
    return BranchFilter(user_node, "and", derived_node)


# =============================================================================
# JSON <-> TREE
# =============================================================================


def coerce_filter(value: Union[FilterNode, Mapping[str, Any], str, None]) -> FilterNode:
    """Accept a FilterNode as-is, otherwise parse it from its JSON form."""
    if isinstance(value, (AllFilter, LeafFilter, BranchFilter)):
        return value
    return parse_filter_node(value)


def _is_branch(obj: Mapping[str, Any]) -> bool:
    return set(obj.keys()) == {"left", "operator", "right"}


def _parse_condition(table: str, path: List[str], obj: Any) -> List[FilterNode]:
    if not isinstance(obj, Mapping) or not obj:
        location = ".".join([table] + path)
        raise UserInputError(f"Invalid filter condition at '{location}'")

    leaves: List[FilterNode] = []
    for key, value in obj.items():
        if key in FILTER_OPERATORS and path and not isinstance(value, (Mapping, list)):
            leaves.append(LeafFilter(table, tuple(path), key, value))
        else:
            leaves.extend(_parse_condition(table, path + [key], value))
    return leaves


def parse_filter_node(obj: Any) -> FilterNode:
    """
    Convert the API's JSON representation into a filter tree.

    A leaf mapping that names several tables or fields becomes an AND chain
    of single-condition leaves, which matches the same records.

    Raises:
        UserInputError: If the structure is not a filter tree
    """
    if obj is None or obj == "all":
        return ALL
    if not isinstance(obj, Mapping):
        raise UserInputError(
            f"Invalid filter: expected an object or \"all\", got {type(obj).__name__}"
        )
    if not obj:
        return ALL

    if _is_branch(obj):
        operator = obj["operator"]
        if operator not in BRANCH_OPERATORS:
            raise UserInputError(
                f"Unknown branch operator '{operator}'. Use 'and' or 'or'"
            )
        return BranchFilter(
            parse_filter_node(obj["left"]), operator, parse_filter_node(obj["right"])
        )

    leaves: List[FilterNode] = []
    for table, condition in obj.items():
        leaves.extend(_parse_condition(table, [], condition))
    return chain_and(leaves)


def filter_to_json(node: FilterNode) -> Any:
    return node.to_json()


def parse_filter_json(text: str) -> FilterNode:
    """
    Parse a filter tree from a JSON literal.

    Raises:
        UserInputError: On malformed JSON or a non-filter structure
    """
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise UserInputError(f"Invalid filter JSON: {e}") from None
    return parse_filter_node(obj)


def load_filter_file(path: Union[str, Path]) -> FilterNode:
    """
    Read and parse a filter tree from a JSON file.

    Raises:
        UserInputError: If the file cannot be read or does not parse
    """
    file_path = Path(path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise UserInputError(f"Could not read filter file {file_path}: {e.strerror or e}") from None
    lib_logger.debug(f"Loaded filter file {file_path} ({len(text)} bytes)")
    return parse_filter_json(text)


def resolve_user_filter(
    filter_json: Optional[str] = None, filter_file: Optional[str] = None
) -> Optional[FilterNode]:
    """Resolve the --filter / --filter-file pair into an optional tree."""
    if filter_json and filter_file:
        raise UserInputError("Use either --filter or --filter-file, not both")
    if filter_json:
        return parse_filter_json(filter_json)
    if filter_file:
        return load_filter_file(filter_file)
    return None


def parse_property_args(pairs: Iterable[str]) -> Dict[str, str]:
    """
    Parse repeated ``key=value`` arguments into an ordered mapping.

    The value may itself contain ``=``; only the first one separates.

    Raises:
        UserInputError: On a pair without ``=`` or with an empty key
    """
    properties: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise UserInputError(f"Invalid property filter '{pair}'. Use key=value")
        properties[key] = value
    return properties


def session_filter(session_id: str) -> FilterNode:
    """Filter matching every request tagged with a session id."""
    return LeafFilter(REQUEST_TABLE, ("properties", SESSION_ID_PROPERTY), "equals", session_id)
