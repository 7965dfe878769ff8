# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Shared type definitions for the helicone library.

This module contains the filter-tree sum type, the query parameter
dataclasses sent to the remote service and the ApiResult value every client
call returns.
"""

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from typing import (
    Any,
    Dict,
    Generic,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

from .constants import (
    DEFAULT_QUERY_LIMIT,
    DEFAULT_SESSION_QUERY_LIMIT,
    DEFAULT_USER_METRICS_LIMIT,
    MAX_QUERY_LIMIT,
)
from .errors import UserInputError

T = TypeVar("T")

# Records are opaque JSON objects owned by the remote service
Record = Dict[str, Any]


# =============================================================================
# FILTER TREE
# =============================================================================

FILTER_OPERATORS = frozenset(
    {
        "equals",
        "not-equals",
        "contains",
        "not-contains",
        "like",
        "ilike",
        "gte",
        "lte",
        "gt",
        "lt",
    }
)

BRANCH_OPERATORS = ("and", "or")

FilterValue = Union[str, int, float, bool]


@dataclass(frozen=True)
class AllFilter:
    """The neutral filter. Matches every record."""

    def to_json(self) -> str:
        return "all"


ALL = AllFilter()


@dataclass(frozen=True)
class LeafFilter:
    """
    A single field/operator/value test.

    Serialises to ``{table: {path[0]: ... {operator: value}}}``. ``path`` holds
    one field name, or two for keyed columns such as
    ``("properties", "environment")``.
    """

    table: str
    path: Tuple[str, ...]
    operator: str
    value: FilterValue

    def __post_init__(self):
        if not self.path:
            raise UserInputError(f"Filter on table '{self.table}' names no field")
        if self.operator not in FILTER_OPERATORS:
            raise UserInputError(
                f"Unknown filter operator '{self.operator}'. "
                f"Use one of: {', '.join(sorted(FILTER_OPERATORS))}"
            )

    def to_json(self) -> Dict[str, Any]:
        node: Dict[str, Any] = {self.operator: self.value}
        for part in reversed(self.path):
            node = {part: node}
        return {self.table: node}


@dataclass(frozen=True)
class BranchFilter:
    """An AND/OR combination of two subtrees."""

    left: "FilterNode"
    operator: str
    right: "FilterNode"

    def __post_init__(self):
        if self.operator not in BRANCH_OPERATORS:
            raise UserInputError(
                f"Unknown branch operator '{self.operator}'. Use 'and' or 'or'"
            )

    def to_json(self) -> Dict[str, Any]:
        return {
            "left": self.left.to_json(),
            "operator": self.operator,
            "right": self.right.to_json(),
        }


FilterNode = Union[AllFilter, LeafFilter, BranchFilter]


# =============================================================================
# QUERY PARAMETERS
# =============================================================================


def _default_sort() -> Dict[str, str]:
    return {"created_at": "desc"}


@dataclass
class QueryParams:
    """
    Parameters for a request query.

    The limit is clamped to MAX_QUERY_LIMIT when the body is built, so callers
    may pass larger values without tripping the remote service.
    """

    filter: FilterNode = ALL
    offset: int = 0
    limit: int = DEFAULT_QUERY_LIMIT
    sort: Dict[str, str] = field(default_factory=_default_sort)
    is_cached: bool = False
    include_inputs: bool = False
    is_part_of_experiment: bool = False
    is_scored: bool = False

    def to_body(self) -> Dict[str, Any]:
        return {
            "filter": self.filter.to_json(),
            "offset": self.offset,
            "limit": min(self.limit, MAX_QUERY_LIMIT),
            "sort": dict(self.sort),
            "isCached": self.is_cached,
            "includeInputs": self.include_inputs,
            "isPartOfExperiment": self.is_part_of_experiment,
            "isScored": self.is_scored,
        }


@dataclass
class SessionQueryParams:
    """Parameters for session queries and session counts."""

    start_time_ms: int
    end_time_ms: int
    search: str = ""
    name_equals: Optional[str] = None
    timezone_difference: int = 0  # minutes, positive west of UTC
    filter: FilterNode = ALL
    offset: int = 0
    limit: int = DEFAULT_SESSION_QUERY_LIMIT

    @classmethod
    def for_range(
        cls, start: datetime, end: datetime, **kwargs: Any
    ) -> "SessionQueryParams":
        return cls(
            start_time_ms=int(start.timestamp() * 1000),
            end_time_ms=int(end.timestamp() * 1000),
            **kwargs,
        )

    def page(self, offset: int, limit: int) -> "SessionQueryParams":
        return dataclasses.replace(self, offset=offset, limit=limit)

    def to_body(self, include_paging: bool = True) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "search": self.search or "",
            "timeFilter": {
                "startTimeUnixMs": self.start_time_ms,
                "endTimeUnixMs": self.end_time_ms,
            },
            "timezoneDifference": self.timezone_difference,
            "filter": self.filter.to_json(),
        }
        if self.name_equals is not None:
            body["nameEquals"] = self.name_equals
        if include_paging:
            body["offset"] = self.offset
            body["limit"] = self.limit
        return body


@dataclass
class UserMetricsQueryParams:
    """Parameters for the per-user aggregate endpoint."""

    start_time_s: int
    end_time_s: int
    filter: FilterNode = ALL
    offset: int = 0
    limit: int = DEFAULT_USER_METRICS_LIMIT

    @classmethod
    def for_range(
        cls, start: datetime, end: datetime, **kwargs: Any
    ) -> "UserMetricsQueryParams":
        return cls(
            start_time_s=int(start.timestamp()),
            end_time_s=int(end.timestamp()),
            **kwargs,
        )

    def to_body(self) -> Dict[str, Any]:
        return {
            "filter": self.filter.to_json(),
            "offset": self.offset,
            "limit": self.limit,
            "timeFilter": {
                "startTimeUnixSeconds": self.start_time_s,
                "endTimeUnixSeconds": self.end_time_s,
            },
        }


# =============================================================================
# RESULT / AUTH TYPES
# =============================================================================


@dataclass
class ApiResult(Generic[T]):
    """
    Outcome of a client call.

    Exactly one of ``data`` and ``error`` is meaningful. Callers must check
    ``ok`` (or ``error``) explicitly; client methods never raise for
    transport or API failures.
    """

    data: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: T) -> "ApiResult[T]":
        return cls(data=data, error=None)

    @classmethod
    def failure(cls, error: str) -> "ApiResult[T]":
        return cls(data=None, error=error)


@dataclass
class AuthContext:
    """Credentials for the direct backend."""

    api_key: str
    region: str = "us"


@dataclass
class GatewayContext:
    """Credentials for the intermediary gateway backend."""

    base_url: str
    token: str
