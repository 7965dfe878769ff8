# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Sample aggregation.

All statistics are computed from an in-hand sample. When the reported
population is larger than the sample, sums (cost, tokens) are scaled up to
population estimates; averages and rates are sample means and are never
rescaled.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.errors import UserInputError
from ..core.types import Record
from ..fields import request_model

COST_GROUPINGS = ("model", "provider", "day", "user")


def coerce_number(value: Any) -> float:
    """Numbers pass through; numeric strings are parsed; anything else is 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return 0.0
    return 0.0


def coerce_tokens(value: Any) -> int:
    # The API sends total_tokens as a string
    return int(coerce_number(value))


def coerce_status(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def resolve_total_count(reported: Optional[int], sample_size: int) -> int:
    """The reported count is advisory; never report fewer than were sampled."""
    return max(reported or 0, sample_size)


def _pct(part: float, whole: float) -> float:
    return (part / whole * 100) if whole > 0 else 0.0


# =============================================================================
# SUMMARY
# =============================================================================


@dataclass
class SummaryMetrics:
    total_requests: int
    sample_size: int
    scale_factor: float
    sample_cost: float
    sample_tokens: int
    estimated_total_cost: float
    estimated_total_tokens: float
    average_latency_ms: float
    average_tokens_per_request: float
    average_cost_per_request: float
    error_rate: float
    success_count: int
    error_count: int
    model_distribution: Dict[str, int] = field(default_factory=dict)
    provider_distribution: Dict[str, int] = field(default_factory=dict)

    @property
    def is_sampled(self) -> bool:
        return self.sample_size < self.total_requests

    def top_models(self, n: int = 5) -> List[Tuple[str, int]]:
        return Counter(self.model_distribution).most_common(n)

    def top_providers(self, n: int = 5) -> List[Tuple[str, int]]:
        return Counter(self.provider_distribution).most_common(n)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalRequests": self.total_requests,
            "sampleSize": self.sample_size,
            "estimatedTotalCost": self.estimated_total_cost,
            "estimatedTotalTokens": self.estimated_total_tokens,
            "averageLatencyMs": self.average_latency_ms,
            "averageTokensPerRequest": self.average_tokens_per_request,
            "averageCostPerRequest": self.average_cost_per_request,
            "errorRate": self.error_rate,
            "successCount": self.success_count,
            "errorCount": self.error_count,
            "modelDistribution": dict(self.model_distribution),
            "providerDistribution": dict(self.provider_distribution),
        }


def aggregate(records: Sequence[Record], total_count: Optional[int]) -> SummaryMetrics:
    """
    Compute summary metrics from a sample.

    ``total_count`` is the reported size of the matching population; it is
    clamped to at least the sample size.
    """
    total_cost = 0.0
    total_tokens = 0
    total_latency = 0.0
    success = 0
    errors = 0
    models: Counter = Counter()
    providers: Counter = Counter()

    for record in records:
        total_cost += coerce_number(record.get("cost"))
        total_tokens += coerce_tokens(record.get("total_tokens"))
        total_latency += coerce_number(record.get("delay_ms"))

        status = coerce_status(record.get("response_status"))
        if status is not None:
            if 200 <= status < 300:
                success += 1
            elif status >= 400:
                errors += 1

        models[request_model(record)] += 1
        providers[record.get("provider") or "unknown"] += 1

    sample_size = len(records)
    total = resolve_total_count(total_count, sample_size)
    scale = total / sample_size if sample_size and total > sample_size else 1.0

    def mean(value: float) -> float:
        return value / sample_size if sample_size else 0.0

    return SummaryMetrics(
        total_requests=total,
        sample_size=sample_size,
        scale_factor=scale,
        sample_cost=total_cost,
        sample_tokens=total_tokens,
        estimated_total_cost=total_cost * scale,
        estimated_total_tokens=total_tokens * scale,
        average_latency_ms=mean(total_latency),
        average_tokens_per_request=mean(total_tokens),
        average_cost_per_request=mean(total_cost),
        error_rate=_pct(errors, sample_size),
        success_count=success,
        error_count=errors,
        model_distribution=dict(models),
        provider_distribution=dict(providers),
    )


# =============================================================================
# COST BREAKDOWN
# =============================================================================


@dataclass
class GroupStats:
    key: str
    cost: float = 0.0
    count: int = 0
    tokens: int = 0
    share: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cost": self.cost,
            "count": self.count,
            "tokens": self.tokens,
            "percent": self.share,
        }


def _day_key(value: Any) -> str:
    if not isinstance(value, str) or not value:
        return "unknown"
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return "unknown"
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).date().isoformat()


def group_key(record: Record, by: str) -> str:
    if by == "model":
        return request_model(record)
    if by == "provider":
        return record.get("provider") or "unknown"
    if by == "day":
        return _day_key(record.get("request_created_at"))
    if by == "user":
        return record.get("request_user_id") or "unknown"
    raise UserInputError(
        f"Unknown grouping '{by}'. Use one of: {', '.join(COST_GROUPINGS)}"
    )


def cost_breakdown(records: Iterable[Record], by: str) -> List[GroupStats]:
    """Group sample cost by ``by``, largest first, with each group's share."""
    if by not in COST_GROUPINGS:
        raise UserInputError(
            f"Unknown grouping '{by}'. Use one of: {', '.join(COST_GROUPINGS)}"
        )

    groups: Dict[str, GroupStats] = {}
    for record in records:
        key = group_key(record, by)
        stats = groups.setdefault(key, GroupStats(key))
        stats.cost += coerce_number(record.get("cost"))
        stats.count += 1
        stats.tokens += coerce_tokens(record.get("total_tokens"))

    total_cost = sum(g.cost for g in groups.values())
    for stats in groups.values():
        stats.share = _pct(stats.cost, total_cost)
    return sorted(groups.values(), key=lambda g: g.cost, reverse=True)


# =============================================================================
# ERRORS
# =============================================================================


@dataclass
class ErrorBreakdown:
    total_requests: int
    total_errors: int
    error_rate: float
    status_counts: List[Tuple[str, int]]
    errors_by_model: List[Tuple[str, int]]

    def status_share(self, count: int) -> float:
        return _pct(count, self.total_requests)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalRequests": self.total_requests,
            "totalErrors": self.total_errors,
            "errorRate": self.error_rate,
            "statusCounts": dict(self.status_counts),
            "errorsByModel": dict(self.errors_by_model),
        }


def error_breakdown(records: Sequence[Record]) -> ErrorBreakdown:
    statuses: Counter = Counter()
    by_model: Counter = Counter()
    total_errors = 0

    for record in records:
        status = coerce_status(record.get("response_status"))
        statuses["unknown" if status is None else str(status)] += 1
        if status is not None and status >= 400:
            total_errors += 1
            by_model[request_model(record)] += 1

    return ErrorBreakdown(
        total_requests=len(records),
        total_errors=total_errors,
        error_rate=_pct(total_errors, len(records)),
        status_counts=statuses.most_common(),
        errors_by_model=by_model.most_common(),
    )


# =============================================================================
# USERS
# =============================================================================


@dataclass
class UserCostRow:
    user_id: str
    cost: float
    requests: int
    prompt_tokens: int
    completion_tokens: int
    first_active: Optional[str] = None
    last_active: Optional[str] = None
    share: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "cost": self.cost,
            "requests": self.requests,
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "first_active": self.first_active,
            "last_active": self.last_active,
        }


@dataclass
class UserCostBreakdown:
    rows: List[UserCostRow]
    total_cost: float
    total_requests: int


def user_cost_breakdown(users: Iterable[Record]) -> UserCostBreakdown:
    """Rows from the per-user metrics endpoint, most expensive first."""
    rows = [
        UserCostRow(
            user_id=str(u.get("user_id") or "unknown"),
            cost=coerce_number(u.get("cost")),
            requests=coerce_tokens(u.get("total_requests")),
            prompt_tokens=coerce_tokens(u.get("total_prompt_tokens")),
            completion_tokens=coerce_tokens(u.get("total_completion_tokens")),
            first_active=u.get("first_active"),
            last_active=u.get("last_active"),
        )
        for u in users
    ]
    rows.sort(key=lambda r: r.cost, reverse=True)
    total_cost = sum(r.cost for r in rows)
    for row in rows:
        row.share = _pct(row.cost, total_cost)
    return UserCostBreakdown(
        rows=rows,
        total_cost=total_cost,
        total_requests=sum(r.requests for r in rows),
    )
