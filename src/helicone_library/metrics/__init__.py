# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

from .aggregator import (
    COST_GROUPINGS,
    SummaryMetrics,
    aggregate,
    cost_breakdown,
    error_breakdown,
    user_cost_breakdown,
)
from .sampling import Sample, fetch_sample

__all__ = [
    "COST_GROUPINGS",
    "Sample",
    "SummaryMetrics",
    "aggregate",
    "cost_breakdown",
    "error_breakdown",
    "fetch_sample",
    "user_cost_breakdown",
]
