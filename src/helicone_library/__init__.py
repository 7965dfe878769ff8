# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""Filtered queries, paginated export and sample metrics for Helicone logs."""

from .client import AnalyticsClient, GatewayClient, HeliconeClient, create_client
from .core.errors import ConfigError, HeliconeError, OutputError, UserInputError
from .core.types import ALL, ApiResult, BranchFilter, LeafFilter, QueryParams
from .filters import FilterConditions, build_filter, combine_filters

__all__ = [
    "ALL",
    "AnalyticsClient",
    "ApiResult",
    "BranchFilter",
    "ConfigError",
    "FilterConditions",
    "GatewayClient",
    "HeliconeClient",
    "HeliconeError",
    "LeafFilter",
    "OutputError",
    "QueryParams",
    "UserInputError",
    "build_filter",
    "combine_filters",
    "create_client",
]
