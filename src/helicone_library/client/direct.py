# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..core.constants import API_ENDPOINTS, DEFAULT_REGION, DEFAULT_TIMEOUT
from ..core.types import (
    ALL,
    ApiResult,
    FilterNode,
    QueryParams,
    Record,
    SessionQueryParams,
    UserMetricsQueryParams,
)
from .interface import AnalyticsClient, count_body
from .transport import RetryingTransport

lib_logger = logging.getLogger("helicone_library")


class HeliconeClient(AnalyticsClient):
    """Talks to the Helicone public API directly with an API key."""

    mode = "raw"

    def __init__(
        self,
        api_key: str,
        region: str = DEFAULT_REGION,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **transport_kwargs: Any,
    ):
        base_url = API_ENDPOINTS.get(region, API_ENDPOINTS[DEFAULT_REGION])
        transport_kwargs.setdefault("timeout", DEFAULT_TIMEOUT)
        super().__init__(
            RetryingTransport(base_url, api_key, transport=transport, **transport_kwargs)
        )
        self.region = region
        lib_logger.debug(f"Direct client for region '{region}' at {base_url}")

    async def query_requests(self, params: QueryParams) -> ApiResult[List[Record]]:
        return await self._transport.request(
            "POST", "/v1/request/query-clickhouse", json=params.to_body()
        )

    async def count_requests(self, filter_node: FilterNode = ALL) -> ApiResult[int]:
        return await self._transport.request(
            "POST", "/v1/request/count/query", json=count_body(filter_node)
        )

    async def get_request(
        self, request_id: str, include_body: bool = False
    ) -> ApiResult[Record]:
        params = {"includeBody": "true"} if include_body else None
        return await self._transport.request(
            "GET", f"/v1/request/{request_id}", params=params
        )

    async def query_sessions(
        self, params: SessionQueryParams
    ) -> ApiResult[List[Record]]:
        return await self._transport.request(
            "POST", "/v1/session/query", json=params.to_body()
        )

    async def get_sessions_count(
        self, params: SessionQueryParams
    ) -> ApiResult[Dict[str, Any]]:
        return await self._transport.request(
            "POST", "/v1/session/count", json=params.to_body(include_paging=False)
        )

    async def query_user_metrics(
        self, params: UserMetricsQueryParams
    ) -> ApiResult[Dict[str, Any]]:
        return await self._transport.request(
            "POST", "/v1/user/metrics/query", json=params.to_body()
        )

    def _auth_error(self, error: str) -> str:
        if "401" in error:
            return "Invalid API key"
        return error
