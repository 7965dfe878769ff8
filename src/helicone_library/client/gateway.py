# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Backend for an intermediary gateway that proxies the request endpoints.

The gateway only exposes request query/count/get. Session and user-metric
operations answer with an error value and perform no I/O.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..core.constants import GATEWAY_TIMEOUT
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

SESSIONS_UNSUPPORTED = "Sessions are not supported in gateway mode"
USER_METRICS_UNSUPPORTED = "User metrics are not supported in gateway mode"


class GatewayClient(AnalyticsClient):
    mode = "gateway"

    def __init__(
        self,
        base_url: str,
        token: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **transport_kwargs: Any,
    ):
        transport_kwargs.setdefault("timeout", GATEWAY_TIMEOUT)
        super().__init__(
            RetryingTransport(base_url, token, transport=transport, **transport_kwargs)
        )
        self.base_url = self._transport.base_url
        lib_logger.debug(f"Gateway client at {self.base_url}")

    async def query_requests(self, params: QueryParams) -> ApiResult[List[Record]]:
        return await self._transport.request(
            "POST", "/v1/helicone/requests/query", json=params.to_body()
        )

    async def count_requests(self, filter_node: FilterNode = ALL) -> ApiResult[int]:
        return await self._transport.request(
            "POST", "/v1/helicone/requests/count", json=count_body(filter_node)
        )

    async def get_request(
        self, request_id: str, include_body: bool = False
    ) -> ApiResult[Record]:
        params = {"includeBody": "true"} if include_body else None
        return await self._transport.request(
            "GET", f"/v1/helicone/requests/{request_id}", params=params
        )

    async def query_sessions(
        self, params: SessionQueryParams
    ) -> ApiResult[List[Record]]:
        return ApiResult.failure(SESSIONS_UNSUPPORTED)

    async def get_sessions_count(
        self, params: SessionQueryParams
    ) -> ApiResult[Dict[str, Any]]:
        return ApiResult.failure(SESSIONS_UNSUPPORTED)

    async def query_user_metrics(
        self, params: UserMetricsQueryParams
    ) -> ApiResult[Dict[str, Any]]:
        return ApiResult.failure(USER_METRICS_UNSUPPORTED)
