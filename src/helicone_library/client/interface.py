# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Backend-neutral analytics client interface.

Commands, the export engine and the aggregation engine depend only on this
interface; the direct and gateway backends are interchangeable behind it.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..core.types import (
    ALL,
    ApiResult,
    FilterNode,
    QueryParams,
    Record,
    SessionQueryParams,
    UserMetricsQueryParams,
)
from .transport import RetryingTransport


def count_body(filter_node: FilterNode) -> Dict[str, Any]:
    return {
        "filter": filter_node.to_json(),
        "isCached": False,
        "includeInputs": False,
        "isScored": False,
        "isPartOfExperiment": False,
    }


class AnalyticsClient(ABC):
    """
    Abstract analytics backend.

    Every operation returns an ApiResult; callers check ``error`` at each
    call site. Use as an async context manager to release the connection
    pool.
    """

    mode: str = ""

    def __init__(self, transport: RetryingTransport):
        self._transport = transport

    @abstractmethod
    async def query_requests(self, params: QueryParams) -> ApiResult[List[Record]]:
        pass

    @abstractmethod
    async def count_requests(self, filter_node: FilterNode = ALL) -> ApiResult[int]:
        pass

    @abstractmethod
    async def get_request(
        self, request_id: str, include_body: bool = False
    ) -> ApiResult[Record]:
        pass

    @abstractmethod
    async def query_sessions(
        self, params: SessionQueryParams
    ) -> ApiResult[List[Record]]:
        pass

    @abstractmethod
    async def get_sessions_count(
        self, params: SessionQueryParams
    ) -> ApiResult[Dict[str, Any]]:
        pass

    @abstractmethod
    async def query_user_metrics(
        self, params: UserMetricsQueryParams
    ) -> ApiResult[Dict[str, Any]]:
        pass

    async def fetch_signed_body(self, url: str) -> Dict[str, Any]:
        """Fetch a pre-signed body document. Returns {} on any failure."""
        return await self._transport.fetch_json_object(url)

    async def verify_auth(self) -> ApiResult[Dict[str, Any]]:
        result = await self.query_requests(QueryParams(limit=1))
        if result.error:
            return ApiResult.failure(self._auth_error(result.error))
        return ApiResult.success({"valid": True})

    def _auth_error(self, error: str) -> str:
        return error

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def __aenter__(self) -> "AnalyticsClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> Optional[bool]:
        await self.aclose()
        return None
