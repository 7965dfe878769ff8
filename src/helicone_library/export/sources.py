# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Record sources for the export engine.

A source adapts one client query family to ``count`` / ``fetch`` /
``enrich``. Enrichment is best-effort: a failed sub-fetch leaves the record
as it came from the page.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..client.interface import AnalyticsClient
from ..core.constants import SESSION_REQUESTS_LIMIT
from ..core.types import (
    ALL,
    ApiResult,
    FilterNode,
    QueryParams,
    Record,
    SessionQueryParams,
)
from ..filters import session_filter

lib_logger = logging.getLogger("helicone_library")


class RecordSource(ABC):
    @abstractmethod
    async def count(self) -> ApiResult[int]:
        pass

    @abstractmethod
    async def fetch(self, offset: int, limit: int) -> ApiResult[List[Record]]:
        pass

    async def enrich(self, record: Record) -> Record:
        return record


class RequestSource(RecordSource):
    """Requests matching a filter, newest first by default."""

    def __init__(
        self,
        client: AnalyticsClient,
        filter_node: FilterNode = ALL,
        sort: Optional[Dict[str, str]] = None,
        include_body: bool = False,
    ):
        self.client = client
        self.filter_node = filter_node
        self.sort = sort or {"created_at": "desc"}
        self.include_body = include_body

    async def count(self) -> ApiResult[int]:
        return await self.client.count_requests(self.filter_node)

    async def fetch(self, offset: int, limit: int) -> ApiResult[List[Record]]:
        return await self.client.query_requests(
            QueryParams(
                filter=self.filter_node,
                offset=offset,
                limit=limit,
                sort=dict(self.sort),
            )
        )

    async def enrich(self, record: Record) -> Record:
        if not self.include_body:
            return record
        return await attach_signed_body(self.client, record)


async def attach_signed_body(client: AnalyticsClient, record: Record) -> Record:
    """Merge the signed body document into request_body/response_body."""
    url = record.get("signed_body_url")
    if not url:
        return record
    body = await client.fetch_signed_body(url)
    if body.get("request"):
        record["request_body"] = body["request"]
    if body.get("response"):
        record["response_body"] = body["response"]
    return record


class SessionSource(RecordSource):
    """Sessions in a time window, optionally with their requests attached."""

    def __init__(
        self,
        client: AnalyticsClient,
        params: SessionQueryParams,
        include_requests: bool = False,
    ):
        self.client = client
        self.params = params
        self.include_requests = include_requests

    async def count(self) -> ApiResult[int]:
        result = await self.client.get_sessions_count(self.params)
        if result.error:
            return ApiResult.failure(result.error)
        data = result.data if isinstance(result.data, dict) else {}
        return ApiResult.success(int(data.get("count") or 0))

    async def fetch(self, offset: int, limit: int) -> ApiResult[List[Record]]:
        return await self.client.query_sessions(self.params.page(offset, limit))

    async def enrich(self, record: Record) -> Record:
        if not self.include_requests:
            return record
        requests = await fetch_session_requests(self.client, record.get("session_id"))
        if requests is not None:
            record = dict(record)
            record["requests"] = requests
        return record


async def fetch_session_requests(
    client: AnalyticsClient, session_id: Optional[str]
) -> Optional[List[Record]]:
    """Up to SESSION_REQUESTS_LIMIT requests of a session, oldest first."""
    if not session_id:
        return None
    result = await client.query_requests(
        QueryParams(
            filter=session_filter(session_id),
            limit=SESSION_REQUESTS_LIMIT,
            sort={"created_at": "asc"},
        )
    )
    if result.error:
        lib_logger.debug(f"Could not fetch requests for session {session_id}: {result.error}")
        return None
    return result.data or []
