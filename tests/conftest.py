# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""Shared fixtures: an isolated config directory and an in-memory client."""

from typing import Any, Dict, List, Optional

import pytest

from helicone_library.client.interface import AnalyticsClient
from helicone_library.core.constants import SESSION_ID_PROPERTY
from helicone_library.core.types import (
    ALL,
    ApiResult,
    LeafFilter,
    QueryParams,
    SessionQueryParams,
    UserMetricsQueryParams,
)

ENV_VARS = (
    "HELICONE_API_KEY",
    "HELICONE_REGION",
    "HELICONE_MODE",
    "HELICONE_GATEWAY_URL",
    "HELICONE_GATEWAY_TOKEN",
    "HELICONE_SAMPLE_LIMIT",
    "HELICONE_GATEWAY_SAMPLE_LIMIT",
    "GATEWAY_URL",
    "GATEWAY_TOKEN",
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config store at a temp dir and clear credential env vars."""
    config_dir = tmp_path / "helicone-config"
    monkeypatch.setenv("HELICONE_CONFIG_DIR", str(config_dir))
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return config_dir


class FakeClient(AnalyticsClient):
    """In-memory AnalyticsClient that records every call."""

    mode = "raw"

    def __init__(
        self,
        records: Optional[List[Dict[str, Any]]] = None,
        count: Optional[int] = None,
        count_error: Optional[str] = None,
        query_error: Optional[str] = None,
        fail_at_offset: Optional[int] = None,
        detail: Optional[Dict[str, Any]] = None,
        sessions: Optional[List[Dict[str, Any]]] = None,
        session_requests: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        users: Optional[List[Dict[str, Any]]] = None,
        bodies: Optional[Dict[str, Dict[str, Any]]] = None,
    ):
        self.records = records or []
        self.count = len(self.records) if count is None else count
        self.count_error = count_error
        self.query_error = query_error
        self.fail_at_offset = fail_at_offset
        self.detail = detail
        self.sessions = sessions or []
        self.session_requests = session_requests or {}
        self.users = users or []
        self.bodies = bodies or {}
        self.calls: List[tuple] = []
        self.closed = False

    async def query_requests(self, params: QueryParams):
        self.calls.append(("query_requests", params))
        node = params.filter
        if isinstance(node, LeafFilter) and node.path == ("properties", SESSION_ID_PROPERTY):
            return ApiResult.success(self.session_requests.get(node.value, []))
        if self.query_error:
            return ApiResult.failure(self.query_error)
        if self.fail_at_offset is not None and params.offset >= self.fail_at_offset:
            return ApiResult.failure("API error 500: boom")
        end = params.offset + min(params.limit, 1000)
        return ApiResult.success(self.records[params.offset:end])

    async def count_requests(self, filter_node=ALL):
        self.calls.append(("count_requests", filter_node))
        if self.count_error:
            return ApiResult.failure(self.count_error)
        return ApiResult.success(self.count)

    async def get_request(self, request_id, include_body=False):
        self.calls.append(("get_request", request_id, include_body))
        if self.detail is None:
            return ApiResult.failure("API error 404: not found")
        return ApiResult.success(self.detail)

    async def query_sessions(self, params: SessionQueryParams):
        self.calls.append(("query_sessions", params))
        return ApiResult.success(self.sessions[params.offset:params.offset + params.limit])

    async def get_sessions_count(self, params: SessionQueryParams):
        self.calls.append(("get_sessions_count", params))
        return ApiResult.success({"count": len(self.sessions), "total_cost": 0})

    async def query_user_metrics(self, params: UserMetricsQueryParams):
        self.calls.append(("query_user_metrics", params))
        return ApiResult.success({"users": self.users, "count": len(self.users)})

    async def fetch_signed_body(self, url):
        self.calls.append(("fetch_signed_body", url))
        return self.bodies.get(url, {})

    async def aclose(self):
        self.closed = True

    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]


@pytest.fixture
def fake_client_cls():
    return FakeClient


def make_request(index: int = 0, **overrides: Any) -> Dict[str, Any]:
    record = {
        "request_id": f"req-{index:04d}-aaaaaaaaaaaaaaaaaaaa",
        "request_created_at": "2024-03-01T12:00:00.000Z",
        "model": "gpt-4o",
        "provider": "OPENAI",
        "response_status": 200,
        "delay_ms": 100,
        "total_tokens": 10,
        "cost": 0.1,
        "request_user_id": "user-1",
    }
    record.update(overrides)
    return record


@pytest.fixture
def request_factory():
    return make_request
