# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""Tests for the direct and gateway backends and the client factory."""

import json

import httpx
import pytest

from helicone_library.client import GatewayClient, HeliconeClient, create_client
from helicone_library.client.gateway import SESSIONS_UNSUPPORTED, USER_METRICS_UNSUPPORTED
from helicone_library.core.errors import ConfigError
from helicone_library.core.types import (
    ALL,
    LeafFilter,
    QueryParams,
    SessionQueryParams,
    UserMetricsQueryParams,
)


class Capture:
    """MockTransport handler answering every call with one response."""

    def __init__(self, status=200, payload=None):
        self.status = status
        self.payload = [] if payload is None else payload
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        return httpx.Response(self.status, json=self.payload)

    @property
    def last(self):
        return self.requests[-1]

    def last_body(self):
        return json.loads(self.last.content)


def direct(capture, region="us"):
    return HeliconeClient("sk-test", region, transport=httpx.MockTransport(capture))


def gateway(capture):
    return GatewayClient(
        "https://gw.example.com/", "gw-token", transport=httpx.MockTransport(capture)
    )


class TestHeliconeClient:
    """Tests for the direct backend's endpoints and bodies."""

    @pytest.mark.asyncio
    async def test_query_requests_clamps_limit(self):
        capture = Capture(payload={"data": [], "error": None})
        async with direct(capture) as client:
            result = await client.query_requests(QueryParams(limit=5000, offset=2000))

        assert result.ok
        assert capture.last.method == "POST"
        assert str(capture.last.url) == "https://api.helicone.ai/v1/request/query-clickhouse"
        body = capture.last_body()
        assert body["limit"] == 1000
        assert body["offset"] == 2000
        assert body["filter"] == "all"
        assert body["sort"] == {"created_at": "desc"}

    @pytest.mark.asyncio
    async def test_eu_region(self):
        capture = Capture(payload={"data": 7, "error": None})
        async with direct(capture, region="eu") as client:
            result = await client.count_requests(ALL)

        assert result.data == 7
        assert str(capture.last.url) == "https://eu.api.helicone.ai/v1/request/count/query"
        assert capture.last_body() == {
            "filter": "all",
            "isCached": False,
            "includeInputs": False,
            "isScored": False,
            "isPartOfExperiment": False,
        }

    @pytest.mark.asyncio
    async def test_get_request_with_body(self):
        capture = Capture(payload={"data": {"request_id": "r1"}, "error": None})
        async with direct(capture) as client:
            result = await client.get_request("r1", include_body=True)

        assert result.data == {"request_id": "r1"}
        assert capture.last.method == "GET"
        assert capture.last.url.path == "/v1/request/r1"
        assert capture.last.url.params["includeBody"] == "true"

    @pytest.mark.asyncio
    async def test_session_count_has_no_paging(self):
        capture = Capture(payload={"data": {"count": 3}, "error": None})
        params = SessionQueryParams(start_time_ms=1000, end_time_ms=2000, name_equals="chat")
        async with direct(capture) as client:
            await client.get_sessions_count(params)

        body = capture.last_body()
        assert capture.last.url.path == "/v1/session/count"
        assert "offset" not in body and "limit" not in body
        assert body["nameEquals"] == "chat"
        assert body["timeFilter"] == {"startTimeUnixMs": 1000, "endTimeUnixMs": 2000}

    @pytest.mark.asyncio
    async def test_user_metrics_body(self):
        capture = Capture(payload={"data": {"users": []}, "error": None})
        params = UserMetricsQueryParams(start_time_s=10, end_time_s=20, limit=50)
        async with direct(capture) as client:
            await client.query_user_metrics(params)

        assert capture.last.url.path == "/v1/user/metrics/query"
        assert capture.last_body()["timeFilter"] == {
            "startTimeUnixSeconds": 10,
            "endTimeUnixSeconds": 20,
        }

    @pytest.mark.asyncio
    async def test_verify_auth_maps_401(self):
        capture = Capture(status=401, payload={"error": "unauthorized"})
        async with direct(capture) as client:
            result = await client.verify_auth()

        assert result.error == "Invalid API key"
        assert capture.last_body()["limit"] == 1

    @pytest.mark.asyncio
    async def test_verify_auth_success(self):
        capture = Capture(payload={"data": [], "error": None})
        async with direct(capture) as client:
            result = await client.verify_auth()

        assert result.data == {"valid": True}


class TestGatewayClient:
    """Tests for the gateway backend."""

    @pytest.mark.asyncio
    async def test_request_endpoints(self):
        capture = Capture(payload=[{"request_id": "r1"}])
        leaf = LeafFilter("request_response_rmt", ("model",), "equals", "gpt-4")
        async with gateway(capture) as client:
            result = await client.query_requests(QueryParams(filter=leaf))
            await client.count_requests(leaf)
            await client.get_request("r1")

        assert result.data == [{"request_id": "r1"}]
        urls = [str(r.url) for r in capture.requests]
        assert urls == [
            "https://gw.example.com/v1/helicone/requests/query",
            "https://gw.example.com/v1/helicone/requests/count",
            "https://gw.example.com/v1/helicone/requests/r1",
        ]
        assert capture.requests[0].headers["Authorization"] == "Bearer gw-token"

    @pytest.mark.asyncio
    async def test_unsupported_operations_do_no_io(self):
        capture = Capture()
        params = SessionQueryParams(start_time_ms=0, end_time_ms=1)
        async with gateway(capture) as client:
            sessions = await client.query_sessions(params)
            count = await client.get_sessions_count(params)
            users = await client.query_user_metrics(UserMetricsQueryParams(0, 1))

        assert sessions.error == SESSIONS_UNSUPPORTED
        assert count.error == SESSIONS_UNSUPPORTED
        assert users.error == USER_METRICS_UNSUPPORTED
        assert capture.requests == []

    @pytest.mark.asyncio
    async def test_verify_auth_keeps_raw_error(self):
        capture = Capture(status=401, payload={"error": "bad token"})
        async with gateway(capture) as client:
            result = await client.verify_auth()

        assert result.error.startswith("API error 401")


class TestCreateClient:
    """Tests for backend selection."""

    def test_raw_mode(self):
        client = create_client(api_key="sk-test", region="eu", transport=httpx.MockTransport(Capture()))
        assert isinstance(client, HeliconeClient)
        assert client.region == "eu"

    def test_gateway_mode(self):
        client = create_client(
            mode="gateway",
            gateway_url="https://gw.example.com",
            gateway_token="tok",
            transport=httpx.MockTransport(Capture()),
        )
        assert isinstance(client, GatewayClient)
        assert client.base_url == "https://gw.example.com"

    def test_gateway_mode_from_env(self, monkeypatch):
        monkeypatch.setenv("HELICONE_MODE", "gateway")
        monkeypatch.setenv("GATEWAY_URL", "https://gw.example.com")
        monkeypatch.setenv("GATEWAY_TOKEN", "tok")
        assert isinstance(create_client(transport=httpx.MockTransport(Capture())), GatewayClient)

    def test_missing_api_key(self):
        with pytest.raises(ConfigError, match="No API key found"):
            create_client()

    def test_gateway_missing_url(self):
        with pytest.raises(ConfigError, match="Gateway URL"):
            create_client(mode="gateway", gateway_token="tok")
