# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

"""Tests for the helicone command line."""

import json

import httpx
import pytest
from click.testing import CliRunner

from helicone_cli import __version__
from helicone_cli.main import cli
from helicone_library import config
from helicone_library.client import GatewayClient


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def use_client(monkeypatch):
    """Route every command's client construction to the given fake."""

    def install(client):
        monkeypatch.setattr("helicone_cli.options.create_client", lambda **kwargs: client)
        return client

    return install


def make_records(factory, n):
    return [factory(i) for i in range(n)]


class TestRequestsList:
    """Tests for `helicone requests list`."""

    def test_json_output(self, runner, use_client, fake_client_cls, request_factory):
        records = make_records(request_factory, 2)
        client = use_client(fake_client_cls(records=records))

        result = runner.invoke(cli, ["requests", "list", "-f", "json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == records
        assert client.closed

    def test_json_field_projection(self, runner, use_client, fake_client_cls, request_factory):
        use_client(fake_client_cls(records=make_records(request_factory, 1)))

        result = runner.invoke(
            cli, ["requests", "list", "-f", "json", "--fields", "request_id,latency_ms"]
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == [
            {"request_id": "req-0000-aaaaaaaaaaaaaaaaaaaa", "latency_ms": 100}
        ]

    def test_user_filter_is_anded_with_flags(self, runner, use_client, fake_client_cls):
        client = use_client(fake_client_cls())
        user_tree = {"request_response_rmt": {"status": {"equals": 500}}}

        runner.invoke(
            cli,
            ["requests", "list", "--model", "gpt-4", "--filter", json.dumps(user_tree)],
        )

        params = client.calls[0][1]
        tree = params.filter.to_json()
        assert tree["operator"] == "and"
        assert tree["left"] == user_tree
        # Derived side: model, then the default --since window
        assert tree["right"]["left"] == {"request_response_rmt": {"model": {"equals": "gpt-4"}}}

    def test_table_shows_total_on_full_page(
        self, runner, use_client, fake_client_cls, request_factory
    ):
        use_client(fake_client_cls(records=make_records(request_factory, 2), count=40))

        result = runner.invoke(cli, ["requests", "list", "-n", "2"])

        assert result.exit_code == 0, result.output
        assert "Showing 2 of 40 results" in result.output

    def test_no_results(self, runner, use_client, fake_client_cls):
        use_client(fake_client_cls())

        result = runner.invoke(cli, ["requests", "list"])

        assert result.exit_code == 0
        assert "No requests found" in result.output

    def test_bad_since_fails_before_connecting(self, runner, monkeypatch):
        created = []
        monkeypatch.setattr(
            "helicone_cli.options.create_client", lambda **kwargs: created.append(kwargs)
        )

        result = runner.invoke(cli, ["requests", "list", "--since", "yesterday"])

        assert result.exit_code == 1
        assert "Invalid date format" in result.output
        assert created == []

    def test_filter_and_filter_file_conflict(self, runner, tmp_path):
        path = tmp_path / "f.json"
        path.write_text('"all"', encoding="utf-8")

        result = runner.invoke(
            cli, ["requests", "list", "--filter", '"all"', "--filter-file", str(path)]
        )

        assert result.exit_code == 1
        assert "not both" in result.output

    def test_api_error(self, runner, use_client, fake_client_cls):
        use_client(fake_client_cls(query_error="API error 500: boom"))

        result = runner.invoke(cli, ["requests", "list"])

        assert result.exit_code == 1
        assert "API error 500: boom" in result.output

    def test_missing_api_key(self, runner):
        result = runner.invoke(cli, ["requests", "list"])

        assert result.exit_code == 1
        assert "No API key found" in result.output


class TestRequestsGet:
    """Tests for `helicone requests get`."""

    DETAIL = {
        "request_id": "r1",
        "model": "gpt-4o",
        "response_status": 200,
        "response_body": {"choices": [{"message": {"content": "hello there"}}]},
    }

    def test_extract_string(self, runner, use_client, fake_client_cls):
        client = use_client(fake_client_cls(detail=self.DETAIL))

        result = runner.invoke(
            cli,
            ["requests", "get", "r1", "--extract", "response_body.choices[0].message.content"],
        )

        assert result.exit_code == 0, result.output
        assert result.stdout == "hello there\n"
        assert client.calls[0] == ("get_request", "r1", True)

    def test_raw(self, runner, use_client, fake_client_cls):
        use_client(fake_client_cls(detail=self.DETAIL))

        result = runner.invoke(cli, ["requests", "get", "r1", "--raw"])

        assert json.loads(result.stdout) == self.DETAIL

    def test_bodyless_section_skips_body(self, runner, use_client, fake_client_cls):
        client = use_client(fake_client_cls(detail=self.DETAIL))

        result = runner.invoke(cli, ["requests", "get", "r1", "--show", "metadata"])

        assert result.exit_code == 0, result.output
        assert client.calls[0] == ("get_request", "r1", False)

    def test_unknown_section(self, runner, use_client, fake_client_cls):
        use_client(fake_client_cls(detail=self.DETAIL))

        result = runner.invoke(cli, ["requests", "get", "r1", "--show", "bogus"])

        assert result.exit_code == 1
        assert "Unknown section: bogus" in result.output

    def test_not_found(self, runner, use_client, fake_client_cls):
        use_client(fake_client_cls())

        result = runner.invoke(cli, ["requests", "get", "nope"])

        assert result.exit_code == 1
        assert "API error 404" in result.output


class TestRequestsExport:
    """Tests for `helicone requests export`."""

    def test_json_export(self, runner, use_client, fake_client_cls, request_factory, tmp_path):
        records = make_records(request_factory, 3)
        use_client(fake_client_cls(records=records))
        path = tmp_path / "out.json"

        result = runner.invoke(
            cli,
            ["requests", "export", "-f", "json", "-o", str(path), "--batch-size", "2", "-q"],
        )

        assert result.exit_code == 0, result.output
        assert json.loads(path.read_text(encoding="utf-8")) == records
        assert "Exported 3 records" in result.output

    def test_csv_export_with_fields(
        self, runner, use_client, fake_client_cls, request_factory, tmp_path
    ):
        use_client(fake_client_cls(records=make_records(request_factory, 2)))
        path = tmp_path / "out.csv"

        result = runner.invoke(
            cli,
            ["requests", "export", "-f", "csv", "--fields", "request_id,cost", "-o", str(path), "-q"],
        )

        assert result.exit_code == 0, result.output
        assert path.read_text(encoding="utf-8").splitlines() == [
            "request_id,cost",
            "req-0000-aaaaaaaaaaaaaaaaaaaa,0.1",
            "req-0001-aaaaaaaaaaaaaaaaaaaa,0.1",
        ]

    def test_unwritable_output_path(
        self, runner, use_client, fake_client_cls, request_factory, tmp_path
    ):
        use_client(fake_client_cls(records=make_records(request_factory, 2)))
        path = tmp_path / "missing-dir" / "out.jsonl"

        result = runner.invoke(cli, ["requests", "export", "-o", str(path), "-q"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Could not write" in result.output
        assert not path.exists()

    def test_empty_export_creates_no_file(self, runner, use_client, fake_client_cls, tmp_path):
        use_client(fake_client_cls())
        path = tmp_path / "out.jsonl"

        result = runner.invoke(cli, ["requests", "export", "-o", str(path), "-q"])

        assert result.exit_code == 0
        assert "No requests found" in result.output
        assert not path.exists()

    def test_failed_batch_exits_nonzero(
        self, runner, use_client, fake_client_cls, request_factory, tmp_path
    ):
        use_client(fake_client_cls(records=make_records(request_factory, 5), fail_at_offset=2))
        path = tmp_path / "out.jsonl"

        result = runner.invoke(
            cli, ["requests", "export", "-o", str(path), "--batch-size", "2", "-q"]
        )

        assert result.exit_code == 1
        assert "API error 500: boom" in result.output
        assert len(path.read_text(encoding="utf-8").splitlines()) == 2

    def test_batch_size_is_capped(self, runner):
        result = runner.invoke(cli, ["requests", "export", "--batch-size", "5000"])

        assert result.exit_code == 2


class TestSessions:
    """Tests for `helicone sessions`."""

    def test_gateway_mode_is_unsupported(self, runner, use_client):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=[])

        use_client(
            GatewayClient("https://gw.example.com", "tok", transport=httpx.MockTransport(handler))
        )

        result = runner.invoke(cli, ["sessions", "list"])

        assert result.exit_code == 1
        assert "not supported in gateway mode" in result.output
        assert calls == []

    def test_get_missing_session(self, runner, use_client, fake_client_cls):
        use_client(fake_client_cls())

        result = runner.invoke(cli, ["sessions", "get", "s-missing"])

        assert result.exit_code == 1
        assert "Session not found: s-missing" in result.output

    def test_get_with_requests(self, runner, use_client, fake_client_cls):
        session = {"session_id": "s1", "session_name": "chat", "total_requests": 1}
        use_client(
            fake_client_cls(sessions=[session], session_requests={"s1": [{"request_id": "a"}]})
        )

        result = runner.invoke(cli, ["sessions", "get", "s1", "--include-requests"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"session": session, "requests": [{"request_id": "a"}]}

    def test_list_json(self, runner, use_client, fake_client_cls):
        sessions = [{"session_id": "s1"}, {"session_id": "s2"}]
        client = use_client(fake_client_cls(sessions=sessions))

        result = runner.invoke(cli, ["sessions", "list", "-f", "json", "--name", "chat"])

        assert json.loads(result.stdout) == sessions
        assert client.calls[0][1].name_equals == "chat"


class TestMetrics:
    """Tests for `helicone metrics`."""

    def test_summary_json(self, runner, use_client, fake_client_cls, request_factory):
        use_client(fake_client_cls(records=make_records(request_factory, 10), count=100))

        result = runner.invoke(cli, ["metrics", "summary", "-f", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["totalRequests"] == 100
        assert data["sampleSize"] == 10
        assert data["estimatedTotalCost"] == pytest.approx(10.0)
        assert set(data["timeRange"]) == {"start", "end"}

    def test_summary_with_count_but_no_records(self, runner, use_client, fake_client_cls):
        use_client(fake_client_cls(records=[], count=5))

        result = runner.invoke(cli, ["metrics", "summary", "-f", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["totalRequests"] == 5
        assert data["sampleSize"] == 0
        assert data["estimatedTotalCost"] == 0.0

    def test_sample_limit_follows_config(
        self, runner, use_client, fake_client_cls, monkeypatch
    ):
        monkeypatch.setenv("HELICONE_SAMPLE_LIMIT", "25")
        client = use_client(fake_client_cls())

        runner.invoke(cli, ["metrics", "summary", "-f", "json"])

        assert client.calls[1][1].limit == 25

    def test_errors_json(self, runner, use_client, fake_client_cls, request_factory):
        records = [request_factory(0), request_factory(1, response_status=500)]
        client = use_client(fake_client_cls(records=records))

        result = runner.invoke(cli, ["metrics", "errors", "-f", "json"])

        data = json.loads(result.stdout)
        assert data["totalErrors"] == 1
        assert data["errorRate"] == pytest.approx(50.0)
        assert client.call_names() == ["query_requests"]

    def test_cost_by_model_json(self, runner, use_client, fake_client_cls, request_factory):
        use_client(fake_client_cls(records=make_records(request_factory, 4)))

        result = runner.invoke(cli, ["metrics", "cost", "-f", "json"])

        data = json.loads(result.stdout)
        assert data["grouping"] == "model"
        assert data["groups"]["gpt-4o"]["count"] == 4
        assert data["totalCost"] == pytest.approx(0.4)

    def test_cost_by_user_json(self, runner, use_client, fake_client_cls):
        users = [{"user_id": "u1", "cost": 2, "total_requests": 3}]
        use_client(fake_client_cls(users=users))

        result = runner.invoke(cli, ["metrics", "cost", "--by", "user", "-f", "json"])

        data = json.loads(result.stdout)
        assert data["grouping"] == "user"
        assert data["totalRequests"] == 3
        assert data["users"][0]["user_id"] == "u1"


class TestAuth:
    """Tests for `helicone auth`."""

    def test_login_stores_key(self, runner, monkeypatch):
        async def accept(api_key, region):
            return None

        monkeypatch.setattr("helicone_cli.commands.auth.verify_api_key", accept)

        result = runner.invoke(
            cli, ["auth", "login", "--api-key", "sk-helicone-abcdef123456", "--region", "eu"]
        )

        assert result.exit_code == 0, result.output
        assert config.get_api_key() == "sk-helicone-abcdef123456"
        assert config.get_region() == "eu"

        whoami = runner.invoke(cli, ["auth", "whoami"])
        assert "sk-h...3456" in whoami.output
        assert "EU" in whoami.output

    def test_login_rejected_key(self, runner, monkeypatch):
        async def reject(api_key, region):
            return "Invalid API key"

        monkeypatch.setattr("helicone_cli.commands.auth.verify_api_key", reject)

        result = runner.invoke(cli, ["auth", "login", "--api-key", "bad"])

        assert result.exit_code == 1
        assert "Authentication failed: Invalid API key" in result.output
        assert "--region eu" in result.output
        assert config.get_api_key() is None

    def test_logout_without_credentials(self, runner):
        result = runner.invoke(cli, ["auth", "logout"])

        assert result.exit_code == 0
        assert "No stored credentials found" in result.output

    def test_gateway_credentials(self, runner):
        result = runner.invoke(
            cli, ["auth", "gateway", "--gateway-url", "https://gw.example", "--gateway-token", "t"]
        )

        assert result.exit_code == 0, result.output
        assert config.get_mode() == "gateway"
        assert config.get_gateway_token() == "t"


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert __version__ in result.output
