"""Tests for the command line interface."""

import json
import sys
from pathlib import Path

import httpx
import pytest

from misp_search import cli
from misp_search.cli import CLIArgs, build_parser, build_query, run
from misp_search.query import AttributeQuery, EventQuery


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "misp.yaml"
    path.write_text("protocol: https\nhost: misp.example.org\napi-key: secret\n")
    return path


def _filters(argv: list[str]) -> dict:
    ns = build_parser().parse_args(argv)
    return {k.removeprefix("filter:"): v for k, v in vars(ns).items() if k.startswith("filter:") and v is not None}


class TestParser:
    """Tests for argument parsing."""

    def test_event_filters(self) -> None:
        filters = _filters(["events", "--last", "1d", "--from", "2021-01-01", "--searchall", "1"])
        assert filters == {"last": "1d", "from": "2021-01-01", "searchall": 1}

    def test_attribute_filters(self) -> None:
        assert _filters(["attributes", "--type", "domain", "--eventid", "3"]) == {
            "type": "domain",
            "eventid": "3",
        }

    def test_attributes_reject_event_only_filters(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["attributes", "--quickfilter", "x"])

    def test_export_flags(self) -> None:
        ns = build_parser().parse_args(["export", "domain", "false"])
        assert ns.flags == ["domain", "false"]


class TestBuildQuery:
    """Tests for query construction from CLI args."""

    def test_events(self, config_file: Path) -> None:
        args = CLIArgs(command="events", config=config_file, filters={"last": "1d", "withAttachments": "1"})
        query = build_query(args)
        assert isinstance(query, EventQuery)
        assert json.loads(query.prepare()) == {"request": {"last": "1d", "withAttachments": "1"}}

    def test_attributes(self, config_file: Path) -> None:
        args = CLIArgs(command="attributes", config=config_file, filters={"value": "x"})
        assert isinstance(build_query(args), AttributeQuery)

    def test_config_must_exist(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Config file not found"):
            CLIArgs(command="events", config=tmp_path / "missing.yaml")


class TestRun:
    """Tests for command execution against a mocked server."""

    async def test_search_prints_records(
        self,
        config_file: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        async def mock_send(self, request, **kwargs):
            return httpx.Response(
                200,
                json={"response": {"Attribute": [{"id": "1", "value": "x"}, {"id": "2", "value": "y"}]}},
                request=request,
            )

        monkeypatch.setattr(httpx.AsyncClient, "send", mock_send)

        args = CLIArgs(command="attributes", config=config_file, filters={"last": "1d"})
        assert await run(args) == 0

        out = capsys.readouterr().out.splitlines()
        assert [json.loads(line)["value"] for line in out] == ["x", "y"]

    async def test_search_failure_exit_code(
        self,
        config_file: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        async def mock_send(self, request, **kwargs):
            return httpx.Response(403, text="Forbidden", request=request)

        monkeypatch.setattr(httpx.AsyncClient, "send", mock_send)

        args = CLIArgs(command="events", config=config_file)
        assert await run(args) == 1

    async def test_export_prints_deduplicated_lines(
        self,
        config_file: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        async def mock_send(self, request, **kwargs):
            return httpx.Response(200, text="a\nb\na\nc\n", request=request)

        monkeypatch.setattr(httpx.AsyncClient, "send", mock_send)

        args = CLIArgs(command="export", config=config_file, flags=["domain"])
        assert await run(args) == 0
        assert capsys.readouterr().out.splitlines() == ["a", "b", "c"]


def test_main_reports_missing_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(sys, "argv", ["misp-search", "-c", str(tmp_path / "none.yaml"), "events"])
    with pytest.raises(SystemExit) as exc_info:
        cli.main()
    assert exc_info.value.code == 1
