"""Tests for ``wmcp probe``."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

from click.testing import CliRunner

from wmcp.cli import main
from wmcp.cli_commands.probe import run_probe
from wmcp.protocols.errors import ProbeError


def _mock_client(mock_client_cls: MagicMock, *, tools: object = None, endpoint: object = None) -> None:
    mock_instance = mock_client_cls.return_value
    mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
    mock_instance.__aexit__ = AsyncMock(return_value=False)
    mock_instance.list_tools = AsyncMock(
        side_effect=tools if isinstance(tools, Exception) else None,
        return_value=tools,
    )
    mock_instance.open_session = AsyncMock(
        side_effect=endpoint if isinstance(endpoint, Exception) else None,
        return_value=endpoint,
    )


class TestRunProbe:
    async def test_all_checks_pass(self) -> None:
        with patch("wmcp.protocols.client.MessagesClient") as mock_client_cls:
            _mock_client(mock_client_cls, tools=[{"name": "a"}, {"name": "b"}], endpoint="/messages?sessionId=s1")
            results = await run_probe("http://localhost:4001", timeout=3)

        assert results == [
            ("POST /messages", True, "tools/list returned 2 tool(s)"),
            ("GET /sse", True, "endpoint /messages?sessionId=s1"),
        ]
        mock_client_cls.assert_called_once_with("http://localhost:4001", timeout=3)

    async def test_failures_reported_per_check(self) -> None:
        with patch("wmcp.protocols.client.MessagesClient") as mock_client_cls:
            _mock_client(mock_client_cls, tools=ProbeError("HTTP 500"), endpoint="/messages?sessionId=s1")
            results = await run_probe("http://localhost:4001")

        assert results[0] == ("POST /messages", False, "HTTP 500")
        assert results[1][1] is True


class TestProbeCommand:
    def test_ok(self) -> None:
        with patch("wmcp.protocols.client.MessagesClient") as mock_client_cls:
            _mock_client(mock_client_cls, tools=[], endpoint="/messages?sessionId=s")
            result = CliRunner().invoke(main, ["probe"])

        assert result.exit_code == 0
        assert "OK" in result.output
        assert "FAIL" not in result.output

    def test_fail_exits_nonzero(self) -> None:
        with patch("wmcp.protocols.client.MessagesClient") as mock_client_cls:
            _mock_client(mock_client_cls, tools=[], endpoint=ProbeError("GET /sse returned HTTP 404"))
            result = CliRunner().invoke(main, ["probe", "http://localhost:9999"])

        assert result.exit_code == 1
        assert "FAIL" in result.output
        assert "HTTP 404" in result.output
