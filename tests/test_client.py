"""Tests for rsshub_mcp/client.py and the run_client.py CLI helpers."""

import asyncio
import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from mcp.types import CallToolResult, TextContent

from rsshub_mcp.client import DEFAULT_URL, MCPClient, ToolCallError, default_url
from run_client import parse_arguments


def connected_client(result: CallToolResult) -> MCPClient:
    client = MCPClient()
    client.session = MagicMock()
    client.session.call_tool = AsyncMock(return_value=result)
    return client


class TestMCPClient:
    def test_default_url(self):
        with patch.dict(os.environ, {}, clear=True):
            assert default_url() == DEFAULT_URL

    def test_url_from_env(self):
        with patch.dict(os.environ, {"RSSHUB_MCP_URL": "http://10.0.0.2:9000/mcp"}):
            assert MCPClient().url == "http://10.0.0.2:9000/mcp"

    def test_call_tool_returns_text(self):
        client = connected_client(CallToolResult(content=[TextContent(type="text", text="hi")], isError=False))
        assert asyncio.run(client.call_tool("get_categories")) == "hi"
        client.session.call_tool.assert_awaited_once_with("get_categories", {})

    def test_call_tool_error(self):
        result = CallToolResult(content=[TextContent(type="text", text="Namespace 'x' not found")], isError=True)
        client = connected_client(result)
        with pytest.raises(ToolCallError, match="not found"):
            asyncio.run(client.call_tool("get_namespace", {"namespace": "x"}))

    def test_not_connected(self):
        with pytest.raises(RuntimeError):
            asyncio.run(MCPClient().call_tool("get_categories"))


class TestParseArguments:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            (None, {}),
            ("", {}),
            ('{"namespace": "bilibili"}', {"namespace": "bilibili"}),
            ("not json", {}),
            ("[1, 2]", {}),
        ],
    )
    def test_parse(self, raw, expected):
        assert parse_arguments(raw) == expected
