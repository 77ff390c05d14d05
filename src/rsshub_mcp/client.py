"""
MCP client for the RSSHub MCP server.

Connects either over streamable HTTP to a running server or over stdio by
spawning one, and calls its tools.
"""

import logging
import os
import sys
from contextlib import AsyncExitStack

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client
from mcp.client.streamable_http import streamablehttp_client

logger = logging.getLogger(__name__)

DEFAULT_URL = "http://127.0.0.1:8000/mcp"


def default_url() -> str:
    return os.getenv("RSSHUB_MCP_URL", DEFAULT_URL)


class ToolCallError(RuntimeError):
    """The server reported a tool call as failed."""


class MCPClient:
    """Client for communicating with the RSSHub MCP server."""

    def __init__(self, url: str | None = None, stdio: bool = False, server_args: list[str] | None = None):
        self.url = url or default_url()
        self.stdio = stdio
        self.server_args = server_args or []
        self.session: ClientSession | None = None
        self.exit_stack = AsyncExitStack()

    async def connect(self):
        """Connect to the MCP server."""
        if self.stdio:
            server_params = StdioServerParameters(
                command=sys.executable,
                args=["-m", "rsshub_mcp.mcp_rsshub_server", *self.server_args],
                env=None,
            )
            read, write = await self.exit_stack.enter_async_context(
                stdio_client(server_params)
            )
            target = "stdio"
        else:
            read, write, _ = await self.exit_stack.enter_async_context(
                streamablehttp_client(self.url)
            )
            target = self.url

        self.session = await self.exit_stack.enter_async_context(
            ClientSession(read, write)
        )

        await self.session.initialize()
        logger.info(f"Connected to RSSHub MCP server ({target})")

    async def list_tools(self) -> list[str]:
        if not self.session:
            raise RuntimeError("Not connected to MCP server")

        result = await self.session.list_tools()
        return [tool.name for tool in result.tools]

    async def call_tool(self, name: str, arguments: dict | None = None) -> str:
        """
        Call a tool and return its text content.

        Raises:
            ToolCallError: If the server flags the result as an error.
        """
        if not self.session:
            raise RuntimeError("Not connected to MCP server")

        result = await self.session.call_tool(name, arguments or {})
        text = "\n".join(item.text for item in result.content if item.type == "text")

        if result.isError:
            raise ToolCallError(text or f"Tool {name} failed")
        return text

    async def close(self):
        """Close the MCP connection."""
        await self.exit_stack.aclose()

    async def __aenter__(self) -> "MCPClient":
        await self.connect()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()
