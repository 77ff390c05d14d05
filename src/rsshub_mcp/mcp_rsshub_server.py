"""
MCP RSSHub Server - Exposes the RSSHub API as MCP tools.

Any MCP client (Claude Desktop, an agent, run_client.py) can use it to browse
RSSHub namespaces, radar rules and categories, search routes and fetch feeds.

Usage:
    # Run as MCP server (stdio transport)
    rsshub-mcp

    # Streamable HTTP transport on 127.0.0.1:8000/mcp
    rsshub-mcp --transport streamable-http

    # Test mode
    rsshub-mcp --test
"""

import argparse
import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from dataclasses import replace
from pathlib import Path

import uvicorn
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from mcp.types import TextContent, Tool
from starlette.applications import Starlette
from starlette.routing import Mount

from . import __version__
from .config import TRANSPORTS, Config, load_config
from .errors import RSSHubMCPError
from .log import setup_logging
from .rsshub_client import RSSHubClient
from .service import RSSHubService

logger = logging.getLogger(__name__)

SERVER_NAME = "rsshub-mcp"

FORMAT_PROPERTY = {
    "type": "string",
    "enum": ["text", "json"],
    "description": "Output format (default: text)",
    "default": "text",
}

LIMIT_PROPERTY = {
    "type": "integer",
    "minimum": 0,
    "description": "Maximum number of results",
}


def _schema(properties: dict | None = None, required: list[str] | None = None) -> dict:
    return {
        "type": "object",
        "properties": {**(properties or {}), "format": FORMAT_PROPERTY},
        "required": required or [],
    }


TOOLS = [
    Tool(
        name="get_all_namespaces",
        description="Get all available namespaces in RSSHub.",
        inputSchema=_schema(),
    ),
    Tool(
        name="get_namespace",
        description="Get routes for a specific namespace.",
        inputSchema=_schema(
            {
                "namespace": {
                    "type": "string",
                    "description": "The namespace to query (e.g., 'bilibili', 'github')",
                },
            },
            ["namespace"],
        ),
    ),
    Tool(
        name="get_radar_rules",
        description="Get all radar rules for automatic feed detection.",
        inputSchema=_schema(),
    ),
    Tool(
        name="get_radar_rule",
        description="Get the radar rule for a specific domain.",
        inputSchema=_schema(
            {
                "domain": {
                    "type": "string",
                    "description": "The domain of the radar rule (e.g., 'github.com')",
                },
                "rule_name": {
                    "type": "string",
                    "description": "Alias for domain",
                },
            },
        ),
    ),
    Tool(
        name="get_categories",
        description="Get all available categories in RSSHub.",
        inputSchema=_schema(),
    ),
    Tool(
        name="get_category",
        description="Get feeds for a specific category.",
        inputSchema=_schema(
            {
                "category": {
                    "type": "string",
                    "description": "The category name (e.g., 'programming', 'live')",
                },
            },
            ["category"],
        ),
    ),
    Tool(
        name="get_feed",
        description="Fetch the raw RSS content of an RSSHub route.",
        inputSchema=_schema(
            {
                "path": {
                    "type": "string",
                    "description": "Route path (e.g., '/bilibili/user/video/2267573')",
                },
            },
            ["path"],
        ),
    ),
    Tool(
        name="search_namespaces",
        description="Search namespaces by identifier. Empty query lists all.",
        inputSchema=_schema(
            {
                "query": {"type": "string", "description": "Text to look for", "default": ""},
                "limit": LIMIT_PROPERTY,
            },
        ),
    ),
    Tool(
        name="search_routes",
        description="Search routes by path, name or description, optionally within one namespace.",
        inputSchema=_schema(
            {
                "query": {"type": "string", "description": "Text to look for", "default": ""},
                "namespace": {"type": "string", "description": "Only search this namespace"},
                "limit": LIMIT_PROPERTY,
            },
        ),
    ),
    Tool(
        name="suggest_routes",
        description="Suggest the routes of a namespace closest to a partial path.",
        inputSchema=_schema(
            {
                "namespace": {"type": "string", "description": "Namespace to look in"},
                "partial_path": {
                    "type": "string",
                    "description": "Partial route path (e.g., 'live/ro')",
                    "default": "",
                },
                "limit": {**LIMIT_PROPERTY, "default": 5},
            },
            ["namespace"],
        ),
    ),
]


def create_server(service: RSSHubService) -> Server:
    """Create an MCP server instance dispatching tool calls to the service."""
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List available MCP tools."""
        return TOOLS

    @server.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[TextContent]:
        """Handle MCP tool calls. Errors are reported to the client as tool errors."""
        try:
            text = await service.call_tool(name, arguments)
        except RSSHubMCPError as e:
            logger.warning(f"Tool {name} failed: {e}")
            raise
        return [TextContent(type="text", text=text)]

    return server


async def run_stdio(server: Server) -> None:
    """Run MCP server with stdio transport."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def create_http_app(server: Server) -> Starlette:
    """Starlette app serving the MCP endpoint at /mcp."""
    session_manager = StreamableHTTPSessionManager(app=server)

    async def handle_streamable_http(scope, receive, send):
        await session_manager.handle_request(scope, receive, send)

    @asynccontextmanager
    async def lifespan(app):
        async with session_manager.run():
            yield

    return Starlette(
        routes=[Mount("/mcp", app=handle_streamable_http)],
        lifespan=lifespan,
    )


async def run_streamable_http(server: Server, host: str, port: int) -> None:
    """Run MCP server with streamable HTTP transport."""
    app = create_http_app(server)
    uv_config = uvicorn.Config(app, host=host, port=port, log_level="warning")
    logger.info(f"Starting RSSHub MCP server at http://{host}:{port}/mcp")
    await uvicorn.Server(uv_config).serve()


async def serve(config: Config) -> None:
    async with RSSHubClient(config.rsshub) as client:
        server = create_server(RSSHubService(client))
        logger.info(f"RSSHub host: {config.rsshub.host} (timeout {config.rsshub.timeout:g}s)")

        if config.transport == "streamable-http":
            await run_streamable_http(server, config.server_host, config.server_port)
        else:
            logger.info("Starting RSSHub MCP server on stdio")
            await run_stdio(server)

    logger.info("Server shutdown")


async def _test_tools(config: Config) -> None:
    async with RSSHubClient(config.rsshub) as client:
        service = RSSHubService(client)

        catalog = await client.fetch_all_namespaces()
        routes = sum(len(entry.routes) for entry in catalog.values())
        print(f"Namespaces: {len(catalog)} ({routes} routes)")

        for name, arguments in [
            ("search_namespaces", {"query": "github", "limit": 3}),
            ("search_routes", {"query": "live", "namespace": "bilibili", "limit": 3}),
            ("suggest_routes", {"namespace": "bilibili", "partial_path": "live/ro"}),
        ]:
            print(f"\n[{name}] {arguments}")
            try:
                print(await service.call_tool(name, arguments))
            except RSSHubMCPError as e:
                print(f"  Error: {e}")


def test_mode(config: Config) -> None:
    """Run a few tools against RSSHub without the MCP protocol."""
    print(f"Testing RSSHub MCP Server against {config.rsshub.host}...\n")

    try:
        asyncio.run(_test_tools(config))
    except RSSHubMCPError as e:
        print(f"\nMCP server test: FAILED ({e})")
        sys.exit(1)

    print(f"\n{'='*50}")
    print("MCP server test: OK")


def main() -> None:
    parser = argparse.ArgumentParser(description="RSSHub Model Context Protocol server")
    parser.add_argument("--config", "-c", type=Path, help="YAML config file")
    parser.add_argument(
        "--transport",
        choices=TRANSPORTS,
        help="Transport to serve on (overrides config)",
    )
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    parser.add_argument("--test", action="store_true", help="Run tools once without MCP")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.version:
        print(__version__)
        return

    config = load_config(args.config)
    if args.transport:
        config = replace(config, transport=args.transport)

    setup_logging(config.log_level, args.verbose)
    logger.info(f"{config}")

    if args.test:
        test_mode(config)
        return

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")


if __name__ == "__main__":
    main()
