#!/usr/bin/env python3
"""
RSSHub MCP Client - CLI Entry Point

Calls tools on a running RSSHub MCP server (or one spawned over stdio).

Usage:
    python run_client.py get_namespace '{"namespace": "bilibili"}'
    python run_client.py search_routes '{"query": "live"}' --url http://127.0.0.1:8000/mcp
    python run_client.py --list
    python run_client.py --quick-test --stdio
"""

import argparse
import asyncio
import json
import logging
import sys

from rsshub_mcp.client import MCPClient, ToolCallError, default_url
from rsshub_mcp.log import setup_logging

logger = logging.getLogger(__name__)

# (tool, arguments) pairs exercised by --quick-test
QUICK_TEST_CALLS = [
    ("get_categories", {}),
    ("get_namespace", {"namespace": "bilibili"}),
    ("get_category", {"category": "programming"}),
    ("search_namespaces", {"query": "bili"}),
    ("suggest_routes", {"namespace": "bilibili", "partial_path": "live/ro"}),
    ("get_feed", {"path": "ithome/news"}),
]


def parse_arguments(raw: str | None) -> dict:
    """Parse the JSON tool arguments, falling back to an empty object."""
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Invalid JSON for arguments, using empty object")
        return {}
    if not isinstance(value, dict):
        logger.warning("Tool arguments must be a JSON object, using empty object")
        return {}
    return value


async def call_once(client: MCPClient, tool: str, arguments: dict) -> int:
    try:
        print(await client.call_tool(tool, arguments))
    except ToolCallError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


async def quick_test(client: MCPClient) -> int:
    print("=== RSSHub MCP Tool Quick Test ===\n")

    tools = await client.list_tools()
    print(f"Server exposes {len(tools)} tools: {', '.join(tools)}")

    failures = 0
    for i, (tool, arguments) in enumerate(QUICK_TEST_CALLS, 1):
        print(f"\n{i}. Testing {tool} {arguments or ''}")
        try:
            text = await client.call_tool(tool, arguments)
            print(f"   OK, first 100 chars: {text[:100]}")
        except ToolCallError as e:
            failures += 1
            print(f"   FAILED: {e}")

    print(f"\n=== Quick test completed: {len(QUICK_TEST_CALLS) - failures} passed, {failures} failed ===")
    return 1 if failures else 0


async def run(args: argparse.Namespace) -> int:
    client = MCPClient(url=args.url, stdio=args.stdio)
    await client.connect()
    try:
        if args.list:
            for name in await client.list_tools():
                print(name)
            return 0
        if args.quick_test:
            return await quick_test(client)
        return await call_once(client, args.tool, parse_arguments(args.arguments))
    finally:
        await client.close()


def main():
    parser = argparse.ArgumentParser(
        description="Call tools on the RSSHub MCP server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python run_client.py get_radar_rule '{"domain": "github.com"}'
    python run_client.py --quick-test
    python run_client.py --list --stdio

Environment:
    RSSHUB_MCP_URL   Server URL (default: http://127.0.0.1:8000/mcp)
        """,
    )

    parser.add_argument("tool", nargs="?", help="Tool name")
    parser.add_argument("arguments", nargs="?", help="Tool arguments as a JSON object")
    parser.add_argument("--url", default=default_url(), help="Server URL")
    parser.add_argument(
        "--stdio",
        action="store_true",
        help="Spawn the server over stdio instead of connecting to --url",
    )
    parser.add_argument("--list", action="store_true", help="List available tools")
    parser.add_argument("--quick-test", action="store_true", help="Call a sample of every tool")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    if not (args.tool or args.list or args.quick_test):
        parser.error("a tool name, --list or --quick-test is required")

    setup_logging("WARNING", args.verbose)

    try:
        code = asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Client failed: {e}")
        sys.exit(1)

    sys.exit(code)


if __name__ == "__main__":
    main()
