"""
Tool dispatch for the RSSHub MCP server.

Each tool takes the MCP call arguments, validates them, fetches what it needs
from RSSHub (once per call) and renders the result as text or JSON.
"""

import logging
from typing import Any, Awaitable, Callable

from .errors import InvalidArgumentError
from .formatting import (
    check_format,
    render,
    render_catalog,
    render_categories,
    render_feed,
    render_namespace,
)
from .models import DEFAULT_SUGGESTION_LIMIT
from .rsshub_client import RSSHubClient
from .search import search_namespaces, search_routes, suggest_route_keys

logger = logging.getLogger(__name__)


def require_str(arguments: dict, name: str, *aliases: str) -> str:
    """Return a required non-empty string argument."""
    for key in (name, *aliases):
        value = arguments.get(key)
        if value is None:
            continue
        if not isinstance(value, str):
            raise InvalidArgumentError(f"{key} must be a string")
        if value.strip():
            return value.strip()
    raise InvalidArgumentError(f"{name} parameter is required")


def optional_str(arguments: dict, name: str, default: str | None = None) -> str | None:
    value = arguments.get(name, default)
    if value is not None and not isinstance(value, str):
        raise InvalidArgumentError(f"{name} must be a string")
    return value


def optional_limit(arguments: dict, default: int | None = None) -> int | None:
    value = arguments.get("limit", default)
    if value is None:
        return None
    # JSON numbers may arrive as floats
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"limit must be an integer, got {value!r}")
    if value < 0:
        raise InvalidArgumentError(f"limit must be >= 0, got {value}")
    return value


class RSSHubService:
    """Implements the MCP tools on top of an RSSHubClient."""

    def __init__(self, client: RSSHubClient):
        self.client = client
        self._tools: dict[str, Callable[[dict], Awaitable[str]]] = {
            "get_all_namespaces": self.get_all_namespaces,
            "get_namespace": self.get_namespace,
            "get_radar_rules": self.get_radar_rules,
            "get_radar_rule": self.get_radar_rule,
            "get_categories": self.get_categories,
            "get_category": self.get_category,
            "get_feed": self.get_feed,
            "search_namespaces": self.search_namespaces,
            "search_routes": self.search_routes,
            "suggest_routes": self.suggest_routes,
        }

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> str:
        """
        Run a tool by name.

        Raises:
            InvalidArgumentError: Unknown tool or bad arguments.
            NotFoundError: Unknown namespace, rule, category or feed.
            UpstreamUnavailableError: RSSHub unreachable or failing.
            UpstreamParseError: RSSHub returned malformed JSON.
        """
        logger.info(f"Calling tool: {name} with args: {arguments}")

        handler = self._tools.get(name)
        if handler is None:
            raise InvalidArgumentError(f"Unknown tool: {name}")

        return await handler(arguments or {})

    async def get_all_namespaces(self, arguments: dict) -> str:
        fmt = check_format(arguments.get("format"))
        catalog = await self.client.fetch_all_namespaces()
        return render_catalog(catalog, fmt)

    async def get_namespace(self, arguments: dict) -> str:
        namespace = require_str(arguments, "namespace")
        fmt = check_format(arguments.get("format"))
        entry = await self.client.fetch_namespace(namespace)
        return render_namespace(entry, fmt)

    async def get_radar_rules(self, arguments: dict) -> str:
        fmt = check_format(arguments.get("format"))
        return render(await self.client.fetch_radar_rules(), fmt)

    async def get_radar_rule(self, arguments: dict) -> str:
        domain = require_str(arguments, "domain", "rule_name")
        fmt = check_format(arguments.get("format"))
        return render(await self.client.fetch_radar_rule(domain), fmt)

    async def get_categories(self, arguments: dict) -> str:
        return render_categories(check_format(arguments.get("format")))

    async def get_category(self, arguments: dict) -> str:
        category = require_str(arguments, "category")
        fmt = check_format(arguments.get("format"))
        return render(await self.client.fetch_category(category), fmt)

    async def get_feed(self, arguments: dict) -> str:
        path = require_str(arguments, "path")
        fmt = check_format(arguments.get("format"))
        content = await self.client.fetch_feed(path)
        return render_feed(path, content, fmt)

    async def search_namespaces(self, arguments: dict) -> str:
        query = optional_str(arguments, "query", "")
        limit = optional_limit(arguments)
        fmt = check_format(arguments.get("format"))

        catalog = await self.client.fetch_all_namespaces()
        result = search_namespaces(catalog, query, limit=limit)
        logger.info(f"search_namespaces '{query}': {len(result)} matches")
        return render(result, fmt)

    async def search_routes(self, arguments: dict) -> str:
        query = optional_str(arguments, "query", "")
        namespace = optional_str(arguments, "namespace")
        limit = optional_limit(arguments)
        fmt = check_format(arguments.get("format"))

        catalog = await self.client.fetch_all_namespaces()
        result = search_routes(catalog, query, namespace=namespace or None, limit=limit)
        logger.info(f"search_routes '{query}' in {namespace or 'all'}: {len(result)} matches")
        return render(result, fmt)

    async def suggest_routes(self, arguments: dict) -> str:
        namespace = require_str(arguments, "namespace")
        partial_path = optional_str(arguments, "partial_path", "") or ""
        limit = optional_limit(arguments, DEFAULT_SUGGESTION_LIMIT)
        fmt = check_format(arguments.get("format"))

        catalog = await self.client.fetch_all_namespaces()
        result = suggest_route_keys(catalog, namespace, partial_path, limit)
        return render(result, fmt)
