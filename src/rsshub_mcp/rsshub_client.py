"""
Async client for the RSSHub metadata and feed API.

Every call hits the configured RSSHub instance; nothing is cached.
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from .config import RSSHubSettings
from .errors import NotFoundError, UpstreamParseError, UpstreamUnavailableError
from .models import NamespaceEntry, catalog_from_dict

logger = logging.getLogger(__name__)

USER_AGENT = "rsshub-mcp"


class RSSHubClient:
    """Thin wrapper over httpx.AsyncClient bound to one RSSHub host."""

    def __init__(
        self,
        settings: Optional[RSSHubSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or RSSHubSettings()
        self.host = self.settings.host.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.host,
            timeout=self.settings.timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
            transport=transport,
        )

    async def __aenter__(self) -> "RSSHubClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, what: str) -> httpx.Response:
        """GET a path relative to the host, mapping failures to our error kinds."""
        logger.debug(f"GET {self.host}{path}")

        try:
            resp = await self._client.get(path)
        except httpx.TimeoutException as e:
            logger.warning(f"Timed out fetching {what}: {e}")
            raise UpstreamUnavailableError(f"Timed out fetching {what} from {self.host}") from e
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch {what}: {e}")
            raise UpstreamUnavailableError(f"Failed to fetch {what} from {self.host}: {e}") from e

        if resp.status_code == 404:
            raise NotFoundError(f"{what} not found")
        if resp.is_error:
            logger.error(f"RSSHub answered {resp.status_code} for {path}")
            raise UpstreamUnavailableError(
                f"Failed to fetch {what}: RSSHub returned HTTP {resp.status_code}"
            )
        return resp

    async def get_json(self, path: str, what: str) -> Any:
        """GET a path and decode its JSON body."""
        resp = await self._get(path, what)
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamParseError(f"Malformed JSON for {what}: {e}") from e

    async def _get_object(self, path: str, what: str) -> dict:
        data = await self.get_json(path, what)
        if not isinstance(data, dict):
            raise UpstreamParseError(f"Expected a JSON object for {what}, got {type(data).__name__}")
        return data

    async def fetch_all_namespaces(self) -> dict[str, NamespaceEntry]:
        """Fetch the full namespace catalog (GET /api/namespace)."""
        data = await self._get_object("/api/namespace", "namespaces")
        try:
            catalog = catalog_from_dict(data)
        except (AttributeError, TypeError, ValueError) as e:
            raise UpstreamParseError(f"Unexpected namespace payload: {e}") from e

        logger.info(f"Fetched {len(catalog)} namespaces")
        return catalog

    async def fetch_namespace(self, namespace: str) -> NamespaceEntry:
        """Fetch one namespace and its routes (GET /api/namespace/{id})."""
        what = f"Namespace '{namespace}'"
        data = await self._get_object(f"/api/namespace/{quote(namespace, safe='')}", what)
        # RSSHub answers unknown namespaces with an empty object
        if not data:
            raise NotFoundError(f"{what} not found")
        try:
            return NamespaceEntry.from_dict(namespace, data)
        except (AttributeError, TypeError, ValueError) as e:
            raise UpstreamParseError(f"Unexpected payload for {what}: {e}") from e

    async def fetch_radar_rules(self) -> dict:
        """Fetch every radar rule, keyed by domain (GET /api/radar/rules)."""
        return await self._get_object("/api/radar/rules", "radar rules")

    async def fetch_radar_rule(self, domain: str) -> dict:
        """Fetch the radar rule for one domain (GET /api/radar/rules/{domain})."""
        what = f"Radar rule '{domain}'"
        data = await self._get_object(f"/api/radar/rules/{quote(domain, safe='')}", what)
        if not data:
            raise NotFoundError(f"{what} not found")
        return data

    async def fetch_category(self, category: str) -> dict:
        """Fetch the namespaces of a category (GET /api/category/{category})."""
        return await self._get_object(
            f"/api/category/{quote(category, safe='')}", f"Category '{category}'"
        )

    async def fetch_feed(self, path: str) -> str:
        """Fetch a feed route and return its raw body."""
        path = "/" + path.strip().lstrip("/")
        resp = await self._get(path, f"Feed '{path}'")
        return resp.text
