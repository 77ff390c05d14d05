"""Tests for rsshub_mcp/rsshub_client.py: HTTP calls against a mocked RSSHub."""

import asyncio

import httpx
import pytest

from rsshub_mcp.errors import NotFoundError, UpstreamParseError, UpstreamUnavailableError
from rsshub_mcp.config import RSSHubSettings
from rsshub_mcp.models import NamespaceEntry
from rsshub_mcp.rsshub_client import RSSHubClient


def fetch(client, method: str, *args):
    """Run one client coroutine and close the client afterwards."""

    async def go():
        async with client:
            return await getattr(client, method)(*args)

    return asyncio.run(go())


class TestNamespaces:
    def test_fetch_all_namespaces(self, make_client, namespace_payload):
        client = make_client({"/api/namespace": (200, namespace_payload)})
        catalog = fetch(client, "fetch_all_namespaces")
        assert set(catalog) == set(namespace_payload)
        assert isinstance(catalog["github"], NamespaceEntry)

    def test_fetch_namespace(self, make_client, namespace_payload):
        client = make_client({"/api/namespace/github": (200, namespace_payload["github"])})
        entry = fetch(client, "fetch_namespace", "github")
        assert entry.id == "github"
        assert "/user/followers/:user" in entry.routes

    def test_empty_namespace_is_not_found(self, make_client):
        client = make_client({"/api/namespace/nope": (200, {})})
        with pytest.raises(NotFoundError):
            fetch(client, "fetch_namespace", "nope")

    def test_404_is_not_found(self, make_client):
        client = make_client({})
        with pytest.raises(NotFoundError):
            fetch(client, "fetch_namespace", "nope")

    def test_namespace_is_quoted(self, make_client):
        seen = []

        def handler(request):
            seen.append(request.url.raw_path.decode())
            return httpx.Response(200, json={"routes": {}})

        fetch(make_client(handler=handler), "fetch_namespace", "a/b")
        assert seen == ["/api/namespace/a%2Fb"]


class TestErrors:
    def test_server_error_is_unavailable(self, make_client):
        client = make_client({"/api/namespace": (503, "busy")})
        with pytest.raises(UpstreamUnavailableError, match="503"):
            fetch(client, "fetch_all_namespaces")

    def test_malformed_json(self, make_client):
        client = make_client({"/api/namespace": (200, "<html>not json</html>")})
        with pytest.raises(UpstreamParseError):
            fetch(client, "fetch_all_namespaces")

    def test_non_object_json(self, make_client):
        client = make_client({"/api/namespace": (200, ["a", "b"])})
        with pytest.raises(UpstreamParseError):
            fetch(client, "fetch_all_namespaces")

    @pytest.mark.parametrize(
        "route",
        [
            {"parameters": ["abc"]},
            {"name": 5},
            {"description": ["not", "text"]},
            "not a route",
        ],
    )
    def test_malformed_route_in_catalog(self, make_client, route):
        client = make_client({"/api/namespace": (200, {"site": {"routes": {"/x": route}}})})
        with pytest.raises(UpstreamParseError, match="namespace payload"):
            fetch(client, "fetch_all_namespaces")

    def test_malformed_route_in_namespace(self, make_client):
        client = make_client({"/api/namespace/site": (200, {"routes": {"/x": {"parameters": ["abc"]}}})})
        with pytest.raises(UpstreamParseError, match="Namespace 'site'"):
            fetch(client, "fetch_namespace", "site")

    def test_connection_error(self, make_client):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamUnavailableError):
            fetch(make_client(handler=handler), "fetch_all_namespaces")

    def test_timeout(self, make_client):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(UpstreamUnavailableError, match="Timed out"):
            fetch(make_client(handler=handler), "fetch_radar_rules")


class TestRadarAndCategories:
    def test_fetch_radar_rules(self, make_client, radar_payload):
        client = make_client({"/api/radar/rules": (200, radar_payload)})
        assert fetch(client, "fetch_radar_rules") == radar_payload

    def test_fetch_radar_rule(self, make_client, radar_payload):
        client = make_client({"/api/radar/rules/github.com": (200, radar_payload["github.com"])})
        rule = fetch(client, "fetch_radar_rule", "github.com")
        assert rule["_name"] == "GitHub"

    def test_empty_radar_rule_is_not_found(self, make_client):
        client = make_client({"/api/radar/rules/nowhere.test": (200, {})})
        with pytest.raises(NotFoundError):
            fetch(client, "fetch_radar_rule", "nowhere.test")

    def test_fetch_category(self, make_client):
        payload = {"github": {"name": "GitHub", "routes": {}}}
        client = make_client({"/api/category/programming": (200, payload)})
        assert fetch(client, "fetch_category", "programming") == payload


class TestFeed:
    def test_fetch_feed_returns_raw_body(self, make_client):
        rss = "<rss><channel><title>IT之家</title></channel></rss>"
        client = make_client({"/ithome/news": (200, rss)})
        assert fetch(client, "fetch_feed", "ithome/news") == rss

    def test_leading_slash_optional(self, make_client):
        client = make_client({"/ithome/news": (200, "<rss/>")})
        assert fetch(client, "fetch_feed", "/ithome/news") == "<rss/>"

    def test_unknown_route(self, make_client):
        with pytest.raises(NotFoundError):
            fetch(make_client({}), "fetch_feed", "nope")


def test_host_trailing_slash_stripped():
    client = RSSHubClient(RSSHubSettings(host="https://rsshub.test/"))
    assert client.host == "https://rsshub.test"
    asyncio.run(client.aclose())
