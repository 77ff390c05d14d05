"""Shared test fixtures."""

import json

import httpx
import pytest

from rsshub_mcp.config import RSSHubSettings
from rsshub_mcp.models import catalog_from_dict
from rsshub_mcp.rsshub_client import RSSHubClient

TEST_HOST = "https://rsshub.test"


@pytest.fixture
def namespace_payload():
    """A trimmed /api/namespace response."""
    return {
        "bilibili": {
            "name": "哔哩哔哩 bilibili",
            "url": "www.bilibili.com",
            "lang": "zh-CN",
            "categories": ["social-media"],
            "routes": {
                "/live/room/:roomID": {
                    "path": "/live/room/:roomID",
                    "name": "直播开播",
                    "maintainers": ["Qixingchen"],
                    "example": "/bilibili/live/room/3",
                    "parameters": {"roomID": "房间号"},
                    "features": {"requireConfig": False, "requirePuppeteer": False},
                },
                "/live/search/:key/:order": {
                    "path": "/live/search/:key/:order",
                    "name": "直播搜索",
                    "maintainers": ["Qixingchen"],
                    "parameters": {"key": "搜索关键字", "order": "排序方式"},
                },
                "/user/video/:uid/:embed?": {
                    "path": "/user/video/:uid/:embed?",
                    "name": "UP 主投稿",
                    "maintainers": ["DIYgod"],
                    "description": "Videos uploaded by a user",
                    "features": {
                        "requireConfig": [{"name": "BILIBILI_COOKIE", "optional": True}],
                        "supportRadar": True,
                    },
                },
                "/followings/video/:uid": {
                    "path": "/followings/video/:uid",
                    "name": "用户关注视频动态",
                    "maintainers": ["LogicJake"],
                    "features": {"requirePuppeteer": True},
                },
            },
        },
        "github": {
            "name": "GitHub",
            "url": "github.com",
            "categories": ["programming"],
            "routes": {
                "/issue/:user/:repo/:state?/:labels?": {
                    "path": "/issue/:user/:repo/:state?/:labels?",
                    "name": "Repo Issues",
                    "maintainers": ["HenryQW"],
                    "example": "/github/issue/DIYgod/RSSHub/open",
                },
                "/trending/:since/:language/:spoken_language?": {
                    "path": "/trending/:since/:language/:spoken_language?",
                    "name": "Trending",
                    "maintainers": ["DIYgod"],
                    "description": "Live trending repositories",
                },
                "/user/followers/:user": {
                    "path": "/user/followers/:user",
                    "name": "User Followers",
                    "maintainers": ["HenryQW"],
                },
            },
        },
        "gitlab": {
            "name": "GitLab",
            "routes": {
                "/explore/:type/:host?": {
                    "path": "/explore/:type/:host?",
                    "name": "Explore",
                    "maintainers": ["imlonghao"],
                },
            },
        },
        "git": {"name": "git", "routes": {}},
        "ithome": {
            "name": "IT之家",
            "routes": {
                "/:caty": {"path": "/:caty", "name": "分类资讯", "maintainers": ["luyuhuang"]},
            },
        },
    }


@pytest.fixture
def catalog(namespace_payload):
    return catalog_from_dict(namespace_payload)


@pytest.fixture
def radar_payload():
    return {
        "github.com": {
            "_name": "GitHub",
            ".": [
                {
                    "title": "Repo Issues",
                    "docs": "https://docs.rsshub.app/routes/programming",
                    "source": ["/:user/:repo/issues"],
                    "target": "/github/issue/:user/:repo",
                }
            ],
        }
    }


def make_handler(routes: dict):
    """
    Build an httpx MockTransport handler from {path: (status, body)}.

    Dict/list bodies are sent as JSON, strings as-is. Unknown paths get 404.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.raw_path.decode()
        if path not in routes:
            return httpx.Response(404, text="Not Found")
        status, body = routes[path]
        if isinstance(body, (dict, list)):
            return httpx.Response(status, content=json.dumps(body), headers={"content-type": "application/json"})
        return httpx.Response(status, text=body)

    return handler


@pytest.fixture
def make_client():
    """Factory for an RSSHubClient backed by a MockTransport."""

    def factory(routes: dict | None = None, handler=None) -> RSSHubClient:
        transport = httpx.MockTransport(handler or make_handler(routes or {}))
        return RSSHubClient(RSSHubSettings(host=TEST_HOST, timeout=5), transport=transport)

    return factory
