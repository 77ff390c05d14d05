"""
Shared data models for the RSSHub MCP server.

Namespace and route descriptors are immutable snapshots built from the RSSHub
metadata API. Search and suggestion results carry their own text and JSON
renderings so the tool layer never has to format them ad hoc.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

# Feature flags reported by RSSHub under a route's "features" object.
FEATURE_FLAGS = (
    "requireConfig",
    "requirePuppeteer",
    "antiCrawler",
    "supportRadar",
    "supportBT",
    "supportPodcast",
    "supportScihub",
)

DEFAULT_SUGGESTION_LIMIT = 5


def _as_str(value: Any, what: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"{what} must be a string, got {type(value).__name__}")
    return value


def _as_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise TypeError(f"{what} must be an object, got {type(value).__name__}")
    return value


def _as_str_list(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


def _enabled_features(features: Mapping[str, Any] | None) -> frozenset[str]:
    """Collect the names of enabled feature flags."""
    if not features:
        return frozenset()

    enabled = set()
    for name in FEATURE_FLAGS:
        value = features.get(name)
        # requireConfig is either a bool or a list of config details
        if isinstance(value, list):
            if value:
                enabled.add(name)
        elif value:
            enabled.add(name)
    return frozenset(enabled)


@dataclass(frozen=True)
class RouteDescriptor:
    """A single RSSHub route inside a namespace."""

    key: str
    name: str = ""
    description: str = ""
    parameters: Mapping[str, Any] = field(default_factory=dict)
    features: frozenset[str] = frozenset()
    example: Optional[str] = None
    maintainers: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()

    @property
    def text_lines(self) -> tuple[str, ...]:
        """Non-empty lines of the name and description, searched one at a time."""
        lines = []
        for part in (self.name, self.description):
            lines.extend(line.strip() for line in part.splitlines() if line.strip())
        return tuple(lines)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "key": self.key,
            "name": self.name,
            "description": self.description,
            "parameters": dict(self.parameters),
            "features": sorted(self.features),
            "example": self.example,
            "maintainers": list(self.maintainers),
            "categories": list(self.categories),
        }

    @classmethod
    def from_dict(cls, key: str, data: dict) -> "RouteDescriptor":
        """
        Create RouteDescriptor from an RSSHub route object.

        Raises:
            TypeError: If a field has the wrong JSON type.
        """
        data = _as_mapping(data, f"Route {key}")
        return cls(
            key=key,
            name=_as_str(data.get("name"), f"Route {key} name"),
            description=_as_str(data.get("description"), f"Route {key} description"),
            parameters=dict(_as_mapping(data.get("parameters"), f"Route {key} parameters")),
            features=_enabled_features(_as_mapping(data.get("features"), f"Route {key} features")),
            example=_as_str(data.get("example"), f"Route {key} example") or None,
            maintainers=_as_str_list(data.get("maintainers")),
            categories=_as_str_list(data.get("categories")),
        )


@dataclass(frozen=True)
class NamespaceEntry:
    """An RSSHub namespace (usually one website) and its routes."""

    id: str
    name: str
    routes: Mapping[str, RouteDescriptor] = field(default_factory=dict)
    url: Optional[str] = None
    description: str = ""
    lang: Optional[str] = None
    categories: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "description": self.description,
            "lang": self.lang,
            "categories": list(self.categories),
            "routes": {key: route.to_dict() for key, route in self.routes.items()},
        }

    @classmethod
    def from_dict(cls, namespace_id: str, data: dict) -> "NamespaceEntry":
        """
        Create NamespaceEntry from an RSSHub namespace object.

        Raises:
            TypeError: If a field has the wrong JSON type.
        """
        data = _as_mapping(data, f"Namespace {namespace_id}")
        routes = {
            key: RouteDescriptor.from_dict(key, route)
            for key, route in _as_mapping(data.get("routes"), f"Namespace {namespace_id} routes").items()
        }
        return cls(
            id=namespace_id,
            name=_as_str(data.get("name"), f"Namespace {namespace_id} name") or namespace_id,
            routes=routes,
            url=_as_str(data.get("url"), f"Namespace {namespace_id} url") or None,
            description=_as_str(data.get("description"), f"Namespace {namespace_id} description"),
            lang=data.get("lang"),
            categories=_as_str_list(data.get("categories")),
        )


# Namespace id -> entry, one snapshot per fetch.
NamespaceCatalog = Mapping[str, NamespaceEntry]


def catalog_from_dict(data: dict) -> dict[str, NamespaceEntry]:
    """Build a NamespaceCatalog from the /api/namespace payload."""
    return {ns_id: NamespaceEntry.from_dict(ns_id, ns) for ns_id, ns in data.items()}


@dataclass(frozen=True)
class SearchQuery:
    """Query for namespace or route search. An empty text matches everything."""

    text: str = ""
    namespace: Optional[str] = None
    limit: Optional[int] = None


@dataclass(frozen=True)
class SearchMatch:
    namespace: str
    route: Optional[str]
    matched_text: str

    def to_dict(self) -> dict:
        return {
            "namespace": self.namespace,
            "route": self.route,
            "matched_text": self.matched_text,
        }


@dataclass(frozen=True)
class SearchResult:
    """Ranked search matches, most relevant first."""

    matches: tuple[SearchMatch, ...] = ()

    def __len__(self) -> int:
        return len(self.matches)

    def __iter__(self):
        return iter(self.matches)

    def to_dict(self) -> dict:
        return {
            "count": len(self.matches),
            "matches": [m.to_dict() for m in self.matches],
        }

    def to_text(self) -> str:
        if not self.matches:
            return "No matches found."

        lines = [f"{len(self.matches)} match(es):"]
        for match in self.matches:
            if match.route is None:
                lines.append(f"- {match.namespace}")
            else:
                line = f"- /{match.namespace}{match.route}"
                if match.matched_text != match.route:
                    line += f" ({match.matched_text})"
                lines.append(line)
        return "\n".join(lines)


@dataclass(frozen=True)
class SuggestionQuery:
    namespace: str
    partial_path: str = ""
    limit: int = DEFAULT_SUGGESTION_LIMIT


@dataclass(frozen=True)
class Suggestion:
    route: str
    score: float

    def to_dict(self) -> dict:
        return {"route": self.route, "score": self.score}


@dataclass(frozen=True)
class SuggestionResult:
    """Route keys closest to a partial path, ascending by score."""

    namespace: str
    suggestions: tuple[Suggestion, ...] = ()

    def __len__(self) -> int:
        return len(self.suggestions)

    def __iter__(self):
        return iter(self.suggestions)

    @property
    def routes(self) -> list[str]:
        return [s.route for s in self.suggestions]

    def to_dict(self) -> dict:
        return {
            "namespace": self.namespace,
            "suggestions": [s.to_dict() for s in self.suggestions],
        }

    def to_text(self) -> str:
        if not self.suggestions:
            return f"No routes in namespace '{self.namespace}'."

        lines = [f"Closest routes in '{self.namespace}':"]
        for s in self.suggestions:
            lines.append(f"- /{self.namespace}{s.route} (score {s.score:g})")
        return "\n".join(lines)
