"""
Text and JSON rendering for tool results.

"json" output is json.dumps of the payload. "text" output is human-oriented:
result types render their own summaries, plain upstream payloads are dumped
as YAML, which reads better than JSON for nested route metadata.
"""

import json
from typing import Any, Mapping

import yaml

from .errors import InvalidArgumentError
from .models import NamespaceEntry

FORMATS = ("text", "json")

# RSSHub has no endpoint listing categories; these are the ones it documents.
CATEGORIES = (
    "popular",
    "social-media",
    "new-media",
    "traditional-media",
    "bbs",
    "blog",
    "programming",
    "design",
    "live",
    "multimedia",
    "picture",
    "anime",
    "program-update",
    "university",
    "forecast",
    "travel",
    "shopping",
    "game",
    "reading",
    "government",
    "study",
    "journal",
    "finance",
    "other",
)


def check_format(fmt: Any) -> str:
    """Validate a requested output format, defaulting to text."""
    if fmt is None:
        return "text"
    if fmt not in FORMATS:
        raise InvalidArgumentError(f"format must be one of {FORMATS}, got {fmt!r}")
    return fmt


def to_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)


def to_yaml(payload: Any) -> str:
    return yaml.safe_dump(payload, allow_unicode=True, sort_keys=False, width=100).rstrip()


def render(payload: Any, fmt: str = "text") -> str:
    """
    Render a result object or a plain JSON-like payload.

    Args:
        payload: Object with to_dict()/to_text(), or dicts/lists/strings.
        fmt: "text" or "json".

    Returns:
        Rendered string.
    """
    fmt = check_format(fmt)

    if hasattr(payload, "to_dict"):
        if fmt == "json":
            return to_json(payload.to_dict())
        if hasattr(payload, "to_text"):
            return payload.to_text()
        return to_yaml(payload.to_dict())

    if fmt == "json":
        return to_json(payload)
    if isinstance(payload, str):
        return payload
    if not payload:
        return "No data."
    return to_yaml(payload)


def render_catalog(catalog: Mapping[str, NamespaceEntry], fmt: str = "text") -> str:
    """Render the namespace catalog: one line per namespace as text."""
    fmt = check_format(fmt)
    if fmt == "json":
        return to_json({ns_id: entry.to_dict() for ns_id, entry in catalog.items()})

    if not catalog:
        return "No namespaces."
    lines = [f"{len(catalog)} namespaces:"]
    for ns_id in sorted(catalog):
        entry = catalog[ns_id]
        label = f" - {entry.name}" if entry.name != ns_id else ""
        lines.append(f"- {ns_id}{label} ({len(entry.routes)} routes)")
    return "\n".join(lines)


def render_namespace(entry: NamespaceEntry, fmt: str = "text") -> str:
    """Render one namespace with its routes."""
    fmt = check_format(fmt)
    if fmt == "json":
        return to_json(entry.to_dict())

    header = f"{entry.name} ({entry.id})"
    if entry.url:
        header += f" - {entry.url}"
    lines = [header]
    if entry.description:
        lines.append(entry.description)
    lines.append(f"{len(entry.routes)} routes:")

    for key in sorted(entry.routes):
        route = entry.routes[key]
        line = f"- /{entry.id}{key}"
        if route.name:
            line += f": {route.name}"
        if route.features:
            line += f" [{', '.join(sorted(route.features))}]"
        lines.append(line)
        if route.example:
            lines.append(f"    example: {route.example}")
        for param, doc in route.parameters.items():
            if isinstance(doc, dict):
                doc = doc.get("description", "")
            lines.append(f"    :{param} - {doc}")
    return "\n".join(lines)


def render_categories(fmt: str = "text") -> str:
    fmt = check_format(fmt)
    if fmt == "json":
        return to_json({"categories": list(CATEGORIES)})
    return (
        "Available categories: " + ", ".join(CATEGORIES) + "\n\n"
        "Use the 'get_category' tool with a category name to list its feeds."
    )


def render_feed(path: str, content: str, fmt: str = "text") -> str:
    """Feeds are returned raw; JSON wraps the body with its route."""
    fmt = check_format(fmt)
    if fmt == "json":
        return to_json({"path": path, "content": content})
    return content
