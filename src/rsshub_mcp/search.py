"""
Namespace/route search and route-key suggestions over a catalog snapshot.

All functions are pure: they never mutate the catalog and never do I/O, so
they are safe to call from concurrent tool handlers.
"""

import logging
from typing import Optional, Union

from rapidfuzz.distance import Levenshtein

from .errors import InvalidArgumentError, NotFoundError
from .models import (
    DEFAULT_SUGGESTION_LIMIT,
    NamespaceCatalog,
    RouteDescriptor,
    SearchMatch,
    SearchQuery,
    SearchResult,
    Suggestion,
    SuggestionQuery,
    SuggestionResult,
)

logger = logging.getLogger(__name__)

# Effective scores for fragments found verbatim in a route key. Both must
# stay below 1, the smallest edit distance between two distinct keys.
PREFIX_SCORE = 0.0
SUBSTRING_SCORE = 0.5

# Match tiers, lower ranks first
EXACT, PREFIX, SUBSTRING = 0, 1, 2


def _validate_limit(limit: Optional[int]) -> Optional[int]:
    if limit is None:
        return None
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidArgumentError(f"limit must be an integer, got {limit!r}")
    if limit < 0:
        raise InvalidArgumentError(f"limit must be >= 0, got {limit}")
    return limit


def _validate_text(text) -> str:
    if text is None:
        return ""
    if not isinstance(text, str):
        raise InvalidArgumentError(f"query must be a string, got {type(text).__name__}")
    return text


def _normalize_path(value: str) -> str:
    return value.strip().lstrip("/").lower()


def _tier(key: str, needle: str) -> int:
    """Rank of an already matched key: exact, prefix or plain substring."""
    if key == needle:
        return EXACT
    if key.startswith(needle):
        return PREFIX
    return SUBSTRING


def search_namespaces(
    catalog: NamespaceCatalog,
    query: Union[str, SearchQuery] = "",
    limit: Optional[int] = None,
) -> SearchResult:
    """
    Find namespaces whose identifier contains the query.

    Args:
        catalog: Namespace snapshot to search.
        query: Query text or a SearchQuery. Empty matches every namespace.
        limit: Maximum number of matches, None for all.

    Returns:
        SearchResult ordered exact < prefix < substring, then by identifier.

    Raises:
        InvalidArgumentError: If the query is not a string or limit is invalid.
    """
    if isinstance(query, SearchQuery):
        limit = query.limit if limit is None else limit
        query = query.text

    needle = _validate_text(query).strip().lower()
    limit = _validate_limit(limit)

    ranked = []
    for ns_id in catalog:
        key = ns_id.lower()
        if needle in key:
            ranked.append((_tier(key, needle), ns_id))

    ranked.sort()
    if limit is not None:
        ranked = ranked[:limit]

    return SearchResult(
        tuple(SearchMatch(namespace=ns_id, route=None, matched_text=ns_id) for _, ns_id in ranked)
    )


def _route_match(route: RouteDescriptor, needle: str) -> Optional[tuple[int, str]]:
    """
    Return (tier, matched text) when the route matches, None otherwise.

    The key, name and description are matched separately, line by line, so a
    query never matches across two fields.
    """
    key = route.key.lower()
    if needle in key:
        return _tier(key.lstrip("/"), needle.lstrip("/")), route.key

    for line in route.text_lines:
        if needle in line.lower():
            return SUBSTRING, line
    return None


def search_routes(
    catalog: NamespaceCatalog,
    query: Union[str, SearchQuery] = "",
    namespace: Optional[str] = None,
    limit: Optional[int] = None,
) -> SearchResult:
    """
    Find routes whose key, name or description contains the query.

    When ``namespace`` is given only that namespace is searched; an unknown
    namespace simply yields no matches.

    Raises:
        InvalidArgumentError: If the query is not a string or limit is invalid.
    """
    if isinstance(query, SearchQuery):
        namespace = query.namespace if namespace is None else namespace
        limit = query.limit if limit is None else limit
        query = query.text

    needle = _validate_text(query).strip().lower()
    limit = _validate_limit(limit)

    if namespace is not None:
        entry = catalog.get(namespace)
        if entry is None:
            logger.debug(f"Route search scoped to unknown namespace '{namespace}'")
            return SearchResult()
        scope = [entry]
    else:
        scope = list(catalog.values())

    ranked = []
    for entry in scope:
        for route_key, route in entry.routes.items():
            if not needle:
                ranked.append((EXACT, route_key, entry.id, route_key))
                continue
            found = _route_match(route, needle)
            if found is not None:
                tier, matched_text = found
                ranked.append((tier, route_key, entry.id, matched_text))

    ranked.sort(key=lambda item: (item[0], item[1], item[2]))
    if limit is not None:
        ranked = ranked[:limit]

    return SearchResult(
        tuple(
            SearchMatch(namespace=ns_id, route=route_key, matched_text=matched_text)
            for _, route_key, ns_id, matched_text in ranked
        )
    )


def route_distance(route_key: str, partial_path: str) -> float:
    """
    Effective distance between a route key and a partial path.

    A key starting with the fragment scores PREFIX_SCORE, a key containing it
    elsewhere scores SUBSTRING_SCORE, anything else the Levenshtein distance.
    Comparison ignores case and a leading slash.
    """
    key = _normalize_path(route_key)
    fragment = _normalize_path(partial_path)

    if key.startswith(fragment):
        return PREFIX_SCORE
    if fragment in key:
        return SUBSTRING_SCORE
    return float(Levenshtein.distance(fragment, key))


def suggest_route_keys(
    catalog: NamespaceCatalog,
    namespace: Union[str, SuggestionQuery],
    partial_path: str = "",
    limit: Optional[int] = DEFAULT_SUGGESTION_LIMIT,
) -> SuggestionResult:
    """
    Suggest the route keys of a namespace closest to a partial path.

    Args:
        catalog: Namespace snapshot.
        namespace: Namespace identifier, or a SuggestionQuery.
        partial_path: What the user typed so far, e.g. "live/ro".
        limit: Maximum number of suggestions (default 5).

    Returns:
        SuggestionResult ascending by score, ties broken by route key.

    Raises:
        NotFoundError: If the namespace is not in the catalog.
        InvalidArgumentError: If limit is negative or not an integer.
    """
    if isinstance(namespace, SuggestionQuery):
        partial_path = namespace.partial_path
        limit = namespace.limit
        namespace = namespace.namespace

    if limit is None:
        limit = DEFAULT_SUGGESTION_LIMIT
    limit = _validate_limit(limit)
    partial_path = _validate_text(partial_path)

    entry = catalog.get(namespace)
    if entry is None:
        raise NotFoundError(f"Namespace '{namespace}' not found")

    if not _normalize_path(partial_path):
        keys = sorted(entry.routes)[:limit]
        return SuggestionResult(namespace, tuple(Suggestion(key, PREFIX_SCORE) for key in keys))

    scored = sorted(
        ((route_distance(key, partial_path), key) for key in entry.routes),
    )
    return SuggestionResult(
        namespace,
        tuple(Suggestion(route=key, score=score) for score, key in scored[:limit]),
    )
