"""Lookups shared by every search domain: facet value lists, suggestions, per-domain settings."""

import logging
from typing import Any, Iterable

from estatedesk.search.backend import SearchBackend, SearchError, SearchRequest
from estatedesk.search.facets import FacetOption
from estatedesk.search.schema import CalendarRangeField, Field, RelativeDateField
from estatedesk.settings import get_setting

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 10


def domain_setting(settings: dict[str, Any] | None, domain: str, key: str, default: Any) -> Any:
    """Value of domains.<domain>.<key>, or default when settings are missing."""
    if not settings:
        return default
    return get_setting(settings, f"domains.{domain}.{key}", default)


async def fetch_facet_values(
    backend: SearchBackend,
    index_name: str,
    facet: str,
    *,
    query: str = "",
    max_values: int = 100,
) -> list[FacetOption]:
    """All values of one facet with counts, most frequent first. Raises SearchError."""
    request = SearchRequest(
        query=query,
        hits_per_page=0,
        facets=[facet],
        max_values_per_facet=max_values,
    )
    result = await backend.search(index_name, request)
    values = result.facets.get(facet, {})
    ranked = sorted(values.items(), key=lambda item: item[1], reverse=True)
    return [FacetOption(label=value, value=value, count=count) for value, count in ranked]


async def fetch_suggestions(
    backend: SearchBackend,
    index_name: str,
    query: str,
    attributes: Iterable[str],
) -> list[str]:
    """Distinct values of attributes from the top hits, for search-as-you-type. [] on failure."""
    attrs = list(attributes)
    request = SearchRequest(
        query=query,
        hits_per_page=5,
        attributes_to_retrieve=attrs,
        analytics=False,
    )
    try:
        result = await backend.search(index_name, request)
    except SearchError as e:
        logger.warning("suggestions for %r on %s failed: %s", query, index_name, e)
        return []
    seen: dict[str, None] = {}
    for hit in result.hits:
        for attr in attrs:
            value = hit.get(attr)
            if value:
                seen.setdefault(str(value), None)
    return list(seen)[:MAX_SUGGESTIONS]


def added_date_fields(attribute: str = "added") -> list[Field]:
    """Relative shortcut plus calendar range over the record creation timestamp."""
    return [
        RelativeDateField("dateRange", attribute=attribute, overridden_by="addedRange"),
        CalendarRangeField("addedRange", attribute=attribute),
    ]
