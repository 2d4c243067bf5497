"""Bidirectional mapping between filter criteria and URL query parameters.

The URL is the source of truth when a surface opens; after that, committed
criteria flow back into the URL. Filter commits replace the current history
entry, navigations to another page push a new one.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit

from estatedesk.search.schema import Criteria, FilterSchema

logger = logging.getLogger(__name__)

UrlParams = dict[str, str]


def decode_query(query: str) -> UrlParams:
    """Parse a query string ('?a=1&b=x,y' or 'a=1') into a flat dict. Last value wins."""
    return dict(parse_qsl(query.lstrip("?"), keep_blank_values=False))


class UrlFilterCodec:
    """Encode/decode one schema's criteria to URL params using the schema's prefix."""

    def __init__(self, schema: FilterSchema) -> None:
        self.schema = schema

    def decode(self, params: Mapping[str, str]) -> Criteria:
        """Criteria in canonical form. Absent params decode to unset fields."""
        out: Criteria = {}
        for f in self.schema.fields:
            f.decode(params, out, self.schema.prefix)
        return self.schema.normalize(out)

    def encode(self, criteria: Mapping[str, Any], params: Mapping[str, str] | None = None) -> UrlParams:
        """New params with this schema's fields written and everything else kept.

        Unset fields delete their parameter; an empty string or empty list is
        never written.
        """
        result: UrlParams = dict(params or {})
        canonical = self.schema.normalize(criteria)
        for f in self.schema.fields:
            f.encode(canonical, result, self.schema.prefix)
        return result


@dataclass(frozen=True)
class Location:
    path: str
    params: UrlParams = field(default_factory=dict)

    def query_string(self) -> str:
        return urlencode(self.params, safe=",")

    def url(self) -> str:
        qs = self.query_string()
        return f"{self.path}?{qs}" if qs else self.path


class LocationHistory:
    """In-memory browser-style history stack."""

    def __init__(self, path: str = "/", params: Mapping[str, str] | None = None) -> None:
        self.entries: list[Location] = [Location(path, dict(params or {}))]
        self.index = 0

    @classmethod
    def from_url(cls, url: str) -> "LocationHistory":
        parts = urlsplit(url)
        return cls(parts.path or "/", decode_query(parts.query))

    @property
    def current(self) -> Location:
        return self.entries[self.index]

    def replace(self, params: Mapping[str, str]) -> None:
        """Swap the current entry's params. History length is unchanged."""
        self.entries[self.index] = Location(self.current.path, dict(params))

    def push(self, path: str, params: Mapping[str, str] | None = None) -> None:
        """New entry after the current one; forward entries are discarded."""
        del self.entries[self.index + 1 :]
        self.entries.append(Location(path, dict(params or {})))
        self.index += 1

    def back(self) -> Location:
        if self.index > 0:
            self.index -= 1
        return self.current

    def forward(self) -> Location:
        if self.index < len(self.entries) - 1:
            self.index += 1
        return self.current


class UrlStateSync:
    """Glue between one codec and the location history."""

    def __init__(self, codec: UrlFilterCodec, history: LocationHistory) -> None:
        self.codec = codec
        self.history = history

    def read(self) -> Criteria:
        return self.codec.decode(self.history.current.params)

    def commit(self, criteria: Mapping[str, Any]) -> UrlParams:
        """Write criteria into the current URL with replace semantics."""
        params = self.codec.encode(criteria, self.history.current.params)
        self.history.replace(params)
        logger.debug("url state committed: %s", self.history.current.url())
        return params

    def open_detail(self, path: str, params: Mapping[str, str] | None = None) -> None:
        """Navigate to another page (e.g. a record detail). Pushes a history entry."""
        self.history.push(path, params)
