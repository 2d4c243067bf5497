"""Search engine contract and the Algolia REST implementation."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol
from urllib.parse import quote as url_quote
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from estatedesk.search.models import QueryResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class SearchError(Exception):
    """Search engine request failed (network, HTTP status or malformed body)."""


@dataclass
class SearchRequest:
    query: str = ""
    filters: str = ""
    page: int = 0
    hits_per_page: int = 20
    facets: list[str] = field(default_factory=list)
    max_values_per_facet: int | None = None
    attributes_to_retrieve: list[str] | None = None
    analytics: bool = True

    def to_params(self) -> dict[str, str]:
        """Engine query parameters. Lists are sent as JSON arrays."""
        params: dict[str, str] = {
            "query": self.query,
            "page": str(self.page),
            "hitsPerPage": str(self.hits_per_page),
        }
        if self.filters:
            params["filters"] = self.filters
        if self.facets:
            params["facets"] = json.dumps(self.facets)
        if self.max_values_per_facet is not None:
            params["maxValuesPerFacet"] = str(self.max_values_per_facet)
        if self.attributes_to_retrieve is not None:
            params["attributesToRetrieve"] = json.dumps(self.attributes_to_retrieve)
        if not self.analytics:
            params["analytics"] = "false"
        return params


class SearchBackend(Protocol):
    """Black-box search: index name plus request in, one page of hits and facets out."""

    async def search(self, index_name: str, request: SearchRequest) -> QueryResult:
        """Run one query. Raises SearchError on failure."""
        ...


class AlgoliaSearchBackend:
    """SearchBackend over the Algolia REST query endpoint."""

    def __init__(
        self,
        app_id: str,
        api_key: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not app_id or not api_key:
            raise ValueError("Algolia app_id and api_key are required")
        self._app_id = app_id
        self._base_url = f"https://{app_id}-dsn.algolia.net/1/indexes"
        self._headers = {
            "X-Algolia-Application-Id": app_id,
            "X-Algolia-API-Key": api_key,
        }
        self._timeout = timeout
        self._client = client

    async def search(self, index_name: str, request: SearchRequest) -> QueryResult:
        url = f"{self._base_url}/{url_quote(index_name, safe='')}/query"
        body = {"params": urlencode(request.to_params())}
        logger.debug("search %s page=%d filters=%r", index_name, request.page, request.filters)
        try:
            if self._client is not None:
                data = await self._post(self._client, url, body)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    data = await self._post(client, url, body)
        except httpx.HTTPError as e:
            raise SearchError(f"Search on {index_name} failed: {e}") from e
        except ValueError as e:
            raise SearchError(f"Search on {index_name} returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise SearchError(f"Search on {index_name} returned unexpected body")
        try:
            return QueryResult.from_engine(data)
        except ValidationError as e:
            raise SearchError(f"Search on {index_name} returned malformed result: {e}") from e

    async def _post(self, client: httpx.AsyncClient, url: str, body: dict[str, Any]) -> Any:
        response = await client.post(url, json=body, headers=self._headers)
        response.raise_for_status()
        return response.json()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
