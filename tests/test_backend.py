"""Tests for AlgoliaSearchBackend over a mocked HTTP transport."""

import json
from urllib.parse import parse_qs

import httpx
import pytest

from estatedesk.search.backend import AlgoliaSearchBackend, SearchError, SearchRequest

ENGINE_BODY = {
    "hits": [{"objectID": "c1", "campaignName": "Diwali"}],
    "nbHits": 41,
    "page": 2,
    "nbPages": 3,
    "facets": {"status": {"active": 30, "paused": 11}},
    "facets_stats": {"totalCost": {"min": 1, "max": 9, "avg": 4, "sum": 160}},
    "processingTimeMS": 4,
}


def _backend(handler) -> AlgoliaSearchBackend:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AlgoliaSearchBackend("appid", "secret-key", client=client)


class TestRequest:
    """Shape of the outgoing HTTP request."""

    @pytest.mark.asyncio
    async def test_url_headers_and_params(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=ENGINE_BODY)

        backend = _backend(handler)
        await backend.search(
            "canvashomescampaigns_cost_desc",
            SearchRequest(
                query="diwali",
                filters='(status:"active")',
                page=2,
                hits_per_page=20,
                facets=["campaignName", "status"],
                max_values_per_facet=100,
            ),
        )
        await backend.aclose()

        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://appid-dsn.algolia.net/1/indexes/canvashomescampaigns_cost_desc/query"
        assert request.headers["X-Algolia-Application-Id"] == "appid"
        assert request.headers["X-Algolia-API-Key"] == "secret-key"
        params = {k: v[0] for k, v in parse_qs(json.loads(request.content)["params"]).items()}
        assert params == {
            "query": "diwali",
            "filters": '(status:"active")',
            "page": "2",
            "hitsPerPage": "20",
            "facets": '["campaignName", "status"]',
            "maxValuesPerFacet": "100",
        }

    def test_to_params_minimal(self) -> None:
        assert SearchRequest().to_params() == {"query": "", "page": "0", "hitsPerPage": "20"}

    def test_to_params_without_analytics(self) -> None:
        params = SearchRequest(hits_per_page=5, attributes_to_retrieve=["name"], analytics=False).to_params()
        assert params["analytics"] == "false"
        assert params["attributesToRetrieve"] == '["name"]'

    def test_requires_credentials(self) -> None:
        with pytest.raises(ValueError):
            AlgoliaSearchBackend("", "key")
        with pytest.raises(ValueError):
            AlgoliaSearchBackend("appid", "")


class TestResponse:
    """Mapping engine bodies and failures."""

    @pytest.mark.asyncio
    async def test_result_fields(self) -> None:
        backend = _backend(lambda request: httpx.Response(200, json=ENGINE_BODY))
        result = await backend.search("canvashomescampaigns", SearchRequest())
        assert result.total_count == 41
        assert result.page == 2
        assert result.page_count == 3
        assert result.took_ms == 4
        assert result.hits[0]["campaignName"] == "Diwali"
        assert result.facets["status"] == {"active": 30, "paused": 11}
        assert result.stat_sum("totalCost") == 160
        assert result.stat_sum("totalLeads") == 0

    @pytest.mark.asyncio
    async def test_http_error_status(self) -> None:
        backend = _backend(lambda request: httpx.Response(500, json={"message": "down"}))
        with pytest.raises(SearchError):
            await backend.search("agents", SearchRequest())

    @pytest.mark.asyncio
    async def test_connect_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        backend = _backend(handler)
        with pytest.raises(SearchError):
            await backend.search("agents", SearchRequest())

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        backend = _backend(lambda request: httpx.Response(200, content=b"<html>"))
        with pytest.raises(SearchError):
            await backend.search("agents", SearchRequest())

    @pytest.mark.asyncio
    async def test_non_object_body(self) -> None:
        backend = _backend(lambda request: httpx.Response(200, json=[1, 2]))
        with pytest.raises(SearchError):
            await backend.search("agents", SearchRequest())

    @pytest.mark.asyncio
    async def test_malformed_hits(self) -> None:
        backend = _backend(lambda request: httpx.Response(200, json={"hits": "nope"}))
        with pytest.raises(SearchError):
            await backend.search("agents", SearchRequest())
