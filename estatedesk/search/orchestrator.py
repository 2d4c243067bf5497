"""SearchOrchestrator: rebuild the filter, query rows and metrics, reconcile state."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Mapping

from estatedesk.search.backend import SearchBackend, SearchRequest
from estatedesk.search.builder import FilterExpressionBuilder
from estatedesk.search.facets import FacetOption, FacetSnapshotCache
from estatedesk.search.models import QueryResult
from estatedesk.search.schema import Criteria, FilterSchema
from estatedesk.search.sort import SortTable

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SEC = 0.3
DEFAULT_TIMEOUT_SEC = 10.0

MetricsFn = Callable[[dict[str, float]], dict[str, float]]


@dataclass
class SearchDomain:
    """Everything the orchestrator needs to know about one index family."""

    name: str
    schema: FilterSchema
    sort_table: SortTable
    facets: list[str] = field(default_factory=list)
    hits_per_page: int = 20
    max_values_per_facet: int = 100
    # Attributes summed by the aggregate query (facets_stats.sum).
    metric_attributes: list[str] = field(default_factory=list)
    derive_metrics: MetricsFn | None = None

    @property
    def index(self) -> str:
        return self.sort_table.base_index

    @property
    def builder(self) -> FilterExpressionBuilder:
        return FilterExpressionBuilder(self.schema)

    def metrics_from(self, result: QueryResult) -> dict[str, float]:
        sums = {attr: result.stat_sum(attr) for attr in self.metric_attributes}
        if self.derive_metrics is not None:
            sums.update(self.derive_metrics(sums))
        return sums


class SearchOrchestrator:
    """Owns query/criteria/page/sort and the last results for one search domain.

    Free-text changes are debounced; filters, page and sort apply immediately.
    Each refresh gets a sequence number and only the latest one may write
    results. Failures clear rows and metrics but keep the facet snapshot.
    """

    def __init__(
        self,
        domain: SearchDomain,
        backend: SearchBackend,
        *,
        debounce_sec: float = DEFAULT_DEBOUNCE_SEC,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.domain = domain
        self.backend = backend
        self.debounce_sec = debounce_sec
        self.timeout_sec = timeout_sec
        self._clock = clock or datetime.now
        self._builder = domain.builder

        self.query = ""
        self.pending_query = ""
        self.criteria: Criteria = domain.schema.normalize({})
        self.page = 1
        self.sort: str | None = None

        self.hits: list[dict[str, Any]] = []
        self.total_count = 0
        self.page_count = 0
        self.metrics: dict[str, float] = {}
        self.loading = False
        self.last_error: str | None = None
        self.last_expression = ""
        self.facets = FacetSnapshotCache()

        self._seq = 0
        self._last_signature: tuple[str, str] | None = None
        self._debounce_task: asyncio.Task | None = None

    # --- inputs ---

    async def set_query(self, text: str) -> None:
        """Schedule a query change. A newer keystroke cancels the pending one."""
        self.pending_query = text
        self._cancel_debounce()
        self._debounce_task = asyncio.create_task(self._commit_query_later(text))

    async def flush(self) -> None:
        """Wait for a pending debounced query to be committed and searched."""
        task = self._debounce_task
        if task is not None:
            await task

    async def set_filters(self, criteria: Mapping[str, Any]) -> QueryResult | None:
        self.criteria = self.domain.schema.normalize(criteria)
        return await self.refresh()

    async def set_page(self, page: int) -> QueryResult | None:
        if page < 1:
            raise ValueError(f"Page must be >= 1, got {page}")
        self.page = page
        return await self.refresh()

    async def set_sort(self, sort: str | None) -> QueryResult | None:
        self.sort = sort or None
        return await self.refresh()

    def options_for(self, field_name: str) -> list[FacetOption]:
        return self.facets.options_for(field_name)

    # --- query cycle ---

    async def refresh(self) -> QueryResult | None:
        """Run the primary (and metrics) query for the committed state.

        Returns the result when it was applied, None on failure or when a
        newer request superseded it.
        """
        expression = self._builder.build(self.criteria, now=self._clock())
        # Page follows criteria and query text; relative date clauses change with the clock.
        signature = (repr(self.domain.schema.normalize(self.criteria)), self.query)
        if self._last_signature is not None and signature != self._last_signature:
            self.page = 1
        self._last_signature = signature
        self.last_expression = expression

        self._seq += 1
        seq = self._seq
        self.loading = True
        index_name = self.domain.sort_table.index_for(self.sort)
        request = SearchRequest(
            query=self.query,
            filters=expression,
            page=self.page - 1,
            hits_per_page=self.domain.hits_per_page,
            facets=list(self.domain.facets),
            max_values_per_facet=self.domain.max_values_per_facet,
        )
        calls = [self._bounded(self.backend.search(index_name, request))]
        if self.domain.metric_attributes:
            metrics_request = SearchRequest(
                query=self.query,
                filters=expression,
                page=0,
                hits_per_page=0,
                facets=list(self.domain.metric_attributes),
                analytics=False,
            )
            calls.append(self._bounded(self.backend.search(self.domain.index, metrics_request)))

        outcomes = await asyncio.gather(*calls, return_exceptions=True)
        if seq != self._seq:
            logger.debug("discarding stale %s response #%d (latest #%d)", self.domain.name, seq, self._seq)
            return None
        self.loading = False

        error = next((o for o in outcomes if isinstance(o, BaseException)), None)
        if error is not None:
            self._fail(error)
            return None

        result = outcomes[0]
        self.hits = result.hits
        self.total_count = result.total_count
        self.page_count = result.page_count
        self.facets.record(result.facets)
        self.metrics = self.domain.metrics_from(outcomes[1]) if len(outcomes) > 1 else {}
        self.last_error = None
        return result

    async def close(self) -> None:
        """Cancel a pending debounce. In-flight searches finish but are ignored."""
        task = self._debounce_task
        self._debounce_task = None
        self._seq += 1
        self.loading = False
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    # --- internals ---

    async def _commit_query_later(self, text: str) -> None:
        await asyncio.sleep(self.debounce_sec)
        self._debounce_task = None
        self.query = text
        await self.refresh()

    def _cancel_debounce(self) -> None:
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = None

    async def _bounded(self, call: Any) -> QueryResult:
        return await asyncio.wait_for(call, timeout=self.timeout_sec)

    def _fail(self, error: BaseException) -> None:
        if isinstance(error, asyncio.TimeoutError):
            message = f"timed out after {self.timeout_sec:g}s"
        else:
            message = str(error) or type(error).__name__
        logger.warning("%s search failed: %s", self.domain.name, message)
        self.hits = []
        self.total_count = 0
        self.page_count = 0
        self.metrics = {}
        self.last_error = message
