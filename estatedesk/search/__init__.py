"""Faceted search core: filter compiler, date reconciler, facet cache, URL sync, orchestrator."""

from estatedesk.search.backend import (
    AlgoliaSearchBackend,
    SearchBackend,
    SearchError,
    SearchRequest,
)
from estatedesk.search.builder import FilterExpressionBuilder
from estatedesk.search.date_status import (
    DateConstraint,
    DateDimension,
    DateLimits,
    Negative,
    Never,
    Positive,
    Unconstrained,
    reconcile,
    to_display,
)
from estatedesk.search.facets import FacetOption, FacetSnapshotCache
from estatedesk.search.models import FacetStats, QueryResult
from estatedesk.search.orchestrator import SearchDomain, SearchOrchestrator
from estatedesk.search.schema import (
    BooleanField,
    CalendarRangeField,
    FacetField,
    FilterSchema,
    FlagGroupField,
    RelativeDateField,
    ScalarField,
    merge_criteria,
)
from estatedesk.search.sort import SortTable
from estatedesk.search.surface import FilterSurface
from estatedesk.search.url_state import (
    LocationHistory,
    UrlFilterCodec,
    UrlStateSync,
    decode_query,
)

__all__ = [
    "AlgoliaSearchBackend",
    "BooleanField",
    "CalendarRangeField",
    "DateConstraint",
    "DateDimension",
    "DateLimits",
    "FacetField",
    "FacetOption",
    "FacetSnapshotCache",
    "FacetStats",
    "FilterExpressionBuilder",
    "FilterSchema",
    "FilterSurface",
    "FlagGroupField",
    "LocationHistory",
    "Negative",
    "Never",
    "Positive",
    "QueryResult",
    "RelativeDateField",
    "ScalarField",
    "SearchBackend",
    "SearchDomain",
    "SearchError",
    "SearchOrchestrator",
    "SearchRequest",
    "SortTable",
    "Unconstrained",
    "UrlFilterCodec",
    "UrlStateSync",
    "decode_query",
    "merge_criteria",
    "reconcile",
    "to_display",
]
