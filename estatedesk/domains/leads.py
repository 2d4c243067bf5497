"""Leads domain. Same filter shape as tasks plus lead state, source and owner."""

from typing import Any

from estatedesk.domains.base import added_date_fields, domain_setting
from estatedesk.domains.tasks import SortKey
from estatedesk.search.orchestrator import SearchDomain
from estatedesk.search.schema import FacetField, FilterSchema, ScalarField
from estatedesk.search.sort import SortTable

NAME = "leads"
INDEX = "canvashomeleads"

FACETS = ["state", "propertyName", "agentName", "source", "stage", "tag", "taskType", "leadStatus"]
SUGGESTION_ATTRIBUTES = ["name", "propertyName", "agentName"]

SORT_VARIANTS = {key: key.value for key in SortKey if key is not SortKey.RELEVANCE}

SCHEMA = FilterSchema(
    [
        FacetField("state"),
        FacetField("propertyName"),
        FacetField("agentName"),
        FacetField("agentId"),
        FacetField("source"),
        FacetField("stage"),
        FacetField("tag"),
        FacetField("taskType"),
        FacetField("leadStatus"),
        FacetField("userId"),
        *added_date_fields(),
        ScalarField("search"),
        ScalarField("sort"),
    ]
)
URL_SCHEMAS = (SCHEMA,)


def sort_table(index: str = INDEX) -> SortTable:
    return SortTable(index, SORT_VARIANTS)


def build_domain(settings: dict[str, Any] | None = None) -> SearchDomain:
    return SearchDomain(
        name=NAME,
        schema=SCHEMA,
        sort_table=sort_table(domain_setting(settings, NAME, "index", INDEX)),
        facets=list(FACETS),
        hits_per_page=domain_setting(settings, NAME, "hits_per_page", 20),
        max_values_per_facet=domain_setting(settings, NAME, "max_values_per_facet", 100),
    )
