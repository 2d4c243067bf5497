"""Sales tasks domain."""

from enum import StrEnum
from typing import Any

from estatedesk.domains.base import added_date_fields, domain_setting
from estatedesk.search.orchestrator import SearchDomain
from estatedesk.search.schema import FacetField, FilterSchema, ScalarField
from estatedesk.search.sort import SortTable

NAME = "tasks"
INDEX = "canvashomestasks"

FACETS = ["propertyName", "agentName", "stage", "tag", "taskType", "leadStatus"]
SUGGESTION_ATTRIBUTES = ["propertyName", "agentName", "taskType"]


class SortKey(StrEnum):
    RELEVANCE = "relevance"
    DATE_DESC = "date_desc"
    DATE_ASC = "date_asc"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    UPDATED_DESC = "updated_desc"
    SCHEDULED_ASC = "scheduled_asc"
    SCHEDULED_DESC = "scheduled_desc"


SORT_VARIANTS = {key: key.value for key in SortKey if key is not SortKey.RELEVANCE}

SCHEMA = FilterSchema(
    [
        FacetField("propertyName"),
        FacetField("agentName"),
        FacetField("agentId"),
        FacetField("stage"),
        FacetField("tag"),
        FacetField("taskType"),
        FacetField("leadStatus"),
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
