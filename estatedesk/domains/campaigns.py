"""Marketing campaigns domain, with cost and lead totals over the filtered set."""

from enum import StrEnum
from typing import Any

from estatedesk.domains.base import added_date_fields, domain_setting
from estatedesk.search.orchestrator import SearchDomain
from estatedesk.search.schema import FacetField, FilterSchema, ScalarField
from estatedesk.search.sort import SortTable

NAME = "campaigns"
INDEX = "canvashomescampaigns"

FACETS = ["campaignName", "status"]
METRIC_ATTRIBUTES = ["totalCost", "totalLeads"]
SUGGESTION_ATTRIBUTES = ["status", "campaignName"]


class SortKey(StrEnum):
    RELEVANCE = "relevance"
    DATE_DESC = "date_desc"
    DATE_ASC = "date_asc"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    UPDATED_DESC = "updated_desc"
    COST_DESC = "cost_desc"
    COST_ASC = "cost_asc"


SORT_VARIANTS = {key: key.value for key in SortKey if key is not SortKey.RELEVANCE}

SCHEMA = FilterSchema(
    [
        FacetField("campaignName"),
        FacetField("status"),
        *added_date_fields(),
        ScalarField("search"),
        ScalarField("sort"),
    ]
)
URL_SCHEMAS = (SCHEMA,)


def sort_table(index: str = INDEX) -> SortTable:
    return SortTable(index, SORT_VARIANTS)


def cost_per_lead(sums: dict[str, float]) -> dict[str, float]:
    leads = sums.get("totalLeads", 0)
    return {"costPerLead": sums.get("totalCost", 0) / leads if leads else 0.0}


def build_domain(settings: dict[str, Any] | None = None) -> SearchDomain:
    return SearchDomain(
        name=NAME,
        schema=SCHEMA,
        sort_table=sort_table(domain_setting(settings, NAME, "index", INDEX)),
        facets=list(FACETS),
        hits_per_page=domain_setting(settings, NAME, "hits_per_page", 20),
        max_values_per_facet=domain_setting(settings, NAME, "max_values_per_facet", 100),
        metric_attributes=list(METRIC_ATTRIBUTES),
        derive_metrics=cost_per_lead,
    )
