"""Agents domain: page-level and modal filters, sort replicas, date limits."""

import logging
import math
from datetime import datetime
from enum import StrEnum
from typing import Any

from estatedesk.domains.base import domain_setting
from estatedesk.search.backend import SearchBackend, SearchError, SearchRequest
from estatedesk.search.date_status import DateDimension, DateLimits
from estatedesk.search.dates import end_of_day, start_of_day
from estatedesk.search.expression import range_clause
from estatedesk.search.orchestrator import SearchDomain
from estatedesk.search.schema import (
    BooleanField,
    FacetField,
    FilterSchema,
    FlagGroupField,
    ScalarField,
)
from estatedesk.search.sort import SortTable

logger = logging.getLogger(__name__)

NAME = "agents"
INDEX = "agents"
MODAL_PREFIX = "modal"

FACETS = [
    "agentStatus",
    "appInstalled",
    "areaOfOperation",
    "businessCategory",
    "contactStatus",
    "connectHistory.timestamp",
    "inventoryStatus.available",
    "inventoryStatus.delisted",
    "inventoryStatus.hold",
    "inventoryStatus.sold",
    "kamName",
    "kamId",
    "payStatus",
    "noOfEnquiries",
    "userType",
    "activity",
    "verified",
    "blackListed",
    "lastEnquiry",
    "lastSeen",
    "lastTried",
]

INVENTORY_FLAGS = ("delisted", "hold", "sold", "available")
SUGGESTION_ATTRIBUTES = ["agentId", "name", "location"]


class SortKey(StrEnum):
    RECENT = "recent"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"


SORT_VARIANTS = {
    SortKey.NAME_ASC: "name_asc",
    SortKey.NAME_DESC: "name_desc",
}

LAST_ENQUIRY = DateDimension(
    "lastEnquiry",
    param="lastEnquiryDid",
    never_key="hasNeverEnquired",
    never_param="hasNeverEnquiredDid",
)
LAST_SEEN = DateDimension("lastSeen", never_key="hasNeverBeenSeen")
LAST_CONTACT = DateDimension(
    "lastContact",
    attribute="connectHistory.timestamp",
    never_key="hasNeverBeenContacted",
)
DATE_DIMENSIONS = (LAST_ENQUIRY, LAST_SEEN, LAST_CONTACT)

PAGE_SCHEMA = FilterSchema(
    [
        FacetField("kam", attribute="kamName"),
        FacetField("plan", attribute="userType"),
        FacetField("status", attribute="agentStatus"),
        FacetField("location", attribute="areaOfOperation"),
        FacetField("appInstalled"),
        FlagGroupField("inventoryStatus", flags=INVENTORY_FLAGS),
        ScalarField("search"),
        ScalarField("sort"),
    ]
)

MODAL_SCHEMA = FilterSchema(
    [
        FacetField("areaOfOperation"),
        FacetField("businessCategory"),
        FacetField("payStatus"),
        FacetField("contactStatus"),
        FacetField("activity"),
        FacetField("appInstalled"),
        BooleanField("verified"),
        BooleanField("blackListed"),
        *DATE_DIMENSIONS,
    ],
    prefix=MODAL_PREFIX,
)

# Page and modal criteria are merged before compiling; modal wins on shared keys.
SCHEMA = PAGE_SCHEMA.extend(MODAL_SCHEMA)
URL_SCHEMAS = (PAGE_SCHEMA, MODAL_SCHEMA)


def sort_table(index: str = INDEX) -> SortTable:
    return SortTable(index, SORT_VARIANTS)


def build_domain(settings: dict[str, Any] | None = None) -> SearchDomain:
    return SearchDomain(
        name=NAME,
        schema=SCHEMA,
        sort_table=sort_table(domain_setting(settings, NAME, "index", INDEX)),
        facets=list(FACETS),
        hits_per_page=domain_setting(settings, NAME, "hits_per_page", 50),
        max_values_per_facet=domain_setting(settings, NAME, "max_values_per_facet", 1000),
    )


def _min_max(values: dict[str, int]) -> DateLimits:
    stamps: list[float] = []
    for key in values:
        try:
            number = float(key)
        except ValueError:
            continue
        if not math.isnan(number):
            stamps.append(number)
    if not stamps:
        return DateLimits(0, 0)
    return DateLimits(math.floor(min(stamps)), math.floor(max(stamps)))


async def fetch_date_limits(
    backend: SearchBackend,
    index_name: str = INDEX,
    *,
    now: datetime | None = None,
) -> dict[str, DateLimits]:
    """Observed min/max per date dimension, from the timestamp facets.

    A dimension with no timestamps gets DateLimits(0, 0). When the query fails
    every dimension falls back to (0, now) so the date pickers stay usable.
    """
    request = SearchRequest(
        hits_per_page=0,
        facets=[dim.attr for dim in DATE_DIMENSIONS],
        max_values_per_facet=1000,
    )
    try:
        result = await backend.search(index_name, request)
    except SearchError as e:
        logger.warning("agent date limits unavailable: %s", e)
        upper = math.floor((now or datetime.now()).timestamp())
        return {dim.key: DateLimits(0, upper) for dim in DATE_DIMENSIONS}
    return {dim.key: _min_max(result.facets.get(dim.attr, {})) for dim in DATE_DIMENSIONS}


async def fetch_today_facets(
    backend: SearchBackend,
    index_name: str = INDEX,
    *,
    now: datetime | None = None,
) -> dict[str, dict[str, int]]:
    """Facet counts restricted to agents tried today (local day). Raises SearchError."""
    today = (now or datetime.now()).date()
    filters = range_clause("lastTried", start_of_day(today), end_of_day(today)) or ""
    request = SearchRequest(
        hits_per_page=0,
        filters=filters,
        facets=list(FACETS),
        max_values_per_facet=1000,
    )
    result = await backend.search(index_name, request)
    return result.facets
