"""Stable facet option lists: order and membership from the first load, counts from the latest."""

import logging
from dataclasses import dataclass
from typing import Mapping

logger = logging.getLogger(__name__)

FacetSnapshot = dict[str, dict[str, int]]


@dataclass(frozen=True)
class FacetOption:
    label: str
    value: str
    count: int


def _copy(facets: Mapping[str, Mapping[str, int]]) -> FacetSnapshot:
    return {name: dict(values) for name, values in facets.items()}


class FacetSnapshotCache:
    """Initial facets (first success wins, then frozen) plus current counts.

    Only successful responses are recorded. A first load that fails, or that
    returns no facets, leaves initial empty so a later success still fills it.
    """

    def __init__(self) -> None:
        self.initial: FacetSnapshot = {}
        self.current: FacetSnapshot = {}

    def record(self, facets: Mapping[str, Mapping[str, int]] | None) -> None:
        snapshot = _copy(facets or {})
        if not self.initial and snapshot:
            self.initial = snapshot
            logger.debug("initial facets captured for %d fields", len(snapshot))
        self.current = snapshot

    def options_for(self, field: str) -> list[FacetOption]:
        """Options for field in initial order; counts from current, 0 when filtered out."""
        counts = self.current.get(field, {})
        return [
            FacetOption(label=value, value=value, count=counts.get(value, 0))
            for value in self.initial.get(field, {})
        ]

    def reset(self) -> None:
        """Forget both snapshots, as for a freshly mounted surface."""
        self.initial = {}
        self.current = {}
