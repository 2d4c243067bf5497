"""Data models for search engine responses."""

from typing import Any

from pydantic import BaseModel, Field


class FacetStats(BaseModel):
    """Numeric aggregate for one facet attribute."""

    min: float = 0
    max: float = 0
    avg: float = 0
    sum: float = 0


class QueryResult(BaseModel):
    """One page of hits plus facet counts, recreated on every search."""

    hits: list[dict[str, Any]] = Field(default_factory=list)
    total_count: int = 0
    page: int = 0
    page_count: int = 0
    facets: dict[str, dict[str, int]] = Field(default_factory=dict)
    facets_stats: dict[str, FacetStats] = Field(default_factory=dict)
    took_ms: int = 0

    @classmethod
    def from_engine(cls, data: dict[str, Any]) -> "QueryResult":
        """Build from a raw engine response (nbHits, nbPages, processingTimeMS, ...)."""
        return cls(
            hits=data.get("hits") or [],
            total_count=data.get("nbHits") or 0,
            page=data.get("page") or 0,
            page_count=data.get("nbPages") or 0,
            facets=data.get("facets") or {},
            facets_stats=data.get("facets_stats") or {},
            took_ms=data.get("processingTimeMS") or 0,
        )

    def stat_sum(self, attribute: str) -> float:
        stats = self.facets_stats.get(attribute)
        return stats.sum if stats else 0.0
