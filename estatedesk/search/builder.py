"""Compile filter criteria into the engine's boolean filter expression."""

from datetime import datetime
from typing import Any, Mapping

from estatedesk.search.expression import join_and
from estatedesk.search.schema import FilterSchema


class FilterExpressionBuilder:
    """Pure compiler from criteria to a filter string, one per search domain.

    Clauses follow the schema's field order. Unknown keys are ignored and
    malformed bounds are dropped, so build() never raises for bad input.
    """

    def __init__(self, schema: FilterSchema) -> None:
        self.schema = schema

    def build(self, criteria: Mapping[str, Any] | None, *, now: datetime | None = None) -> str:
        """Filter expression for criteria. Empty criteria gives '' (match all)."""
        now = now or datetime.now()
        canonical = self.schema.normalize(criteria)
        parts: list[str] = []
        for f in self.schema.fields:
            parts.extend(f.clauses(canonical, now))
        return join_and(parts)

    def describe(self, criteria: Mapping[str, Any] | None) -> str:
        """Short human-readable summary of the active filters, e.g. 'status: active | plan: pro'."""
        canonical = self.schema.normalize(criteria)
        lines = [f.describe(canonical) for f in self.schema.fields]
        return " | ".join(line for line in lines if line)
