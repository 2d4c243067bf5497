"""Clause helpers for the search engine's boolean filter grammar."""

from typing import Iterable

from estatedesk.search.dates import MAX_TIMESTAMP


def quote(value: str) -> str:
    """Double-quote a facet value, escaping backslashes and quotes."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def or_group(terms: Iterable[str]) -> str | None:
    """(a OR b OR ...). None for no terms, so callers never emit an empty group."""
    items = [t for t in terms if t]
    if not items:
        return None
    return "(" + " OR ".join(items) + ")"


def facet_group(attribute: str, values: Iterable[str]) -> str | None:
    """(attr:"v1" OR attr:"v2")."""
    return or_group(f"{attribute}:{quote(v)}" for v in values)


def range_clause(attribute: str, lower: int | None, upper: int | None) -> str | None:
    """attr >= lower and/or attr <= upper. Both bounds are grouped in one AND."""
    parts: list[str] = []
    if lower is not None:
        parts.append(f"{attribute} >= {lower}")
    if upper is not None:
        parts.append(f"{attribute} <= {upper}")
    if not parts:
        return None
    if len(parts) == 1:
        return parts[0]
    return "(" + " AND ".join(parts) + ")"


def not_range_clause(attribute: str, lower: int | None, upper: int | None) -> str:
    """NOT attr:lower TO upper. Open ends are closed with 0 and MAX_TIMESTAMP."""
    lo = 0 if lower is None else lower
    hi = MAX_TIMESTAMP if upper is None else upper
    return f"NOT {attribute}:{lo} TO {hi}"


def join_and(parts: Iterable[str | None]) -> str:
    """Join non-empty clauses with AND. No clauses gives ''."""
    return " AND ".join(p for p in parts if p)
