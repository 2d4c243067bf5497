"""Filter field declarations: how one criteria key normalizes, compiles and maps to the URL.

A search domain declares an ordered FilterSchema. Declaration order is the
order clauses appear in the compiled expression, which keeps output stable for
golden tests and cache keys.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Mapping

from estatedesk.search.dates import range_end, range_start, relative_start
from estatedesk.search.expression import facet_group, or_group, range_clause

Criteria = dict[str, Any]


def param_name(prefix: str, name: str) -> str:
    """URL parameter for a field: prefix + capitalized name, or the bare name."""
    if not prefix:
        return name
    return prefix + name[:1].upper() + name[1:]


def is_set(value: Any) -> bool:
    """True for values that constrain a search. None, False, '' and empty containers are unset."""
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, Mapping):
        return any(is_set(v) for v in value.values())
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return True


def merge_criteria(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> Criteria:
    """Shallow merge: overlay wins on every key it actually sets."""
    result = dict(base)
    for key, value in overlay.items():
        if is_set(value):
            result[key] = value
    return result


def string_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None and str(v).strip()]
    return []


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value is True


def _scalar_text(value: Any) -> str:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if value is None:
        return ""
    return str(value).strip()


def _split_param(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [segment for segment in raw.split(",") if segment]


@dataclass(frozen=True)
class Field:
    """Base field: one criteria key mapped to one search attribute and one URL parameter."""

    key: str
    attribute: str | None = None
    param: str | None = None

    @property
    def attr(self) -> str:
        return self.attribute or self.key

    def url_param(self, prefix: str) -> str:
        return param_name(prefix, self.param or self.key)

    def keys(self) -> tuple[str, ...]:
        return (self.key,)

    def normalize(self, criteria: Mapping[str, Any], out: Criteria) -> None:
        raise NotImplementedError

    def clauses(self, criteria: Mapping[str, Any], now: datetime) -> list[str]:
        return []

    def encode(self, criteria: Mapping[str, Any], params: dict[str, str], prefix: str) -> None:
        raise NotImplementedError

    def decode(self, params: Mapping[str, str], out: Criteria, prefix: str) -> None:
        raise NotImplementedError

    def describe(self, criteria: Mapping[str, Any]) -> str | None:
        return None


@dataclass(frozen=True)
class FacetField(Field):
    """Multi-select facet: OR within the field, AND across fields."""

    def normalize(self, criteria: Mapping[str, Any], out: Criteria) -> None:
        out[self.key] = string_list(criteria.get(self.key))

    def clauses(self, criteria: Mapping[str, Any], now: datetime) -> list[str]:
        group = facet_group(self.attr, criteria.get(self.key) or [])
        return [group] if group else []

    def encode(self, criteria: Mapping[str, Any], params: dict[str, str], prefix: str) -> None:
        values = string_list(criteria.get(self.key))
        name = self.url_param(prefix)
        if values:
            params[name] = ",".join(values)
        else:
            params.pop(name, None)

    def decode(self, params: Mapping[str, str], out: Criteria, prefix: str) -> None:
        out[self.key] = _split_param(params.get(self.url_param(prefix)))

    def describe(self, criteria: Mapping[str, Any]) -> str | None:
        values = string_list(criteria.get(self.key))
        return f"{self.key}: {', '.join(values)}" if values else None


@dataclass(frozen=True)
class FlagGroupField(FacetField):
    """Selected sub-flags of a nested boolean map, e.g. inventoryStatus.sold:true."""

    flags: tuple[str, ...] = ()

    def _selected(self, value: Any) -> list[str]:
        if isinstance(value, Mapping):
            return [flag for flag in self.flags if _as_bool(value.get(flag))]
        return [v for v in string_list(value) if v in self.flags]

    def normalize(self, criteria: Mapping[str, Any], out: Criteria) -> None:
        out[self.key] = self._selected(criteria.get(self.key))

    def clauses(self, criteria: Mapping[str, Any], now: datetime) -> list[str]:
        selected = set(self._selected(criteria.get(self.key)))
        group = or_group(f"{self.attr}.{flag}:true" for flag in self.flags if flag in selected)
        return [group] if group else []

    def decode(self, params: Mapping[str, str], out: Criteria, prefix: str) -> None:
        raw = _split_param(params.get(self.url_param(prefix)))
        out[self.key] = [v for v in raw if v in self.flags]


@dataclass(frozen=True)
class BooleanField(Field):
    """Sentinel flag: attr:true when set, absent otherwise."""

    def normalize(self, criteria: Mapping[str, Any], out: Criteria) -> None:
        out[self.key] = _as_bool(criteria.get(self.key))

    def clauses(self, criteria: Mapping[str, Any], now: datetime) -> list[str]:
        return [f"{self.attr}:true"] if criteria.get(self.key) else []

    def encode(self, criteria: Mapping[str, Any], params: dict[str, str], prefix: str) -> None:
        name = self.url_param(prefix)
        if _as_bool(criteria.get(self.key)):
            params[name] = "true"
        else:
            params.pop(name, None)

    def decode(self, params: Mapping[str, str], out: Criteria, prefix: str) -> None:
        out[self.key] = params.get(self.url_param(prefix)) == "true"

    def describe(self, criteria: Mapping[str, Any]) -> str | None:
        return f"{self.key}: yes" if criteria.get(self.key) else None


@dataclass(frozen=True)
class ScalarField(Field):
    """Optional single string value (search text, sort key). Compiles to nothing on its own."""

    def normalize(self, criteria: Mapping[str, Any], out: Criteria) -> None:
        text = _scalar_text(criteria.get(self.key))
        if text:
            out[self.key] = text

    def encode(self, criteria: Mapping[str, Any], params: dict[str, str], prefix: str) -> None:
        name = self.url_param(prefix)
        text = _scalar_text(criteria.get(self.key))
        if text:
            params[name] = text
        else:
            params.pop(name, None)

    def decode(self, params: Mapping[str, str], out: Criteria, prefix: str) -> None:
        raw = params.get(self.url_param(prefix))
        if raw:
            out[self.key] = raw

    def describe(self, criteria: Mapping[str, Any]) -> str | None:
        text = _scalar_text(criteria.get(self.key))
        return f"{self.key}: {text}" if text else None


def calendar_bounds(value: Any) -> tuple[int | None, int | None]:
    """(lower, upper) seconds for a {startDate, endDate} range of dates or Unix timestamps."""
    if not isinstance(value, Mapping):
        return None, None
    return range_start(value.get("startDate")), range_end(value.get("endDate"))


@dataclass(frozen=True)
class CalendarRangeField(Field):
    """Explicit calendar range {startDate, endDate} over a timestamp attribute."""

    def normalize(self, criteria: Mapping[str, Any], out: Criteria) -> None:
        value = criteria.get(self.key)
        if not isinstance(value, Mapping):
            return
        cleaned = {
            name: _scalar_text(value.get(name))
            for name in ("startDate", "endDate")
            if _scalar_text(value.get(name))
        }
        if cleaned:
            out[self.key] = cleaned

    def clauses(self, criteria: Mapping[str, Any], now: datetime) -> list[str]:
        lower, upper = calendar_bounds(criteria.get(self.key))
        clause = range_clause(self.attr, lower, upper)
        return [clause] if clause else []

    def encode(self, criteria: Mapping[str, Any], params: dict[str, str], prefix: str) -> None:
        stem = self.url_param(prefix)
        value = criteria.get(self.key)
        value = value if isinstance(value, Mapping) else {}
        for name, suffix in (("startDate", "From"), ("endDate", "To")):
            text = _scalar_text(value.get(name))
            if text:
                params[stem + suffix] = text
            else:
                params.pop(stem + suffix, None)

    def decode(self, params: Mapping[str, str], out: Criteria, prefix: str) -> None:
        stem = self.url_param(prefix)
        value = {}
        if params.get(stem + "From"):
            value["startDate"] = params[stem + "From"]
        if params.get(stem + "To"):
            value["endDate"] = params[stem + "To"]
        if value:
            out[self.key] = value

    def describe(self, criteria: Mapping[str, Any]) -> str | None:
        value = criteria.get(self.key)
        if not isinstance(value, Mapping) or not is_set(value):
            return None
        start = _scalar_text(value.get("startDate")) or "Start"
        end = _scalar_text(value.get("endDate")) or "End"
        return f"{self.key}: {start} - {end}"


@dataclass(frozen=True)
class RelativeDateField(ScalarField):
    """Relative shortcut (today, 7d, 30d, 90d) that yields attr >= start.

    When the calendar range named by overridden_by has a usable bound, the
    explicit range wins and this field emits nothing.
    """

    overridden_by: str | None = None

    def clauses(self, criteria: Mapping[str, Any], now: datetime) -> list[str]:
        if self.overridden_by:
            lower, upper = calendar_bounds(criteria.get(self.overridden_by))
            if lower is not None or upper is not None:
                return []
        start = relative_start(criteria.get(self.key), now)
        if start is None:
            return []
        return [f"{self.attr} >= {start}"]


class FilterSchema:
    """Ordered field declarations for one search domain (or one URL-synced surface)."""

    def __init__(self, fields: Iterable[Field], prefix: str = "") -> None:
        self.fields: tuple[Field, ...] = tuple(fields)
        self.prefix = prefix
        seen: set[str] = set()
        for f in self.fields:
            for key in f.keys():
                if key in seen:
                    raise ValueError(f"Duplicate criteria key in schema: {key!r}")
                seen.add(key)

    def keys(self) -> list[str]:
        return [key for f in self.fields for key in f.keys()]

    def field(self, key: str) -> Field:
        for f in self.fields:
            if f.key == key:
                return f
        raise KeyError(key)

    def normalize(self, criteria: Mapping[str, Any] | None) -> Criteria:
        """Canonical criteria: known keys only, arrays and booleans always present."""
        out: Criteria = {}
        source = criteria or {}
        for f in self.fields:
            f.normalize(source, out)
        return out

    def extend(self, other: "FilterSchema") -> "FilterSchema":
        """Schema with other's fields appended; fields whose keys already exist are skipped."""
        own = set(self.keys())
        extra = [f for f in other.fields if not own.intersection(f.keys())]
        return FilterSchema([*self.fields, *extra], prefix=self.prefix)
