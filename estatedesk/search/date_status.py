"""Three-state date filters: did happen in a window, did not, or never happened.

One logical date dimension (e.g. "last seen") is stored in criteria as five
keys: <name>From/<name>To (positive window), <name>NotFrom/<name>NotTo
(negative window) and a never-flag. At most one of the three groups is ever
populated. reconcile() turns a UI selection into a DateConstraint, and
DateDimension writes that constraint back as field updates, so no caller
mutates the five keys directly.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal, Mapping

from estatedesk.search.dates import (
    MAX_TIMESTAMP,
    end_of_day,
    parse_timestamp,
    start_of_day,
    unix_to_date_string,
)
from estatedesk.search.expression import not_range_clause, range_clause
from estatedesk.search.schema import Criteria, Field, param_name

logger = logging.getLogger(__name__)

DateStatus = Literal["yes", "no"] | None
DateRange = dict[str, str]

# Positive lower bound meaning "has happened at some point", with no window.
EVER_FROM = 1


@dataclass(frozen=True)
class Unconstrained:
    pass


@dataclass(frozen=True)
class Positive:
    from_ts: int | None = None
    to_ts: int | None = None


@dataclass(frozen=True)
class Negative:
    from_ts: int | None = None
    to_ts: int | None = None


@dataclass(frozen=True)
class Never:
    pass


DateConstraint = Unconstrained | Positive | Negative | Never


@dataclass(frozen=True)
class DateLimits:
    """Observed min/max of a timestamp attribute in the index. max == 0 means unknown."""

    min: int = 0
    max: int = 0

    def clamp(self, constraint: DateConstraint) -> DateConstraint:
        if self.max <= 0 or not isinstance(constraint, (Positive, Negative)):
            return constraint
        lower, upper = constraint.from_ts, constraint.to_ts
        if lower is not None and lower != EVER_FROM:
            lower = max(lower, self.min)
        if upper is not None:
            upper = min(upper, self.max)
        if lower is not None and upper is not None and lower > upper:
            # Window lies outside the observed range; clamping would invert it.
            return constraint
        return type(constraint)(lower, upper)


def reconcile(status: DateStatus, date_range: Mapping[str, Any] | None = None) -> DateConstraint:
    """Map a (status, {start, end}) selection to a constraint.

    yes: positive window (unbounded means "has ever happened").
    no: negative window, or Never when no usable bound was given.
    None or anything else: unconstrained.
    """
    rng = date_range or {}
    lower = start_of_day(rng.get("start"))
    upper = end_of_day(rng.get("end"))
    if status is None:
        return Unconstrained()
    if status == "yes":
        if lower is None and upper is None:
            return Positive(EVER_FROM, None)
        return Positive(lower, upper)
    if status == "no":
        if lower is None and upper is None:
            return Never()
        return Negative(lower, upper)
    logger.warning("unknown date status %r, leaving the dimension unconstrained", status)
    return Unconstrained()


def to_display(constraint: DateConstraint) -> tuple[DateStatus, DateRange]:
    """Inverse of reconcile: the (status, range) a date picker should show."""
    if isinstance(constraint, Never):
        return "no", {}
    if isinstance(constraint, (Positive, Negative)):
        status: DateStatus = "yes" if isinstance(constraint, Positive) else "no"
        rng: DateRange = {}
        if constraint.from_ts is not None and constraint.from_ts != EVER_FROM:
            start = unix_to_date_string(constraint.from_ts)
            if start:
                rng["start"] = start
        if constraint.to_ts is not None:
            end = unix_to_date_string(constraint.to_ts)
            if end:
                rng["end"] = end
        return status, rng
    return None, {}


@dataclass(frozen=True)
class DateDimension(Field):
    """One date dimension and its five criteria keys."""

    never_key: str = ""
    never_param: str | None = None

    @property
    def from_key(self) -> str:
        return f"{self.key}From"

    @property
    def to_key(self) -> str:
        return f"{self.key}To"

    @property
    def not_from_key(self) -> str:
        return f"{self.key}NotFrom"

    @property
    def not_to_key(self) -> str:
        return f"{self.key}NotTo"

    @property
    def flag_key(self) -> str:
        return self.never_key or f"hasNever{self.key[:1].upper()}{self.key[1:]}"

    def keys(self) -> tuple[str, ...]:
        return (self.from_key, self.to_key, self.not_from_key, self.not_to_key, self.flag_key)

    def _timestamp_keys(self) -> tuple[str, ...]:
        return (self.from_key, self.to_key, self.not_from_key, self.not_to_key)

    def _params(self, prefix: str) -> dict[str, str]:
        stem = self.param or self.key
        return {
            self.from_key: param_name(prefix, f"{stem}From"),
            self.to_key: param_name(prefix, f"{stem}To"),
            self.not_from_key: param_name(prefix, f"{stem}NotFrom"),
            self.not_to_key: param_name(prefix, f"{stem}NotTo"),
            self.flag_key: param_name(prefix, self.never_param or self.flag_key),
        }

    def read(self, criteria: Mapping[str, Any]) -> DateConstraint:
        """Current constraint stored in criteria. Never > positive > negative if stale keys collide."""
        if criteria.get(self.flag_key) is True:
            return Never()
        lower = parse_timestamp(criteria.get(self.from_key))
        upper = parse_timestamp(criteria.get(self.to_key))
        if lower is not None or upper is not None:
            return Positive(lower, upper)
        lower = parse_timestamp(criteria.get(self.not_from_key))
        upper = parse_timestamp(criteria.get(self.not_to_key))
        if lower is not None or upper is not None:
            return Negative(lower, upper)
        return Unconstrained()

    def updates(self, constraint: DateConstraint) -> dict[str, Any]:
        """Field updates for a constraint. None means remove the key."""
        result: dict[str, Any] = {key: None for key in self._timestamp_keys()}
        result[self.flag_key] = False
        if isinstance(constraint, Never):
            result[self.flag_key] = True
        elif isinstance(constraint, Positive):
            result[self.from_key] = _ts_text(constraint.from_ts)
            result[self.to_key] = _ts_text(constraint.to_ts)
        elif isinstance(constraint, Negative):
            result[self.not_from_key] = _ts_text(constraint.from_ts)
            result[self.not_to_key] = _ts_text(constraint.to_ts)
        return result

    def apply(
        self,
        criteria: Mapping[str, Any],
        status: DateStatus,
        date_range: Mapping[str, Any] | None = None,
        *,
        limits: DateLimits | None = None,
    ) -> Criteria:
        """Return new criteria with this dimension set from (status, range). Input is not modified."""
        constraint = reconcile(status, date_range)
        if limits is not None:
            constraint = limits.clamp(constraint)
        result = dict(criteria)
        for key, value in self.updates(constraint).items():
            if value is None:
                result.pop(key, None)
            else:
                result[key] = value
        return result

    def display(self, criteria: Mapping[str, Any]) -> tuple[DateStatus, DateRange]:
        return to_display(self.read(criteria))

    def normalize(self, criteria: Mapping[str, Any], out: Criteria) -> None:
        for key in self._timestamp_keys():
            ts = parse_timestamp(criteria.get(key))
            if ts is not None:
                out[key] = str(ts)
        flag = criteria.get(self.flag_key)
        out[self.flag_key] = flag is True or (isinstance(flag, str) and flag.lower() == "true")

    def clauses(self, criteria: Mapping[str, Any], now: datetime) -> list[str]:
        constraint = self.read(criteria)
        if isinstance(constraint, Positive):
            clause = range_clause(self.attr, constraint.from_ts, constraint.to_ts)
            return [clause] if clause else []
        if isinstance(constraint, Negative):
            return [not_range_clause(self.attr, constraint.from_ts, constraint.to_ts)]
        if isinstance(constraint, Never):
            return [not_range_clause(self.attr, EVER_FROM, MAX_TIMESTAMP)]
        return []

    def encode(self, criteria: Mapping[str, Any], params: dict[str, str], prefix: str) -> None:
        names = self._params(prefix)
        for key in self._timestamp_keys():
            ts = parse_timestamp(criteria.get(key))
            if ts is not None:
                params[names[key]] = str(ts)
            else:
                params.pop(names[key], None)
        if criteria.get(self.flag_key) is True:
            params[names[self.flag_key]] = "true"
        else:
            params.pop(names[self.flag_key], None)

    def decode(self, params: Mapping[str, str], out: Criteria, prefix: str) -> None:
        names = self._params(prefix)
        for key in self._timestamp_keys():
            raw = params.get(names[key])
            if raw:
                out[key] = raw
        out[self.flag_key] = params.get(names[self.flag_key]) == "true"

    def describe(self, criteria: Mapping[str, Any]) -> str | None:
        status, rng = self.display(criteria)
        if status is None:
            return None
        if not rng:
            return f"{self.key}: {'ever' if status == 'yes' else 'never'}"
        return f"{self.key}: {status} {rng.get('start', 'Start')} - {rng.get('end', 'End')}"


def _ts_text(value: int | None) -> str | None:
    return None if value is None else str(value)
