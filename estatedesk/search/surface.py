"""Filter modal semantics: local edits seeded from the URL, committed on apply."""

import logging
from typing import Any, Mapping

from estatedesk.search.date_status import DateDimension, DateLimits, DateRange, DateStatus
from estatedesk.search.schema import Criteria, FilterSchema, string_list
from estatedesk.search.url_state import UrlStateSync

logger = logging.getLogger(__name__)


class FilterSurface:
    """One URL-synced filter surface (e.g. the agents filter modal).

    open() reads the URL once per visibility event. Edits stay local until
    apply(), which reconciles every date dimension, commits to the URL with
    replace semantics and returns the committed criteria. close() drops
    unapplied edits.
    """

    def __init__(
        self,
        schema: FilterSchema,
        sync: UrlStateSync,
        *,
        limits: Mapping[str, DateLimits] | None = None,
    ) -> None:
        self.schema = schema
        self.sync = sync
        self.limits: dict[str, DateLimits] = dict(limits or {})
        self.is_open = False
        self.draft: Criteria = {}
        self.date_state: dict[str, tuple[DateStatus, DateRange]] = {}
        self._dimensions: dict[str, DateDimension] = {
            f.key: f for f in schema.fields if isinstance(f, DateDimension)
        }

    def open(self) -> Criteria:
        """Seed local state from the URL. A second call while open keeps in-progress edits."""
        if self.is_open:
            return self.draft
        self.draft = self.sync.read()
        self.date_state = {key: dim.display(self.draft) for key, dim in self._dimensions.items()}
        self.is_open = True
        return self.draft

    def close(self) -> None:
        self.is_open = False
        self.draft = {}
        self.date_state = {}

    def set_limits(self, key: str, limits: DateLimits) -> None:
        self._dimension(key)
        self.limits[key] = limits

    def set_field(self, key: str, value: Any) -> None:
        self._require_open()
        date_keys = {k for dim in self._dimensions.values() for k in dim.keys()}
        if key not in self.schema.keys() or key in date_keys:
            raise ValueError(f"Unknown filter field: {key!r}")
        self.draft[key] = value

    def toggle_value(self, key: str, value: str) -> list[str]:
        """Add value to a multi-select field, or remove it when already selected."""
        self._require_open()
        if key not in self.schema.keys():
            raise ValueError(f"Unknown filter field: {key!r}")
        selected = string_list(self.draft.get(key))
        if value in selected:
            selected.remove(value)
        else:
            selected.append(value)
        self.draft[key] = selected
        return selected

    def set_date_status(self, key: str, status: DateStatus) -> None:
        """Pick yes/no/unset for a dimension. Unset also clears the picked window."""
        self._require_open()
        self._dimension(key)
        if status not in (None, "yes", "no"):
            raise ValueError(f"Unknown date status: {status!r}")
        _, rng = self.date_state.get(key, (None, {}))
        self.date_state[key] = (status, {} if status is None else dict(rng))

    def set_date_range(self, key: str, start: str | None = None, end: str | None = None) -> None:
        self._require_open()
        self._dimension(key)
        status, _ = self.date_state.get(key, (None, {}))
        rng: DateRange = {}
        if start:
            rng["start"] = start
        if end:
            rng["end"] = end
        self.date_state[key] = (status, rng)

    def apply(self) -> Criteria:
        self._require_open()
        criteria = dict(self.draft)
        for key, dim in self._dimensions.items():
            status, rng = self.date_state.get(key, (None, {}))
            criteria = dim.apply(criteria, status, rng, limits=self.limits.get(key))
        committed = self.schema.normalize(criteria)
        self.sync.commit(committed)
        logger.info("filters applied: %s", self.sync.history.current.query_string())
        self.close()
        return committed

    def reset(self) -> Criteria:
        """Clear every field of this surface and commit the empty state."""
        empty = self.schema.normalize({})
        self.sync.commit(empty)
        self.close()
        return empty

    def _dimension(self, key: str) -> DateDimension:
        try:
            return self._dimensions[key]
        except KeyError:
            raise ValueError(f"Unknown date dimension: {key!r}") from None

    def _require_open(self) -> None:
        if not self.is_open:
            raise RuntimeError("Filter surface is not open")
