"""Sort routing: each sort key maps to a pre-sorted replica index."""

import logging
from enum import StrEnum
from typing import Iterable, Mapping

logger = logging.getLogger(__name__)


class SortTable:
    """Explicit SortKey -> index name lookup for one domain.

    Keys without a replica (relevance, recent, unknown or None) route to the
    base index. validate() is meant to run once at startup.
    """

    def __init__(self, base_index: str, variants: Mapping[StrEnum, str]) -> None:
        self.base_index = base_index
        self._indices: dict[str, str] = {
            str(key): f"{base_index}_{suffix}" for key, suffix in variants.items()
        }

    def index_for(self, key: str | None) -> str:
        if not key:
            return self.base_index
        return self._indices.get(str(key), self.base_index)

    def indices(self) -> list[str]:
        return [self.base_index, *self._indices.values()]

    def validate(self, known_indices: Iterable[str]) -> None:
        """Raise ValueError if any routed index is missing from known_indices."""
        known = set(known_indices)
        missing = [name for name in self.indices() if name not in known]
        if missing:
            raise ValueError(f"Unknown search indices for {self.base_index}: {', '.join(missing)}")
        logger.debug("sort table for %s validated (%d variants)", self.base_index, len(self._indices))
