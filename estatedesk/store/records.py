"""Optimistic edits of result rows, reverted when the backend write fails."""

import logging
from typing import Any

from estatedesk.store.documents import DocumentStore

logger = logging.getLogger(__name__)


class RecordUpdateError(Exception):
    """Backend write failed; the local row was restored to its previous value."""

    def __init__(self, collection: str, record_id: str, cause: BaseException) -> None:
        super().__init__(f"Update of {collection}/{record_id} failed: {cause}")
        self.collection = collection
        self.record_id = record_id


class RecordEditor:
    """Apply changes to a displayed row first, then persist them.

    rows is the caller's current result page (a list of hit dicts). The row is
    replaced, not mutated, so anything still holding the old dict keeps the
    pre-update values.
    """

    def __init__(self, store: DocumentStore, collection: str, *, id_field: str = "objectID") -> None:
        self.store = store
        self.collection = collection
        self.id_field = id_field

    def _position(self, rows: list[dict[str, Any]], record_id: str) -> int:
        for i, row in enumerate(rows):
            if str(row.get(self.id_field)) == record_id:
                return i
        raise KeyError(record_id)

    async def update(
        self,
        rows: list[dict[str, Any]],
        record_id: str,
        changes: dict[str, Any],
    ) -> dict[str, Any]:
        """Return the updated row. On failure restore it and raise RecordUpdateError."""
        i = self._position(rows, record_id)
        previous = rows[i]
        rows[i] = {**previous, **changes}
        try:
            await self.store.update(self.collection, record_id, changes)
        except Exception as e:
            rows[i] = previous
            logger.warning("reverted %s/%s after failed update: %s", self.collection, record_id, e)
            raise RecordUpdateError(self.collection, record_id, e) from e
        return rows[i]
