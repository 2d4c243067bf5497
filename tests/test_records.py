"""Tests for the in-memory document store and optimistic record edits."""

import pytest

from estatedesk.store.documents import DocumentNotFoundError, InMemoryDocumentStore
from estatedesk.store.records import RecordEditor, RecordUpdateError


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore({"agents": {"A1": {"name": "Asha", "verified": False}}})


class TestInMemoryDocumentStore:
    """Copy semantics and missing documents."""

    @pytest.mark.asyncio
    async def test_get_returns_copy(self, store: InMemoryDocumentStore) -> None:
        doc = await store.get("agents", "A1")
        doc["name"] = "changed"
        assert (await store.get("agents", "A1"))["name"] == "Asha"

    @pytest.mark.asyncio
    async def test_get_missing(self, store: InMemoryDocumentStore) -> None:
        assert await store.get("agents", "A9") is None
        assert await store.get("tasks", "T1") is None

    @pytest.mark.asyncio
    async def test_update_merges(self, store: InMemoryDocumentStore) -> None:
        await store.update("agents", "A1", {"verified": True})
        assert await store.get("agents", "A1") == {"name": "Asha", "verified": True}

    @pytest.mark.asyncio
    async def test_update_missing_raises(self, store: InMemoryDocumentStore) -> None:
        with pytest.raises(DocumentNotFoundError):
            await store.update("agents", "A9", {"verified": True})

    @pytest.mark.asyncio
    async def test_set_and_list(self, store: InMemoryDocumentStore) -> None:
        await store.set("agents", "A2", {"name": "Ravi"})
        docs = await store.list("agents")
        assert {"id": "A2", "name": "Ravi"} in docs
        assert len(docs) == 2


class FailingStore(InMemoryDocumentStore):
    async def update(self, collection, doc_id, partial) -> None:
        raise ConnectionError("firestore unavailable")


class TestRecordEditor:
    """Rows change immediately and revert when the write fails."""

    @pytest.mark.asyncio
    async def test_successful_update(self, store: InMemoryDocumentStore) -> None:
        rows = [{"objectID": "A1", "name": "Asha", "verified": False}]
        editor = RecordEditor(store, "agents")
        updated = await editor.update(rows, "A1", {"verified": True})
        assert updated["verified"] is True
        assert rows[0]["verified"] is True
        assert (await store.get("agents", "A1"))["verified"] is True

    @pytest.mark.asyncio
    async def test_failed_update_restores_row(self) -> None:
        original = {"objectID": "A1", "name": "Asha", "verified": False}
        rows = [original]
        editor = RecordEditor(FailingStore(), "agents")
        with pytest.raises(RecordUpdateError) as exc_info:
            await editor.update(rows, "A1", {"verified": True})
        assert rows[0] is original
        assert original["verified"] is False
        assert exc_info.value.record_id == "A1"
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_missing_document_reverts(self) -> None:
        rows = [{"objectID": "A1", "verified": False}]
        editor = RecordEditor(InMemoryDocumentStore(), "agents")
        with pytest.raises(RecordUpdateError):
            await editor.update(rows, "A1", {"verified": True})
        assert rows[0]["verified"] is False

    @pytest.mark.asyncio
    async def test_unknown_row(self, store: InMemoryDocumentStore) -> None:
        editor = RecordEditor(store, "agents")
        with pytest.raises(KeyError):
            await editor.update([{"objectID": "A1"}], "A2", {"verified": True})
