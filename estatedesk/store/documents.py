"""Document store contract (collection/id key-value) with in-memory and Firestore backends."""

import copy
import logging
from typing import Any, Protocol

from google.api_core import exceptions as gcp_exceptions
from google.cloud import firestore

logger = logging.getLogger(__name__)


class DocumentNotFoundError(KeyError):
    """update() on a document that does not exist."""


class DocumentStore(Protocol):
    """get/set/update/list over collections. No transactions or consistency guarantees."""

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Document by id, or None when missing."""
        ...

    async def set(self, collection: str, doc_id: str, doc: dict[str, Any]) -> None:
        """Create or overwrite a document."""
        ...

    async def update(self, collection: str, doc_id: str, partial: dict[str, Any]) -> None:
        """Merge top-level fields into an existing document."""
        ...

    async def list(self, collection: str) -> list[dict[str, Any]]:
        """All documents of a collection, each with its id under 'id'."""
        ...


class InMemoryDocumentStore:
    """Dict-backed store for tests and local runs. Returns copies, never live references."""

    def __init__(self, data: dict[str, dict[str, dict[str, Any]]] | None = None) -> None:
        self._data: dict[str, dict[str, dict[str, Any]]] = copy.deepcopy(data or {})

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        doc = self._data.get(collection, {}).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def set(self, collection: str, doc_id: str, doc: dict[str, Any]) -> None:
        self._data.setdefault(collection, {})[doc_id] = copy.deepcopy(doc)

    async def update(self, collection: str, doc_id: str, partial: dict[str, Any]) -> None:
        docs = self._data.get(collection, {})
        if doc_id not in docs:
            raise DocumentNotFoundError(f"{collection}/{doc_id}")
        docs[doc_id].update(copy.deepcopy(partial))

    async def list(self, collection: str) -> list[dict[str, Any]]:
        return [{"id": doc_id, **copy.deepcopy(doc)} for doc_id, doc in self._data.get(collection, {}).items()]


class FirestoreDocumentStore:
    """DocumentStore over google-cloud-firestore's AsyncClient."""

    def __init__(
        self,
        project_id: str | None = None,
        database: str | None = None,
        *,
        client: firestore.AsyncClient | None = None,
    ) -> None:
        self._client = client or firestore.AsyncClient(project=project_id or None, database=database or None)
        logger.info("Firestore store initialized for project: %s", project_id or "(default)")

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        snapshot = await self._client.collection(collection).document(doc_id).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    async def set(self, collection: str, doc_id: str, doc: dict[str, Any]) -> None:
        await self._client.collection(collection).document(doc_id).set(doc)

    async def update(self, collection: str, doc_id: str, partial: dict[str, Any]) -> None:
        try:
            await self._client.collection(collection).document(doc_id).update(partial)
        except gcp_exceptions.NotFound as e:
            raise DocumentNotFoundError(f"{collection}/{doc_id}") from e

    async def list(self, collection: str) -> list[dict[str, Any]]:
        docs: list[dict[str, Any]] = []
        async for snapshot in self._client.collection(collection).stream():
            docs.append({"id": snapshot.id, **(snapshot.to_dict() or {})})
        return docs

    def close(self) -> None:
        self._client.close()
