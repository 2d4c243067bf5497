"""Document store collaborator and optimistic record edits."""

from estatedesk.store.documents import (
    DocumentNotFoundError,
    DocumentStore,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
)
from estatedesk.store.records import RecordEditor, RecordUpdateError

__all__ = [
    "DocumentNotFoundError",
    "DocumentStore",
    "FirestoreDocumentStore",
    "InMemoryDocumentStore",
    "RecordEditor",
    "RecordUpdateError",
]
