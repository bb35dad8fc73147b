"""
gymdesk/store/base.py
The document store contract the services are written against.

Two implementations exist: `FirestoreDocumentStore` (Cloud Firestore through
firebase-admin) and `InMemoryDocumentStore` (local runs and tests). Services
receive one of them in their constructor and never touch a global client.

Paths are slash separated: a collection path has an odd number of segments
(`tenants/t1/shifts`), a document path an even one (`tenants/t1/shifts/s1`).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Protocol, Sequence, Tuple

# ("field", "==", value) or ("field", "array_contains", value)
Filter = Tuple[str, str, Any]

SUPPORTED_OPERATORS = ("==", "array_contains")


@dataclass
class Document:
    """A point-in-time copy of one stored document.

    `version` is an opaque optimistic-concurrency token; pass it back as
    `expected_version` to make an update conditional on nothing having
    changed since this copy was read.
    """
    id: str
    data: Dict[str, Any] = field(default_factory=dict)
    version: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {**self.data, "id": self.id}


SnapshotListener = Callable[[List[Document]], None]


class Subscription(Protocol):
    def unsubscribe(self) -> None: ...


class DocumentStore(Protocol):
    def get(self, path: str) -> Document:
        """Point lookup. Raises NotFound when the document is absent."""

    def create(self, collection: str, fields: Dict[str, Any]) -> str:
        """Insert with a server-assigned id and `createdAt`; returns the new id."""

    def set(self, path: str, fields: Dict[str, Any]) -> None:
        """Upsert: creates the document or overwrites the named fields."""

    def update(self, path: str, fields: Dict[str, Any], expected_version: Any = None) -> None:
        """Merge update. Raises NotFound if absent, VersionConflict on a stale version."""

    def delete(self, path: str) -> None: ...

    def query(self, collection: str, filters: Sequence[Filter] = ()) -> List[Document]:
        """One-off snapshot of the documents matching every filter."""

    def subscribe(
        self, collection: str, listener: SnapshotListener, filters: Sequence[Filter] = ()
    ) -> Subscription:
        """Call `listener` with the full current result set now and on every change."""


def split_path(path: str) -> Tuple[str, str]:
    """'a/b/c/d' -> ('a/b/c', 'd')"""
    collection, _, doc_id = path.strip("/").rpartition("/")
    return collection, doc_id


def matches(data: Dict[str, Any], filters: Iterable[Filter]) -> bool:
    for field_name, op, value in filters:
        current = data.get(field_name)
        if op == "==":
            if current != value:
                return False
        elif op == "array_contains":
            if not isinstance(current, list) or value not in current:
                return False
        else:
            raise ValueError(f"Unsupported filter operator: {op}")
    return True
