"""
gymdesk/store/memory.py
Process-local document store with the same semantics as the Firestore one:
server-assigned ids and `createdAt`, merge updates, per-document versions for
conditional writes and push subscriptions that deliver the whole result set
after every change. Used with STORE_BACKEND=memory and in the tests.
"""
from __future__ import annotations

import copy
import itertools
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence, Tuple
from uuid import uuid4

from gymdesk.core.errors import NotFound, VersionConflict
from gymdesk.store.base import Document, Filter, SnapshotListener, matches, split_path

logger = logging.getLogger("gymdesk.store")


class _MemorySubscription:
    def __init__(self, store: "InMemoryDocumentStore", key: int) -> None:
        self._store = store
        self._key = key

    def unsubscribe(self) -> None:
        self._store._drop_listener(self._key)


class InMemoryDocumentStore:
    def __init__(self) -> None:
        self._docs: Dict[str, Tuple[Dict[str, Any], int]] = {}
        self._versions = itertools.count(1)
        self._listener_ids = itertools.count(1)
        self._listeners: Dict[int, Tuple[str, Tuple[Filter, ...], SnapshotListener]] = {}
        self._lock = threading.RLock()

    # --- reads ---
    def get(self, path: str) -> Document:
        path = path.strip("/")
        with self._lock:
            if path not in self._docs:
                collection, doc_id = split_path(path)
                raise NotFound(collection.rsplit("/", 1)[-1], doc_id)
            data, version = self._docs[path]
            return Document(id=split_path(path)[1], data=copy.deepcopy(data), version=version)

    def query(self, collection: str, filters: Sequence[Filter] = ()) -> List[Document]:
        collection = collection.strip("/")
        with self._lock:
            out = []
            for path, (data, version) in self._docs.items():
                parent, doc_id = split_path(path)
                if parent == collection and matches(data, filters):
                    out.append(Document(id=doc_id, data=copy.deepcopy(data), version=version))
            return out

    # --- writes ---
    def create(self, collection: str, fields: Dict[str, Any]) -> str:
        doc_id = uuid4().hex[:20]
        payload = {**fields, "createdAt": datetime.now(timezone.utc)}
        self._write(f"{collection.strip('/')}/{doc_id}", payload)
        return doc_id

    def set(self, path: str, fields: Dict[str, Any]) -> None:
        path = path.strip("/")
        with self._lock:
            current = self._docs.get(path, ({}, 0))[0]
            self._write(path, {**current, **copy.deepcopy(fields)})

    def update(self, path: str, fields: Dict[str, Any], expected_version: Any = None) -> None:
        path = path.strip("/")
        with self._lock:
            if path not in self._docs:
                if expected_version is not None:
                    raise VersionConflict(path)
                collection, doc_id = split_path(path)
                raise NotFound(collection.rsplit("/", 1)[-1], doc_id)
            current, version = self._docs[path]
            if expected_version is not None and expected_version != version:
                raise VersionConflict(path)
            self._write(path, {**current, **copy.deepcopy(fields)})

    def delete(self, path: str) -> None:
        path = path.strip("/")
        with self._lock:
            if self._docs.pop(path, None) is not None:
                self._notify(split_path(path)[0])

    def _write(self, path: str, data: Dict[str, Any]) -> None:
        with self._lock:
            self._docs[path] = (data, next(self._versions))
            self._notify(split_path(path)[0])

    # --- subscriptions ---
    def subscribe(
        self, collection: str, listener: SnapshotListener, filters: Sequence[Filter] = ()
    ) -> _MemorySubscription:
        collection = collection.strip("/")
        with self._lock:
            key = next(self._listener_ids)
            self._listeners[key] = (collection, tuple(filters), listener)
            self._deliver(collection, tuple(filters), listener)
        return _MemorySubscription(self, key)

    def _drop_listener(self, key: int) -> None:
        with self._lock:
            self._listeners.pop(key, None)

    def _notify(self, collection: str) -> None:
        for watched, filters, listener in list(self._listeners.values()):
            if watched == collection:
                self._deliver(watched, filters, listener)

    def _deliver(self, collection: str, filters: Tuple[Filter, ...], listener: SnapshotListener) -> None:
        try:
            listener(self.query(collection, filters))
        except Exception:
            logger.exception("Snapshot listener for %s failed", collection)
