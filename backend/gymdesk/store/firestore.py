"""
gymdesk/store/firestore.py
Cloud Firestore implementation of the document store contract.

The firebase-admin client is passed in (see `gymdesk.config.build_store`).
Google API errors are logged and converted to the domain taxonomy:
NotFound -> NotFound, FailedPrecondition (stale `last_update_time`) ->
VersionConflict, anything else -> StoreUnavailable.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Sequence

from firebase_admin import firestore
from google.api_core import exceptions as gexc
from google.cloud.firestore_v1 import FieldFilter

from gymdesk.core.errors import NotFound, StoreUnavailable, VersionConflict
from gymdesk.store.base import Document, Filter, SnapshotListener, Subscription, split_path

logger = logging.getLogger("gymdesk.store")


def _to_document(snap) -> Document:
    return Document(id=snap.id, data=snap.to_dict() or {}, version=snap.update_time)


@contextmanager
def _translate_errors(path: str, conditional: bool = False) -> Iterator[None]:
    try:
        yield
    except gexc.NotFound as exc:
        collection, doc_id = split_path(path)
        raise NotFound(collection.rsplit("/", 1)[-1] or "document", doc_id) from exc
    except gexc.FailedPrecondition as exc:
        if conditional:
            raise VersionConflict(path) from exc
        logger.error("Firestore precondition failed on %s: %s", path, exc)
        raise StoreUnavailable() from exc
    except gexc.GoogleAPICallError as exc:
        logger.error("Firestore call failed on %s: %s", path, exc)
        raise StoreUnavailable() from exc


class FirestoreDocumentStore:
    def __init__(self, client) -> None:
        self._db = client

    def _query(self, collection: str, filters: Sequence[Filter]):
        q = self._db.collection(collection)
        for field_name, op, value in filters:
            q = q.where(filter=FieldFilter(field_name, op, value))
        return q

    def get(self, path: str) -> Document:
        with _translate_errors(path):
            snap = self._db.document(path).get()
        if not snap.exists:
            collection, doc_id = split_path(path)
            raise NotFound(collection.rsplit("/", 1)[-1], doc_id)
        return _to_document(snap)

    def create(self, collection: str, fields: Dict[str, Any]) -> str:
        ref = self._db.collection(collection).document()
        with _translate_errors(ref.path):
            ref.set({**fields, "createdAt": firestore.SERVER_TIMESTAMP})
        return ref.id

    def set(self, path: str, fields: Dict[str, Any]) -> None:
        with _translate_errors(path):
            self._db.document(path).set(fields, merge=True)

    def update(self, path: str, fields: Dict[str, Any], expected_version: Any = None) -> None:
        ref = self._db.document(path)
        if expected_version is None:
            with _translate_errors(path):
                ref.update(fields)
            return
        # Firestore rejects the write if the document's update_time moved on
        option = self._db.write_option(last_update_time=expected_version)
        with _translate_errors(path, conditional=True):
            ref.update(fields, option=option)

    def delete(self, path: str) -> None:
        with _translate_errors(path):
            self._db.document(path).delete()

    def query(self, collection: str, filters: Sequence[Filter] = ()) -> List[Document]:
        with _translate_errors(collection):
            return [_to_document(s) for s in self._query(collection, filters).stream()]

    def subscribe(
        self, collection: str, listener: SnapshotListener, filters: Sequence[Filter] = ()
    ) -> Subscription:
        def _on_snapshot(snaps, changes, read_time):
            try:
                listener([_to_document(s) for s in snaps])
            except Exception:
                # runs on the watch thread; an escaping error would kill the stream
                logger.exception("Snapshot listener for %s failed", collection)

        with _translate_errors(collection):
            return self._query(collection, filters).on_snapshot(_on_snapshot)
