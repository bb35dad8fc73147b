"""Tests for the Firestore store's error translation (client mocked)."""

from unittest.mock import MagicMock

import pytest
from google.api_core import exceptions as gexc

from gymdesk.core.errors import NotFound, StoreUnavailable, VersionConflict
from gymdesk.store.firestore import FirestoreDocumentStore


def _store():
    db = MagicMock()
    return FirestoreDocumentStore(db), db


def test_get_missing_document_raises_not_found() -> None:
    store, db = _store()
    db.document.return_value.get.return_value = MagicMock(exists=False)
    with pytest.raises(NotFound) as exc_info:
        store.get("tenants/t1/clients/c1")
    assert exc_info.value.details == {"resource": "clients", "resource_id": "c1"}


def test_get_returns_document_with_update_time_as_version() -> None:
    store, db = _store()
    snap = MagicMock(exists=True, id="c1", update_time="v1")
    snap.to_dict.return_value = {"name": "Ana"}
    db.document.return_value.get.return_value = snap

    doc = store.get("tenants/t1/clients/c1")
    assert doc.to_dict() == {"name": "Ana", "id": "c1"}
    assert doc.version == "v1"


def test_conditional_update_failure_is_version_conflict() -> None:
    """A FailedPrecondition on a conditional write means the document moved on."""
    store, db = _store()
    db.document.return_value.update.side_effect = gexc.FailedPrecondition("stale")
    with pytest.raises(VersionConflict):
        store.update("tenants/t1/shifts/s1", {"bookedClients": []}, expected_version="v1")
    db.write_option.assert_called_once_with(last_update_time="v1")


def test_plain_update_of_missing_document_is_not_found() -> None:
    store, db = _store()
    db.document.return_value.update.side_effect = gexc.NotFound("no document")
    with pytest.raises(NotFound):
        store.update("tenants/t1/shifts/s1", {"capacity": 2})


def test_backend_failure_is_store_unavailable() -> None:
    store, db = _store()
    db.collection.return_value.stream.side_effect = gexc.ServiceUnavailable("down")
    with pytest.raises(StoreUnavailable):
        store.query("tenants/t1/clients")


def test_set_merges() -> None:
    store, db = _store()
    store.set("accounts/a1", {"email": "a@example.com"})
    db.document.return_value.set.assert_called_once_with({"email": "a@example.com"}, merge=True)
