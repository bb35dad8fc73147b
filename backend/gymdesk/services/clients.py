"""
gymdesk/services/clients.py
The client roster of one tenant.

Besides CRUD this keeps the `account_links/{accountId}` reverse index in step
with `associatedUserUid`, so an account can be linked to at most one client
across all gyms and the association resolver can do a single point lookup.
The client write and the index write are separate requests; drift after a
failure between them is repaired by `AssociationResolver.reconcile`.

Deleting a client cascades to its payments and its shift bookings. The client
document goes first; cleanup failures after that are collected and raised
together as PartialCascadeFailure, without any rollback.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from gymdesk.core.errors import (
    AccountAlreadyLinked,
    GymDeskError,
    NotFound,
    PartialCascadeFailure,
    ValidationError,
)
from gymdesk.schemas.client import Client
from gymdesk.services.modalities import ModalityCatalog
from gymdesk.services.shifts import ShiftScheduler
from gymdesk.services.validation import optional_text, required_text
from gymdesk.store import paths
from gymdesk.store.base import DocumentStore

logger = logging.getLogger("gymdesk.clients")

_EDITABLE = ("name", "phone", "email", "associatedUserUid", "currentModalityId")


class ClientDirectory:
    def __init__(self, store: DocumentStore, tenant_id: str) -> None:
        self._store = store
        self.tenant_id = tenant_id
        self._collection = paths.tenant_collection(tenant_id, paths.CLIENTS)

    def _path(self, client_id: str) -> str:
        return paths.document(self._collection, client_id)

    # --- reads ---
    def list_clients(self) -> List[Client]:
        items = [Client(**d.to_dict()) for d in self._store.query(self._collection)]
        items.sort(key=lambda c: c.name.lower())
        return items

    def get_client(self, client_id: str) -> Client:
        return Client(**self._store.get(self._path(client_id)).to_dict())

    def find_by_account(self, account_id: str) -> Optional[Client]:
        docs = self._store.query(self._collection, [("associatedUserUid", "==", account_id)])
        return Client(**docs[0].to_dict()) if docs else None

    # --- writes ---
    def add_client(self, name, phone=None, email=None, associated_account_id=None) -> Client:
        account_id = optional_text(associated_account_id) or None
        fields: Dict[str, Any] = {
            "name": required_text(name, "name"),
            "phone": optional_text(phone),
            "email": optional_text(email),
            "associatedUserUid": account_id,
        }
        if account_id:
            self._ensure_linkable(account_id, client_id=None)
        client_id = self._store.create(self._collection, fields)
        if account_id:
            try:
                self._write_link(account_id, client_id)
            except GymDeskError as exc:
                # the client exists; the reconcile job rebuilds the missing entry
                logger.warning("Client %s created but its account link for %s was not written: %s",
                               client_id, account_id, exc.error_code)
        logger.info("Tenant %s added client %s", self.tenant_id, client_id)
        return self.get_client(client_id)

    def update_client(self, client_id: str, **fields: Any) -> Client:
        """Write only the given fields; currentModalityId is untouched unless passed."""
        unknown = set(fields) - set(_EDITABLE)
        if unknown:
            raise ValidationError(f"unknown fields: {', '.join(sorted(unknown))}")
        current = self.get_client(client_id)

        patch: Dict[str, Any] = {}
        if "name" in fields:
            patch["name"] = required_text(fields["name"], "name")
        for key in ("phone", "email"):
            if key in fields:
                patch[key] = optional_text(fields[key])
        if "currentModalityId" in fields:
            patch["currentModalityId"] = self._validated_modality(fields["currentModalityId"], allow_empty=True)

        new_account: Optional[str] = current.associatedUserUid
        if "associatedUserUid" in fields:
            new_account = optional_text(fields["associatedUserUid"]) or None
            if new_account and new_account != current.associatedUserUid:
                self._ensure_linkable(new_account, client_id=client_id)
            patch["associatedUserUid"] = new_account

        if patch:
            self._store.update(self._path(client_id), patch)
        if new_account != current.associatedUserUid:
            if current.associatedUserUid:
                self._drop_link(current.associatedUserUid, client_id)
            if new_account:
                self._write_link(new_account, client_id)
        return self.get_client(client_id)

    def set_client_modality(self, client_id: str, modality_id) -> Client:
        modality_id = self._validated_modality(modality_id, allow_empty=False)
        self._store.update(self._path(client_id), {"currentModalityId": modality_id})
        logger.info("Client %s of tenant %s switched to modality %s", client_id, self.tenant_id, modality_id)
        return self.get_client(client_id)

    def delete_client(self, client_id: str) -> None:
        client = self.get_client(client_id)
        self._store.delete(self._path(client_id))
        logger.info("Tenant %s deleted client %s, cleaning up related data", self.tenant_id, client_id)

        failures: List[Dict[str, str]] = []
        payments = paths.tenant_collection(self.tenant_id, paths.PAYMENTS)
        try:
            payment_docs = self._store.query(payments, [("clientId", "==", client_id)])
        except GymDeskError as exc:
            payment_docs = []
            failures.append({"path": payments, "error": exc.error_code})
        for doc in payment_docs:
            path = paths.document(payments, doc.id)
            try:
                self._store.delete(path)
            except GymDeskError as exc:
                failures.append({"path": path, "error": exc.error_code})

        try:
            failures.extend(ShiftScheduler(self._store, self.tenant_id).remove_client_everywhere(client_id))
        except GymDeskError as exc:
            failures.append({"path": paths.tenant_collection(self.tenant_id, paths.SHIFTS), "error": exc.error_code})

        if client.associatedUserUid:
            try:
                self._drop_link(client.associatedUserUid, client_id)
            except GymDeskError as exc:
                failures.append({"path": paths.account_link(client.associatedUserUid), "error": exc.error_code})

        if failures:
            logger.error("Partial cleanup after deleting client %s: %s", client_id, failures)
            raise PartialCascadeFailure(client_id, failures)

    # --- helpers ---
    def _validated_modality(self, modality_id, allow_empty: bool) -> Optional[str]:
        text = optional_text(modality_id)
        if not text:
            if allow_empty:
                return None
            raise ValidationError("modalityId is required", field="modalityId")
        if not ModalityCatalog(self._store, self.tenant_id).exists(text):
            raise ValidationError("modalityId does not reference an existing modality", field="modalityId")
        return text

    def _ensure_linkable(self, account_id: str, client_id: Optional[str]) -> None:
        """Reject linking an account that another live client already carries."""
        try:
            link = self._store.get(paths.account_link(account_id)).data
        except NotFound:
            link = None
        if link and not (link.get("tenantId") == self.tenant_id and link.get("clientId") == client_id):
            holder = paths.document(paths.tenant_collection(link.get("tenantId", ""), paths.CLIENTS),
                                    link.get("clientId", ""))
            try:
                still_linked = self._store.get(holder).data.get("associatedUserUid") == account_id
            except NotFound:
                still_linked = False
            if still_linked:
                raise AccountAlreadyLinked(account_id, link["tenantId"], link["clientId"])
        # the index may lag behind; the local roster is authoritative for this tenant
        other = self.find_by_account(account_id)
        if other is not None and other.id != client_id:
            raise AccountAlreadyLinked(account_id, self.tenant_id, other.id)

    def _write_link(self, account_id: str, client_id: str) -> None:
        self._store.set(paths.account_link(account_id), {
            "tenantId": self.tenant_id,
            "clientId": client_id,
            "updatedAt": datetime.now(timezone.utc),
        })

    def _drop_link(self, account_id: str, client_id: str) -> None:
        try:
            link = self._store.get(paths.account_link(account_id)).data
        except NotFound:
            return
        if link.get("tenantId") == self.tenant_id and link.get("clientId") == client_id:
            self._store.delete(paths.account_link(account_id))
