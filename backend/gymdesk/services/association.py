"""
gymdesk/services/association.py
Find which gym (tenant) and which client record belong to a signed-in account.

1. Point lookup on `account_links/{accountId}`; trusted only if the client it
   names still carries the account id.
2. Otherwise scan every admin tenant's roster for `associatedUserUid ==
   accountId`, stop at the first hit and write the index entry back.
3. Nothing found -> NotAssociated, which callers show as "contact the gym".

The directory refuses to link one account to two clients, so the scan only
meets duplicates in data written before the index existed; it then keeps
whichever match it sees first.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from gymdesk.core.errors import NotAssociated, NotFound
from gymdesk.schemas.client import Client
from gymdesk.services.accounts import AccountRegistry
from gymdesk.services.clients import ClientDirectory
from gymdesk.store import paths
from gymdesk.store.base import DocumentStore

logger = logging.getLogger("gymdesk.association")


@dataclass(frozen=True)
class Association:
    tenant_id: str
    client: Client

    @property
    def client_id(self) -> str:
        return self.client.id


class AssociationResolver:
    def __init__(self, store: DocumentStore, registry: Optional[AccountRegistry] = None) -> None:
        self._store = store
        self._registry = registry or AccountRegistry(store)

    def resolve(self, account_id: str) -> Association:
        found = self._from_index(account_id)
        if found is not None:
            return found
        found = self._scan(account_id)
        if found is None:
            logger.info("Account %s is not associated with any client", account_id)
            raise NotAssociated(account_id)
        self._store.set(paths.account_link(account_id), {
            "tenantId": found.tenant_id,
            "clientId": found.client_id,
            "updatedAt": datetime.now(timezone.utc),
        })
        return found

    def _from_index(self, account_id: str) -> Optional[Association]:
        try:
            link = self._store.get(paths.account_link(account_id)).data
        except NotFound:
            return None
        tenant_id, client_id = link.get("tenantId"), link.get("clientId")
        if not tenant_id or not client_id:
            return None
        try:
            client = ClientDirectory(self._store, tenant_id).get_client(client_id)
        except NotFound:
            logger.info("Stale account link for %s -> %s/%s", account_id, tenant_id, client_id)
            return None
        if client.associatedUserUid != account_id:
            return None
        return Association(tenant_id=tenant_id, client=client)

    def _scan(self, account_id: str) -> Optional[Association]:
        for admin in self._registry.list_admins():
            client = ClientDirectory(self._store, admin.id).find_by_account(account_id)
            if client is not None:
                return Association(tenant_id=admin.id, client=client)
        return None

    def reconcile(self) -> int:
        """
        Rebuild the account-link index from the rosters.
        Returns how many index documents were written or removed.
        """
        wanted: Dict[str, Tuple[str, str]] = {}
        for admin in self._registry.list_admins():
            for client in ClientDirectory(self._store, admin.id).list_clients():
                if client.associatedUserUid and client.associatedUserUid not in wanted:
                    wanted[client.associatedUserUid] = (admin.id, client.id)

        changed = 0
        existing = {d.id: d.data for d in self._store.query(paths.ACCOUNT_LINKS)}
        for account_id, (tenant_id, client_id) in wanted.items():
            current = existing.get(account_id) or {}
            if current.get("tenantId") == tenant_id and current.get("clientId") == client_id:
                continue
            self._store.set(paths.account_link(account_id), {
                "tenantId": tenant_id,
                "clientId": client_id,
                "updatedAt": datetime.now(timezone.utc),
            })
            changed += 1
        for account_id in set(existing) - set(wanted):
            self._store.delete(paths.account_link(account_id))
            changed += 1
        if changed:
            logger.info("Reconciled %d account links", changed)
        return changed
