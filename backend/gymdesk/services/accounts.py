# gymdesk/services/accounts.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from gymdesk.core.errors import NotFound, ValidationError
from gymdesk.schemas.account import ADMIN, CLIENT, Account, BrandSettings, ClientAccount
from gymdesk.store import paths
from gymdesk.store.base import Document, DocumentStore

logger = logging.getLogger("gymdesk.accounts")


def _to_account(doc: Document) -> Account:
    return Account(**doc.to_dict())


class AccountRegistry:
    """
    Account records and per-admin settings.

    The first account to sign in becomes the admin; all later accounts are
    clients. Two simultaneous first sign-ins on an empty registry can both
    become admins; each then simply owns a separate, empty tenant.
    """

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def get(self, account_id: str) -> Optional[Account]:
        try:
            return _to_account(self._store.get(paths.account(account_id)))
        except NotFound:
            return None

    def on_first_sign_in(self, account_id: str, email: Optional[str]) -> Account:
        """Return the account, creating it with its permanent role on first sight."""
        if not account_id:
            raise ValidationError("account id is required", field="account_id")
        existing = self.get(account_id)
        if existing is not None:
            return existing

        role = ADMIN if not self._store.query(paths.ACCOUNTS) else CLIENT
        created_at = datetime.now(timezone.utc)
        self._store.set(paths.account(account_id), {
            "email": email or "",
            "role": role,
            "createdAt": created_at,
        })
        if role == ADMIN:
            self._store.set(paths.brand_settings(account_id), {"imageUrl": ""})
        logger.info("Registered account %s as %s", account_id, role)
        return Account(id=account_id, email=email or "", role=role, createdAt=created_at)

    def list_admins(self) -> List[Account]:
        return [_to_account(d) for d in self._store.query(paths.ACCOUNTS, [("role", "==", ADMIN)])]

    def list_clients(self) -> List[Account]:
        accounts = [_to_account(d) for d in self._store.query(paths.ACCOUNTS, [("role", "==", CLIENT)])]
        accounts.sort(key=lambda a: ((a.email or "").lower(), a.id))
        return accounts

    def client_accounts(self) -> List[ClientAccount]:
        """Client accounts for the link picker, flagged when the link index already holds them."""
        linked = {d.id for d in self._store.query(paths.ACCOUNT_LINKS)}
        return [ClientAccount(id=a.id, email=a.email, linked=a.id in linked) for a in self.list_clients()]

    # --- branding ---
    def get_brand_image(self, account_id: str) -> str:
        try:
            doc = self._store.get(paths.brand_settings(account_id))
        except NotFound:
            return ""
        return BrandSettings(**doc.data).imageUrl

    def set_brand_image(self, account_id: str, url: Optional[str]) -> BrandSettings:
        settings = BrandSettings(imageUrl=(url or "").strip())
        self._store.set(paths.brand_settings(account_id), settings.model_dump())
        return settings
