"""Pytest configuration and fixtures for gymdesk.

The app is built with create_app() around an in-memory document store and a
fake identity service, so no test talks to Firebase. Environment defaults are
set before anything from gymdesk is imported because gymdesk.config reads the
environment at import time.
"""

import os

os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("LINK_RECONCILE_MINUTES", "0")

import itertools  # noqa: E402
from typing import Callable, Dict, List, Optional  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from gymdesk.config import Settings  # noqa: E402
from gymdesk.core.errors import EmailInUse, InvalidCredentials, WeakPassword  # noqa: E402
from gymdesk.core.identity import AuthSession  # noqa: E402
from gymdesk.main import create_app  # noqa: E402
from gymdesk.services.accounts import AccountRegistry  # noqa: E402
from gymdesk.services.clients import ClientDirectory  # noqa: E402
from gymdesk.services.modalities import ModalityCatalog  # noqa: E402
from gymdesk.store.memory import InMemoryDocumentStore  # noqa: E402

ADMIN_ID = "admin-1"
CLIENT_ACCOUNT_ID = "member-1"


class FakeIdentity:
    """Stands in for FirebaseIdentityService; tokens look like 'token-<uid>'."""

    def __init__(self) -> None:
        self._users: Dict[str, Dict[str, str]] = {}
        self._ids = itertools.count(1)
        self._listeners: List[Callable[[Optional[str]], None]] = []
        self.signed_out: List[str] = []

    def on_auth_change(self, listener):
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _session(self, uid: str, email: str) -> AuthSession:
        for listener in list(self._listeners):
            listener(uid)
        return AuthSession(
            account_id=uid,
            email=email,
            id_token=f"token-{uid}",
            refresh_token=f"refresh-{uid}",
            expires_in=3600,
        )

    async def sign_up(self, email: str, password: str) -> AuthSession:
        if email in self._users:
            raise EmailInUse()
        if len(password) < 6:
            raise WeakPassword()
        uid = f"user-{next(self._ids)}"
        self._users[email] = {"uid": uid, "password": password}
        return self._session(uid, email)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        user = self._users.get(email)
        if user is None or user["password"] != password:
            raise InvalidCredentials()
        return self._session(user["uid"], email)

    def sign_out(self, account_id: str) -> None:
        self.signed_out.append(account_id)
        for listener in list(self._listeners):
            listener(None)

    def verify_token(self, id_token: str) -> dict:
        if not id_token.startswith("token-"):
            raise InvalidCredentials("Invalid authentication token")
        uid = id_token[len("token-"):]
        return {"uid": uid, "email": f"{uid}@example.com"}


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def identity() -> FakeIdentity:
    return FakeIdentity()


@pytest.fixture
def settings() -> Settings:
    return Settings(store_backend="memory", link_reconcile_minutes=0)


@pytest.fixture
def app(store, identity, settings):
    return create_app(store=store, identity=identity, settings=settings)


@pytest.fixture
async def client(app) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def admin_headers(store) -> Dict[str, str]:
    """The first account registered becomes the admin of gym ADMIN_ID."""
    account = AccountRegistry(store).on_first_sign_in(ADMIN_ID, "owner@example.com")
    assert account.role == "admin"
    return {"Authorization": f"Bearer token-{ADMIN_ID}"}


@pytest.fixture
def member_headers(store, admin_headers) -> Dict[str, str]:
    account = AccountRegistry(store).on_first_sign_in(CLIENT_ACCOUNT_ID, "member@example.com")
    assert account.role == "client"
    return {"Authorization": f"Bearer token-{CLIENT_ACCOUNT_ID}"}


@pytest.fixture
def modality(store):
    return ModalityCatalog(store, ADMIN_ID).add_modality("Crossfit", 50, "3x per week")


@pytest.fixture
def linked_client(store, member_headers):
    """A roster entry of ADMIN_ID linked to the CLIENT_ACCOUNT_ID account."""
    return ClientDirectory(store, ADMIN_ID).add_client("Ana Lima", "555-0101", "ana@example.com", CLIENT_ACCOUNT_ID)
