"""
gymdesk/core/identity.py
Firebase Authentication adapter.

* sign up / sign in go through the Identity Toolkit REST API with the web API
  key (the Admin SDK cannot check passwords),
* sign out revokes the account's refresh tokens,
* ID tokens are verified with the Admin SDK, revocation included.

Provider error codes are mapped to EmailInUse, InvalidEmail, WeakPassword,
InvalidCredentials and MethodDisabled. Listeners registered with
`on_auth_change` receive the account id after a successful sign in / sign up
and `None` after a sign out.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Type

import httpx
from firebase_admin import auth as firebase_auth
from firebase_admin import exceptions as firebase_exceptions

from gymdesk.core.errors import (
    EmailInUse,
    IdentityError,
    InvalidCredentials,
    InvalidEmail,
    MethodDisabled,
    StoreUnavailable,
    WeakPassword,
)

logger = logging.getLogger("gymdesk.identity")

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1/accounts"

_PROVIDER_ERRORS: Dict[str, Type[IdentityError]] = {
    "EMAIL_EXISTS": EmailInUse,
    "INVALID_EMAIL": InvalidEmail,
    "MISSING_EMAIL": InvalidEmail,
    "WEAK_PASSWORD": WeakPassword,
    "MISSING_PASSWORD": WeakPassword,
    "EMAIL_NOT_FOUND": InvalidCredentials,
    "INVALID_PASSWORD": InvalidCredentials,
    "INVALID_LOGIN_CREDENTIALS": InvalidCredentials,
    "USER_DISABLED": InvalidCredentials,
    "OPERATION_NOT_ALLOWED": MethodDisabled,
    "PASSWORD_LOGIN_DISABLED": MethodDisabled,
    "ADMIN_ONLY_OPERATION": MethodDisabled,
}

AuthListener = Callable[[Optional[str]], None]


@dataclass
class AuthSession:
    account_id: str
    email: str
    id_token: str
    refresh_token: str
    expires_in: int


def provider_error(message: str) -> IdentityError:
    """'WEAK_PASSWORD : Password should be at least 6 characters' -> WeakPassword"""
    code = (message or "").split(":", 1)[0].strip().upper()
    return _PROVIDER_ERRORS.get(code, IdentityError)()


class FirebaseIdentityService:
    def __init__(self, api_key: str, timeout: float = 10, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport
        self._listeners: List[AuthListener] = []

    # --- listeners ---
    def on_auth_change(self, listener: AuthListener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def _notify(self, account_id: Optional[str]) -> None:
        for listener in list(self._listeners):
            try:
                listener(account_id)
            except Exception:
                logger.exception("Auth listener failed")

    # --- REST calls ---
    async def _call(self, endpoint: str, email: str, password: str) -> AuthSession:
        payload = {"email": email, "password": password, "returnSecureToken": True}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(f"{IDENTITY_TOOLKIT_URL}:{endpoint}", params={"key": self._api_key}, json=payload)
        except httpx.HTTPError as exc:
            logger.error("Identity Toolkit %s failed: %s", endpoint, exc)
            raise StoreUnavailable("The sign-in service is unavailable, please try again") from exc

        data = resp.json() if resp.content else {}
        if resp.status_code != 200:
            message = (data.get("error") or {}).get("message", "")
            logger.info("Identity Toolkit %s rejected: %s", endpoint, message)
            raise provider_error(message)

        session = AuthSession(
            account_id=data["localId"],
            email=data.get("email") or email,
            id_token=data["idToken"],
            refresh_token=data["refreshToken"],
            expires_in=int(data.get("expiresIn", 3600)),
        )
        self._notify(session.account_id)
        return session

    async def sign_up(self, email: str, password: str) -> AuthSession:
        return await self._call("signUp", email, password)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        return await self._call("signInWithPassword", email, password)

    def sign_out(self, account_id: str) -> None:
        """Revoke refresh tokens on every device; clients should also drop their tokens."""
        try:
            firebase_auth.revoke_refresh_tokens(account_id)
        except firebase_auth.UserNotFoundError:
            logger.info("Sign out for unknown account %s", account_id)
        except firebase_exceptions.FirebaseError as exc:
            logger.error("Revoking tokens of %s failed: %s", account_id, exc)
            raise StoreUnavailable("The sign-in service is unavailable, please try again") from exc
        self._notify(None)

    def verify_token(self, id_token: str) -> dict:
        """Return {'uid', 'email'} for a valid, non-revoked ID token."""
        try:
            decoded = firebase_auth.verify_id_token(id_token, check_revoked=True)
        except firebase_auth.ExpiredIdTokenError:
            raise InvalidCredentials("Token expired")
        except firebase_auth.RevokedIdTokenError:
            raise InvalidCredentials("Session revoked")
        except (firebase_auth.InvalidIdTokenError, firebase_auth.UserDisabledError, ValueError):
            raise InvalidCredentials("Invalid authentication token")
        except firebase_auth.CertificateFetchError as exc:
            raise StoreUnavailable("Could not verify the token right now") from exc
        uid = decoded.get("uid")
        if not uid:
            raise InvalidCredentials("Invalid token payload")
        return {"uid": uid, "email": decoded.get("email")}
