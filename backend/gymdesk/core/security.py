"""
# `gymdesk/core/security.py` - Authentication & role dependencies

FastAPI dependencies that turn `Authorization: Bearer <Firebase ID token>` into
an `Account`, plus role checks for admin and client endpoints.

## Flow
1. **Token check:** missing header -> `401`.
2. **Verification:** the identity service on `app.state.identity` verifies the
   token (revocation included). Invalid -> `401`.
3. **Account:** `AccountRegistry.on_first_sign_in` returns the stored account,
   creating it on first sight (first account ever -> `admin`, others -> `client`).
4. **Role:** `get_current_admin` / `get_current_client` return `403` on a
   role mismatch.
"""
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from gymdesk.core.deps import get_identity, get_store
from gymdesk.core.errors import InvalidCredentials
from gymdesk.schemas.account import ADMIN, CLIENT, Account
from gymdesk.services.accounts import AccountRegistry

# HTTPBearer with auto_error=False so the 401 below is ours
oauth2_scheme = HTTPBearer(auto_error=False)


def get_current_account(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(oauth2_scheme),
) -> Account:
    if not credentials or not credentials.scheme or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication credentials were not provided",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        decoded = get_identity(request).verify_token(credentials.credentials)
    except InvalidCredentials as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return AccountRegistry(get_store(request)).on_first_sign_in(decoded["uid"], decoded.get("email"))


def get_current_admin(account: Account = Depends(get_current_account)) -> Account:
    """Only admins (gym owners); the admin's id is its tenant id."""
    if account.role != ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return account


def get_current_client(account: Account = Depends(get_current_account)) -> Account:
    if account.role != CLIENT:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Client access required")
    return account
