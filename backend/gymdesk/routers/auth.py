"""
# gymdesk/routers/auth.py - Authentication

## Endpoints

### POST /auth/register
Creates a Firebase account (email + password, form data) and its account
record. The very first account becomes the gym admin, every later one a client.
Returns the token bundle.

Errors: `409 EMAIL_IN_USE`, `400 INVALID_EMAIL`, `400 WEAK_PASSWORD`,
`403 METHOD_DISABLED`.

### POST /auth/login
Email + password sign-in proxied to Firebase. Returns `id_token`,
`refresh_token`, `expires_in` and the account. Wrong credentials -> `401`.

### POST /auth/logout
Revokes the refresh tokens of the current account on every device. The client
app should also sign out locally.

### GET /auth/me
The current account (id, email, role).
"""
from fastapi import APIRouter, Depends, Form, Request, status
from pydantic import EmailStr

from gymdesk.core.deps import get_identity, get_store
from gymdesk.core.security import get_current_account
from gymdesk.schemas.account import Account, AuthResponse
from gymdesk.services.accounts import AccountRegistry

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: Request,
    email: EmailStr = Form(..., description="E-mail"),
    password: str = Form(..., description="Password (min 6 characters)"),
):
    session = await get_identity(request).sign_up(email, password)
    account = AccountRegistry(get_store(request)).on_first_sign_in(session.account_id, session.email)
    return AuthResponse(
        account=account,
        id_token=session.id_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in,
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    request: Request,
    email: EmailStr = Form(..., description="E-mail"),
    password: str = Form(..., description="Password"),
):
    session = await get_identity(request).sign_in(email, password)
    # accounts created outside this API get their record on first login
    account = AccountRegistry(get_store(request)).on_first_sign_in(session.account_id, session.email)
    return AuthResponse(
        account=account,
        id_token=session.id_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in,
    )


@router.post("/logout")
def logout(request: Request, account: Account = Depends(get_current_account)):
    get_identity(request).sign_out(account.id)
    return {"detail": "Logged out"}


@router.get("/me", response_model=Account)
def me(account: Account = Depends(get_current_account)):
    return account
