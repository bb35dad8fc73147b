"""
# gymdesk/routers/accounts.py - Client accounts (admin)

### GET /admin/accounts/
Every registered client-role account (`id`, `email`), by e-mail, with
`linked: true` when some gym's roster already carries it. Used to pick the
`associatedUserUid` of a client.
"""
from typing import List

from fastapi import APIRouter, Depends, Request

from gymdesk.core.deps import get_store
from gymdesk.core.security import get_current_admin
from gymdesk.schemas.account import ClientAccount
from gymdesk.services.accounts import AccountRegistry

admin_router = APIRouter(prefix="/accounts", tags=["Admin: Accounts"], dependencies=[Depends(get_current_admin)])


@admin_router.get("/", response_model=List[ClientAccount])
def list_client_accounts(request: Request):
    return AccountRegistry(get_store(request)).client_accounts()
