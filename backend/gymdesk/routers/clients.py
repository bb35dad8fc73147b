"""
# gymdesk/routers/clients.py - Client roster (admin)

### GET /admin/clients/
Every client with this month's membership status (`paid`, `pending`,
`overdue`), computed at request time.

### POST /admin/clients/
JSON: `name` (required), `phone`, `email`, `associatedUserUid`. Linking an
account that another client already carries -> `409 ACCOUNT_ALREADY_LINKED`.

### GET / PUT / DELETE /admin/clients/{client_id}
PUT writes only the fields sent. DELETE also removes the client's payments and
bookings; if some of that cleanup fails the response is
`502 PARTIAL_CASCADE_FAILURE` listing what is left (the client itself is gone).

### PUT /admin/clients/{client_id}/modality
Form data: `modality_id`.

### GET /admin/clients/{client_id}/status
Membership status for today.
"""
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Form, Request, status

from gymdesk.core.deps import get_app_settings, get_store
from gymdesk.core.security import get_current_admin
from gymdesk.schemas.account import Account
from gymdesk.schemas.client import Client, ClientCreate, ClientUpdate, ClientWithStatus
from gymdesk.schemas.payment import PaymentStatusOut
from gymdesk.services.clients import ClientDirectory
from gymdesk.services.payments import PaymentLedger, payment_status

admin_router = APIRouter(prefix="/clients", tags=["Admin: Clients"], dependencies=[Depends(get_current_admin)])


def _directory(request: Request, admin: Account = Depends(get_current_admin)) -> ClientDirectory:
    return ClientDirectory(get_store(request), admin.id)


def _ledger(request: Request, admin: Account = Depends(get_current_admin)) -> PaymentLedger:
    return PaymentLedger(get_store(request), admin.id, due_day=get_app_settings(request).due_day)


@admin_router.get("/", response_model=List[ClientWithStatus])
def list_clients(
    directory: ClientDirectory = Depends(_directory),
    ledger: PaymentLedger = Depends(_ledger),
):
    today = date.today()
    payments = ledger.list_payments()
    return [
        ClientWithStatus(**c.model_dump(), paymentStatus=payment_status(payments, c.id, today, ledger.due_day))
        for c in directory.list_clients()
    ]


@admin_router.post("/", response_model=Client, status_code=status.HTTP_201_CREATED)
def create_client(body: ClientCreate, directory: ClientDirectory = Depends(_directory)):
    return directory.add_client(body.name, body.phone, body.email, body.associatedUserUid)


@admin_router.get("/{client_id}", response_model=Client)
def get_client(client_id: str, directory: ClientDirectory = Depends(_directory)):
    return directory.get_client(client_id)


@admin_router.put("/{client_id}", response_model=Client)
def update_client(client_id: str, body: ClientUpdate, directory: ClientDirectory = Depends(_directory)):
    return directory.update_client(client_id, **body.model_dump(exclude_unset=True))


@admin_router.delete("/{client_id}")
def delete_client(client_id: str, directory: ClientDirectory = Depends(_directory)):
    directory.delete_client(client_id)
    return {"detail": "Client and related data deleted"}


@admin_router.put("/{client_id}/modality", response_model=Client)
def set_client_modality(
    client_id: str,
    modality_id: str = Form(...),
    directory: ClientDirectory = Depends(_directory),
):
    return directory.set_client_modality(client_id, modality_id)


@admin_router.get("/{client_id}/status", response_model=PaymentStatusOut)
def client_status(
    client_id: str,
    directory: ClientDirectory = Depends(_directory),
    ledger: PaymentLedger = Depends(_ledger),
):
    directory.get_client(client_id)
    today = date.today()
    return PaymentStatusOut(
        clientId=client_id,
        month=today.month,
        year=today.year,
        status=ledger.status_for(client_id, today),
    )
