"""
# gymdesk/routers/payments.py - Membership payments (admin)

Manual record of payments already received; no money moves through this API.

### GET /admin/payments/?client_id=
Newest first, optionally for one client.

### POST /admin/payments/
Form data: `client_id`, `amount` (> 0), `month` (1-12), `year`. The payment
counts for the given month regardless of when it is entered.

### DELETE /admin/payments/{payment_id}
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Form, Query, Request, status

from gymdesk.core.deps import get_app_settings, get_store
from gymdesk.core.security import get_current_admin
from gymdesk.schemas.account import Account
from gymdesk.schemas.payment import Payment
from gymdesk.services.payments import PaymentLedger

admin_router = APIRouter(prefix="/payments", tags=["Admin: Payments"], dependencies=[Depends(get_current_admin)])


def _ledger(request: Request, admin: Account = Depends(get_current_admin)) -> PaymentLedger:
    return PaymentLedger(get_store(request), admin.id, due_day=get_app_settings(request).due_day)


@admin_router.get("/", response_model=List[Payment])
def list_payments(
    client_id: Optional[str] = Query(None),
    ledger: PaymentLedger = Depends(_ledger),
):
    return ledger.list_payments(client_id)


@admin_router.post("/", response_model=Payment, status_code=status.HTTP_201_CREATED)
def record_payment(
    client_id: Optional[str] = Form(None),
    amount: Optional[str] = Form(None),
    month: Optional[str] = Form(None),
    year: Optional[str] = Form(None),
    ledger: PaymentLedger = Depends(_ledger),
):
    return ledger.record_payment(client_id, amount, month, year)


@admin_router.delete("/{payment_id}")
def delete_payment(payment_id: str, ledger: PaymentLedger = Depends(_ledger)):
    ledger.delete_payment(payment_id)
    return {"detail": "Payment deleted"}
