"""
# gymdesk/routers/me.py - Client self-service

Everything here runs as the signed-in **client** account, inside the gym whose
roster links that account (`associatedUserUid`). An account no gym has linked
yet gets `404 NOT_ASSOCIATED` ("ask your gym to add you").

## Endpoints

### GET /me/profile
The client record.

### GET /me/status
`{clientId, month, year, status}` for today.

### GET /me/shifts
Upcoming shifts of the gym, earliest first, with `spotsLeft`, `modalityName`
and `booked` (whether this client holds a spot).

### POST /me/shifts/{shift_id}/booking
Takes a spot. `409 ALREADY_BOOKED` / `409 CAPACITY_EXCEEDED`.

### DELETE /me/shifts/{shift_id}/booking
Gives the spot back. Idempotent.

### GET /me/modalities
### PUT /me/modality
Form data: `modality_id`.

### GET /me/brand
The gym's brand image (`imageUrl`, empty when unset).
"""
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Form, Request

from gymdesk.core.deps import get_app_settings, get_store
from gymdesk.core.security import get_current_client
from gymdesk.schemas.account import Account, BrandSettings
from gymdesk.schemas.client import Client
from gymdesk.schemas.modality import Modality
from gymdesk.schemas.payment import PaymentStatusOut
from gymdesk.schemas.shift import ShiftView
from gymdesk.services.self_service import ClientSelfService

router = APIRouter(prefix="/me", tags=["Client"])


def _self_service(request: Request, account: Account = Depends(get_current_client)) -> ClientSelfService:
    settings = get_app_settings(request)
    return ClientSelfService.for_account(
        get_store(request),
        account.id,
        max_attempts=settings.booking_max_attempts,
        due_day=settings.due_day,
    )


@router.get("/profile", response_model=Client)
def my_profile(me: ClientSelfService = Depends(_self_service)):
    return me.profile()


@router.get("/status", response_model=PaymentStatusOut)
def my_status(me: ClientSelfService = Depends(_self_service)):
    today = date.today()
    return PaymentStatusOut(
        clientId=me.client_id,
        month=today.month,
        year=today.year,
        status=me.membership_status(today),
    )


@router.get("/shifts", response_model=List[ShiftView])
def my_shifts(me: ClientSelfService = Depends(_self_service)):
    return me.available_shifts()


@router.post("/shifts/{shift_id}/booking", response_model=ShiftView)
def book_shift(shift_id: str, me: ClientSelfService = Depends(_self_service)):
    return me.book(shift_id)


@router.delete("/shifts/{shift_id}/booking", response_model=ShiftView)
def cancel_booking(shift_id: str, me: ClientSelfService = Depends(_self_service)):
    return me.cancel(shift_id)


@router.get("/modalities", response_model=List[Modality])
def my_modalities(me: ClientSelfService = Depends(_self_service)):
    return me.modalities()


@router.put("/modality", response_model=Client)
def change_modality(modality_id: str = Form(...), me: ClientSelfService = Depends(_self_service)):
    return me.change_modality(modality_id)


@router.get("/brand", response_model=BrandSettings)
def gym_brand(me: ClientSelfService = Depends(_self_service)):
    return BrandSettings(imageUrl=me.brand_image())
