"""
# gymdesk/routers/shifts.py - Shift management (admin)

Shifts live under `tenants/{adminId}/shifts/{id}` with their bookings inside
the document (`bookedClients`).

## Endpoints

### GET /admin/shifts/
All shifts, earliest first. `?upcoming=true` keeps only shifts that have not
started yet.

### POST /admin/shifts/
Form data: `date` (YYYY-MM-DD), `time` (HH:MM), `capacity` (>= 1),
`modality_id` (existing modality). Starts with no bookings.

### PUT /admin/shifts/{shift_id}
Same fields; bookings are kept. Capacity cannot go below the current number of
bookings.

### DELETE /admin/shifts/{shift_id}

### POST /admin/shifts/{shift_id}/bookings
Form data: `client_id`. `409 ALREADY_BOOKED` / `409 CAPACITY_EXCEEDED` when
the booking is not possible.

### DELETE /admin/shifts/{shift_id}/bookings/{client_id}
Idempotent: removing a client that is not booked is not an error.
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Form, Query, Request, status

from gymdesk.core.deps import get_app_settings, get_store
from gymdesk.core.security import get_current_admin
from gymdesk.schemas.account import Account
from gymdesk.schemas.shift import Shift
from gymdesk.services.clients import ClientDirectory
from gymdesk.services.shifts import ShiftScheduler, upcoming_shifts

admin_router = APIRouter(prefix="/shifts", tags=["Admin: Shifts"], dependencies=[Depends(get_current_admin)])


def _scheduler(request: Request, admin: Account = Depends(get_current_admin)) -> ShiftScheduler:
    settings = get_app_settings(request)
    return ShiftScheduler(get_store(request), admin.id, max_attempts=settings.booking_max_attempts)


@admin_router.get("/", response_model=List[Shift])
def list_shifts(
    upcoming: bool = Query(False, description="Only shifts that have not started yet"),
    scheduler: ShiftScheduler = Depends(_scheduler),
):
    shifts = scheduler.list_shifts()
    if upcoming:
        shifts = upcoming_shifts(shifts, datetime.now())
    return shifts


@admin_router.post("/", response_model=Shift, status_code=status.HTTP_201_CREATED)
def create_shift(
    date: Optional[str] = Form(None, description="YYYY-MM-DD"),
    time: Optional[str] = Form(None, description="HH:MM"),
    capacity: Optional[str] = Form(None),
    modality_id: Optional[str] = Form(None),
    scheduler: ShiftScheduler = Depends(_scheduler),
):
    return scheduler.create_shift(date, time, capacity, modality_id)


@admin_router.get("/{shift_id}", response_model=Shift)
def get_shift(shift_id: str, scheduler: ShiftScheduler = Depends(_scheduler)):
    return scheduler.get_shift(shift_id)


@admin_router.put("/{shift_id}", response_model=Shift)
def update_shift(
    shift_id: str,
    date: Optional[str] = Form(None, description="YYYY-MM-DD"),
    time: Optional[str] = Form(None, description="HH:MM"),
    capacity: Optional[str] = Form(None),
    modality_id: Optional[str] = Form(None),
    scheduler: ShiftScheduler = Depends(_scheduler),
):
    return scheduler.update_shift(shift_id, date, time, capacity, modality_id)


@admin_router.delete("/{shift_id}")
def delete_shift(shift_id: str, scheduler: ShiftScheduler = Depends(_scheduler)):
    scheduler.delete_shift(shift_id)
    return {"detail": "Shift deleted"}


@admin_router.post("/{shift_id}/bookings", response_model=Shift)
def book_client(
    request: Request,
    shift_id: str,
    client_id: str = Form(...),
    admin: Account = Depends(get_current_admin),
    scheduler: ShiftScheduler = Depends(_scheduler),
):
    # 404 for a client that is not on this gym's roster
    ClientDirectory(get_store(request), admin.id).get_client(client_id)
    return scheduler.book_client(shift_id, client_id)


@admin_router.delete("/{shift_id}/bookings/{client_id}", response_model=Shift)
def unbook_client(shift_id: str, client_id: str, scheduler: ShiftScheduler = Depends(_scheduler)):
    return scheduler.unbook_client(shift_id, client_id)
