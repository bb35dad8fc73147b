"""
gymdesk/services/shifts.py
Shift scheduling and the booking engine.

Invariant: for every shift, len(bookedClients) <= capacity and no client id
appears twice. Booking is a read-check-write cycle; the write is conditional
on the version that was read, so two callers racing for the last spot cannot
both succeed. A caller that loses re-reads and re-checks, up to
`max_attempts` times.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from gymdesk.core.errors import (
    AlreadyBooked,
    CapacityExceeded,
    NotFound,
    StoreUnavailable,
    ValidationError,
    VersionConflict,
)
from gymdesk.schemas.shift import DATE_FORMAT, TIME_FORMAT, Shift
from gymdesk.services.modalities import ModalityCatalog
from gymdesk.services.validation import formatted, integer, required_text
from gymdesk.store import paths
from gymdesk.store.base import Document, DocumentStore

logger = logging.getLogger("gymdesk.shifts")

DEFAULT_MAX_ATTEMPTS = 3


def _to_shift(doc: Document) -> Shift:
    return Shift(**doc.to_dict())


def sort_shifts(shifts: Iterable[Shift]) -> List[Shift]:
    return sorted(shifts, key=lambda s: s.sort_key)


def upcoming_shifts(shifts: Iterable[Shift], now: datetime, limit: Optional[int] = None) -> List[Shift]:
    """Shifts starting strictly after `now`, earliest first."""
    future = [s for s in shifts if s.starts_at is not None and s.starts_at > now]
    ordered = sort_shifts(future)
    return ordered[:limit] if limit is not None else ordered


class ShiftScheduler:
    def __init__(
        self,
        store: DocumentStore,
        tenant_id: str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self._store = store
        self.tenant_id = tenant_id
        self._max_attempts = max(1, max_attempts)
        self._collection = paths.tenant_collection(tenant_id, paths.SHIFTS)
        self._modalities = ModalityCatalog(store, tenant_id)

    def _path(self, shift_id: str) -> str:
        return paths.document(self._collection, shift_id)

    # --- reads ---
    def list_shifts(self) -> List[Shift]:
        return sort_shifts(_to_shift(d) for d in self._store.query(self._collection))

    def get_shift(self, shift_id: str) -> Shift:
        return _to_shift(self._store.get(self._path(shift_id)))

    def shifts_with_client(self, client_id: str) -> List[Shift]:
        docs = self._store.query(self._collection, [("bookedClients", "array_contains", client_id)])
        return sort_shifts(_to_shift(d) for d in docs)

    def watch_shifts(self, listener: Callable[[List[Shift]], None]):
        """Push the sorted shift list to `listener` now and after every change."""
        return self._store.subscribe(
            self._collection,
            lambda docs: listener(sort_shifts(_to_shift(d) for d in docs)),
        )

    # --- admin CRUD ---
    def _validated_slot(self, date, time, capacity, modality_id) -> dict:
        slot = {
            "date": formatted(date, DATE_FORMAT, "date"),
            "time": formatted(time, TIME_FORMAT, "time"),
            "capacity": integer(capacity, "capacity", minimum=1),
            "modalityId": required_text(modality_id, "modalityId"),
        }
        if not self._modalities.exists(slot["modalityId"]):
            raise ValidationError("modalityId does not reference an existing modality", field="modalityId")
        return slot

    def create_shift(self, date, time, capacity, modality_id) -> Shift:
        slot = self._validated_slot(date, time, capacity, modality_id)
        shift_id = self._store.create(self._collection, {**slot, "bookedClients": []})
        logger.info("Tenant %s created shift %s on %s %s", self.tenant_id, shift_id, slot["date"], slot["time"])
        return self.get_shift(shift_id)

    def update_shift(self, shift_id: str, date, time, capacity, modality_id) -> Shift:
        slot = self._validated_slot(date, time, capacity, modality_id)
        for _ in range(self._max_attempts):
            doc = self._store.get(self._path(shift_id))
            booked = len(doc.data.get("bookedClients") or [])
            if slot["capacity"] < booked:
                raise ValidationError(
                    f"capacity cannot be lower than the {booked} clients already booked",
                    field="capacity",
                )
            try:
                self._store.update(self._path(shift_id), slot, expected_version=doc.version)
            except VersionConflict:
                continue
            return self.get_shift(shift_id)
        raise StoreUnavailable("The shift kept changing, please try again")

    def delete_shift(self, shift_id: str) -> None:
        self._store.delete(self._path(shift_id))
        logger.info("Tenant %s deleted shift %s", self.tenant_id, shift_id)

    # --- bookings ---
    def book_client(self, shift_id: str, client_id: str) -> Shift:
        client_id = required_text(client_id, "clientId")
        path = self._path(shift_id)
        for attempt in range(1, self._max_attempts + 1):
            doc = self._store.get(path)
            booked = list(doc.data.get("bookedClients") or [])
            capacity = int(doc.data.get("capacity") or 0)
            if client_id in booked:
                raise AlreadyBooked(shift_id, client_id)
            if len(booked) >= capacity:
                raise CapacityExceeded(shift_id, capacity)
            try:
                self._store.update(path, {"bookedClients": booked + [client_id]}, expected_version=doc.version)
            except VersionConflict:
                logger.info("Shift %s changed while booking %s (attempt %d/%d)",
                            shift_id, client_id, attempt, self._max_attempts)
                continue
            logger.info("Booked client %s into shift %s (%d/%d)", client_id, shift_id, len(booked) + 1, capacity)
            return self.get_shift(shift_id)
        logger.warning("Giving up booking %s into shift %s after %d attempts",
                       client_id, shift_id, self._max_attempts)
        raise CapacityExceeded(shift_id)

    def unbook_client(self, shift_id: str, client_id: str) -> Shift:
        """Idempotent: removing a client that is not booked changes nothing."""
        path = self._path(shift_id)
        for _ in range(self._max_attempts):
            doc = self._store.get(path)
            booked = list(doc.data.get("bookedClients") or [])
            if client_id not in booked:
                return _to_shift(doc)
            remaining = [c for c in booked if c != client_id]
            try:
                self._store.update(path, {"bookedClients": remaining}, expected_version=doc.version)
            except VersionConflict:
                continue
            logger.info("Removed client %s from shift %s", client_id, shift_id)
            return self.get_shift(shift_id)
        raise StoreUnavailable("The shift kept changing, please try again")

    def remove_client_everywhere(self, client_id: str) -> List[dict]:
        """Unbook `client_id` from every shift; returns the failures instead of stopping."""
        failures = []
        for shift in self.shifts_with_client(client_id):
            try:
                self.unbook_client(shift.id, client_id)
            except NotFound:
                continue  # shift deleted meanwhile, nothing left to clean
            except (StoreUnavailable, VersionConflict) as exc:
                logger.error("Could not unbook client %s from shift %s: %s", client_id, shift.id, exc.message)
                failures.append({"path": self._path(shift.id), "error": exc.error_code})
        return failures
