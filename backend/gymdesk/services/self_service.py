"""
gymdesk/services/self_service.py
What a signed-in client can do for itself, always inside the one tenant and
with the one client id the association resolver found for its account.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, List, Optional

from gymdesk.schemas.client import Client
from gymdesk.schemas.modality import Modality
from gymdesk.schemas.payment import MembershipStatus
from gymdesk.schemas.shift import Shift, ShiftView
from gymdesk.services.accounts import AccountRegistry
from gymdesk.services.association import Association, AssociationResolver
from gymdesk.services.clients import ClientDirectory
from gymdesk.services.modalities import ModalityCatalog
from gymdesk.services.payments import DUE_DAY, PaymentLedger
from gymdesk.services.shifts import DEFAULT_MAX_ATTEMPTS, ShiftScheduler, upcoming_shifts
from gymdesk.store.base import DocumentStore

logger = logging.getLogger("gymdesk.self_service")


class ClientSelfService:
    def __init__(
        self,
        store: DocumentStore,
        association: Association,
        clock: Callable[[], datetime] = datetime.now,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        due_day: int = DUE_DAY,
    ) -> None:
        self._store = store
        self.tenant_id = association.tenant_id
        self.client_id = association.client_id
        self._clock = clock
        self._scheduler = ShiftScheduler(store, self.tenant_id, max_attempts=max_attempts)
        self._ledger = PaymentLedger(store, self.tenant_id, due_day=due_day)
        self._directory = ClientDirectory(store, self.tenant_id)
        self._catalog = ModalityCatalog(store, self.tenant_id)

    @classmethod
    def for_account(cls, store: DocumentStore, account_id: str, **kwargs) -> "ClientSelfService":
        """Raises NotAssociated when no gym has linked this account yet."""
        return cls(store, AssociationResolver(store).resolve(account_id), **kwargs)

    def profile(self) -> Client:
        return self._directory.get_client(self.client_id)

    def membership_status(self, today: Optional[date] = None) -> MembershipStatus:
        return self._ledger.status_for(self.client_id, today or self._clock().date())

    def modalities(self) -> List[Modality]:
        return self._catalog.list_modalities()

    def brand_image(self) -> str:
        return AccountRegistry(self._store).get_brand_image(self.tenant_id)

    def available_shifts(self, now: Optional[datetime] = None) -> List[ShiftView]:
        """Upcoming shifts of the gym, earliest first, with this client's booking flag."""
        names = {m.id: m.name for m in self._catalog.list_modalities()}
        shifts = upcoming_shifts(self._scheduler.list_shifts(), now or self._clock())
        return [self._view(s, names) for s in shifts]

    def book(self, shift_id: str) -> ShiftView:
        shift = self._scheduler.book_client(shift_id, self.client_id)
        return self._view(shift)

    def cancel(self, shift_id: str) -> ShiftView:
        shift = self._scheduler.unbook_client(shift_id, self.client_id)
        return self._view(shift)

    def change_modality(self, modality_id) -> Client:
        return self._directory.set_client_modality(self.client_id, modality_id)

    def _view(self, shift: Shift, names: Optional[dict] = None) -> ShiftView:
        if names is None:
            names = {m.id: m.name for m in self._catalog.list_modalities()}
        return ShiftView(
            id=shift.id,
            date=shift.date,
            time=shift.time,
            capacity=shift.capacity,
            spotsLeft=shift.spots_left,
            modalityId=shift.modalityId,
            modalityName=names.get(shift.modalityId),
            booked=self.client_id in shift.bookedClients,
        )
