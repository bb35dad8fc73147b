"""
gymdesk/services/payments.py
Membership payment ledger and the monthly status rule.

Status of a client on a given day:
  * paid    - at least one payment tagged with that day's month and year
  * overdue - no such payment and the day of month is past the due day (10)
  * pending - no such payment, due day not reached yet

The status is always derived from the current list of payments; it is never
stored, since it flips on the due day without any write happening.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Callable, Iterable, List, Optional

from gymdesk.core.errors import NotFound, ValidationError
from gymdesk.schemas.payment import MembershipStatus, Payment
from gymdesk.services.validation import integer, positive_number, required_text
from gymdesk.store import paths
from gymdesk.store.base import DocumentStore

logger = logging.getLogger("gymdesk.payments")

DUE_DAY = 10


def payment_status(
    payments: Iterable[Payment],
    client_id: str,
    today: date,
    due_day: int = DUE_DAY,
) -> MembershipStatus:
    paid = any(
        p.clientId == client_id and p.paymentMonth == today.month and p.paymentYear == today.year
        for p in payments
    )
    if paid:
        return MembershipStatus.paid
    if today.day > due_day:
        return MembershipStatus.overdue
    return MembershipStatus.pending


def total_income(payments: Iterable[Payment]) -> float:
    return round(sum(p.amount for p in payments), 2)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PaymentLedger:
    def __init__(
        self,
        store: DocumentStore,
        tenant_id: str,
        clock: Callable[[], datetime] = _utcnow,
        due_day: int = DUE_DAY,
    ) -> None:
        self._store = store
        self.tenant_id = tenant_id
        self._clock = clock
        self.due_day = due_day
        self._collection = paths.tenant_collection(tenant_id, paths.PAYMENTS)

    def _path(self, payment_id: str) -> str:
        return paths.document(self._collection, payment_id)

    def list_payments(self, client_id: Optional[str] = None) -> List[Payment]:
        """Newest first."""
        filters = [("clientId", "==", client_id)] if client_id else []
        items = [Payment(**d.to_dict()) for d in self._store.query(self._collection, filters)]
        items.sort(key=lambda p: p.recordedAt or datetime.min.replace(tzinfo=timezone.utc), reverse=True)
        return items

    def record_payment(self, client_id, amount, month, year) -> Payment:
        client_id = required_text(client_id, "clientId")
        fields = {
            "clientId": client_id,
            "amount": positive_number(amount, "amount"),
            "paymentMonth": integer(month, "paymentMonth", minimum=1, maximum=12),
            "paymentYear": integer(year, "paymentYear", minimum=1),
        }
        try:
            self._store.get(paths.document(paths.tenant_collection(self.tenant_id, paths.CLIENTS), client_id))
        except NotFound:
            raise ValidationError("clientId does not reference an existing client", field="clientId")

        fields["recordedAt"] = self._clock()
        payment_id = self._store.create(self._collection, fields)
        logger.info("Tenant %s recorded payment %s for client %s (%02d/%d)",
                    self.tenant_id, payment_id, client_id, fields["paymentMonth"], fields["paymentYear"])
        return Payment(id=payment_id, **fields)

    def delete_payment(self, payment_id: str) -> None:
        self._store.delete(self._path(payment_id))
        logger.info("Tenant %s deleted payment %s", self.tenant_id, payment_id)

    def status_for(self, client_id: str, today: Optional[date] = None) -> MembershipStatus:
        """Reads the client's payments fresh on every call."""
        today = today or self._clock().astimezone().date()
        return payment_status(self.list_payments(client_id), client_id, today, self.due_day)
