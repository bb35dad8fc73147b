# gymdesk/services/dashboard.py
from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Dict, List, Optional

from gymdesk.schemas.client import Client
from gymdesk.schemas.dashboard import DashboardSummary
from gymdesk.schemas.payment import MembershipStatus, Payment
from gymdesk.schemas.shift import Shift
from gymdesk.services.payments import DUE_DAY, payment_status, total_income
from gymdesk.services.shifts import upcoming_shifts
from gymdesk.store import paths
from gymdesk.store.base import Document, DocumentStore

logger = logging.getLogger("gymdesk.dashboard")

UPCOMING_LIMIT = 5


def build_summary(
    clients: List[Client],
    shifts: List[Shift],
    payments: List[Payment],
    now: datetime,
    due_day: int = DUE_DAY,
) -> DashboardSummary:
    overdue = sum(
        1 for c in clients
        if payment_status(payments, c.id, now.date(), due_day) == MembershipStatus.overdue
    )
    return DashboardSummary(
        totalClients=len(clients),
        totalShifts=len(shifts),
        totalIncome=total_income(payments),
        overdueClients=overdue,
        upcomingShifts=upcoming_shifts(shifts, now, limit=UPCOMING_LIMIT),
    )


class DashboardService:
    """Admin overview, recomputed from full snapshots every time."""

    def __init__(
        self,
        store: DocumentStore,
        tenant_id: str,
        clock: Callable[[], datetime] = datetime.now,
        due_day: int = DUE_DAY,
    ) -> None:
        self._store = store
        self.tenant_id = tenant_id
        self._clock = clock
        self.due_day = due_day

    def _collection(self, name: str) -> str:
        return paths.tenant_collection(self.tenant_id, name)

    def summary(self, now: Optional[datetime] = None) -> DashboardSummary:
        clients = [Client(**d.to_dict()) for d in self._store.query(self._collection(paths.CLIENTS))]
        shifts = [Shift(**d.to_dict()) for d in self._store.query(self._collection(paths.SHIFTS))]
        payments = [Payment(**d.to_dict()) for d in self._store.query(self._collection(paths.PAYMENTS))]
        return build_summary(clients, shifts, payments, now or self._clock(), self.due_day)

    def watch(self, listener: Callable[[DashboardSummary], None]) -> "LiveDashboard":
        return LiveDashboard(self, listener)


class LiveDashboard:
    """
    Keeps the latest full result set of clients, shifts and payments from three
    subscriptions and pushes a freshly built summary after each delivery.
    No incremental state: every push is computed from the snapshots alone.
    """

    _MODELS = {paths.CLIENTS: Client, paths.SHIFTS: Shift, paths.PAYMENTS: Payment}

    def __init__(self, service: DashboardService, listener: Callable[[DashboardSummary], None]) -> None:
        self._service = service
        self._listener = listener
        self._lock = threading.Lock()
        self._latest: Dict[str, Optional[list]] = {name: None for name in self._MODELS}
        self._subscriptions = [
            service._store.subscribe(service._collection(name), self._on_snapshot(name))
            for name in self._MODELS
        ]

    def _on_snapshot(self, name: str) -> Callable[[List[Document]], None]:
        model = self._MODELS[name]

        def _deliver(docs: List[Document]) -> None:
            with self._lock:
                self._latest[name] = [model(**d.to_dict()) for d in docs]
                if any(v is None for v in self._latest.values()):
                    return  # wait for the first delivery of every collection
                summary = build_summary(
                    self._latest[paths.CLIENTS],
                    self._latest[paths.SHIFTS],
                    self._latest[paths.PAYMENTS],
                    self._service._clock(),
                    self._service.due_day,
                )
            self._listener(summary)

        return _deliver

    def close(self) -> None:
        for sub in self._subscriptions:
            sub.unsubscribe()
        self._subscriptions = []
