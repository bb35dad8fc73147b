"""Tests for the admin dashboard summary and its live variant."""

from datetime import datetime

from gymdesk.services.clients import ClientDirectory
from gymdesk.services.dashboard import DashboardService
from gymdesk.services.modalities import ModalityCatalog
from gymdesk.services.payments import PaymentLedger
from gymdesk.services.shifts import ShiftScheduler
from gymdesk.store.memory import InMemoryDocumentStore

TENANT = "gym-1"
NOW = datetime(2030, 3, 15, 12, 0)


def _seed(store):
    directory = ClientDirectory(store, TENANT)
    paid = directory.add_client("Paid")
    directory.add_client("Late 1")
    directory.add_client("Late 2")
    ledger = PaymentLedger(store, TENANT)
    ledger.record_payment(paid.id, 60, 3, 2030)
    ledger.record_payment(paid.id, 40, 2, 2030)

    modality = ModalityCatalog(store, TENANT).add_modality("Yoga", 30)
    scheduler = ShiftScheduler(store, TENANT)
    scheduler.create_shift("2030-03-14", "08:00", 5, modality.id)  # already past
    for day in range(16, 23):
        scheduler.create_shift(f"2030-03-{day}", "08:00", 5, modality.id)
    return modality


def test_summary_counts_income_overdue_and_upcoming() -> None:
    store = InMemoryDocumentStore()
    _seed(store)
    summary = DashboardService(store, TENANT, clock=lambda: NOW).summary()

    assert summary.totalClients == 3
    assert summary.totalShifts == 8
    assert summary.totalIncome == 100.0
    assert summary.overdueClients == 2
    assert [s.date for s in summary.upcomingShifts] == [
        "2030-03-16", "2030-03-17", "2030-03-18", "2030-03-19", "2030-03-20",
    ]


def test_summary_of_empty_gym() -> None:
    summary = DashboardService(InMemoryDocumentStore(), TENANT, clock=lambda: NOW).summary()
    assert summary.totalClients == 0
    assert summary.totalShifts == 0
    assert summary.totalIncome == 0
    assert summary.overdueClients == 0
    assert summary.upcomingShifts == []


def test_live_dashboard_recomputes_after_each_change() -> None:
    """Every delivery yields a summary built from the latest full snapshots."""
    store = InMemoryDocumentStore()
    pushed = []
    live = DashboardService(store, TENANT, clock=lambda: NOW).watch(pushed.append)

    assert len(pushed) == 1
    assert pushed[-1].totalClients == 0

    client = ClientDirectory(store, TENANT).add_client("New")
    assert pushed[-1].totalClients == 1
    assert pushed[-1].overdueClients == 1

    PaymentLedger(store, TENANT).record_payment(client.id, 80, 3, 2030)
    assert pushed[-1].overdueClients == 0
    assert pushed[-1].totalIncome == 80.0

    live.close()
    count = len(pushed)
    ClientDirectory(store, TENANT).add_client("After close")
    assert len(pushed) == count
