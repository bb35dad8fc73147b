"""Tests for the payment ledger and the monthly membership status rule."""

from datetime import date, datetime, timezone

import pytest

from gymdesk.core.errors import ValidationError
from gymdesk.schemas.payment import MembershipStatus, Payment
from gymdesk.services.clients import ClientDirectory
from gymdesk.services.payments import PaymentLedger, payment_status, total_income
from gymdesk.store.memory import InMemoryDocumentStore

TENANT = "gym-1"


def _payment(client_id: str, month: int, year: int, amount: float = 50.0) -> Payment:
    return Payment(id=f"{client_id}-{month}-{year}", clientId=client_id, amount=amount,
                   paymentMonth=month, paymentYear=year)


def test_status_overdue_after_due_day_without_payment() -> None:
    """11 March with no March payment is overdue."""
    assert payment_status([], "c1", date(2024, 3, 11)) == MembershipStatus.overdue


def test_status_pending_before_due_day() -> None:
    """9 March with no March payment is pending."""
    assert payment_status([], "c1", date(2024, 3, 9)) == MembershipStatus.pending


def test_status_pending_on_due_day() -> None:
    """The due day itself is still pending."""
    assert payment_status([], "c1", date(2024, 3, 10)) == MembershipStatus.pending


def test_status_paid_with_payment_for_month() -> None:
    """A payment tagged with the current month and year means paid, whatever the day."""
    payments = [_payment("c1", 3, 2024)]
    assert payment_status(payments, "c1", date(2024, 3, 25)) == MembershipStatus.paid


def test_status_ignores_other_months_and_clients() -> None:
    """Payments for February, for March of another year, or for another client do not count."""
    payments = [_payment("c1", 2, 2024), _payment("c1", 3, 2023), _payment("c2", 3, 2024)]
    assert payment_status(payments, "c1", date(2024, 3, 25)) == MembershipStatus.overdue


def test_status_respects_custom_due_day() -> None:
    assert payment_status([], "c1", date(2024, 3, 12), due_day=15) == MembershipStatus.pending


def test_total_income_sums_all_payments() -> None:
    payments = [_payment("c1", 1, 2024, 49.9), _payment("c2", 2, 2024, 50.1)]
    assert total_income(payments) == 100.0
    assert total_income([]) == 0


@pytest.fixture
def ledger_and_client():
    store = InMemoryDocumentStore()
    client = ClientDirectory(store, TENANT).add_client("Bruno")
    clock = iter([
        datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc),
        datetime(2024, 3, 2, 9, 0, tzinfo=timezone.utc),
        datetime(2024, 3, 3, 9, 0, tzinfo=timezone.utc),
    ])
    ledger = PaymentLedger(store, TENANT, clock=lambda: next(clock))
    return ledger, client


def test_record_payment_and_list_newest_first(ledger_and_client) -> None:
    """Recorded payments keep their month tag and are listed newest first."""
    ledger, client = ledger_and_client
    first = ledger.record_payment(client.id, "45.5", "2", "2024")
    second = ledger.record_payment(client.id, 50, 3, 2024)

    assert first.amount == 45.5
    assert first.paymentMonth == 2
    assert [p.id for p in ledger.list_payments()] == [second.id, first.id]
    assert [p.id for p in ledger.list_payments(client.id)] == [second.id, first.id]
    assert ledger.list_payments("someone-else") == []


@pytest.mark.parametrize(
    "amount, month, year, field",
    [
        (0, 3, 2024, "amount"),
        (-10, 3, 2024, "amount"),
        ("abc", 3, 2024, "amount"),
        (50, 13, 2024, "paymentMonth"),
        (50, 0, 2024, "paymentMonth"),
        (50, 3, None, "paymentYear"),
    ],
)
def test_record_payment_rejects_invalid_input(ledger_and_client, amount, month, year, field) -> None:
    """Amounts must be positive and the month within 1..12."""
    ledger, client = ledger_and_client
    with pytest.raises(ValidationError) as exc_info:
        ledger.record_payment(client.id, amount, month, year)
    assert exc_info.value.details["field"] == field
    assert ledger.list_payments() == []


def test_record_payment_requires_known_client(ledger_and_client) -> None:
    ledger, _ = ledger_and_client
    with pytest.raises(ValidationError) as exc_info:
        ledger.record_payment("ghost", 50, 3, 2024)
    assert exc_info.value.details["field"] == "clientId"


def test_status_for_reads_current_payments(ledger_and_client) -> None:
    """status_for reflects a payment as soon as it is recorded."""
    ledger, client = ledger_and_client
    today = date(2024, 3, 20)
    assert ledger.status_for(client.id, today) == MembershipStatus.overdue
    ledger.record_payment(client.id, 50, 3, 2024)
    assert ledger.status_for(client.id, today) == MembershipStatus.paid


def test_delete_payment(ledger_and_client) -> None:
    ledger, client = ledger_and_client
    payment = ledger.record_payment(client.id, 50, 3, 2024)
    ledger.delete_payment(payment.id)
    assert ledger.list_payments() == []
