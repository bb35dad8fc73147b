"""Tests for the /admin endpoints of a gym owner."""

from datetime import date

from httpx import AsyncClient

from gymdesk.services.accounts import AccountRegistry


async def _modality(client: AsyncClient, headers, name: str = "Crossfit", price: str = "50") -> dict:
    response = await client.post("/admin/modalities/", data={"name": name, "price": price}, headers=headers)
    assert response.status_code == 201
    return response.json()


async def _shift(client: AsyncClient, headers, modality_id: str, capacity: int = 2) -> dict:
    response = await client.post(
        "/admin/shifts/",
        data={"date": "2030-05-01", "time": "18:00", "capacity": capacity, "modality_id": modality_id},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


async def test_modality_crud(client: AsyncClient, admin_headers) -> None:
    created = await _modality(client, admin_headers)
    assert created["price"] == 50

    updated = await client.put(
        f"/admin/modalities/{created['id']}",
        data={"name": "Crossfit Pro", "price": "65"},
        headers=admin_headers,
    )
    assert updated.json()["name"] == "Crossfit Pro"

    listed = await client.get("/admin/modalities/", headers=admin_headers)
    assert [m["name"] for m in listed.json()] == ["Crossfit Pro"]

    deleted = await client.delete(f"/admin/modalities/{created['id']}", headers=admin_headers)
    assert deleted.status_code == 200


async def test_modality_invalid_price_returns_400(client: AsyncClient, admin_headers) -> None:
    response = await client.post("/admin/modalities/", data={"name": "Yoga", "price": "0"}, headers=admin_headers)
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "VALIDATION_ERROR"
    assert body["details"] == {"field": "price"}


async def test_modality_in_use_cannot_be_deleted(client: AsyncClient, admin_headers) -> None:
    modality = await _modality(client, admin_headers)
    await _shift(client, admin_headers, modality["id"])
    response = await client.delete(f"/admin/modalities/{modality['id']}", headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["error"] == "REFERENTIAL_CONFLICT"


async def test_shift_booking_flow(client: AsyncClient, admin_headers) -> None:
    """Admin books clients until the shift is full, then removes one."""
    modality = await _modality(client, admin_headers)
    shift = await _shift(client, admin_headers, modality["id"], capacity=1)
    c1 = (await client.post("/admin/clients/", json={"name": "Ana"}, headers=admin_headers)).json()
    c2 = (await client.post("/admin/clients/", json={"name": "Beto"}, headers=admin_headers)).json()

    booked = await client.post(f"/admin/shifts/{shift['id']}/bookings", data={"client_id": c1["id"]},
                               headers=admin_headers)
    assert booked.status_code == 200
    assert booked.json()["bookedClients"] == [c1["id"]]

    again = await client.post(f"/admin/shifts/{shift['id']}/bookings", data={"client_id": c1["id"]},
                              headers=admin_headers)
    assert again.status_code == 409
    assert again.json()["error"] == "ALREADY_BOOKED"

    full = await client.post(f"/admin/shifts/{shift['id']}/bookings", data={"client_id": c2["id"]},
                             headers=admin_headers)
    assert full.status_code == 409
    assert full.json()["error"] == "CAPACITY_EXCEEDED"

    removed = await client.delete(f"/admin/shifts/{shift['id']}/bookings/{c1['id']}", headers=admin_headers)
    assert removed.json()["bookedClients"] == []


async def test_booking_unknown_client_returns_404(client: AsyncClient, admin_headers) -> None:
    modality = await _modality(client, admin_headers)
    shift = await _shift(client, admin_headers, modality["id"])
    response = await client.post(f"/admin/shifts/{shift['id']}/bookings", data={"client_id": "ghost"},
                                 headers=admin_headers)
    assert response.status_code == 404


async def test_shift_with_bad_date_returns_400(client: AsyncClient, admin_headers) -> None:
    modality = await _modality(client, admin_headers)
    response = await client.post(
        "/admin/shifts/",
        data={"date": "2030-13-01", "time": "18:00", "capacity": 2, "modality_id": modality["id"]},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["details"] == {"field": "date"}


async def test_clients_list_includes_payment_status(client: AsyncClient, admin_headers) -> None:
    today = date.today()
    paid = (await client.post("/admin/clients/", json={"name": "Paid"}, headers=admin_headers)).json()
    await client.post("/admin/clients/", json={"name": "Unpaid"}, headers=admin_headers)

    payment = await client.post(
        "/admin/payments/",
        data={"client_id": paid["id"], "amount": "50", "month": today.month, "year": today.year},
        headers=admin_headers,
    )
    assert payment.status_code == 201

    listed = (await client.get("/admin/clients/", headers=admin_headers)).json()
    statuses = {c["name"]: c["paymentStatus"] for c in listed}
    assert statuses["Paid"] == "paid"
    assert statuses["Unpaid"] == ("overdue" if today.day > 10 else "pending")

    status = await client.get(f"/admin/clients/{paid['id']}/status", headers=admin_headers)
    assert status.json() == {"clientId": paid["id"], "month": today.month, "year": today.year, "status": "paid"}


async def test_client_update_and_link_conflict(client: AsyncClient, admin_headers) -> None:
    first = (await client.post("/admin/clients/", json={"name": "Caio", "associatedUserUid": "acc-9"},
                               headers=admin_headers)).json()
    conflict = await client.post("/admin/clients/", json={"name": "Other", "associatedUserUid": "acc-9"},
                                 headers=admin_headers)
    assert conflict.status_code == 409
    assert conflict.json()["error"] == "ACCOUNT_ALREADY_LINKED"

    updated = await client.put(f"/admin/clients/{first['id']}", json={"phone": "555-0199"}, headers=admin_headers)
    assert updated.json()["phone"] == "555-0199"
    assert updated.json()["associatedUserUid"] == "acc-9"


async def test_client_delete_removes_payments(client: AsyncClient, admin_headers) -> None:
    created = (await client.post("/admin/clients/", json={"name": "Duda"}, headers=admin_headers)).json()
    await client.post(
        "/admin/payments/",
        data={"client_id": created["id"], "amount": "50", "month": 1, "year": 2030},
        headers=admin_headers,
    )
    response = await client.delete(f"/admin/clients/{created['id']}", headers=admin_headers)
    assert response.status_code == 200

    payments = await client.get("/admin/payments/", params={"client_id": created["id"]}, headers=admin_headers)
    assert payments.json() == []
    missing = await client.get(f"/admin/clients/{created['id']}", headers=admin_headers)
    assert missing.status_code == 404


async def test_set_client_modality(client: AsyncClient, admin_headers) -> None:
    modality = await _modality(client, admin_headers)
    created = (await client.post("/admin/clients/", json={"name": "Enzo"}, headers=admin_headers)).json()
    response = await client.put(f"/admin/clients/{created['id']}/modality", data={"modality_id": modality["id"]},
                                headers=admin_headers)
    assert response.json()["currentModalityId"] == modality["id"]


async def test_payment_for_unknown_client_returns_400(client: AsyncClient, admin_headers) -> None:
    response = await client.post(
        "/admin/payments/",
        data={"client_id": "ghost", "amount": "50", "month": 1, "year": 2030},
        headers=admin_headers,
    )
    assert response.status_code == 400


async def test_brand_settings(client: AsyncClient, admin_headers) -> None:
    empty = await client.get("/admin/settings/brand", headers=admin_headers)
    assert empty.json() == {"imageUrl": ""}
    saved = await client.put("/admin/settings/brand", data={"image_url": "https://cdn.example.com/gym.png"},
                             headers=admin_headers)
    assert saved.json() == {"imageUrl": "https://cdn.example.com/gym.png"}


async def test_dashboard(client: AsyncClient, admin_headers) -> None:
    modality = await _modality(client, admin_headers)
    await _shift(client, admin_headers, modality["id"])
    await client.post("/admin/clients/", json={"name": "Fe"}, headers=admin_headers)

    response = await client.get("/admin/dashboard", headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["totalClients"] == 1
    assert body["totalShifts"] == 1
    assert body["totalIncome"] == 0
    assert len(body["upcomingShifts"]) == 1


async def test_gyms_do_not_see_each_other(client: AsyncClient, store, admin_headers) -> None:
    """A second admin account has its own, empty tenant."""
    store.set("accounts/admin-2", {"email": "other@example.com", "role": "admin"})
    await client.post("/admin/clients/", json={"name": "Mine"}, headers=admin_headers)
    other = await client.get("/admin/clients/", headers={"Authorization": "Bearer token-admin-2"})
    assert other.json() == []


async def test_shift_with_non_numeric_capacity_returns_400(client: AsyncClient, admin_headers) -> None:
    modality = await _modality(client, admin_headers)
    response = await client.post(
        "/admin/shifts/",
        data={"date": "2030-05-01", "time": "18:00", "capacity": "abc", "modality_id": modality["id"]},
        headers=admin_headers,
    )
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "VALIDATION_ERROR"
    assert body["details"] == {"field": "capacity"}


async def test_client_accounts_for_linking(client: AsyncClient, store, linked_client, admin_headers) -> None:
    """Client accounts are listed with their e-mail; the linked one is flagged."""
    AccountRegistry(store).on_first_sign_in("member-2", "zoe@example.com")

    response = await client.get("/admin/accounts/", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == [
        {"id": "member-1", "email": "member@example.com", "linked": True},
        {"id": "member-2", "email": "zoe@example.com", "linked": False},
    ]

    created = await client.post(
        "/admin/clients/", json={"name": "Zoe", "associatedUserUid": "member-2"}, headers=admin_headers
    )
    assert created.status_code == 201
    after = await client.get("/admin/accounts/", headers=admin_headers)
    assert all(a["linked"] for a in after.json())


async def test_client_accounts_require_admin(client: AsyncClient, member_headers) -> None:
    response = await client.get("/admin/accounts/", headers=member_headers)
    assert response.status_code == 403
