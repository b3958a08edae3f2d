"""
Tests for fixed and workshop expenses and the accounts-payable view.
"""
from decimal import Decimal
from fleetledger.models import Vehicle
from fleetledger.tests.conftest import as_decimal


def fixed_payload(vehicle_id, **overrides):
    payload = {
        "vehicle_id": vehicle_id,
        "description": "Seguro do cavalo",
        "category": "Seguro",
        "total_amount": "1200",
        "installments": 3,
        "first_payment_date": "2024-01-31",
    }
    payload.update(overrides)
    return payload


def workshop_payload(vehicle_id, **overrides):
    payload = {
        "vehicle_id": vehicle_id,
        "description": "Troca de embreagem",
        "total_amount": "900",
        "installments": 2,
        "first_payment_date": "2024-03-10",
        "service_date": "2024-03-01",
    }
    payload.update(overrides)
    return payload


def test_create_fixed_expense(client, admin_headers, vehicle):
    response = client.post("/api/fixed-expenses", headers=admin_headers, json=fixed_payload(vehicle.id))
    assert response.status_code == 201
    body = response.json()
    assert as_decimal(body["installment_amount"]) == Decimal("400")
    assert body["paid_installments"] == 0
    assert body["is_paid_off"] is False
    assert body["next_due_date"] == "2024-01-31"


def test_expenses_are_admin_only(client, driver_headers, vehicle):
    response = client.post("/api/fixed-expenses", headers=driver_headers, json=fixed_payload(vehicle.id))
    assert response.status_code == 403


def test_unknown_vehicle_is_not_found(client, admin_headers):
    response = client.post("/api/fixed-expenses", headers=admin_headers, json=fixed_payload(999))
    assert response.status_code == 404


def test_zero_installments_are_rejected(client, admin_headers, vehicle):
    response = client.post("/api/fixed-expenses", headers=admin_headers, json=fixed_payload(vehicle.id, installments=0))
    assert response.status_code == 422


def test_schedule_clamps_to_month_end(client, admin_headers, vehicle):
    expense = client.post("/api/fixed-expenses", headers=admin_headers, json=fixed_payload(vehicle.id)).json()
    response = client.get(f"/api/fixed-expenses/{expense['id']}/schedule", headers=admin_headers)
    assert response.status_code == 200
    schedule = response.json()
    assert [item["number"] for item in schedule] == [1, 2, 3]
    assert [item["date"] for item in schedule] == ["2024-01-31", "2024-02-29", "2024-03-31"]
    assert sum(as_decimal(item["amount"]) for item in schedule) == Decimal("1200")


def test_register_payments_until_paid_off(client, admin_headers, vehicle):
    expense = client.post("/api/workshop-expenses", headers=admin_headers, json=workshop_payload(vehicle.id)).json()
    url = f"/api/workshop-expenses/{expense['id']}/payments"

    first = client.post(url, headers=admin_headers, json={"date": "2024-03-10"})
    assert first.status_code == 201
    assert first.json()["paid_installments"] == 1
    assert as_decimal(first.json()["amount_paid"]) == Decimal("450")
    assert first.json()["next_due_date"] == "2024-04-10"

    second = client.post(url, headers=admin_headers, json={})
    assert second.json()["is_paid_off"] is True
    assert second.json()["next_due_date"] is None

    third = client.post(url, headers=admin_headers, json={})
    assert third.status_code == 422


def test_payment_with_stale_version_conflicts(client, admin_headers, vehicle):
    expense = client.post("/api/fixed-expenses", headers=admin_headers, json=fixed_payload(vehicle.id)).json()
    url = f"/api/fixed-expenses/{expense['id']}/payments"

    first = client.post(url, headers=admin_headers, json={"version": expense["version"]})
    assert first.status_code == 201
    assert first.json()["version"] > expense["version"]

    stale = client.post(url, headers=admin_headers, json={"version": expense["version"]})
    assert stale.status_code == 409
    assert stale.json()["details"]["current_version"] == first.json()["version"]


def test_installments_cannot_drop_below_payments(client, admin_headers, vehicle):
    expense = client.post("/api/fixed-expenses", headers=admin_headers, json=fixed_payload(vehicle.id)).json()
    url = f"/api/fixed-expenses/{expense['id']}"
    client.post(f"{url}/payments", headers=admin_headers, json={})
    client.post(f"{url}/payments", headers=admin_headers, json={})

    assert client.put(url, headers=admin_headers, json={"installments": 1}).status_code == 422
    response = client.put(url, headers=admin_headers, json={"installments": 2, "service_date": "2024-01-01"})
    assert response.status_code == 200
    assert response.json()["is_paid_off"] is True
    assert as_decimal(response.json()["installment_amount"]) == Decimal("600")


def test_total_cannot_drop_below_amount_paid(client, admin_headers, vehicle):
    expense = client.post(
        "/api/workshop-expenses", headers=admin_headers, json=workshop_payload(vehicle.id, installments=3)
    ).json()
    url = f"/api/workshop-expenses/{expense['id']}"
    client.post(f"{url}/payments", headers=admin_headers, json={})
    client.post(f"{url}/payments", headers=admin_headers, json={})

    response = client.put(url, headers=admin_headers, json={"total_amount": "300"})
    assert response.status_code == 422
    body = client.get(url, headers=admin_headers).json()
    assert as_decimal(body["total_amount"]) == Decimal("900")
    assert as_decimal(body["amount_paid"]) == Decimal("600")

    # Lowering to exactly what was paid is allowed and leaves nothing to pay
    response = client.put(url, headers=admin_headers, json={"total_amount": "600"})
    assert response.status_code == 200
    assert client.post(f"{url}/payments", headers=admin_headers, json={}).status_code == 422


def test_delete_expense(client, admin_headers, vehicle):
    expense = client.post("/api/workshop-expenses", headers=admin_headers, json=workshop_payload(vehicle.id)).json()
    client.post(f"/api/workshop-expenses/{expense['id']}/payments", headers=admin_headers, json={})
    assert client.delete(f"/api/workshop-expenses/{expense['id']}", headers=admin_headers).status_code == 204
    assert client.get(f"/api/workshop-expenses/{expense['id']}", headers=admin_headers).status_code == 404


def test_payables_combine_both_kinds(client, db, admin_headers, vehicle):
    other = Vehicle(plate="XYZ9A87", model="Scania R450", chassi="9BSXXX")
    db.add(other)
    db.commit()
    client.post("/api/fixed-expenses", headers=admin_headers, json=fixed_payload(vehicle.id))
    client.post("/api/workshop-expenses", headers=admin_headers, json=workshop_payload(other.id))
    client.post("/api/fixed-expenses", headers=admin_headers, json=fixed_payload(
        vehicle.id, description="Pneus dianteiros", category="Pneus", total_amount="2000",
        first_payment_date="2024-05-02"
    ))

    body = client.get("/api/payables", headers=admin_headers).json()
    assert [item["due_date"] for item in body["items"]] == ["2024-01-31", "2024-03-10", "2024-05-02"]
    assert [item["category"] for item in body["items"]] == ["Despesas", "Despesas Oficina", "Despesas"]
    assert as_decimal(body["total_amount"]) == Decimal("4100")

    by_plate = client.get("/api/payables", headers=admin_headers, params={"plate": "xyz"}).json()
    assert [item["vehicle_plate"] for item in by_plate["items"]] == ["XYZ9A87"]

    by_search = client.get("/api/payables", headers=admin_headers, params={"search": "PNEUS"}).json()
    assert as_decimal(by_search["total_amount"]) == Decimal("2000")

    by_category = client.get("/api/payables", headers=admin_headers, params={"category": "Despesas Oficina"}).json()
    assert len(by_category["items"]) == 1

    by_month = client.get(
        "/api/payables", headers=admin_headers, params={"start_month": "2024-02", "end_month": "2024-03"}
    ).json()
    assert [item["description"] for item in by_month["items"]] == ["Troca de embreagem"]


def test_payables_reject_malformed_month(client, admin_headers):
    response = client.get("/api/payables", headers=admin_headers, params={"start_month": "03/2024"})
    assert response.status_code == 422
