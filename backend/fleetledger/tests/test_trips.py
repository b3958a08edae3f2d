"""
Tests for trip endpoints: lifecycle, line items, access rules and versioning.
"""
from datetime import date
from decimal import Decimal
from fleetledger.models import Driver
from fleetledger.services.auth_service import set_password
from fleetledger.tests.conftest import PASSWORD, as_decimal


def create_trip(client, headers, payload):
    response = client.post("/api/trips", headers=headers, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_trip_starts_in_progress(client, driver_headers, trip_payload):
    trip = create_trip(client, driver_headers, trip_payload)
    assert trip["status"] == "Em Andamento"
    assert trip["monthly_trip_number"] == 1
    assert trip["vehicle_plate"] == "ABC1D23"
    assert trip["summary"]["fuel_efficiency"] == "N/A"


def test_monthly_trip_number_counts_driver_trips_in_month(client, admin_headers, trip_payload):
    create_trip(client, admin_headers, trip_payload)
    second = create_trip(client, admin_headers, trip_payload)
    assert second["monthly_trip_number"] == 2


def test_driver_cannot_create_trip_for_someone_else(client, db, driver_headers, trip_payload):
    other = Driver(name="CARLOS", cnh="2", phone="2")
    set_password(other, PASSWORD)
    db.add(other)
    db.commit()
    response = client.post("/api/trips", headers=driver_headers, json={**trip_payload, "driver_id": other.id})
    assert response.status_code == 403


def test_unknown_vehicle_is_not_found(client, admin_headers, trip_payload):
    response = client.post("/api/trips", headers=admin_headers, json={**trip_payload, "vehicle_id": 999})
    assert response.status_code == 404
    assert response.json()["error"] == "Vehicle not found"


def test_trip_lifecycle(client, driver_headers, trip_payload):
    trip = create_trip(client, driver_headers, trip_payload)
    trip_id = trip["id"]

    response = client.post(f"/api/trips/{trip_id}/cargo", headers=driver_headers, json={
        "type": "Soja", "weight": "10", "price_per_ton": "500", "tax": "200"
    })
    assert response.status_code == 201
    client.post(f"/api/trips/{trip_id}/fueling", headers=driver_headers, json={
        "station": "Posto Graal", "liters": "100", "total_amount": "300"
    })
    client.post(f"/api/trips/{trip_id}/expenses", headers=driver_headers, json={
        "category": "Pedágio", "description": "Praça 1", "amount": "50"
    })
    response = client.post(f"/api/trips/{trip_id}/received-payments", headers=driver_headers, json={
        "type": "Adiantamento", "method": "PIX", "amount": "1000"
    })
    summary = response.json()["summary"]
    assert as_decimal(summary["net_freight"]) == Decimal("4800")
    assert as_decimal(summary["commission"]) == Decimal("480")
    assert as_decimal(summary["net_profit"]) == Decimal("3970")
    assert as_decimal(summary["balance"]) == Decimal("3800")

    response = client.post(f"/api/trips/{trip_id}/finish", headers=driver_headers, json={"end_km": "900"})
    assert response.status_code == 422

    response = client.post(f"/api/trips/{trip_id}/finish", headers=driver_headers, json={"end_km": "1500"})
    assert response.status_code == 200
    finished = response.json()
    assert finished["status"] == "Finalizada"
    assert finished["end_date"] == date.today().isoformat()
    assert as_decimal(finished["summary"]["total_km"]) == Decimal("500")
    assert as_decimal(finished["summary"]["fuel_efficiency"]) == Decimal("5.00")

    response = client.post(f"/api/trips/{trip_id}/sign", headers=driver_headers)
    assert response.status_code == 200
    assert response.json()["signature_confirmed"] is True

    # Signed trips are closed
    response = client.post(f"/api/trips/{trip_id}/expenses", headers=driver_headers, json={
        "description": "Lanche", "amount": "20"
    })
    assert response.status_code == 422


def test_only_finished_trips_can_be_signed(client, driver_headers, trip_payload):
    trip = create_trip(client, driver_headers, trip_payload)
    assert client.post(f"/api/trips/{trip['id']}/sign", headers=driver_headers).status_code == 422


def test_admin_cannot_sign_for_driver(client, admin_headers, driver_headers, trip_payload):
    trip = create_trip(client, driver_headers, trip_payload)
    client.post(f"/api/trips/{trip['id']}/finish", headers=driver_headers, json={"end_km": "2000"})
    assert client.post(f"/api/trips/{trip['id']}/sign", headers=admin_headers).status_code == 403


def test_drivers_only_see_their_own_trips(client, db, admin_headers, trip_payload):
    other = Driver(name="CARLOS", cnh="2", phone="2")
    set_password(other, PASSWORD)
    db.add(other)
    db.commit()
    mine = create_trip(client, admin_headers, trip_payload)
    theirs = create_trip(client, admin_headers, {**trip_payload, "driver_id": other.id})

    login = client.post("/api/auth/login", json={"username": "CARLOS", "password": PASSWORD})
    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

    listed = client.get("/api/trips", headers=headers).json()
    assert [t["id"] for t in listed] == [theirs["id"]]
    assert client.get(f"/api/trips/{mine['id']}", headers=headers).status_code == 403
    assert len(client.get("/api/trips", headers=admin_headers).json()) == 2


def test_stale_version_is_a_conflict(client, admin_headers, trip_payload):
    trip = create_trip(client, admin_headers, trip_payload)
    read_version = trip["version"]

    response = client.put(f"/api/trips/{trip['id']}", headers=admin_headers, json={
        "destination": "Joinville", "version": read_version
    })
    assert response.status_code == 200
    assert response.json()["version"] > read_version

    response = client.put(f"/api/trips/{trip['id']}", headers=admin_headers, json={
        "destination": "Londrina", "version": read_version
    })
    assert response.status_code == 409
    assert response.json()["retryable"] is True


def test_adding_entries_bumps_version(client, admin_headers, trip_payload):
    trip = create_trip(client, admin_headers, trip_payload)
    response = client.post(f"/api/trips/{trip['id']}/cargo", headers=admin_headers, json={
        "type": "Milho", "weight": "5", "price_per_ton": "300", "version": trip["version"]
    })
    assert response.json()["version"] > trip["version"]

    response = client.post(f"/api/trips/{trip['id']}/cargo", headers=admin_headers, json={
        "type": "Milho", "weight": "5", "price_per_ton": "300", "version": trip["version"]
    })
    assert response.status_code == 409


def test_remove_entry(client, admin_headers, trip_payload):
    trip = create_trip(client, admin_headers, trip_payload)
    updated = client.post(f"/api/trips/{trip['id']}/fueling", headers=admin_headers, json={
        "station": "Posto", "liters": "50", "total_amount": "250"
    }).json()
    fueling_id = updated["fueling"][0]["id"]

    response = client.delete(f"/api/trips/{trip['id']}/fueling/{fueling_id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["fueling"] == []

    response = client.delete(f"/api/trips/{trip['id']}/fueling/{fueling_id}", headers=admin_headers)
    assert response.status_code == 404


def test_non_positive_amounts_are_rejected(client, admin_headers, trip_payload):
    trip = create_trip(client, admin_headers, trip_payload)
    response = client.post(f"/api/trips/{trip['id']}/expenses", headers=admin_headers, json={
        "description": "Pedágio", "amount": "0"
    })
    assert response.status_code == 422


def test_delete_trip_is_admin_only(client, admin_headers, driver_headers, trip_payload):
    trip = create_trip(client, driver_headers, trip_payload)
    assert client.delete(f"/api/trips/{trip['id']}", headers=driver_headers).status_code == 403
    assert client.delete(f"/api/trips/{trip['id']}", headers=admin_headers).status_code == 204
    assert client.get(f"/api/trips/{trip['id']}", headers=admin_headers).status_code == 404


def test_status_cannot_be_changed_through_update(client, admin_headers, driver_headers, trip_payload):
    trip = create_trip(client, admin_headers, trip_payload)
    response = client.put(f"/api/trips/{trip['id']}", headers=admin_headers, json={"status": "Finalizada"})
    assert response.status_code == 200
    assert response.json()["status"] == "Em Andamento"
    assert response.json()["end_date"] is None
    assert client.post(f"/api/trips/{trip['id']}/sign", headers=driver_headers).status_code == 422


def test_odometer_update_keeps_end_above_start(client, admin_headers, trip_payload):
    trip = create_trip(client, admin_headers, trip_payload)
    url = f"/api/trips/{trip['id']}"
    client.post(f"{url}/finish", headers=admin_headers, json={"end_km": "2000"})

    assert client.put(url, headers=admin_headers, json={"start_km": "5000"}).status_code == 422
    assert client.put(url, headers=admin_headers, json={"start_km": "2000"}).status_code == 422
    assert client.put(url, headers=admin_headers, json={"end_km": "900"}).status_code == 422

    response = client.put(url, headers=admin_headers, json={"start_km": "1200"})
    assert response.status_code == 200
    assert as_decimal(response.json()["summary"]["total_km"]) == Decimal("800")


def test_driver_dashboard(client, driver_headers, trip_payload):
    first = create_trip(client, driver_headers, trip_payload)
    second = create_trip(client, driver_headers, trip_payload)
    client.post(f"/api/trips/{first['id']}/finish", headers=driver_headers, json={"end_km": "1500"})

    response = client.get("/api/drivers/me/dashboard", headers=driver_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["driver_name"] == "PAULO"
    assert body["completed_trips"] == 1
    assert as_decimal(body["total_km"]) == Decimal("500")
    assert body["active_trip_id"] == second["id"]
    assert body["active_trip_monthly_number"] == 2


def test_admin_has_no_driver_dashboard(client, admin_headers):
    assert client.get("/api/drivers/me/dashboard", headers=admin_headers).status_code == 403
