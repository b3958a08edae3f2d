"""
Tests for period aggregation and the monthly billing report.
"""
import pytest
from datetime import date
from decimal import Decimal
from fleetledger.core.exceptions import ValidationFailed
from fleetledger.models.account import Driver
from fleetledger.models.installment import FixedExpense, WorkshopExpense
from fleetledger.models.trip import Trip, TripCargo, TripExpense, TripFueling
from fleetledger.models.vehicle import Vehicle
from fleetledger.services import analysis_service


def make_trip(vehicle_id, start, weight="10", price="500", tax="200", fuel="300", liters="100", other="50",
              start_km="1000", end_km="1500", trip_id=None):
    return Trip(
        id=trip_id,
        driver_id=1,
        vehicle_id=vehicle_id,
        origin="Campinas",
        destination="Curitiba",
        start_date=start,
        start_km=Decimal(start_km),
        end_km=Decimal(end_km),
        driver_commission_rate=Decimal("10"),
        driver=Driver(name="PAULO", cnh="1", phone="1"),
        cargo=[TripCargo(type="Soja", weight=Decimal(weight), price_per_ton=Decimal(price), tax=Decimal(tax))],
        fueling=[TripFueling(station="Posto", date=start, liters=Decimal(liters), total_amount=Decimal(fuel))],
        expenses=[TripExpense(description="Pedágio", amount=Decimal(other), date=start)],
        received_payments=[],
    )


def make_fixed(vehicle_id, total, installments, first):
    return FixedExpense(
        description="Seguro", total_amount=Decimal(total), installments=installments,
        first_payment_date=first, vehicle_id=vehicle_id,
    )


def make_workshop(vehicle_id, total, installments, first):
    return WorkshopExpense(
        description="Freios", total_amount=Decimal(total), installments=installments,
        first_payment_date=first, service_date=first, vehicle_id=vehicle_id,
    )


def test_empty_inputs_give_zero_months():
    series = analysis_service.aggregate([], [], [], "2024-01", "2024-03")
    assert series.labels == ["01/24", "02/24", "03/24"]
    assert series.revenue == [0, 0, 0]
    assert series.expenses == [0, 0, 0]
    assert series.profit == [0, 0, 0]


def test_inverted_range_is_empty():
    series = analysis_service.aggregate([], [], [], "2024-05", "2024-01")
    assert series.labels == []
    assert series.revenue == []


def test_malformed_month_is_rejected():
    with pytest.raises(ValidationFailed):
        analysis_service.aggregate([], [], [], "2024-13", "2024-14")
    with pytest.raises(ValidationFailed):
        analysis_service.aggregate([], [], [], "jan/24", "2024-02")


def test_range_crossing_year_end():
    series = analysis_service.aggregate([], [], [], "2023-11", "2024-02")
    assert series.labels == ["11/23", "12/23", "01/24", "02/24"]


def test_trips_and_installments_are_bucketed_by_month():
    trips = [make_trip(1, date(2024, 2, 10))]
    fixed = [make_fixed(1, "300", 3, date(2024, 1, 5))]
    workshop = [make_workshop(1, "200", 2, date(2024, 3, 20))]

    series = analysis_service.aggregate(trips, fixed, workshop, "2024-01", "2024-03")

    # February: trip costs 830 (fuel, tolls, commission) plus one fixed installment
    assert series.revenue == [Decimal(0), Decimal("5000"), Decimal(0)]
    assert series.expenses == [Decimal("100"), Decimal("930"), Decimal("200")]
    assert series.profit == [Decimal("-100"), Decimal("4070"), Decimal("-200")]


def test_vehicle_filter_excludes_other_vehicles():
    trips = [make_trip(1, date(2024, 1, 10)), make_trip(2, date(2024, 1, 12), weight="20")]
    fixed = [make_fixed(1, "100", 1, date(2024, 1, 1)), make_fixed(2, "999", 1, date(2024, 1, 1))]

    series = analysis_service.aggregate(trips, fixed, [], "2024-01", "2024-01", vehicle_id=1)

    assert series.revenue == [Decimal("5000")]
    assert series.expenses == [Decimal("830") + Decimal("100")]


def test_fleet_kpis_match_series_totals():
    trips = [make_trip(1, date(2024, 1, 10)), make_trip(1, date(2024, 2, 10))]
    fixed = [make_fixed(1, "300", 3, date(2024, 1, 5))]
    workshop = [make_workshop(1, "200", 2, date(2024, 2, 20))]

    kpis = analysis_service.fleet_kpis(trips, fixed, workshop, "2024-01", "2024-02")
    series = analysis_service.aggregate(trips, fixed, workshop, "2024-01", "2024-02")

    assert kpis.total_revenue == sum(series.revenue)
    assert kpis.fixed_expenses == Decimal("200")
    assert kpis.workshop_expenses == Decimal("100")
    assert kpis.total_profit == sum(series.profit)


def test_billing_report_breakdown_sorted_by_profit():
    vehicles = [
        Vehicle(id=1, plate="AAA1111", model="Scania"),
        Vehicle(id=2, plate="BBB2222", model="Volvo"),
    ]
    trips = [
        make_trip(1, date(2024, 4, 2), trip_id=10),
        make_trip(2, date(2024, 4, 3), weight="20", trip_id=11),
        make_trip(2, date(2024, 5, 3), trip_id=12),
    ]
    fixed = [make_fixed(1, "1200", 12, date(2024, 1, 15))]
    workshop = [make_workshop(2, "500", 1, date(2024, 4, 30))]

    report = analysis_service.billing_report(trips, fixed, workshop, vehicles, "2024-04")

    assert [row.trip_id for row in report.trips] == [10, 11]
    assert report.gross_revenue == Decimal("15000")
    assert report.fixed_expenses == Decimal("100")
    assert report.workshop_expenses == Decimal("500")
    assert report.final_profit == report.net_revenue - Decimal("600")
    assert [item.vehicle_plate for item in report.vehicle_breakdown] == ["BBB2222", "AAA1111"]
    assert report.vehicle_breakdown[1].fuel_efficiency == Decimal("5.00")


def test_billing_report_unknown_vehicle_plate():
    report = analysis_service.billing_report([make_trip(9, date(2024, 4, 2))], [], [], [], "2024-04")
    assert report.trips[0].vehicle_plate == "Desconhecido"
    assert report.vehicle_breakdown[0].vehicle_plate == "Desconhecido"


def test_fleet_analysis_endpoint(client, admin_headers, driver_headers, trip_payload):
    trip = client.post("/api/trips", headers=admin_headers, json={**trip_payload, "start_date": "2024-02-10"}).json()
    client.post(f"/api/trips/{trip['id']}/cargo", headers=admin_headers, json={
        "type": "Soja", "weight": "10", "price_per_ton": "500", "tax": "200"
    })

    response = client.get(
        "/api/analysis/fleet", headers=admin_headers, params={"start_month": "2024-01", "end_month": "2024-03"}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["monthly"]["labels"] == ["01/24", "02/24", "03/24"]
    assert Decimal(str(body["kpis"]["total_revenue"])) == Decimal("5000")

    bad = client.get("/api/analysis/fleet", headers=admin_headers, params={"start_month": "x", "end_month": "y"})
    assert bad.status_code == 422
    assert client.get(
        "/api/analysis/fleet", headers=driver_headers, params={"start_month": "2024-01", "end_month": "2024-03"}
    ).status_code == 403


def test_billing_print_view(client, admin_headers, vehicle, trip_payload):
    client.post("/api/trips", headers=admin_headers, json={**trip_payload, "start_date": "2024-04-02"})
    response = client.get(
        "/api/analysis/billing/print", headers=admin_headers, params={"month": "2024-04", "vehicle_id": vehicle.id}
    )
    assert response.status_code == 200
    assert "Relatório de Faturamento" in response.text
    assert "04/2024" in response.text
    assert "ABC1D23" in response.text
    assert "Curitiba" in response.text


def test_admin_dashboard_counters(client, admin_headers, driver, vehicle, trip_payload):
    client.post("/api/trips", headers=admin_headers, json=trip_payload)
    body = client.get("/api/analysis/dashboard", headers=admin_headers).json()
    assert body == {"total_drivers": 1, "total_vehicles": 1, "trips_in_progress": 1}
