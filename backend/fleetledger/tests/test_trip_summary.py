"""
Tests for the trip financial rollup.
"""
from datetime import date
from decimal import Decimal
from fleetledger.models.trip import ReceivedPayment, Trip, TripCargo, TripExpense, TripFueling
from fleetledger.services import trip_service


def make_trip(cargo=(), fueling=(), expenses=(), received=(), start_km="1000", end_km="0", rate="10"):
    return Trip(
        driver_id=1,
        vehicle_id=1,
        origin="Campinas",
        destination="Curitiba",
        start_date=date(2024, 3, 4),
        start_km=Decimal(start_km),
        end_km=Decimal(end_km),
        driver_commission_rate=Decimal(rate),
        cargo=list(cargo),
        fueling=list(fueling),
        expenses=list(expenses),
        received_payments=list(received),
    )


def cargo(weight, price, tax="0"):
    return TripCargo(type="Soja", weight=Decimal(weight), price_per_ton=Decimal(price), tax=Decimal(tax))


def fuel(total, liters):
    return TripFueling(station="Posto", date=date(2024, 3, 4), liters=Decimal(liters), total_amount=Decimal(total))


def expense(amount):
    return TripExpense(description="Pedágio", amount=Decimal(amount), date=date(2024, 3, 4))


def test_single_cargo_scenario():
    trip = make_trip(cargo=[cargo("10", "500", "200")], fueling=[fuel("300", "100")], expenses=[expense("50")])
    summary = trip_service.summarize(trip)
    assert summary.gross_freight == Decimal("5000")
    assert summary.net_freight == Decimal("4800")
    assert summary.commission == Decimal("480")
    assert summary.net_profit == Decimal("3970")


def test_missing_tax_counts_as_zero():
    lot = TripCargo(type="Milho", weight=Decimal("2"), price_per_ton=Decimal("100"))
    trip = make_trip(cargo=[lot])
    assert trip_service.summarize(trip).net_freight == Decimal("200")


def test_summary_ignores_entry_order():
    lots = [cargo("10", "500", "200"), cargo("3.5", "420", "15"), cargo("1", "99.9")]
    fuels = [fuel("300", "100"), fuel("150.50", "52.3")]
    costs = [expense("50"), expense("12.75"), expense("8")]
    forward = make_trip(cargo=lots, fueling=fuels, expenses=costs, end_km="1800")
    reverse = make_trip(
        cargo=list(reversed(lots)), fueling=list(reversed(fuels)), expenses=list(reversed(costs)), end_km="1800"
    )
    assert trip_service.summarize(forward) == trip_service.summarize(reverse)


def test_unfinished_trip_has_no_distance_or_efficiency():
    trip = make_trip(cargo=[cargo("10", "500")], fueling=[fuel("300", "100")], end_km="0")
    summary = trip_service.summarize(trip)
    assert summary.total_km == Decimal(0)
    assert summary.fuel_efficiency == "N/A"


def test_fuel_efficiency_rounded_to_two_places():
    trip = make_trip(fueling=[fuel("900", "300")], start_km="1000", end_km="1800")
    summary = trip_service.summarize(trip)
    assert summary.total_km == Decimal("800")
    assert summary.fuel_efficiency == Decimal("2.67")


def test_no_fueling_means_no_efficiency():
    trip = make_trip(start_km="1000", end_km="1500")
    assert trip_service.summarize(trip).fuel_efficiency == "N/A"


def test_balance_is_net_freight_minus_received():
    trip = make_trip(
        cargo=[cargo("10", "500", "200")],
        received=[
            ReceivedPayment(amount=Decimal("1000"), date=date(2024, 3, 4)),
            ReceivedPayment(amount=Decimal("800"), date=date(2024, 3, 10)),
        ],
    )
    summary = trip_service.summarize(trip)
    assert summary.received == Decimal("1800")
    assert summary.balance == Decimal("3000")


def test_summarize_is_idempotent():
    trip = make_trip(cargo=[cargo("10", "500", "200")], fueling=[fuel("300", "100")], end_km="1500")
    assert trip_service.summarize(trip) == trip_service.summarize(trip)
