"""
Period and fleet aggregation.

Trips are bucketed by the month of their start date; fixed and workshop
expenses contribute each installment that matures in the period (see
installment_service.expand).
"""
import calendar
import logging
import re
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from sqlalchemy.orm import Session
from fleetledger.core.exceptions import ValidationFailed
from fleetledger.models.account import Driver
from fleetledger.models.trip import Trip, TripStatus
from fleetledger.models.vehicle import Vehicle
from fleetledger.schemas.report import (
    AdminDashboard, BillingReport, BillingTripRow, DriverDashboard,
    FleetKPIs, MonthlySeries, VehicleBreakdownItem
)
from fleetledger.services import installment_service, trip_service

logger = logging.getLogger(__name__)

_MONTH_KEY = re.compile(r"^(\d{4})-(\d{2})$")


def parse_month(key: str) -> Tuple[int, int]:
    """Parse a "YYYY-MM" key into (year, month)."""
    match = _MONTH_KEY.match(key or "")
    if not match:
        raise ValidationFailed(f"Invalid month '{key}', expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValidationFailed(f"Invalid month '{key}', expected YYYY-MM")
    return year, month


def month_keys(start_month: str, end_month: str) -> List[Tuple[int, int]]:
    """Every (year, month) from start to end inclusive; empty when inverted."""
    year, month = parse_month(start_month)
    end = parse_month(end_month)
    keys = []
    while (year, month) <= end:
        keys.append((year, month))
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return keys


def month_label(key: Tuple[int, int]) -> str:
    """(2024, 1) -> "01/24"."""
    return f"{key[1]:02d}/{key[0] % 100:02d}"


def month_bounds(start: Tuple[int, int], end: Tuple[int, int]) -> Tuple[date, date]:
    """First day of the start month and last day of the end month."""
    last_day = calendar.monthrange(end[0], end[1])[1]
    return date(start[0], start[1], 1), date(end[0], end[1], last_day)


def _matches_vehicle(record, vehicle_id: Optional[int]) -> bool:
    return vehicle_id is None or record.vehicle_id == vehicle_id


def expand_installments(expenses, window_start: date, window_end: date, vehicle_id: Optional[int] = None):
    """Matured installments of every expense inside the window."""
    installments = []
    for expense in expenses:
        if _matches_vehicle(expense, vehicle_id):
            installments.extend(installment_service.expand(expense, window_start, window_end))
    return installments


def aggregate(
    trips,
    fixed_expenses,
    workshop_expenses,
    start_month: str,
    end_month: str,
    vehicle_id: Optional[int] = None
) -> MonthlySeries:
    """
    Monthly revenue, expenses and profit between two months, inclusive.
    Revenue is gross freight. Expenses are trip costs plus the installments
    maturing in each month. Months without activity are kept as zeros.
    """
    keys = month_keys(start_month, end_month)
    if not keys:
        return MonthlySeries(labels=[], revenue=[], expenses=[], profit=[])

    buckets: Dict[Tuple[int, int], Dict[str, Decimal]] = {
        key: {"revenue": Decimal(0), "expenses": Decimal(0)} for key in keys
    }

    for trip in trips:
        if not _matches_vehicle(trip, vehicle_id):
            continue
        bucket = buckets.get((trip.start_date.year, trip.start_date.month))
        if bucket is None:
            continue
        bucket["revenue"] += trip_service.gross_freight(trip)
        bucket["expenses"] += trip_service.trip_costs(trip)

    window_start, window_end = month_bounds(keys[0], keys[-1])
    for installment in expand_installments(
        list(fixed_expenses) + list(workshop_expenses), window_start, window_end, vehicle_id
    ):
        buckets[(installment.date.year, installment.date.month)]["expenses"] += installment.amount

    return MonthlySeries(
        labels=[month_label(key) for key in keys],
        revenue=[buckets[key]["revenue"] for key in keys],
        expenses=[buckets[key]["expenses"] for key in keys],
        profit=[buckets[key]["revenue"] - buckets[key]["expenses"] for key in keys],
    )


def fleet_kpis(
    trips,
    fixed_expenses,
    workshop_expenses,
    start_month: str,
    end_month: str,
    vehicle_id: Optional[int] = None
) -> FleetKPIs:
    """Totals for the same window and vehicle filter used by aggregate()."""
    keys = month_keys(start_month, end_month)
    zero = Decimal(0)
    if not keys:
        return FleetKPIs(total_revenue=zero, trip_costs=zero, fixed_expenses=zero,
                         workshop_expenses=zero, total_profit=zero)

    window_start, window_end = month_bounds(keys[0], keys[-1])
    in_window = [
        t for t in trips
        if _matches_vehicle(t, vehicle_id) and window_start <= t.start_date <= window_end
    ]
    revenue = sum((trip_service.gross_freight(t) for t in in_window), zero)
    costs = sum((trip_service.trip_costs(t) for t in in_window), zero)
    fixed = sum((i.amount for i in expand_installments(fixed_expenses, window_start, window_end, vehicle_id)), zero)
    workshop = sum((i.amount for i in expand_installments(workshop_expenses, window_start, window_end, vehicle_id)), zero)

    return FleetKPIs(
        total_revenue=revenue,
        trip_costs=costs,
        fixed_expenses=fixed,
        workshop_expenses=workshop,
        total_profit=revenue - costs - fixed - workshop,
    )


def billing_report(
    trips,
    fixed_expenses,
    workshop_expenses,
    vehicles,
    month: str,
    vehicle_id: Optional[int] = None
) -> BillingReport:
    """
    Monthly billing: trip revenue and net profit, installments due in the
    month, and a per-vehicle breakdown sorted by final profit.
    """
    key = parse_month(month)
    window_start, window_end = month_bounds(key, key)
    vehicles_by_id = {v.id: v for v in vehicles}
    zero = Decimal(0)

    monthly_trips = sorted(
        (t for t in trips if _matches_vehicle(t, vehicle_id) and window_start <= t.start_date <= window_end),
        key=lambda t: (t.start_date, t.id or 0)
    )
    fixed = expand_installments(fixed_expenses, window_start, window_end, vehicle_id)
    workshop = expand_installments(workshop_expenses, window_start, window_end, vehicle_id)

    breakdown: Dict[int, Dict[str, Decimal]] = {}

    def stats_for(vid: int) -> Dict[str, Decimal]:
        if vid not in breakdown:
            breakdown[vid] = {
                "gross_revenue": zero, "net_revenue": zero, "fixed_expenses": zero,
                "workshop_expenses": zero, "total_km": zero, "total_liters": zero,
            }
        return breakdown[vid]

    rows = []
    for trip in monthly_trips:
        summary = trip_service.summarize(trip)
        stats = stats_for(trip.vehicle_id)
        stats["gross_revenue"] += summary.gross_freight
        stats["net_revenue"] += summary.net_profit
        stats["total_km"] += summary.total_km
        stats["total_liters"] += summary.total_liters

        vehicle = vehicles_by_id.get(trip.vehicle_id)
        driver = getattr(trip, "driver", None)
        rows.append(BillingTripRow(
            trip_id=trip.id,
            start_date=trip.start_date,
            origin=trip.origin,
            destination=trip.destination,
            driver_name=driver.name if driver else "",
            vehicle_plate=vehicle.plate if vehicle else "Desconhecido",
            gross_freight=summary.gross_freight,
            net_profit=summary.net_profit,
        ))

    for installment in fixed:
        stats_for(installment.vehicle_id)["fixed_expenses"] += installment.amount
    for installment in workshop:
        stats_for(installment.vehicle_id)["workshop_expenses"] += installment.amount

    vehicle_breakdown = []
    for vid, stats in breakdown.items():
        vehicle = vehicles_by_id.get(vid)
        vehicle_breakdown.append(VehicleBreakdownItem(
            vehicle_id=vid,
            vehicle_plate=vehicle.plate if vehicle else "Desconhecido",
            vehicle_model=vehicle.model if vehicle else "",
            fuel_efficiency=trip_service.fuel_efficiency(stats["total_km"], stats["total_liters"]),
            final_profit=stats["net_revenue"] - stats["fixed_expenses"] - stats["workshop_expenses"],
            **stats
        ))
    vehicle_breakdown.sort(key=lambda item: item.final_profit, reverse=True)

    gross_revenue = sum((r.gross_freight for r in rows), zero)
    net_revenue = sum((r.net_profit for r in rows), zero)
    fixed_total = sum((i.amount for i in fixed), zero)
    workshop_total = sum((i.amount for i in workshop), zero)

    return BillingReport(
        month=month,
        vehicle_id=vehicle_id,
        gross_revenue=gross_revenue,
        net_revenue=net_revenue,
        fixed_expenses=fixed_total,
        workshop_expenses=workshop_total,
        final_profit=net_revenue - fixed_total - workshop_total,
        trips=rows,
        vehicle_breakdown=vehicle_breakdown,
    )


def admin_dashboard(db: Session) -> AdminDashboard:
    """Registry counters for administrators."""
    return AdminDashboard(
        total_drivers=db.query(Driver).count(),
        total_vehicles=db.query(Vehicle).count(),
        trips_in_progress=db.query(Trip).filter(Trip.status == TripStatus.IN_PROGRESS).count(),
    )


def driver_dashboard(driver: Driver, db: Session) -> DriverDashboard:
    """Trip counters of one driver."""
    trips = db.query(Trip).filter(Trip.driver_id == driver.id).all()
    active = next((t for t in trips if t.status == TripStatus.IN_PROGRESS), None)
    return DriverDashboard(
        driver_name=driver.name,
        completed_trips=sum(1 for t in trips if t.status == TripStatus.COMPLETED),
        total_km=sum((trip_service.total_km(t) for t in trips), Decimal(0)),
        active_trip_id=active.id if active else None,
        active_trip_monthly_number=active.monthly_trip_number if active else None,
    )
