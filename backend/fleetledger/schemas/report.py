"""
Pydantic schemas for financial rollups, analysis and dashboards.
"""
from pydantic import BaseModel
from typing import List, Optional, Union, Literal
from datetime import date
from decimal import Decimal


FuelEfficiency = Union[Decimal, Literal["N/A"]]


class TripSummary(BaseModel):
    """Financial summary of a single trip."""
    gross_freight: Decimal
    net_freight: Decimal
    fueling: Decimal
    other_expenses: Decimal
    commission: Decimal
    net_profit: Decimal
    total_km: Decimal
    total_liters: Decimal
    received: Decimal
    balance: Decimal
    fuel_efficiency: FuelEfficiency  # km/L, "N/A" when km or liters is zero


class ScheduledInstallmentResponse(BaseModel):
    """One entry of an expense's payment schedule."""
    number: int
    date: date
    amount: Decimal
    vehicle_id: Optional[int] = None

    class Config:
        from_attributes = True


class MonthlySeries(BaseModel):
    """Revenue, expenses and profit per month."""
    labels: List[str]  # "MM/YY"
    revenue: List[Decimal]
    expenses: List[Decimal]
    profit: List[Decimal]


class FleetKPIs(BaseModel):
    """Totals over an analysis window."""
    total_revenue: Decimal  # Gross freight
    trip_costs: Decimal  # Fueling + road expenses + driver commission
    fixed_expenses: Decimal
    workshop_expenses: Decimal
    total_profit: Decimal


class FleetAnalysisResponse(BaseModel):
    """Fleet analysis over a range of months."""
    start_month: str
    end_month: str
    vehicle_id: Optional[int] = None
    kpis: FleetKPIs
    monthly: MonthlySeries


class BillingTripRow(BaseModel):
    """Trip line of the monthly billing report."""
    trip_id: Optional[int] = None
    start_date: date
    origin: str
    destination: str
    driver_name: str
    vehicle_plate: str
    gross_freight: Decimal
    net_profit: Decimal


class VehicleBreakdownItem(BaseModel):
    """Per-vehicle results of the monthly billing report."""
    vehicle_id: int
    vehicle_plate: str
    vehicle_model: str
    gross_revenue: Decimal
    net_revenue: Decimal
    fixed_expenses: Decimal
    workshop_expenses: Decimal
    total_km: Decimal
    total_liters: Decimal
    fuel_efficiency: FuelEfficiency
    final_profit: Decimal


class BillingReport(BaseModel):
    """Monthly billing report."""
    month: str  # "YYYY-MM"
    vehicle_id: Optional[int] = None
    gross_revenue: Decimal
    net_revenue: Decimal  # Sum of trip net profit
    fixed_expenses: Decimal
    workshop_expenses: Decimal
    final_profit: Decimal
    trips: List[BillingTripRow] = []
    vehicle_breakdown: List[VehicleBreakdownItem] = []


class AdminDashboard(BaseModel):
    """Counters shown to administrators."""
    total_drivers: int
    total_vehicles: int
    trips_in_progress: int


class DriverDashboard(BaseModel):
    """Counters shown to a driver."""
    driver_name: str
    completed_trips: int
    total_km: Decimal
    active_trip_id: Optional[int] = None
    active_trip_monthly_number: Optional[int] = None
