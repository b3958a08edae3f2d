"""
Fleet analysis, billing report and dashboard routes.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session, selectinload
from typing import Optional
from fleetledger.api.dependencies import require_admin
from fleetledger.db.session import get_db
from fleetledger.models.installment import FixedExpense, WorkshopExpense
from fleetledger.models.trip import Trip
from fleetledger.models.vehicle import Vehicle
from fleetledger.schemas.report import AdminDashboard, BillingReport, FleetAnalysisResponse
from fleetledger.schemas.user import AccountInfo
from fleetledger.services import analysis_service, report_service

router = APIRouter(prefix="/analysis", tags=["analysis"])


def _load_trips(db: Session):
    return db.query(Trip).options(
        selectinload(Trip.cargo),
        selectinload(Trip.fueling),
        selectinload(Trip.expenses),
        selectinload(Trip.received_payments),
        selectinload(Trip.driver),
    ).all()


def _billing_report(month: str, vehicle_id: Optional[int], db: Session) -> BillingReport:
    return analysis_service.billing_report(
        _load_trips(db),
        db.query(FixedExpense).all(),
        db.query(WorkshopExpense).all(),
        db.query(Vehicle).all(),
        month,
        vehicle_id=vehicle_id,
    )


@router.get("/fleet", response_model=FleetAnalysisResponse)
async def fleet_analysis(
    start_month: str,
    end_month: str,
    vehicle_id: Optional[int] = None,
    admin: AccountInfo = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Monthly revenue, expenses and profit between two months (YYYY-MM)."""
    trips = _load_trips(db)
    fixed = db.query(FixedExpense).all()
    workshop = db.query(WorkshopExpense).all()
    return FleetAnalysisResponse(
        start_month=start_month,
        end_month=end_month,
        vehicle_id=vehicle_id,
        kpis=analysis_service.fleet_kpis(trips, fixed, workshop, start_month, end_month, vehicle_id),
        monthly=analysis_service.aggregate(trips, fixed, workshop, start_month, end_month, vehicle_id),
    )


@router.get("/billing", response_model=BillingReport)
async def billing(
    month: str,
    vehicle_id: Optional[int] = None,
    admin: AccountInfo = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Monthly billing report (YYYY-MM)."""
    return _billing_report(month, vehicle_id, db)


@router.get("/billing/print", response_class=HTMLResponse)
async def print_billing(
    month: str,
    vehicle_id: Optional[int] = None,
    admin: AccountInfo = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Printable monthly billing report."""
    report = _billing_report(month, vehicle_id, db)
    vehicle = db.query(Vehicle).filter(Vehicle.id == vehicle_id).first() if vehicle_id else None
    return HTMLResponse(report_service.render_billing_report(report, vehicle.plate if vehicle else None))


@router.get("/dashboard", response_model=AdminDashboard)
async def dashboard(admin: AccountInfo = Depends(require_admin), db: Session = Depends(get_db)):
    """Registry counters for administrators."""
    return analysis_service.admin_dashboard(db)
