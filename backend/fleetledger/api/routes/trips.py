"""
Trip management routes: lifecycle, line items and settlement signature.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from fleetledger.api.dependencies import get_fleet_account, require_admin
from fleetledger.core.exceptions import NotFound, PermissionDenied
from fleetledger.db.session import get_db
from fleetledger.models.trip import Trip, TripCargo, TripExpense, TripFueling, ReceivedPayment, TripStatus
from fleetledger.schemas.trip import (
    CargoCreate, CargoResponse, FuelingCreate, FuelingResponse, ReceivedPaymentCreate, ReceivedPaymentResponse,
    TripCreate, TripDetailResponse, TripExpenseCreate, TripExpenseResponse,
    TripFinish, TripResponse, TripUpdate
)
from fleetledger.schemas.user import AccountInfo
from fleetledger.services import trip_service

router = APIRouter(prefix="/trips", tags=["trips"])

ENTRY_MODELS = {
    "cargo": TripCargo,
    "fueling": TripFueling,
    "expenses": TripExpense,
    "received_payments": ReceivedPayment,
}


def build_trip_detail(trip: Trip) -> TripDetailResponse:
    """Trip with its line items and financial summary."""
    base = TripResponse.model_validate(trip).model_dump()
    return TripDetailResponse(
        **base,
        driver_name=trip.driver.name if trip.driver else "",
        vehicle_plate=trip.vehicle.plate if trip.vehicle else "Desconhecido",
        cargo=[CargoResponse.model_validate(c) for c in trip.cargo],
        fueling=[FuelingResponse.model_validate(f) for f in trip.fueling],
        expenses=[TripExpenseResponse.model_validate(e) for e in trip.expenses],
        received_payments=[ReceivedPaymentResponse.model_validate(p) for p in trip.received_payments],
        summary=trip_service.summarize(trip),
    )


def _add_entry(trip_id: int, collection: str, data, account: AccountInfo, db: Session) -> TripDetailResponse:
    trip = trip_service.check_trip_access(trip_id, account, db)
    fields = data.model_dump(exclude={"version"})
    if "date" in fields and fields["date"] is None:
        fields["date"] = date.today()
    entry = ENTRY_MODELS[collection](**fields)
    trip = trip_service.add_entry(trip, collection, entry, db, expected_version=data.version)
    return build_trip_detail(trip)


@router.get("", response_model=List[TripResponse])
async def list_trips(
    driver_id: Optional[int] = None,
    vehicle_id: Optional[int] = None,
    status: Optional[TripStatus] = None,
    account: AccountInfo = Depends(get_fleet_account),
    db: Session = Depends(get_db)
):
    """List trips. Drivers only see their own."""
    return trip_service.list_trips(account, db, driver_id=driver_id, vehicle_id=vehicle_id, status=status)


@router.post("", response_model=TripDetailResponse, status_code=201)
async def create_trip(
    trip_data: TripCreate,
    account: AccountInfo = Depends(get_fleet_account),
    db: Session = Depends(get_db)
):
    """Start a new trip."""
    trip = trip_service.create_trip(trip_data, account, db)
    return build_trip_detail(trip)


@router.get("/{trip_id}", response_model=TripDetailResponse)
async def get_trip(trip_id: int, account: AccountInfo = Depends(get_fleet_account), db: Session = Depends(get_db)):
    """Get trip details with summary."""
    return build_trip_detail(trip_service.check_trip_access(trip_id, account, db))


@router.put("/{trip_id}", response_model=TripDetailResponse)
async def update_trip(
    trip_id: int,
    trip_data: TripUpdate,
    account: AccountInfo = Depends(get_fleet_account),
    db: Session = Depends(get_db)
):
    """Update trip header fields."""
    trip = trip_service.check_trip_access(trip_id, account, db)
    if account.role == "driver" and trip_data.driver_id not in (None, account.user_id):
        raise PermissionDenied("Drivers cannot reassign trips")
    trip = trip_service.update_trip(trip, trip_data, db)
    return build_trip_detail(trip)


@router.delete("/{trip_id}", status_code=204)
async def delete_trip(
    trip_id: int,
    version: Optional[int] = None,
    admin: AccountInfo = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a trip."""
    trip_service.delete_trip(trip_service.get_trip(trip_id, db), db, expected_version=version)


@router.post("/{trip_id}/finish", response_model=TripDetailResponse)
async def finish_trip(
    trip_id: int,
    data: TripFinish,
    account: AccountInfo = Depends(get_fleet_account),
    db: Session = Depends(get_db)
):
    """Close a trip with the final odometer reading."""
    trip = trip_service.check_trip_access(trip_id, account, db)
    trip = trip_service.finish_trip(trip, data.end_km, db, expected_version=data.version)
    return build_trip_detail(trip)


@router.post("/{trip_id}/sign", response_model=TripDetailResponse)
async def sign_trip(trip_id: int, account: AccountInfo = Depends(get_fleet_account), db: Session = Depends(get_db)):
    """Driver confirms the settlement of a finished trip."""
    trip = trip_service.check_trip_access(trip_id, account, db)
    return build_trip_detail(trip_service.sign_trip(trip, account, db))


@router.post("/{trip_id}/cargo", response_model=TripDetailResponse, status_code=status.HTTP_201_CREATED)
async def add_cargo(
    trip_id: int,
    data: CargoCreate,
    account: AccountInfo = Depends(get_fleet_account),
    db: Session = Depends(get_db)
):
    """Add a cargo lot."""
    return _add_entry(trip_id, "cargo", data, account, db)


@router.post("/{trip_id}/fueling", response_model=TripDetailResponse, status_code=status.HTTP_201_CREATED)
async def add_fueling(
    trip_id: int,
    data: FuelingCreate,
    account: AccountInfo = Depends(get_fleet_account),
    db: Session = Depends(get_db)
):
    """Add a fuel purchase."""
    return _add_entry(trip_id, "fueling", data, account, db)


@router.post("/{trip_id}/expenses", response_model=TripDetailResponse, status_code=status.HTTP_201_CREATED)
async def add_expense(
    trip_id: int,
    data: TripExpenseCreate,
    account: AccountInfo = Depends(get_fleet_account),
    db: Session = Depends(get_db)
):
    """Add a road expense."""
    return _add_entry(trip_id, "expenses", data, account, db)


@router.post("/{trip_id}/received-payments", response_model=TripDetailResponse, status_code=status.HTTP_201_CREATED)
async def add_received_payment(
    trip_id: int,
    data: ReceivedPaymentCreate,
    account: AccountInfo = Depends(get_fleet_account),
    db: Session = Depends(get_db)
):
    """Record a payment received from the customer."""
    return _add_entry(trip_id, "received_payments", data, account, db)


@router.delete("/{trip_id}/{collection}/{entry_id}", response_model=TripDetailResponse)
async def remove_entry(
    trip_id: int,
    collection: str,
    entry_id: int,
    version: Optional[int] = None,
    account: AccountInfo = Depends(get_fleet_account),
    db: Session = Depends(get_db)
):
    """Remove a cargo, fueling, expense or received-payments entry."""
    collection = collection.replace("-", "_")
    if collection not in ENTRY_MODELS:
        raise NotFound(f"Unknown trip entry type '{collection}'")
    trip = trip_service.check_trip_access(trip_id, account, db)
    trip = trip_service.remove_entry(trip, collection, entry_id, db, expected_version=version)
    return build_trip_detail(trip)
