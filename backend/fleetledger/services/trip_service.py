"""
Trip service: financial rollup of a trip and its lifecycle operations.
"""
import logging
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional
from sqlalchemy import extract, func
from sqlalchemy.orm import Session
from fleetledger.core.exceptions import ConcurrencyConflict, NotFound, PermissionDenied, ValidationFailed
from fleetledger.db.session import write_transaction
from fleetledger.models.account import Driver, RecordStatus
from fleetledger.models.trip import Trip, TripStatus
from fleetledger.models.vehicle import Vehicle
from fleetledger.schemas.report import TripSummary
from fleetledger.schemas.user import AccountInfo

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"
TWO_PLACES = Decimal("0.01")


def _d(value) -> Decimal:
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _total(items: Iterable, attr: str) -> Decimal:
    return sum((_d(getattr(item, attr)) for item in items), Decimal(0))


def gross_freight(trip) -> Decimal:
    """Sum of weight x price per ton over the trip's cargo."""
    return sum((_d(c.weight) * _d(c.price_per_ton) for c in trip.cargo), Decimal(0))


def net_freight(trip) -> Decimal:
    """Gross freight minus the tax of each cargo lot (missing tax counts as 0)."""
    return sum((_d(c.weight) * _d(c.price_per_ton) - _d(c.tax) for c in trip.cargo), Decimal(0))


def trip_costs(trip) -> Decimal:
    """Direct costs of a trip: fueling, road expenses and driver commission."""
    commission = net_freight(trip) * _d(trip.driver_commission_rate) / 100
    return _total(trip.fueling, "total_amount") + _total(trip.expenses, "amount") + commission


def total_km(trip) -> Decimal:
    """Distance driven, 0 while the trip has no end odometer reading."""
    end_km = _d(trip.end_km)
    if end_km > 0:
        return end_km - _d(trip.start_km)
    return Decimal(0)


def fuel_efficiency(km: Decimal, liters: Decimal):
    """km/L rounded to two places, or "N/A" when either side is zero."""
    if km <= 0 or liters <= 0:
        return NOT_AVAILABLE
    return (km / liters).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def summarize(trip) -> TripSummary:
    """
    Reduce a trip's cargo, fueling, expenses and received payments into the
    figures shown on trip details, billing and analysis screens.
    """
    gross = gross_freight(trip)
    net = net_freight(trip)
    fueling = _total(trip.fueling, "total_amount")
    other_expenses = _total(trip.expenses, "amount")
    commission = net * _d(trip.driver_commission_rate) / 100
    km = total_km(trip)
    liters = _total(trip.fueling, "liters")
    received = _total(trip.received_payments, "amount")

    return TripSummary(
        gross_freight=gross,
        net_freight=net,
        fueling=fueling,
        other_expenses=other_expenses,
        commission=commission,
        net_profit=net - commission - fueling - other_expenses,
        total_km=km,
        total_liters=liters,
        received=received,
        balance=net - received,
        fuel_efficiency=fuel_efficiency(km, liters),
    )


def get_trip(trip_id: int, db: Session) -> Trip:
    """Load a trip or raise NotFound."""
    trip = db.query(Trip).filter(Trip.id == trip_id).first()
    if not trip:
        raise NotFound("Trip not found")
    return trip


def check_trip_access(trip_id: int, account: AccountInfo, db: Session) -> Trip:
    """Admins see every trip, drivers only their own."""
    trip = get_trip(trip_id, db)
    if account.role == "driver" and trip.driver_id != account.user_id:
        raise PermissionDenied("Access denied to this trip")
    return trip


def check_version(trip: Trip, expected_version: Optional[int]) -> None:
    """Reject the write when the client read an older version of the trip."""
    if expected_version is not None and trip.version != expected_version:
        raise ConcurrencyConflict(
            "Trip was modified by another session. Reload and try again.",
            details={"current_version": trip.version}
        )


def ensure_editable(trip: Trip) -> None:
    """Signed trips are closed for changes."""
    if trip.signature_confirmed:
        raise ValidationFailed("Trip was already signed and can no longer be changed.")


def touch(trip: Trip) -> None:
    """Mark the trip row dirty so child changes bump its version."""
    trip.updated_at = datetime.utcnow()


def next_monthly_trip_number(driver_id: int, start_date: date, db: Session) -> int:
    """Number of the driver's trips starting in the same month, plus one."""
    count = db.query(func.count(Trip.id)).filter(
        Trip.driver_id == driver_id,
        extract("year", Trip.start_date) == start_date.year,
        extract("month", Trip.start_date) == start_date.month
    ).scalar() or 0
    return count + 1


def create_trip(data, account: AccountInfo, db: Session) -> Trip:
    """Create a trip. Drivers can only create trips for themselves."""
    if account.role == "driver" and data.driver_id != account.user_id:
        raise PermissionDenied("Drivers can only create their own trips")

    driver = db.query(Driver).filter(Driver.id == data.driver_id).first()
    if not driver:
        raise NotFound("Driver not found")
    if driver.status != RecordStatus.ACTIVE:
        raise ValidationFailed("Driver is inactive")
    vehicle = db.query(Vehicle).filter(Vehicle.id == data.vehicle_id).first()
    if not vehicle:
        raise NotFound("Vehicle not found")
    if vehicle.status != RecordStatus.ACTIVE:
        raise ValidationFailed("Vehicle is inactive")

    with write_transaction(db, "create trip"):
        trip = Trip(
            driver_id=data.driver_id,
            vehicle_id=data.vehicle_id,
            origin=data.origin,
            destination=data.destination,
            start_date=data.start_date,
            start_km=data.start_km,
            end_km=0,
            driver_commission_rate=data.driver_commission_rate,
            # Saving the form starts the trip
            status=TripStatus.IN_PROGRESS,
            monthly_trip_number=next_monthly_trip_number(data.driver_id, data.start_date, db),
        )
        db.add(trip)
    db.refresh(trip)
    logger.info(f"Trip {trip.id} created for driver {driver.name} ({trip.origin} -> {trip.destination})")
    return trip


def finish_trip(trip: Trip, end_km: Decimal, db: Session, expected_version: Optional[int] = None) -> Trip:
    """Close a trip with its final odometer reading."""
    check_version(trip, expected_version)
    ensure_editable(trip)
    if trip.status == TripStatus.COMPLETED:
        raise ValidationFailed("Trip is already finished")
    if _d(end_km) <= _d(trip.start_km):
        raise ValidationFailed("Final odometer reading must be greater than the initial one.")

    with write_transaction(db, "finish trip"):
        trip.end_km = end_km
        trip.end_date = date.today()
        trip.status = TripStatus.COMPLETED
    db.refresh(trip)
    logger.info(f"Trip {trip.id} finished at {trip.end_km} km")
    return trip


def sign_trip(trip: Trip, account: AccountInfo, db: Session) -> Trip:
    """The trip's driver confirms the settlement of a finished trip."""
    if account.role != "driver" or trip.driver_id != account.user_id:
        raise PermissionDenied("Only the trip's driver can sign the settlement")
    if trip.status != TripStatus.COMPLETED:
        raise ValidationFailed("Only finished trips can be signed")
    ensure_editable(trip)

    with write_transaction(db, "sign trip"):
        trip.signature_confirmed = True
        trip.signature_date = datetime.utcnow()
    db.refresh(trip)
    logger.info(f"Trip {trip.id} signed by driver {trip.driver_id}")
    return trip


def add_entry(trip: Trip, collection: str, entry, db: Session, expected_version: Optional[int] = None):
    """Append a cargo, fueling, expense or received payment entry to a trip."""
    check_version(trip, expected_version)
    ensure_editable(trip)
    with write_transaction(db, f"add {collection} entry"):
        getattr(trip, collection).append(entry)
        touch(trip)
    db.refresh(trip)
    return trip


def remove_entry(trip: Trip, collection: str, entry_id: int, db: Session, expected_version: Optional[int] = None):
    """Remove one entry from a trip's child collection."""
    check_version(trip, expected_version)
    ensure_editable(trip)
    items = getattr(trip, collection)
    entry = next((item for item in items if item.id == entry_id), None)
    if entry is None:
        raise NotFound("Entry not found")
    with write_transaction(db, f"remove {collection} entry"):
        items.remove(entry)
        touch(trip)
    db.refresh(trip)
    return trip


def update_trip(trip: Trip, data, db: Session) -> Trip:
    """Partial update of a trip's header fields."""
    check_version(trip, data.version)
    ensure_editable(trip)
    updates = data.model_dump(exclude_unset=True, exclude={"version"})

    if "driver_id" in updates and not db.query(Driver).filter(Driver.id == updates["driver_id"]).first():
        raise NotFound("Driver not found")
    if "vehicle_id" in updates and not db.query(Vehicle).filter(Vehicle.id == updates["vehicle_id"]).first():
        raise NotFound("Vehicle not found")
    start_km = _d(updates.get("start_km", trip.start_km))
    end_km = _d(updates.get("end_km", trip.end_km))
    odometer_changed = "start_km" in updates or "end_km" in updates
    if odometer_changed and (trip.status == TripStatus.COMPLETED or end_km > 0) and end_km <= start_km:
        raise ValidationFailed("Final odometer reading must be greater than the initial one.")

    with write_transaction(db, "update trip"):
        for field, value in updates.items():
            setattr(trip, field, value)
        touch(trip)
    db.refresh(trip)
    return trip


def list_trips(
    account: AccountInfo,
    db: Session,
    driver_id: Optional[int] = None,
    vehicle_id: Optional[int] = None,
    status: Optional[TripStatus] = None
):
    """Trips newest first. Drivers only ever get their own."""
    query = db.query(Trip)
    if account.role == "driver":
        query = query.filter(Trip.driver_id == account.user_id)
    elif driver_id is not None:
        query = query.filter(Trip.driver_id == driver_id)
    if vehicle_id is not None:
        query = query.filter(Trip.vehicle_id == vehicle_id)
    if status is not None:
        query = query.filter(Trip.status == status)
    return query.order_by(Trip.start_date.desc(), Trip.id.desc()).all()


def delete_trip(trip: Trip, db: Session, expected_version: Optional[int] = None) -> None:
    """Delete a trip with all its entries."""
    check_version(trip, expected_version)
    trip_id = trip.id
    with write_transaction(db, "delete trip"):
        db.delete(trip)
    logger.info(f"Trip {trip_id} deleted")
