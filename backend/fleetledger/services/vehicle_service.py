"""
Vehicle registry.
"""
import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from fleetledger.core.exceptions import NotFound, ValidationFailed
from fleetledger.db.session import write_transaction
from fleetledger.models.account import RecordStatus
from fleetledger.models.trip import Trip
from fleetledger.models.vehicle import Vehicle

logger = logging.getLogger(__name__)


def get_vehicle(vehicle_id: int, db: Session) -> Vehicle:
    vehicle = db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()
    if not vehicle:
        raise NotFound("Vehicle not found")
    return vehicle


def list_vehicles(db: Session, status: Optional[RecordStatus] = None) -> List[Vehicle]:
    query = db.query(Vehicle)
    if status is not None:
        query = query.filter(Vehicle.status == status)
    return query.order_by(Vehicle.plate).all()


def _ensure_unique_plate(plate: str, db: Session, exclude: Vehicle = None) -> None:
    existing = db.query(Vehicle).filter(Vehicle.plate == plate).first()
    if existing and existing is not exclude:
        raise ValidationFailed(f"Plate {plate} is already registered")


def create_vehicle(data, db: Session) -> Vehicle:
    _ensure_unique_plate(data.plate, db)
    with write_transaction(db, "create vehicle"):
        vehicle = Vehicle(plate=data.plate, model=data.model, chassi=data.chassi)
        db.add(vehicle)
    db.refresh(vehicle)
    logger.info(f"Vehicle {vehicle.plate} created")
    return vehicle


def update_vehicle(vehicle: Vehicle, data, db: Session) -> Vehicle:
    updates = data.model_dump(exclude_unset=True)
    if "plate" in updates and updates["plate"] != vehicle.plate:
        _ensure_unique_plate(updates["plate"], db, exclude=vehicle)
    with write_transaction(db, "update vehicle"):
        for field, value in updates.items():
            setattr(vehicle, field, value)
    db.refresh(vehicle)
    return vehicle


def delete_vehicle(vehicle: Vehicle, db: Session) -> None:
    """Delete a vehicle and its expenses. Vehicles with trips must be deactivated instead."""
    if db.query(Trip).filter(Trip.vehicle_id == vehicle.id).first():
        raise ValidationFailed("Vehicle has trips and cannot be deleted. Deactivate it instead.")
    plate = vehicle.plate
    with write_transaction(db, "delete vehicle"):
        db.delete(vehicle)
    logger.info(f"Vehicle {plate} deleted")
