"""
Vehicle management routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
from fleetledger.api.dependencies import get_fleet_account, require_admin
from fleetledger.db.session import get_db
from fleetledger.models.account import RecordStatus
from fleetledger.schemas.user import AccountInfo
from fleetledger.schemas.vehicle import VehicleCreate, VehicleResponse, VehicleUpdate
from fleetledger.services import vehicle_service

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


@router.get("", response_model=List[VehicleResponse])
async def list_vehicles(
    status: Optional[RecordStatus] = None,
    account: AccountInfo = Depends(get_fleet_account),
    db: Session = Depends(get_db)
):
    """List vehicles. Drivers need the list to start a trip."""
    return vehicle_service.list_vehicles(db, status)


@router.get("/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(vehicle_id: int, account: AccountInfo = Depends(get_fleet_account), db: Session = Depends(get_db)):
    """Get vehicle by ID."""
    return vehicle_service.get_vehicle(vehicle_id, db)


@router.post("", response_model=VehicleResponse, status_code=201)
async def create_vehicle(data: VehicleCreate, admin: AccountInfo = Depends(require_admin), db: Session = Depends(get_db)):
    """Register a vehicle."""
    return vehicle_service.create_vehicle(data, db)


@router.put("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_id: int,
    data: VehicleUpdate,
    admin: AccountInfo = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Update vehicle data or status."""
    vehicle = vehicle_service.get_vehicle(vehicle_id, db)
    return vehicle_service.update_vehicle(vehicle, data, db)


@router.delete("/{vehicle_id}", status_code=204)
async def delete_vehicle(vehicle_id: int, admin: AccountInfo = Depends(require_admin), db: Session = Depends(get_db)):
    """Delete a vehicle without trips."""
    vehicle_service.delete_vehicle(vehicle_service.get_vehicle(vehicle_id, db), db)
