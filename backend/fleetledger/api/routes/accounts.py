"""
Administrator and driver management routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from fleetledger.api.dependencies import get_current_driver, require_admin
from fleetledger.db.session import get_db
from fleetledger.models.account import Admin, Driver
from fleetledger.schemas.report import DriverDashboard
from fleetledger.schemas.user import (
    AccountInfo, AdminCreate, AdminResponse, AdminUpdate, DriverCreate, DriverResponse, DriverUpdate
)
from fleetledger.services import account_service, analysis_service

admins_router = APIRouter(prefix="/admins", tags=["admins"])
drivers_router = APIRouter(prefix="/drivers", tags=["drivers"])


@admins_router.get("", response_model=List[AdminResponse])
async def list_admins(admin: AccountInfo = Depends(require_admin), db: Session = Depends(get_db)):
    """List administrators."""
    return account_service.list_accounts(Admin, db)


@admins_router.post("", response_model=AdminResponse, status_code=status.HTTP_201_CREATED)
async def create_admin(data: AdminCreate, admin: AccountInfo = Depends(require_admin), db: Session = Depends(get_db)):
    """Create an administrator."""
    return account_service.create_admin(data, db)


@admins_router.put("/{admin_id}", response_model=AdminResponse)
async def update_admin(
    admin_id: int,
    data: AdminUpdate,
    admin: AccountInfo = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Rename an administrator."""
    account = account_service.get_account(Admin, admin_id, db)
    return account_service.update_account(account, data, db)


@admins_router.delete("/{admin_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_admin(admin_id: int, admin: AccountInfo = Depends(require_admin), db: Session = Depends(get_db)):
    """Delete an administrator."""
    account_service.delete_account(account_service.get_account(Admin, admin_id, db), db)


@drivers_router.get("", response_model=List[DriverResponse])
async def list_drivers(admin: AccountInfo = Depends(require_admin), db: Session = Depends(get_db)):
    """List drivers."""
    return account_service.list_accounts(Driver, db)


@drivers_router.get("/me/dashboard", response_model=DriverDashboard)
async def my_dashboard(driver: Driver = Depends(get_current_driver), db: Session = Depends(get_db)):
    """Trip counters of the logged-in driver."""
    return analysis_service.driver_dashboard(driver, db)


@drivers_router.get("/{driver_id}", response_model=DriverResponse)
async def get_driver(driver_id: int, admin: AccountInfo = Depends(require_admin), db: Session = Depends(get_db)):
    """Get driver by ID."""
    return account_service.get_account(Driver, driver_id, db)


@drivers_router.post("", response_model=DriverResponse, status_code=status.HTTP_201_CREATED)
async def create_driver(data: DriverCreate, admin: AccountInfo = Depends(require_admin), db: Session = Depends(get_db)):
    """Register a driver."""
    return account_service.create_driver(data, db)


@drivers_router.put("/{driver_id}", response_model=DriverResponse)
async def update_driver(
    driver_id: int,
    data: DriverUpdate,
    admin: AccountInfo = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Update driver data or status."""
    driver = account_service.get_account(Driver, driver_id, db)
    return account_service.update_account(driver, data, db)


@drivers_router.delete("/{driver_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_driver(driver_id: int, admin: AccountInfo = Depends(require_admin), db: Session = Depends(get_db)):
    """Delete a driver without trips."""
    account_service.delete_account(account_service.get_account(Driver, driver_id, db), db)
