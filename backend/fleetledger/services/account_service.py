"""
Administrator and driver registry.
"""
import logging
from typing import List, Type, Union
from sqlalchemy.orm import Session
from fleetledger.core.exceptions import NotFound, ValidationFailed
from fleetledger.db.session import write_transaction
from fleetledger.models.account import Admin, Driver
from fleetledger.models.trip import Trip
from fleetledger.services.auth_service import set_password, validate_new_password

logger = logging.getLogger(__name__)

FleetAccount = Union[Admin, Driver]


def get_account(model: Type[FleetAccount], account_id: int, db: Session) -> FleetAccount:
    account = db.query(model).filter(model.id == account_id).first()
    if not account:
        raise NotFound(f"{model.__name__} not found")
    return account


def list_accounts(model: Type[FleetAccount], db: Session) -> List[FleetAccount]:
    return db.query(model).order_by(model.name).all()


def _ensure_unique_name(name: str, db: Session, exclude: FleetAccount = None) -> None:
    # Admin and driver names share the login namespace
    for model in (Admin, Driver):
        existing = db.query(model).filter(model.name == name).first()
        if existing and existing is not exclude:
            raise ValidationFailed(f"Name {name} is already in use")


def create_admin(data, db: Session) -> Admin:
    validate_new_password(data.password)
    _ensure_unique_name(data.name, db)
    with write_transaction(db, "create admin"):
        admin = Admin(name=data.name)
        set_password(admin, data.password)
        db.add(admin)
    db.refresh(admin)
    logger.info(f"Admin {admin.name} created")
    return admin


def create_driver(data, db: Session) -> Driver:
    validate_new_password(data.password)
    _ensure_unique_name(data.name, db)
    with write_transaction(db, "create driver"):
        driver = Driver(name=data.name, cnh=data.cnh, phone=data.phone)
        set_password(driver, data.password)
        db.add(driver)
    db.refresh(driver)
    logger.info(f"Driver {driver.name} created")
    return driver


def update_account(account: FleetAccount, data, db: Session) -> FleetAccount:
    """Partial update of an admin or driver."""
    updates = data.model_dump(exclude_unset=True)
    if "name" in updates and updates["name"] != account.name:
        _ensure_unique_name(updates["name"], db, exclude=account)
    with write_transaction(db, f"update {type(account).__name__.lower()}"):
        for field, value in updates.items():
            setattr(account, field, value)
    db.refresh(account)
    return account


def delete_account(account: FleetAccount, db: Session) -> None:
    """Delete an account. Drivers with trips must be deactivated instead."""
    if isinstance(account, Driver):
        if db.query(Trip).filter(Trip.driver_id == account.id).first():
            raise ValidationFailed("Driver has trips and cannot be deleted. Deactivate it instead.")
    elif db.query(Admin).count() <= 1:
        raise ValidationFailed("The last administrator cannot be deleted.")
    name = account.name
    with write_transaction(db, f"delete {type(account).__name__.lower()}"):
        db.delete(account)
    logger.info(f"{type(account).__name__} {name} deleted")
