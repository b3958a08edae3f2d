"""
FastAPI dependencies for authentication and role checks.
"""
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from fleetledger.core.exceptions import AuthenticationFailed, PermissionDenied
from fleetledger.core.security import decode_access_token
from fleetledger.db.session import get_db
from fleetledger.models.account import Admin, Driver, RecordStatus
from fleetledger.models.finance import SystemUser
from fleetledger.schemas.user import AccountInfo

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_account(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> AccountInfo:
    """Resolve the bearer token to the logged-in account."""
    if credentials is None:
        raise AuthenticationFailed("Not authenticated")
    payload = decode_access_token(credentials.credentials)
    if not payload or "user_id" not in payload or "role" not in payload:
        raise AuthenticationFailed("Invalid or expired token")

    role = payload["role"]
    user_id = payload["user_id"]
    if role == "admin":
        admin = db.query(Admin).filter(Admin.id == user_id).first()
        if not admin:
            raise AuthenticationFailed("Account no longer exists")
        return AccountInfo(name=f"{admin.name} (Admin)", role="admin", user_id=admin.id)
    if role == "driver":
        driver = db.query(Driver).filter(Driver.id == user_id).first()
        if not driver:
            raise AuthenticationFailed("Account no longer exists")
        if driver.status != RecordStatus.ACTIVE:
            raise PermissionDenied("Driver account is inactive")
        return AccountInfo(name=driver.name, role="driver", user_id=driver.id, driver_id=driver.id)
    if role == "finance":
        user = db.query(SystemUser).filter(SystemUser.id == user_id).first()
        if not user:
            raise AuthenticationFailed("Account no longer exists")
        return AccountInfo(name=user.name, role="finance", user_id=user.id)
    raise AuthenticationFailed("Invalid or expired token")


def get_fleet_account(account: AccountInfo = Depends(get_current_account)) -> AccountInfo:
    """Any fleet account (admin or driver)."""
    if account.role not in ("admin", "driver"):
        raise PermissionDenied("Fleet account required")
    return account


def require_admin(account: AccountInfo = Depends(get_current_account)) -> AccountInfo:
    if account.role != "admin":
        raise PermissionDenied("Administrator access required")
    return account


def get_current_driver(
    account: AccountInfo = Depends(get_current_account),
    db: Session = Depends(get_db)
) -> Driver:
    if account.role != "driver":
        raise PermissionDenied("Driver access required")
    return db.query(Driver).filter(Driver.id == account.user_id).first()


def get_finance_user(account: AccountInfo = Depends(get_current_account)) -> AccountInfo:
    if account.role != "finance":
        raise PermissionDenied("Finance access required")
    return account
