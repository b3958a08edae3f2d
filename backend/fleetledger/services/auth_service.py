"""
Authentication service for fleet accounts and finance users.
"""
import logging
from typing import Optional, Union
from sqlalchemy.orm import Session
from fleetledger.core.config import settings
from fleetledger.core.exceptions import AuthenticationFailed, NotFound, PermissionDenied, ValidationFailed
from fleetledger.core.security import (
    create_access_token, get_password_hash, verify_legacy_password, verify_password
)
from fleetledger.db.session import write_transaction
from fleetledger.models.account import Admin, Driver, RecordStatus
from fleetledger.models.finance import SystemUser
from fleetledger.schemas.user import AccountInfo, Token

logger = logging.getLogger(__name__)


def validate_new_password(password: str) -> None:
    """Reject passwords shorter than the configured minimum."""
    if not password or len(password) < settings.MIN_PASSWORD_LENGTH:
        raise ValidationFailed(
            f"Password must have at least {settings.MIN_PASSWORD_LENGTH} characters."
        )


def set_password(account, password: str) -> None:
    """Store a bcrypt hash and drop any legacy credentials."""
    account.hashed_password = get_password_hash(password)
    if hasattr(account, "legacy_salt"):
        account.legacy_salt = None
        account.legacy_password_hash = None


def check_password(account: Union[Admin, Driver], password: str, db: Session) -> bool:
    """
    Verify a fleet account password.
    Accounts still holding a legacy salt/hash pair are upgraded to bcrypt
    on the first successful check.
    """
    if account.hashed_password:
        return verify_password(password, account.hashed_password)
    if verify_legacy_password(password, account.legacy_salt, account.legacy_password_hash):
        with write_transaction(db, "upgrade password hash"):
            set_password(account, password)
        logger.info(f"Upgraded legacy password hash of {account.name}")
        return True
    return False


def account_info(account: Union[Admin, Driver]) -> AccountInfo:
    """Session payload of a fleet account."""
    if isinstance(account, Admin):
        return AccountInfo(name=f"{account.name} (Admin)", role="admin", user_id=account.id)
    return AccountInfo(name=account.name, role="driver", user_id=account.id, driver_id=account.id)


def issue_token(info: AccountInfo) -> Token:
    access_token = create_access_token(
        data={"sub": info.name, "user_id": info.user_id, "role": info.role}
    )
    return Token(access_token=access_token, user=info)


def login(username: str, password: str, db: Session) -> Token:
    """
    Fleet login. Names are matched upper-case; administrators are checked
    before drivers, and inactive drivers are refused.
    """
    name = (username or "").strip().upper()
    if not name or not password:
        raise ValidationFailed("Username and password are required.")

    admin = db.query(Admin).filter(Admin.name == name).first()
    if admin and check_password(admin, password, db):
        logger.info(f"Admin {admin.name} logged in")
        return issue_token(account_info(admin))

    driver = db.query(Driver).filter(Driver.name == name).first()
    if driver and check_password(driver, password, db):
        if driver.status != RecordStatus.ACTIVE:
            raise PermissionDenied("Driver account is inactive")
        logger.info(f"Driver {driver.name} logged in")
        return issue_token(account_info(driver))

    logger.info(f"Failed login attempt for {name}")
    raise AuthenticationFailed("Incorrect username or password")


def _load_fleet_account(user_type: str, user_id: int, db: Session) -> Union[Admin, Driver]:
    model = Admin if user_type == "admin" else Driver
    account = db.query(model).filter(model.id == user_id).first()
    if not account:
        raise NotFound("User not found")
    return account


def change_password(
    current: AccountInfo,
    user_type: str,
    user_id: int,
    new_password: str,
    db: Session,
    old_password: Optional[str] = None
) -> None:
    """
    With old_password the account changes its own password, which must match.
    Without it only an administrator may reset someone's password.
    """
    account = _load_fleet_account(user_type, user_id, db)
    if old_password is not None:
        if current.role != user_type or current.user_id != user_id:
            raise PermissionDenied("You can only change your own password")
        if not check_password(account, old_password, db):
            raise AuthenticationFailed("Current password is incorrect")
    elif current.role != "admin":
        raise PermissionDenied("Only administrators can reset passwords")

    validate_new_password(new_password)
    with write_transaction(db, "change password"):
        set_password(account, new_password)
    logger.info(f"Password changed for {user_type} {account.name}")


def finance_login(username: str, password: str, db: Session) -> Token:
    """Back-office login by name."""
    name = (username or "").strip()
    if not name or not password:
        raise ValidationFailed("Username and password are required.")
    user = db.query(SystemUser).filter(SystemUser.name == name).first()
    if not user or not verify_password(password, user.hashed_password):
        logger.info(f"Failed finance login attempt for {name}")
        raise AuthenticationFailed("Incorrect username or password")
    logger.info(f"Finance user {user.name} logged in")
    return issue_token(AccountInfo(name=user.name, role="finance", user_id=user.id))
