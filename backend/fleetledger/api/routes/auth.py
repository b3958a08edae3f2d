"""
Authentication routes for fleet accounts and finance users.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from fleetledger.api.dependencies import get_current_account, get_fleet_account
from fleetledger.core.exceptions import AuthenticationFailed
from fleetledger.core.security import decode_access_token
from fleetledger.db.session import get_db
from fleetledger.schemas.user import AccountInfo, LoginRequest, PasswordChange, Token
from fleetledger.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=Token)
async def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Fleet login for administrators and drivers."""
    return auth_service.login(credentials.username, credentials.password, db)


@router.post("/finance/login", response_model=Token)
async def finance_login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Back-office login."""
    return auth_service.finance_login(credentials.username, credentials.password, db)


@router.post("/logout")
async def logout(token: str):
    """Logout (client-side token removal)."""
    if not decode_access_token(token):
        raise AuthenticationFailed("Invalid token")
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=AccountInfo)
async def me(account: AccountInfo = Depends(get_current_account)):
    """Get the logged-in account."""
    return account


@router.post("/change-password")
async def change_password(
    data: PasswordChange,
    account: AccountInfo = Depends(get_fleet_account),
    db: Session = Depends(get_db)
):
    """Change your own password, or reset another account's as an administrator."""
    auth_service.change_password(
        account, data.user_type, data.user_id, data.new_password, db, old_password=data.old_password
    )
    return {"message": "Password changed successfully"}
