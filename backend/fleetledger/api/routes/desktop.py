"""
Finance desktop routes: the logged-in user's window layout.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from fleetledger.api.dependencies import get_finance_user
from fleetledger.db.session import get_db
from fleetledger.schemas.desktop import DesktopResponse, WindowMove, WindowOpen
from fleetledger.schemas.user import AccountInfo
from fleetledger.services import desktop_service

router = APIRouter(prefix="/finance/desktop", tags=["desktop"])


@router.get("", response_model=DesktopResponse)
async def get_desktop(user: AccountInfo = Depends(get_finance_user), db: Session = Depends(get_db)):
    """Open windows of the logged-in user."""
    return desktop_service.load(user.user_id, db).to_response()


@router.post("/windows", response_model=DesktopResponse)
async def open_window(data: WindowOpen, user: AccountInfo = Depends(get_finance_user), db: Session = Depends(get_db)):
    """Open an app window, or focus it when already open."""
    manager = desktop_service.load(user.user_id, db)
    manager.open(data.app)
    desktop_service.save(user.user_id, manager, db)
    return manager.to_response()


@router.post("/windows/{window_id}/focus", response_model=DesktopResponse)
async def focus_window(window_id: str, user: AccountInfo = Depends(get_finance_user), db: Session = Depends(get_db)):
    """Bring a window to the front."""
    manager = desktop_service.load(user.user_id, db)
    manager.focus(window_id)
    desktop_service.save(user.user_id, manager, db)
    return manager.to_response()


@router.post("/windows/{window_id}/maximize", response_model=DesktopResponse)
async def toggle_maximize(window_id: str, user: AccountInfo = Depends(get_finance_user), db: Session = Depends(get_db)):
    """Maximize or restore a window."""
    manager = desktop_service.load(user.user_id, db)
    manager.toggle_maximize(window_id)
    desktop_service.save(user.user_id, manager, db)
    return manager.to_response()


@router.put("/windows/{window_id}/position", response_model=DesktopResponse)
async def move_window(
    window_id: str,
    data: WindowMove,
    user: AccountInfo = Depends(get_finance_user),
    db: Session = Depends(get_db)
):
    """Drag a window to a new position."""
    manager = desktop_service.load(user.user_id, db)
    manager.move(window_id, data.x, data.y)
    desktop_service.save(user.user_id, manager, db)
    return manager.to_response()


@router.delete("/windows/{window_id}", response_model=DesktopResponse)
async def close_window(window_id: str, user: AccountInfo = Depends(get_finance_user), db: Session = Depends(get_db)):
    """Close a window."""
    manager = desktop_service.load(user.user_id, db)
    manager.close(window_id)
    desktop_service.save(user.user_id, manager, db)
    return manager.to_response()
