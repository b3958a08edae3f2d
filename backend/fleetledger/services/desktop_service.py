"""
Window manager of the finance desktop.

The desktop is a registry of open windows kept bottom to top; the last one
has focus and z-index is 10 plus the position in that order. Each app opens
at most one window, whose id is the app id.
"""
import logging
from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from fleetledger.core.exceptions import NotFound, ValidationFailed
from fleetledger.db.session import write_transaction
from fleetledger.models.desktop import DesktopLayout
from fleetledger.schemas.desktop import DesktopResponse, WindowState

logger = logging.getLogger(__name__)

APPS: Dict[str, str] = {
    "dashboard": "Dashboard",
    "payables": "Contas a Pagar",
    "cash_flow": "Fluxo de Caixa",
    "invoiced_revenue": "Faturamento c/ NF",
    "non_invoiced_revenue": "Faturamento s/ NF",
    "users": "Gerenciar Usuários",
    "personalization": "Personalização",
}

BASE_Z_INDEX = 10
CASCADE_ORIGIN = (150, 100)
CASCADE_STEP = 30


class WindowManager:
    """State machine over the open windows: open, close, focus, maximize, move."""

    def __init__(self, windows: Optional[List[dict]] = None):
        self.windows: List[dict] = [dict(w) for w in (windows or [])]
        self._restack()

    def _restack(self) -> None:
        for index, window in enumerate(self.windows):
            window["z_index"] = BASE_Z_INDEX + index

    def _index(self, window_id: str) -> int:
        for index, window in enumerate(self.windows):
            if window["id"] == window_id:
                return index
        raise NotFound(f"Window '{window_id}' is not open")

    @property
    def focused(self) -> Optional[str]:
        return self.windows[-1]["id"] if self.windows else None

    def get(self, window_id: str) -> dict:
        return self.windows[self._index(window_id)]

    def open(self, app: str) -> dict:
        """Open an app's window, or focus it when it is already open."""
        if app not in APPS:
            raise ValidationFailed(f"Unknown app '{app}'")
        if any(w["id"] == app for w in self.windows):
            return self.focus(app)
        offset = CASCADE_STEP * len(self.windows)
        self.windows.append({
            "id": app,
            "title": APPS[app],
            "x": CASCADE_ORIGIN[0] + offset,
            "y": CASCADE_ORIGIN[1] + offset,
            "z_index": 0,
            "maximized": False,
            "restore_x": None,
            "restore_y": None,
        })
        self._restack()
        return self.windows[-1]

    def close(self, window_id: str) -> None:
        del self.windows[self._index(window_id)]
        self._restack()

    def focus(self, window_id: str) -> dict:
        """Bring a window to the top of the stack."""
        window = self.windows.pop(self._index(window_id))
        self.windows.append(window)
        self._restack()
        return window

    def toggle_maximize(self, window_id: str) -> dict:
        """Maximize saving the position, or restore it."""
        window = self.focus(window_id)
        if window["maximized"]:
            window["x"] = window["restore_x"] if window["restore_x"] is not None else window["x"]
            window["y"] = window["restore_y"] if window["restore_y"] is not None else window["y"]
            window["restore_x"] = window["restore_y"] = None
            window["maximized"] = False
        else:
            window["restore_x"], window["restore_y"] = window["x"], window["y"]
            window["x"] = window["y"] = 0
            window["maximized"] = True
        return window

    def move(self, window_id: str, x: int, y: int) -> dict:
        """Drag a window. Maximized windows stay put; coordinates never go negative."""
        window = self.focus(window_id)
        if not window["maximized"]:
            window["x"] = max(0, int(x))
            window["y"] = max(0, int(y))
        return window

    def to_list(self) -> List[dict]:
        return [dict(w) for w in self.windows]

    def to_response(self) -> DesktopResponse:
        return DesktopResponse(
            windows=[WindowState(**w) for w in self.windows],
            focused=self.focused,
        )


def load(user_id: int, db: Session) -> WindowManager:
    layout = db.query(DesktopLayout).filter(DesktopLayout.user_id == user_id).first()
    return WindowManager(layout.windows if layout else [])


def save(user_id: int, manager: WindowManager, db: Session) -> None:
    """Persist the window registry of a finance user."""
    with write_transaction(db, "save desktop layout"):
        layout = db.query(DesktopLayout).filter(DesktopLayout.user_id == user_id).first()
        if layout is None:
            layout = DesktopLayout(user_id=user_id, windows=[])
            db.add(layout)
        # Assign a new list so the JSON column is flagged as changed
        layout.windows = manager.to_list()
    logger.debug(f"Desktop layout of user {user_id} saved with {len(manager.windows)} windows")
