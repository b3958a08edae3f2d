"""
Pydantic schemas for the finance desktop window manager.
"""
from pydantic import BaseModel, Field
from typing import List, Optional


class WindowState(BaseModel):
    """One open window of the desktop."""
    id: str
    title: str
    x: int = Field(ge=0)
    y: int = Field(ge=0)
    z_index: int
    maximized: bool = False
    restore_x: Optional[int] = None  # Position saved while maximized
    restore_y: Optional[int] = None


class DesktopResponse(BaseModel):
    """Open windows, bottom to top. The last one has focus."""
    windows: List[WindowState]
    focused: Optional[str] = None


class WindowOpen(BaseModel):
    app: str


class WindowMove(BaseModel):
    x: int
    y: int
