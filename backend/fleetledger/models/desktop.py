"""
Desktop layout model for the finance back-office window manager.
"""
from sqlalchemy import Column, ForeignKey, Integer, JSON
from sqlalchemy.orm import relationship
from fleetledger.db.base import BaseModel


class DesktopLayout(BaseModel):
    """Open windows of one finance user, stored as the window registry."""
    __tablename__ = "desktop_layouts"

    user_id = Column(Integer, ForeignKey("usuarios_sistema.id"), nullable=False, unique=True, index=True)
    windows = Column(JSON, nullable=False, default=list)  # Ordered bottom to top

    # Relationships
    user = relationship("SystemUser", back_populates="desktop_layout")
