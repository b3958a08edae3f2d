"""
Vehicle model.
"""
from sqlalchemy import Column, String, Enum as SQLEnum
from sqlalchemy.orm import relationship
from fleetledger.db.base import BaseModel
from fleetledger.models.account import RecordStatus


class Vehicle(BaseModel):
    """Truck registered in the fleet."""
    __tablename__ = "vehicles"

    plate = Column(String(20), unique=True, nullable=False, index=True)
    model = Column(String(100), nullable=False)
    chassi = Column(String(50), nullable=False)
    status = Column(SQLEnum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False)

    # Relationships
    trips = relationship("Trip", back_populates="vehicle")
    fixed_expenses = relationship("FixedExpense", back_populates="vehicle", cascade="all, delete-orphan")
    workshop_expenses = relationship("WorkshopExpense", back_populates="vehicle", cascade="all, delete-orphan")
