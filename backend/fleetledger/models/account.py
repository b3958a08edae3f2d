"""
Fleet account models: administrators and drivers.
"""
from sqlalchemy import Column, String, Enum as SQLEnum
from sqlalchemy.orm import relationship
from fleetledger.db.base import BaseModel
import enum


class RecordStatus(str, enum.Enum):
    """Activation status shared by drivers and vehicles."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class PasswordMixin:
    """
    Password columns.
    Accounts migrated from the old system keep a salted SHA-256 digest until
    their next successful login, when it is replaced by a bcrypt hash.
    """
    hashed_password = Column(String(255), nullable=True)
    legacy_salt = Column(String(64), nullable=True)
    legacy_password_hash = Column(String(64), nullable=True)


class Admin(PasswordMixin, BaseModel):
    """Administrator with full access to the fleet."""
    __tablename__ = "admins"

    name = Column(String(100), unique=True, nullable=False, index=True)  # Stored upper-case


class Driver(PasswordMixin, BaseModel):
    """Truck driver. Drivers log in and only see their own trips."""
    __tablename__ = "drivers"

    name = Column(String(100), unique=True, nullable=False, index=True)  # Stored upper-case
    cnh = Column(String(30), nullable=False)  # Driver's license number
    phone = Column(String(30), nullable=False)
    status = Column(SQLEnum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False)

    # Relationships
    trips = relationship("Trip", back_populates="driver")
