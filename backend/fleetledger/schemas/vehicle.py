"""
Pydantic schemas for Vehicle entity.
"""
from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime
from fleetledger.models.account import RecordStatus


class VehicleBase(BaseModel):
    """Base vehicle schema."""
    plate: str
    model: str
    chassi: str

    @field_validator("plate")
    @classmethod
    def normalize_plate(cls, v: str) -> str:
        return v.strip().upper()


class VehicleCreate(VehicleBase):
    """Schema for vehicle creation."""
    pass


class VehicleUpdate(BaseModel):
    """Schema for vehicle update."""
    plate: Optional[str] = None
    model: Optional[str] = None
    chassi: Optional[str] = None
    status: Optional[RecordStatus] = None

    @field_validator("plate")
    @classmethod
    def normalize_plate(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v is not None else v


class VehicleResponse(VehicleBase):
    """Schema for vehicle response."""
    id: int
    status: RecordStatus
    created_at: datetime

    class Config:
        from_attributes = True
