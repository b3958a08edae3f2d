"""
Pydantic schemas for Trip entity and its line items.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date as dt_date, datetime
from decimal import Decimal
from fleetledger.models.trip import TripStatus, TripExpenseCategory, PaymentMethod, ReceivedPaymentType
from fleetledger.schemas.report import TripSummary


class CargoCreate(BaseModel):
    """Cargo lot added to a trip."""
    type: str
    weight: Decimal = Field(gt=0)  # Tons
    price_per_ton: Decimal = Field(gt=0)
    tax: Decimal = Field(default=Decimal(0), ge=0)
    version: Optional[int] = None  # Trip version the client last read


class CargoResponse(BaseModel):
    id: int
    type: str
    weight: Decimal
    price_per_ton: Decimal
    tax: Decimal

    class Config:
        from_attributes = True


class FuelingCreate(BaseModel):
    """Fuel purchase added to a trip."""
    station: str
    date: Optional[dt_date] = None  # Defaults to today
    km: Decimal = Field(default=Decimal(0), ge=0)
    liters: Decimal = Field(gt=0)
    total_amount: Decimal = Field(gt=0)
    payment_method: PaymentMethod = PaymentMethod.CASH
    version: Optional[int] = None


class FuelingResponse(BaseModel):
    id: int
    station: str
    date: dt_date
    km: Decimal
    liters: Decimal
    total_amount: Decimal
    payment_method: PaymentMethod

    class Config:
        from_attributes = True


class TripExpenseCreate(BaseModel):
    """Road expense added to a trip."""
    category: TripExpenseCategory = TripExpenseCategory.OTHER
    description: str = Field(min_length=1)
    amount: Decimal = Field(gt=0)
    date: Optional[dt_date] = None
    version: Optional[int] = None


class TripExpenseResponse(BaseModel):
    id: int
    category: TripExpenseCategory
    description: str
    amount: Decimal
    date: dt_date

    class Config:
        from_attributes = True


class ReceivedPaymentCreate(BaseModel):
    """Payment received from the freight customer."""
    type: ReceivedPaymentType = ReceivedPaymentType.OTHER
    method: PaymentMethod = PaymentMethod.PIX
    amount: Decimal = Field(gt=0)
    date: Optional[dt_date] = None
    version: Optional[int] = None


class ReceivedPaymentResponse(BaseModel):
    id: int
    type: ReceivedPaymentType
    method: PaymentMethod
    amount: Decimal
    date: dt_date

    class Config:
        from_attributes = True


class TripBase(BaseModel):
    """Base trip schema."""
    driver_id: int
    vehicle_id: int
    origin: str
    destination: str
    start_date: dt_date
    start_km: Decimal = Field(ge=0)
    driver_commission_rate: Decimal = Field(default=Decimal(0), ge=0, le=100)


class TripCreate(TripBase):
    """Schema for trip creation."""
    pass


class TripUpdate(BaseModel):
    """Schema for trip update."""
    driver_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    start_date: Optional[dt_date] = None
    start_km: Optional[Decimal] = Field(default=None, ge=0)
    end_km: Optional[Decimal] = Field(default=None, ge=0)
    driver_commission_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    version: Optional[int] = None  # Trip version the client last read


class TripFinish(BaseModel):
    """Schema for finishing a trip."""
    end_km: Decimal
    version: Optional[int] = None


class TripResponse(TripBase):
    """Schema for trip response."""
    id: int
    end_date: Optional[dt_date] = None
    end_km: Decimal
    status: TripStatus
    monthly_trip_number: Optional[int] = None
    signature_confirmed: bool
    signature_date: Optional[datetime] = None
    version: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TripDetailResponse(TripResponse):
    """Schema for detailed trip response with line items and summary."""
    driver_name: str
    vehicle_plate: str
    cargo: List[CargoResponse] = []
    fueling: List[FuelingResponse] = []
    expenses: List[TripExpenseResponse] = []
    received_payments: List[ReceivedPaymentResponse] = []
    summary: TripSummary
