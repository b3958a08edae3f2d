"""
Pydantic schemas for fixed and workshop expenses paid in installments.
"""
from pydantic import BaseModel, Field
from typing import List, Optional, Literal
from datetime import date as dt_date, datetime
from decimal import Decimal
from fleetledger.models.installment import FixedExpenseCategory


class InstallmentPaymentResponse(BaseModel):
    """Installment actually paid."""
    id: int
    date: dt_date
    amount: Decimal

    class Config:
        from_attributes = True


class InstallmentPaymentCreate(BaseModel):
    """Register the next installment as paid."""
    date: Optional[dt_date] = None  # Defaults to today
    version: Optional[int] = None


class InstallmentExpenseBase(BaseModel):
    """Fields shared by every expense paid in installments."""
    vehicle_id: int
    description: str = Field(min_length=1)
    total_amount: Decimal = Field(gt=0)
    installments: int = Field(default=1, gt=0)
    first_payment_date: dt_date


class FixedExpenseCreate(InstallmentExpenseBase):
    """Schema for fixed expense creation."""
    category: FixedExpenseCategory = FixedExpenseCategory.OTHER


class WorkshopExpenseCreate(InstallmentExpenseBase):
    """Schema for workshop expense creation."""
    service_date: dt_date


class InstallmentExpenseUpdate(BaseModel):
    """Partial update of an installment expense."""
    vehicle_id: Optional[int] = None
    description: Optional[str] = Field(default=None, min_length=1)
    total_amount: Optional[Decimal] = Field(default=None, gt=0)
    installments: Optional[int] = Field(default=None, gt=0)
    first_payment_date: Optional[dt_date] = None
    category: Optional[FixedExpenseCategory] = None  # Fixed expenses only
    service_date: Optional[dt_date] = None  # Workshop expenses only
    version: Optional[int] = None


class InstallmentExpenseResponse(InstallmentExpenseBase):
    """Common response fields, including payment progress."""
    id: int
    installment_amount: Decimal
    amount_paid: Decimal
    paid_installments: int
    is_paid_off: bool
    next_due_date: Optional[dt_date] = None
    payments: List[InstallmentPaymentResponse] = []
    version: int
    created_at: datetime


class FixedExpenseResponse(InstallmentExpenseResponse):
    category: FixedExpenseCategory


class WorkshopExpenseResponse(InstallmentExpenseResponse):
    service_date: dt_date


PayableKind = Literal["fixed", "workshop"]
PayableCategory = Literal["Despesas", "Despesas Oficina"]


class PayableItem(BaseModel):
    """Fixed or workshop expense in the combined accounts-payable view."""
    id: int
    type: PayableKind
    category: PayableCategory
    description: str
    vehicle_id: int
    vehicle_plate: str
    total_amount: Decimal
    due_date: dt_date


class PayableListResponse(BaseModel):
    items: List[PayableItem]
    total_amount: Decimal
