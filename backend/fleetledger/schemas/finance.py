"""
Pydantic schemas for the finance back-office tables.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional
from datetime import date as dt_date, datetime
from decimal import Decimal
from fleetledger.core.utils import parse_currency
from fleetledger.models.finance import (
    PayableStatus, MovementType, PAYABLE_CATEGORIES, CASH_FLOW_CATEGORIES, NON_INVOICED_CATEGORIES
)


def _check_category(value: Optional[str], allowed: List[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip().upper()
    if value not in allowed:
        raise ValueError(f"Category must be one of: {', '.join(allowed)}")
    return value


# --- Contas a pagar ---

class PayableAccountCreate(BaseModel):
    description: str = Field(min_length=1)
    amount_with_invoice: Decimal = Decimal(0)
    amount_without_invoice: Decimal = Decimal(0)
    category: str
    due_date: dt_date
    status: PayableStatus = PayableStatus.PENDING

    @field_validator("amount_with_invoice", "amount_without_invoice", mode="before")
    @classmethod
    def parse_amount(cls, v):
        return parse_currency(v)

    @field_validator("category")
    @classmethod
    def check_category(cls, v):
        return _check_category(v, PAYABLE_CATEGORIES)


class PayableAccountUpdate(BaseModel):
    description: Optional[str] = Field(default=None, min_length=1)
    amount_with_invoice: Optional[Decimal] = None
    amount_without_invoice: Optional[Decimal] = None
    category: Optional[str] = None
    due_date: Optional[dt_date] = None
    status: Optional[PayableStatus] = None

    @field_validator("amount_with_invoice", "amount_without_invoice", mode="before")
    @classmethod
    def parse_amount(cls, v):
        return parse_currency(v) if v is not None else v

    @field_validator("category")
    @classmethod
    def check_category(cls, v):
        return _check_category(v, PAYABLE_CATEGORIES)


class PayableAccountResponse(BaseModel):
    id: int
    description: str
    amount_with_invoice: Decimal
    amount_without_invoice: Decimal
    category: str
    due_date: dt_date
    status: PayableStatus
    created_at: datetime

    class Config:
        from_attributes = True


# --- Fluxo de caixa ---

class CashFlowCreate(BaseModel):
    movement_date: dt_date
    description: str = Field(min_length=1)
    category: str
    movement_type: MovementType
    amount: Decimal

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, v):
        return parse_currency(v)

    @field_validator("category")
    @classmethod
    def check_category(cls, v):
        return _check_category(v, CASH_FLOW_CATEGORIES)


class CashFlowUpdate(BaseModel):
    movement_date: Optional[dt_date] = None
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None
    movement_type: Optional[MovementType] = None
    amount: Optional[Decimal] = None

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, v):
        return parse_currency(v) if v is not None else v

    @field_validator("category")
    @classmethod
    def check_category(cls, v):
        return _check_category(v, CASH_FLOW_CATEGORIES)


class CashFlowResponse(BaseModel):
    id: int
    movement_date: dt_date
    description: str
    category: str
    movement_type: MovementType
    amount: Decimal
    created_at: datetime

    class Config:
        from_attributes = True


# --- Faturamento com NF ---

class InvoicedRevenueCreate(BaseModel):
    billing_date: dt_date
    client: str = Field(min_length=1)
    service_invoice: Optional[str] = None
    parts_invoice: Optional[str] = None
    total_amount: Decimal
    installments: int = Field(default=1, gt=0)
    payment_terms: Optional[str] = None

    @field_validator("total_amount", mode="before")
    @classmethod
    def parse_amount(cls, v):
        return parse_currency(v)


class InvoicedRevenueUpdate(BaseModel):
    billing_date: Optional[dt_date] = None
    client: Optional[str] = Field(default=None, min_length=1)
    service_invoice: Optional[str] = None
    parts_invoice: Optional[str] = None
    total_amount: Optional[Decimal] = None
    installments: Optional[int] = Field(default=None, gt=0)
    payment_terms: Optional[str] = None

    @field_validator("total_amount", mode="before")
    @classmethod
    def parse_amount(cls, v):
        return parse_currency(v) if v is not None else v


class InvoicedRevenueResponse(BaseModel):
    id: int
    billing_date: dt_date
    client: str
    service_invoice: Optional[str] = None
    parts_invoice: Optional[str] = None
    total_amount: Decimal
    installments: int
    payment_terms: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


# --- Faturamento sem NF ---

class NonInvoicedRevenueCreate(BaseModel):
    billing_date: dt_date
    quote_number: Optional[str] = None
    total_amount: Decimal
    payment_terms: Optional[str] = None
    category: str

    @field_validator("total_amount", mode="before")
    @classmethod
    def parse_amount(cls, v):
        return parse_currency(v)

    @field_validator("category")
    @classmethod
    def check_category(cls, v):
        return _check_category(v, NON_INVOICED_CATEGORIES)


class NonInvoicedRevenueUpdate(BaseModel):
    billing_date: Optional[dt_date] = None
    quote_number: Optional[str] = None
    total_amount: Optional[Decimal] = None
    payment_terms: Optional[str] = None
    category: Optional[str] = None

    @field_validator("total_amount", mode="before")
    @classmethod
    def parse_amount(cls, v):
        return parse_currency(v) if v is not None else v

    @field_validator("category")
    @classmethod
    def check_category(cls, v):
        return _check_category(v, NON_INVOICED_CATEGORIES)


class NonInvoicedRevenueResponse(BaseModel):
    id: int
    billing_date: dt_date
    quote_number: Optional[str] = None
    total_amount: Decimal
    payment_terms: Optional[str] = None
    category: str
    created_at: datetime

    class Config:
        from_attributes = True


# --- Listings and dashboard ---

class PageResponse(BaseModel):
    """One page of a finance listing."""
    items: List[Dict]
    count: int  # Rows matching the filters, across all pages
    page: int
    page_size: int


class TotalResponse(BaseModel):
    total: Decimal


class ChartSeries(BaseModel):
    name: str
    data: List[Decimal]


class FinanceDashboard(BaseModel):
    """Back-office dashboard figures."""
    start_date: Optional[dt_date] = None
    end_date: Optional[dt_date] = None
    invoiced_revenue: Decimal
    non_invoiced_revenue: Decimal  # Net of deduction categories
    total_revenue: Decimal
    cash_balance: Decimal
    payables_total: Decimal
    overdue_total: Decimal  # All pending bills past due, regardless of the period
    pending_in_period: Decimal
    forecast_profit: Decimal
    revenue_composition: Dict[str, Decimal]
    top_expense_categories: Dict[str, Decimal]
    revenue_evolution_labels: List[str]
    revenue_evolution: List[ChartSeries]


# --- Users ---

class SystemUserCreate(BaseModel):
    name: str = Field(min_length=1)
    password: str


class SystemUserPasswordUpdate(BaseModel):
    password: str


class SystemUserResponse(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True
