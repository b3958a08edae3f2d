"""Models package - Import all models for SQLAlchemy registration."""
from fleetledger.models.account import Admin, Driver, RecordStatus
from fleetledger.models.vehicle import Vehicle
from fleetledger.models.trip import (
    Trip, TripCargo, TripFueling, TripExpense, ReceivedPayment,
    TripStatus, TripExpenseCategory, PaymentMethod, ReceivedPaymentType
)
from fleetledger.models.installment import (
    FixedExpense, WorkshopExpense, FixedExpensePayment, WorkshopExpensePayment, FixedExpenseCategory
)
from fleetledger.models.finance import (
    PayableAccount, CashFlowEntry, InvoicedRevenue, NonInvoicedRevenue, SystemUser,
    PayableStatus, MovementType
)
from fleetledger.models.desktop import DesktopLayout

__all__ = [
    "Admin",
    "Driver",
    "RecordStatus",
    "Vehicle",
    "Trip",
    "TripCargo",
    "TripFueling",
    "TripExpense",
    "ReceivedPayment",
    "TripStatus",
    "TripExpenseCategory",
    "PaymentMethod",
    "ReceivedPaymentType",
    "FixedExpense",
    "WorkshopExpense",
    "FixedExpensePayment",
    "WorkshopExpensePayment",
    "FixedExpenseCategory",
    "PayableAccount",
    "CashFlowEntry",
    "InvoicedRevenue",
    "NonInvoicedRevenue",
    "SystemUser",
    "PayableStatus",
    "MovementType",
    "DesktopLayout",
]
