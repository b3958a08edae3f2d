"""
Installment-bearing expenses: fixed expenses and workshop expenses.

Both are paid in equal monthly installments starting at first_payment_date.
The installment schedule itself is derived (see installment_service) and
never stored; only the payments actually made are.
"""
from sqlalchemy import Column, String, Date, Numeric, Enum as SQLEnum, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship, declared_attr
from fleetledger.db.base import BaseModel
import enum


class FixedExpenseCategory(str, enum.Enum):
    """Fixed expense categories."""
    TIRES = "Pneus"
    RETREADING = "Recauchutagem"
    CONSORTIUM = "Consórcio"
    UNION = "Sindicato"
    ALIGNMENT_BALANCING = "Alinhamento/Balanceamento"
    INSURANCE = "Seguro"
    SUPPLIER = "Fornecedor"
    OTHER = "Outros"


class InstallmentMixin:
    """Columns shared by every expense paid in installments."""
    description = Column(Text, nullable=False)
    total_amount = Column(Numeric(15, 2), nullable=False)
    installments = Column(Integer, nullable=False, default=1)
    first_payment_date = Column(Date, nullable=False, index=True)
    version = Column(Integer, nullable=False)

    @declared_attr
    def vehicle_id(cls):
        return Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)

    @declared_attr
    def __mapper_args__(cls):
        return {"version_id_col": cls.version}


class FixedExpense(InstallmentMixin, BaseModel):
    """Recurring vehicle cost (tires, insurance, consortium...)."""
    __tablename__ = "fixed_expenses"

    category = Column(SQLEnum(FixedExpenseCategory), default=FixedExpenseCategory.OTHER, nullable=False)

    # Relationships
    vehicle = relationship("Vehicle", back_populates="fixed_expenses")
    payments = relationship(
        "FixedExpensePayment", back_populates="expense",
        cascade="all, delete-orphan", order_by="FixedExpensePayment.date"
    )


class WorkshopExpense(InstallmentMixin, BaseModel):
    """Workshop service on a vehicle, paid in installments."""
    __tablename__ = "workshop_expenses"

    service_date = Column(Date, nullable=False)

    # Relationships
    vehicle = relationship("Vehicle", back_populates="workshop_expenses")
    payments = relationship(
        "WorkshopExpensePayment", back_populates="expense",
        cascade="all, delete-orphan", order_by="WorkshopExpensePayment.date"
    )


class FixedExpensePayment(BaseModel):
    """Installment actually paid on a fixed expense."""
    __tablename__ = "fixed_expense_payments"

    expense_id = Column(Integer, ForeignKey("fixed_expenses.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)

    # Relationships
    expense = relationship("FixedExpense", back_populates="payments")


class WorkshopExpensePayment(BaseModel):
    """Installment actually paid on a workshop expense."""
    __tablename__ = "workshop_expense_payments"

    expense_id = Column(Integer, ForeignKey("workshop_expenses.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)

    # Relationships
    expense = relationship("WorkshopExpense", back_populates="payments")
