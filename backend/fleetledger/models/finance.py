"""
Finance back-office models.
Table names follow the company's existing database.
"""
from sqlalchemy import Column, String, Date, Numeric, Enum as SQLEnum, Integer, Text
from sqlalchemy.orm import relationship
from fleetledger.db.base import BaseModel
import enum


PAYABLE_CATEGORIES = [
    "CONSÓRCIO", "DESPESAS FIXAS", "DIVERSOS", "DOAÇÃO", "FERRAMENTAS", "FORNECEDOR",
    "IMPOSTOS", "PEÇAS USADAS", "SALÁRIO", "TERCEIRIZADO", "TERRENO",
]
CASH_FLOW_CATEGORIES = PAYABLE_CATEGORIES + ["TRANSPORTADORA", "BANCO"]
NON_INVOICED_CATEGORIES = ["FATURAMENTO", "RETORNO", "INTERNO", "GARANTIA", "CORTESIA", "CENTRAL TRUCK"]

# Non-invoiced entries in these categories add to revenue, the deduction ones subtract
NON_INVOICED_REVENUE_CATEGORIES = ["FATURAMENTO", "CENTRAL TRUCK"]
NON_INVOICED_DEDUCTION_CATEGORIES = ["GARANTIA", "CORTESIA", "INTERNO", "RETORNO"]


class PayableStatus(str, enum.Enum):
    """Payment status of a bill."""
    PENDING = "PENDENTE"
    PAID = "PAGO"


class MovementType(str, enum.Enum):
    """Direction of a cash movement."""
    INFLOW = "ENTRADA"
    OUTFLOW = "SAÍDA"


class PayableAccount(BaseModel):
    """Bill to pay, split between the invoiced and non-invoiced amount."""
    __tablename__ = "contas_pagar"

    description = Column(Text, nullable=False)
    amount_with_invoice = Column(Numeric(15, 2), nullable=False, default=0)
    amount_without_invoice = Column(Numeric(15, 2), nullable=False, default=0)
    category = Column(String(50), nullable=False, index=True)
    due_date = Column(Date, nullable=False, index=True)
    status = Column(SQLEnum(PayableStatus), default=PayableStatus.PENDING, nullable=False)


class CashFlowEntry(BaseModel):
    """Money in or out of the cashier."""
    __tablename__ = "fluxo_caixa"

    movement_date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=False, index=True)
    movement_type = Column(SQLEnum(MovementType), nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)


class InvoicedRevenue(BaseModel):
    """Service billed with a fiscal invoice."""
    __tablename__ = "faturamento_com_nf"

    billing_date = Column(Date, nullable=False, index=True)
    client = Column(String(200), nullable=False)
    service_invoice = Column(String(50), nullable=True)
    parts_invoice = Column(String(50), nullable=True)
    total_amount = Column(Numeric(15, 2), nullable=False)
    installments = Column(Integer, nullable=False, default=1)
    payment_terms = Column(String(200), nullable=True)


class NonInvoicedRevenue(BaseModel):
    """Revenue (or deduction) recorded against a quote, without an invoice."""
    __tablename__ = "faturamento_sem_nf"

    billing_date = Column(Date, nullable=False, index=True)
    quote_number = Column(String(50), nullable=True)
    total_amount = Column(Numeric(15, 2), nullable=False)
    payment_terms = Column(String(200), nullable=True)
    category = Column(String(50), nullable=False, index=True)


class SystemUser(BaseModel):
    """Back-office user."""
    __tablename__ = "usuarios_sistema"

    name = Column(String(100), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)

    # Relationships
    desktop_layout = relationship(
        "DesktopLayout", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
