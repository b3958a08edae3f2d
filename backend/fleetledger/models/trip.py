"""
Trip model and its financial line items.
"""
from sqlalchemy import Column, String, Date, DateTime, Boolean, Numeric, Enum as SQLEnum, ForeignKey, Integer
from sqlalchemy.orm import relationship
from fleetledger.db.base import BaseModel
import enum


class TripStatus(str, enum.Enum):
    """Trip status enumeration."""
    PLANNED = "Planejada"
    IN_PROGRESS = "Em Andamento"
    COMPLETED = "Finalizada"


class TripExpenseCategory(str, enum.Enum):
    """Categories for on-the-road expenses."""
    TOLL = "Pedágio"
    FOOD = "Alimentação"
    MAINTENANCE = "Manutenção"
    LODGING = "Hospedagem"
    OTHER = "Outros"


class PaymentMethod(str, enum.Enum):
    """How money changed hands."""
    CASH = "Dinheiro"
    PIX = "PIX"
    CARD = "Cartão"
    TRANSFER = "Transferência"
    CHECK = "Cheque"
    FREIGHT_LETTER = "Carta Frete"


class ReceivedPaymentType(str, enum.Enum):
    """Kind of payment received from the freight customer."""
    ADVANCE = "Adiantamento"
    BALANCE = "Saldo"
    TOLL_VOUCHER = "Vale Pedágio"
    OTHER = "Outros"


class Trip(BaseModel):
    """A freight trip from origin to destination."""
    __tablename__ = "trips"

    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)
    origin = Column(String(200), nullable=False)
    destination = Column(String(200), nullable=False)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=True)
    start_km = Column(Numeric(12, 1), nullable=False, default=0)
    end_km = Column(Numeric(12, 1), nullable=False, default=0)  # 0 until the trip is finished
    status = Column(SQLEnum(TripStatus), default=TripStatus.PLANNED, nullable=False)
    driver_commission_rate = Column(Numeric(5, 2), nullable=False, default=0)  # Percentage of net freight
    monthly_trip_number = Column(Integer, nullable=True)  # Nth trip of the driver in the start month
    signature_confirmed = Column(Boolean, default=False, nullable=False)
    signature_date = Column(DateTime, nullable=True)
    version = Column(Integer, nullable=False)

    # Relationships
    driver = relationship("Driver", back_populates="trips")
    vehicle = relationship("Vehicle", back_populates="trips")
    cargo = relationship("TripCargo", back_populates="trip", cascade="all, delete-orphan")
    fueling = relationship("TripFueling", back_populates="trip", cascade="all, delete-orphan")
    expenses = relationship("TripExpense", back_populates="trip", cascade="all, delete-orphan")
    received_payments = relationship("ReceivedPayment", back_populates="trip", cascade="all, delete-orphan")

    __mapper_args__ = {"version_id_col": version}


class TripCargo(BaseModel):
    """Cargo lot carried on a trip."""
    __tablename__ = "trip_cargo"

    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    type = Column(String(100), nullable=False)
    weight = Column(Numeric(12, 3), nullable=False)  # Tons
    price_per_ton = Column(Numeric(15, 2), nullable=False)
    tax = Column(Numeric(15, 2), nullable=False, default=0)

    # Relationships
    trip = relationship("Trip", back_populates="cargo")


class TripFueling(BaseModel):
    """Fuel purchase during a trip."""
    __tablename__ = "trip_fueling"

    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    station = Column(String(200), nullable=False)
    date = Column(Date, nullable=False)
    km = Column(Numeric(12, 1), nullable=False, default=0)  # Odometer at the pump
    liters = Column(Numeric(12, 3), nullable=False)
    total_amount = Column(Numeric(15, 2), nullable=False)
    payment_method = Column(SQLEnum(PaymentMethod), default=PaymentMethod.CASH, nullable=False)

    # Relationships
    trip = relationship("Trip", back_populates="fueling")


class TripExpense(BaseModel):
    """Miscellaneous expense paid on the road (toll, food, lodging...)."""
    __tablename__ = "trip_expenses"

    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    category = Column(SQLEnum(TripExpenseCategory), default=TripExpenseCategory.OTHER, nullable=False)
    description = Column(String(255), nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    date = Column(Date, nullable=False)

    # Relationships
    trip = relationship("Trip", back_populates="expenses")


class ReceivedPayment(BaseModel):
    """Payment received from the customer for a trip's freight."""
    __tablename__ = "trip_received_payments"

    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    type = Column(SQLEnum(ReceivedPaymentType), default=ReceivedPaymentType.OTHER, nullable=False)
    method = Column(SQLEnum(PaymentMethod), default=PaymentMethod.PIX, nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    date = Column(Date, nullable=False)

    # Relationships
    trip = relationship("Trip", back_populates="received_payments")
