"""
Fixed and workshop expense service: CRUD, installment payments and the
combined accounts-payable view.
"""
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Type, Union
from sqlalchemy.orm import Session, joinedload
from fleetledger.core.exceptions import ConcurrencyConflict, NotFound, ValidationFailed
from fleetledger.db.session import write_transaction
from fleetledger.models.installment import (
    FixedExpense, FixedExpensePayment, WorkshopExpense, WorkshopExpensePayment
)
from fleetledger.models.vehicle import Vehicle
from fleetledger.schemas.expense import (
    FixedExpenseResponse, InstallmentPaymentResponse, PayableItem, PayableListResponse, WorkshopExpenseResponse
)
from fleetledger.services import installment_service
from fleetledger.services.analysis_service import month_bounds, parse_month

logger = logging.getLogger(__name__)

InstallmentExpense = Union[FixedExpense, WorkshopExpense]

PAYMENT_MODELS = {
    FixedExpense: FixedExpensePayment,
    WorkshopExpense: WorkshopExpensePayment,
}

PAYABLE_CATEGORY = {
    FixedExpense: "Despesas",
    WorkshopExpense: "Despesas Oficina",
}


def get_expense(model: Type[InstallmentExpense], expense_id: int, db: Session) -> InstallmentExpense:
    """Load an expense or raise NotFound."""
    expense = db.query(model).filter(model.id == expense_id).first()
    if not expense:
        raise NotFound("Expense not found")
    return expense


def list_expenses(model: Type[InstallmentExpense], db: Session, vehicle_id: Optional[int] = None) -> List[InstallmentExpense]:
    query = db.query(model).options(joinedload(model.payments))
    if vehicle_id is not None:
        query = query.filter(model.vehicle_id == vehicle_id)
    return query.order_by(model.first_payment_date.desc(), model.id.desc()).all()


def _check_vehicle(vehicle_id: int, db: Session) -> Vehicle:
    vehicle = db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()
    if not vehicle:
        raise NotFound("Vehicle not found")
    return vehicle


def _check_version(expense: InstallmentExpense, expected_version: Optional[int]) -> None:
    if expected_version is not None and expense.version != expected_version:
        raise ConcurrencyConflict(
            "Expense was modified by another session. Reload and try again.",
            details={"current_version": expense.version}
        )


def create_expense(model: Type[InstallmentExpense], data, db: Session) -> InstallmentExpense:
    """Create a fixed or workshop expense."""
    _check_vehicle(data.vehicle_id, db)
    installment_service.validate_installment_terms(data.total_amount, data.installments, data.first_payment_date)

    with write_transaction(db, "create expense"):
        expense = model(**data.model_dump())
        db.add(expense)
    db.refresh(expense)
    logger.info(
        f"{model.__name__} {expense.id} created: {expense.total_amount} in "
        f"{expense.installments} installments for vehicle {expense.vehicle_id}"
    )
    return expense


def update_expense(expense: InstallmentExpense, data, db: Session) -> InstallmentExpense:
    """Partial update. Installments and total cannot drop below what was already paid."""
    _check_version(expense, data.version)
    updates = data.model_dump(exclude_unset=True, exclude={"version"})
    # Fields of the other expense kind are ignored
    updates = {field: value for field, value in updates.items() if hasattr(type(expense), field)}

    if "vehicle_id" in updates:
        _check_vehicle(updates["vehicle_id"], db)
    installments = updates.get("installments", expense.installments)
    total_amount = updates.get("total_amount", expense.total_amount)
    installment_service.validate_installment_terms(
        total_amount,
        installments,
        updates.get("first_payment_date", expense.first_payment_date)
    )
    if installments < len(expense.payments):
        raise ValidationFailed(
            f"Expense already has {len(expense.payments)} payments; installments cannot be lower."
        )
    if installment_service.amount_paid(expense) > Decimal(str(total_amount)):
        raise ValidationFailed("Total amount cannot be lower than the amount already paid.")

    with write_transaction(db, "update expense"):
        for field, value in updates.items():
            setattr(expense, field, value)
    db.refresh(expense)
    return expense


def delete_expense(expense: InstallmentExpense, db: Session) -> None:
    expense_id = expense.id
    with write_transaction(db, "delete expense"):
        db.delete(expense)
    logger.info(f"{type(expense).__name__} {expense_id} deleted")


def register_payment(
    expense: InstallmentExpense,
    db: Session,
    paid_on: Optional[date] = None,
    expected_version: Optional[int] = None
) -> InstallmentExpense:
    """Mark the next installment of an expense as paid."""
    _check_version(expense, expected_version)
    with write_transaction(db, "register installment payment"):
        payment = installment_service.register_payment(expense, PAYMENT_MODELS[type(expense)], paid_on)
        # Dirty the parent row so its version moves with the new payment
        expense.updated_at = datetime.utcnow()
    db.refresh(expense)
    logger.info(
        f"Payment of {payment.amount} registered on {type(expense).__name__} {expense.id} "
        f"({len(expense.payments)}/{expense.installments})"
    )
    return expense


def build_response(expense: InstallmentExpense) -> Union[FixedExpenseResponse, WorkshopExpenseResponse]:
    """Response with payment progress derived from the schedule."""
    fields = dict(
        id=expense.id,
        vehicle_id=expense.vehicle_id,
        description=expense.description,
        total_amount=expense.total_amount,
        installments=expense.installments,
        first_payment_date=expense.first_payment_date,
        installment_amount=installment_service.installment_amount(expense),
        amount_paid=installment_service.amount_paid(expense),
        paid_installments=len(expense.payments),
        is_paid_off=installment_service.is_paid_off(expense),
        next_due_date=installment_service.next_due_date(expense),
        payments=[InstallmentPaymentResponse.model_validate(p) for p in expense.payments],
        version=expense.version,
        created_at=expense.created_at,
    )
    if isinstance(expense, FixedExpense):
        return FixedExpenseResponse(category=expense.category, **fields)
    return WorkshopExpenseResponse(service_date=expense.service_date, **fields)


def list_payables(
    db: Session,
    search: Optional[str] = None,
    plate: Optional[str] = None,
    start_month: Optional[str] = None,
    end_month: Optional[str] = None,
    category: Optional[str] = None
) -> PayableListResponse:
    """
    Fixed and workshop expenses in one list, due on their first payment
    date, ordered by due date. The total covers the filtered items.
    """
    vehicles = {v.id: v for v in db.query(Vehicle).all()}
    window_start = date(*parse_month(start_month), 1) if start_month else None
    window_end = month_bounds(parse_month(end_month), parse_month(end_month))[1] if end_month else None
    search = search.strip().lower() if search else None
    plate = plate.strip().lower() if plate else None

    items = []
    for model, label in PAYABLE_CATEGORY.items():
        if category and category != label:
            continue
        for expense in db.query(model).all():
            vehicle = vehicles.get(expense.vehicle_id)
            vehicle_plate = vehicle.plate if vehicle else "Desconhecido"
            due = expense.first_payment_date
            if search and search not in expense.description.lower():
                continue
            if plate and plate not in vehicle_plate.lower():
                continue
            if window_start and due < window_start:
                continue
            if window_end and due > window_end:
                continue
            items.append(PayableItem(
                id=expense.id,
                type="fixed" if model is FixedExpense else "workshop",
                category=label,
                description=expense.description,
                vehicle_id=expense.vehicle_id,
                vehicle_plate=vehicle_plate,
                total_amount=expense.total_amount,
                due_date=due,
            ))

    items.sort(key=lambda item: (item.due_date, item.type, item.id))
    total = sum((item.total_amount for item in items), Decimal(0))
    return PayableListResponse(items=items, total_amount=total)
