"""
Fixed and workshop expense routes, plus the combined accounts-payable view.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Literal, Optional
from fleetledger.api.dependencies import require_admin
from fleetledger.db.session import get_db
from fleetledger.models.installment import FixedExpense, WorkshopExpense
from fleetledger.schemas.expense import (
    FixedExpenseCreate, FixedExpenseResponse, InstallmentExpenseUpdate, InstallmentPaymentCreate,
    PayableListResponse, WorkshopExpenseCreate, WorkshopExpenseResponse
)
from fleetledger.schemas.report import ScheduledInstallmentResponse
from fleetledger.schemas.user import AccountInfo
from fleetledger.services import expense_service, installment_service

fixed_router = APIRouter(prefix="/fixed-expenses", tags=["expenses"])
workshop_router = APIRouter(prefix="/workshop-expenses", tags=["expenses"])
payables_router = APIRouter(prefix="/payables", tags=["expenses"])


def _register_routes(router: APIRouter, model, create_schema, response_schema):
    """CRUD, schedule and payment routes shared by both expense kinds."""

    @router.get("", response_model=List[response_schema])
    async def list_expenses(
        vehicle_id: Optional[int] = None,
        admin: AccountInfo = Depends(require_admin),
        db: Session = Depends(get_db)
    ):
        """List expenses with payment progress."""
        return [expense_service.build_response(e) for e in expense_service.list_expenses(model, db, vehicle_id)]

    @router.post("", response_model=response_schema, status_code=status.HTTP_201_CREATED)
    async def create_expense(
        data: create_schema,
        admin: AccountInfo = Depends(require_admin),
        db: Session = Depends(get_db)
    ):
        """Create an expense paid in installments."""
        return expense_service.build_response(expense_service.create_expense(model, data, db))

    @router.get("/{expense_id}", response_model=response_schema)
    async def get_expense(expense_id: int, admin: AccountInfo = Depends(require_admin), db: Session = Depends(get_db)):
        """Get expense by ID."""
        return expense_service.build_response(expense_service.get_expense(model, expense_id, db))

    @router.get("/{expense_id}/schedule", response_model=List[ScheduledInstallmentResponse])
    async def get_schedule(expense_id: int, admin: AccountInfo = Depends(require_admin), db: Session = Depends(get_db)):
        """Full installment schedule."""
        return installment_service.schedule(expense_service.get_expense(model, expense_id, db))

    @router.put("/{expense_id}", response_model=response_schema)
    async def update_expense(
        expense_id: int,
        data: InstallmentExpenseUpdate,
        admin: AccountInfo = Depends(require_admin),
        db: Session = Depends(get_db)
    ):
        """Update an expense."""
        expense = expense_service.get_expense(model, expense_id, db)
        return expense_service.build_response(expense_service.update_expense(expense, data, db))

    @router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_expense(expense_id: int, admin: AccountInfo = Depends(require_admin), db: Session = Depends(get_db)):
        """Delete an expense and its payments."""
        expense_service.delete_expense(expense_service.get_expense(model, expense_id, db), db)

    @router.post("/{expense_id}/payments", response_model=response_schema, status_code=status.HTTP_201_CREATED)
    async def register_payment(
        expense_id: int,
        data: InstallmentPaymentCreate,
        admin: AccountInfo = Depends(require_admin),
        db: Session = Depends(get_db)
    ):
        """Mark the next installment as paid."""
        expense = expense_service.get_expense(model, expense_id, db)
        expense = expense_service.register_payment(expense, db, paid_on=data.date, expected_version=data.version)
        return expense_service.build_response(expense)


_register_routes(fixed_router, FixedExpense, FixedExpenseCreate, FixedExpenseResponse)
_register_routes(workshop_router, WorkshopExpense, WorkshopExpenseCreate, WorkshopExpenseResponse)


@payables_router.get("", response_model=PayableListResponse)
async def list_payables(
    search: Optional[str] = None,
    plate: Optional[str] = None,
    start_month: Optional[str] = None,
    end_month: Optional[str] = None,
    category: Optional[Literal["Despesas", "Despesas Oficina"]] = None,
    admin: AccountInfo = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Fixed and workshop expenses by due date, with the filtered total."""
    return expense_service.list_payables(
        db, search=search, plate=plate, start_month=start_month, end_month=end_month, category=category
    )
