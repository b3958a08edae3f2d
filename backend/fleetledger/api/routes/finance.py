"""
Finance back-office routes: table listings, dashboard and users.
"""
from fastapi import APIRouter, Depends, status
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from fleetledger.api.dependencies import get_finance_user
from fleetledger.db.session import get_db
from fleetledger.schemas.finance import (
    CashFlowCreate, CashFlowResponse, CashFlowUpdate, FinanceDashboard, InvoicedRevenueCreate,
    InvoicedRevenueResponse, InvoicedRevenueUpdate, NonInvoicedRevenueCreate, NonInvoicedRevenueResponse,
    NonInvoicedRevenueUpdate, PageResponse, PayableAccountCreate, PayableAccountResponse, PayableAccountUpdate,
    SystemUserCreate, SystemUserPasswordUpdate, SystemUserResponse, TotalResponse
)
from fleetledger.schemas.user import AccountInfo
from fleetledger.services import finance_service, report_service

router = APIRouter(prefix="/finance", tags=["finance"])


def _table_router(table_name: str, prefix: str, create_schema, update_schema, response_schema) -> APIRouter:
    """Listing, total, print and CRUD routes of one finance table."""
    table = finance_service.get_table(table_name)
    table_router = APIRouter(prefix=prefix)

    @table_router.get("", response_model=PageResponse)
    async def list_records(
        page: int = 0,
        search: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
        user: AccountInfo = Depends(get_finance_user),
        db: Session = Depends(get_db)
    ):
        """One page of records, filtered."""
        return finance_service.list_page(
            table, db, page=page, search=search, start_date=start_date, end_date=end_date, category=category
        )

    @table_router.get("/total", response_model=TotalResponse)
    async def total(
        search: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
        user: AccountInfo = Depends(get_finance_user),
        db: Session = Depends(get_db)
    ):
        """Total of the filtered records."""
        return TotalResponse(total=finance_service.filtered_total(
            table, db, search=search, start_date=start_date, end_date=end_date, category=category
        ))

    @table_router.get("/print", response_class=HTMLResponse)
    async def print_records(
        search: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
        user: AccountInfo = Depends(get_finance_user),
        db: Session = Depends(get_db)
    ):
        """Printable listing of every filtered record."""
        filters = dict(search=search, start_date=start_date, end_date=end_date, category=category)
        records = finance_service.list_all(table, db, **filters)
        total = finance_service.filtered_total(table, db, **filters)
        return HTMLResponse(report_service.render_finance_list(table, records, total, filters))

    @table_router.post("", response_model=response_schema, status_code=status.HTTP_201_CREATED)
    async def create_record(data: create_schema, user: AccountInfo = Depends(get_finance_user), db: Session = Depends(get_db)):
        """Create a record."""
        return finance_service.create_record(table, data, db)

    @table_router.get("/{record_id}", response_model=response_schema)
    async def get_record(record_id: int, user: AccountInfo = Depends(get_finance_user), db: Session = Depends(get_db)):
        """Get record by ID."""
        return finance_service.get_record(table, record_id, db)

    @table_router.put("/{record_id}", response_model=response_schema)
    async def update_record(
        record_id: int,
        data: update_schema,
        user: AccountInfo = Depends(get_finance_user),
        db: Session = Depends(get_db)
    ):
        """Update a record."""
        record = finance_service.get_record(table, record_id, db)
        return finance_service.update_record(table, record, data, db)

    @table_router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_record(record_id: int, user: AccountInfo = Depends(get_finance_user), db: Session = Depends(get_db)):
        """Delete a record."""
        finance_service.delete_record(table, finance_service.get_record(table, record_id, db), db)

    return table_router


router.include_router(_table_router(
    "payables", "/payables", PayableAccountCreate, PayableAccountUpdate, PayableAccountResponse
))
router.include_router(_table_router(
    "cash_flow", "/cash-flow", CashFlowCreate, CashFlowUpdate, CashFlowResponse
))
router.include_router(_table_router(
    "invoiced_revenue", "/invoiced-revenue", InvoicedRevenueCreate, InvoicedRevenueUpdate, InvoicedRevenueResponse
))
router.include_router(_table_router(
    "non_invoiced_revenue", "/non-invoiced-revenue",
    NonInvoicedRevenueCreate, NonInvoicedRevenueUpdate, NonInvoicedRevenueResponse
))


@router.get("/dashboard", response_model=FinanceDashboard)
async def dashboard(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user: AccountInfo = Depends(get_finance_user),
    db: Session = Depends(get_db)
):
    """Revenue, cash and payables figures for the period."""
    return finance_service.dashboard(db, start_date=start_date, end_date=end_date)


@router.get("/users", response_model=List[SystemUserResponse])
async def list_users(user: AccountInfo = Depends(get_finance_user), db: Session = Depends(get_db)):
    """List back-office users."""
    return finance_service.list_users(db)


@router.post("/users", response_model=SystemUserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(data: SystemUserCreate, user: AccountInfo = Depends(get_finance_user), db: Session = Depends(get_db)):
    """Create a back-office user."""
    return finance_service.create_user(data.name, data.password, db)


@router.put("/users/{user_id}/password")
async def change_user_password(
    user_id: int,
    data: SystemUserPasswordUpdate,
    user: AccountInfo = Depends(get_finance_user),
    db: Session = Depends(get_db)
):
    """Set a new password for a back-office user."""
    finance_service.change_user_password(finance_service.get_user(user_id, db), data.password, db)
    return {"message": "Password changed successfully"}


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: int, user: AccountInfo = Depends(get_finance_user), db: Session = Depends(get_db)):
    """Delete a back-office user."""
    finance_service.delete_user(finance_service.get_user(user_id, db), user.user_id, db)
