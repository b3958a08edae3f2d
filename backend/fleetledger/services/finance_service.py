"""
Finance back-office service.

Every finance table is described once in FINANCE_TABLES (search column,
date column, ordering, print columns) and the listing, total, print and CRUD
operations work from that description.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from sqlalchemy import func
from sqlalchemy.orm import Session
from fleetledger.core.config import settings
from fleetledger.core.exceptions import NotFound, ValidationFailed
from fleetledger.db.session import write_transaction
from fleetledger.models.finance import (
    CashFlowEntry, InvoicedRevenue, MovementType, NonInvoicedRevenue, PayableAccount, PayableStatus,
    SystemUser, NON_INVOICED_DEDUCTION_CATEGORIES, NON_INVOICED_REVENUE_CATEGORIES
)
from fleetledger.schemas.finance import (
    CashFlowResponse, ChartSeries, FinanceDashboard, InvoicedRevenueResponse, NonInvoicedRevenueResponse,
    PageResponse, PayableAccountResponse
)
from fleetledger.services.auth_service import set_password, validate_new_password

logger = logging.getLogger(__name__)

MONTH_ABBREVIATIONS = ["JAN", "FEV", "MAR", "ABR", "MAI", "JUN", "JUL", "AGO", "SET", "OUT", "NOV", "DEZ"]
TOP_CATEGORIES = 5


class FinanceTable:
    """How one finance table is searched, ordered, summed and printed."""
    def __init__(
        self,
        name: str,
        title: str,
        model,
        response_schema,
        search_column: str,
        date_column: str,
        ascending: bool,
        print_columns: List[Tuple[str, str, str]],
        has_category: bool = True
    ):
        self.name = name
        self.title = title
        self.model = model
        self.response_schema = response_schema
        self.search_column = search_column
        self.date_column = date_column
        self.ascending = ascending
        self.print_columns = print_columns  # (header, attribute, kind)
        self.has_category = has_category

    def column(self, attr: str):
        return getattr(self.model, attr)


FINANCE_TABLES: Dict[str, FinanceTable] = {
    "payables": FinanceTable(
        "payables", "Contas a Pagar", PayableAccount, PayableAccountResponse,
        search_column="description", date_column="due_date", ascending=True,
        print_columns=[
            ("Vencimento", "due_date", "date"),
            ("Descrição", "description", "text"),
            ("Categoria", "category", "text"),
            ("Valor c/ NF", "amount_with_invoice", "money"),
            ("Valor s/ NF", "amount_without_invoice", "money"),
            ("Status", "status", "enum"),
        ],
    ),
    "cash_flow": FinanceTable(
        "cash_flow", "Fluxo de Caixa", CashFlowEntry, CashFlowResponse,
        search_column="description", date_column="movement_date", ascending=False,
        print_columns=[
            ("Data", "movement_date", "date"),
            ("Descrição", "description", "text"),
            ("Categoria", "category", "text"),
            ("Tipo", "movement_type", "enum"),
            ("Valor", "amount", "money"),
        ],
    ),
    "invoiced_revenue": FinanceTable(
        "invoiced_revenue", "Faturamento com NF", InvoicedRevenue, InvoicedRevenueResponse,
        search_column="client", date_column="billing_date", ascending=False,
        print_columns=[
            ("Data", "billing_date", "date"),
            ("Cliente", "client", "text"),
            ("NF Serviço", "service_invoice", "text"),
            ("NF Peças", "parts_invoice", "text"),
            ("Parcelas", "installments", "text"),
            ("Condição", "payment_terms", "text"),
            ("Valor Total", "total_amount", "money"),
        ],
        has_category=False,
    ),
    "non_invoiced_revenue": FinanceTable(
        "non_invoiced_revenue", "Faturamento sem NF", NonInvoicedRevenue, NonInvoicedRevenueResponse,
        search_column="quote_number", date_column="billing_date", ascending=False,
        print_columns=[
            ("Data", "billing_date", "date"),
            ("Orçamento", "quote_number", "text"),
            ("Categoria", "category", "text"),
            ("Condição", "payment_terms", "text"),
            ("Valor Total", "total_amount", "money"),
        ],
    ),
}


def get_table(name: str) -> FinanceTable:
    table = FINANCE_TABLES.get(name)
    if table is None:
        raise NotFound(f"Unknown finance table '{name}'")
    return table


def _d(value) -> Decimal:
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _in_range(value: date, start_date: Optional[date], end_date: Optional[date]) -> bool:
    if start_date and value < start_date:
        return False
    if end_date and value > end_date:
        return False
    return True


def filtered_query(
    table: FinanceTable,
    db: Session,
    search: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    category: Optional[str] = None
):
    """
    Query with the listing filters applied: case-insensitive substring on the
    search column, inclusive date range and exact category.
    """
    query = db.query(table.model)
    if search:
        query = query.filter(table.column(table.search_column).ilike(f"%{search.strip()}%"))
    if start_date:
        query = query.filter(table.column(table.date_column) >= start_date)
    if end_date:
        query = query.filter(table.column(table.date_column) <= end_date)
    if category:
        if not table.has_category:
            raise ValidationFailed(f"{table.title} has no category filter")
        query = query.filter(table.model.category == category.strip().upper())
    return query


def _ordered(table: FinanceTable, query):
    date_column = table.column(table.date_column)
    if table.ascending:
        return query.order_by(date_column.asc(), table.model.id.asc())
    return query.order_by(date_column.desc(), table.model.id.desc())


def list_page(table: FinanceTable, db: Session, page: int = 0, **filters) -> PageResponse:
    """One page of PAGE_SIZE rows (0-based) with the exact filtered count."""
    if page < 0:
        raise ValidationFailed("Page must be zero or greater")
    page_size = settings.PAGE_SIZE
    query = filtered_query(table, db, **filters)
    count = query.count()
    rows = _ordered(table, query).offset(page * page_size).limit(page_size).all()
    return PageResponse(
        items=[table.response_schema.model_validate(row).model_dump(mode="json") for row in rows],
        count=count,
        page=page,
        page_size=page_size,
    )


def list_all(table: FinanceTable, db: Session, **filters) -> list:
    """Every filtered row in listing order, for printing."""
    return _ordered(table, filtered_query(table, db, **filters)).all()


def filtered_total(table: FinanceTable, db: Session, **filters) -> Decimal:
    """
    Sum shown under each listing: payables add both amounts, cash flow is
    inflows minus outflows and revenue tables sum the total amount.
    """
    query = filtered_query(table, db, **filters)
    model = table.model
    if model is PayableAccount:
        row = query.with_entities(
            func.sum(model.amount_with_invoice), func.sum(model.amount_without_invoice)
        ).one()
        return _d(row[0]) + _d(row[1])
    if model is CashFlowEntry:
        inflow = query.filter(model.movement_type == MovementType.INFLOW).with_entities(func.sum(model.amount)).scalar()
        outflow = query.filter(model.movement_type == MovementType.OUTFLOW).with_entities(func.sum(model.amount)).scalar()
        return _d(inflow) - _d(outflow)
    return _d(query.with_entities(func.sum(model.total_amount)).scalar())


def get_record(table: FinanceTable, record_id: int, db: Session):
    record = db.query(table.model).filter(table.model.id == record_id).first()
    if not record:
        raise NotFound(f"{table.title}: record not found")
    return record


def create_record(table: FinanceTable, data, db: Session):
    with write_transaction(db, f"create {table.name} record"):
        record = table.model(**data.model_dump())
        db.add(record)
    db.refresh(record)
    logger.info(f"{table.title}: record {record.id} created")
    return record


def update_record(table: FinanceTable, record, data, db: Session):
    updates = data.model_dump(exclude_unset=True)
    with write_transaction(db, f"update {table.name} record"):
        for field, value in updates.items():
            setattr(record, field, value)
    db.refresh(record)
    return record


def delete_record(table: FinanceTable, record, db: Session) -> None:
    record_id = record.id
    with write_transaction(db, f"delete {table.name} record"):
        db.delete(record)
    logger.info(f"{table.title}: record {record_id} deleted")


def fetch_all(model, db: Session, batch_size: Optional[int] = None) -> list:
    """Load a whole table in id order, batch_size rows per round trip."""
    batch_size = batch_size or settings.FETCH_BATCH_SIZE
    rows = []
    offset = 0
    while True:
        batch = db.query(model).order_by(model.id).offset(offset).limit(batch_size).all()
        rows.extend(batch)
        if len(batch) < batch_size:
            break
        offset += batch_size
    return rows


def non_invoiced_net(entry: NonInvoicedRevenue) -> Decimal:
    """Signed contribution of a non-invoiced entry to revenue."""
    if entry.category in NON_INVOICED_REVENUE_CATEGORIES:
        return _d(entry.total_amount)
    if entry.category in NON_INVOICED_DEDUCTION_CATEGORIES:
        return -_d(entry.total_amount)
    return Decimal(0)


def _payable_amount(bill: PayableAccount) -> Decimal:
    return _d(bill.amount_with_invoice) + _d(bill.amount_without_invoice)


def _sum(values) -> Decimal:
    return sum(values, Decimal(0))


def dashboard(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    today: Optional[date] = None
) -> FinanceDashboard:
    """
    Back-office dashboard over an optional date range. Overdue bills and
    the yearly evolution chart ignore the range.
    """
    today = today or date.today()
    if start_date and end_date and start_date > end_date:
        raise ValidationFailed("Start date must not be after end date")

    payables = fetch_all(PayableAccount, db)
    cash_flow = fetch_all(CashFlowEntry, db)
    invoiced = fetch_all(InvoicedRevenue, db)
    non_invoiced = fetch_all(NonInvoicedRevenue, db)

    period_payables = [p for p in payables if _in_range(p.due_date, start_date, end_date)]
    period_cash = [c for c in cash_flow if _in_range(c.movement_date, start_date, end_date)]
    period_invoiced = [r for r in invoiced if _in_range(r.billing_date, start_date, end_date)]
    period_non_invoiced = [r for r in non_invoiced if _in_range(r.billing_date, start_date, end_date)]

    invoiced_total = _sum(_d(r.total_amount) for r in period_invoiced)
    non_invoiced_total = _sum(non_invoiced_net(r) for r in period_non_invoiced)
    total_revenue = invoiced_total + non_invoiced_total
    cash_balance = _sum(
        _d(c.amount) if c.movement_type == MovementType.INFLOW else -_d(c.amount) for c in period_cash
    )
    payables_total = _sum(_payable_amount(p) for p in period_payables)
    overdue_total = _sum(
        _payable_amount(p) for p in payables
        if p.status == PayableStatus.PENDING and p.due_date < today
    )
    pending_in_period = _sum(_payable_amount(p) for p in period_payables if p.status == PayableStatus.PENDING)

    by_category: Dict[str, Decimal] = {}
    for bill in period_payables:
        by_category[bill.category] = by_category.get(bill.category, Decimal(0)) + _payable_amount(bill)
    top_categories = sorted(by_category.items(), key=lambda item: item[1], reverse=True)[:TOP_CATEGORIES]

    invoiced_by_month = [Decimal(0)] * 12
    non_invoiced_by_month = [Decimal(0)] * 12
    for record in invoiced:
        if record.billing_date.year == today.year:
            invoiced_by_month[record.billing_date.month - 1] += _d(record.total_amount)
    for record in non_invoiced:
        if record.billing_date.year == today.year:
            non_invoiced_by_month[record.billing_date.month - 1] += non_invoiced_net(record)

    return FinanceDashboard(
        start_date=start_date,
        end_date=end_date,
        invoiced_revenue=invoiced_total,
        non_invoiced_revenue=non_invoiced_total,
        total_revenue=total_revenue,
        cash_balance=cash_balance,
        payables_total=payables_total,
        overdue_total=overdue_total,
        pending_in_period=pending_in_period,
        forecast_profit=total_revenue - payables_total,
        revenue_composition={"Com NF": invoiced_total, "Sem NF": non_invoiced_total},
        top_expense_categories=dict(top_categories),
        revenue_evolution_labels=list(MONTH_ABBREVIATIONS),
        revenue_evolution=[
            ChartSeries(name="Com NF", data=invoiced_by_month),
            ChartSeries(name="Sem NF", data=non_invoiced_by_month),
        ],
    )


# --- Users ---

def list_users(db: Session) -> List[SystemUser]:
    return db.query(SystemUser).order_by(SystemUser.name).all()


def get_user(user_id: int, db: Session) -> SystemUser:
    user = db.query(SystemUser).filter(SystemUser.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return user


def create_user(name: str, password: str, db: Session) -> SystemUser:
    name = name.strip()
    validate_new_password(password)
    if db.query(SystemUser).filter(SystemUser.name == name).first():
        raise ValidationFailed(f"User {name} already exists")
    with write_transaction(db, "create finance user"):
        user = SystemUser(name=name)
        set_password(user, password)
        db.add(user)
    db.refresh(user)
    logger.info(f"Finance user {user.name} created")
    return user


def change_user_password(user: SystemUser, password: str, db: Session) -> None:
    validate_new_password(password)
    with write_transaction(db, "change finance user password"):
        set_password(user, password)
    logger.info(f"Password changed for finance user {user.name}")


def delete_user(user: SystemUser, current_user_id: int, db: Session) -> None:
    if user.id == current_user_id:
        raise ValidationFailed("You cannot delete your own user")
    name = user.name
    with write_transaction(db, "delete finance user"):
        db.delete(user)
    logger.info(f"Finance user {name} deleted")
