"""
Printable HTML reports rendered with Jinja2.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional
from jinja2 import Environment, PackageLoader, select_autoescape
from fleetledger.core.config import settings
from fleetledger.core.utils import format_currency, format_date_br
from fleetledger.schemas.report import BillingReport

logger = logging.getLogger(__name__)

env = Environment(
    loader=PackageLoader("fleetledger", "templates"),
    autoescape=select_autoescape(["html"]),
)
env.filters["money"] = lambda value: format_currency(value, settings.CURRENCY_SYMBOL)
env.filters["date_br"] = format_date_br


def _cell(record, attr: str, kind: str) -> str:
    value = getattr(record, attr)
    if kind == "money":
        return format_currency(value, settings.CURRENCY_SYMBOL)
    if kind == "date":
        return format_date_br(value)
    if kind == "enum":
        return value.value if value is not None else ""
    return "" if value is None else str(value)


def render_billing_report(report: BillingReport, vehicle_plate: Optional[str] = None) -> str:
    """Monthly billing report as a printable page."""
    template = env.get_template("billing_report.html")
    year, month = report.month.split("-")
    return template.render(
        report=report,
        period=f"{month}/{year}",
        vehicle_plate=vehicle_plate,
        generated_at=datetime.now(),
    )


def render_finance_list(table, records, total: Decimal, filters: dict) -> str:
    """Print view of a finance listing with the filtered total."""
    template = env.get_template("finance_list.html")
    rows = [[_cell(record, attr, kind) for _, attr, kind in table.print_columns] for record in records]
    logger.debug(f"Rendering {table.name} print view with {len(rows)} rows")
    return template.render(
        title=table.title,
        headers=[header for header, _, _ in table.print_columns],
        money_columns=[i for i, (_, _, kind) in enumerate(table.print_columns) if kind == "money"],
        rows=rows,
        total=total,
        filters={key: value for key, value in filters.items() if value},
        generated_at=datetime.now(),
    )
