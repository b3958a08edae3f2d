"""
Utility functions for the application.
"""
from typing import Any, Dict, Optional, Union
from datetime import date
from decimal import Decimal, InvalidOperation
import re


def format_error(message: str, details: Any = None, retryable: Optional[bool] = None) -> Dict[str, Any]:
    """Format error response."""
    response = {"error": message}
    if details:
        response["details"] = details
    if retryable is not None:
        response["retryable"] = retryable
    return response


_NON_NUMERIC = re.compile(r"[^0-9,.\-]")


def parse_currency(value: Union[str, int, float, Decimal, None]) -> Decimal:
    """
    Parse a money amount that may come as a number or as a Brazilian
    formatted string such as "R$ 1.234,56".
    Anything that cannot be parsed counts as zero.
    """
    if value is None or isinstance(value, bool):
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if not isinstance(value, str):
        return Decimal(0)

    cleaned = _NON_NUMERIC.sub("", value.replace("R$", "").strip())
    if "," in cleaned:
        # "." is the thousands separator and "," the decimal one
        cleaned = cleaned.replace(".", "").replace(",", ".", 1)
    elif cleaned.count(".") > 1 or (cleaned.count(".") == 1 and len(cleaned.split(".")[1]) == 3):
        # "1.234" and "1.234.567" are thousands-grouped integers
        cleaned = cleaned.replace(".", "")
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return Decimal(0)


def format_currency(value: Union[Decimal, int, float, None], symbol: str = "R$") -> str:
    """Format an amount as "R$ 1.234,56"."""
    amount = Decimal(str(value or 0)).quantize(Decimal("0.01"))
    sign = "-" if amount < 0 else ""
    us_style = f"{abs(amount):,.2f}"
    br_style = us_style.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}{symbol} {br_style}"


def format_date_br(value: Optional[date]) -> str:
    """Format a date as DD/MM/YYYY, empty string for missing dates."""
    if not value:
        return ""
    return value.strftime("%d/%m/%Y")
