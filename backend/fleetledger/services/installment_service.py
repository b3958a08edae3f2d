"""
Installment schedule expansion for fixed and workshop expenses.

An expense of total T split in n installments is paid T / n per month, the
first one on first_payment_date. Installment i (0-indexed) falls on
first_payment_date advanced by i calendar months. When the day does not
exist in the target month it is clamped to the month's last day
(31 Jan -> 28/29 Feb -> 31 Mar), always counting from the first date.
"""
from datetime import date
from decimal import Decimal
from typing import List, Optional
from dateutil.relativedelta import relativedelta
from fleetledger.core.exceptions import ValidationFailed


class ScheduledInstallment:
    """One (date, amount) pair of an expense's payment schedule."""
    def __init__(self, number: int, due_date: date, amount: Decimal, vehicle_id: Optional[int]):
        self.number = number  # 1-based
        self.date = due_date
        self.amount = amount
        self.vehicle_id = vehicle_id

    def __repr__(self):
        return f"ScheduledInstallment(number={self.number}, date={self.date}, amount={self.amount})"


def _to_decimal(value) -> Decimal:
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def add_months(start: date, months: int) -> date:
    """Advance a date by whole calendar months, clamping the day of month."""
    return start + relativedelta(months=months)


def validate_installment_terms(total_amount, installments, first_payment_date) -> None:
    """Reject terms that cannot produce a schedule."""
    if installments is None or int(installments) <= 0:
        raise ValidationFailed("Number of installments must be greater than zero.")
    if _to_decimal(total_amount) < 0:
        raise ValidationFailed("Total amount cannot be negative.")
    if not isinstance(first_payment_date, date):
        raise ValidationFailed("First payment date is required.")


def installment_amount(expense) -> Decimal:
    """Amount of each installment: equal division, no cent balancing."""
    validate_installment_terms(expense.total_amount, expense.installments, expense.first_payment_date)
    return _to_decimal(expense.total_amount) / int(expense.installments)


def schedule(expense) -> List[ScheduledInstallment]:
    """Full payment schedule of an expense."""
    amount = installment_amount(expense)
    vehicle_id = getattr(expense, "vehicle_id", None)
    return [
        ScheduledInstallment(i + 1, add_months(expense.first_payment_date, i), amount, vehicle_id)
        for i in range(int(expense.installments))
    ]


def expand(expense, window_start: date, window_end: date) -> List[ScheduledInstallment]:
    """
    Installments of an expense that fall inside [window_start, window_end].
    Both ends are inclusive. Results are in date order.
    """
    if window_start > window_end:
        # Still validate the expense so bad data does not go unnoticed
        installment_amount(expense)
        return []
    return [item for item in schedule(expense) if window_start <= item.date <= window_end]


def amount_paid(expense) -> Decimal:
    """Sum of the payments recorded so far."""
    return sum((_to_decimal(p.amount) for p in expense.payments), Decimal(0))


def is_paid_off(expense) -> bool:
    """True when every installment has a recorded payment."""
    return len(expense.payments) >= int(expense.installments)


def next_due_date(expense) -> Optional[date]:
    """Due date of the first installment without a recorded payment."""
    if is_paid_off(expense):
        return None
    return add_months(expense.first_payment_date, len(expense.payments))


def register_payment(expense, payment_cls, paid_on: Optional[date] = None):
    """
    Record the next installment as paid.
    The payment amount is one installment, capped at the balance still
    owed so payments never exceed the total. Fully paid expenses reject
    further payments.
    """
    if is_paid_off(expense):
        raise ValidationFailed("All installments of this expense are already paid.")
    remaining = _to_decimal(expense.total_amount) - amount_paid(expense)
    if remaining <= 0:
        raise ValidationFailed("Payments already cover the total amount of this expense.")
    amount = min(installment_amount(expense), remaining)
    payment = payment_cls(date=paid_on or date.today(), amount=amount)
    expense.payments.append(payment)
    return payment
