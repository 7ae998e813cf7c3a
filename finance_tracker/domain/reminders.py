"""Payment reminder scheduling and record filtering"""

from dataclasses import replace
from datetime import date
from typing import Iterable, List, Optional

from finance_tracker.domain.models import PaymentReminder, Transaction, TransactionFilter
from finance_tracker.utils.date_utils import add_days, add_months, days_between

# frequency -> (days, months) per step
FREQUENCY_STEPS = {
    "weekly": (7, 0),
    "biweekly": (14, 0),
    "monthly": (0, 1),
    "quarterly": (0, 3),
    "yearly": (0, 12),
}

DEFAULT_DUE_DAYS = 7


def _occurrence(anchor: date, frequency: str, n: int) -> date:
    days, months = FREQUENCY_STEPS[frequency]
    if months:
        # Always step from the anchor so Jan 31 monthly gives Feb 28, Mar 31 (no drift)
        return add_months(anchor, n * months)
    return add_days(anchor, n * days)


def next_due_date(reminder: PaymentReminder) -> Optional[date]:
    """Due date of the following occurrence, or None for one-off reminders"""
    if not reminder.recurring or reminder.frequency is None:
        return None
    return _occurrence(reminder.due_date, reminder.frequency, 1)


def occurrences_between(reminder: PaymentReminder, start: date, end: date) -> List[date]:
    """
    All due dates of a reminder falling within [start, end].

    One-off reminders yield at most their own due date.
    """
    if start > end:
        return []
    if not reminder.recurring or reminder.frequency is None:
        return [reminder.due_date] if start <= reminder.due_date <= end else []

    dates = []
    n = 0
    while True:
        due = _occurrence(reminder.due_date, reminder.frequency, n)
        if due > end:
            break
        if due >= start:
            dates.append(due)
        n += 1
    return dates


def mark_paid(reminder: PaymentReminder, paid_on: date) -> Optional[PaymentReminder]:
    """
    Mark a reminder as paid.

    Mutates the given reminder. For recurring reminders returns a fresh,
    unpaid reminder for the next occurrence (with an empty reminder_id for
    the caller to assign); otherwise returns None.
    """
    reminder.is_paid = True
    reminder.paid_date = paid_on

    upcoming = next_due_date(reminder)
    if upcoming is None:
        return None
    return replace(reminder, reminder_id="", due_date=upcoming, is_paid=False, paid_date=None)


def mark_unpaid(reminder: PaymentReminder) -> None:
    reminder.is_paid = False
    reminder.paid_date = None


def is_past_due(reminder: PaymentReminder, today: Optional[date] = None) -> bool:
    """Unpaid and due before today"""
    today = today or date.today()
    return not reminder.is_paid and reminder.due_date < today


def days_until_due(reminder: PaymentReminder, today: Optional[date] = None) -> int:
    """Negative once overdue"""
    return days_between(today or date.today(), reminder.due_date)


def default_due_date(start: Optional[date] = None, days: int = DEFAULT_DUE_DAYS) -> date:
    return add_days(start or date.today(), days)


def filter_reminders(
    reminders: Iterable[PaymentReminder],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    is_paid: Optional[bool] = None,
) -> List[PaymentReminder]:
    """Reminders within the optional date bounds and paid state, sorted by due date"""
    selected = [
        r
        for r in reminders
        if (start_date is None or r.due_date >= start_date)
        and (end_date is None or r.due_date <= end_date)
        and (is_paid is None or r.is_paid == is_paid)
    ]
    return sorted(selected, key=lambda r: r.due_date)


def filter_transactions(
    transactions: Iterable[Transaction], criteria: TransactionFilter
) -> List[Transaction]:
    """Transactions matching the filter, newest first"""
    selected = [
        t
        for t in transactions
        if (criteria.start_date is None or t.date >= criteria.start_date)
        and (criteria.end_date is None or t.date <= criteria.end_date)
        and (criteria.account_id is None or t.account_id == criteria.account_id)
    ]
    return sorted(selected, key=lambda t: t.date, reverse=True)
