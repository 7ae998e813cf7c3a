"""Field and record validation - pure predicates, no side effects

Field predicates are total: any input they cannot judge (wrong type, None,
NaN) is simply invalid and yields False. Callers treat False as "reject".

Record-level checks collect every failing field as a ValidationIssue so a
caller can report them all at once; an empty list means the record is valid.
"""

import math
import re
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from numbers import Real
from typing import List, Optional

from finance_tracker.domain.loans import MAX_TERM_MONTHS
from finance_tracker.domain.models import ValidationIssue
from finance_tracker.schemas import (
    AccountCreate,
    LoanCreate,
    PaymentReminderCreate,
    TransactionCreate,
    UserRegistration,
)
from finance_tracker.utils.format_utils import to_cents

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

PASSWORD_MIN_LENGTH = 8
PASSWORD_SPECIAL_CHARS = "!@#$%^&*"

ACCOUNT_NAME_MAX_LENGTH = 50


def validate_email(email) -> bool:
    """local@domain.tld: no whitespace, one @, at least one dot after it"""
    if not isinstance(email, str):
        return False
    return EMAIL_PATTERN.fullmatch(email) is not None


def validate_password(password) -> bool:
    """
    Password strength check.

    Requires at least 8 characters with one uppercase letter, one lowercase
    letter, one digit and one symbol from PASSWORD_SPECIAL_CHARS.
    """
    if not isinstance(password, str) or len(password) < PASSWORD_MIN_LENGTH:
        return False
    has_upper = any("A" <= c <= "Z" for c in password)
    has_lower = any("a" <= c <= "z" for c in password)
    has_digit = any("0" <= c <= "9" for c in password)
    has_special = any(c in PASSWORD_SPECIAL_CHARS for c in password)
    return has_upper and has_lower and has_digit and has_special


def validate_account_name(account_name) -> bool:
    """Name length must be between 1 and 50 characters"""
    if not isinstance(account_name, str):
        return False
    return 0 < len(account_name) <= ACCOUNT_NAME_MAX_LENGTH


def validate_transaction_amount(amount) -> bool:
    """Amount must be a finite number greater than zero"""
    if isinstance(amount, bool):
        return False
    if isinstance(amount, Decimal):
        return amount.is_finite() and amount > 0
    if isinstance(amount, int):
        return amount > 0
    if isinstance(amount, Real):
        try:
            return math.isfinite(amount) and amount > 0
        except OverflowError:
            # exact rationals beyond float range are still finite
            return amount > 0
    return False


def validate_payment_reminder_date(due, now: Optional[datetime] = None) -> bool:
    """
    Due date must be strictly after the current time.

    Accepts a datetime (aware values are compared in UTC, naive ones against
    local time), a date (must be later than today) or epoch seconds. Epoch
    seconds outside the range datetime can represent are invalid.

    Args:
        due: Proposed due date
        now: Override for the current time (default: clock at call)
    """
    if isinstance(due, bool):
        return False

    if isinstance(due, Real):
        try:
            seconds = due if isinstance(due, int) else float(due)
            due = datetime.fromtimestamp(seconds, timezone.utc)
        except (OverflowError, ValueError, OSError):
            return False
        current = now or datetime.now(timezone.utc)
        if current.tzinfo is None:
            current = current.astimezone(timezone.utc)
        return due > current

    if isinstance(due, datetime):
        if due.tzinfo is not None:
            current = now or datetime.now(timezone.utc)
            if current.tzinfo is None:
                current = current.astimezone(timezone.utc)
            return due > current
        current = now or datetime.now()
        if current.tzinfo is not None:
            current = current.astimezone().replace(tzinfo=None)
        return due > current

    if isinstance(due, date):
        today = (now or datetime.now()).date()
        return due > today

    return False


def _amount_issue(field: str, label: str, amount) -> Optional[ValidationIssue]:
    """Amount must be positive and still at least one cent once stored as cents"""
    if not validate_transaction_amount(amount):
        return ValidationIssue(field, f"{label} must be a positive number")
    try:
        cents = to_cents(amount)
    except InvalidOperation:
        return ValidationIssue(field, f"{label} is too large")
    if cents <= 0:
        return ValidationIssue(field, f"{label} must be at least 0.01")
    return None


def user_issues(registration: UserRegistration) -> List[ValidationIssue]:
    """Check a user registration payload"""
    issues = []
    if not validate_email(registration.email):
        issues.append(ValidationIssue("email", "Invalid email address"))
    if not validate_password(registration.password):
        issues.append(
            ValidationIssue(
                "password",
                "Password must be at least 8 characters with upper, lower, digit and one of !@#$%^&*",
            )
        )
    return issues


def account_issues(account: AccountCreate) -> List[ValidationIssue]:
    """Check an account payload"""
    issues = []
    if not validate_account_name(account.name.strip()):
        issues.append(ValidationIssue("name", "Account name must be 1-50 characters"))
    try:
        to_cents(account.balance)
    except InvalidOperation:
        issues.append(ValidationIssue("balance", "Balance is too large"))
    if account.credit_limit is not None:
        issue = _amount_issue("credit_limit", "Credit limit", account.credit_limit)
        if issue:
            issues.append(issue)
    if account.account_number is not None and not account.account_number.strip():
        issues.append(ValidationIssue("account_number", "Account number cannot be blank"))
    return issues


def transaction_issues(transaction: TransactionCreate) -> List[ValidationIssue]:
    """Check a transaction payload"""
    issues = []
    issue = _amount_issue("amount", "Amount", transaction.amount)
    if issue:
        issues.append(issue)
    if not transaction.category.strip():
        issues.append(ValidationIssue("category", "Category is required"))
    return issues


def payment_reminder_issues(
    reminder: PaymentReminderCreate, now: Optional[datetime] = None
) -> List[ValidationIssue]:
    """Check a payment reminder payload"""
    issues = []
    if not reminder.title.strip():
        issues.append(ValidationIssue("title", "Title is required"))
    issue = _amount_issue("amount", "Amount", reminder.amount)
    if issue:
        issues.append(issue)
    if not validate_payment_reminder_date(reminder.due_date, now=now):
        issues.append(ValidationIssue("due_date", "Due date must be in the future"))
    if reminder.recurring and reminder.frequency is None:
        issues.append(ValidationIssue("frequency", "Recurring reminders need a frequency"))
    return issues


def loan_issues(loan: LoanCreate) -> List[ValidationIssue]:
    """Check a loan payload"""
    issues = []
    if not validate_account_name(loan.name.strip()):
        issues.append(ValidationIssue("name", "Loan name must be 1-50 characters"))
    issue = _amount_issue("principal", "Principal", loan.principal)
    if issue:
        issues.append(issue)
    if not (loan.interest_rate.is_finite() and 0 <= loan.interest_rate <= 1):
        issues.append(ValidationIssue("interest_rate", "Interest rate must be a fraction between 0 and 1"))
    if not 0 < loan.term_months <= MAX_TERM_MONTHS:
        issues.append(ValidationIssue("term_months", f"Term must be between 1 and {MAX_TERM_MONTHS} months"))
    return issues
