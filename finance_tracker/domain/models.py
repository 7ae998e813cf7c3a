"""Domain models - pure Python dataclasses representing personal-finance records"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional


@dataclass
class User:
    """Registered user (credentials are never held here)"""

    user_id: str
    name: str
    email: str
    created_at: datetime


@dataclass
class Account:
    """Financial account owned by a user"""

    account_id: str
    user_id: str
    name: str
    account_type: str  # checking | savings | credit_card | investment | loan
    institution: str
    balance_cents: int
    currency: str = "USD"
    credit_limit_cents: Optional[int] = None
    is_active: bool = True
    account_number_encrypted: Optional[str] = None


@dataclass
class Transaction:
    """Income or expense posted against an account"""

    transaction_id: str
    account_id: str
    amount_cents: int
    type: str  # "income" or "expense"
    category: str
    description: str
    date: date
    merchant: Optional[str] = None
    tags: List[str] = field(default_factory=list)


@dataclass
class PaymentReminder:
    """Upcoming bill or payment, optionally recurring"""

    reminder_id: str
    account_id: str
    title: str
    amount_cents: int
    due_date: date
    recurring: bool = False
    frequency: Optional[str] = None  # weekly | biweekly | monthly | quarterly | yearly
    is_paid: bool = False
    paid_date: Optional[date] = None
    notes: Optional[str] = None


@dataclass
class TransactionFilter:
    """Optional bounds for listing transactions"""

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    account_id: Optional[str] = None


@dataclass
class ValidationIssue:
    """Single rejected field"""

    field: str
    message: str


@dataclass
class Loan:
    """Amortizing loan with running repayment totals"""

    loan_id: str
    user_id: str
    name: str
    loan_type: str  # mortgage | auto | personal | student | other
    principal_cents: int
    interest_rate: Decimal  # annual, as a fraction (0.05 = 5%)
    term_months: int
    start_date: date
    monthly_payment_cents: int
    remaining_balance_cents: int
    next_payment_date: date
    total_paid_cents: int = 0
    interest_paid_cents: int = 0
    status: str = "active"  # active | paid_off | deferred | default
    lender: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class AmortizationEntry:
    """One scheduled loan payment"""

    payment_number: int
    payment_date: date
    payment_cents: int
    principal_cents: int
    interest_cents: int
    remaining_balance_cents: int


@dataclass
class ExtraPaymentImpact:
    """Effect of paying a fixed extra amount every month"""

    months_saved: int
    interest_saved_cents: int
    new_payoff_months: int
