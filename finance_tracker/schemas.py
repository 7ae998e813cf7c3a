"""Pydantic schemas for raw record payloads

Schemas only enforce shape and types. Business rules (name length, positive
amounts, future due dates, password strength) live in domain.validation so
that every rejected field is reported together.
"""

import datetime as dt
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class UserRegistration(BaseModel):
    """Payload for registering a user"""

    name: str = Field(..., min_length=1, description="Display name")
    email: str
    password: str


class AccountCreate(BaseModel):
    """Payload for creating an account"""

    name: str
    account_type: Literal["checking", "savings", "credit_card", "investment", "loan"]
    institution: str = Field(..., min_length=1, description="Bank or provider name")
    balance: Decimal = Decimal("0")
    credit_limit: Optional[Decimal] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    account_number: Optional[str] = None


class TransactionCreate(BaseModel):
    """Payload for recording a transaction"""

    account_id: str = Field(..., min_length=1)
    type: Literal["income", "expense"]
    category: str = Field(..., min_length=1)
    amount: Decimal
    description: str = ""
    date: dt.date
    merchant: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class PaymentReminderCreate(BaseModel):
    """Payload for scheduling a payment reminder"""

    account_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    amount: Decimal
    due_date: Optional[dt.datetime] = None  # defaults to the configured lead time
    recurring: bool = False
    frequency: Optional[Literal["weekly", "biweekly", "monthly", "quarterly", "yearly"]] = None
    notes: Optional[str] = None


class LoanCreate(BaseModel):
    """Payload for tracking a loan"""

    name: str
    loan_type: Literal["mortgage", "auto", "personal", "student", "other"]
    principal: Decimal
    interest_rate: Decimal = Field(..., description="Annual rate as a fraction, 0.05 = 5%")
    term_months: int
    start_date: dt.date
    lender: Optional[str] = None
    notes: Optional[str] = None
