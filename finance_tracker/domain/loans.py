"""Loan amortization and repayment tracking

Amounts are integer cents. Rates are annual fractions (Decimal("0.05") = 5%)
charged monthly at rate / 12; each month's interest is rounded half-up to
the cent, so schedules and recorded payments agree to the cent.
"""

from dataclasses import replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from finance_tracker.domain.exceptions import InvalidLoanError
from finance_tracker.domain.models import AmortizationEntry, ExtraPaymentImpact, Loan
from finance_tracker.utils.date_utils import add_months

MAX_TERM_MONTHS = 1200  # 100 years

LOAN_TYPES = ("mortgage", "auto", "personal", "student", "other")


def _annual_rate(annual_rate) -> Decimal:
    return Decimal(str(annual_rate))


def _round_cents(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _monthly_interest(balance_cents: int, monthly_rate: Decimal) -> int:
    return _round_cents(balance_cents * monthly_rate)


def _check_terms(principal_cents: int, annual_rate, term_months: int) -> Decimal:
    """Validate loan terms and return the monthly rate"""
    if principal_cents <= 0:
        raise InvalidLoanError("Principal must be positive")
    if not 0 < term_months <= MAX_TERM_MONTHS:
        raise InvalidLoanError(f"Term must be between 1 and {MAX_TERM_MONTHS} months")
    rate = _annual_rate(annual_rate)
    if not rate.is_finite() or rate < 0:
        raise InvalidLoanError("Interest rate must be a non-negative number")
    return rate / 12


def calculate_monthly_payment(principal_cents: int, annual_rate, term_months: int) -> int:
    """
    Fixed monthly payment that retires the loan over its term.

    Standard annuity formula M = P * i * (1 + i)^n / ((1 + i)^n - 1) with
    monthly rate i; an interest-free loan is split evenly.

    Example:
        $200,000 at 5% over 360 months -> 107364 cents ($1,073.64)

    Raises:
        InvalidLoanError: On non-positive principal, negative rate or a term
            outside 1-1200 months
    """
    monthly_rate = _check_terms(principal_cents, annual_rate, term_months)
    if monthly_rate == 0:
        return _round_cents(Decimal(principal_cents) / term_months)

    factor = (1 + monthly_rate) ** term_months
    return _round_cents(principal_cents * monthly_rate * factor / (factor - 1))


def generate_amortization_schedule(
    principal_cents: int,
    annual_rate,
    term_months: int,
    start_date: date,
    monthly_payment_cents: Optional[int] = None,
) -> List[AmortizationEntry]:
    """
    Month-by-month split of each payment into interest and principal.

    Requirements:
    - Payment k is due k calendar months after start_date (clamped to month end)
    - Final payment absorbs the rounding remainder so the balance ends at exactly 0
    - A larger payment ends the schedule early, once the balance is cleared

    Args:
        principal_cents: Amount borrowed
        annual_rate: Annual interest rate as a fraction
        term_months: Number of scheduled payments
        start_date: Loan start (first payment is one month later)
        monthly_payment_cents: Override for the regular payment (default: annuity payment)

    Returns:
        List of AmortizationEntry, at most term_months long
    """
    monthly_rate = _check_terms(principal_cents, annual_rate, term_months)
    payment = monthly_payment_cents
    if payment is None:
        payment = calculate_monthly_payment(principal_cents, annual_rate, term_months)
    if payment <= 0:
        raise InvalidLoanError("Monthly payment must be positive")

    schedule = []
    balance = principal_cents
    for number in range(1, term_months + 1):
        interest = _monthly_interest(balance, monthly_rate)
        amount = payment
        if number == term_months or balance + interest <= payment:
            amount = balance + interest

        principal = amount - interest
        balance -= principal
        schedule.append(
            AmortizationEntry(
                payment_number=number,
                payment_date=add_months(start_date, number),
                payment_cents=amount,
                principal_cents=principal,
                interest_cents=interest,
                remaining_balance_cents=balance,
            )
        )
        if balance == 0:
            break

    return schedule


def calculate_total_interest(principal_cents: int, annual_rate, term_months: int) -> int:
    """Interest paid over the full schedule at the standard payment"""
    schedule = generate_amortization_schedule(principal_cents, annual_rate, term_months, date.today())
    return sum(entry.interest_cents for entry in schedule)


def calculate_remaining_balance(principal_cents: int, annual_rate, term_months: int, payments_made: int) -> int:
    """Scheduled balance after `payments_made` regular payments"""
    if payments_made <= 0:
        return principal_cents
    if payments_made >= term_months:
        return 0

    schedule = generate_amortization_schedule(principal_cents, annual_rate, term_months, date.today())
    if payments_made > len(schedule):
        return 0
    return schedule[payments_made - 1].remaining_balance_cents


def get_next_payment_date(start_date: date, payments_made: int) -> date:
    return add_months(start_date, payments_made + 1)


def get_payments_made(start_date: date, current_date: date) -> int:
    """Whole calendar months elapsed since start_date (never negative)"""
    months = (current_date.year - start_date.year) * 12 + current_date.month - start_date.month
    return max(0, months)


def calculate_payoff_date(
    remaining_balance_cents: int,
    monthly_payment_cents: int,
    annual_rate,
    current_date: date,
) -> date:
    """
    Date the last payment falls due if `monthly_payment_cents` is paid every month.

    Raises:
        InvalidLoanError: If the payment never covers the monthly interest, or
            the loan would run past MAX_TERM_MONTHS
    """
    if remaining_balance_cents <= 0:
        return current_date

    monthly_rate = _annual_rate(annual_rate) / 12
    balance = remaining_balance_cents
    months = 0
    while balance > 0:
        interest = _monthly_interest(balance, monthly_rate)
        if monthly_payment_cents <= interest:
            raise InvalidLoanError("Monthly payment does not cover the interest")
        balance = max(0, balance + interest - monthly_payment_cents)
        months += 1
        if months > MAX_TERM_MONTHS:
            raise InvalidLoanError(f"Loan would not be paid off within {MAX_TERM_MONTHS} months")

    return add_months(current_date, months)


def calculate_extra_payment_impact(
    principal_cents: int, annual_rate, term_months: int, extra_payment_cents: int
) -> ExtraPaymentImpact:
    """
    Compare the standard schedule against paying a fixed extra amount monthly.

    Example:
        $200,000 at 5% over 360 months, +$200/month -> pays off years early
    """
    if extra_payment_cents < 0:
        raise InvalidLoanError("Extra payment cannot be negative")

    start = date.today()
    payment = calculate_monthly_payment(principal_cents, annual_rate, term_months)
    standard = generate_amortization_schedule(principal_cents, annual_rate, term_months, start)
    accelerated = generate_amortization_schedule(
        principal_cents, annual_rate, term_months, start, monthly_payment_cents=payment + extra_payment_cents
    )

    standard_interest = sum(entry.interest_cents for entry in standard)
    accelerated_interest = sum(entry.interest_cents for entry in accelerated)
    return ExtraPaymentImpact(
        months_saved=len(standard) - len(accelerated),
        interest_saved_cents=standard_interest - accelerated_interest,
        new_payoff_months=len(accelerated),
    )


def create_loan(
    loan_id: str,
    user_id: str,
    name: str,
    loan_type: str,
    principal_cents: int,
    annual_rate,
    term_months: int,
    start_date: date,
    lender: Optional[str] = None,
    notes: Optional[str] = None,
) -> Loan:
    """New active loan with its standard payment and first due date"""
    if loan_type not in LOAN_TYPES:
        raise InvalidLoanError(f"Unknown loan type: {loan_type}")

    return Loan(
        loan_id=loan_id,
        user_id=user_id,
        name=name,
        loan_type=loan_type,
        principal_cents=principal_cents,
        interest_rate=_annual_rate(annual_rate),
        term_months=term_months,
        start_date=start_date,
        monthly_payment_cents=calculate_monthly_payment(principal_cents, annual_rate, term_months),
        remaining_balance_cents=principal_cents,
        next_payment_date=get_next_payment_date(start_date, 0),
        lender=lender,
        notes=notes,
    )


def record_payment(loan: Loan, payment_cents: int) -> Loan:
    """
    Apply one payment: a month's interest first, the rest to principal.

    Returns a new Loan; the input is left unchanged. A payment larger than
    balance plus interest is capped at that amount and closes the loan.
    A payment below the interest grows the balance.

    Raises:
        InvalidLoanError: If the payment is not positive or the loan is already paid off
    """
    if payment_cents <= 0:
        raise InvalidLoanError("Payment must be positive")
    if loan.status == "paid_off":
        raise InvalidLoanError("Loan is already paid off")

    balance = loan.remaining_balance_cents
    interest = _monthly_interest(balance, loan.interest_rate / 12)
    applied = min(payment_cents, balance + interest)
    new_balance = balance + interest - applied

    payments_made = get_payments_made(loan.start_date, loan.next_payment_date)
    return replace(
        loan,
        remaining_balance_cents=new_balance,
        total_paid_cents=loan.total_paid_cents + applied,
        interest_paid_cents=loan.interest_paid_cents + min(interest, applied),
        status="paid_off" if new_balance == 0 else loan.status,
        next_payment_date=get_next_payment_date(loan.start_date, payments_made),
    )
