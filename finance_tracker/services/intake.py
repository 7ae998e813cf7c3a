"""Record intake - the boundary an application calls before persisting records

Flow for every record:
1. Parse the raw payload through its pydantic schema
2. Run the domain validators and collect every issue
3. Reject with InvalidRecordError (logged and counted) or
4. Encrypt sensitive fields, convert amounts to cents and return the domain record
"""

import uuid
from datetime import datetime, time, timezone
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from finance_tracker.config import Settings, settings as default_settings
from finance_tracker.domain.exceptions import AccountLimitExceededError, InvalidRecordError
from finance_tracker.domain.loans import create_loan as new_loan
from finance_tracker.domain.models import Account, Loan, PaymentReminder, Transaction, User, ValidationIssue
from finance_tracker.domain.reminders import default_due_date
from finance_tracker.domain.validation import (
    account_issues,
    loan_issues,
    payment_reminder_issues,
    transaction_issues,
    user_issues,
)
from finance_tracker.infrastructure.observability.logging import (
    log_record_accepted,
    log_record_rejected,
    logger,
)
from finance_tracker.infrastructure.observability.metrics import record_acceptance, record_rejection
from finance_tracker.schemas import (
    AccountCreate,
    LoanCreate,
    PaymentReminderCreate,
    TransactionCreate,
    UserRegistration,
)
from finance_tracker.security.encryption import EncryptionService
from finance_tracker.utils.format_utils import to_cents

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def _new_id() -> str:
    return str(uuid.uuid4())


class RecordIntake:
    """Validates raw payloads and turns them into domain records"""

    def __init__(self, encryption: EncryptionService, settings: Settings | None = None):
        self.encryption = encryption
        self.settings = settings or default_settings

    def _reject(self, record: str, issues: List[ValidationIssue], context: Dict[str, Any] | None = None):
        record_rejection(record, issues)
        log_record_rejected(record, issues, context)
        raise InvalidRecordError(record, issues)

    def _accept(self, record: str, record_id: str, context: Dict[str, Any] | None = None) -> None:
        record_acceptance(record)
        log_record_accepted(record, record_id, context)

    def _parse(self, schema: Type[SchemaT], record: str, payload: Dict[str, Any]) -> SchemaT:
        try:
            return schema.model_validate(payload)
        except ValidationError as e:
            issues = [
                ValidationIssue(".".join(str(part) for part in err["loc"]) or record, err["msg"])
                for err in e.errors()
            ]
            self._reject(record, issues)

    def register_user(self, payload: Dict[str, Any]) -> User:
        """
        Validate a registration payload.

        The password is checked for strength and then discarded; hashing and
        storing credentials belong to the auth layer.

        Raises:
            InvalidRecordError: On malformed email or weak password
        """
        registration = self._parse(UserRegistration, "user", payload)
        issues = user_issues(registration)
        if issues:
            self._reject("user", issues)

        user = User(
            user_id=_new_id(),
            name=registration.name.strip(),
            email=registration.email.strip().lower(),
            created_at=datetime.now(timezone.utc),
        )
        self._accept("user", user.user_id)
        return user

    def create_account(self, user_id: str, payload: Dict[str, Any], existing_count: int = 0) -> Account:
        """
        Validate an account payload and encrypt its account number.

        Args:
            user_id: Owner of the new account
            payload: Raw account fields (amounts in currency units)
            existing_count: Accounts the user already holds

        Raises:
            AccountLimitExceededError: If the user is at max_account_limit
            InvalidRecordError: On any invalid field
            CryptoError: If the account number cannot be encrypted
        """
        if existing_count >= self.settings.max_account_limit:
            logger.warning(
                "Account limit reached",
                extra={"step": "validation", "record": "account", "user_id": user_id},
            )
            raise AccountLimitExceededError(
                f"User already has {existing_count} accounts (limit {self.settings.max_account_limit})"
            )

        account = self._parse(AccountCreate, "account", payload)
        issues = account_issues(account)
        if issues:
            self._reject("account", issues, {"user_id": user_id})

        encrypted_number = None
        if account.account_number is not None:
            encrypted_number = self.encryption.encrypt(account.account_number.strip())

        record = Account(
            account_id=_new_id(),
            user_id=user_id,
            name=account.name.strip(),
            account_type=account.account_type,
            institution=account.institution.strip(),
            balance_cents=to_cents(account.balance),
            currency=(account.currency or self.settings.default_currency).upper(),
            credit_limit_cents=to_cents(account.credit_limit) if account.credit_limit is not None else None,
            account_number_encrypted=encrypted_number,
        )
        self._accept("account", record.account_id, {"user_id": user_id})
        return record

    def reveal_account_number(self, account: Account) -> Optional[str]:
        """Decrypt the stored account number (None if the account has none)"""
        if account.account_number_encrypted is None:
            return None
        return self.encryption.decrypt(account.account_number_encrypted)

    def create_transaction(self, payload: Dict[str, Any]) -> Transaction:
        """
        Validate a transaction payload and convert its amount to cents.

        Raises:
            InvalidRecordError: On any invalid field, including amounts that
                round to zero cents
        """
        transaction = self._parse(TransactionCreate, "transaction", payload)
        issues = transaction_issues(transaction)
        if issues:
            self._reject("transaction", issues, {"account_id": transaction.account_id})

        record = Transaction(
            transaction_id=_new_id(),
            account_id=transaction.account_id,
            amount_cents=to_cents(transaction.amount),
            type=transaction.type,
            category=transaction.category.strip(),
            description=transaction.description.strip(),
            date=transaction.date,
            merchant=transaction.merchant,
            tags=list(transaction.tags),
        )
        self._accept("transaction", record.transaction_id, {"account_id": record.account_id})
        return record

    def create_payment_reminder(self, payload: Dict[str, Any], now: datetime | None = None) -> PaymentReminder:
        """
        Validate a reminder payload; the due date must lie in the future.

        Raises:
            InvalidRecordError: On any invalid field
        """
        reminder = self._parse(PaymentReminderCreate, "payment_reminder", payload)
        if reminder.due_date is None:
            today = (now or datetime.now()).date()
            due = default_due_date(today, self.settings.reminder_default_due_days)
            reminder = reminder.model_copy(update={"due_date": datetime.combine(due, time.min)})

        issues = payment_reminder_issues(reminder, now=now)
        if issues:
            self._reject("payment_reminder", issues, {"account_id": reminder.account_id})

        record = PaymentReminder(
            reminder_id=_new_id(),
            account_id=reminder.account_id,
            title=reminder.title.strip(),
            amount_cents=to_cents(reminder.amount),
            due_date=reminder.due_date.date(),
            recurring=reminder.recurring,
            frequency=reminder.frequency,
            notes=reminder.notes,
        )
        self._accept("payment_reminder", record.reminder_id, {"account_id": record.account_id})
        return record

    def create_loan(self, user_id: str, payload: Dict[str, Any]) -> Loan:
        """
        Validate a loan payload and compute its standard monthly payment.

        Raises:
            InvalidRecordError: On any invalid field
        """
        loan = self._parse(LoanCreate, "loan", payload)
        issues = loan_issues(loan)
        if issues:
            self._reject("loan", issues, {"user_id": user_id})

        record = new_loan(
            loan_id=_new_id(),
            user_id=user_id,
            name=loan.name.strip(),
            loan_type=loan.loan_type,
            principal_cents=to_cents(loan.principal),
            annual_rate=loan.interest_rate,
            term_months=loan.term_months,
            start_date=loan.start_date,
            lender=loan.lender,
            notes=loan.notes,
        )
        self._accept("loan", record.loan_id, {"user_id": user_id})
        return record
