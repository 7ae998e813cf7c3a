"""Integration tests for record intake (validation + encryption + logging + metrics)"""

import json
import logging
import pytest
from datetime import date, datetime
from prometheus_client import REGISTRY
from finance_tracker.domain.exceptions import AccountLimitExceededError, InvalidRecordError
from finance_tracker.infrastructure.observability.logging import setup_logging
from finance_tracker.services.intake import RecordIntake


def _sample(name: str, labels: dict) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.fixture
def account_payload() -> dict:
    return {
        "name": "  Everyday Checking ",
        "account_type": "checking",
        "institution": "First Bank",
        "balance": "1234.56",
        "account_number": "9876543210",
    }


def test_register_user(intake: RecordIntake):
    """Test valid registration returns a user without the password"""
    user = intake.register_user({"name": "Ann", "email": "Ann@Example.com", "password": "Abcd123!"})

    assert user.email == "ann@example.com"
    assert user.name == "Ann"
    assert user.user_id
    assert not hasattr(user, "password")


def test_register_user_rejects_all_issues(intake: RecordIntake):
    """Test every failing field is reported together"""
    with pytest.raises(InvalidRecordError) as exc_info:
        intake.register_user({"name": "Ann", "email": "ann@", "password": "abcd123"})

    assert exc_info.value.record == "user"
    assert [issue.field for issue in exc_info.value.issues] == ["email", "password"]


def test_register_user_missing_field(intake: RecordIntake):
    """Test schema errors surface as InvalidRecordError"""
    with pytest.raises(InvalidRecordError) as exc_info:
        intake.register_user({"email": "ann@example.com", "password": "Abcd123!"})

    assert [issue.field for issue in exc_info.value.issues] == ["name"]


def test_create_account_encrypts_account_number(intake: RecordIntake, account_payload: dict):
    """Test the account number is stored encrypted and can be revealed"""
    account = intake.create_account("user_1", account_payload)

    assert account.name == "Everyday Checking"
    assert account.balance_cents == 123456
    assert account.currency == "USD"
    assert account.account_number_encrypted is not None
    assert "9876543210" not in account.account_number_encrypted
    assert intake.reveal_account_number(account) == "9876543210"


def test_create_account_without_account_number(intake: RecordIntake):
    account = intake.create_account(
        "user_1",
        {"name": "Card", "account_type": "credit_card", "institution": "Bank", "credit_limit": "2500", "currency": "eur"},
    )

    assert account.account_number_encrypted is None
    assert intake.reveal_account_number(account) is None
    assert account.credit_limit_cents == 250000
    assert account.currency == "EUR"


def test_create_account_rejects_long_name(intake: RecordIntake, account_payload: dict):
    """Test names over 50 characters are rejected"""
    account_payload["name"] = "x" * 51
    with pytest.raises(InvalidRecordError) as exc_info:
        intake.create_account("user_1", account_payload)

    assert [issue.field for issue in exc_info.value.issues] == ["name"]


def test_create_account_rejects_unknown_type(intake: RecordIntake, account_payload: dict):
    account_payload["account_type"] = "crypto_wallet"
    with pytest.raises(InvalidRecordError) as exc_info:
        intake.create_account("user_1", account_payload)

    assert [issue.field for issue in exc_info.value.issues] == ["account_type"]


def test_create_account_limit(intake: RecordIntake, account_payload: dict):
    """Test the per-user account cap from settings (3 in tests)"""
    intake.create_account("user_1", account_payload, existing_count=2)

    with pytest.raises(AccountLimitExceededError):
        intake.create_account("user_1", account_payload, existing_count=3)


def test_create_transaction(intake: RecordIntake):
    transaction = intake.create_transaction(
        {
            "account_id": "acc_1",
            "type": "expense",
            "category": "groceries",
            "amount": "42.10",
            "description": " Weekly shop ",
            "date": "2026-02-14",
            "tags": ["food"],
        }
    )

    assert transaction.amount_cents == 4210
    assert transaction.date == date(2026, 2, 14)
    assert transaction.description == "Weekly shop"
    assert transaction.tags == ["food"]


def test_create_transaction_rejects_zero_amount(intake: RecordIntake):
    """Test zero amounts are rejected and counted per field"""
    before = _sample("finance_validation_rejections_total", {"record": "transaction", "field": "amount"})

    with pytest.raises(InvalidRecordError):
        intake.create_transaction(
            {"account_id": "acc_1", "type": "income", "category": "salary", "amount": 0, "date": "2026-02-14"}
        )

    after = _sample("finance_validation_rejections_total", {"record": "transaction", "field": "amount"})
    assert after == before + 1


def test_create_transaction_rejects_sub_cent_amount(intake: RecordIntake):
    """Test an amount that would be stored as zero cents is rejected"""
    with pytest.raises(InvalidRecordError) as exc_info:
        intake.create_transaction(
            {"account_id": "acc_1", "type": "expense", "category": "fees", "amount": "0.004", "date": "2026-02-14"}
        )

    assert [issue.field for issue in exc_info.value.issues] == ["amount"]
    assert exc_info.value.issues[0].message == "Amount must be at least 0.01"


def test_create_payment_reminder_rejects_sub_cent_amount(intake: RecordIntake, now: datetime):
    with pytest.raises(InvalidRecordError) as exc_info:
        intake.create_payment_reminder(
            {"account_id": "acc_1", "title": "Fee", "amount": "0.004", "due_date": "2026-03-31T00:00:00"},
            now=now,
        )

    assert [issue.field for issue in exc_info.value.issues] == ["amount"]


def test_create_account_rejects_sub_cent_credit_limit(intake: RecordIntake):
    with pytest.raises(InvalidRecordError) as exc_info:
        intake.create_account(
            "user_1",
            {"name": "Card", "account_type": "credit_card", "institution": "Bank", "credit_limit": "0.004"},
        )

    assert [issue.field for issue in exc_info.value.issues] == ["credit_limit"]


def test_create_payment_reminder(intake: RecordIntake, now: datetime):
    reminder = intake.create_payment_reminder(
        {
            "account_id": "acc_1",
            "title": "Rent",
            "amount": "1500",
            "due_date": "2026-03-31T00:00:00",
            "recurring": True,
            "frequency": "monthly",
        },
        now=now,
    )

    assert reminder.due_date == date(2026, 3, 31)
    assert reminder.amount_cents == 150000
    assert reminder.frequency == "monthly"
    assert reminder.is_paid is False


def test_create_payment_reminder_default_due_date(intake: RecordIntake, now: datetime):
    """Test reminders without a due date get the configured lead time"""
    reminder = intake.create_payment_reminder(
        {"account_id": "acc_1", "title": "Phone", "amount": "45"},
        now=now,
    )

    assert reminder.due_date == date(2026, 3, 8)


def test_create_payment_reminder_rejects_past_date(intake: RecordIntake, now: datetime):
    """Test due dates at or before now are rejected"""
    with pytest.raises(InvalidRecordError) as exc_info:
        intake.create_payment_reminder(
            {"account_id": "acc_1", "title": "Rent", "amount": "1500", "due_date": "2026-03-01T09:00:00"},
            now=now,
        )

    assert [issue.field for issue in exc_info.value.issues] == ["due_date"]


def test_accepted_records_are_counted(intake: RecordIntake, account_payload: dict):
    before = _sample("finance_records_accepted_total", {"record": "account"})
    intake.create_account("user_1", account_payload)
    assert _sample("finance_records_accepted_total", {"record": "account"}) == before + 1


def test_rejection_is_logged_without_values(intake: RecordIntake, caplog):
    """Test rejected fields are logged by name only"""
    with caplog.at_level(logging.WARNING):
        with pytest.raises(InvalidRecordError):
            intake.register_user({"name": "Ann", "email": "ann@example.com", "password": "weakpass"})

    record = next(r for r in caplog.records if r.getMessage() == "Record rejected")
    assert record.record == "user"
    assert record.fields == ["password"]
    assert all("weakpass" not in str(value) for value in record.__dict__.values())


def test_account_number_never_logged(intake: RecordIntake, account_payload: dict, caplog):
    with caplog.at_level(logging.DEBUG):
        intake.create_account("user_1", account_payload)

    for record in caplog.records:
        assert all("9876543210" not in str(value) for value in record.__dict__.values())


def test_setup_logging_emits_json(capsys):
    """Test log lines are JSON with service metadata"""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("INFO")
        logging.getLogger("finance_tracker").info("hello", extra={"step": "test"})
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

    line = capsys.readouterr().out.strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["message"] == "hello"
    assert payload["level"] == "INFO"
    assert payload["service"] == "finance-tracker"
    assert payload["step"] == "test"


def test_create_loan(intake: RecordIntake):
    """Test a loan payload becomes an active loan with its standard payment"""
    loan = intake.create_loan(
        "user_1",
        {
            "name": " Car loan ",
            "loan_type": "auto",
            "principal": "10000",
            "interest_rate": "0.06",
            "term_months": 12,
            "start_date": "2025-01-15",
            "lender": "Credit Union",
        },
    )

    assert loan.loan_id
    assert loan.name == "Car loan"
    assert loan.principal_cents == 1000000
    assert loan.monthly_payment_cents == 86066
    assert loan.next_payment_date == date(2025, 2, 15)
    assert loan.status == "active"


def test_create_loan_rejects_all_issues(intake: RecordIntake):
    """Test every invalid loan field is reported together and counted"""
    before = _sample("finance_validation_rejections_total", {"record": "loan", "field": "principal"})

    with pytest.raises(InvalidRecordError) as exc_info:
        intake.create_loan(
            "user_1",
            {
                "name": "",
                "loan_type": "personal",
                "principal": "0.004",
                "interest_rate": "1.5",
                "term_months": 0,
                "start_date": "2025-01-15",
            },
        )

    assert exc_info.value.record == "loan"
    assert [issue.field for issue in exc_info.value.issues] == ["name", "principal", "interest_rate", "term_months"]
    assert _sample("finance_validation_rejections_total", {"record": "loan", "field": "principal"}) == before + 1
