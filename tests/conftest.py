"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime
from finance_tracker.config import Settings
from finance_tracker.domain.models import PaymentReminder, Transaction
from finance_tracker.security.encryption import EncryptionConfig, EncryptionService
from finance_tracker.services.intake import RecordIntake


# Fixed test keys (never used outside tests)
TEST_KEY = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"
OTHER_TEST_KEY = "ffeeddccbbaa99887766554433221100ffeeddccbbaa99887766554433221100"


@pytest.fixture
def key_material() -> str:
    return TEST_KEY


@pytest.fixture
def other_key_material() -> str:
    return OTHER_TEST_KEY


@pytest.fixture
def now() -> datetime:
    """Pinned clock for date-sensitive checks"""
    return datetime(2026, 3, 1, 9, 0, 0)


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the process environment and .env"""
    return Settings(
        _env_file=None,
        encryption_key=TEST_KEY,
        encryption_legacy_fixed_iv=False,
        max_account_limit=3,
        reminder_default_due_days=7,
        default_currency="USD",
    )


@pytest.fixture
def encryption_service() -> EncryptionService:
    return EncryptionService(EncryptionConfig.from_key_material(TEST_KEY))


@pytest.fixture
def legacy_encryption_service() -> EncryptionService:
    """Service using the inherited fixed zero IV"""
    return EncryptionService(EncryptionConfig.from_key_material(TEST_KEY, fixed_iv=True))


@pytest.fixture
def intake(encryption_service: EncryptionService, settings: Settings) -> RecordIntake:
    return RecordIntake(encryption_service, settings)


@pytest.fixture
def sample_transactions() -> list[Transaction]:
    """Mixed transactions across two accounts in early 2026"""
    return [
        Transaction(
            transaction_id=f"tx_{i}",
            account_id="acc_checking" if i % 2 == 0 else "acc_savings",
            amount_cents=1000 * (i + 1),
            type="expense" if i % 3 else "income",
            category="groceries" if i % 3 else "salary",
            description="Transaction",
            date=date(2026, 1, 1 + i * 5),
        )
        for i in range(6)
    ]


@pytest.fixture
def monthly_rent() -> PaymentReminder:
    """Recurring rent anchored on a month end"""
    return PaymentReminder(
        reminder_id="rem_rent",
        account_id="acc_checking",
        title="Rent",
        amount_cents=150000,
        due_date=date(2026, 1, 31),
        recurring=True,
        frequency="monthly",
    )
