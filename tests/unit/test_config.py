"""Unit tests for environment configuration and startup wiring"""

import pytest
from finance_tracker.bootstrap import create_encryption_service, create_intake
from finance_tracker.config import Settings
from finance_tracker.domain.exceptions import CryptoError
from finance_tracker.services.intake import RecordIntake


def test_settings_defaults(monkeypatch):
    """Test defaults when nothing is configured"""
    for var in ("ENCRYPTION_KEY", "ENCRYPTION_LEGACY_FIXED_IV", "MAX_ACCOUNT_LIMIT", "SERVICE_NAME"):
        monkeypatch.delenv(var, raising=False)

    settings = Settings(_env_file=None)

    assert settings.encryption_key is None
    assert settings.encryption_legacy_fixed_iv is False
    assert settings.service_name == "finance-tracker"
    assert settings.default_currency == "USD"
    assert settings.max_account_limit == 10
    assert settings.reminder_default_due_days == 7


def test_settings_from_environment(monkeypatch, key_material: str):
    """Test values are read from environment variables"""
    monkeypatch.setenv("ENCRYPTION_KEY", key_material)
    monkeypatch.setenv("ENCRYPTION_LEGACY_FIXED_IV", "true")
    monkeypatch.setenv("MAX_ACCOUNT_LIMIT", "3")

    settings = Settings(_env_file=None)

    assert settings.encryption_key == key_material
    assert settings.encryption_legacy_fixed_iv is True
    assert settings.max_account_limit == 3


def test_create_encryption_service(settings: Settings):
    """Test the service is built from injected settings"""
    service = create_encryption_service(settings)
    assert service.decrypt(service.encrypt("wired")) == "wired"
    assert service.config.fixed_iv is False


def test_create_intake_without_key():
    """Test startup fails loudly without ENCRYPTION_KEY"""
    with pytest.raises(CryptoError):
        create_intake(Settings(_env_file=None, encryption_key=None), configure_logging=False)


def test_create_intake(settings: Settings):
    intake = create_intake(settings, configure_logging=False)
    assert isinstance(intake, RecordIntake)
    assert intake.settings is settings
