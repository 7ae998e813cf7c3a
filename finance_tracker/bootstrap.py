"""Startup wiring: logging, encryption config and record intake"""

from finance_tracker.config import Settings, settings as default_settings
from finance_tracker.infrastructure.observability.logging import setup_logging
from finance_tracker.security.encryption import EncryptionConfig, EncryptionService
from finance_tracker.services.intake import RecordIntake


def create_encryption_service(settings: Settings | None = None) -> EncryptionService:
    """
    Build the encryption service from configuration.

    Raises:
        CryptoError: If ENCRYPTION_KEY is missing or malformed
    """
    settings = settings or default_settings
    return EncryptionService(EncryptionConfig.from_settings(settings))


def create_intake(settings: Settings | None = None, configure_logging: bool = True) -> RecordIntake:
    """Create and configure the record intake used by the application layer"""
    settings = settings or default_settings

    if configure_logging:
        setup_logging(settings.log_level)

    return RecordIntake(create_encryption_service(settings), settings)
