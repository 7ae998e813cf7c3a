"""Configuration management using Pydantic Settings"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Encryption (no default key: a missing key is an error, not a fallback)
    encryption_key: Optional[str] = None
    encryption_legacy_fixed_iv: bool = False

    # Service
    service_name: str = "finance-tracker"
    log_level: str = "INFO"

    # Records
    default_currency: str = "USD"
    max_account_limit: int = 10
    reminder_default_due_days: int = 7


settings = Settings()
