"""Structured JSON logging with sensitive fields masked"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List

from pythonjsonlogger import jsonlogger

from finance_tracker.config import settings
from finance_tracker.domain.models import ValidationIssue
from finance_tracker.security.masking import sanitize_error_message, sanitize_for_logging

logger = logging.getLogger("finance_tracker")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    root.addHandler(handler)


def log_record_rejected(record: str, issues: List[ValidationIssue], context: Dict[str, Any] | None = None) -> None:
    """Log a rejected record with the failing fields (values are never logged)"""
    logger.warning(
        "Record rejected",
        extra=sanitize_for_logging(
            {
                "step": "validation",
                "record": record,
                "fields": [issue.field for issue in issues],
                **(context or {}),
            }
        ),
    )


def log_record_accepted(record: str, record_id: str, context: Dict[str, Any] | None = None) -> None:
    logger.info(
        "Record accepted",
        extra=sanitize_for_logging(
            {
                "step": "intake",
                "record": record,
                "record_id": record_id,
                **(context or {}),
            }
        ),
    )


def log_crypto_failure(operation: str, error: BaseException) -> None:
    """Log an encryption/decryption failure without leaking payloads"""
    logger.error(
        "Crypto operation failed",
        extra={
            "step": "crypto",
            "operation": operation,
            "error": sanitize_error_message(error),
        },
    )
