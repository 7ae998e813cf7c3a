"""Prometheus metrics for validation rejections, accepted records and crypto operations"""

from typing import List

from prometheus_client import Counter

from finance_tracker.domain.models import ValidationIssue

# Validation metrics
validation_rejection_counter = Counter(
    "finance_validation_rejections_total",
    "Rejected record fields",
    ["record", "field"],
)

record_accepted_counter = Counter(
    "finance_records_accepted_total",
    "Records accepted by intake",
    ["record"],  # user | account | transaction | payment_reminder
)

# Crypto metrics
crypto_operation_counter = Counter(
    "finance_crypto_operations_total",
    "Encryption and decryption calls",
    ["operation", "outcome"],  # encrypt | decrypt, success | failure
)


def record_rejection(record: str, issues: List[ValidationIssue]) -> None:
    """Count one rejection per failing field"""
    for issue in issues:
        validation_rejection_counter.labels(record=record, field=issue.field).inc()


def record_acceptance(record: str) -> None:
    record_accepted_counter.labels(record=record).inc()


def record_crypto_operation(operation: str, success: bool) -> None:
    outcome = "success" if success else "failure"
    crypto_operation_counter.labels(operation=operation, outcome=outcome).inc()
