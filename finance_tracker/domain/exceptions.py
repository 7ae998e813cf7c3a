"""Domain-specific exceptions"""

from typing import List
from finance_tracker.domain.models import ValidationIssue


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class CryptoError(DomainException):
    """Key material is missing/malformed or a ciphertext cannot be decrypted"""

    pass


class InvalidRecordError(DomainException):
    """Record payload failed validation; carries every issue found"""

    def __init__(self, record: str, issues: List[ValidationIssue]):
        self.record = record
        self.issues = issues
        fields = ", ".join(issue.field for issue in issues)
        super().__init__(f"Invalid {record}: {fields}")


class AccountLimitExceededError(DomainException):
    """User already holds the maximum number of accounts"""

    pass


class InvalidLoanError(DomainException):
    """Loan terms or a loan payment cannot be applied"""

    pass
