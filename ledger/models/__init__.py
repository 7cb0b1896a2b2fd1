"""
Data Models Package

This package contains the Pydantic models used in the Personal Ledger.
Records loaded from disk and entered by users conform to these schemas.
"""

from ledger.models.transaction import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    TABLE_HEADER,
    DateFormatError,
    Transaction,
    TransactionCategory,
    TransactionType,
)
from ledger.models.user import User, hash_password
from ledger.models.validation import ValidationIssue, ValidationResult
from ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "EXPENSE_CATEGORIES",
    "INCOME_CATEGORIES",
    "TABLE_HEADER",
    "DateFormatError",
    "Transaction",
    "TransactionCategory",
    "TransactionType",
    # User models
    "User",
    "hash_password",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
