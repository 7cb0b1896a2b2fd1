"""
Transaction Input Validation

Checks the values a user types before they become a Transaction.

The stores themselves accept whatever is on disk; this layer is where
new input is held to the DD/MM/YYYY date format, a numeric amount, a
category that matches the transaction type, and a description that the
comma-delimited file can hold.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the user can correct their input.
"""

import math
from typing import Optional, Union

from ledger.models.transaction import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    Transaction,
    TransactionCategory,
    TransactionType,
)
from ledger.models.validation import ValidationIssue, ValidationResult


MIN_YEAR = 2000


class InvalidTransactionError(ValueError):
    """Raised by TransactionValidator.build when inputs fail validation."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__("; ".join(result.messages()))


def categories_for(transaction_type: TransactionType) -> tuple[TransactionCategory, ...]:
    """Categories that belong with a transaction type."""
    if transaction_type == TransactionType.INCOME:
        return INCOME_CATEGORIES
    return EXPENSE_CATEGORIES


def is_valid_date(text: str) -> bool:
    """
    Check DD/MM/YYYY with day 1-31, month 1-12 and year >= 2000.

    Day/month combinations (e.g. 31/02) are not checked.
    """
    if len(text) != 10 or text[2] != "/" or text[5] != "/":
        return False

    day, month, year = text[0:2], text[3:5], text[6:10]
    if not (day.isdecimal() and month.isdecimal() and year.isdecimal()):
        return False

    return 1 <= int(day) <= 31 and 1 <= int(month) <= 12 and int(year) >= MIN_YEAR


def parse_amount(text: Union[str, float]) -> Optional[float]:
    """Parse a finite amount. Returns None if the text is not a number."""
    if isinstance(text, (int, float)):
        value = float(text)
    else:
        try:
            value = float(text.strip())
        except ValueError:
            return None
    if not math.isfinite(value):
        return None
    return value


class TransactionValidator:
    """
    Validates user-entered transaction fields.

    All checks run even when an earlier one fails, so the user sees
    every problem at once.
    """

    def validate(
        self,
        transaction_type: TransactionType,
        date: str,
        category: TransactionCategory,
        description: str,
        amount: Union[str, float],
    ) -> ValidationResult:
        issues = []

        if not is_valid_date(date):
            issues.append(ValidationIssue(
                field="date",
                issue_type="invalid_format",
                message=f"Date {date!r} is not a valid DD/MM/YYYY date",
                suggested_fix="Use two-digit day and month and a year from 2000",
            ))

        if category not in categories_for(transaction_type):
            allowed = ", ".join(c.display_name for c in categories_for(transaction_type))
            issues.append(ValidationIssue(
                field="category",
                issue_type="mismatch",
                message=(
                    f"{category.display_name} is not an "
                    f"{transaction_type.display_name.lower()} category"
                ),
                suggested_fix=f"Choose one of: {allowed}",
            ))

        if "," in description or "\n" in description or "\r" in description:
            issues.append(ValidationIssue(
                field="description",
                issue_type="invalid_character",
                message="Description cannot contain commas or line breaks",
                suggested_fix="Remove commas from the description",
            ))
        elif not description.strip():
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="Description is empty",
                severity="warning",
            ))

        if parse_amount(amount) is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Amount {amount!r} is not a number",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return ValidationResult(is_valid=is_valid, issues=issues)

    def build(
        self,
        username: str,
        transaction_type: TransactionType,
        date: str,
        category: TransactionCategory,
        description: str,
        amount: Union[str, float],
    ) -> Transaction:
        """
        Validate inputs and build a Transaction.

        Raises:
            InvalidTransactionError: If any error-level issue is found
        """
        result = self.validate(transaction_type, date, category, description, amount)
        if not result.is_valid:
            raise InvalidTransactionError(result)

        return Transaction(
            username=username,
            type=transaction_type,
            date=date,
            category=category,
            description=description,
            amount=parse_amount(amount),
        )
