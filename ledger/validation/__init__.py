"""Input validation package."""

from ledger.validation.validator import (
    InvalidTransactionError,
    TransactionValidator,
    categories_for,
    is_valid_date,
    parse_amount,
)

__all__ = [
    "InvalidTransactionError",
    "TransactionValidator",
    "categories_for",
    "is_valid_date",
    "parse_amount",
]
