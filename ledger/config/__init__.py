"""Configuration package."""

from ledger.config.settings import (
    LedgerSettings,
    TransactionFileFormat,
    get_settings,
)

__all__ = [
    "LedgerSettings",
    "TransactionFileFormat",
    "get_settings",
]
