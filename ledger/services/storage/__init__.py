"""
Storage Services Package

Provides the abstract file-backed store and the two concrete stores:
transactions (comma-delimited text) and users (binary records).
"""

from ledger.services.storage.interface import (
    CorruptRecordError,
    FileAccessError,
    FileBackedStore,
    StorageError,
)
from ledger.services.storage.transaction_store import TransactionStore
from ledger.services.storage.user_store import UserStore

__all__ = [
    # Interfaces
    "FileBackedStore",
    # Exceptions
    "CorruptRecordError",
    "FileAccessError",
    "StorageError",
    # Stores
    "TransactionStore",
    "UserStore",
]
