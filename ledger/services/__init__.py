"""Services package."""

from ledger.services.storage import (
    CorruptRecordError,
    FileAccessError,
    FileBackedStore,
    StorageError,
    TransactionStore,
    UserStore,
)

__all__ = [
    "CorruptRecordError",
    "FileAccessError",
    "FileBackedStore",
    "StorageError",
    "TransactionStore",
    "UserStore",
]
