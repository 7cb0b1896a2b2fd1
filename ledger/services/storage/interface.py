"""
Abstract Storage Interface

DESIGN DECISION: Both stores are in-memory collections that load from
and save to one flat file. The file handling (opening, error mapping,
temp-file-and-rename on save) is shared here; each store only defines
how its records are read from and written to an open stream.

This allows us to:
1. Test record parsing against in-memory streams
2. Keep one error policy for unreadable/unwritable files
3. Swap the file layer later without touching store logic
"""

import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, Optional, Union

PathLike = Union[str, os.PathLike]


class FileBackedStore(ABC):
    """
    Abstract base for stores persisted as a whole file.

    Subclasses set `binary` and implement read_records/write_records.
    """

    binary: bool = False

    def __init__(self, atomic_writes: bool = True):
        """
        Args:
            atomic_writes: Save through a temp file renamed into place.
                          If False, the destination is overwritten directly.
        """
        self._atomic_writes = atomic_writes

    @abstractmethod
    def read_records(self, stream: IO) -> int:
        """
        Replace the store contents with records read from a stream.

        Args:
            stream: Open text stream (or binary, if `binary` is set)

        Returns:
            Number of records loaded
        """
        pass

    @abstractmethod
    def write_records(self, stream: IO) -> int:
        """
        Write every record to a stream.

        Args:
            stream: Open text stream (or binary, if `binary` is set)

        Returns:
            Number of records written
        """
        pass

    def load(self, path: PathLike) -> int:
        """
        Load the whole file into memory.

        Returns:
            Number of records loaded

        Raises:
            FileAccessError: If the file cannot be opened or read
        """
        try:
            with open(path, "rb" if self.binary else "r", **self._open_kwargs()) as stream:
                return self.read_records(stream)
        except OSError as e:
            raise FileAccessError(f"Failed to open file {path}.", path) from e

    def save(self, path: PathLike) -> int:
        """
        Rewrite the whole file from memory.

        Returns:
            Number of records written

        Raises:
            FileAccessError: If the file cannot be created or written
        """
        path = Path(path)
        try:
            if not self._atomic_writes:
                with open(path, "wb" if self.binary else "w", **self._open_kwargs()) as stream:
                    return self.write_records(stream)
            return self._save_atomic(path)
        except OSError as e:
            raise FileAccessError(f"Failed to create file {path}.", path) from e

    def _save_atomic(self, path: Path) -> int:
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb" if self.binary else "w", **self._open_kwargs()) as stream:
                count = self.write_records(stream)
                stream.flush()
                os.fsync(stream.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
        return count

    def _open_kwargs(self) -> dict:
        if self.binary:
            return {}
        # Undecodable bytes come through as lone surrogates; the store
        # decides what to do with those lines.
        return {"encoding": "utf-8", "errors": "surrogateescape", "newline": "\n"}


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class FileAccessError(StorageError, OSError):
    """A store file could not be opened for reading or writing."""

    def __init__(self, message: str, path: Optional[PathLike] = None):
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        return self.args[0] if self.args else ""


class CorruptRecordError(StorageError):
    """A binary record is truncated or holds undecodable fields."""
    pass
