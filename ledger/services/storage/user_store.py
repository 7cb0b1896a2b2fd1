"""
User Store

Credential records kept in a binary file.

FILE FORMAT, per user:
    u64 little-endian length, username (UTF-8)
    u64 little-endian length, password digest (ASCII hex)
    1 byte admin flag (0 or 1)
"""

import struct
from typing import BinaryIO, Iterator

import structlog

from ledger.containers import OrderedRecordList
from ledger.models.user import User, hash_password
from ledger.services.storage.interface import CorruptRecordError, FileBackedStore


logger = structlog.get_logger(__name__)

_LENGTH = struct.Struct("<Q")
_FLAG = struct.Struct("<?")

# Upper bound on a stored username or digest.
MAX_FIELD_LENGTH = 1 << 16


class UserStore(FileBackedStore):
    """
    File-backed user collection.

    The store does not reject duplicate usernames; callers check
    exists() before add().
    """

    binary = True

    def __init__(self, atomic_writes: bool = True):
        super().__init__(atomic_writes=atomic_writes)
        self._users: OrderedRecordList[User] = OrderedRecordList()

    def exists(self, username: str) -> bool:
        return any(user.username == username for user in self._users)

    def authenticate(self, username: str, password: str) -> tuple[bool, bool]:
        """
        Check a username/password pair.

        Returns:
            (success, is_admin). An unknown username and a wrong password
            both return (False, False).
        """
        digest = hash_password(password)
        for user in self._users:
            if user.username == username and user.password_digest == digest:
                return True, user.is_admin
        return False, False

    def add(self, user: User) -> None:
        self._users.add_to_tail(user)

    def read_records(self, stream: BinaryIO) -> int:
        """
        Replace the store contents with users read from a binary stream.

        Raises:
            CorruptRecordError: If the stream ends inside a record, a length
                                header is implausibly large, or a field
                                does not decode. Users read before that
                                record are kept.
        """
        self._users.clear()
        while True:
            header = stream.read(_LENGTH.size)
            if not header:
                break
            username = _decode(self._read_field(stream, header, "username"), "utf-8", "username")
            digest = _decode(
                self._read_field(stream, stream.read(_LENGTH.size), "digest"), "ascii", "digest",
            )
            flag = stream.read(_FLAG.size)
            if len(flag) != _FLAG.size:
                raise CorruptRecordError(f"Missing admin flag for user {username!r}")

            self._users.add_to_tail(User(
                username=username,
                password_digest=digest,
                is_admin=_FLAG.unpack(flag)[0],
            ))

        logger.info("users_loaded", count=len(self._users))
        return len(self._users)

    @staticmethod
    def _read_field(stream: BinaryIO, header: bytes, name: str) -> bytes:
        if len(header) != _LENGTH.size:
            raise CorruptRecordError(f"Truncated {name} length header")
        (length,) = _LENGTH.unpack(header)
        if length > MAX_FIELD_LENGTH:
            raise CorruptRecordError(
                f"{name.capitalize()} length {length} exceeds {MAX_FIELD_LENGTH} bytes"
            )
        data = stream.read(length)
        if len(data) != length:
            raise CorruptRecordError(
                f"Truncated {name}: expected {length} bytes, got {len(data)}"
            )
        return data

    def write_records(self, stream: BinaryIO) -> int:
        for user in self._users:
            for field in (user.username.encode("utf-8"), user.password_digest.encode("ascii")):
                stream.write(_LENGTH.pack(len(field)))
                stream.write(field)
            stream.write(_FLAG.pack(user.is_admin))

        logger.info("users_saved", count=len(self._users))
        return len(self._users)

    def __len__(self) -> int:
        return len(self._users)

    def __iter__(self) -> Iterator[User]:
        return iter(self._users)


def _decode(data: bytes, encoding: str, name: str) -> str:
    try:
        return data.decode(encoding)
    except UnicodeDecodeError as e:
        raise CorruptRecordError(f"Undecodable {name}: {e.reason}") from e
