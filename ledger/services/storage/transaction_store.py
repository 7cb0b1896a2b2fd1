"""
Transaction Store

Holds the transactions of the active user in memory, plus everyone
else's transactions as an opaque passthrough.

PARTITIONING: On load every parsed record is routed once, by username:
- "mine": records owned by the active user. Indexable, editable, sortable.
- "others": everyone else's records. Append-only, never indexed, written
  back verbatim after "mine" on save.

FILE FORMAT (one record per line, comma-delimited, no quoting):
    username,type,date,category,description,amount
The single-user layout drops the username column. Type and category are
stored as enum ordinals. Descriptions must not contain commas.

Malformed lines are skipped, not raised. That covers too few fields,
non-numeric type, category or amount, enum ordinals out of range, and
bytes that are not valid UTF-8. Older ledgers read non-numeric fields as
0 and kept the line; here such a line is dropped and counted instead.
The number skipped is reported in the load log entry.
"""

from typing import IO, Iterable, Iterator, Optional

import structlog

from ledger.config.settings import TransactionFileFormat
from ledger.containers import OrderedRecordList
from ledger.models.transaction import (
    Transaction,
    TransactionCategory,
    TransactionType,
)
from ledger.services.storage.interface import FileBackedStore


logger = structlog.get_logger(__name__)


def _is_utf8(line: str) -> bool:
    """False for lines read with undecodable bytes (lone surrogates)."""
    try:
        line.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


class TransactionStore(FileBackedStore):
    """
    Partitioned, file-backed transaction collection.

    All positional operations (get, modify, delete) address the "mine"
    partition with 0-based indexes. Display helpers (listing, search)
    yield 1-based positions.
    """

    def __init__(
        self,
        active_user: str = "",
        file_format: TransactionFileFormat = TransactionFileFormat.MULTI_USER,
        atomic_writes: bool = True,
    ):
        super().__init__(atomic_writes=atomic_writes)
        self._active_user = active_user
        self._file_format = TransactionFileFormat(file_format)
        self._mine: OrderedRecordList[Transaction] = OrderedRecordList()
        self._others: OrderedRecordList[Transaction] = OrderedRecordList()
        self._skipped = 0

    # -------------------------------------------------------------------------
    # Session key
    # -------------------------------------------------------------------------

    @property
    def active_user(self) -> str:
        return self._active_user

    def set_active_user(self, username: str) -> None:
        """Set the partition key. Must be called before load()."""
        self._active_user = username

    @property
    def file_format(self) -> TransactionFileFormat:
        return self._file_format

    # -------------------------------------------------------------------------
    # Load / save
    # -------------------------------------------------------------------------

    @property
    def skipped(self) -> int:
        """Malformed lines dropped by the most recent load."""
        return self._skipped

    def read_records(self, stream: Iterable[str]) -> int:
        """
        Replace both partitions with the records in `stream`.

        Accepts an open text file or any iterable of lines.

        Returns:
            Number of records loaded into "mine"
        """
        self._mine.clear()
        self._others.clear()
        self._skipped = 0

        for line_number, line in enumerate(stream, start=1):
            transaction = self._parse_line(line)
            if transaction is None:
                self._skipped += 1
                logger.debug(
                    "transaction_line_skipped",
                    line_number=line_number,
                )
                continue

            if transaction.username == self._active_user:
                self._mine.add_to_tail(transaction)
            else:
                self._others.add_to_tail(transaction)

        logger.info(
            "transactions_loaded",
            active_user=self._active_user,
            mine=len(self._mine),
            others=len(self._others),
            skipped=self._skipped,
        )
        return len(self._mine)

    def write_records(self, stream: IO[str]) -> int:
        """
        Write "mine" in current order, then "others".

        Returns:
            Number of lines written
        """
        written = 0
        for line in self.dump_lines():
            stream.write(line)
            stream.write("\n")
            written += 1

        logger.info(
            "transactions_saved",
            active_user=self._active_user,
            mine=len(self._mine),
            others=len(self._others),
        )
        return written

    def dump_lines(self) -> Iterator[str]:
        """Serialized lines, "mine" first, without line terminators."""
        for transaction in self._mine:
            yield self._format_line(transaction)
        for transaction in self._others:
            yield self._format_line(transaction)

    def _parse_line(self, line: str) -> Optional[Transaction]:
        if not _is_utf8(line):
            return None

        if self._file_format == TransactionFileFormat.MULTI_USER:
            fields = line.rstrip("\r\n").split(",", 5)
            if len(fields) != 6:
                return None
            username, type_text, date, category_text, description, amount_text = fields
        else:
            fields = line.rstrip("\r\n").split(",", 4)
            if len(fields) != 5:
                return None
            username = self._active_user
            type_text, date, category_text, description, amount_text = fields

        try:
            return Transaction(
                username=username,
                type=TransactionType(int(type_text)),
                date=date,
                category=TransactionCategory(int(category_text)),
                description=description,
                amount=float(amount_text),
            )
        except ValueError:
            # Non-numeric field or an ordinal outside the enum
            return None

    def _format_line(self, transaction: Transaction) -> str:
        fields = [
            str(int(transaction.type)),
            transaction.date,
            str(int(transaction.category)),
            transaction.description,
            repr(float(transaction.amount)),
        ]
        if self._file_format == TransactionFileFormat.MULTI_USER:
            fields.insert(0, transaction.username)
        return ",".join(fields)

    # -------------------------------------------------------------------------
    # CRUD over "mine"
    # -------------------------------------------------------------------------

    def add(self, transaction: Transaction) -> None:
        self._mine.add_to_tail(transaction)

    def get(self, index: int) -> Transaction:
        return self._mine.get(index)

    def modify(self, index: int, transaction: Transaction) -> None:
        """
        Replace the transaction at index.

        Raises:
            IndexError: If index is outside [0, len)
        """
        self._mine.set(index, transaction)

    def delete(self, index: int) -> Transaction:
        """
        Remove and return the transaction at index.

        Raises:
            IndexError: If index is outside [0, len)
        """
        return self._mine.remove(index)

    # -------------------------------------------------------------------------
    # Queries over "mine"
    # -------------------------------------------------------------------------

    def search(self, keyword: str) -> Iterator[tuple[int, Transaction]]:
        """
        Find transactions whose date text or category name contains keyword.

        Case-insensitive. Yields (position, transaction) where position is
        1-based among the matches, not the list index.
        """
        needle = keyword.lower()
        position = 0
        for transaction in self._mine:
            if (
                needle in transaction.date.lower()
                or needle in transaction.category.display_name.lower()
            ):
                position += 1
                yield position, transaction

    def listing(self) -> Iterator[tuple[int, Transaction]]:
        """All of "mine" in current order, with 1-based positions."""
        return enumerate(self._mine, start=1)

    def sort_by_date_descending(self) -> None:
        """
        Selection-sort "mine" by date, most recent first.

        Transactions on the same date keep their current relative order.

        Raises:
            DateFormatError: If any date is not DD/MM/YYYY; nothing moves
        """
        self._mine.selection_sort(key=Transaction.date_key, descending=True)

    def balance(self) -> float:
        """Sum of the amounts in "mine"."""
        return sum(transaction.amount for transaction in self._mine)

    def others(self) -> Iterator[Transaction]:
        """Read-only view of other users' transactions."""
        return iter(self._others)

    @property
    def others_count(self) -> int:
        return len(self._others)

    def __len__(self) -> int:
        return len(self._mine)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self._mine)
