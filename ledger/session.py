"""
Session Orchestrator for Personal Ledger

This module ties the stores together and defines the end-to-end flow
of one ledger session:
1. Open (load users)
2. Sign up / sign in (authenticate, load transactions for that user)
3. Add, modify, delete, sort, list, search (admin only)
4. Sign out (save transactions), close (save users)

DESIGN DECISION: The session enforces the boundaries:
- No transaction operation without a signed-in user
- Search is an admin capability
- Every step is audited

A missing user or transaction file is not an error at this level; it
means "nothing saved yet". Any other file failure propagates.
"""

from typing import Optional

from ledger.audit import AuditLogger, create_correlation_id
from ledger.config import LedgerSettings, get_settings
from ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from ledger.models.transaction import Transaction
from ledger.models.user import User
from ledger.services.storage import (
    CorruptRecordError,
    FileAccessError,
    TransactionStore,
    UserStore,
)


class SessionError(Exception):
    """Operation requires a signed-in user."""
    pass


class NotAuthorizedError(SessionError):
    """Operation requires an admin account."""
    pass


class LedgerSession:
    """
    One process-wide ledger session.

    Only one user is signed in at a time; their username is the
    partition key of the TransactionStore built at sign-in.
    """

    def __init__(
        self,
        settings: Optional[LedgerSettings] = None,
        user_store: Optional[UserStore] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings or get_settings()
        self._users = user_store or UserStore(atomic_writes=self._settings.atomic_writes)
        self._audit = audit_logger or AuditLogger()
        self._correlation_id = create_correlation_id()

        self._current_user: Optional[str] = None
        self._is_admin = False
        self._transactions: Optional[TransactionStore] = None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def current_user(self) -> Optional[str]:
        return self._current_user

    @property
    def is_admin(self) -> bool:
        return self._is_admin

    @property
    def is_signed_in(self) -> bool:
        return self._current_user is not None

    @property
    def audit(self) -> AuditLogger:
        return self._audit

    @property
    def transactions(self) -> TransactionStore:
        if self._transactions is None:
            raise SessionError("No user is signed in")
        return self._transactions

    # -------------------------------------------------------------------------
    # User file
    # -------------------------------------------------------------------------

    def open(self) -> int:
        """
        Load the user file.

        Returns the number of users loaded; 0 if the file does not exist.

        Raises:
            FileAccessError: If an existing file cannot be read
            CorruptRecordError: If the file holds a damaged record
        """
        path = self._settings.users_path
        try:
            count = self._users.load(path)
        except FileAccessError as e:
            if path.exists():
                raise
            self._audit.log(AuditEventBuilder.file_error(
                path=str(path),
                operation="read",
                error_message=f"{e} No users yet.",
                severity=AuditSeverity.WARNING,
                correlation_id=self._correlation_id,
            ))
            return 0
        except CorruptRecordError as e:
            self._audit.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"path": str(path), "users_kept": len(self._users)},
                correlation_id=self._correlation_id,
            )
            raise

        self._audit.log(AuditEventBuilder.users_loaded(count, str(path)))
        return count

    def close(self) -> None:
        """Sign out if needed, then save the user file."""
        if self.is_signed_in:
            self.sign_out()
        self.save_users()

    def save_users(self) -> None:
        path = self._settings.users_path
        try:
            count = self._users.save(path)
        except FileAccessError as e:
            self._audit.log(AuditEventBuilder.file_error(
                path=str(path),
                operation="write",
                error_message=str(e),
                correlation_id=self._correlation_id,
            ))
            raise
        self._audit.log(AuditEventBuilder.users_saved(count, str(path)))

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def sign_up(self, username: str, password: str, is_admin: bool = False) -> bool:
        """
        Create an account.

        Returns False if the username is already taken.
        """
        if self._users.exists(username):
            self._audit.log(AuditEventBuilder.sign_up_rejected(
                username, correlation_id=self._correlation_id,
            ))
            return False

        self._users.add(User.create(username, password, is_admin=is_admin))
        self._audit.log(AuditEventBuilder.user_signed_up(
            username, is_admin, correlation_id=self._correlation_id,
        ))
        return True

    def sign_in(self, username: str, password: str) -> bool:
        """
        Authenticate and load the user's transactions.

        Any previously signed-in user is signed out (and saved) first.
        Returns False on bad credentials without saying which part was wrong.
        """
        ok, is_admin = self._users.authenticate(username, password)
        if not ok:
            self._audit.log(AuditEventBuilder.sign_in_failed(
                username, correlation_id=self._correlation_id,
            ))
            return False

        if self.is_signed_in:
            self.sign_out()

        store = TransactionStore(
            active_user=username,
            file_format=self._settings.transaction_file_format,
            atomic_writes=self._settings.atomic_writes,
        )
        path = self._settings.transactions_path
        try:
            store.load(path)
        except FileAccessError as e:
            if path.exists():
                raise
            self._audit.log(AuditEventBuilder.file_error(
                path=str(path),
                operation="read",
                error_message=f"{e} No transactions yet.",
                severity=AuditSeverity.WARNING,
                username=username,
                correlation_id=self._correlation_id,
            ))
        else:
            self._audit.log(AuditEventBuilder.transactions_loaded(
                username,
                loaded=len(store),
                others=store.others_count,
                skipped=store.skipped,
                correlation_id=self._correlation_id,
            ))

        self._current_user = username
        self._is_admin = is_admin
        self._transactions = store
        self._audit.log(AuditEventBuilder.user_signed_in(
            username, is_admin, correlation_id=self._correlation_id,
        ))
        return True

    def sign_out(self) -> None:
        """Save the signed-in user's transactions and end their session."""
        store = self.transactions
        username = self._current_user
        path = self._settings.transactions_path
        try:
            store.save(path)
        except FileAccessError as e:
            self._audit.log(AuditEventBuilder.file_error(
                path=str(path),
                operation="write",
                error_message=str(e),
                username=username,
                correlation_id=self._correlation_id,
            ))
            raise

        self._audit.log(AuditEventBuilder.transactions_saved(
            username, len(store), correlation_id=self._correlation_id,
        ))
        self._audit.log(AuditEventBuilder.user_signed_out(
            username, correlation_id=self._correlation_id,
        ))
        self._current_user = None
        self._is_admin = False
        self._transactions = None

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def add_transaction(self, transaction: Transaction) -> None:
        """Append a transaction; its owner is forced to the signed-in user."""
        store = self.transactions
        transaction = self._owned(transaction)
        store.add(transaction)
        self._audit.log(AuditEventBuilder.transaction_added(
            self._current_user,
            transaction.date,
            transaction.category.display_name,
            transaction.amount,
            correlation_id=self._correlation_id,
        ))

    def modify_transaction(self, index: int, transaction: Transaction) -> None:
        self.transactions.modify(index, self._owned(transaction))
        self._audit.log(AuditEventBuilder.transaction_modified(
            self._current_user, index, correlation_id=self._correlation_id,
        ))

    def delete_transaction(self, index: int) -> Transaction:
        removed = self.transactions.delete(index)
        self._audit.log(AuditEventBuilder.transaction_deleted(
            self._current_user, index, correlation_id=self._correlation_id,
        ))
        return removed

    def sort_transactions(self) -> None:
        store = self.transactions
        store.sort_by_date_descending()
        self._audit.log(AuditEventBuilder.transactions_sorted(
            self._current_user, len(store), correlation_id=self._correlation_id,
        ))

    def list_transactions(self) -> list[tuple[int, Transaction]]:
        return list(self.transactions.listing())

    def search_transactions(self, keyword: str) -> list[tuple[int, Transaction]]:
        """
        Search the signed-in user's transactions.

        Raises:
            NotAuthorizedError: If the user is not an admin
        """
        store = self.transactions
        if not self._is_admin:
            raise NotAuthorizedError("Search is available to admin accounts only")

        results = list(store.search(keyword))
        self._audit.log(AuditEventBuilder.search_executed(
            self._current_user, keyword, len(results), correlation_id=self._correlation_id,
        ))
        return results

    def history(self, limit: int = 20) -> list[AuditEvent]:
        """Recent audit events for the signed-in user, newest first."""
        events = self._audit.events_for_user(self._current_user or "")
        return list(reversed(events))[:limit]

    def _owned(self, transaction: Transaction) -> Transaction:
        if transaction.username == self._current_user:
            return transaction
        return transaction.model_copy(update={"username": self._current_user})


def create_session(settings: Optional[LedgerSettings] = None) -> LedgerSession:
    """
    Factory function to create a ledger session with its users loaded.

    Args:
        settings: Settings to use; defaults to get_settings()
    """
    session = LedgerSession(settings=settings)
    session.open()
    return session
