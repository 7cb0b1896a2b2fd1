"""
Audit Models for Personal Ledger

Every session-level action (sign in, edits, saves) is recorded as an
audit event. This provides:
1. Traceability of who changed what during a session
2. Debugging information when a file cannot be read or written
3. A place to see failed sign-in attempts

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # User file
    USERS_LOADED = "users_loaded"
    USERS_SAVED = "users_saved"

    # Accounts
    USER_SIGNED_UP = "user_signed_up"
    SIGN_UP_REJECTED = "sign_up_rejected"
    USER_SIGNED_IN = "user_signed_in"
    SIGN_IN_FAILED = "sign_in_failed"
    USER_SIGNED_OUT = "user_signed_out"

    # Transaction file
    TRANSACTIONS_LOADED = "transactions_loaded"
    TRANSACTIONS_SAVED = "transactions_saved"

    # Transaction edits
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_MODIFIED = "transaction_modified"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSACTIONS_SORTED = "transactions_sorted"

    # Queries
    SEARCH_EXECUTED = "search_executed"

    # System events
    FILE_ERROR = "file_error"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - who was acting?
    username: Optional[str] = Field(
        default=None,
        description="Account the event relates to"
    )

    # Correlation - one id per session
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events in one session)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "username": self.username,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.user_signed_in("alice", is_admin=False)
        event = AuditEventBuilder.transaction_deleted("alice", index=2)
    """

    @staticmethod
    def users_loaded(count: int, path: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USERS_LOADED,
            description=f"Loaded {count} users",
            details={"count": count, "path": path},
        )

    @staticmethod
    def users_saved(count: int, path: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USERS_SAVED,
            description=f"Saved {count} users",
            details={"count": count, "path": path},
        )

    @staticmethod
    def user_signed_up(
        username: str,
        is_admin: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_UP,
            username=username,
            correlation_id=correlation_id,
            description=f"Account created: {username}",
            details={"is_admin": is_admin},
            is_user_action=True,
        )

    @staticmethod
    def sign_up_rejected(
        username: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGN_UP_REJECTED,
            severity=AuditSeverity.WARNING,
            username=username,
            correlation_id=correlation_id,
            description="Sign-up rejected: username already exists",
            is_user_action=True,
        )

    @staticmethod
    def user_signed_in(
        username: str,
        is_admin: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_IN,
            username=username,
            correlation_id=correlation_id,
            description=f"Signed in: {username}",
            details={"is_admin": is_admin},
            is_user_action=True,
        )

    @staticmethod
    def sign_in_failed(
        username: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        # Deliberately no detail on whether the account exists
        return AuditEvent(
            event_type=AuditEventType.SIGN_IN_FAILED,
            severity=AuditSeverity.WARNING,
            username=username,
            correlation_id=correlation_id,
            description="Sign-in failed",
            is_user_action=True,
        )

    @staticmethod
    def user_signed_out(
        username: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_OUT,
            username=username,
            correlation_id=correlation_id,
            description=f"Signed out: {username}",
            is_user_action=True,
        )

    @staticmethod
    def transactions_loaded(
        username: str,
        loaded: int,
        others: int,
        skipped: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_LOADED,
            username=username,
            correlation_id=correlation_id,
            description=f"Loaded {loaded} transactions",
            details={"loaded": loaded, "others": others, "skipped": skipped},
        )

    @staticmethod
    def transactions_saved(
        username: str,
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_SAVED,
            username=username,
            correlation_id=correlation_id,
            description=f"Saved {count} transactions",
            details={"count": count},
        )

    @staticmethod
    def transaction_added(
        username: str,
        date: str,
        category: str,
        amount: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            username=username,
            correlation_id=correlation_id,
            description=f"Transaction added: {date} {category} {amount:.2f}",
            details={"date": date, "category": category, "amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def transaction_modified(
        username: str,
        index: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_MODIFIED,
            username=username,
            correlation_id=correlation_id,
            description=f"Transaction {index + 1} modified",
            details={"index": index},
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(
        username: str,
        index: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            username=username,
            correlation_id=correlation_id,
            description=f"Transaction {index + 1} deleted",
            details={"index": index},
            is_user_action=True,
        )

    @staticmethod
    def transactions_sorted(
        username: str,
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_SORTED,
            username=username,
            correlation_id=correlation_id,
            description=f"Sorted {count} transactions by date",
            details={"count": count},
            is_user_action=True,
        )

    @staticmethod
    def search_executed(
        username: str,
        keyword: str,
        result_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SEARCH_EXECUTED,
            username=username,
            correlation_id=correlation_id,
            description=f"Search for {keyword!r} returned {result_count} results",
            details={"keyword": keyword, "result_count": result_count},
            is_user_action=True,
        )

    @staticmethod
    def file_error(
        path: str,
        operation: str,
        error_message: str,
        severity: AuditSeverity = AuditSeverity.ERROR,
        username: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FILE_ERROR,
            severity=severity,
            username=username,
            correlation_id=correlation_id,
            description=f"Could not {operation} {path}",
            error_message=error_message,
            details={"path": path, "operation": operation},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
