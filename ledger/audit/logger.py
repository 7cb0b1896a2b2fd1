"""
Audit Logger

DESIGN DECISION: Every session-level action is logged.
This provides:
1. Traceability of edits and sign-ins
2. Debugging capability when files go missing
3. A history the session can show back to the user

The audit logger:
- Is synchronous; the ledger runs one session on one thread
- Keeps an append-only in-memory history for the running process
- Supports correlation IDs to trace all events in one session
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from ledger.config.settings import LedgerSettings
from ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def configure_logging(settings: LedgerSettings) -> None:
    """
    Configure stdlib logging and structlog from settings.

    Call once from the application entry point.
    """
    level = getattr(logging, settings.log_level)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
        force=True,
    )

    if settings.log_format == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An in-memory history (for display during the session)
    """

    def __init__(self):
        self._history: list[AuditEvent] = []
        self._logger = structlog.get_logger("ledger.audit")

    def log(self, event: AuditEvent) -> None:
        """
        Log an audit event.

        Severity picks the log method; the event is always kept in history.
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        self._history.append(event)

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    def recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Most recent events, newest first."""
        return list(reversed(self._history[-limit:])) if limit > 0 else []

    def events_for_user(self, username: str) -> list[AuditEvent]:
        """Events about one account, oldest first."""
        return [event for event in self._history if event.username == username]


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a session and pass it to every event.
    """
    return uuid4()
