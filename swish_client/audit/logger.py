"""
Audit Logger

DESIGN DECISION: Every session transition and transfer step is logged.
This provides:
1. Complete traceability of actions taken on the user's behalf
2. Debugging capability when local and remote state disagree
3. Correlation IDs to trace the steps of one transfer

The audit logger writes structured JSON through structlog.
It never raises: a broken log sink must not break a transfer.
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from swish_client.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
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
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output to stderr at the given level."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))


class AuditLogger:
    """
    Central audit logging service.

    Each helper builds an AuditEvent and logs it at the level matching
    its severity.
    """

    def __init__(self, logger_name: str = "swish_client.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written.
        """
        log_dict = event.to_log_dict()

        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            # Logging failures must not propagate into the session or transfer
            return False

        return True

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    def log_session_restored(self, user_id: str) -> None:
        self.log(AuditEventBuilder.session_restored(user_id))

    def log_persisted_state_discarded(self, reason: str) -> None:
        self.log(AuditEventBuilder.persisted_state_discarded(reason))

    def log_login_succeeded(self, user_id: str) -> None:
        self.log(AuditEventBuilder.login_succeeded(user_id))

    def log_login_failed(
        self,
        phone_number: str,
        reason: str,
        status_code: Optional[int] = None,
    ) -> None:
        self.log(AuditEventBuilder.login_failed(phone_number, reason, status_code))

    def log_registration_succeeded(
        self,
        phone_number: str,
        user_id: Optional[str],
    ) -> None:
        self.log(AuditEventBuilder.registration_succeeded(phone_number, user_id))

    def log_registration_failed(
        self,
        phone_number: str,
        reason: str,
        status_code: Optional[int] = None,
    ) -> None:
        self.log(AuditEventBuilder.registration_failed(phone_number, reason, status_code))

    def log_logout(self, user_id: str) -> None:
        self.log(AuditEventBuilder.logout(user_id))

    def log_verification_succeeded(self, user_id: str) -> None:
        self.log(AuditEventBuilder.verification_succeeded(user_id))

    def log_balance_refreshed(self, user_id: str, balance: float) -> None:
        self.log(AuditEventBuilder.balance_refreshed(user_id, balance))

    def log_balance_refresh_failed(
        self,
        user_id: str,
        reason: str,
        status_code: Optional[int] = None,
    ) -> None:
        self.log(AuditEventBuilder.balance_refresh_failed(user_id, reason, status_code))

    # -------------------------------------------------------------------------
    # Transfers
    # -------------------------------------------------------------------------

    def log_transfer_rejected(
        self,
        user_id: Optional[str],
        field: Optional[str],
        reason: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.transfer_rejected(user_id, field, reason, correlation_id))

    def log_transfer_submitted(
        self,
        user_id: str,
        receiver_phone: str,
        amount: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.transfer_submitted(
            user_id, receiver_phone, amount, correlation_id,
        ))

    def log_transfer_completed(
        self,
        user_id: str,
        transaction_id: str,
        status: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.transfer_completed(
            user_id, transaction_id, status, correlation_id,
        ))

    def log_transfer_failed(
        self,
        user_id: str,
        reason: str,
        status_code: Optional[int],
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.transfer_failed(user_id, reason, status_code, correlation_id))

    def log_reconciliation_failed(
        self,
        user_id: str,
        transaction_id: str,
        errors: list[str],
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.reconciliation_failed(
            user_id, transaction_id, errors, correlation_id,
        ))

    def log_external_service_error(
        self,
        service: str,
        error_message: str,
        status_code: Optional[int] = None,
    ) -> None:
        self.log(AuditEventBuilder.external_service_error(service, error_message, status_code))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g. a transfer) and pass it
    through every subsequent step.
    """
    return uuid4()
