"""
Audit Models for Swish Client

Every session transition and every transfer attempt is recorded.
This provides:
1. Traceability of what the client did on the user's behalf
2. Debugging information when the view and the services disagree
3. A record of reconciliation failures after a successful transfer

CRITICAL: Audit events never carry passwords or session tokens.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from swish_client.models.results import ErrorKind


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Session lifecycle
    SESSION_RESTORED = "session_restored"
    PERSISTED_STATE_DISCARDED = "persisted_state_discarded"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    REGISTRATION_SUCCEEDED = "registration_succeeded"
    REGISTRATION_FAILED = "registration_failed"
    LOGOUT = "logout"
    VERIFICATION_SUCCEEDED = "verification_succeeded"

    # Balance
    BALANCE_REFRESHED = "balance_refreshed"
    BALANCE_REFRESH_FAILED = "balance_refresh_failed"

    # Transfers
    TRANSFER_REJECTED = "transfer_rejected"
    TRANSFER_SUBMITTED = "transfer_submitted"
    TRANSFER_COMPLETED = "transfer_completed"
    TRANSFER_FAILED = "transfer_failed"
    RECONCILIATION_FAILED = "reconciliation_failed"

    # System events
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What is this about?
    user_id: Optional[str] = Field(
        default=None,
        description="Identity the event relates to, if known"
    )
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="Ties together events from one user action (e.g. one transfer)"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None
    status_code: Optional[int] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "status_code": self.status_code,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.login_succeeded(user_id)
        event = AuditEventBuilder.transfer_submitted(user_id, amount, correlation_id)
    """

    @staticmethod
    def session_restored(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_RESTORED,
            user_id=user_id,
            description="Session restored from persisted state",
        )

    @staticmethod
    def persisted_state_discarded(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSISTED_STATE_DISCARDED,
            severity=AuditSeverity.WARNING,
            description="Persisted session state was corrupt and has been cleared",
            error_message=reason,
            details={"error_kind": ErrorKind.CORRUPT_STATE.value},
        )

    @staticmethod
    def login_succeeded(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            user_id=user_id,
            description="User logged in",
            is_user_action=True,
        )

    @staticmethod
    def login_failed(
        phone_number: str,
        reason: str,
        status_code: Optional[int] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            description="Login failed",
            details={"phone_number": phone_number},
            error_message=reason,
            status_code=status_code,
            is_user_action=True,
        )

    @staticmethod
    def registration_succeeded(
        phone_number: str,
        user_id: Optional[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REGISTRATION_SUCCEEDED,
            user_id=user_id,
            description="Account registered",
            details={"phone_number": phone_number},
            is_user_action=True,
        )

    @staticmethod
    def registration_failed(
        phone_number: str,
        reason: str,
        status_code: Optional[int] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REGISTRATION_FAILED,
            severity=AuditSeverity.WARNING,
            description="Registration failed",
            details={"phone_number": phone_number},
            error_message=reason,
            status_code=status_code,
            is_user_action=True,
        )

    @staticmethod
    def logout(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGOUT,
            user_id=user_id,
            description="User logged out",
            is_user_action=True,
        )

    @staticmethod
    def verification_succeeded(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VERIFICATION_SUCCEEDED,
            user_id=user_id,
            description="Account verified",
            is_user_action=True,
        )

    @staticmethod
    def balance_refreshed(user_id: str, balance: float) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BALANCE_REFRESHED,
            severity=AuditSeverity.DEBUG,
            user_id=user_id,
            description="Balance refreshed",
            details={"balance": balance},
        )

    @staticmethod
    def balance_refresh_failed(
        user_id: str,
        reason: str,
        status_code: Optional[int] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BALANCE_REFRESH_FAILED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            description="Balance refresh failed",
            error_message=reason,
            status_code=status_code,
        )

    @staticmethod
    def transfer_rejected(
        user_id: Optional[str],
        field: Optional[str],
        reason: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSFER_REJECTED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            correlation_id=correlation_id,
            description="Transfer rejected before submission",
            details={"field": field},
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def transfer_submitted(
        user_id: str,
        receiver_phone: str,
        amount: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSFER_SUBMITTED,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Transfer of {amount} submitted",
            details={
                "receiver_phone": receiver_phone,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def transfer_completed(
        user_id: str,
        transaction_id: str,
        status: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSFER_COMPLETED,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Transfer {transaction_id} accepted with status {status}",
            details={
                "transaction_id": transaction_id,
                "status": status,
            },
        )

    @staticmethod
    def transfer_failed(
        user_id: str,
        reason: str,
        status_code: Optional[int],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSFER_FAILED,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            correlation_id=correlation_id,
            description="Transfer failed",
            error_message=reason,
            status_code=status_code,
        )

    @staticmethod
    def reconciliation_failed(
        user_id: str,
        transaction_id: str,
        errors: list[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECONCILIATION_FAILED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Local view may be stale after transfer {transaction_id}",
            details={
                "transaction_id": transaction_id,
                "errors": errors,
            },
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        status_code: Optional[int] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            status_code=status_code,
            details={"service": service},
        )
