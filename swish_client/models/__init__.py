"""
Data Models Package

This package contains all Pydantic models used by the Swish client.
All data flowing between the services and the client conforms to these schemas.
"""

from swish_client.models.identity import Identity, SessionState
from swish_client.models.ledger import (
    Direction,
    EntryStatus,
    FlowSummary,
    LedgerEntry,
    PartySummary,
    TransactionStats,
)
from swish_client.models.contact import Contact
from swish_client.models.transfer import (
    RegistrationReceipt,
    RegistrationRequest,
    TransferParty,
    TransferRequest,
    TransferResult,
)
from swish_client.models.results import (
    ApiResponse,
    ContactListResult,
    ErrorKind,
    HistoryResult,
    OperationResult,
    ReconciliationReport,
    RegistrationResult,
    StatsResult,
    TransferOutcome,
)
from swish_client.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Session models
    "Identity",
    "SessionState",
    # Ledger models
    "Direction",
    "EntryStatus",
    "FlowSummary",
    "LedgerEntry",
    "PartySummary",
    "TransactionStats",
    "Contact",
    # Transfer models
    "RegistrationReceipt",
    "RegistrationRequest",
    "TransferParty",
    "TransferRequest",
    "TransferResult",
    # Result envelopes
    "ApiResponse",
    "ContactListResult",
    "ErrorKind",
    "HistoryResult",
    "OperationResult",
    "ReconciliationReport",
    "RegistrationResult",
    "StatsResult",
    "TransferOutcome",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
