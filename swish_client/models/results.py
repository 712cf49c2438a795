"""
Result Envelopes

DESIGN DECISION: Expected failures (bad input, HTTP errors, network
errors, missing session) are returned as values, not raised.
Every envelope carries `success` and, on failure, a human-readable
`error` and an `ErrorKind`, so presentation code can tell a failure
from an empty success without inspecting internals.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from swish_client.models.contact import Contact
from swish_client.models.ledger import LedgerEntry, TransactionStats
from swish_client.models.transfer import RegistrationReceipt, TransferResult


class ErrorKind(str, Enum):
    """Failure taxonomy shared by all envelopes."""
    VALIDATION = "validation"        # Bad input, caught before any network call
    TRANSPORT = "transport"          # Network failure, non-2xx, malformed body
    SESSION_STATE = "session_state"  # Needs an Identity and there is none
    IN_FLIGHT = "in_flight"          # A transfer is already being submitted
    CORRUPT_STATE = "corrupt_state"  # Persisted snapshot could not be parsed
    STORAGE = "storage"              # Session store could not be written


class ApiResponse(BaseModel):
    """
    Outcome of one HTTP call.

    Exactly one of `data` / `error` is meaningful. `status_code` is 0
    when no HTTP response was received at all.
    """

    data: Any = None
    error: Optional[str] = None
    status_code: int = Field(default=0, ge=0)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_network_error(self) -> bool:
        return self.error is not None and self.status_code == 0


class OperationResult(BaseModel):
    """Generic success/failure envelope."""

    success: bool
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    status_code: Optional[int] = None

    @classmethod
    def ok(cls, **fields) -> "OperationResult":
        return cls(success=True, **fields)

    @classmethod
    def failure(
        cls,
        error: str,
        error_kind: ErrorKind,
        status_code: Optional[int] = None,
        **fields,
    ) -> "OperationResult":
        return cls(
            success=False,
            error=error,
            error_kind=error_kind,
            status_code=status_code,
            **fields,
        )

    @classmethod
    def from_response(cls, response: ApiResponse, **fields) -> "OperationResult":
        """Build a TRANSPORT failure from a failed ApiResponse."""
        return cls.failure(
            error=response.error or "Request failed",
            error_kind=ErrorKind.TRANSPORT,
            status_code=response.status_code,
            **fields,
        )


class RegistrationResult(OperationResult):
    receipt: Optional[RegistrationReceipt] = None


class HistoryResult(OperationResult):
    """Ledger entries for one viewer, newest first as the service returns them."""

    entries: list[LedgerEntry] = Field(default_factory=list)
    count: int = 0


class ContactListResult(OperationResult):
    """
    Contacts for one user.

    An empty list with success=True is a valid state (no counterparties yet).
    """

    contacts: list[Contact] = Field(default_factory=list)


class StatsResult(OperationResult):
    stats: Optional[TransactionStats] = None


class ReconciliationReport(BaseModel):
    """
    What happened after a successful transfer.

    CRITICAL: A reconciliation failure does not mean the transfer failed.
    The money moved; only the local view may be stale.
    """

    balance_refreshed: bool = False
    history_notified: bool = False
    errors: list[str] = Field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.balance_refreshed and self.history_notified


class TransferOutcome(OperationResult):
    """Result of TransferWorkflow.submit."""

    field: Optional[str] = Field(
        default=None,
        description="Input field that failed validation, if any"
    )
    amount: Optional[Decimal] = Field(
        default=None,
        description="Normalized amount that was (or would have been) sent"
    )
    result: Optional[TransferResult] = None
    reconciliation: Optional[ReconciliationReport] = None
