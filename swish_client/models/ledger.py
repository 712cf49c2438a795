"""
Ledger View Models

Raw transaction records from the transaction service have no fixed
"my side". These models hold the same records reinterpreted from one
viewer's perspective, plus the aggregate statistics the service reports.

Ledger entries are derived data. They are recomputed on every fetch and
never persisted.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================

class Direction(str, Enum):
    """Direction of a transfer relative to the viewer."""
    SENT = "sent"
    RECEIVED = "received"


class EntryStatus(str, Enum):
    """
    Closed set of statuses shown to the user.

    Every upstream status maps onto exactly one of these.
    """
    COMPLETED = "completed"
    PENDING = "pending"
    FAILED = "failed"


# =============================================================================
# LEDGER ENTRY
# =============================================================================

class PartySummary(BaseModel):
    """One side of a transfer, with names already resolved."""

    id: str = ""
    name: str = ""
    phone_number: str = ""


class LedgerEntry(BaseModel):
    """
    A transaction as seen by one viewer.

    `counterparty` is the other side: the receiver for sent entries,
    the sender for received entries.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(
        default="",
        description="Transaction id, empty if the service omitted it"
    )
    direction: Direction
    counterparty: str = Field(
        default="",
        description="Display name of the other party"
    )
    counterparty_phone: str = Field(
        default="",
        description="Phone number of the other party"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Transferred amount, always non-negative"
    )
    timestamp: Optional[datetime] = None
    message: Optional[str] = None
    status: EntryStatus

    sender: Optional[PartySummary] = None
    receiver: Optional[PartySummary] = None

    @property
    def is_outgoing(self) -> bool:
        return self.direction == Direction.SENT

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign of its effect on the viewer's balance."""
        return -self.amount if self.is_outgoing else self.amount


# =============================================================================
# STATISTICS
# =============================================================================

class FlowSummary(BaseModel):
    """Totals for one direction over the stats window."""

    count: int = Field(default=0, ge=0)
    total_amount: Decimal = Field(default=Decimal("0"))
    currency: str = ""


class TransactionStats(BaseModel):
    """Aggregate sent/received figures reported by the transaction service."""
    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    user_id: str = ""
    period_days: int = 0
    total_transactions: int = 0
    sent: FlowSummary = Field(default_factory=FlowSummary)
    received: FlowSummary = Field(default_factory=FlowSummary)
    net_amount: Decimal = Field(default=Decimal("0"))
