"""Contact model for transfer target selection."""

from pydantic import BaseModel, Field

from swish_client.models.ledger import LedgerEntry


class Contact(BaseModel):
    """A counterparty known to the viewer."""

    id: str = ""
    name: str = ""
    phone: str = ""
    initials: str = Field(
        default="",
        max_length=2,
        description="Up to two uppercase initials derived from the name"
    )
    recent_transactions: list[LedgerEntry] = Field(default_factory=list)
