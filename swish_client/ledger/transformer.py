"""
Ledger View Transformer

Turns raw transaction records from the transaction service into
LedgerEntry objects seen from one viewer's side.

A raw record looks like:

    {
        "id": "tx-1",
        "amount": "150.00",
        "created_at": "2024-05-01T12:00:00Z",
        "description": "Lunch",
        "status": "COMPLETED",
        "sender_id": "u1",
        "sender": {"id": "u1", "firstName": "Anna", "lastName": "Berg", "phone": "+4670..."},
        "receiver": {"id": "u2", "name": "Erik", "phoneNumber": "+4673..."}
    }

GUARANTEES:
- Pure: no I/O, no logging, no shared state
- Total: every input produces an entry; missing or malformed fields
  degrade to empty strings, zero amounts and None timestamps
- Direction is SENT iff the viewer id equals sender_id or sender.id
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional

from swish_client.models.ledger import Direction, EntryStatus, LedgerEntry, PartySummary


STATUS_MAP: dict[str, EntryStatus] = {
    "completed": EntryStatus.COMPLETED,
    "pending": EntryStatus.PENDING,
    "authorized": EntryStatus.PENDING,
    "failed": EntryStatus.FAILED,
    "cancelled": EntryStatus.FAILED,
}


def map_status(value: Any) -> EntryStatus:
    """
    Map an upstream status onto the closed set of entry statuses.

    Case-insensitive. Unknown values (including None) map to PENDING:
    the record still represents a real attempt.
    """
    if not isinstance(value, str):
        return EntryStatus.PENDING
    return STATUS_MAP.get(value.strip().lower(), EntryStatus.PENDING)


def _as_mapping(value: Any) -> Optional[Mapping[str, Any]]:
    return value if isinstance(value, Mapping) else None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def party_name(party: Optional[Mapping[str, Any]]) -> str:
    """Explicit name, else first + last name, trimmed."""
    if not party:
        return ""
    name = _as_text(party.get("name")).strip()
    if name:
        return name
    first = _as_text(party.get("firstName"))
    last = _as_text(party.get("lastName"))
    return f"{first} {last}".strip()


def party_phone(party: Optional[Mapping[str, Any]]) -> str:
    """The service spells this field either phoneNumber or phone."""
    if not party:
        return ""
    return _as_text(party.get("phoneNumber") or party.get("phone"))


def _party_summary(party: Optional[Mapping[str, Any]]) -> Optional[PartySummary]:
    if party is None:
        return None
    return PartySummary(
        id=_as_text(party.get("id")),
        name=party_name(party),
        phone_number=party_phone(party),
    )


def _is_sender(raw: Mapping[str, Any], sender: Optional[Mapping[str, Any]], viewer_id: str) -> bool:
    """Either the top-level sender_id or the nested sender.id may name the viewer."""
    candidates = [raw.get("sender_id"), sender.get("id") if sender else None]
    return any(value is not None and str(value) == viewer_id for value in candidates)


def _safe_amount(value: Any) -> Decimal:
    """Parse an amount; anything unusable becomes 0, negatives lose their sign."""
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not amount.is_finite():
        return Decimal("0")
    return abs(amount)


def _safe_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def to_view_entry(raw: Mapping[str, Any], viewer_id: Optional[str] = None) -> LedgerEntry:
    """
    Reinterpret one raw record from the viewer's side.

    Args:
        raw: Record as returned by the transaction service
        viewer_id: Id of the user looking at the record. If None or
                  empty, the entry is SENT with the receiver as counterparty.

    Returns:
        A LedgerEntry; never raises for malformed input
    """
    if not isinstance(raw, Mapping):
        raw = {}

    sender = _as_mapping(raw.get("sender"))
    receiver = _as_mapping(raw.get("receiver"))

    if not viewer_id:
        direction = Direction.SENT
    elif _is_sender(raw, sender, str(viewer_id)):
        direction = Direction.SENT
    else:
        direction = Direction.RECEIVED

    counterparty = receiver if direction == Direction.SENT else sender

    description = raw.get("description")

    return LedgerEntry(
        id=_as_text(raw.get("id")),
        direction=direction,
        counterparty=party_name(counterparty),
        counterparty_phone=party_phone(counterparty),
        amount=_safe_amount(raw.get("amount")),
        timestamp=_safe_timestamp(raw.get("created_at")),
        message=description if isinstance(description, str) else None,
        status=map_status(raw.get("status")),
        sender=_party_summary(sender),
        receiver=_party_summary(receiver),
    )


def to_view_entries(
    raws: Optional[Iterable[Mapping[str, Any]]],
    viewer_id: Optional[str] = None,
) -> list[LedgerEntry]:
    """Transform a batch of records, preserving order."""
    if not raws:
        return []
    return [to_view_entry(raw, viewer_id) for raw in raws]
