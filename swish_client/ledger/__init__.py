"""Ledger view package."""

from swish_client.ledger.transformer import (
    map_status,
    party_name,
    party_phone,
    to_view_entries,
    to_view_entry,
)

__all__ = [
    "map_status",
    "party_name",
    "party_phone",
    "to_view_entries",
    "to_view_entry",
]
