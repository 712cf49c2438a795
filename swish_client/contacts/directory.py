"""
Contact Directory

Resolves the counterparties a user already knows, for picking a
transfer target. Read-through: every call re-queries the user service.

An empty contact list is a success (a new user has no counterparties
yet) and is distinct from a failed fetch.
"""

from typing import Any, Optional

from swish_client.ledger import to_view_entries
from swish_client.models.contact import Contact
from swish_client.models.results import (
    ContactListResult,
    ErrorKind,
    OperationResult,
)
from swish_client.services.users import UserServiceClient


def initials_for(name: Optional[str]) -> str:
    """
    Uppercase first letters of the first two words of a name.

    "anna berg" -> "AB", "Erik" -> "E", "" -> ""
    """
    if not name:
        return ""
    return "".join(word[0] for word in name.split()[:2]).upper()[:2]


def to_contact(raw: Any, viewer_id: Optional[str] = None) -> Contact:
    """Build a Contact from a user-service contact record."""
    if not isinstance(raw, dict):
        raw = {}

    name = raw.get("nickname") or raw.get("name") or ""
    name = str(name).strip()
    recent = raw.get("recentTransactions")

    return Contact(
        id=str(raw.get("id") or ""),
        name=name,
        phone=str(raw.get("phoneNumber") or raw.get("phone") or ""),
        initials=initials_for(name),
        recent_transactions=to_view_entries(recent if isinstance(recent, list) else [], viewer_id),
    )


class ContactDirectory:
    """Lists and adds contacts through the user service. Keeps no cache."""

    def __init__(self, users: UserServiceClient):
        self._users = users

    async def add(
        self,
        user_id: str,
        phone_number: str,
        nickname: Optional[str] = None,
    ) -> OperationResult:
        """Save a phone number as a contact of user_id."""
        if not user_id:
            return OperationResult.failure(
                error="Not logged in",
                error_kind=ErrorKind.SESSION_STATE,
            )

        phone = (phone_number or "").strip()
        if not phone:
            return OperationResult.failure(
                error="Phone number is required",
                error_kind=ErrorKind.VALIDATION,
            )

        response = await self._users.add_contact(user_id, phone, nickname)
        if not response.ok:
            return OperationResult.from_response(response)
        return OperationResult.ok()

    async def list(self, user_id: str) -> ContactListResult:
        """
        Fetch the contacts of user_id.

        Returns:
            ContactListResult; success with an empty list when the user
            has no contacts
        """
        if not user_id:
            return ContactListResult.failure(
                error="Not logged in",
                error_kind=ErrorKind.SESSION_STATE,
            )

        response = await self._users.get_contacts(user_id)
        if not response.ok:
            return ContactListResult.from_response(response)

        raws = response.data.get("contacts") if isinstance(response.data, dict) else None
        if raws is None:
            raws = []
        if not isinstance(raws, list):
            return ContactListResult.failure(
                error="Malformed contacts response",
                error_kind=ErrorKind.TRANSPORT,
                status_code=response.status_code,
            )

        return ContactListResult.ok(
            contacts=[to_contact(raw, user_id) for raw in raws],
            status_code=response.status_code,
        )
