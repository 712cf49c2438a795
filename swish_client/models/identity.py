"""
Identity and Session Models

The Identity is the authenticated user's locally held profile and
balance snapshot. It is owned by the SessionManager and persisted as an
opaque JSON snapshot next to the session token.

DESIGN DECISION: Field names follow Python conventions, with the user
service's camelCase names as aliases. Snapshots are written with aliases
so they round-trip through the same parser as a login response.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionState(str, Enum):
    """
    Lifecycle of the single session slot.

    UNAUTHENTICATED -> AUTHENTICATING -> AUTHENTICATED
    AUTHENTICATING -> UNAUTHENTICATED on failure
    AUTHENTICATED -> UNAUTHENTICATED on logout
    """
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


class Identity(BaseModel):
    """
    The authenticated user.

    CRITICAL: An Identity is never partially constructed. Updates build
    a complete, validated copy which then replaces the previous one.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    id: str = Field(
        ...,
        min_length=1,
        description="User id assigned by the user service"
    )
    phone_number: str = Field(
        ...,
        alias="phoneNumber",
        description="Phone number, used as the transfer handle across services"
    )
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    email: Optional[str] = None
    is_verified: bool = Field(default=False, alias="isVerified")
    balance: Optional[float] = Field(
        default=None,
        description="Last known balance; currency is implicit"
    )

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_snapshot(self) -> str:
        """Serialize for the session store."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_snapshot(cls, snapshot: str) -> "Identity":
        """
        Parse a stored snapshot.

        Raises:
            pydantic.ValidationError: If the snapshot is corrupt
        """
        return cls.model_validate_json(snapshot)

    def merged(self, **fields) -> "Identity":
        """Return a validated copy with the given fields replaced."""
        data = self.model_dump()
        data.update(fields)
        return Identity.model_validate(data)
