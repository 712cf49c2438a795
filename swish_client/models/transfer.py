"""
Transfer and Registration Models

Request bodies sent to the remote services and the results they return.

CRITICAL: A TransferResult is the only evidence that money moved.
The client never infers success from anything else.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class TransferRequest(BaseModel):
    """Body of POST /transactions/transfer."""

    sender_phone: str = Field(..., min_length=1)
    receiver_phone: str = Field(..., min_length=1)
    amount: Decimal = Field(
        ...,
        gt=0,
        max_digits=15,
        decimal_places=2,
        description="Normalized amount with at most two decimals; 15 digits survive the JSON number exactly"
    )
    description: Optional[str] = Field(default=None, max_length=500)

    @field_serializer('amount', when_used='json')
    def serialize_amount(self, amount: Decimal) -> float:
        """The service expects a JSON number."""
        return float(amount)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class TransferParty(BaseModel):
    """Sender or receiver snippet echoed back by the transfer endpoint."""
    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    id: str = ""
    phone: str = ""
    name: str = ""


class TransferResult(BaseModel):
    """Response of POST /transactions/transfer."""
    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    transaction_id: str = Field(..., min_length=1)
    status: str = "pending"
    sender: Optional[TransferParty] = None
    receiver: Optional[TransferParty] = None
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    created_at: Optional[datetime] = None


class RegistrationRequest(BaseModel):
    """Body of POST /users/register."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    phone_number: str = Field(..., min_length=1, alias="phoneNumber")
    first_name: str = Field(..., min_length=1, alias="firstName")
    last_name: str = Field(..., min_length=1, alias="lastName")
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1, repr=False)

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


class RegistrationReceipt(BaseModel):
    """Response of POST /users/register."""
    model_config = ConfigDict(
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    message: str = ""
    user_id: Optional[str] = Field(default=None, alias="userId")
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")
