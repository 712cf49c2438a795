"""
User Service Client

Thin typed wrapper over the user service endpoints. Every method
returns the transport's ApiResponse unchanged; interpretation of the
payload belongs to the session manager and the contact directory.
"""

from typing import Optional

from swish_client.models.results import ApiResponse
from swish_client.models.transfer import RegistrationRequest
from swish_client.services.transport import ServiceTransport


class UserServiceClient:
    """Endpoints under /users on the user service."""

    def __init__(self, transport: ServiceTransport):
        self._transport = transport

    @property
    def transport(self) -> ServiceTransport:
        return self._transport

    async def login(self, phone_number: str, password: str) -> ApiResponse:
        """POST /users/login -> {token, user}"""
        return await self._transport.request(
            "/users/login",
            method="POST",
            body={"phoneNumber": phone_number, "password": password},
        )

    async def register(self, request: RegistrationRequest) -> ApiResponse:
        """POST /users/register -> {message, userId, phoneNumber}"""
        return await self._transport.request(
            "/users/register",
            method="POST",
            body=request.to_payload(),
        )

    async def get_user_by_phone(self, phone_number: str) -> ApiResponse:
        """GET /users/{phoneNumber} -> {user, paymentMethods, recentTransactions}"""
        return await self._transport.request(f"/users/{phone_number}")

    async def get_contacts(self, user_id: str) -> ApiResponse:
        """GET /users/{userId}/contacts -> {contacts: [...]}"""
        return await self._transport.request(f"/users/{user_id}/contacts")

    async def add_contact(
        self,
        user_id: str,
        phone_number: str,
        nickname: Optional[str] = None,
    ) -> ApiResponse:
        """POST /users/{userId}/contacts -> {message, contact}"""
        body = {"phoneNumber": phone_number}
        if nickname is not None:
            body["nickname"] = nickname
        return await self._transport.request(
            f"/users/{user_id}/contacts",
            method="POST",
            body=body,
        )

    async def validate_user(
        self,
        phone_number: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> ApiResponse:
        """POST /users/validate -> {valid, user?, error?}"""
        body = {}
        if phone_number is not None:
            body["phoneNumber"] = phone_number
        if user_id is not None:
            body["userId"] = user_id
        return await self._transport.request(
            "/users/validate",
            method="POST",
            body=body,
        )

    async def verify_user(self, user_id: str, verification_code: str) -> ApiResponse:
        """PUT /users/{userId}/verify -> {message}"""
        return await self._transport.request(
            f"/users/{user_id}/verify",
            method="PUT",
            body={"verificationCode": verification_code},
        )

    async def get_balance(self, user_id: str) -> ApiResponse:
        """GET /users/{userId}/balance -> {userId, balance, currency}"""
        return await self._transport.request(f"/users/{user_id}/balance")
