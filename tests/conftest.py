"""
Shared fixtures.

No real services are contacted: both transports are wired to one
FakeBackend through httpx.MockTransport, which records every request.
"""

import asyncio
import json
from typing import Any, Callable, Optional

import httpx
import pytest

from swish_client.audit import AuditLogger
from swish_client.contacts import ContactDirectory
from swish_client.models.identity import Identity
from swish_client.services import (
    IDENTITY_KEY,
    TOKEN_KEY,
    InMemorySessionStore,
    ServiceTransport,
    TransactionServiceClient,
    UserServiceClient,
)
from swish_client.session import SessionManager


USER_BASE_URL = "http://users.test"
TRANSACTION_BASE_URL = "http://transactions.test"

ANNA = {
    "id": "u1",
    "phoneNumber": "+46701234567",
    "firstName": "Anna",
    "lastName": "Berg",
    "email": "anna@example.com",
    "isVerified": False,
    "balance": 500.0,
}


class FakeBackend:
    """Routes requests by (method, path) and records them."""

    def __init__(self):
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        status: int = 200,
        json_body: Any = None,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ) -> None:
        if handler is None:
            def handler(request, status=status, json_body=json_body):
                return httpx.Response(status, json=json_body)
        self.routes[(method.upper(), path)] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"error": "Not found"})
        return handler(request)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method.upper() and r.url.path == path
        ]

    @staticmethod
    def body_of(request: httpx.Request) -> Any:
        return json.loads(request.content) if request.content else None


@pytest.fixture
def run():
    """Drive a coroutine to completion from a plain test."""
    return asyncio.run


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


def _transport(backend: FakeBackend, store, base_url: str, name: str) -> ServiceTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(backend.handle))
    return ServiceTransport(base_url, store, client=client, service_name=name)


@pytest.fixture
def user_transport(backend, store) -> ServiceTransport:
    return _transport(backend, store, USER_BASE_URL, "user_service")


@pytest.fixture
def transaction_transport(backend, store) -> ServiceTransport:
    return _transport(backend, store, TRANSACTION_BASE_URL, "transaction_service")


@pytest.fixture
def users(user_transport) -> UserServiceClient:
    return UserServiceClient(user_transport)


@pytest.fixture
def transactions(transaction_transport) -> TransactionServiceClient:
    return TransactionServiceClient(transaction_transport)


@pytest.fixture
def session(users, store, audit) -> SessionManager:
    return SessionManager(users, store, audit)


@pytest.fixture
def directory(users) -> ContactDirectory:
    return ContactDirectory(users)


@pytest.fixture
def logged_in_session(session, store) -> SessionManager:
    """A session restored from a valid stored snapshot for ANNA."""
    store.write_many({
        TOKEN_KEY: "t1",
        IDENTITY_KEY: Identity.model_validate(ANNA).to_snapshot(),
    })
    session.restore()
    return session


class RecordingAuditLogger(AuditLogger):
    """Keeps every audit event in memory instead of only logging it."""

    def __init__(self):
        super().__init__()
        self.events = []

    def log(self, event) -> bool:
        self.events.append(event)
        return super().log(event)

    def types(self) -> list[str]:
        return [event.event_type.value for event in self.events]


@pytest.fixture
def audit() -> RecordingAuditLogger:
    return RecordingAuditLogger()
