"""Services package."""

from swish_client.services.storage import (
    IDENTITY_KEY,
    TOKEN_KEY,
    InMemorySessionStore,
    JsonFileSessionStore,
    SessionStoreError,
    SessionStoreInterface,
)
from swish_client.services.transport import ServiceTransport
from swish_client.services.users import UserServiceClient
from swish_client.services.transactions import TransactionServiceClient

__all__ = [
    # Storage
    "IDENTITY_KEY",
    "TOKEN_KEY",
    "InMemorySessionStore",
    "JsonFileSessionStore",
    "SessionStoreError",
    "SessionStoreInterface",
    # Transport
    "ServiceTransport",
    # Remote services
    "TransactionServiceClient",
    "UserServiceClient",
]
