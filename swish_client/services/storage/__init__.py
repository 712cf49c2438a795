"""
Session Storage Package

Provides the abstract session store interface and concrete implementations.
"""

from swish_client.services.storage.interface import (
    IDENTITY_KEY,
    TOKEN_KEY,
    SessionStoreError,
    SessionStoreInterface,
)
from swish_client.services.storage.memory import InMemorySessionStore
from swish_client.services.storage.json_file import JsonFileSessionStore

__all__ = [
    # Interface
    "SessionStoreInterface",
    "IDENTITY_KEY",
    "TOKEN_KEY",
    # Exceptions
    "SessionStoreError",
    # Implementations
    "InMemorySessionStore",
    "JsonFileSessionStore",
]
