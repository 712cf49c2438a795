"""
Abstract Session Store Interface

DESIGN DECISION: We define an abstract interface for the persisted
client state. This allows us to:
1. Keep the session in a JSON file for a CLI or desktop shell
2. Use in-memory storage for testing
3. Plug in a keyring or browser-like storage later

The store holds opaque strings under a handful of keys. It knows nothing
about identities or tokens; the SessionManager owns their meaning.

CRITICAL: write_many and remove_many apply all keys in one step.
The token and identity snapshot must never be stored without each other.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Mapping, Optional


# Keys used by the session manager
TOKEN_KEY = "auth_token"
IDENTITY_KEY = "user_data"


class SessionStoreInterface(ABC):
    """
    Abstract interface for persisted session state.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read a stored value.

        Args:
            key: The key to look up

        Returns:
            The stored string, or None if absent
        """
        pass

    @abstractmethod
    def write_many(self, values: Mapping[str, str]) -> None:
        """
        Store several values in one step.

        Args:
            values: Mapping of key to value

        Raises:
            SessionStoreError: If the write fails (nothing is written)
        """
        pass

    @abstractmethod
    def remove_many(self, keys: Iterable[str]) -> None:
        """
        Remove several keys in one step. Missing keys are ignored.

        Raises:
            SessionStoreError: If the removal fails
        """
        pass


class SessionStoreError(Exception):
    """Base exception for session store operations."""
    pass
