"""In-memory session store, for tests and short-lived processes."""

from typing import Iterable, Mapping, Optional

from swish_client.services.storage.interface import SessionStoreInterface


class InMemorySessionStore(SessionStoreInterface):
    """Keeps session values in a dict. Lost when the process exits."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._values: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def write_many(self, values: Mapping[str, str]) -> None:
        self._values.update(values)

    def remove_many(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._values.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Copy of everything stored."""
        return dict(self._values)
