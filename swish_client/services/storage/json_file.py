"""
JSON File Session Store

Persists the session as a single small JSON object on disk, the
equivalent of a browser's local storage for a Python process.

TRADEOFFS:
- The whole file is rewritten on every change (it holds two keys)
- Rewrites go through a temp file and os.replace, so a crash leaves
  either the old file or the new one, never a mix
- An unreadable or non-object file is treated as empty; the session
  manager then sees no stored session
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Iterable, Mapping, Optional

import structlog

from swish_client.services.storage.interface import SessionStoreError, SessionStoreInterface


logger = structlog.get_logger(__name__)


class JsonFileSessionStore(SessionStoreInterface):
    """Session store backed by one JSON file."""

    def __init__(self, path: str | os.PathLike):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        """Read the file; missing or unreadable content is treated as empty."""
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise SessionStoreError(f"Could not read session file {self._path}: {e}")

        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("session_file_unreadable", path=str(self._path))
            return {}

        if not isinstance(data, dict):
            logger.warning("session_file_not_an_object", path=str(self._path))
            return {}

        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _save(self, data: dict[str, str]) -> None:
        """Atomically replace the file contents."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(data, fh)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise SessionStoreError(f"Could not write session file {self._path}: {e}")

    def read(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def write_many(self, values: Mapping[str, str]) -> None:
        data = self._load()
        data.update(values)
        self._save(data)

    def remove_many(self, keys: Iterable[str]) -> None:
        data = self._load()
        changed = False
        for key in keys:
            if key in data:
                del data[key]
                changed = True

        if not changed:
            return

        if data:
            self._save(data)
        else:
            try:
                self._path.unlink(missing_ok=True)
            except OSError as e:
                raise SessionStoreError(f"Could not remove session file {self._path}: {e}")
