"""Credential storage for the login flow.

Persists the access token and the in-flight code verifier under fixed keys
in a synchronous key-value storage that survives restarts. The storage is
injected so the session controller can run against an in-memory fake.
"""

from __future__ import annotations

import json
import logging
import os
import stat
from pathlib import Path
from typing import Protocol

from tunelink.auth.models.errors import StorageUnavailableError

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
CODE_VERIFIER_KEY = "code_verifier"

CREDENTIAL_KEYS = (TOKEN_KEY, CODE_VERIFIER_KEY)


class Storage(Protocol):
    """Synchronous string key-value storage."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemoryStorage:
    """Storage kept in a dict. Lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class JsonFileStorage:
    """Storage backed by a single JSON object on disk.

    The file is readable and writable by the owner only. An unreadable or
    corrupt file reads as empty; write failures propagate as ``OSError``.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def _load(self) -> dict[str, str]:
        try:
            if not self.path.exists():
                return {}
            data = json.loads(self.path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2))
        if os.name != "nt":
            self.path.chmod(stat.S_IRUSR | stat.S_IWUSR)


class CredentialStore:
    """Reads and writes the two credential entries of the login flow.

    Only the fixed keys ``token`` and ``code_verifier`` are accepted. No
    expiry is enforced here; a token lives until logout or until the
    provider rejects it.
    """

    def __init__(self, storage: Storage):
        self._storage = storage

    def get(self, key: str) -> str | None:
        self._check_key(key)
        value = self._storage.get(key)
        logger.debug(f"Read {key}: {'present' if value else 'absent'}")
        return value or None

    def set(self, key: str, value: str) -> None:
        """Persist a credential entry.

        Raises:
            StorageUnavailableError: If the backing storage cannot be written
        """
        self._check_key(key)
        try:
            self._storage.set(key, value)
        except (OSError, TypeError, ValueError) as e:
            raise StorageUnavailableError(f"Failed to persist {key}: {e}") from e
        logger.debug(f"Stored {key}")

    def remove(self, key: str) -> None:
        self._check_key(key)
        try:
            self._storage.remove(key)
        except OSError as e:
            raise StorageUnavailableError(f"Failed to remove {key}: {e}") from e
        logger.debug(f"Removed {key}")

    @property
    def token(self) -> str | None:
        return self.get(TOKEN_KEY)

    @property
    def code_verifier(self) -> str | None:
        return self.get(CODE_VERIFIER_KEY)

    def clear(self) -> None:
        """Remove both the token and the code verifier."""
        for key in CREDENTIAL_KEYS:
            self.remove(key)

    @staticmethod
    def _check_key(key: str) -> None:
        if key not in CREDENTIAL_KEYS:
            raise KeyError(f"Unknown credential key: {key}")
