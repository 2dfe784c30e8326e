"""Persistence Module

Encrypted key/value persistence for the conversation and journal stores.

This module provides:
1. A pluggable StorageBackend (get/set/remove of opaque strings)
2. File and in-memory backends
3. EncryptedStore: JSON documents encrypted with Fernet before they hit the backend

Unreadable state (wrong key, tampered or corrupt blob) is treated as
"no prior state" and logged; write failures raise PersistenceFailure.
"""
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from cryptography.fernet import Fernet, InvalidToken

from core.errors import ConfigurationError, PersistenceFailure

logger = logging.getLogger(__name__)


class StorageBackend(ABC):
    """Storage medium for opaque encrypted blobs, addressed by key."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str):
        ...

    @abstractmethod
    def remove(self, key: str):
        ...


class MemoryStorage(StorageBackend):
    """Process-local backend, used by tests and throwaway sessions."""

    def __init__(self):
        self._items: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str):
        self._items[key] = value

    def remove(self, key: str):
        self._items.pop(key, None)


class FileStorage(StorageBackend):
    """One file per key inside a data directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.enc"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str):
        path = self._path(key)
        # Write-then-rename so a crash mid-write keeps the previous blob
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(path)

    def remove(self, key: str):
        self._path(key).unlink(missing_ok=True)


class EncryptedStore:
    """
    Encrypt-then-store wrapper around a StorageBackend.

    Values are JSON-serializable documents; the backend only ever sees
    Fernet tokens.
    """

    def __init__(self, backend: StorageBackend, key):
        if not key:
            raise ConfigurationError("An encryption key is required to open the store")
        try:
            self._fernet = Fernet(key)
        except (ValueError, TypeError) as e:
            raise ConfigurationError("The encryption key is not a valid Fernet key") from e
        self.backend = backend

    @staticmethod
    def generate_key() -> str:
        return Fernet.generate_key().decode("ascii")

    def get(self, key: str) -> Optional[Any]:
        """Load and decrypt a document. None when missing or unreadable."""
        try:
            blob = self.backend.get(key)
        except (OSError, UnicodeError) as e:
            logger.warning(f"Failed to read '{key}' from storage: {e}")
            return None
        if blob is None:
            return None

        try:
            raw = self._fernet.decrypt(blob.encode("ascii"))
            return json.loads(raw.decode("utf-8"))
        except (InvalidToken, UnicodeError, ValueError) as e:
            logger.warning(f"Could not decrypt stored state for '{key}', starting empty: {e!r}")
            return None

    def set(self, key: str, value: Any):
        """Encrypt and write a document before returning."""
        try:
            token = self._fernet.encrypt(json.dumps(value).encode("utf-8"))
            self.backend.set(key, token.decode("ascii"))
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to persist '{key}': {e}", exc_info=True)
            raise PersistenceFailure("Could not save your data") from e

    def remove(self, key: str):
        try:
            self.backend.remove(key)
        except OSError as e:
            logger.error(f"Failed to remove '{key}': {e}", exc_info=True)
            raise PersistenceFailure("Could not remove saved data") from e
