"""
Storage backends for device-local session state.

Provides an abstract key/value interface and implementations for persisting
in-progress test sessions. Values are strings, so callers decide the
serialization of what they store.
"""
import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """
    Abstract storage interface for session state.

    Keys are namespaced per test by the caller, so one store can hold the
    sessions of several tests without interference.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Get value for a key.

        Args:
            key: Storage key

        Returns:
            Stored value or None if not found
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Set value for a key, replacing any previous value.

        Args:
            key: Storage key
            value: Value to store
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """
        Delete a key. Deleting an absent key is a no-op.

        Args:
            key: Storage key to delete
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear all stored data."""
        pass


class InMemorySessionStore(SessionStore):
    """
    In-memory storage backend.

    Thread-safe with a lock for concurrent access. Data is lost on process
    restart, which makes it the backend of choice for tests.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def keys(self):
        """Return a snapshot of the stored keys."""
        with self._lock:
            return list(self._data.keys())


class JsonFileSessionStore(SessionStore):
    """
    Durable storage backend keeping all keys in one JSON object on disk.

    Every write rewrites the file through a temporary file followed by
    ``os.replace``, so a crash mid-write leaves the previous contents intact.
    Two processes sharing the file race with last-writer-wins semantics.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable session store at {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring session store at {self.path}: not a JSON object")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key not in data:
                return
            del data[key]
            self._write(data)

    def clear(self) -> None:
        with self._lock:
            self._write({})
