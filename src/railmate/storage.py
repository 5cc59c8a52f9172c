"""String-keyed JSON storage for users, the current user and tickets."""

import json
import logging
import os
import threading
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

USERS_KEY = "train_app_users"
CURRENT_USER_KEY = "train_app_current_user"
TICKETS_KEY = "train_app_tickets"


class MemoryStorage:
    """Key-value store held in memory. Values are copied through JSON on every access."""

    def __init__(self):
        self._data: Dict[str, str] = {}
        self._lock = threading.RLock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            raw = self._read().get(key)
        if raw is None:
            return default
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        encoded = json.dumps(value)
        with self._lock:
            data = dict(self._read())
            data[key] = encoded
            self._write(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = dict(self._read())
            if key in data:
                del data[key]
                self._write(data)

    def update(self, key: str, fn: Callable[[Any], Any], default: Any = None) -> Any:
        """
        Read-modify-write a single key atomically with respect to this store.

        Args:
            key: Key to update.
            fn: Receives the current value (or default) and returns the new value.
            default: Value passed to fn when the key is missing.

        Returns:
            The value written.
        """
        with self._lock:
            value = fn(self.get(key, default))
            self.set(key, value)
            return value

    def keys(self):
        with self._lock:
            return list(self._read().keys())

    def _read(self) -> Dict[str, str]:
        return self._data

    def _write(self, data: Dict[str, str]) -> None:
        self._data = data


class JsonFileStorage(MemoryStorage):
    """
    Key-value store persisted to a single JSON file.

    The file maps keys to JSON-encoded strings. If it cannot be parsed the
    store starts empty and the unreadable file is moved to <path>.corrupt
    before the next write.
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = path
        self._corrupt = False
        self._data = self._load()

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read storage {self.path}: {e}; starting empty")
            self._corrupt = True
            return {}
        if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
            logger.error(f"Unexpected storage layout in {self.path}; starting empty")
            self._corrupt = True
            return {}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return super().get(key, default)
        except ValueError as e:
            logger.error(f"Malformed value for '{key}' in {self.path}: {e}")
            return default

    def _write(self, data: Dict[str, str]) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        if self._corrupt:
            backup = self.path + ".corrupt"
            os.replace(self.path, backup)
            logger.warning(f"Moved unreadable storage to {backup}")
            self._corrupt = False

        tmp_path = self.path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self.path)
        self._data = data


def open_storage(path: Optional[str]) -> MemoryStorage:
    """File-backed storage for a path, in-memory storage for None."""
    if path:
        logger.info(f"Using storage file {path}")
        return JsonFileStorage(path)
    return MemoryStorage()
