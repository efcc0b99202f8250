"""
Key/value persistence tiers for client session state.

Two implementations of the KeyValueStorage protocol:

- MemoryStorage: process-lifetime dict. Used as the session-scoped tier
  (logout flag, return URL) and as a durable stand-in for tests.
- JsonFileStorage: a single JSON object on disk, written atomically so a
  concurrent reader never sees a truncated file. Used as the durable tier
  holding the fallback credential across restarts.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class MemoryStorage:
    """In-process key/value storage."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._data


class JsonFileStorage:
    """
    Durable key/value storage backed by a JSON file.

    A missing file reads as empty. A corrupt or unreadable file also reads
    as empty and is logged, so a damaged file never blocks sign-in; the next
    write replaces it.

    Example:
        >>> storage = JsonFileStorage("~/.admin_api/state.json")
        >>> storage.set("admin_token", "eyJ0eXAi...")
        >>> storage.get("admin_token")
        'eyJ0eXAi...'
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(
                "Ignoring unreadable storage file %s: %s",
                self.path,
                e,
                extra={"error_type": type(e).__name__},
            )
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: not a JSON object", self.path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_fd, tmp_path = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(tmp_fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key not in data:
                return
            del data[key]
            self._save(data)


__all__ = ["MemoryStorage", "JsonFileStorage"]
