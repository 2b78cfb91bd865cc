"""
Local key-value storage for SwiftLink.

A file-backed stand-in for the browser's localStorage: one JSON object
mapping string keys to string values. Every write rewrites the whole file
atomically (temp file + os.replace) under a lock.

All failures surface as StorageError; callers decide how to degrade.
"""

import os
import json
import tempfile
import threading
from contextlib import contextmanager
from typing import Optional

from errors import StorageError


class LocalStorage:
    """localStorage-style API over a single JSON file."""

    def __init__(self, path: str, quota_bytes: Optional[int] = None):
        self.path = path
        self.quota_bytes = quota_bytes or None
        self._lock = threading.Lock()

    # --------------------------------------------------------
    # Public API
    # --------------------------------------------------------

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(f"Value for {key!r} must be a string, got {type(value).__name__}")
        with self._transaction() as items:
            items[key] = value

    def remove_item(self, key: str) -> None:
        with self._transaction() as items:
            items.pop(key, None)

    def clear(self) -> None:
        with self._transaction() as items:
            items.clear()

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._read_all())

    # --------------------------------------------------------
    # File handling
    # --------------------------------------------------------

    @contextmanager
    def _transaction(self):
        """Read all items, let the caller mutate them, write them back."""
        with self._lock:
            items = self._read_all()
            yield items
            self._write_all(items)

    def _read_all(self) -> dict:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e

        if not raw.strip():
            return {}
        try:
            items = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Storage file {self.path} is corrupt: {e}") from e
        if not isinstance(items, dict) or not all(isinstance(v, str) for v in items.values()):
            raise StorageError(f"Storage file {self.path} is not a key-value object")
        return items

    def _write_all(self, items: dict) -> None:
        payload = json.dumps(items, ensure_ascii=False)
        try:
            size = len(payload.encode("utf-8"))
        except UnicodeEncodeError as e:
            raise StorageError(f"Cannot encode items for {self.path}: {e}") from e
        if self.quota_bytes is not None and size > self.quota_bytes:
            raise StorageError(
                f"Storage quota exceeded ({size} > {self.quota_bytes} bytes)"
            )

        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".swiftlink-", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
