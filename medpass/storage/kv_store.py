"""
Flat string key-value storage.

The session layer never touches a device store directly; it is handed a
KeyValueStore. JsonFileStore persists to one JSON object on disk with
atomic writes, InMemoryStore backs tests and short-lived processes.
"""

import json
import shutil
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, Optional

from ..utils.exceptions import StorageError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class KeyValueStore(ABC):
    """String-to-string store. Implementations raise StorageError on failure."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set_items(self, items: Dict[str, str]) -> None:
        ...

    @abstractmethod
    def remove_items(self, keys: Iterable[str]) -> None:
        ...

    def set_item(self, key: str, value: str) -> None:
        self.set_items({key: value})

    def remove_item(self, key: str) -> None:
        self.remove_items([key])

    def get_items(self, keys: Iterable[str]) -> Dict[str, Optional[str]]:
        return {key: self.get_item(key) for key in keys}


class InMemoryStore(KeyValueStore):
    """Dictionary-backed store"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.RLock()

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set_items(self, items: Dict[str, str]) -> None:
        for key, value in items.items():
            if not isinstance(value, str):
                raise StorageError(f"Value for {key} must be a string, got {type(value).__name__}")
        with self._lock:
            self._data.update(items)

    def remove_items(self, keys: Iterable[str]) -> None:
        with self._lock:
            for key in keys:
                self._data.pop(key, None)

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._data)


class JsonFileStore(KeyValueStore):
    """Store persisted as a single JSON object, rewritten atomically on every change"""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.RLock()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise StorageError(f"Failed to read {self.path}: {e}")
        if not isinstance(raw, dict):
            raise StorageError(f"Unexpected content in {self.path}: expected an object")
        return raw

    def _atomic_write(self, payload: Dict[str, str]) -> None:
        temp_path: Optional[Path] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w", dir=str(self.path.parent), delete=False, encoding="utf-8"
            ) as tf:
                temp_path = Path(tf.name)
                json.dump(payload, tf, indent=2, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as e:
            if temp_path is not None and temp_path.exists():
                temp_path.unlink()
            raise StorageError(f"Failed to write {self.path}: {e}")
        try:
            shutil.move(str(temp_path), str(self.path))
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise StorageError(f"Failed to replace {self.path}: {e}")

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def get_items(self, keys: Iterable[str]) -> Dict[str, Optional[str]]:
        with self._lock:
            data = self._load()
        return {key: data.get(key) for key in keys}

    def set_items(self, items: Dict[str, str]) -> None:
        for key, value in items.items():
            if not isinstance(value, str):
                raise StorageError(f"Value for {key} must be a string, got {type(value).__name__}")
        with self._lock:
            data = self._load()
            data.update(items)
            self._atomic_write(data)

    def remove_items(self, keys: Iterable[str]) -> None:
        with self._lock:
            data = self._load()
            changed = False
            for key in keys:
                if key in data:
                    del data[key]
                    changed = True
            if changed:
                self._atomic_write(data)
