"""Local key-value persistence"""

from .kv_store import KeyValueStore, InMemoryStore, JsonFileStore

__all__ = [
    "KeyValueStore",
    "InMemoryStore",
    "JsonFileStore",
]
