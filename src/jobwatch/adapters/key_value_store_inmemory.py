"""In-memory implementation of KeyValueStorePort.

Suitable for tests and for sessions that should not touch the disk.
"""
from __future__ import annotations

from typing import Dict, Optional

from jobwatch.core.interfaces.key_value_store import KeyValueStorePort


class InMemoryKeyValueStore(KeyValueStorePort):
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)
