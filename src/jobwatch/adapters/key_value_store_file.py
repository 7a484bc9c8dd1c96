"""File-backed implementation of KeyValueStorePort.

Each key is stored as `<directory>/<key>.json`. Writes go to a temporary file
in the same directory followed by `os.replace`, so a crash mid-write leaves
the previous value intact instead of a truncated file.
"""
from __future__ import annotations

import os
import re
import tempfile
from typing import Optional

from jobwatch.core.exceptions import PersistenceError
from jobwatch.core.interfaces.key_value_store import KeyValueStorePort

_SAFE_KEY = re.compile(r"^[A-Za-z0-9._-]+$")


class FileKeyValueStore(KeyValueStorePort):
    def __init__(self, directory: str | os.PathLike) -> None:
        self._dir = os.fspath(directory)

    def _path(self, key: str) -> str:
        if not _SAFE_KEY.match(key):
            raise PersistenceError(f"Invalid storage key: {key!r}", key=key)
        return os.path.join(self._dir, f"{key}.json")

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceError(f"Could not read {path}: {exc}", key=key) from exc

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = None
        try:
            os.makedirs(self._dir, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self._dir, prefix=f".{key}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, path)
            tmp_path = None
        except OSError as exc:
            raise PersistenceError(f"Could not write {path}: {exc}", key=key) from exc
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            os.remove(path)
        except FileNotFoundError:
            return
        except OSError as exc:
            raise PersistenceError(f"Could not delete {path}: {exc}", key=key) from exc
