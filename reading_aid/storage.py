"""Key-value stores for persisted app data.

WHY: Settings persistence belongs to the platform (device storage on a
phone, a file on a desktop). The settings layer only needs get/set/delete
on string values, so it takes any object with that shape.

HOW: KeyValueStore is a Protocol. MemoryStore keeps a dict (tests, the
default server). JsonFileStore keeps one JSON object on disk and rewrites
it atomically (temp file + replace) on every change.

RULES:
- Values are strings; callers serialize structured data themselves
- get() returns None for missing keys
- JsonFileStore creates parent directories on first write
- A missing JsonFileStore file behaves as an empty store
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """In-process dict-backed store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """Store backed by a single JSON object file.

    WHY: A desktop or server deployment needs settings to survive
    restarts without a database.

    HOW: Every read loads the file; every write loads, modifies, and
    writes a temp file in the same directory before os.replace(), so a
    crash mid-write never leaves a truncated file behind.

    RULES:
    - An unreadable or non-object file is logged and treated as empty
    - Writes always go through _write() (atomic replace)
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path).expanduser()

    def _read(self) -> Dict[str, str]:
        if not self.path.is_file():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable store file: %s", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring store file without a JSON object: %s", self.path)
            return {}
        return data

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), prefix=".store_", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)
