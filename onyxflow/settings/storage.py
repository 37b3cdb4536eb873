"""Durable local key-value storage for the settings blob.

One file per key under a base directory, mirroring the browser's
``localStorage`` surface (get/set/remove of string values).
"""

import logging
import os
import re
from pathlib import Path
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class FileStorage:
    """Filesystem-backed storage. Writes are atomic (temp file + rename)."""

    def __init__(self, base_dir: str | Path):
        self.base_dir = Path(base_dir)

    def _resolve(self, key: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self.base_dir / f"{safe}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._resolve(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set_item(self, key: str, value: str) -> None:
        path = self._resolve(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        os.replace(tmp, path)
        logger.debug(f"FileStorage: wrote {key} ({len(value)} chars)")

    def remove_item(self, key: str) -> None:
        self._resolve(key).unlink(missing_ok=True)


class MemoryStorage:
    """In-process storage for tests and ephemeral sessions."""

    def __init__(self):
        self.items: dict[str, str] = {}
        self.writes = 0

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value
        self.writes += 1

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)
