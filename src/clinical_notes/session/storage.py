"""Best-effort durable key/value storage for session selections.

Implementations never raise on access failures. Reads report whether they
succeeded; writes and removals return ``False`` on failure. Callers keep their
in-memory value as the source of truth when storage is unavailable.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import NamedTuple

logger = logging.getLogger(__name__)


class StorageRead(NamedTuple):
    ok: bool
    value: str | None = None


class DurableStorage(ABC):
    """String key/value storage that survives restarts."""

    @abstractmethod
    def get_item(self, key: str) -> StorageRead:
        """Read ``key``. A missing key is a successful read of ``None``."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> bool:
        """Store ``value`` under ``key``. Returns False if it was not stored."""

    @abstractmethod
    def remove_item(self, key: str) -> bool:
        """Delete ``key``. Removing a missing key succeeds."""


class MemoryStorage(DurableStorage):
    """Process-local storage, for tests and for sessions without a disk."""

    def __init__(self, items: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> StorageRead:
        return StorageRead(True, self._items.get(key))

    def set_item(self, key: str, value: str) -> bool:
        self._items[key] = value
        return True

    def remove_item(self, key: str) -> bool:
        self._items.pop(key, None)
        return True

    def snapshot(self) -> dict[str, str]:
        return dict(self._items)


class JSONFileStorage(DurableStorage):
    """All keys in one JSON object on disk, rewritten on every change."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def get_item(self, key: str) -> StorageRead:
        items = self._load()
        if items is None:
            return StorageRead(False)
        value = items.get(key)
        return StorageRead(True, value if isinstance(value, str) else None)

    def set_item(self, key: str, value: str) -> bool:
        items = self._load()
        if items is None:
            return False
        items[key] = value
        return self._dump(items)

    def remove_item(self, key: str) -> bool:
        items = self._load()
        if items is None:
            return False
        if key not in items:
            return True
        del items[key]
        return self._dump(items)

    def _load(self) -> dict[str, object] | None:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            logger.warning("Session storage %s is unreadable: %s", self.path, exc)
            return None
        try:
            items = json.loads(raw) if raw.strip() else {}
        except ValueError as exc:
            logger.warning("Session storage %s is corrupt: %s", self.path, exc)
            return None
        if not isinstance(items, dict):
            logger.warning("Session storage %s does not hold an object", self.path)
            return None
        return items

    def _dump(self, items: dict[str, object]) -> bool:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(items, indent=2, sort_keys=True), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as exc:
            logger.warning("Could not write session storage %s: %s", self.path, exc)
            return False
        return True
