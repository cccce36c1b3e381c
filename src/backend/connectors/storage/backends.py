from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Optional

from common.report_engine.errors import StorageFullError
from common.report_engine.store import text_size

logger = logging.getLogger(__name__)


class CorruptStoreFileError(OSError):
    """The store file exists but does not hold a JSON object."""


def _check_capacity(items: Dict[str, str], key: str, value: str, capacity_bytes: Optional[int]) -> None:
    if capacity_bytes is None:
        return
    used = sum(text_size(k, v) for k, v in items.items() if k != key)
    needed = used + text_size(key, value)
    if needed > capacity_bytes:
        raise StorageFullError(f"write of {key} needs {needed} bytes; capacity is {capacity_bytes}")


@dataclass
class InMemoryBackend:
    """Process-local key-value store. ``capacity_bytes`` enforces a hard quota."""

    capacity_bytes: Optional[int] = None
    items: Dict[str, str] = field(default_factory=dict)

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        _check_capacity(self.items, key, value, self.capacity_bytes)
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)

    def keys(self) -> Iterable[str]:
        return list(self.items.keys())


@dataclass(frozen=True)
class JsonFileBackend:
    """Key-value store kept as a single JSON object on disk.

    Writes go to a temporary file first and are moved into place, so a crash
    mid-write leaves the previous contents intact.
    """

    path: Path
    capacity_bytes: Optional[int] = None

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (ValueError, RecursionError) as exc:
            raise CorruptStoreFileError(f"Store file {self.path} is not valid JSON: {exc}") from exc
        if not isinstance(raw, dict):
            raise CorruptStoreFileError(f"Store file {self.path} does not hold a JSON object")
        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def _save(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                json.dump(items, handle, ensure_ascii=False, indent=2)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_path, self.path)
        finally:
            if temp_path.exists():
                temp_path.unlink()

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        _check_capacity(items, key, value, self.capacity_bytes)
        items[key] = value
        self._save(items)

    def remove_item(self, key: str) -> None:
        # Removing from an unreadable file resets it; its contents are already lost.
        try:
            items = self._load()
        except CorruptStoreFileError as exc:
            logger.warning("Resetting unreadable store file: %s", exc)
            self._save({})
            return
        if key in items:
            del items[key]
            self._save(items)

    def keys(self) -> Iterable[str]:
        return list(self._load().keys())
