from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Protocol

from .config import DEFAULT_CAPACITY_BYTES
from .errors import QuotaExceeded, StorageFullError, StoreWriteError
from .models import StorageUsage

logger = logging.getLogger(__name__)


class StoreKey(str, Enum):
    RULE_SETS = "report-assist-rulesets"
    REPORT_RECORD = "report-assist-form-data"
    CHECKLIST = "report-assist-checklist-state"

    @property
    def label(self) -> str:
        return {
            StoreKey.RULE_SETS: "rule sets",
            StoreKey.REPORT_RECORD: "report record",
            StoreKey.CHECKLIST: "checklist",
        }[self]


class KeyValueBackend(Protocol):
    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...

    def keys(self) -> Iterable[str]:
        ...


@dataclass(frozen=True)
class StoreWriteResult:
    key: StoreKey
    error: Optional[StoreWriteError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def text_size(key: str, value: str) -> int:
    return len(key.encode("utf-8", "surrogatepass")) + len(value.encode("utf-8", "surrogatepass"))


class StoreAdapter:
    """The only component that touches the durable key-value store.

    Keys are restricted to ``StoreKey``. ``set`` never raises: backend
    failures come back as a ``StoreWriteResult`` carrying the error.
    ``usage`` is an estimate against ``capacity_bytes``, not a platform limit.
    """

    def __init__(self, backend: KeyValueBackend, *, capacity_bytes: int = DEFAULT_CAPACITY_BYTES):
        self._backend = backend
        self._capacity_bytes = capacity_bytes

    @property
    def capacity_bytes(self) -> int:
        return self._capacity_bytes

    def get(self, key: StoreKey) -> Optional[str]:
        key = StoreKey(key)
        try:
            return self._backend.get_item(key.value)
        except OSError as exc:
            logger.warning("Failed to read %s: %s", key.value, exc)
            return None

    def read_error(self, key: StoreKey) -> Optional[str]:
        """Return why ``key`` cannot be read, or None when ``get`` is trustworthy."""
        key = StoreKey(key)
        try:
            self._backend.get_item(key.value)
        except OSError as exc:
            return str(exc)
        return None

    def set(self, key: StoreKey, text: str) -> StoreWriteResult:
        key = StoreKey(key)
        try:
            self._backend.set_item(key.value, text)
        except StorageFullError as exc:
            logger.warning("Storage quota exceeded while writing %s: %s", key.value, exc)
            return StoreWriteResult(key=key, error=QuotaExceeded(key.value, str(exc)))
        except (OSError, UnicodeError) as exc:
            logger.warning("Failed to write %s: %s", key.value, exc)
            return StoreWriteResult(key=key, error=StoreWriteError(key.value, str(exc)))
        return StoreWriteResult(key=key)

    def remove(self, key: StoreKey) -> None:
        key = StoreKey(key)
        try:
            self._backend.remove_item(key.value)
        except OSError as exc:
            logger.warning("Failed to remove %s: %s", key.value, exc)

    def clear_all(self) -> None:
        for key in StoreKey:
            self.remove(key)

    def usage(self) -> StorageUsage:
        used = 0
        active = []
        for key in StoreKey:
            value = self.get(key)
            if value is None:
                continue
            used += text_size(key.value, value)
            active.append(key.value)
        return StorageUsage(
            used_bytes=used,
            estimated_available_bytes=max(self._capacity_bytes - used, 0),
            active_keys=active,
        )
