from __future__ import annotations


class ReportAssistError(Exception):
    pass


class DecodeError(ReportAssistError):
    """Persisted text for a record family could not be parsed or converted."""

    def __init__(self, key: str, message: str):
        super().__init__(f"Failed to decode {key}: {message}")
        self.key = key
        self.message = message


class StoreWriteError(ReportAssistError):
    def __init__(self, key: str, message: str):
        super().__init__(f"Failed to write {key}: {message}")
        self.key = key
        self.message = message


class QuotaExceeded(StoreWriteError):
    pass


class StorageFullError(OSError):
    """Raised by a key-value backend when a write would exceed its capacity."""


class RecordImportError(ReportAssistError):
    def __init__(self, family: str, label: str, message: str):
        super().__init__(f"{family} '{label}' skipped: {message}")
        self.family = family
        self.label = label
        self.message = message
