from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from common.report_engine.config import (
    MIB,
    AppConfig,
    AttachmentLimits,
    ReportDefaults,
    StorageSettings,
)
from common.report_engine.models import Priority
from common.report_engine.store import StoreAdapter

from .backends import JsonFileBackend


load_dotenv()

STORE_PATH_DEFAULT = ".report_assist_store.json"


def store_path() -> Path:
    return Path(os.getenv("REPORT_ASSIST_STORE_PATH", STORE_PATH_DEFAULT))


def get_app_config() -> AppConfig:
    """
    Load application configuration from environment variables.

    Reads (all optional):
      REPORT_ASSIST_STORAGE_CAPACITY_MB, REPORT_ASSIST_QUOTA_WARNING_MB,
      REPORT_ASSIST_DEFAULT_PRIORITY, REPORT_ASSIST_DEFAULT_CATEGORY,
      REPORT_ASSIST_MAX_ATTACHMENT_MB
    """
    defaults = ReportDefaults()
    limits = AttachmentLimits()
    storage = StorageSettings()

    priority = os.getenv("REPORT_ASSIST_DEFAULT_PRIORITY", "").strip().lower()
    if priority:
        try:
            defaults.priority = Priority(priority)
        except ValueError as exc:
            raise ValueError("REPORT_ASSIST_DEFAULT_PRIORITY must be 'low', 'medium' or 'high'.") from exc
    category = os.getenv("REPORT_ASSIST_DEFAULT_CATEGORY")
    if category is not None:
        defaults.category = category.strip()

    storage.capacity_bytes = _megabytes("REPORT_ASSIST_STORAGE_CAPACITY_MB", storage.capacity_bytes)
    storage.quota_warning_bytes = _megabytes("REPORT_ASSIST_QUOTA_WARNING_MB", storage.quota_warning_bytes)
    limits.max_file_bytes = _megabytes("REPORT_ASSIST_MAX_ATTACHMENT_MB", limits.max_file_bytes)

    return AppConfig(defaults=defaults, attachments=limits, storage=storage)


def open_store(config: AppConfig, path: Path | None = None) -> StoreAdapter:
    backend = JsonFileBackend(path=path or store_path(), capacity_bytes=config.storage.capacity_bytes)
    return StoreAdapter(backend, capacity_bytes=config.storage.capacity_bytes)


def _megabytes(name: str, default_bytes: int) -> int:
    value = os.getenv(name, "").strip()
    if not value:
        return default_bytes
    try:
        megabytes = float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number of megabytes.") from exc
    if megabytes <= 0:
        raise ValueError(f"{name} must be positive.")
    return int(megabytes * MIB)
