from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from .models import Priority

MIB = 1024 * 1024

# Nominal browser-style quota. Used only to estimate remaining space.
DEFAULT_CAPACITY_BYTES = 5 * MIB


class ReportDefaults(BaseModel):
    priority: Priority = Priority.MEDIUM
    category: str = "その他"


class AttachmentLimits(BaseModel):
    max_files: int = Field(default=10, ge=1)
    max_file_bytes: int = Field(default=5 * MIB, ge=1)
    allowed_mime_types: List[str] = Field(
        default_factory=lambda: ["image/png", "image/jpeg", "image/jpg", "image/gif"]
    )


class StorageSettings(BaseModel):
    capacity_bytes: int = Field(default=DEFAULT_CAPACITY_BYTES, gt=0)
    quota_warning_bytes: int = Field(default=4 * MIB, gt=0)


class ConfigWarning(BaseModel):
    field: str
    message: str


class AppConfig(BaseModel):
    defaults: ReportDefaults = Field(default_factory=ReportDefaults)
    attachments: AttachmentLimits = Field(default_factory=AttachmentLimits)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    def validate_config(self) -> List[ConfigWarning]:
        warnings: List[ConfigWarning] = []
        if not self.defaults.category.strip():
            warnings.append(
                ConfigWarning(field="defaults.category", message="Default category is empty.")
            )
        if self.storage.quota_warning_bytes > self.storage.capacity_bytes:
            warnings.append(
                ConfigWarning(
                    field="storage.quota_warning_bytes",
                    message="Quota warning threshold is above the assumed storage capacity.",
                )
            )
        return warnings
