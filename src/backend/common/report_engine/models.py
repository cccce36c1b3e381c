from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt
from pydantic.alias_generators import to_camel


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ValidationErrorKind(str, Enum):
    REQUIRED = "required"
    FORMAT = "format"
    SIZE = "size"
    TYPE = "type"


class RecordModel(BaseModel):
    # Persisted and exported JSON uses camelCase keys.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Rule(RecordModel):
    id: str = Field(min_length=1)
    text: str = Field(min_length=1)
    category: str = Field(min_length=1)
    priority: StrictInt = 1
    description: Optional[str] = None


class RuleSet(RecordModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = ""
    version: str = "1.0.0"
    rules: List[Rule] = Field(min_length=1)
    created_at: datetime
    updated_at: datetime


class ChecklistItem(RecordModel):
    id: str = Field(min_length=1)
    text: str = Field(min_length=1)
    checked: StrictBool = False
    category: Optional[str] = None

    @classmethod
    def from_rule(cls, rule: Rule) -> "ChecklistItem":
        return cls(id=rule.id, text=rule.text, checked=False, category=rule.category)


class PendingAttachment(RecordModel):
    """Attachment whose binary payload is held in memory for this process."""

    kind: Literal["pending"] = "pending"
    name: str = Field(min_length=1)
    size: int = Field(default=0, ge=0)
    mime_type: str = ""
    data: bytes = Field(default=b"", repr=False)


class RestoredAttachment(RecordModel):
    """Name-only placeholder for an attachment recovered from the store.

    The payload is never persisted, so it must be re-supplied before the
    attachment can be uploaded anywhere.
    """

    kind: Literal["restored"] = "restored"
    name: str = Field(min_length=1)


Attachment = Annotated[Union[PendingAttachment, RestoredAttachment], Field(discriminator="kind")]


class ReportRecord(RecordModel):
    issue_number: str = ""
    screenshots: List[Attachment] = Field(default_factory=list)
    description: str = ""
    priority: Priority = Priority.MEDIUM
    category: str = ""
    related_issues: List[str] = Field(default_factory=list)

    def attachment_names(self) -> List[str]:
        return [attachment.name for attachment in self.screenshots]

    def pending_attachments(self) -> List[PendingAttachment]:
        return [a for a in self.screenshots if isinstance(a, PendingAttachment)]

    def restored_attachments(self) -> List[RestoredAttachment]:
        return [a for a in self.screenshots if isinstance(a, RestoredAttachment)]


class ReportRecordPayload(RecordModel):
    """Persisted shape of a ReportRecord: attachments are reduced to names."""

    issue_number: str = ""
    screenshots: List[str] = Field(default_factory=list)
    description: str = ""
    priority: Priority = Priority.MEDIUM
    category: str = ""
    related_issues: Optional[List[str]] = None


class ValidationError(RecordModel):
    field: str
    message: str
    kind: ValidationErrorKind


class ValidationResult(BaseModel):
    is_valid: bool
    errors: List[ValidationError] = Field(default_factory=list)


class RepairResult(BaseModel):
    repaired: bool
    actions: List[str] = Field(default_factory=list)


class ImportResult(BaseModel):
    success: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    imported_rule_sets: int = 0
    imported_checklist_items: int = 0
    imported_report_record: bool = False


class StorageUsage(BaseModel):
    used_bytes: int
    estimated_available_bytes: int
    active_keys: List[str] = Field(default_factory=list)


class PersistedBundle(RecordModel):
    version: str
    exported_at: datetime
    rule_sets: List[RuleSet] = Field(default_factory=list)
    report_record: Optional[ReportRecordPayload] = None
    checklist: List[ChecklistItem] = Field(default_factory=list)
