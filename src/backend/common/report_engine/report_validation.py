from __future__ import annotations

import re
from typing import List, Optional

from .config import AttachmentLimits
from .models import (
    ReportRecord,
    RestoredAttachment,
    ValidationError,
    ValidationErrorKind,
)

ISSUE_KEY_PATTERN = re.compile(r"^[A-Z]+-\d+$")


def is_issue_key(value: str) -> bool:
    return bool(ISSUE_KEY_PATTERN.match(value.strip()))


def _error(field: str, message: str, kind: ValidationErrorKind) -> ValidationError:
    return ValidationError(field=field, message=message, kind=kind)


def validate_attachments(record: ReportRecord, limits: AttachmentLimits) -> List[ValidationError]:
    errors: List[ValidationError] = []
    if len(record.screenshots) > limits.max_files:
        errors.append(
            _error(
                "screenshots",
                f"ファイル数が上限を超えています（最大{limits.max_files}ファイル）",
                ValidationErrorKind.SIZE,
            )
        )

    max_mb = limits.max_file_bytes // (1024 * 1024)
    for index, attachment in enumerate(record.screenshots, start=1):
        if isinstance(attachment, RestoredAttachment):
            errors.append(
                _error(
                    "screenshots",
                    f"ファイル{index}: {attachment.name} を再度添付してください",
                    ValidationErrorKind.REQUIRED,
                )
            )
            continue
        if attachment.mime_type not in limits.allowed_mime_types:
            errors.append(
                _error(
                    "screenshots",
                    f"ファイル{index}: サポートされていない形式です（PNG, JPG, GIFのみ）",
                    ValidationErrorKind.TYPE,
                )
            )
        if attachment.size > limits.max_file_bytes:
            errors.append(
                _error(
                    "screenshots",
                    f"ファイル{index}: ファイルサイズが大きすぎます（最大{max_mb}MB）",
                    ValidationErrorKind.SIZE,
                )
            )
    return errors


def validate_report_record(
    record: ReportRecord,
    limits: Optional[AttachmentLimits] = None,
) -> List[ValidationError]:
    """Form-level checks run before a document is generated."""
    limits = limits or AttachmentLimits()
    errors: List[ValidationError] = []

    issue_number = record.issue_number.strip()
    if not issue_number:
        errors.append(_error("issueNumber", "課題番号は必須です", ValidationErrorKind.REQUIRED))
    elif not is_issue_key(issue_number):
        errors.append(
            _error(
                "issueNumber",
                "課題番号の形式が正しくありません（例：PROJ-123）",
                ValidationErrorKind.FORMAT,
            )
        )

    if not record.category.strip():
        errors.append(_error("category", "カテゴリは必須です", ValidationErrorKind.REQUIRED))

    for index, issue in enumerate(record.related_issues, start=1):
        if issue and issue.strip() and not is_issue_key(issue):
            errors.append(
                _error(
                    "relatedIssues",
                    f"関連課題{index}の形式が正しくありません（例：PROJ-123）",
                    ValidationErrorKind.FORMAT,
                )
            )

    if record.screenshots:
        errors.extend(validate_attachments(record, limits))
    return errors
