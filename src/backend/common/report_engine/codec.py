"""Text encoding for the persisted record families.

Decoding happens in two steps: ``parse_untrusted`` turns stored text into
plain JSON values without assuming any shape, then the ``decode_*`` helpers
convert those values into trusted domain models. A failure at either step
raises ``DecodeError`` and nothing is returned, so a record is never
partially populated.

Attachments are encoded lossily: only their names are written, and decoding
produces ``RestoredAttachment`` placeholders, never binary payloads.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, List, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import DecodeError
from .models import (
    ChecklistItem,
    ReportRecord,
    ReportRecordPayload,
    RestoredAttachment,
    RuleSet,
)
from .store import StoreKey

M = TypeVar("M", bound=BaseModel)


def dump_record(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


def _dumps(value: Any) -> str:
    # Stored text is ASCII-only; lone surrogates survive as \u escapes.
    return json.dumps(value)


def parse_untrusted(key: StoreKey, text: str) -> Any:
    try:
        return json.loads(text)
    except (ValueError, RecursionError) as exc:
        raise DecodeError(StoreKey(key).value, str(exc)) from exc


def convert_element(key: StoreKey, raw: Any, model: Type[M]) -> M:
    try:
        return model.model_validate(raw)
    except PydanticValidationError as exc:
        raise DecodeError(StoreKey(key).value, str(exc)) from exc


def _convert_list(key: StoreKey, raw: Any, model: Type[M]) -> List[M]:
    if not isinstance(raw, list):
        raise DecodeError(key.value, f"expected a JSON array, got {type(raw).__name__}")
    return [convert_element(key, element, model) for element in raw]


def encode_rule_sets(rule_sets: Iterable[RuleSet]) -> str:
    return _dumps([dump_record(rule_set) for rule_set in rule_sets])


def decode_rule_sets(text: str) -> List[RuleSet]:
    raw = parse_untrusted(StoreKey.RULE_SETS, text)
    return _convert_list(StoreKey.RULE_SETS, raw, RuleSet)


def encode_checklist(checklist: Iterable[ChecklistItem]) -> str:
    return _dumps([dump_record(item) for item in checklist])


def decode_checklist(text: str) -> List[ChecklistItem]:
    raw = parse_untrusted(StoreKey.CHECKLIST, text)
    return _convert_list(StoreKey.CHECKLIST, raw, ChecklistItem)


def report_record_to_payload(record: ReportRecord) -> ReportRecordPayload:
    return ReportRecordPayload(
        issue_number=record.issue_number,
        screenshots=record.attachment_names(),
        description=record.description,
        priority=record.priority,
        category=record.category,
        related_issues=list(record.related_issues),
    )


def payload_to_report_record(payload: ReportRecordPayload) -> ReportRecord:
    return ReportRecord(
        issue_number=payload.issue_number,
        screenshots=[RestoredAttachment(name=name) for name in payload.screenshots if name],
        description=payload.description,
        priority=payload.priority,
        category=payload.category,
        related_issues=list(payload.related_issues or []),
    )


def encode_report_record(record: ReportRecord) -> str:
    return _dumps(dump_record(report_record_to_payload(record)))


def decode_report_record(text: str) -> ReportRecord:
    raw = parse_untrusted(StoreKey.REPORT_RECORD, text)
    if not isinstance(raw, dict):
        raise DecodeError(
            StoreKey.REPORT_RECORD.value, f"expected a JSON object, got {type(raw).__name__}"
        )
    payload = convert_element(StoreKey.REPORT_RECORD, raw, ReportRecordPayload)
    return payload_to_report_record(payload)
