"""Structural integrity checks for persisted record families.

Everything here is read-only: stored text is parsed into untrusted JSON
values and checked against the persisted schemas. Cross-record references
(e.g. a checklist category existing in some RuleSet) are not checked;
checklists are independent of their origin RuleSet once created.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .codec import parse_untrusted
from .errors import DecodeError
from .models import (
    ChecklistItem,
    ReportRecordPayload,
    RuleSet,
    ValidationError,
    ValidationErrorKind,
    ValidationResult,
)
from .store import StoreAdapter, StoreKey

FAMILY_PATHS: Dict[StoreKey, str] = {
    StoreKey.RULE_SETS: "ruleSets",
    StoreKey.REPORT_RECORD: "reportRecord",
    StoreKey.CHECKLIST: "checklist",
}

_REQUIRED_TYPES = {"missing", "string_too_short", "too_short"}
_FORMAT_TYPES = {
    "enum",
    "literal_error",
    "datetime_parsing",
    "datetime_from_date_parsing",
    "date_parsing",
    "union_tag_invalid",
}
_SIZE_TYPES = {"greater_than", "greater_than_equal", "less_than", "less_than_equal", "too_long", "string_too_long"}


def _kind_for(error_type: str) -> ValidationErrorKind:
    if error_type in _REQUIRED_TYPES:
        return ValidationErrorKind.REQUIRED
    if error_type in _FORMAT_TYPES:
        return ValidationErrorKind.FORMAT
    if error_type in _SIZE_TYPES:
        return ValidationErrorKind.SIZE
    return ValidationErrorKind.TYPE


def join_path(prefix: str, loc: Sequence[Any]) -> str:
    path = prefix
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path


def errors_from_pydantic(exc: PydanticValidationError, prefix: str) -> List[ValidationError]:
    return [
        ValidationError(
            field=join_path(prefix, err.get("loc", ())),
            message=err.get("msg", "Invalid value"),
            kind=_kind_for(err.get("type", "")),
        )
        for err in exc.errors()
    ]


def _check_element(raw: Any, model: Type[BaseModel], path: str) -> List[ValidationError]:
    if not isinstance(raw, dict):
        return [
            ValidationError(
                field=path,
                message=f"Expected an object, got {type(raw).__name__}.",
                kind=ValidationErrorKind.TYPE,
            )
        ]
    try:
        model.model_validate(raw)
    except PydanticValidationError as exc:
        return errors_from_pydantic(exc, path)
    return []


def check_rule_set(raw: Any, path: str = "ruleSet") -> List[ValidationError]:
    return _check_element(raw, RuleSet, path)


def check_checklist_item(raw: Any, path: str = "checklistItem") -> List[ValidationError]:
    return _check_element(raw, ChecklistItem, path)


def check_report_record(raw: Any, path: str = "reportRecord") -> List[ValidationError]:
    return _check_element(raw, ReportRecordPayload, path)


ELEMENT_CHECKS = {
    StoreKey.RULE_SETS: check_rule_set,
    StoreKey.CHECKLIST: check_checklist_item,
}


def duplicate_rule_set_indexes(raw: List[Any]) -> List[int]:
    """Indexes of valid RuleSets whose id already appeared earlier in ``raw``."""
    seen = set()
    duplicates: List[int] = []
    for index, element in enumerate(raw):
        if check_rule_set(element):
            continue
        if element["id"] in seen:
            duplicates.append(index)
        else:
            seen.add(element["id"])
    return duplicates


def check_sequence(key: StoreKey, raw: Any) -> List[ValidationError]:
    path = FAMILY_PATHS[key]
    if not isinstance(raw, list):
        return [
            ValidationError(
                field=path,
                message=f"Expected an array, got {type(raw).__name__}.",
                kind=ValidationErrorKind.TYPE,
            )
        ]
    check = ELEMENT_CHECKS[key]
    errors: List[ValidationError] = []
    for index, element in enumerate(raw):
        errors.extend(check(element, f"{path}[{index}]"))
    if key is StoreKey.RULE_SETS:
        for index in duplicate_rule_set_indexes(raw):
            errors.append(
                ValidationError(
                    field=f"{path}[{index}].id",
                    message=f"Duplicate rule set id {raw[index]['id']!r}.",
                    kind=ValidationErrorKind.FORMAT,
                )
            )
    return errors


def validate_family(key: StoreKey, text: str) -> List[ValidationError]:
    key = StoreKey(key)
    path = FAMILY_PATHS[key]
    try:
        raw = parse_untrusted(key, text)
    except DecodeError as exc:
        return [
            ValidationError(
                field=path,
                message=f"Stored {key.label} could not be parsed: {exc.message}",
                kind=ValidationErrorKind.FORMAT,
            )
        ]
    if key is StoreKey.REPORT_RECORD:
        return check_report_record(raw, path)
    return check_sequence(key, raw)


def validate_store(store: StoreAdapter) -> ValidationResult:
    errors: List[ValidationError] = []
    for key in StoreKey:
        read_error = store.read_error(key)
        if read_error is not None:
            errors.append(
                ValidationError(
                    field=FAMILY_PATHS[key],
                    message=f"Stored {key.label} could not be read: {read_error}",
                    kind=ValidationErrorKind.FORMAT,
                )
            )
            continue
        text = store.get(key)
        if text is None:
            continue
        errors.extend(validate_family(key, text))
    return ValidationResult(is_valid=not errors, errors=errors)
