import json

import pytest
from pydantic import ValidationError as PydanticValidationError

from common.report_engine.models import ChecklistItem, ValidationErrorKind
from common.report_engine.repository import RecordRepository
from common.report_engine.store import StoreKey
from common.report_engine.validator import (
    check_rule_set,
    errors_from_pydantic,
    validate_family,
    validate_store,
)


def _rule_set_raw(**overrides):
    raw = {
        "id": "rs1",
        "name": "Rule Set 1",
        "description": "",
        "version": "1.0.0",
        "rules": [{"id": "r1", "text": "Check A", "category": "X", "priority": 1}],
        "createdAt": "2025-01-15T09:30:00Z",
        "updatedAt": "2025-01-15T09:30:00Z",
    }
    raw.update(overrides)
    return raw


def test_empty_store_is_valid(store):
    result = validate_store(store)
    assert result.is_valid
    assert result.errors == []


def test_records_written_through_repository_validate_clean(store, make_rule_set, make_checklist, make_report):
    repo = RecordRepository(store)
    repo.put_rule_sets([make_rule_set()])
    repo.save_checklist(make_checklist({"id": "a", "text": "A", "checked": True}))
    repo.save_report_record(make_report(related_issues=["PROJ-2"]))

    assert validate_store(store).is_valid


def test_unparseable_family_is_a_format_error(store):
    store.set(StoreKey.REPORT_RECORD, "{bad json")
    result = validate_store(store)

    assert not result.is_valid
    [error] = result.errors
    assert error.field == "reportRecord"
    assert error.kind == ValidationErrorKind.FORMAT
    assert "report record" in error.message


def test_rule_set_errors_carry_nested_paths():
    raw = _rule_set_raw(rules=[{"id": "r1", "text": "ok", "category": "X"}, {"id": "r2", "text": "", "category": "X"}])
    errors = check_rule_set(raw, "ruleSets[0]")

    assert [(e.field, e.kind) for e in errors] == [("ruleSets[0].rules[1].text", ValidationErrorKind.REQUIRED)]


def test_error_kinds_cover_required_format_and_type():
    missing_name = _rule_set_raw()
    del missing_name["name"]
    bad_date = _rule_set_raw(createdAt="yesterday")
    bad_priority = _rule_set_raw(rules=[{"id": "r1", "text": "t", "category": "X", "priority": "1"}])
    empty_rules = _rule_set_raw(rules=[])

    assert check_rule_set(missing_name)[0].kind == ValidationErrorKind.REQUIRED
    assert check_rule_set(bad_date)[0].kind == ValidationErrorKind.FORMAT
    assert check_rule_set(bad_priority)[0].kind == ValidationErrorKind.TYPE
    assert check_rule_set(empty_rules)[0].field == "ruleSet.rules"
    assert check_rule_set(empty_rules)[0].kind == ValidationErrorKind.REQUIRED


def test_non_object_elements_are_type_errors():
    errors = validate_family(StoreKey.CHECKLIST, json.dumps([{"id": "a", "text": "A", "checked": False}, 5]))
    assert [(e.field, e.kind) for e in errors] == [("checklist[1]", ValidationErrorKind.TYPE)]


def test_wrong_container_is_a_type_error():
    errors = validate_family(StoreKey.RULE_SETS, json.dumps({"id": "rs1"}))
    assert [(e.field, e.kind) for e in errors] == [("ruleSets", ValidationErrorKind.TYPE)]


def test_report_record_with_bad_priority_is_a_format_error():
    errors = validate_family(StoreKey.REPORT_RECORD, json.dumps({"issueNumber": "PROJ-1", "priority": "urgent"}))
    assert [(e.field, e.kind) for e in errors] == [("reportRecord.priority", ValidationErrorKind.FORMAT)]


def test_checked_flag_must_be_boolean():
    errors = validate_family(StoreKey.CHECKLIST, json.dumps([{"id": "a", "text": "A", "checked": "true"}]))
    assert [(e.field, e.kind) for e in errors] == [("checklist[0].checked", ValidationErrorKind.TYPE)]


def test_validation_does_not_modify_store(store):
    store.set(StoreKey.CHECKLIST, "[1, 2]")
    validate_store(store)
    assert store.get(StoreKey.CHECKLIST) == "[1, 2]"


def test_errors_from_pydantic_prefixes_paths():
    with pytest.raises(PydanticValidationError) as excinfo:
        ChecklistItem.model_validate({"id": "a"})
    errors = errors_from_pydantic(excinfo.value, "checklist[3]")
    assert [e.field for e in errors] == ["checklist[3].text"]


def test_deeply_nested_text_is_a_format_error(store):
    store.set(StoreKey.CHECKLIST, "[" * 100000)
    result = validate_store(store)
    assert [(e.field, e.kind) for e in result.errors] == [("checklist", ValidationErrorKind.FORMAT)]


def test_repeated_rule_set_id_is_a_format_error():
    first = _rule_set_raw()
    again = _rule_set_raw(name="Copy")
    errors = validate_family(StoreKey.RULE_SETS, json.dumps([first, again]))
    assert [(e.field, e.kind) for e in errors] == [("ruleSets[1].id", ValidationErrorKind.FORMAT)]


def test_repository_never_writes_repeated_ids(store, make_rule_set):
    RecordRepository(store).put_rule_sets([make_rule_set(), make_rule_set(name="Newer")])
    assert validate_store(store).is_valid
    assert [rs.name for rs in RecordRepository(store).get_rule_sets()] == ["Newer"]
