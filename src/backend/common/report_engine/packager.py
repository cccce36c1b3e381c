from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

from .codec import convert_element, payload_to_report_record, report_record_to_payload
from .errors import DecodeError, RecordImportError
from .models import (
    ChecklistItem,
    ImportResult,
    PersistedBundle,
    ReportRecordPayload,
    RuleSet,
)
from .repository import RecordRepository, raw_label
from .store import StoreAdapter, StoreKey, StoreWriteResult
from .validator import FAMILY_PATHS, check_checklist_item, check_report_record, check_rule_set

logger = logging.getLogger(__name__)

BUNDLE_FORMAT_VERSION = "1.0.0"


def _first_message(errors) -> str:
    head = errors[0]
    extra = f" (+{len(errors) - 1} more)" if len(errors) > 1 else ""
    return f"{head.field}: {head.message}{extra}"


class BundlePackager:
    """Exports every record family into one portable document and back.

    Imports are best-effort per element: an invalid RuleSet is reported and
    skipped while its siblings still land in the store.
    """

    def __init__(self, store: StoreAdapter):
        self._repo = RecordRepository(store)

    def export_bundle(self, *, now: Optional[datetime] = None) -> PersistedBundle:
        record = self._repo.get_report_record()
        return PersistedBundle(
            version=BUNDLE_FORMAT_VERSION,
            exported_at=now or datetime.now(timezone.utc),
            rule_sets=self._repo.get_rule_sets(),
            report_record=report_record_to_payload(record) if record is not None else None,
            checklist=self._repo.get_checklist(),
        )

    def export_text(self, *, now: Optional[datetime] = None) -> str:
        bundle = self.export_bundle(now=now)
        return json.dumps(bundle.model_dump(mode="json", by_alias=True), indent=2)

    def import_text(self, bundle_text: str) -> ImportResult:
        try:
            raw = json.loads(bundle_text)
        except (ValueError, RecursionError) as exc:
            return ImportResult(success=False, errors=[f"Bundle could not be parsed: {exc}"])
        if not isinstance(raw, dict):
            return ImportResult(success=False, errors=["Bundle must be a JSON object."])

        errors: List[str] = []
        warnings: List[str] = []

        version = raw.get("version")
        if version != BUNDLE_FORMAT_VERSION:
            warnings.append(
                f"Bundle version {version!r} differs from current format {BUNDLE_FORMAT_VERSION!r}."
            )

        rule_sets = self._collect(raw, StoreKey.RULE_SETS, RuleSet, check_rule_set, "Rule set", errors)
        rule_sets = self._drop_superseded(rule_sets, errors)
        checklist = self._collect(raw, StoreKey.CHECKLIST, ChecklistItem, check_checklist_item, "Checklist item", errors)
        payload = self._collect_report_record(raw, errors)

        if rule_sets:
            self._record_write(self._repo.merge_rule_sets(rule_sets), errors)
        if checklist:
            self._record_write(self._repo.save_checklist(checklist), errors)
        if payload is not None:
            self._record_write(self._repo.save_report_record(payload_to_report_record(payload)), errors)

        for message in warnings:
            logger.warning("Import: %s", message)
        for message in errors:
            logger.warning("Import: %s", message)

        return ImportResult(
            success=not errors,
            errors=errors,
            warnings=warnings,
            imported_rule_sets=len(rule_sets),
            imported_checklist_items=len(checklist),
            imported_report_record=payload is not None,
        )

    def _collect(self, raw: dict, key: StoreKey, model, check, family: str, errors: List[str]) -> list:
        field = FAMILY_PATHS[key]
        elements = raw.get(field)
        if elements is None:
            return []
        if not isinstance(elements, list):
            errors.append(f"{field} must be an array.")
            return []

        out = []
        for index, element in enumerate(elements):
            element_errors = check(element, f"{field}[{index}]")
            if element_errors:
                failure = RecordImportError(family, raw_label(element, index), _first_message(element_errors))
                errors.append(str(failure))
                continue
            out.append(convert_element(key, element, model))
        return out

    @staticmethod
    def _drop_superseded(rule_sets: List[RuleSet], errors: List[str]) -> List[RuleSet]:
        # A later RuleSet with the same id wins.
        last_index = {rule_set.id: index for index, rule_set in enumerate(rule_sets)}
        kept = []
        for index, rule_set in enumerate(rule_sets):
            if last_index[rule_set.id] != index:
                failure = RecordImportError("Rule set", rule_set.name, f"duplicate id {rule_set.id!r} appears again later")
                errors.append(str(failure))
                continue
            kept.append(rule_set)
        return kept

    def _collect_report_record(self, raw: dict, errors: List[str]) -> Optional[ReportRecordPayload]:
        element: Any = raw.get("reportRecord")
        if element is None:
            return None
        element_errors = check_report_record(element, "reportRecord")
        if element_errors:
            label = element.get("issueNumber") if isinstance(element, dict) else None
            failure = RecordImportError("Report record", label or "reportRecord", _first_message(element_errors))
            errors.append(str(failure))
            return None
        try:
            return convert_element(StoreKey.REPORT_RECORD, element, ReportRecordPayload)
        except DecodeError as exc:
            errors.append(str(exc))
            return None

    @staticmethod
    def _record_write(result: StoreWriteResult, errors: List[str]) -> None:
        if not result.ok:
            errors.append(str(result.error))
