from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional

from .config import AppConfig
from .markdown import generate_markdown
from .models import (
    ImportResult,
    PendingAttachment,
    RepairResult,
    ReportRecord,
    RuleSet,
    StorageUsage,
    ValidationError,
    ValidationResult,
)
from .packager import BundlePackager
from .registry import RuleSetRegistry, merge_with_stored, registry
from .repair import RepairEngine
from .report_validation import validate_report_record
from .repository import RecordRepository
from .state import (
    Action,
    ClearPersistedChecklist,
    ClearRuleSetSelection,
    Effect,
    PersistChecklist,
    PersistReportRecord,
    ReplaceAvailableRuleSets,
    ReplaceChecklist,
    ReplaceReportRecord,
    ReportState,
    SelectRuleSet,
    SetGeneratedDocument,
    reduce,
    with_item_checked,
)
from .store import StoreAdapter, StoreWriteResult
from .validator import validate_store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartupReport:
    validation: ValidationResult
    repair: Optional[RepairResult] = None


class ReportSession:
    """Owns the working state of one report and mirrors it to the store.

    State flows outward (state -> store) after every checklist or report
    record mutation and inward (store -> state) only in ``startup``. Writes
    are best-effort: a failed write is logged and kept in ``warnings`` but
    the in-memory state stays authoritative.
    """

    def __init__(
        self,
        store: StoreAdapter,
        *,
        config: Optional[AppConfig] = None,
        rule_set_registry: Optional[RuleSetRegistry] = None,
    ):
        self._store = store
        self._config = config or AppConfig()
        self._registry = rule_set_registry if rule_set_registry is not None else registry
        self._repo = RecordRepository(store)
        self._packager = BundlePackager(store)
        self._warnings: List[str] = []
        self._state = ReportState(
            report_record=self.default_report_record(),
            available_rule_sets=tuple(self._registry.all()),
        )

    @property
    def state(self) -> ReportState:
        return self._state

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def store(self) -> StoreAdapter:
        return self._store

    @property
    def warnings(self) -> List[str]:
        return list(self._warnings)

    def default_report_record(self) -> ReportRecord:
        defaults = self._config.defaults
        return ReportRecord(priority=defaults.priority, category=defaults.category)

    # Lifecycle

    def startup(self) -> StartupReport:
        validation = validate_store(self._store)
        repair = None
        if not validation.is_valid:
            logger.warning("Stored data failed integrity check with %d error(s)", len(validation.errors))
            repair = RepairEngine(self._store).repair()
        self._hydrate()
        return StartupReport(validation=validation, repair=repair)

    def _hydrate(self) -> None:
        record = self._repo.get_report_record()
        self._state = ReportState(
            checklist=tuple(self._repo.get_checklist()),
            report_record=record if record is not None else self.default_report_record(),
            available_rule_sets=tuple(self._merged_rule_sets()),
        )

    def _merged_rule_sets(self) -> List[RuleSet]:
        return merge_with_stored(self._registry.all(), self._repo.get_rule_sets())

    # Dispatch

    def dispatch(self, action: Action) -> ReportState:
        transition = reduce(self._state, action)
        self._state = transition.state
        for effect in transition.effects:
            self._apply_effect(effect)
        return self._state

    def _apply_effect(self, effect: Effect) -> None:
        if isinstance(effect, ClearPersistedChecklist):
            self._repo.clear_checklist()
            return
        if isinstance(effect, PersistChecklist):
            result = self._repo.save_checklist(effect.checklist)
        elif isinstance(effect, PersistReportRecord):
            result = self._repo.save_report_record(effect.report_record)
        else:
            raise TypeError(f"Unsupported effect: {type(effect).__name__}")
        self._note_write(result)

    def _note_write(self, result: StoreWriteResult) -> None:
        if result.ok:
            return
        message = f"Could not save {result.key.label}: {result.error}"
        logger.warning("Best-effort write failed: %s", message)
        self._warnings.append(message)

    # Checklist

    def find_rule_set(self, rule_set_id: str) -> RuleSet:
        for rule_set in self._state.available_rule_sets:
            if rule_set.id == rule_set_id:
                return rule_set
        raise KeyError(rule_set_id)

    def select_rule_set(self, rule_set_id: Optional[str]) -> ReportState:
        if rule_set_id is None:
            return self.dispatch(ClearRuleSetSelection())
        return self.dispatch(SelectRuleSet(self.find_rule_set(rule_set_id)))

    def toggle_item(self, item_id: str, checked: bool) -> ReportState:
        if not any(item.id == item_id for item in self._state.checklist):
            raise KeyError(item_id)
        return self.dispatch(ReplaceChecklist(with_item_checked(self._state.checklist, item_id, checked)))

    # Report record

    def update_report(self, **changes: Any) -> ReportState:
        current = self._state.report_record.model_dump()
        record = ReportRecord.model_validate({**current, **changes})
        return self.dispatch(ReplaceReportRecord(record))

    def attach(self, attachment: PendingAttachment) -> ReportState:
        """Add an attachment, replacing a restored placeholder with the same name."""
        screenshots = list(self._state.report_record.screenshots)
        for index, existing in enumerate(screenshots):
            if existing.name == attachment.name:
                screenshots[index] = attachment
                break
        else:
            screenshots.append(attachment)
        record = self._state.report_record.model_copy(update={"screenshots": screenshots})
        return self.dispatch(ReplaceReportRecord(record))

    def remove_attachment(self, name: str) -> ReportState:
        screenshots = [a for a in self._state.report_record.screenshots if a.name != name]
        record = self._state.report_record.model_copy(update={"screenshots": screenshots})
        return self.dispatch(ReplaceReportRecord(record))

    def validate_report(self) -> List[ValidationError]:
        return validate_report_record(self._state.report_record, self._config.attachments)

    def generate_document(self, *, now: Optional[datetime] = None) -> str:
        document = generate_markdown(self._state.checklist, self._state.report_record, now=now)
        self.dispatch(SetGeneratedDocument(document))
        return document

    def clear_temporary_data(self) -> ReportState:
        self._repo.clear_report_record()
        self._repo.clear_checklist()
        self._state = ReportState(
            report_record=self.default_report_record(),
            available_rule_sets=self._state.available_rule_sets,
        )
        return self._state

    # Rule sets

    def refresh_rule_sets(self) -> ReportState:
        return self.dispatch(ReplaceAvailableRuleSets(tuple(self._merged_rule_sets())))

    def save_rule_set(self, rule_set: RuleSet) -> StoreWriteResult:
        result = self._repo.save_rule_set(rule_set)
        self._note_write(result)
        self.refresh_rule_sets()
        return result

    def remove_rule_set(self, rule_set_id: str) -> StoreWriteResult:
        # In-progress checklists are independent copies and are left untouched.
        result = self._repo.remove_rule_set(rule_set_id)
        self._note_write(result)
        self.refresh_rule_sets()
        return result

    # Store maintenance

    def check_integrity(self) -> ValidationResult:
        return validate_store(self._store)

    def repair(self) -> RepairResult:
        return RepairEngine(self._store).repair()

    def export_bundle(self, *, now: Optional[datetime] = None) -> str:
        return self._packager.export_text(now=now)

    def import_bundle(self, bundle_text: str) -> ImportResult:
        result = self._packager.import_text(bundle_text)
        self.refresh_rule_sets()
        return result

    def storage_usage(self) -> StorageUsage:
        return self._store.usage()

    def is_near_quota(self) -> bool:
        return self.storage_usage().used_bytes >= self._config.storage.quota_warning_bytes
