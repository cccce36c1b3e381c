from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel

from .codec import (
    convert_element,
    decode_report_record,
    encode_checklist,
    encode_report_record,
    encode_rule_sets,
    parse_untrusted,
)
from .errors import DecodeError
from .models import ChecklistItem, ReportRecord, RuleSet
from .store import StoreAdapter, StoreKey, StoreWriteResult

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class RecordRepository:
    """Codec + store adapter: the documented read and write paths for records.

    Readers are lenient. Elements that fail conversion are skipped and
    logged so a store that has not been repaired yet never breaks a read.
    """

    def __init__(self, store: StoreAdapter):
        self._store = store

    @property
    def store(self) -> StoreAdapter:
        return self._store

    def _read_list(self, key: StoreKey, model: Type[M]) -> List[M]:
        text = self._store.get(key)
        if text is None:
            return []
        try:
            raw = parse_untrusted(key, text)
        except DecodeError as exc:
            logger.warning("Ignoring unreadable %s: %s", key.label, exc.message)
            return []
        if not isinstance(raw, list):
            logger.warning("Ignoring %s: stored value is not an array", key.label)
            return []
        out: List[M] = []
        for index, element in enumerate(raw):
            try:
                out.append(convert_element(key, element, model))
            except DecodeError:
                logger.warning("Skipping invalid %s entry at index %d", key.label, index)
        return out

    # Rule sets

    def get_rule_sets(self) -> List[RuleSet]:
        return self._read_list(StoreKey.RULE_SETS, RuleSet)

    def put_rule_sets(self, rule_sets: Iterable[RuleSet]) -> StoreWriteResult:
        return self._store.set(StoreKey.RULE_SETS, encode_rule_sets(unique_by_id(rule_sets)))

    def save_rule_set(self, rule_set: RuleSet, *, now: Optional[datetime] = None) -> StoreWriteResult:
        stamped = rule_set.model_copy(update={"updated_at": now or datetime.now(timezone.utc)})
        existing = [rs for rs in self.get_rule_sets() if rs.id != rule_set.id]
        existing.append(stamped)
        return self.put_rule_sets(existing)

    def merge_rule_sets(self, rule_sets: Iterable[RuleSet]) -> StoreWriteResult:
        incoming = unique_by_id(rule_sets)
        incoming_ids = {rs.id for rs in incoming}
        kept = [rs for rs in self.get_rule_sets() if rs.id not in incoming_ids]
        return self.put_rule_sets(kept + incoming)

    def remove_rule_set(self, rule_set_id: str) -> StoreWriteResult:
        remaining = [rs for rs in self.get_rule_sets() if rs.id != rule_set_id]
        return self.put_rule_sets(remaining)

    # Report record

    def get_report_record(self) -> Optional[ReportRecord]:
        text = self._store.get(StoreKey.REPORT_RECORD)
        if text is None:
            return None
        try:
            return decode_report_record(text)
        except DecodeError as exc:
            logger.warning("Ignoring unreadable report record: %s", exc.message)
            return None

    def save_report_record(self, record: ReportRecord) -> StoreWriteResult:
        return self._store.set(StoreKey.REPORT_RECORD, encode_report_record(record))

    def clear_report_record(self) -> None:
        self._store.remove(StoreKey.REPORT_RECORD)

    # Checklist

    def get_checklist(self) -> List[ChecklistItem]:
        return self._read_list(StoreKey.CHECKLIST, ChecklistItem)

    def save_checklist(self, checklist: Iterable[ChecklistItem]) -> StoreWriteResult:
        return self._store.set(StoreKey.CHECKLIST, encode_checklist(checklist))

    def clear_checklist(self) -> None:
        self._store.remove(StoreKey.CHECKLIST)

    def clear_all(self) -> None:
        self._store.clear_all()


def unique_by_id(rule_sets: Iterable[RuleSet]) -> List[RuleSet]:
    """Keep the last RuleSet for each id, in the order those last copies appear."""
    by_id: Dict[str, RuleSet] = {}
    for rule_set in rule_sets:
        by_id.pop(rule_set.id, None)
        by_id[rule_set.id] = rule_set
    return list(by_id.values())


def raw_label(raw: Any, index: int) -> str:
    if isinstance(raw, dict):
        for field in ("name", "id", "text"):
            value = raw.get(field)
            if isinstance(value, str) and value.strip():
                return value
    return f"#{index + 1}"
