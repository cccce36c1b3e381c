"""Automatic correction of persisted records that fail validation.

Policy, applied independently per family:
- unparseable text, or a container of the wrong type: remove the key;
- an unreadable backend: remove the key, which lets the backend reset;
- a parseable sequence with bad elements: drop only those elements, and
  later RuleSets repeating an earlier id;
- a report record with any structural error: remove it as a whole.

Surviving elements are re-encoded through the trusted models, so a second
run over the same store finds nothing to do.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from .codec import convert_element, encode_checklist, encode_rule_sets, parse_untrusted
from .errors import DecodeError
from .models import ChecklistItem, RepairResult, RuleSet
from .store import StoreAdapter, StoreKey
from .validator import (
    check_checklist_item,
    check_report_record,
    check_rule_set,
    duplicate_rule_set_indexes,
)

logger = logging.getLogger(__name__)

_SEQUENCE_FAMILIES: Dict[StoreKey, tuple] = {
    StoreKey.RULE_SETS: (check_rule_set, RuleSet, encode_rule_sets),
    StoreKey.CHECKLIST: (check_checklist_item, ChecklistItem, encode_checklist),
}


class RepairEngine:
    def __init__(self, store: StoreAdapter):
        self._store = store

    def repair(self) -> RepairResult:
        actions: List[str] = []
        for key in StoreKey:
            if self._store.read_error(key) is not None:
                actions.append(self._remove(key, "store could not be read"))
                continue
            text = self._store.get(key)
            if text is None:
                continue
            actions.extend(self._repair_family(key, text))
        for action in actions:
            logger.info("Repair: %s", action)
        return RepairResult(repaired=bool(actions), actions=actions)

    def _remove(self, key: StoreKey, reason: str) -> str:
        self._store.remove(key)
        return f"Removed {key.label} data ({key.value}): {reason}"

    def _repair_family(self, key: StoreKey, text: str) -> List[str]:
        try:
            raw = parse_untrusted(key, text)
        except DecodeError as exc:
            logger.warning("Corrupted %s detected: %s", key.label, exc.message)
            return [self._remove(key, "stored text could not be parsed")]

        if key is StoreKey.REPORT_RECORD:
            if check_report_record(raw):
                return [self._remove(key, "record failed validation")]
            return []

        if not isinstance(raw, list):
            return [self._remove(key, "expected an array")]
        return self._drop_invalid_elements(key, raw)

    def _drop_invalid_elements(self, key: StoreKey, raw: List[Any]) -> List[str]:
        check, model, encode = _SEQUENCE_FAMILIES[key]
        duplicates = set(duplicate_rule_set_indexes(raw)) if key is StoreKey.RULE_SETS else set()
        kept = [element for index, element in enumerate(raw) if index not in duplicates and not check(element)]
        dropped = len(raw) - len(kept)
        if not dropped:
            return []

        records = [convert_element(key, element, model) for element in kept]
        result = self._store.set(key, encode(records))
        if not result.ok:
            return [self._remove(key, f"could not rewrite after dropping invalid entries ({result.error})")]
        noun = "entry" if dropped == 1 else "entries"
        return [f"Dropped {dropped} invalid {noun} from {key.label} ({key.value})"]


def repair_store(store: StoreAdapter) -> RepairResult:
    return RepairEngine(store).repair()
