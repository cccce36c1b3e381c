from __future__ import annotations

from typing import Dict, Iterable, List

from .models import RuleSet


class RuleSetRegistry:
    def __init__(self):
        self._rule_sets: Dict[str, RuleSet] = {}

    def register(self, rule_set: RuleSet) -> None:
        if not rule_set.id:
            raise ValueError("RuleSet missing id")
        if rule_set.id in self._rule_sets:
            raise ValueError(f"Duplicate rule set id registered: {rule_set.id}")
        self._rule_sets[rule_set.id] = rule_set

    def get(self, rule_set_id: str) -> RuleSet:
        return self._rule_sets[rule_set_id]

    def ids(self) -> Iterable[str]:
        return self._rule_sets.keys()

    def all(self) -> List[RuleSet]:
        return list(self._rule_sets.values())

    def __contains__(self, rule_set_id: object) -> bool:
        return rule_set_id in self._rule_sets


registry = RuleSetRegistry()


def register_rule_set(rule_set: RuleSet) -> RuleSet:
    registry.register(rule_set)
    return rule_set


def merge_with_stored(builtin: Iterable[RuleSet], stored: Iterable[RuleSet]) -> List[RuleSet]:
    """Built-ins first; stored rule sets are appended unless they share a built-in id."""
    merged = list(builtin)
    known = {rs.id for rs in merged}
    for rule_set in stored:
        if rule_set.id not in known:
            merged.append(rule_set)
            known.add(rule_set.id)
    return merged
