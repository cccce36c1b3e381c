"""Working state of a report session and its pure transition function.

``reduce`` never touches storage. It returns the next state together with a
tuple of effects describing which records must be mirrored to the store;
``ReportSession`` executes those effects after the state has been replaced.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Tuple, Union

from .models import ChecklistItem, ReportRecord, RuleSet


@dataclass(frozen=True)
class ReportState:
    selected_rule_set: RuleSet | None = None
    checklist: Tuple[ChecklistItem, ...] = ()
    report_record: ReportRecord = field(default_factory=ReportRecord)
    available_rule_sets: Tuple[RuleSet, ...] = ()
    generated_document: str = ""


# Actions


@dataclass(frozen=True)
class SelectRuleSet:
    rule_set: RuleSet


@dataclass(frozen=True)
class ClearRuleSetSelection:
    pass


@dataclass(frozen=True)
class ReplaceChecklist:
    checklist: Tuple[ChecklistItem, ...]


@dataclass(frozen=True)
class ReplaceReportRecord:
    report_record: ReportRecord


@dataclass(frozen=True)
class SetGeneratedDocument:
    document: str


@dataclass(frozen=True)
class ReplaceAvailableRuleSets:
    rule_sets: Tuple[RuleSet, ...]


Action = Union[
    SelectRuleSet,
    ClearRuleSetSelection,
    ReplaceChecklist,
    ReplaceReportRecord,
    SetGeneratedDocument,
    ReplaceAvailableRuleSets,
]


# Effects


@dataclass(frozen=True)
class PersistChecklist:
    checklist: Tuple[ChecklistItem, ...]


@dataclass(frozen=True)
class ClearPersistedChecklist:
    pass


@dataclass(frozen=True)
class PersistReportRecord:
    report_record: ReportRecord


Effect = Union[PersistChecklist, ClearPersistedChecklist, PersistReportRecord]


@dataclass(frozen=True)
class Transition:
    state: ReportState
    effects: Tuple[Effect, ...] = ()


def checklist_from_rule_set(rule_set: RuleSet) -> Tuple[ChecklistItem, ...]:
    return tuple(ChecklistItem.from_rule(rule) for rule in rule_set.rules)


def reduce(state: ReportState, action: Action) -> Transition:
    # Any change to the checklist or report record invalidates the cached document.
    if isinstance(action, SelectRuleSet):
        checklist = checklist_from_rule_set(action.rule_set)
        return Transition(
            state=replace(
                state,
                selected_rule_set=action.rule_set,
                checklist=checklist,
                generated_document="",
            ),
            effects=(PersistChecklist(checklist),),
        )

    if isinstance(action, ClearRuleSetSelection):
        return Transition(
            state=replace(state, selected_rule_set=None, checklist=(), generated_document=""),
            effects=(ClearPersistedChecklist(),),
        )

    if isinstance(action, ReplaceChecklist):
        checklist = tuple(action.checklist)
        return Transition(
            state=replace(state, checklist=checklist, generated_document=""),
            effects=(PersistChecklist(checklist),),
        )

    if isinstance(action, ReplaceReportRecord):
        return Transition(
            state=replace(state, report_record=action.report_record, generated_document=""),
            effects=(PersistReportRecord(action.report_record),),
        )

    if isinstance(action, SetGeneratedDocument):
        return Transition(state=replace(state, generated_document=action.document))

    if isinstance(action, ReplaceAvailableRuleSets):
        return Transition(state=replace(state, available_rule_sets=tuple(action.rule_sets)))

    raise TypeError(f"Unsupported action: {type(action).__name__}")


def with_item_checked(checklist: Tuple[ChecklistItem, ...], item_id: str, checked: bool) -> Tuple[ChecklistItem, ...]:
    return tuple(
        ChecklistItem.model_validate({**item.model_dump(), "checked": checked}) if item.id == item_id else item
        for item in checklist
    )
