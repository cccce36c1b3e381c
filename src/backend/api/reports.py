from __future__ import annotations

from typing import Any, List, Optional

from fastapi import APIRouter, Body, HTTPException
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from common.report_engine.models import Priority
from common.report_engine.session import ReportSession
from common.report_engine.state import ReportState


class RuleSetSelection(BaseModel):
    rule_set_id: Optional[str] = None


class ChecklistToggle(BaseModel):
    checked: bool


class ReportUpdate(BaseModel):
    issue_number: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[Priority] = None
    category: Optional[str] = None
    related_issues: Optional[List[str]] = None


def _state_payload(session: ReportSession, state: ReportState) -> dict[str, Any]:
    record = state.report_record
    return {
        "selected_rule_set_id": state.selected_rule_set.id if state.selected_rule_set else None,
        "available_rule_sets": [{"id": rs.id, "name": rs.name} for rs in state.available_rule_sets],
        "checklist": [item.model_dump(mode="json") for item in state.checklist],
        "report_record": {
            "issue_number": record.issue_number,
            "description": record.description,
            "priority": record.priority.value,
            "category": record.category,
            "related_issues": list(record.related_issues),
            "attachments": [{"name": a.name, "kind": a.kind} for a in record.screenshots],
        },
        "generated_document": state.generated_document,
        "warnings": session.warnings,
    }


def build_router(session: ReportSession) -> APIRouter:
    router = APIRouter(prefix="/reports", tags=["reports"])

    @router.get("/state")
    def get_state():
        return _state_payload(session, session.state)

    @router.post("/rule-set")
    def select_rule_set(selection: RuleSetSelection):
        try:
            state = session.select_rule_set(selection.rule_set_id)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Unknown rule set: {selection.rule_set_id}")
        return _state_payload(session, state)

    @router.patch("/checklist/{item_id}")
    def toggle_checklist_item(item_id: str, toggle: ChecklistToggle):
        try:
            state = session.toggle_item(item_id, toggle.checked)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Unknown checklist item: {item_id}")
        return _state_payload(session, state)

    @router.put("/report")
    def update_report(update: ReportUpdate):
        changes = update.model_dump(exclude_none=True)
        try:
            state = session.update_report(**changes)
        except PydanticValidationError as exc:
            raise HTTPException(status_code=422, detail=exc.errors(include_url=False))
        return _state_payload(session, state)

    @router.get("/report/validation")
    def validate_report():
        errors = session.validate_report()
        return {"is_valid": not errors, "errors": [e.model_dump(mode="json") for e in errors]}

    @router.post("/document")
    def generate_document():
        return {"document": session.generate_document()}

    @router.get("/export")
    def export_bundle():
        return {"bundle": session.export_bundle()}

    @router.post("/import")
    def import_bundle(bundle: str = Body(...)):
        return session.import_bundle(bundle).model_dump()

    @router.get("/integrity")
    def check_integrity():
        return session.check_integrity().model_dump(mode="json")

    @router.post("/integrity/repair")
    def repair_store():
        return session.repair().model_dump()

    @router.get("/storage")
    def storage_usage():
        usage = session.storage_usage().model_dump()
        usage["near_quota"] = session.is_near_quota()
        return usage

    return router
