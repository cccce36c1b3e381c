import os
import sys


# Ensure `src/backend` is on sys.path so imports like `import common...` work.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

from datetime import datetime, timezone

import pytest

from common.report_engine.models import ChecklistItem, ReportRecord, Rule, RuleSet
from common.report_engine.registry import RuleSetRegistry
from common.report_engine.session import ReportSession
from common.report_engine.store import StoreAdapter
from connectors.storage.backends import InMemoryBackend


@pytest.fixture
def timestamp() -> datetime:
    return datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def make_rule_set(timestamp):
    def _make(*, rule_set_id: str = "rs1", name: str = "Rule Set 1", rules=None) -> RuleSet:
        if rules is None:
            rules = [{"id": "r1", "text": "Check A", "category": "X"}]
        return RuleSet(
            id=rule_set_id,
            name=name,
            version="1.0.0",
            rules=[Rule(**rule) for rule in rules],
            created_at=timestamp,
            updated_at=timestamp,
        )

    return _make


@pytest.fixture
def make_checklist():
    def _make(*items) -> tuple:
        return tuple(ChecklistItem(**item) for item in items)

    return _make


@pytest.fixture
def make_report():
    def _make(**overrides) -> ReportRecord:
        data = {
            "issue_number": "PROJ-1",
            "priority": "high",
            "category": "Bug",
            "description": "",
            "screenshots": [],
            "related_issues": [],
        }
        data.update(overrides)
        return ReportRecord(**data)

    return _make


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def store(backend) -> StoreAdapter:
    return StoreAdapter(backend)


@pytest.fixture
def empty_registry() -> RuleSetRegistry:
    return RuleSetRegistry()


@pytest.fixture
def make_session(store, empty_registry, make_rule_set):
    def _make(*, rule_sets=None, config=None, startup: bool = True) -> ReportSession:
        reg = empty_registry
        for rule_set in rule_sets if rule_sets is not None else [make_rule_set()]:
            reg.register(rule_set)
        session = ReportSession(store, config=config, rule_set_registry=reg)
        if startup:
            session.startup()
        return session

    return _make
