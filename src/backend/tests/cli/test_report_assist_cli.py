import json
import logging

import pytest

from common.report_engine.codec import encode_checklist, encode_report_record
from common.report_engine.models import ChecklistItem, ReportRecord
from common.report_engine.store import StoreKey
from connectors.storage.backends import JsonFileBackend
from scripts.report_assist import main


@pytest.fixture
def store_file(tmp_path, monkeypatch):
    for name in (
        "REPORT_ASSIST_STORAGE_CAPACITY_MB",
        "REPORT_ASSIST_QUOTA_WARNING_MB",
        "REPORT_ASSIST_DEFAULT_PRIORITY",
        "REPORT_ASSIST_DEFAULT_CATEGORY",
    ):
        monkeypatch.delenv(name, raising=False)
    return tmp_path / "store.json"


def _seed(path, **items):
    backend = JsonFileBackend(path=path)
    for key, value in items.items():
        backend.set_item(StoreKey[key].value, value)


def test_check_passes_on_empty_store(store_file, capsys):
    assert main(["--store", str(store_file), "check"]) == 0
    assert json.loads(capsys.readouterr().out)["is_valid"] is True


def test_check_then_repair_corrupted_store(store_file, capsys):
    _seed(store_file, REPORT_RECORD="{broken")

    assert main(["--store", str(store_file), "check"]) == 1
    capsys.readouterr()

    assert main(["--store", str(store_file), "repair"]) == 0
    result = json.loads(capsys.readouterr().out)
    assert result["repaired"] is True
    assert main(["--store", str(store_file), "check"]) == 0


def test_export_then_import(store_file, tmp_path, capsys):
    _seed(store_file, CHECKLIST=encode_checklist([ChecklistItem(id="a", text="A", checked=True)]))
    bundle_path = tmp_path / "bundle.json"

    assert main(["--store", str(store_file), "export", "--out", str(bundle_path)]) == 0
    assert json.loads(bundle_path.read_text(encoding="utf-8"))["checklist"][0]["id"] == "a"

    other_store = tmp_path / "other.json"
    assert main(["--store", str(other_store), "import", str(bundle_path)]) == 0
    assert json.loads(capsys.readouterr().out)["imported_checklist_items"] == 1


def test_import_of_bad_bundle_fails(store_file, tmp_path, capsys):
    bundle_path = tmp_path / "bundle.json"
    bundle_path.write_text("[]", encoding="utf-8")
    assert main(["--store", str(store_file), "import", str(bundle_path)]) == 1


def test_usage_reports_near_quota_flag(store_file, capsys):
    assert main(["--store", str(store_file), "usage"]) == 0
    usage = json.loads(capsys.readouterr().out)
    assert usage["used_bytes"] == 0
    assert usage["near_quota"] is False


def test_render_requires_valid_report(store_file, capsys):
    _seed(store_file, REPORT_RECORD=encode_report_record(ReportRecord(category="Bug")))
    assert main(["--store", str(store_file), "render"]) == 1
    errors = json.loads(capsys.readouterr().out)
    assert errors[0]["field"] == "issueNumber"


def test_render_writes_document(store_file, tmp_path):
    _seed(
        store_file,
        REPORT_RECORD=encode_report_record(ReportRecord(issue_number="PROJ-1", category="Bug")),
        CHECKLIST=encode_checklist([ChecklistItem(id="a", text="A", checked=True, category="X")]),
    )
    out = tmp_path / "report.md"

    assert main(["--store", str(store_file), "render", "--out", str(out)]) == 0
    document = out.read_text(encoding="utf-8")
    assert document.startswith("# 課題レビュー報告\n")
    assert "* [x] A" in document


def test_inconsistent_config_is_logged(store_file, monkeypatch, caplog):
    monkeypatch.setenv("REPORT_ASSIST_QUOTA_WARNING_MB", "10")
    with caplog.at_level(logging.WARNING):
        assert main(["--store", str(store_file), "check"]) == 0
    assert "storage.quota_warning_bytes" in caplog.text
