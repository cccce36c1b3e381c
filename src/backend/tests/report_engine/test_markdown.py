from datetime import datetime

from common.report_engine.markdown import (
    NO_ATTACHMENTS,
    NO_CHECKLIST_ITEMS,
    NO_DESCRIPTION,
    SECTION_SEPARATOR,
    generate_markdown,
    group_by_category,
)
from common.report_engine.models import PendingAttachment, RestoredAttachment


NOW = datetime(2025, 1, 15, 9, 30, 5)


def test_full_document_layout(make_checklist, make_report):
    checklist = make_checklist({"id": "r1", "text": "Check A", "checked": True, "category": "X"})
    report = make_report()

    document = generate_markdown(checklist, report, now=NOW)

    assert document == "\n".join(
        [
            "# 課題レビュー報告",
            "## 基本情報",
            "* **課題番号**: PROJ-1",
            "* **優先度**: 高",
            "* **カテゴリ**: Bug",
            "* **報告日時**: 2025/01/15 09:30:05",
            SECTION_SEPARATOR,
            "## チェックリスト結果",
            "### X",
            "* [x] Check A",
            SECTION_SEPARATOR,
            "## 添付ファイル",
            NO_ATTACHMENTS,
            SECTION_SEPARATOR,
            "## 詳細説明",
            NO_DESCRIPTION,
            "",
        ]
    )
    assert "関連課題" not in document


def test_empty_checklist_uses_placeholder(make_report):
    document = generate_markdown((), make_report(), now=NOW)
    assert NO_CHECKLIST_ITEMS in document


def test_items_group_under_categories_in_first_seen_order(make_checklist, make_report):
    checklist = make_checklist(
        {"id": "1", "text": "one", "category": "B"},
        {"id": "2", "text": "two", "category": "A"},
        {"id": "3", "text": "three", "category": "B"},
        {"id": "4", "text": "four"},
    )
    document = generate_markdown(checklist, make_report(), now=NOW)

    assert document.index("### B") < document.index("### A") < document.index("### その他")
    assert document.index("* [ ] one") < document.index("* [ ] three") < document.index("### A")
    assert list(group_by_category(checklist)) == ["B", "A", "その他"]


def test_attachments_listed_by_name(make_report):
    report = make_report(
        screenshots=[
            PendingAttachment(name="a.png", size=1, mime_type="image/png", data=b"x"),
            RestoredAttachment(name="b.gif"),
        ]
    )
    document = generate_markdown((), report, now=NOW)
    assert "* a.png\n* b.gif" in document
    assert NO_ATTACHMENTS not in document


def test_description_is_trimmed(make_report):
    document = generate_markdown((), make_report(description="  details here \n"), now=NOW)
    assert "## 詳細説明\ndetails here\n" in document
    assert NO_DESCRIPTION not in document


def test_related_issues_render_as_links_and_skip_blanks(make_report):
    report = make_report(related_issues=["PROJ-2", "  ", "", "PROJ-3"])
    document = generate_markdown((), report, now=NOW)
    assert document.endswith(f"{SECTION_SEPARATOR}\n## 関連課題\n[[PROJ-2]] [[PROJ-3]]\n")


def test_all_blank_related_issues_omit_section(make_report):
    document = generate_markdown((), make_report(related_issues=["", " "]), now=NOW)
    assert "関連課題" not in document


def test_output_is_deterministic_for_fixed_time(make_checklist, make_report):
    checklist = make_checklist({"id": "r1", "text": "Check A", "category": "X"})
    report = make_report(priority="low")
    first = generate_markdown(checklist, report, now=NOW)
    assert first == generate_markdown(checklist, report, now=NOW)
    assert "* **優先度**: 低" in first


def test_toggling_one_item_changes_one_character(make_checklist, make_report):
    unchecked = make_checklist(
        {"id": "a", "text": "A", "category": "X"},
        {"id": "b", "text": "B", "category": "X"},
    )
    checked = (unchecked[0], unchecked[1].model_copy(update={"checked": True}))

    before = generate_markdown(unchecked, make_report(), now=NOW)
    after = generate_markdown(checked, make_report(), now=NOW)

    assert len(before) == len(after)
    diffs = [(x, y) for x, y in zip(before, after) if x != y]
    assert diffs == [(" ", "x")]
