from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from .models import ChecklistItem, Priority, ReportRecord

REPORT_TITLE = "課題レビュー報告"
SECTION_SEPARATOR = "-----"

BASIC_INFO_TITLE = "基本情報"
CHECKLIST_TITLE = "チェックリスト結果"
ATTACHMENTS_TITLE = "添付ファイル"
DESCRIPTION_TITLE = "詳細説明"
RELATED_ISSUES_TITLE = "関連課題"

ISSUE_NUMBER_LABEL = "課題番号"
PRIORITY_LABEL = "優先度"
CATEGORY_LABEL = "カテゴリ"
TIMESTAMP_LABEL = "報告日時"

PRIORITY_LABELS: Dict[Priority, str] = {
    Priority.LOW: "低",
    Priority.MEDIUM: "中",
    Priority.HIGH: "高",
}

DEFAULT_CATEGORY = "その他"
NO_CHECKLIST_ITEMS = "チェックリスト項目はありません。"
NO_ATTACHMENTS = "添付ファイルはありません。"
NO_DESCRIPTION = "詳細説明は入力されていません。"

TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M:%S"


def group_by_category(checklist: Iterable[ChecklistItem]) -> Dict[str, List[ChecklistItem]]:
    # dict keeps first-seen category order.
    groups: Dict[str, List[ChecklistItem]] = {}
    for item in checklist:
        groups.setdefault(item.category or DEFAULT_CATEGORY, []).append(item)
    return groups


def _basic_info(report: ReportRecord, now: datetime) -> List[str]:
    return [
        f"## {BASIC_INFO_TITLE}",
        f"* **{ISSUE_NUMBER_LABEL}**: {report.issue_number}",
        f"* **{PRIORITY_LABEL}**: {PRIORITY_LABELS[report.priority]}",
        f"* **{CATEGORY_LABEL}**: {report.category}",
        f"* **{TIMESTAMP_LABEL}**: {now.strftime(TIMESTAMP_FORMAT)}",
    ]


def _checklist(checklist: Iterable[ChecklistItem]) -> List[str]:
    lines = [f"## {CHECKLIST_TITLE}"]
    groups = group_by_category(checklist)
    if not groups:
        lines.append(NO_CHECKLIST_ITEMS)
        return lines
    for category, items in groups.items():
        lines.append(f"### {category}")
        for item in items:
            marker = "x" if item.checked else " "
            lines.append(f"* [{marker}] {item.text}")
    return lines


def _attachments(report: ReportRecord) -> List[str]:
    lines = [f"## {ATTACHMENTS_TITLE}"]
    names = report.attachment_names()
    if not names:
        lines.append(NO_ATTACHMENTS)
        return lines
    lines.extend(f"* {name}" for name in names)
    return lines


def _description(report: ReportRecord) -> List[str]:
    text = report.description.strip()
    return [f"## {DESCRIPTION_TITLE}", text or NO_DESCRIPTION]


def _related_issues(report: ReportRecord) -> Optional[List[str]]:
    keys = [issue.strip() for issue in report.related_issues if issue and issue.strip()]
    if not keys:
        return None
    return [f"## {RELATED_ISSUES_TITLE}", " ".join(f"[[{key}]]" for key in keys)]


def generate_markdown(
    checklist: Iterable[ChecklistItem],
    report: ReportRecord,
    *,
    now: Optional[datetime] = None,
) -> str:
    """Render the issue report document.

    Output is deterministic for identical inputs apart from the timestamp in
    the basic-information block. Every section except related issues is
    always present; empty ones carry a placeholder sentence.
    """
    now = now or datetime.now().astimezone()
    sections = [
        [f"# {REPORT_TITLE}", *_basic_info(report, now)],
        _checklist(checklist),
        _attachments(report),
        _description(report),
    ]
    related = _related_issues(report)
    if related is not None:
        sections.append(related)

    lines: List[str] = []
    for index, section in enumerate(sections):
        if index:
            lines.append(SECTION_SEPARATOR)
        lines.extend(section)
    return "\n".join(lines) + "\n"
