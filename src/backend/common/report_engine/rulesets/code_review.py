from __future__ import annotations

from datetime import datetime, timezone

from ..models import Rule, RuleSet
from ..registry import register_rule_set

CODE_REVIEW_RULES = register_rule_set(
    RuleSet(
        id="code-review-rules",
        name="コードレビュールール",
        description="プルリクエストやコードレビュー用チェックリスト",
        version="1.0.0",
        rules=[
            Rule(
                id="code-style",
                text="コーディングスタイルガイドに準拠しているか",
                category="コード品質",
                priority=1,
                description="プロジェクトのコーディング規約に従っているかを確認",
            ),
            Rule(
                id="error-handling",
                text="適切なエラーハンドリングが実装されているか",
                category="コード品質",
                priority=1,
                description="try-catch文や例外処理が適切に実装されているかを確認",
            ),
            Rule(
                id="test-coverage",
                text="テストカバレッジが十分であるか",
                category="テスト",
                priority=1,
                description="新機能や変更に対するテストが適切に作成されているかを確認",
            ),
            Rule(
                id="performance",
                text="パフォーマンスへの影響が考慮されているか",
                category="パフォーマンス",
                priority=2,
                description="メモリ使用量や処理速度への影響が検討されているかを確認",
            ),
            Rule(
                id="security",
                text="セキュリティ上の問題がないか",
                category="セキュリティ",
                priority=1,
                description="SQLインジェクションやXSSなどの脆弱性がないかを確認",
            ),
        ],
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        updated_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
)
