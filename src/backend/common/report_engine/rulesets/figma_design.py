from __future__ import annotations

from datetime import datetime, timezone

from ..models import Rule, RuleSet
from ..registry import register_rule_set

FIGMA_DESIGN_RULES = register_rule_set(
    RuleSet(
        id="figma-design-rules",
        name="Figmaデザインレビュールール",
        description="Figmaデザインファイルのレビュー用チェックリスト",
        version="1.0.0",
        rules=[
            Rule(
                id="design-system-components",
                text="デザインシステムのコンポーネントが正しく使用されているか",
                category="デザイン一貫性",
                priority=1,
                description="ボタン、フォーム、カードなどの標準コンポーネントが適切に使用されているかを確認",
            ),
            Rule(
                id="color-palette",
                text="カラーパレットが統一されているか",
                category="デザイン一貫性",
                priority=1,
                description="ブランドカラーやテーマカラーが一貫して使用されているかを確認",
            ),
            Rule(
                id="font-sizes",
                text="フォントサイズが適切に設定されているか",
                category="デザイン一貫性",
                priority=2,
                description="タイポグラフィスケールに従ったフォントサイズが使用されているかを確認",
            ),
            Rule(
                id="responsive-design",
                text="レスポンシブデザインが適切に設計されているか",
                category="レスポンシブ",
                priority=1,
                description="デスクトップ、タブレット、モバイルでの表示が考慮されているかを確認",
            ),
            Rule(
                id="tablet-display",
                text="タブレット表示の確認が完了しているか",
                category="レスポンシブ",
                priority=2,
                description="タブレットサイズでのレイアウトと操作性を確認",
            ),
            Rule(
                id="mobile-usability",
                text="モバイル表示での操作性が確保されているか",
                category="レスポンシブ",
                priority=1,
                description="モバイルデバイスでのタッチ操作とユーザビリティを確認",
            ),
            Rule(
                id="accessibility-guidelines",
                text="アクセシビリティガイドラインに準拠しているか",
                category="アクセシビリティ",
                priority=1,
                description="WCAG 2.1 AAレベルの基準に準拠しているかを確認",
            ),
            Rule(
                id="color-contrast",
                text="カラーコントラストが適切に設定されているか",
                category="アクセシビリティ",
                priority=1,
                description="テキストと背景のコントラスト比が4.5:1以上であることを確認",
            ),
            Rule(
                id="focus-indicators",
                text="フォーカスインジケーターが適切に設計されているか",
                category="アクセシビリティ",
                priority=2,
                description="キーボードナビゲーション時のフォーカス状態が明確に表示されるかを確認",
            ),
            Rule(
                id="spacing-consistency",
                text="スペーシングが一貫して適用されているか",
                category="レイアウト",
                priority=2,
                description="マージンやパディングが8pxグリッドシステムに従って設定されているかを確認",
            ),
            Rule(
                id="component-states",
                text="コンポーネントの各状態が定義されているか",
                category="インタラクション",
                priority=1,
                description="ホバー、アクティブ、ディセーブル状態などが適切に定義されているかを確認",
            ),
            Rule(
                id="loading-states",
                text="ローディング状態が適切に設計されているか",
                category="インタラクション",
                priority=2,
                description="データ読み込み中やフォーム送信中の状態表示が設計されているかを確認",
            ),
        ],
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        updated_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
)
