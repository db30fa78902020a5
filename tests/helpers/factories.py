# tests/helpers/factories.py
"""
提供用于创建一致、可预测的测试数据的工厂函数。
"""

from __future__ import annotations

from lingua_sync.core.types import PendingRow

# ---- 定义一组全局共享的、可预测的常量 ----
TEST_SOURCE_LANG = "en"
TEST_TARGET_LANGS = ["es", "fr"]
TEST_STUB_ENGINE = "babel"


def pending_row(
    key: str,
    target_locale: str = "es",
    *,
    text: str | None = None,
    source_locale: str = TEST_SOURCE_LANG,
) -> PendingRow:
    """创建一条待处理行；默认原文由键派生，保证非空。"""
    return PendingRow(
        key=key,
        target_locale=target_locale,
        text=f"text for {key}" if text is None else text,
        source_locale=source_locale,
    )


def pending_rows(pairs: list[tuple[str, str]]) -> list[PendingRow]:
    """按 [(键, 目标语言), ...] 批量创建待处理行。"""
    return [pending_row(key, locale) for key, locale in pairs]
