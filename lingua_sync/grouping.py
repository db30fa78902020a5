# lingua_sync/grouping.py
"""本模块负责把扁平的待处理行按 (源语言, 目标语言) 分组，并切分为固定大小的批次。"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TypeVar

import structlog

from lingua_sync.core.types import PendingRow

logger = structlog.get_logger(__name__)

GroupKey = tuple[str, str]
# “不分组”模式下的唯一桶
UNGROUPED: GroupKey = ("", "")

_T = TypeVar("_T")


def chunked(items: Sequence[_T], size: int) -> list[list[_T]]:
    """按 size 切分序列，保持原有顺序。"""
    if size <= 0:
        raise ValueError("批次大小必须为正数")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class BatchGrouper:
    """
    将待处理行分桶并切分为批次。

    - 桶内保持插入顺序，使重试时的批次组成可复现；
    - 桶之间按目标语言升序、再按源语言升序迭代，保证运行日志确定；
    - 空输入得到零个桶，调用方应视为成功的空操作。
    """

    def __init__(self, batch_size: int, group_by_locale: bool = True):
        if batch_size <= 0:
            raise ValueError("批次大小必须为正数")
        self.batch_size = batch_size
        self.group_by_locale = group_by_locale
        self.skipped = 0

    def _group_key(self, row: PendingRow) -> GroupKey:
        if not self.group_by_locale:
            return UNGROUPED
        return (row.source_locale.strip(), row.target_locale.strip())

    def group(self, rows: Iterable[PendingRow]) -> dict[GroupKey, list[list[PendingRow]]]:
        """返回 {(源语言, 目标语言): [批次, ...]}，字典的迭代顺序即处理顺序。"""
        buckets: dict[GroupKey, list[PendingRow]] = {}
        self.skipped = 0
        for row in rows:
            if not row.key:
                self.skipped += 1
                continue
            buckets.setdefault(self._group_key(row), []).append(row)

        if self.skipped:
            logger.debug("已跳过缺少键的行", skipped=self.skipped)

        ordered = sorted(buckets, key=lambda k: (k[1], k[0]))
        return {k: chunked(buckets[k], self.batch_size) for k in ordered}
