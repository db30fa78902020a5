# lingua_sync/pull.py
"""
PullFetcher：按源键从远端收取已完成的译文，并定向写回本地存储。

只有返回映射中存在且译文非空的键才会更新本地行；缺失的键保持待处理，
这是远端任务进行中的正常状态。同样的键重复拉取是幂等的。
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

import structlog

from lingua_sync._keys import normalize_locale
from lingua_sync.client import LinguaClient
from lingua_sync.core.exceptions import MalformedResponseError, TransportError
from lingua_sync.core.interfaces import BulkUpdater
from lingua_sync.core.types import PendingRow, PullResult
from lingua_sync.grouping import BatchGrouper, GroupKey, chunked

logger = structlog.get_logger(__name__)


class PullFetcher:
    """按批次拉取译文，每个批次独立提交。"""

    def __init__(
        self,
        client: LinguaClient,
        batch_size: int,
        updater: Optional[BulkUpdater] = None,
    ):
        if batch_size <= 0:
            raise ValueError("批次大小必须为正数")
        self.client = client
        self.batch_size = batch_size
        self.updater = updater

    async def pull_by_keys(
        self,
        keys: Sequence[str],
        locale: Optional[str] = None,
        engine: Optional[str] = None,
    ) -> dict[str, str]:
        """逐批请求并合并结果。传输错误直接向上抛出。"""
        resolved: dict[str, str] = {}
        for chunk in chunked(list(keys), self.batch_size):
            resolved.update(await self.client.pull_by_keys(chunk, locale, engine))
        return resolved

    def _buckets(
        self, rows: Sequence[PendingRow], group_by_locale: bool
    ) -> dict[GroupKey, list[list[PendingRow]]]:
        """
        分桶。不分组时，源键不携带目标语言，服务端对同一个键只会返回一条译文；
        因此在多个目标语言中待处理的键仍按目标语言分组请求。
        """
        if group_by_locale:
            return BatchGrouper(self.batch_size).group(rows)

        locales_by_key: dict[str, set[str]] = {}
        for row in rows:
            locales_by_key.setdefault(row.key, set()).add(row.target_locale)
        shared = [row for row in rows if len(locales_by_key.get(row.key, ())) > 1]
        single = [row for row in rows if len(locales_by_key.get(row.key, ())) <= 1]
        if shared:
            logger.debug(
                "部分键在多个目标语言中待处理，改为按语言分组请求",
                keys=len({row.key for row in shared}),
            )

        buckets = BatchGrouper(self.batch_size, group_by_locale=False).group(single)
        buckets.update(BatchGrouper(self.batch_size).group(shared))
        return buckets

    async def pull_rows(
        self,
        rows: Sequence[PendingRow],
        engine: Optional[str] = None,
        group_by_locale: bool = True,
        row_engine: Optional[str] = None,
        force: bool = False,
    ) -> PullResult:
        """
        为待处理行拉取译文并写回。

        Args:
            rows: 待处理行（通常来自 fetch_pending）。
            engine: 发送给服务端的引擎过滤条件。
            group_by_locale: 为 False 时只在一个目标语言中待处理的键合并为一个桶，
                不带 locale 参数请求。
            row_engine: 本地更新时额外匹配的 engine 列。
            force: 覆盖已有译文（已审校的行除外）。
        """
        if self.updater is None:
            raise ValueError("pull_rows 需要一个 BulkUpdater 才能写回译文")

        result = PullResult()
        for (_, target_locale), chunks in self._buckets(rows, group_by_locale).items():
            request_locale = normalize_locale(target_locale) or None
            for chunk in chunks:
                result.chunks += 1
                result.requested += len(chunk)
                keys = list(dict.fromkeys(row.key for row in chunk))
                try:
                    resolved = await self.client.pull_by_keys(keys, request_locale, engine)
                except (TransportError, MalformedResponseError) as e:
                    logger.warning(
                        "拉取批次失败，留待下一轮重试",
                        locale=request_locale,
                        size=len(chunk),
                        error=str(e),
                    )
                    result.errored_chunks += 1
                    result.pending += len(chunk)
                    continue

                resolved_rows = [row for row in chunk if resolved.get(row.key)]
                result.resolved += len(resolved_rows)
                result.pending += len(chunk) - len(resolved_rows)

                # 未分组的桶中每个键只属于一个目标语言，按行存储的语言写回
                per_locale: dict[str, dict[str, str]] = {}
                for row in resolved_rows:
                    per_locale.setdefault(row.target_locale, {})[row.key] = resolved[
                        row.key
                    ]
                for locale, translations in per_locale.items():
                    if not locale:
                        continue
                    result.updated += await self.updater.apply_translations(
                        locale, translations, engine=row_engine, force=force
                    )

                logger.debug(
                    "拉取批次完成",
                    locale=request_locale,
                    size=len(chunk),
                    resolved=len(resolved_rows),
                )

        logger.info(
            "pull 完成",
            chunks=result.chunks,
            requested=result.requested,
            resolved=result.resolved,
            updated=result.updated,
            pending=result.pending,
            errored_chunks=result.errored_chunks,
        )
        return result
