# lingua_sync/push.py
"""
PushDispatcher：把待翻译的文本按批次提交给远端 /batch-translate。

一个批次对应一次网络调用，也是失败隔离的最小单位。某个批次的传输错误或
畸形响应只会让该批次被记为失败，其余批次照常提交（尽力而为）。需要
“全部成功”语义的调用方通过 strict 标志检查 PushResult.failed()。
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

import structlog
from pydantic import BaseModel

from lingua_sync.client import LinguaClient
from lingua_sync.core.exceptions import (
    MalformedResponseError,
    NoTargetsError,
    TransportError,
)
from lingua_sync.core.interfaces import BulkUpdater, StringStore
from lingua_sync.core.types import (
    BatchRequest,
    ChunkOutcome,
    DispatchTransport,
    PendingRow,
    PushResult,
)
from lingua_sync.grouping import BatchGrouper, chunked

logger = structlog.get_logger(__name__)


class PushOptions(BaseModel):
    """一次 push 运行的选项。"""

    engine: Optional[str] = None
    force_dispatch: bool = False
    transport: Optional[DispatchTransport] = None
    insert_new_strings: bool = True
    strict: bool = False
    show_server: bool = False


class PushDispatcher:
    """按批次提交文本，并汇总每个批次的结果。"""

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

    async def _send_chunk(
        self,
        texts: list[str],
        source_locale: str,
        target_locales: list[str],
        options: PushOptions,
    ) -> ChunkOutcome:
        outcome = ChunkOutcome(
            source_locale=source_locale,
            target_locales=list(target_locales),
            size=len(texts),
        )
        request = BatchRequest(
            texts=texts,
            source=source_locale,
            target=target_locales[0] if len(target_locales) == 1 else target_locales,
            engine=options.engine,
            insert_new_strings=options.insert_new_strings,
            force_dispatch=options.force_dispatch,
            transport=options.transport,
        )
        try:
            response = await self.client.request_batch(request)
        except (TransportError, MalformedResponseError) as e:
            logger.warning(
                "批次提交失败，继续处理后续批次",
                source=source_locale,
                targets=target_locales,
                size=len(texts),
                error=str(e),
            )
            outcome.error = str(e)
            return outcome

        if options.show_server:
            logger.info("服务端原始响应", payload=response.raw)

        outcome.accepted = response.accepted
        outcome.queued = response.queued
        outcome.missing = response.missing
        outcome.job_id = response.job_id
        outcome.error = response.error
        logger.info(
            "批次已提交",
            source=source_locale,
            targets=target_locales,
            size=len(texts),
            accepted=outcome.accepted,
            queued=outcome.queued,
            missing=outcome.missing,
            job_id=outcome.job_id,
        )
        return outcome

    async def push(
        self,
        source_locale: str,
        target_locales: Sequence[str],
        texts: Sequence[str],
        options: Optional[PushOptions] = None,
    ) -> PushResult:
        """把一组同源语言的文本按 batch_size 切分后逐批提交。"""
        options = options or PushOptions()
        targets = list(target_locales)
        if not targets:
            raise NoTargetsError("push 需要至少一个目标语言。")

        result = PushResult()
        for chunk in chunked([t for t in texts if t], self.batch_size):
            result.record(await self._send_chunk(chunk, source_locale, targets, options))
        return result

    async def push_rows(
        self, rows: Sequence[PendingRow], options: Optional[PushOptions] = None
    ) -> PushResult:
        """
        推送存储中的待处理行。

        行按 (源语言, 目标语言) 分组，每个批次一次请求。批次成功后，
        对应的存根通过 BulkUpdater 从 new 推进到 queued。
        """
        options = options or PushOptions()
        sendable = [row for row in rows if row.text]
        result = PushResult(skipped=len(rows) - len(sendable))
        if result.skipped:
            logger.debug("已跳过缺少原文的待处理行", skipped=result.skipped)

        grouper = BatchGrouper(self.batch_size)
        buckets = grouper.group(sendable)
        result.skipped += grouper.skipped

        for (source_locale, target_locale), chunks in buckets.items():
            for chunk in chunks:
                outcome = await self._send_chunk(
                    [row.text for row in chunk],
                    source_locale,
                    [target_locale],
                    options,
                )
                result.record(outcome)
                if outcome.error is None and self.updater is not None:
                    await self.updater.mark_queued(
                        [row.key for row in chunk], target_locale
                    )

        logger.info(
            "push 完成",
            batches=result.batches,
            texts=result.texts,
            accepted=result.accepted,
            queued=result.queued,
            missing=result.missing,
            errored_batches=result.errored_batches,
        )
        return result

    async def push_sources(
        self,
        store: StringStore,
        target_locales: Sequence[str],
        options: Optional[PushOptions] = None,
        limit: Optional[int] = None,
    ) -> PushResult:
        """
        旧版模式：把存储中的全部源字符串推送到指定的目标语言。

        按源语言分组，每个请求同时携带所有目标语言。
        """
        options = options or PushOptions()
        targets = list(target_locales)
        if not targets:
            raise NoTargetsError("sources 模式需要显式指定目标语言。")

        by_locale: dict[str, list[str]] = {}
        for source in await store.iter_sources(limit=limit):
            by_locale.setdefault(source.source_locale, []).append(source.text)

        result = PushResult()
        for source_locale in sorted(by_locale):
            recipients = [t for t in targets if t != source_locale]
            if not recipients:
                continue
            for chunk in chunked(by_locale[source_locale], self.batch_size):
                result.record(
                    await self._send_chunk(chunk, source_locale, recipients, options)
                )
        logger.info(
            "sources 模式 push 完成",
            batches=result.batches,
            texts=result.texts,
            accepted=result.accepted,
            queued=result.queued,
            missing=result.missing,
        )
        return result
