# lingua_sync/coordinator.py
"""本模块包含 lingua-sync 的同步协调器：push 一次，然后循环 pull 直至收敛。"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Mapping
from typing import Callable, Optional

import structlog
from pydantic import BaseModel, Field

from lingua_sync.client import LinguaClient
from lingua_sync.config import LinguaSyncConfig
from lingua_sync.core.exceptions import LinguaSyncError, NoTargetsError
from lingua_sync.core.interfaces import StringStore
from lingua_sync.core.types import (
    LocaleCompletion,
    PullResult,
    PushResult,
    SyncReport,
    SyncState,
)
from lingua_sync.handoff import run_handoff
from lingua_sync.pull import PullFetcher
from lingua_sync.push import PushDispatcher, PushOptions
from lingua_sync.utils import parse_targets

logger = structlog.get_logger(__name__)

# 百分比比较的容差
THRESHOLD_EPSILON = 1e-4

Sleeper = Callable[[float], Awaitable[None]]
Handoff = Callable[[str, Optional[int]], Awaitable[int]]


def meets_threshold(stats: Mapping[str, LocaleCompletion], threshold: float) -> bool:
    """
    判断是否所有非空目标语言都达到了阈值。

    total 为 0 的语言不参与判断；没有任何非空语言时视为满足。
    """
    for stat in stats.values():
        if stat.total <= 0:
            continue
        if stat.pct + THRESHOLD_EPSILON < threshold:
            return False
    return True


class SyncOptions(BaseModel):
    """一次 sync 运行的参数，未指定的项回落到配置中的默认值。"""

    targets: list[str] = Field(default_factory=list)
    push: PushOptions = Field(default_factory=PushOptions)
    pull_engine: Optional[str] = None
    group_by_locale: bool = True
    only_stub_engine: bool = True
    force: bool = False
    limit: Optional[int] = None
    poll_interval: Optional[float] = None
    max_polls: Optional[int] = None
    stop_threshold: Optional[float] = None
    handoff_command: Optional[str] = None
    handoff_threshold: Optional[int] = None


class SyncOrchestrator:
    """驱动 pushing → pulling → evaluating → {sleeping → pulling | done | failed} 状态机。"""

    def __init__(
        self,
        config: LinguaSyncConfig,
        store: StringStore,
        client: LinguaClient,
        sleep: Sleeper = asyncio.sleep,
        handoff: Handoff = run_handoff,
    ):
        self.config = config
        self.store = store
        self.client = client
        self.pusher = PushDispatcher(client, config.sync.batch_size, updater=store)
        self.puller = PullFetcher(client, config.sync.pull_batch_size, updater=store)
        self._sleep = sleep
        self._handoff = handoff
        self.history: list[SyncState] = []

    def _enter(self, state: SyncState) -> SyncState:
        self.history.append(state)
        logger.debug("状态切换", state=state.value)
        return state

    async def resolve_targets(self, explicit: Optional[list[str]] = None) -> list[str]:
        """显式参数 → 配置中的目标语言 → 存储中已有的语言。"""
        targets = parse_targets(explicit)
        if not targets:
            targets = list(self.config.target_locales)
        if not targets:
            targets = await self.store.distinct_locales()
        if not targets:
            raise NoTargetsError("无法确定任何目标语言，请通过参数或配置指定。")
        return targets

    async def run(self, options: Optional[SyncOptions] = None) -> SyncReport:
        options = options or SyncOptions()
        defaults = self.config.sync
        poll_interval = (
            defaults.poll_interval if options.poll_interval is None else options.poll_interval
        )
        max_polls = options.max_polls or defaults.max_polls
        threshold = (
            defaults.stop_threshold
            if options.stop_threshold is None
            else options.stop_threshold
        )
        row_engine = self.config.stub_engine if options.only_stub_engine else None
        self.history = []

        targets = await self.resolve_targets(options.targets)
        logger.info(
            "sync 开始",
            targets=targets,
            poll_interval=poll_interval,
            max_polls=max_polls,
            threshold=threshold,
        )

        # pushing
        self._enter(SyncState.PUSHING)
        try:
            rows = await self.store.fetch_pending(
                targets, engine=row_engine, limit=options.limit
            )
            push = await self.pusher.push_rows(rows, options.push)
        except LinguaSyncError as e:
            logger.error("push 阶段失败", error=str(e))
            return self._finish(
                SyncReport(state=self._enter(SyncState.FAILED), targets=targets, error=str(e))
            )
        if push.failed(options.push.strict):
            return self._finish(
                SyncReport(
                    state=self._enter(SyncState.FAILED),
                    targets=targets,
                    push=push,
                    error="strict 模式下 push 存在失败批次或没有任何条目被接收",
                )
            )

        pulls: list[PullResult] = []
        attempts = 0
        while True:
            # pulling
            self._enter(SyncState.PULLING)
            attempts += 1
            try:
                # 强制模式只在第一轮 pull 时重新拉取已翻译的行
                rows = await self.store.fetch_pending(
                    targets,
                    engine=row_engine,
                    limit=options.limit,
                    include_translated=options.force and attempts == 1,
                )
                pulls.append(
                    await self.puller.pull_rows(
                        rows,
                        engine=options.pull_engine,
                        group_by_locale=options.group_by_locale,
                        row_engine=row_engine,
                        force=options.force,
                    )
                )
            except LinguaSyncError as e:
                logger.warning("pull 阶段出错，继续评估本地状态", attempt=attempts, error=str(e))

            # evaluating
            self._enter(SyncState.EVALUATING)
            stats = await self.store.completion(targets)
            converged = meets_threshold(stats, threshold)
            for stat in stats.values():
                logger.info(
                    "完成度",
                    locale=stat.locale,
                    translated=stat.translated,
                    total=stat.total,
                    pct=stat.pct,
                )

            if converged:
                logger.info("已达到完成度阈值", threshold=threshold)
                break
            if poll_interval <= 0:
                logger.info("单次模式，不再轮询")
                break
            if attempts >= max_polls:
                logger.warning("已达到最大轮询次数，停止", max_polls=max_polls)
                break

            self._enter(SyncState.SLEEPING)
            await self._sleep(poll_interval)

        report = SyncReport(
            state=SyncState.DONE,
            targets=targets,
            push=push,
            pulls=pulls,
            attempts=attempts,
            completion=stats,
            converged=converged,
        )
        if converged and options.handoff_command:
            code = await self._handoff(options.handoff_command, options.handoff_threshold)
            report.handoff_exit_code = code
            if code != 0:
                report = report.model_copy(
                    update={
                        "state": SyncState.FAILED,
                        "error": f"下游命令退出码为 {code}",
                    }
                )
        self._enter(report.state)
        return self._finish(report)

    def _finish(self, report: SyncReport) -> SyncReport:
        push: PushResult = report.push
        logger.info(
            "sync 结束",
            state=report.state.value,
            batches=push.batches,
            texts=push.texts,
            accepted=push.accepted,
            queued=push.queued,
            missing=push.missing,
            updated=report.updated,
            attempts=report.attempts,
            converged=report.converged,
        )
        return report
