# lingua_sync/cli/utils.py
"""提供 CLI 命令使用的共享工具函数。"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Coroutine, Mapping
from contextlib import asynccontextmanager
from typing import Any, Optional, TypeVar

import structlog
import typer
from rich.console import Console
from rich.table import Table

from lingua_sync.client import LinguaClient
from lingua_sync.config import LinguaSyncConfig
from lingua_sync.core.exceptions import ConfigurationError, LinguaSyncError
from lingua_sync.core.interfaces import StringStore
from lingua_sync.core.types import LocaleCompletion, PushResult, TransportKind
from lingua_sync.persistence import create_store
from lingua_sync.transport import create_transport

logger = structlog.get_logger(__name__)
console = Console()

_T = TypeVar("_T")


def with_sync_overrides(
    config: LinguaSyncConfig,
    batch_size: Optional[int] = None,
    pull_batch_size: Optional[int] = None,
) -> LinguaSyncConfig:
    """配置对象不可变，命令行覆盖项通过复制得到新的配置。"""
    update = {
        k: v
        for k, v in (("batch_size", batch_size), ("pull_batch_size", pull_batch_size))
        if v is not None
    }
    if not update:
        return config
    return config.model_copy(update={"sync": config.sync.model_copy(update=update)})


@asynccontextmanager
async def open_services(
    config: LinguaSyncConfig, need_client: bool = True
) -> AsyncIterator[tuple[StringStore, Optional[LinguaClient]]]:
    """打开本地存储和远端客户端，退出时依次关闭。"""
    if need_client and config.transport is TransportKind.IN_PROCESS:
        raise ConfigurationError(
            "CLI 不支持 in_process 传输：它需要在嵌入调用时传入 ASGI 应用。"
            "请改用 LS_TRANSPORT=http。"
        )
    store = create_store(config)
    client: Optional[LinguaClient] = None
    try:
        await store.connect()
        if need_client:
            client = LinguaClient(create_transport(config))
        yield store, client
    finally:
        if client is not None:
            await client.close()
        await store.close()


def run_command(coro: Coroutine[Any, Any, _T]) -> _T:
    """运行一个异步命令，把领域异常转换为退出码 1。"""
    try:
        return asyncio.run(coro)
    except LinguaSyncError as e:
        logger.error("命令执行失败", error=str(e))
        console.print(f"[bold red]❌ 命令执行失败: {e}[/bold red]")
        raise typer.Exit(code=1) from e


def render_completion(stats: Mapping[str, LocaleCompletion]) -> Table:
    """把各目标语言的完成度渲染为表格。"""
    table = Table(title="翻译完成度")
    table.add_column("Target", style="cyan")
    table.add_column("Translated", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("% Complete", justify="right")
    table.add_column("Missing", justify="right")
    for stat in stats.values():
        style = "green" if stat.total and stat.missing == 0 else None
        table.add_row(
            stat.locale,
            str(stat.translated),
            str(stat.total),
            f"{stat.pct:.1f}",
            str(stat.missing),
            style=style,
        )
    return table


def print_push_summary(result: PushResult) -> None:
    console.print(
        f"批次: [bold]{result.batches}[/bold]  文本: [bold]{result.texts}[/bold]  "
        f"accepted: [green]{result.accepted}[/green]  "
        f"queued: [cyan]{result.queued}[/cyan]  "
        f"missing: [yellow]{result.missing}[/yellow]  "
        f"失败批次: [red]{result.errored_batches}[/red]"
    )
    if result.job_ids:
        console.print(f"[dim]任务 ID: {', '.join(result.job_ids)}[/dim]")
