# lingua_sync/cli/sync.py
"""处理完整同步循环（push 一次，循环 pull 直至收敛）的 CLI 命令。"""

from __future__ import annotations

from typing import Annotated, Optional

import typer

from lingua_sync.cli.push import build_push_options
from lingua_sync.cli.state import State
from lingua_sync.cli.utils import (
    console,
    open_services,
    print_push_summary,
    render_completion,
    run_command,
    with_sync_overrides,
)
from lingua_sync.config import LinguaSyncConfig
from lingua_sync.coordinator import SyncOptions, SyncOrchestrator
from lingua_sync.core.types import SyncReport, SyncState
from lingua_sync.utils import parse_targets, validate_lang_codes


async def _sync(config: LinguaSyncConfig, options: SyncOptions) -> SyncReport:
    async with open_services(config) as (store, client):
        assert client is not None
        orchestrator = SyncOrchestrator(config, store, client)
        return await orchestrator.run(options)


def sync(
    ctx: typer.Context,
    targets: Annotated[
        Optional[str], typer.Option("--targets", "-t", help="目标语言，逗号分隔。")
    ] = None,
    engine: Annotated[Optional[str], typer.Option("--engine", help="远端使用的翻译引擎。")] = None,
    batch_size: Annotated[
        Optional[int], typer.Option("--batch-size", "-b", min=1, help="push 每个请求的文本数量。")
    ] = None,
    pull_batch_size: Annotated[
        Optional[int], typer.Option("--pull-batch-size", min=1, help="pull 每个请求的键数量。")
    ] = None,
    limit: Annotated[
        Optional[int], typer.Option("--limit", min=1, help="每阶段最多处理的行数。")
    ] = None,
    enqueue: Annotated[
        bool, typer.Option("--enqueue", help="要求服务端异步排队（等同于 --transport async）。")
    ] = False,
    force: Annotated[
        bool,
        typer.Option("--force", help="强制服务端重新派发，并用拉取结果覆盖本地已有的译文。"),
    ] = False,
    transport: Annotated[
        Optional[str], typer.Option("--transport", help="派发方式: sync 或 async。")
    ] = None,
    show_server: Annotated[
        bool, typer.Option("--show-server", help="打印每个批次的服务端原始响应。")
    ] = False,
    strict: Annotated[
        bool, typer.Option("--strict", help="push 有失败批次或零接收时立即失败。")
    ] = False,
    no_locale_grouping: Annotated[
        bool, typer.Option("--no-locale-grouping", help="pull 时不按目标语言分组。")
    ] = False,
    only_stub_engine: Annotated[
        bool,
        typer.Option("--only-stub-engine/--any-engine", help="只处理默认存根引擎的行。"),
    ] = True,
    poll: Annotated[
        Optional[float], typer.Option("--poll", min=0, help="两次 pull 之间的等待秒数，0 表示只拉取一次。")
    ] = None,
    max_polls: Annotated[
        Optional[int], typer.Option("--max-polls", min=1, help="最多 pull 的次数。")
    ] = None,
    stop_when: Annotated[
        Optional[float],
        typer.Option("--stop-when", min=0, max=100, help="每个目标语言完成度达到该百分比即停止。"),
    ] = None,
    handoff: Annotated[
        Optional[str], typer.Option("--handoff", help="收敛后运行的下游命令。")
    ] = None,
    translation_threshold: Annotated[
        Optional[int],
        typer.Option("--translation-threshold", help="传给下游命令的 --translation-threshold 值。"),
    ] = None,
) -> None:
    """push 一次，然后循环 pull 直到每个目标语言都达到完成度阈值。"""
    state: State = ctx.obj
    config = with_sync_overrides(
        state.config, batch_size=batch_size, pull_batch_size=pull_batch_size
    )
    target_list = parse_targets(targets)
    try:
        validate_lang_codes(target_list)
    except ValueError as e:
        console.print(f"[bold red]❌ 语言代码错误: {e}[/bold red]")
        raise typer.Exit(code=1) from e

    options = SyncOptions(
        targets=target_list,
        push=build_push_options(engine, enqueue, force, transport, show_server, strict),
        pull_engine=engine,
        group_by_locale=not no_locale_grouping,
        only_stub_engine=only_stub_engine,
        force=force,
        limit=limit,
        poll_interval=poll,
        max_polls=max_polls,
        stop_threshold=stop_when,
        handoff_command=handoff,
        handoff_threshold=translation_threshold,
    )
    report = run_command(_sync(config, options))

    print_push_summary(report.push)
    console.print(f"pull 次数: [bold]{report.attempts}[/bold]  已更新行: [green]{report.updated}[/green]")
    if report.completion:
        console.print(render_completion(report.completion))
    if report.state is SyncState.FAILED:
        console.print(f"[bold red]❌ 同步失败: {report.error}[/bold red]")
        raise typer.Exit(code=1)
    if report.converged:
        console.print("[bold green]✅ 已达到完成度阈值。[/bold green]")
    else:
        console.print("[yellow]⚠️ 同步结束，但尚未达到完成度阈值。[/yellow]")
