# lingua_sync/cli/push.py
"""处理 push（把待翻译文本提交给远端）的 CLI 命令。"""

from __future__ import annotations

from typing import Annotated, Optional

import typer

from lingua_sync.cli.state import State
from lingua_sync.cli.utils import (
    console,
    open_services,
    print_push_summary,
    run_command,
    with_sync_overrides,
)
from lingua_sync.config import LinguaSyncConfig
from lingua_sync.core.types import DispatchTransport, PushMode, PushResult
from lingua_sync.push import PushDispatcher, PushOptions
from lingua_sync.utils import parse_targets, validate_lang_codes


def build_push_options(
    engine: Optional[str],
    enqueue: bool,
    force: bool,
    transport: Optional[str],
    show_server: bool,
    strict: bool,
) -> PushOptions:
    """--enqueue 是 --transport async 的别名。"""
    if transport not in (None, "sync", "async"):
        raise typer.BadParameter("transport 只能是 'sync' 或 'async'", param_hint="--transport")
    dispatch: Optional[DispatchTransport] = "async" if enqueue else transport  # type: ignore[assignment]
    return PushOptions(
        engine=engine,
        force_dispatch=force,
        transport=dispatch,
        strict=strict,
        show_server=show_server,
    )


async def _push(
    config: LinguaSyncConfig,
    mode: PushMode,
    targets: list[str],
    options: PushOptions,
    limit: Optional[int],
    only_stub_engine: bool,
) -> PushResult:
    async with open_services(config) as (store, client):
        assert client is not None
        dispatcher = PushDispatcher(client, config.sync.batch_size, updater=store)
        if mode is PushMode.SOURCES:
            return await dispatcher.push_sources(store, targets, options, limit=limit)
        rows = await store.fetch_pending(
            targets or None,
            engine=config.stub_engine if only_stub_engine else None,
            limit=limit,
        )
        console.print(f"待推送行数: [bold]{len(rows)}[/bold]")
        return await dispatcher.push_rows(rows, options)


def push(
    ctx: typer.Context,
    mode: Annotated[
        PushMode, typer.Option("--mode", help="stubs: 推送待翻译存根；sources: 推送全部源字符串。")
    ] = PushMode.STUBS,
    targets: Annotated[
        Optional[str], typer.Option("--targets", "-t", help="目标语言，逗号分隔。")
    ] = None,
    engine: Annotated[Optional[str], typer.Option("--engine", help="远端使用的翻译引擎。")] = None,
    batch_size: Annotated[
        Optional[int], typer.Option("--batch-size", "-b", min=1, help="每个请求的文本数量。")
    ] = None,
    limit: Annotated[
        Optional[int], typer.Option("--limit", min=1, help="最多处理的行数。")
    ] = None,
    enqueue: Annotated[
        bool, typer.Option("--enqueue", help="要求服务端异步排队（等同于 --transport async）。")
    ] = False,
    force: Annotated[
        bool, typer.Option("--force", help="即使服务端已有缓存也强制重新派发。")
    ] = False,
    transport: Annotated[
        Optional[str], typer.Option("--transport", help="派发方式: sync 或 async。")
    ] = None,
    show_server: Annotated[
        bool, typer.Option("--show-server", help="打印每个批次的服务端原始响应。")
    ] = False,
    strict: Annotated[
        bool, typer.Option("--strict", help="任一批次失败或零接收时以失败退出。")
    ] = False,
    only_stub_engine: Annotated[
        bool,
        typer.Option("--only-stub-engine/--any-engine", help="只处理默认存根引擎的行。"),
    ] = True,
) -> None:
    """把待翻译的文本按批次提交给远端翻译服务。"""
    state: State = ctx.obj
    config = with_sync_overrides(state.config, batch_size=batch_size)
    target_list = parse_targets(targets)
    try:
        validate_lang_codes(target_list)
    except ValueError as e:
        console.print(f"[bold red]❌ 语言代码错误: {e}[/bold red]")
        raise typer.Exit(code=1) from e
    if mode is PushMode.SOURCES and not target_list:
        target_list = list(config.target_locales)

    options = build_push_options(engine, enqueue, force, transport, show_server, strict)
    result = run_command(
        _push(config, mode, target_list, options, limit, only_stub_engine)
    )
    print_push_summary(result)
    if result.failed(strict):
        console.print("[bold red]❌ push 失败（strict 模式）。[/bold red]")
        raise typer.Exit(code=1)
    console.print("[bold green]✅ push 完成。[/bold green]")
