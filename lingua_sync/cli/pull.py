# lingua_sync/cli/pull.py
"""处理 pull（从远端收取译文并写回本地）的 CLI 命令。"""

from __future__ import annotations

from typing import Annotated, Optional

import typer

from lingua_sync.cli.state import State
from lingua_sync.cli.utils import (
    console,
    open_services,
    render_completion,
    run_command,
    with_sync_overrides,
)
from lingua_sync.config import LinguaSyncConfig
from lingua_sync.core.types import LocaleCompletion, PullResult
from lingua_sync.pull import PullFetcher
from lingua_sync.utils import parse_targets, validate_lang_codes


async def _pull(
    config: LinguaSyncConfig,
    targets: list[str],
    engine: Optional[str],
    limit: Optional[int],
    group_by_locale: bool,
    only_stub_engine: bool,
    force: bool,
) -> tuple[PullResult, dict[str, LocaleCompletion]]:
    row_engine = config.stub_engine if only_stub_engine else None
    async with open_services(config) as (store, client):
        assert client is not None
        rows = await store.fetch_pending(
            targets or None, engine=row_engine, limit=limit, include_translated=force
        )
        console.print(f"待拉取行数: [bold]{len(rows)}[/bold]")
        fetcher = PullFetcher(client, config.sync.pull_batch_size, updater=store)
        result = await fetcher.pull_rows(
            rows,
            engine=engine,
            group_by_locale=group_by_locale,
            row_engine=row_engine,
            force=force,
        )
        return result, await store.completion(targets or None)


def pull(
    ctx: typer.Context,
    targets: Annotated[
        Optional[str], typer.Option("--targets", "-t", help="目标语言，逗号分隔。")
    ] = None,
    engine: Annotated[Optional[str], typer.Option("--engine", help="远端引擎过滤条件。")] = None,
    batch_size: Annotated[
        Optional[int], typer.Option("--batch-size", "-b", min=1, help="每个请求的键数量。")
    ] = None,
    limit: Annotated[
        Optional[int], typer.Option("--limit", min=1, help="最多处理的行数。")
    ] = None,
    no_locale_grouping: Annotated[
        bool, typer.Option("--no-locale-grouping", help="不按目标语言分组请求。")
    ] = False,
    only_stub_engine: Annotated[
        bool,
        typer.Option("--only-stub-engine/--any-engine", help="只更新默认存根引擎的行。"),
    ] = True,
    force: Annotated[
        bool, typer.Option("--force", help="重新拉取并覆盖本地已有的译文（已审校的除外）。")
    ] = False,
) -> None:
    """从远端收取已完成的译文，并写回本地存储。"""
    state: State = ctx.obj
    config = with_sync_overrides(state.config, pull_batch_size=batch_size)
    target_list = parse_targets(targets)
    try:
        validate_lang_codes(target_list)
    except ValueError as e:
        console.print(f"[bold red]❌ 语言代码错误: {e}[/bold red]")
        raise typer.Exit(code=1) from e

    result, stats = run_command(
        _pull(
            config,
            target_list,
            engine,
            limit,
            not no_locale_grouping,
            only_stub_engine,
            force,
        )
    )
    console.print(
        f"批次: [bold]{result.chunks}[/bold]  请求: {result.requested}  "
        f"已解析: [green]{result.resolved}[/green]  已更新: [green]{result.updated}[/green]  "
        f"仍待处理: [yellow]{result.pending}[/yellow]  失败批次: [red]{result.errored_chunks}[/red]"
    )
    if stats:
        console.print(render_completion(stats))
