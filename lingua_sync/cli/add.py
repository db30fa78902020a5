# lingua_sync/cli/add.py
"""注册源字符串与单条即时翻译的 CLI 命令。"""

from __future__ import annotations

from typing import Annotated, Optional

import typer

from lingua_sync.cli.state import State
from lingua_sync.cli.utils import console, open_services, run_command
from lingua_sync.config import LinguaSyncConfig
from lingua_sync.core.types import TranslationItem
from lingua_sync.utils import parse_targets, validate_lang_codes


async def _add(
    config: LinguaSyncConfig, text: str, source: str, targets: list[str]
) -> str:
    async with open_services(config, need_client=False) as (store, _):
        return await store.register_source(text, source, targets, config.stub_engine)


def add(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="要注册的源字符串。")],
    source: Annotated[str, typer.Option("--source", "-s", help="源语言代码。")] = "en",
    targets: Annotated[
        Optional[list[str]], typer.Option("--target", "-t", help="一个或多个目标语言代码。")
    ] = None,
) -> None:
    """注册一个源字符串，并为每个目标语言创建待翻译的存根。"""
    state: State = ctx.obj
    target_list = parse_targets(targets) or list(state.config.target_locales)
    if not target_list:
        console.print("[bold red]❌ 至少需要一个目标语言（--target 或 LS_TARGET_LOCALES）。[/bold red]")
        raise typer.Exit(code=1)
    try:
        validate_lang_codes([source])
        validate_lang_codes(target_list)
    except ValueError as e:
        console.print(f"[bold red]❌ 语言代码错误: {e}[/bold red]")
        raise typer.Exit(code=1) from e

    code = run_command(_add(state.config, text, source, target_list))
    console.print(f"[bold green]✅ 已注册[/bold green] [cyan]{code}[/cyan] → {', '.join(target_list)}")


async def _translate(
    config: LinguaSyncConfig,
    text: str,
    target: str,
    source: Optional[str],
    engine: Optional[str],
    lookup_only: bool,
) -> Optional[TranslationItem]:
    async with open_services(config, need_client=True) as (_, client):
        assert client is not None
        return await client.translate_now(
            text, target, source=source, engine=engine, lookup_only=lookup_only
        )


def translate(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="要翻译的文本。")],
    to: Annotated[str, typer.Option("--to", help="目标语言代码。")],
    source: Annotated[
        Optional[str], typer.Option("--from", help="源语言代码（省略时由服务端检测）。")
    ] = None,
    engine: Annotated[Optional[str], typer.Option("--engine", help="翻译引擎。")] = None,
    lookup_only: Annotated[
        bool, typer.Option("--lookup-only", help="只查找服务端已有的字符串，不新建。")
    ] = False,
) -> None:
    """向远端同步请求一条翻译并打印结果。"""
    state: State = ctx.obj
    try:
        validate_lang_codes([to] + ([source] if source else []))
    except ValueError as e:
        console.print(f"[bold red]❌ 语言代码错误: {e}[/bold red]")
        raise typer.Exit(code=1) from e

    item = run_command(_translate(state.config, text, to, source, engine, lookup_only))
    if item is None or not item.text:
        console.print(f"[yellow]⚠️ 服务端没有返回 {to} 的译文。[/yellow]")
        raise typer.Exit(code=1)
    console.print(f"[cyan]{item.key}[/cyan] [{item.source} → {item.target or to}] {item.text}")
    if item.cached:
        console.print("[dim](来自缓存)[/dim]")
