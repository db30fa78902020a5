# lingua_sync/cli/status.py
"""查询本地完成度与远端任务状态的 CLI 命令。"""

from __future__ import annotations

import json
from typing import Annotated, Any, Optional

import typer
from rich.json import JSON
from rich.panel import Panel

from lingua_sync.cli.state import State
from lingua_sync.cli.utils import console, open_services, render_completion, run_command
from lingua_sync.config import LinguaSyncConfig
from lingua_sync.core.types import JobStatus, LocaleCompletion
from lingua_sync.utils import parse_targets


async def _status(
    config: LinguaSyncConfig, targets: list[str]
) -> dict[str, LocaleCompletion]:
    async with open_services(config, need_client=False) as (store, _):
        return await store.completion(targets or None)


def status(
    ctx: typer.Context,
    targets: Annotated[
        Optional[str], typer.Option("--targets", "-t", help="只显示这些目标语言。")
    ] = None,
) -> None:
    """显示每个目标语言在本地存储中的翻译完成度。"""
    state: State = ctx.obj
    stats = run_command(_status(state.config, parse_targets(targets)))
    if not stats:
        console.print("[yellow]⚠️ 本地存储中没有任何翻译存根。[/yellow]")
        return
    console.print(render_completion(stats))


async def _job(config: LinguaSyncConfig, job_id: str) -> JobStatus:
    async with open_services(config, need_client=True) as (_, client):
        assert client is not None
        return await client.get_job_status(job_id)


def job(
    ctx: typer.Context,
    job_id: Annotated[str, typer.Argument(help="push 返回的任务 ID。")],
) -> None:
    """查询远端异步任务的状态。"""
    state: State = ctx.obj
    result = run_command(_job(state.config, job_id))
    payload: dict[str, Any] = result.model_dump(exclude={"items"})
    payload["items"] = len(result.items)
    border = {"completed": "green", "failed": "red"}.get(result.state, "cyan")
    console.print(
        Panel(
            JSON(json.dumps(payload, ensure_ascii=False, indent=2)),
            title=f"任务 [bold]{result.job_id}[/bold]",
            border_style=border,
            expand=False,
        )
    )
