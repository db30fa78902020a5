# lingua_sync/cli/db.py
"""处理数据库相关操作的 CLI 命令。"""

from __future__ import annotations

import structlog
import typer

from lingua_sync.cli.state import State
from lingua_sync.cli.utils import console, open_services, run_command
from lingua_sync.config import LinguaSyncConfig

logger = structlog.get_logger(__name__)
db_app = typer.Typer(help="数据库管理命令")


async def _init(config: LinguaSyncConfig) -> None:
    async with open_services(config, need_client=False):
        pass


@db_app.command("init")
def db_init(ctx: typer.Context) -> None:
    """
    创建本地字符串存储所需的数据表。

    已存在的表保持不变，因此可以重复执行。
    """
    state: State = ctx.obj
    config = state.config.model_copy(update={"create_schema": True})
    console.print(f"数据库: [cyan]{config.database_url}[/cyan]")
    run_command(_init(config))
    console.print("[bold green]✅ 数据表已就绪！[/bold green]")
