# lingua_sync/cli/main.py
"""lingua-sync CLI 的主入口点。"""

from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console

import lingua_sync
from lingua_sync.cli.add import add, translate
from lingua_sync.cli.db import db_app
from lingua_sync.cli.pull import pull
from lingua_sync.cli.push import push
from lingua_sync.cli.state import State
from lingua_sync.cli.status import job, status
from lingua_sync.cli.sync import sync
from lingua_sync.config import LinguaSyncConfig
from lingua_sync.logging_config import setup_logging

# 创建主 Typer 应用
app = typer.Typer(
    name="lingua-sync",
    help="🌐 lingua-sync: 在本地字符串存储与远端翻译服务之间同步译文。",
    add_completion=False,
    no_args_is_help=True,
)

# 注册子命令/子应用
app.command("push")(push)
app.command("pull")(pull)
app.command("sync")(sync)
app.command("status")(status)
app.command("job")(job)
app.command("add")(add)
app.command("translate")(translate)
app.add_typer(db_app, name="db")

console = Console()


def version_callback(value: bool) -> None:
    """处理 --version 选项的回调函数。"""
    if value:
        console.print(f"lingua-sync [bold cyan]v{lingua_sync.__version__}[/bold cyan]")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="显示版本信息并退出。",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """主回调函数，在任何子命令执行前加载配置并配置日志。"""
    try:
        config = LinguaSyncConfig()
        setup_logging(log_level=config.logging.level, log_format=config.logging.format)
        ctx.obj = State(config=config)
    except ValidationError as e:
        console.print("[bold red]❌ 启动失败：无法加载配置。[/bold red]")
        console.print(f"[dim]{e}[/dim]")
        raise typer.Exit(code=1) from e


if __name__ == "__main__":
    app()
