# lingua_sync/handoff.py
"""同步收敛后调用的下游命令（例如搜索索引的填充任务）。"""

from __future__ import annotations

import asyncio
import shlex
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


def build_handoff_argv(command: str, threshold: Optional[int] = None) -> list[str]:
    """把命令行字符串拆分为参数列表，并按需追加阈值参数。"""
    argv = shlex.split(command)
    if not argv:
        raise ValueError("下游命令不能为空")
    if threshold is not None:
        argv.append(f"--translation-threshold={int(threshold)}")
    return argv


async def run_handoff(
    command: str, threshold: Optional[int] = None, cwd: Optional[str] = None
) -> int:
    """运行下游命令并返回其退出码。无法启动视为失败（退出码 127）。"""
    argv = build_handoff_argv(command, threshold)
    logger.info("运行下游命令", argv=argv)
    try:
        process = await asyncio.create_subprocess_exec(*argv, cwd=cwd)
    except OSError as e:
        logger.error("下游命令无法启动", argv=argv, error=str(e))
        return 127
    code = await process.wait()
    if code != 0:
        logger.error("下游命令执行失败", argv=argv, exit_code=code)
    else:
        logger.info("下游命令执行成功", argv=argv)
    return code
