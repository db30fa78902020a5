# lingua_sync/logging_config.py
"""
集中配置项目的日志系统：structlog 负责结构化，标准 logging 作为输出端点。

- console：开发环境。info/debug 渲染为单行，warning 及以上渲染为 Rich 面板，
  便于在长时间的轮询输出中一眼找到问题批次。
- json   ：生产环境的机器可读输出（ISO-8601 UTC 时间戳）。
"""

import logging
from collections.abc import MutableMapping
from typing import Any, Literal

import structlog
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from structlog.typing import Processor

APP_LOGGER_NAME = "lingua_sync"


class ConsoleRenderer:
    """
    structlog 的最终处理器，把事件字典渲染为字符串。

    Args:
        kv_truncate_at: 键值对中值的最大显示长度，超长会截断。
        show_timestamp: 是否输出时间戳。
        show_logger_name: 是否输出记录器名称。
    """

    LEVEL_STYLES = {
        "debug": ("blue", "DEBUG"),
        "info": ("green", "INFO"),
        "warning": ("yellow", "WARN"),
        "error": ("bold red", "ERROR"),
        "critical": ("bold magenta", "CRIT"),
    }
    PANEL_LEVELS = frozenset({"warning", "error", "critical"})

    def __init__(
        self,
        kv_truncate_at: int = 120,
        show_timestamp: bool = True,
        show_logger_name: bool = True,
    ):
        self._console = Console()
        self._kv_truncate_at = kv_truncate_at
        self._show_timestamp = show_timestamp
        self._show_logger_name = show_logger_name

    def __call__(
        self, logger: Any, name: str, event_dict: MutableMapping[str, Any]
    ) -> str:
        event = str(event_dict.pop("event", "")).strip()
        if not event:
            return ""
        timestamp = str(event_dict.pop("timestamp", ""))
        level = str(event_dict.pop("level", "info")).lower()
        logger_name = str(event_dict.pop("logger", ""))
        exception = event_dict.pop("exception", None)

        if level in self.PANEL_LEVELS or exception:
            return self._render_panel(
                level, logger_name, timestamp, event, event_dict, exception
            )
        return self._render_line(level, logger_name, timestamp, event, event_dict)

    def _format_value(self, value: Any) -> str:
        text = value if isinstance(value, str) else repr(value)
        if len(text) > self._kv_truncate_at:
            text = text[: self._kv_truncate_at - 1] + "…"
        return text

    def _capture(self, renderable: Any) -> str:
        with self._console.capture() as capture:
            self._console.print(renderable)
        return capture.get().rstrip()

    def _render_line(
        self,
        level: str,
        logger_name: str,
        timestamp: str,
        event: str,
        kv: MutableMapping[str, Any],
    ) -> str:
        style, label = self.LEVEL_STYLES.get(level, ("default", level.upper()))
        line = Text()
        if self._show_timestamp and timestamp:
            line.append(f"{timestamp} ", style="dim")
        line.append(f"{label:<5} ", style=style)
        line.append(event)
        for key, value in sorted(kv.items()):
            line.append(f" {key}=", style="dim")
            line.append(self._format_value(value), style="bright_white")
        if self._show_logger_name and logger_name:
            line.append(f" ({logger_name})", style="cyan dim")
        return self._capture(line)

    def _render_panel(
        self,
        level: str,
        logger_name: str,
        timestamp: str,
        event: str,
        kv: MutableMapping[str, Any],
        exception: Any,
    ) -> str:
        style, label = self.LEVEL_STYLES.get(level, ("default", level.upper()))
        title = f"[{style}]{label}[/]"
        if self._show_logger_name and logger_name:
            title += f" [cyan dim]({logger_name})[/]"

        body: list[Any] = [Text(event)]
        if kv:
            table = Table(show_header=False, show_edge=False, box=None, padding=(0, 1))
            table.add_column(style="dim", justify="right")
            table.add_column(style="bright_white", overflow="fold")
            for key, value in sorted(kv.items()):
                table.add_row(f"{key} :", self._format_value(value))
            body.append(table)
        if exception:
            body.append(Text(str(exception), style="red"))

        subtitle = (
            Text(timestamp, style="dim") if self._show_timestamp and timestamp else None
        )
        return self._capture(
            Panel(
                Group(*body),
                title=Text.from_markup(title),
                title_align="left",
                subtitle=subtitle,
                subtitle_align="right",
                border_style=style,
                expand=False,
            )
        )


def setup_logging(
    log_level: str = "INFO",
    log_format: Literal["json", "console"] = "console",
    show_timestamp: bool = True,
    show_logger_name: bool = True,
) -> None:
    """
    配置全局的 structlog 日志系统。这是整个应用的日志配置入口。

    Args:
        log_level: 本应用记录器的最低日志级别。
        log_format: 'console' 用于开发环境，'json' 用于生产环境。
        show_timestamp: console 模式下是否显示时间戳。
        show_logger_name: console 模式下是否显示记录器名称。
    """
    json_mode = log_format == "json"
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(
            fmt="iso" if json_mode else "%Y-%m-%d %H:%M:%S", utc=json_mode
        ),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_mode:
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        processors.append(
            ConsoleRenderer(
                show_timestamp=show_timestamp, show_logger_name=show_logger_name
            )
        )

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    class PassthroughFormatter(logging.Formatter):
        """直接传递 structlog 已经渲染好的字符串。"""

        def format(self, record: logging.LogRecord) -> str:
            return str(record.getMessage())

    handler = logging.StreamHandler()
    handler.setFormatter(PassthroughFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    # 根记录器级别较高，避免 httpx / sqlalchemy 的噪音
    root_logger.setLevel(logging.WARNING)

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(log_level.upper())
    app_logger.propagate = True

    structlog.get_logger("lingua_sync.logging_config").debug(
        "日志系统已配置完成。", log_format=log_format, app_log_level=log_level.upper()
    )
