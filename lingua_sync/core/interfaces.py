# lingua_sync/core/interfaces.py
"""
定义同步引擎与其外部协作者之间的接口协议。

引擎本身不关心具体的 ORM 或 HTTP 实现，只依赖这里列出的查询形状与调用契约。
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from lingua_sync.core.types import (
        LocaleCompletion,
        PendingRow,
        SourceString,
    )


class TransportResponse(Protocol):
    """传输层返回的最小响应视图。"""

    status_code: int
    content: bytes


class Transport(Protocol):
    """与远端翻译服务通信的能力。实现在构造时一次性选定。"""

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        json: Any = None,
    ) -> TransportResponse:
        """发送一次请求。网络失败或非 2xx 状态必须抛出 TransportError。"""
        ...

    async def aclose(self) -> None:
        """释放底层连接。"""
        ...


class PendingRowSource(Protocol):
    """查询形状 (a)：读取 text 为空的待处理行。"""

    async def fetch_pending(
        self,
        targets: list[str] | None = None,
        engine: str | None = None,
        limit: int | None = None,
        include_translated: bool = False,
    ) -> list[PendingRow]:
        ...


class BulkUpdater(Protocol):
    """查询形状 (b)：不加载实体，直接按键批量更新。"""

    async def mark_queued(self, keys: list[str], target_locale: str) -> int:
        ...

    async def apply_translations(
        self,
        locale: str,
        translations: Mapping[str, str],
        engine: str | None = None,
        force: bool = False,
    ) -> int:
        ...


class StringStore(PendingRowSource, BulkUpdater, Protocol):
    """本地字符串存储的完整协议。"""

    async def connect(self) -> None:
        ...

    async def close(self) -> None:
        ...

    async def register_source(
        self,
        text: str,
        source_locale: str,
        target_locales: list[str],
        engine: str,
    ) -> str:
        """幂等地注册源字符串并为每个目标语言创建存根，返回源字符串的 code。"""
        ...

    async def iter_sources(self, limit: int | None = None) -> list[SourceString]:
        ...

    async def completion(
        self, targets: list[str] | None = None
    ) -> dict[str, LocaleCompletion]:
        """查询形状 (c)：按语言聚合 COUNT(*) 与已翻译数量。"""
        ...

    async def distinct_locales(self) -> list[str]:
        ...
