# lingua_sync/transport.py
"""
提供与远端翻译服务通信的两种传输实现：

- HttpTransport：通过网络访问远端服务（超时、代理、API Key 头）。
- InProcessTransport：当客户端与服务端处于同一进程时，通过 ASGI 直接发起子请求。

具体实现只在构造时选定一次（见 create_transport），调用方不按请求分支。
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

import httpx
import structlog

from lingua_sync.config import LinguaSyncConfig
from lingua_sync.core.exceptions import ConfigurationError, TransportError
from lingua_sync.core.types import TransportKind

logger = structlog.get_logger(__name__)


def default_headers(config: LinguaSyncConfig) -> dict[str, str]:
    """默认请求头，包含 API Key（如果配置了）。"""
    headers = {"Accept": "application/json"}
    if config.api_key is not None:
        token = config.api_key.get_secret_value()
        headers["X-Api-Key"] = token
        headers["Authorization"] = f"Bearer {token}"
    return headers


class HttpTransport:
    """基于 httpx.AsyncClient 的传输实现。"""

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    @classmethod
    def from_config(cls, config: LinguaSyncConfig) -> "HttpTransport":
        client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout),
            proxy=config.effective_proxy,
            headers=default_headers(config),
        )
        return cls(client)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, str]] = None,
        json: Any = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} 请求失败: {e}") from e

        if not response.is_success:
            logger.warning(
                "远端返回非 2xx 状态码",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            raise TransportError(
                f"{method} {path} 返回状态码 {response.status_code}",
                status_code=response.status_code,
            )
        return response

    async def aclose(self) -> None:
        await self._client.aclose()


class InProcessTransport(HttpTransport):
    """在同一进程内把请求直接交给 ASGI 应用处理，不经过网络。"""

    @classmethod
    def for_app(cls, app: Any, config: LinguaSyncConfig) -> "InProcessTransport":
        client = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url=config.base_url,
            headers=default_headers(config),
        )
        return cls(client)


def create_transport(config: LinguaSyncConfig, app: Any = None) -> HttpTransport:
    """根据配置一次性选定传输实现。"""
    if config.transport is TransportKind.IN_PROCESS:
        if app is None:
            raise ConfigurationError("in_process 传输需要提供一个 ASGI 应用。")
        logger.info("使用进程内传输", base_url=config.base_url)
        return InProcessTransport.for_app(app, config)
    logger.debug("使用 HTTP 传输", base_url=config.base_url, proxy=config.effective_proxy)
    return HttpTransport.from_config(config)
