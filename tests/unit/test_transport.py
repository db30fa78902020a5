# tests/unit/test_transport.py
"""针对 `lingua_sync.transport` 的单元测试。"""

import pytest
from pydantic import SecretStr

from lingua_sync.client import LinguaClient
from lingua_sync.config import LinguaSyncConfig
from lingua_sync.core.exceptions import ConfigurationError
from lingua_sync.core.types import TransportKind
from lingua_sync.transport import (
    HttpTransport,
    InProcessTransport,
    create_transport,
    default_headers,
)
from tests.helpers.fakes import FakeLinguaServer


def test_default_headers_without_api_key() -> None:
    headers = default_headers(LinguaSyncConfig())
    assert headers == {"Accept": "application/json"}


def test_default_headers_with_api_key() -> None:
    headers = default_headers(LinguaSyncConfig(api_key=SecretStr("s3cret")))
    assert headers["X-Api-Key"] == "s3cret"
    assert headers["Authorization"] == "Bearer s3cret"


@pytest.mark.asyncio
async def test_create_transport_defaults_to_http() -> None:
    transport = create_transport(LinguaSyncConfig(base_url="https://lingua.test/"))
    try:
        assert type(transport) is HttpTransport
        assert transport._client.base_url.host == "lingua.test"
    finally:
        await transport.aclose()


def test_in_process_transport_requires_app() -> None:
    config = LinguaSyncConfig(transport=TransportKind.IN_PROCESS)
    with pytest.raises(ConfigurationError):
        create_transport(config)


@pytest.mark.asyncio
async def test_in_process_transport_dispatches_to_asgi_app() -> None:
    """同进程模式下请求直接交给 ASGI 应用，不经过网络。"""
    server = FakeLinguaServer(envelope="response")
    server.translate("es", "k1", "hola")
    config = LinguaSyncConfig(
        base_url="https://lingua.test", transport=TransportKind.IN_PROCESS
    )
    transport = create_transport(config, app=server)
    assert isinstance(transport, InProcessTransport)

    client = LinguaClient(transport)
    try:
        result = await client.pull_by_keys(["k1", "k2"], locale="es")
    finally:
        await client.close()

    assert result == {"k1": "hola"}
    (call,) = server.calls("/babel/pull")
    assert call.params == {"locale": "es"}
    assert call.json == {"hashes": ["k1", "k2"], "keys": ["k1", "k2"]}
