# tests/conftest.py
"""项目全局共享的测试 Fixtures。"""

import os
from collections.abc import AsyncGenerator, Generator
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from pytest_mock import MockerFixture
from rich.console import Console

from lingua_sync.client import LinguaClient
from lingua_sync.config import LinguaSyncConfig
from lingua_sync.persistence import SQLiteStringStore, create_store
from tests.helpers.fakes import FakeLinguaServer, InMemoryStringStore


@pytest.fixture(scope="session", autouse=True)
def disable_rich_colors_for_tests(
    session_mocker: MockerFixture,
) -> Generator[None, None, None]:
    """全局禁用 rich 库的颜色输出，以确保测试结果的确定性。"""
    original_init = Console.__init__

    def new_init(self: Console, *args: Any, **kwargs: Any) -> None:
        kwargs["force_terminal"] = False
        kwargs["color_system"] = None
        original_init(self, *args, **kwargs)

    session_mocker.patch("rich.console.Console.__init__", new=new_init)
    yield


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """清除外部 LS_* 环境变量，并在临时目录中运行，避免读到真实的 .env。"""
    for name in list(os.environ):
        if name.startswith("LS_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def test_config(tmp_path: Path) -> LinguaSyncConfig:
    """指向临时 SQLite 文件的配置。"""
    return LinguaSyncConfig(
        base_url="https://lingua.test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'lingua.db'}",
        target_locales=["es", "fr"],
    )


@pytest.fixture
def fake_server() -> FakeLinguaServer:
    return FakeLinguaServer()


@pytest.fixture
def client(fake_server: FakeLinguaServer) -> LinguaClient:
    return LinguaClient(fake_server)


@pytest.fixture
def memory_store() -> InMemoryStringStore:
    return InMemoryStringStore()


@pytest_asyncio.fixture
async def sqlite_store(
    test_config: LinguaSyncConfig,
) -> AsyncGenerator[SQLiteStringStore, None]:
    """提供一个已建表的临时 SQLite 存储。"""
    store = create_store(test_config)
    assert isinstance(store, SQLiteStringStore)
    await store.connect()
    yield store
    await store.close()
