# tests/integration/test_sync_e2e.py
"""
端到端测试：SQLite 存储 + 进程内 ASGI 传输 + 同步协调器。

模拟远端在两次轮询之间逐步完成翻译的过程。
"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy import select

from lingua_sync.client import LinguaClient
from lingua_sync.config import LinguaSyncConfig
from lingua_sync.coordinator import SyncOptions, SyncOrchestrator
from lingua_sync.core.types import SyncState, TranslationStatus, TransportKind
from lingua_sync.db.schema import LsTranslation
from lingua_sync.persistence import SQLiteStringStore
from lingua_sync.transport import create_transport
from tests.helpers.fakes import FakeLinguaServer

TEXTS = ["Save", "Cancel", "Delete", "Open", "Close"]


@pytest.fixture
def asgi_server() -> FakeLinguaServer:
    return FakeLinguaServer(envelope="response")


@pytest_asyncio.fixture
async def in_process_client(
    test_config: LinguaSyncConfig, asgi_server: FakeLinguaServer
) -> AsyncGenerator[LinguaClient, None]:
    config = test_config.model_copy(update={"transport": TransportKind.IN_PROCESS})
    client = LinguaClient(create_transport(config, app=asgi_server))
    yield client
    await client.close()


@pytest.mark.asyncio
async def test_full_sync_converges_over_polls(
    test_config: LinguaSyncConfig,
    sqlite_store: SQLiteStringStore,
    asgi_server: FakeLinguaServer,
    in_process_client: LinguaClient,
) -> None:
    keys = [
        await sqlite_store.register_source(text, "en", ["es", "fr"], "babel")
        for text in TEXTS
    ]
    config = test_config.model_copy(
        update={
            "sync": test_config.sync.model_copy(
                update={"batch_size": 2, "pull_batch_size": 3, "poll_interval": 0.5}
            )
        }
    )
    sleeps: list[float] = []

    async def remote_progress(seconds: float) -> None:
        sleeps.append(seconds)
        # 第一次等待后完成西语，第二次等待后完成法语
        locale = "es" if len(sleeps) == 1 else "fr"
        for key, text in zip(keys, TEXTS):
            asgi_server.translate(locale, key, f"[{locale}] {text}")

    orchestrator = SyncOrchestrator(
        config, sqlite_store, in_process_client, sleep=remote_progress
    )
    report = await orchestrator.run(SyncOptions(targets=["es", "fr"]))

    assert report.state is SyncState.DONE
    assert report.converged is True
    assert report.attempts == 3
    assert sleeps == [0.5, 0.5]
    # 5 条文本 × 2 种语言，批次大小 2 → 每种语言 3 个批次
    assert report.push.batches == 6
    assert report.push.queued == 10
    assert report.updated == 10
    assert [p.updated for p in report.pulls] == [0, 5, 5]
    assert {loc: s.pct for loc, s in report.completion.items()} == {"es": 100.0, "fr": 100.0}

    # 每轮 pull 只请求仍待处理的键
    pull_sizes = [len(c.json["keys"]) for c in asgi_server.calls("/babel/pull")]
    assert sum(pull_sizes) == 10 + 10 + 5
    assert await sqlite_store.fetch_pending() == []


@pytest.mark.asyncio
async def test_single_shot_sync_marks_stubs_queued(
    test_config: LinguaSyncConfig,
    sqlite_store: SQLiteStringStore,
    asgi_server: FakeLinguaServer,
    in_process_client: LinguaClient,
) -> None:
    key = await sqlite_store.register_source("Save", "en", ["es"], "babel")

    report = await SyncOrchestrator(test_config, sqlite_store, in_process_client).run()

    assert report.state is SyncState.DONE
    assert report.converged is False
    assert report.attempts == 1
    (row,) = await sqlite_store.fetch_pending()
    assert row.key == key
    stats = await sqlite_store.completion()
    assert stats["es"].missing == 1

    # 远端稍后完成，再次运行即可收敛
    asgi_server.translate("es", key, "Guardar")
    again = await SyncOrchestrator(test_config, sqlite_store, in_process_client).run()
    assert again.converged is True
    assert again.updated == 1


@pytest.mark.asyncio
async def test_rerun_after_convergence_is_noop(
    test_config: LinguaSyncConfig,
    sqlite_store: SQLiteStringStore,
    asgi_server: FakeLinguaServer,
    in_process_client: LinguaClient,
) -> None:
    key = await sqlite_store.register_source("Save", "en", ["es"], "babel")
    asgi_server.translate("es", key, "Guardar")
    orchestrator = SyncOrchestrator(test_config, sqlite_store, in_process_client)
    await orchestrator.run()
    requests_before = len(asgi_server.requests)

    report = await orchestrator.run()

    assert report.converged is True
    assert report.push.batches == 0
    assert report.updated == 0
    # 没有待处理行时 push 与 pull 都不发请求
    assert len(asgi_server.requests) == requests_before


@pytest.mark.asyncio
async def test_status_lifecycle(
    test_config: LinguaSyncConfig,
    sqlite_store: SQLiteStringStore,
    asgi_server: FakeLinguaServer,
    in_process_client: LinguaClient,
) -> None:
    key = await sqlite_store.register_source("Save", "en", ["es"], "babel")
    orchestrator = SyncOrchestrator(test_config, sqlite_store, in_process_client)
    await orchestrator.run()

    async def status() -> str:
        async with sqlite_store._sessionmaker() as session:
            return (
                await session.execute(
                    select(LsTranslation.status).where(LsTranslation.source_key == key)
                )
            ).scalar_one()

    assert await status() == TranslationStatus.QUEUED.value
    asgi_server.translate("es", key, "Guardar")
    await orchestrator.run()
    assert await status() == TranslationStatus.TRANSLATED.value
