# tests/unit/test_config.py
"""针对 `lingua_sync.config` 的单元测试。"""

from pathlib import Path

import pytest
from dotenv import dotenv_values
from pydantic import ValidationError

from lingua_sync.config import DEFAULT_BASE_URL, WIP_DEV_PROXY, LinguaSyncConfig
from lingua_sync.core.types import TransportKind


def test_defaults() -> None:
    config = LinguaSyncConfig()
    assert config.base_url == DEFAULT_BASE_URL
    assert config.api_key is None
    assert config.transport is TransportKind.HTTP
    assert config.target_locales == []
    assert config.sync.batch_size == 200
    assert config.sync.poll_interval == 0
    assert config.sync.stop_threshold == 100
    assert config.effective_proxy is None


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LS_BASE_URL", "https://lingua.example/")
    monkeypatch.setenv("LS_API_KEY", "abc")
    monkeypatch.setenv("LS_TARGET_LOCALES", "es, fr de,es")
    monkeypatch.setenv("LS_SYNC__BATCH_SIZE", "50")
    monkeypatch.setenv("LS_SYNC__POLL_INTERVAL", "2.5")
    monkeypatch.setenv("LS_LOGGING__FORMAT", "json")

    config = LinguaSyncConfig()

    assert config.base_url == "https://lingua.example"
    assert config.api_key is not None
    assert config.api_key.get_secret_value() == "abc"
    assert config.target_locales == ["es", "fr", "de"]
    assert config.sync.batch_size == 50
    assert config.sync.poll_interval == 2.5
    assert config.logging.format == "json"


def test_reads_dotenv_file(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "LS_STUB_ENGINE=libre\nLS_SYNC__PULL_BATCH_SIZE=75\n", encoding="utf-8"
    )
    expected = dotenv_values(env_file)

    config = LinguaSyncConfig()

    assert config.stub_engine == expected["LS_STUB_ENGINE"]
    assert str(config.sync.pull_batch_size) == expected["LS_SYNC__PULL_BATCH_SIZE"]


def test_config_is_frozen() -> None:
    config = LinguaSyncConfig()
    with pytest.raises(ValidationError):
        config.base_url = "https://other.test"  # type: ignore[misc]


def test_invalid_target_locale_is_rejected() -> None:
    with pytest.raises(ValidationError):
        LinguaSyncConfig(target_locales=["es", "german"])


@pytest.mark.parametrize(
    "field, value",
    [("batch_size", 0), ("poll_interval", -1), ("stop_threshold", 101), ("max_polls", 0)],
)
def test_sync_defaults_are_validated(field: str, value: float) -> None:
    with pytest.raises(ValidationError):
        LinguaSyncConfig(sync={field: value})


def test_wip_host_uses_dev_proxy() -> None:
    config = LinguaSyncConfig(base_url="https://translation-server.wip")
    assert config.effective_proxy == WIP_DEV_PROXY


def test_explicit_proxy_wins() -> None:
    config = LinguaSyncConfig(
        base_url="https://translation-server.wip", proxy="http://proxy:3128"
    )
    assert config.effective_proxy == "http://proxy:3128"


def test_empty_base_url_is_rejected() -> None:
    with pytest.raises(ValidationError):
        LinguaSyncConfig(base_url=" / ")
