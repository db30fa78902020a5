# lingua_sync/config.py

from typing import Annotated, Any, Literal, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from lingua_sync.core.types import TransportKind
from lingua_sync.utils import parse_targets, validate_lang_codes

DEFAULT_BASE_URL = "https://translation-server.survos.com"
# 本地 .wip 开发域名默认经由此代理访问
WIP_DEV_PROXY = "http://127.0.0.1:7080"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: Literal["json", "console"] = "console"


class SyncDefaults(BaseModel):
    """push / pull / 轮询的默认参数。"""

    batch_size: int = Field(default=200, gt=0)
    pull_batch_size: int = Field(default=500, gt=0)
    poll_interval: float = Field(
        default=0, ge=0, description="两次 pull 之间的等待间隔（秒），0 表示只拉取一次"
    )
    max_polls: int = Field(default=20, gt=0)
    stop_threshold: float = Field(default=100.0, ge=0, le=100)


class LinguaSyncConfig(BaseSettings):
    """
    进程启动时构造一次的不可变配置，并显式传入每个组件的构造函数。
    """

    model_config = SettingsConfigDict(
        env_prefix="LS_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        frozen=True,
    )

    base_url: str = DEFAULT_BASE_URL
    api_key: Optional[SecretStr] = None
    timeout: float = Field(default=10.0, gt=0)
    proxy: Optional[str] = None
    # in_process 只用于嵌入调用（需传入 ASGI 应用），CLI 不支持
    transport: TransportKind = TransportKind.HTTP

    database_url: str = "sqlite+aiosqlite:///lingua.db"
    create_schema: bool = True

    target_locales: Annotated[list[str], NoDecode] = Field(default_factory=list)
    stub_engine: str = "babel"

    sync: SyncDefaults = Field(default_factory=SyncDefaults)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v:
            raise ValueError("base_url 不能为空")
        return v

    @field_validator("target_locales", mode="before")
    @classmethod
    def split_target_locales(cls, v: Any) -> Any:
        if v is None or isinstance(v, (str, list, tuple)):
            return parse_targets(v)
        return v

    @field_validator("target_locales")
    @classmethod
    def validate_target_locales(cls, v: list[str]) -> list[str]:
        validate_lang_codes(v)
        return v

    @property
    def effective_proxy(self) -> Optional[str]:
        """显式配置的代理优先；否则 .wip 主机使用本地开发代理。"""
        if self.proxy:
            return self.proxy
        host = urlparse(self.base_url).hostname or ""
        if host.endswith(".wip"):
            return WIP_DEV_PROXY
        return None
