# lingua_sync/persistence/__init__.py
"""本模块作为持久化层的公共入口，导出核心组件。"""

from importlib.util import find_spec

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine

from lingua_sync.config import LinguaSyncConfig
from lingua_sync.core.exceptions import ConfigurationError, MissingCollaboratorError
from lingua_sync.core.interfaces import StringStore

from .base import BaseStringStore
from .postgres import PostgresStringStore
from .sqlite import SQLiteStringStore


def _require_driver(module: str, extra_hint: str) -> None:
    if find_spec(module) is None:
        raise MissingCollaboratorError(
            f"缺少数据库驱动 '{module}'，请安装: {extra_hint}"
        )


def create_store(config: LinguaSyncConfig) -> StringStore:
    """
    根据配置创建并返回一个具体的字符串存储实例。
    这是实例化持久化层的唯一入口。
    """
    db_url = config.database_url

    if db_url.startswith("sqlite"):
        _require_driver("aiosqlite", 'pip install "lingua-sync"')
        db_path = make_url(db_url).database or ":memory:"
        engine = create_async_engine(db_url)
        return SQLiteStringStore(
            engine, db_path=db_path, create_schema=config.create_schema
        )

    if db_url.startswith("postgresql"):
        _require_driver("asyncpg", 'pip install "lingua-sync[postgres]"')
        engine = create_async_engine(db_url, pool_size=10, max_overflow=5)
        return PostgresStringStore(engine, create_schema=config.create_schema)

    raise ConfigurationError(f"不支持的数据库类型或驱动: '{db_url}'")


__all__ = [
    "BaseStringStore",
    "PostgresStringStore",
    "SQLiteStringStore",
    "StringStore",
    "create_store",
]
